from __future__ import annotations

from typing import NamedTuple

from scrollmargin.lines import Counting
from scrollmargin.lines import LineCounter
from scrollmargin.lines import Pos


class ViewportState(NamedTuple):
    height: int
    start: Pos
    point: Pos
    chrome_rows: int = 1

    @property
    def text_rows(self) -> int:
        """rows left for context once the chrome and the cursor line are
        taken out
        """
        return self.height - (self.chrome_rows + 1)


def lines_above_cursor(
        state: ViewportState,
        counter: LineCounter,
        counting: Counting,
) -> int:
    line_start = counter.line_start(state.point, counting)
    return counter.count_lines(state.start, line_start, counting)


def lines_below_cursor(
        state: ViewportState,
        counter: LineCounter,
        counting: Counting,
) -> int:
    # near the end of the document the window end only tells us how much
    # content remains, not how many rows the window has
    above = lines_above_cursor(state, counter, counting)
    return max(state.text_rows - above, 0)


def lines_before_start(
        state: ViewportState,
        counter: LineCounter,
        counting: Counting,
) -> int:
    return counter.count_lines(counter.beginning, state.start, counting)
