from __future__ import annotations

import enum
from typing import NamedTuple

from scrollmargin.lines import LineCounter
from scrollmargin.margin import effective_margin
from scrollmargin.margin import MarginConfig
from scrollmargin.viewport import lines_above_cursor
from scrollmargin.viewport import lines_before_start
from scrollmargin.viewport import lines_below_cursor
from scrollmargin.viewport import ViewportState


class Direction(enum.Enum):
    NONE = enum.auto()
    UP = enum.auto()  # toward the start of the document
    DOWN = enum.auto()  # toward the end of the document


class ScrollDecision(NamedTuple):
    direction: Direction
    lines: int


NO_SCROLL = ScrollDecision(Direction.NONE, 0)


def decide(
        upper: int,
        lower: int,
        desired: int,
        *,
        available_above: int | None = None,
) -> ScrollDecision:
    """scroll exactly the deficit, the upper margin wins when both are short

    `available_above` is how far the viewport can still move toward the
    start of the document, an upward correction never asks for more.
    """
    if upper < desired:
        lines = desired - upper
        if available_above is not None:
            lines = min(lines, available_above)
        if lines <= 0:
            return NO_SCROLL
        return ScrollDecision(Direction.UP, lines)
    elif lower < desired:
        return ScrollDecision(Direction.DOWN, desired - lower)
    else:
        return NO_SCROLL


def plan_scroll(
        state: ViewportState,
        counter: LineCounter,
        config: MarginConfig,
) -> ScrollDecision:
    counting = config.counting
    return decide(
        lines_above_cursor(state, counter, counting),
        lines_below_cursor(state, counter, counting),
        effective_margin(config, state.height, state.chrome_rows),
        available_above=lines_before_start(state, counter, counting),
    )
