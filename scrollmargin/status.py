from __future__ import annotations

import curses

from scrollmargin.layout import Dim
from scrollmargin.prompt import PromptResult


class Status:
    """a message on the status row which goes away after a while

    with no message to show the row holds the margin settings instead.
    """

    TICKS = 25

    def __init__(self) -> None:
        self.message = ''
        self._ticks_left = -1

    def update(self, message: str) -> None:
        self.message = message
        self._ticks_left = self.TICKS

    def clear(self) -> None:
        self.message = ''

    def cancelled(self) -> PromptResult:
        self.update('cancelled')
        return PromptResult.CANCELLED

    def tick(self, dim: Dim) -> None:
        # a 1-tall window shares its only row, so messages go right away
        self._ticks_left -= 1 if dim.y > 0 else self.TICKS - 1
        if self._ticks_left < 0:
            self.clear()

    def _centered(self, width: int) -> tuple[int, str]:
        text = f' {self.message} '
        if len(text) > width:
            return 0, text.strip()
        else:
            return (width - len(text)) // 2, text

    def draw(
            self,
            stdscr: curses._CursesWindow,
            dim: Dim,
            mode_line: str = '',
    ) -> None:
        if dim.y == 0 and not self.message:
            return

        stdscr.insstr(dim.y, 0, ' ' * dim.width)
        if self.message:
            x, text = self._centered(dim.width)
            stdscr.insstr(dim.y, x, text, curses.A_REVERSE)
        elif mode_line and len(mode_line) < dim.width:
            x = dim.width - len(mode_line) - 1
            stdscr.insstr(dim.y, x, mode_line, curses.A_DIM)
