from __future__ import annotations

import bisect
from typing import Iterator
from typing import NamedTuple

from scrollmargin.horizontal_scrolling import line_x
from scrollmargin.horizontal_scrolling import offsets
from scrollmargin.horizontal_scrolling import row_count
from scrollmargin.horizontal_scrolling import row_of
from scrollmargin.horizontal_scrolling import scrolled_line
from scrollmargin.horizontal_scrolling import wrapped_rows
from scrollmargin.layout import Dim
from scrollmargin.lines import Counting
from scrollmargin.lines import Pos
from scrollmargin.options import Options
from scrollmargin.trigger import ScrollResult
from scrollmargin.viewport import ViewportState


class Buf:
    def __init__(self, lines: list[str], options: Options) -> None:
        self._lines = lines
        self.options = options
        self.file_y = self.y = self.x = 0
        # the first line on screen can be partially scrolled off when wrapping
        self.file_x = 0

        self._positions: list[tuple[int, ...] | None] = []
        self._positions_tab_size = options.tab_size

    # read only interface

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'{self._lines!r}, x={self.x}, y={self.y}, file_y={self.file_y}'
            f')'
        )

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __getitem__(self, idx: int) -> str:
        return self._lines[idx]

    def __iter__(self) -> Iterator[str]:
        yield from self._lines

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def displayable_count(self) -> int:
        return len(self._lines) - self.file_y

    @property
    def file_y(self) -> int:
        return self._file_y

    @file_y.setter
    def file_y(self, file_y: int) -> None:
        self._file_y = file_y
        self.file_x = 0

    @property
    def point(self) -> Pos:
        return Pos(self.y, self.x)

    @property
    def start(self) -> Pos:
        return Pos(self.file_y, self.file_x)

    # positions

    def line_positions(self, idx: int) -> tuple[int, ...]:
        if self._positions_tab_size != self.options.tab_size:
            self._positions_tab_size = self.options.tab_size
            self._positions = []
        self._positions.extend([None] * (1 + idx - len(self._positions)))
        value = self._positions[idx]
        if value is None:
            value = offsets(self._lines[idx], self.options.tab_size)
            self._positions[idx] = value
        return value

    def _wrapping(self, counting: Counting) -> bool:
        return counting is Counting.VISUAL and self.options.wrap

    def _rows(self, idx: int, dim: Dim) -> int:
        return row_count(self.line_positions(idx), dim.width)

    def _row(self, pos: Pos, dim: Dim) -> int:
        return row_of(self.line_positions(pos.y), pos.x, dim.width)

    def _row_start(self, idx: int, row: int, dim: Dim) -> int:
        x = bisect.bisect_left(self.line_positions(idx), row * dim.width)
        return min(x, len(self._lines[idx]))

    def _last_row_start(self, idx: int, dim: Dim) -> int:
        if not self.options.wrap:
            return 0
        else:
            return self._row_start(idx, self._rows(idx, dim) - 1, dim)

    def count_lines(
            self,
            start: Pos,
            end: Pos,
            counting: Counting,
            dim: Dim,
    ) -> int:
        if end < start:
            return 0
        elif not self._wrapping(counting):
            return end.y - start.y
        else:
            rows = sum(self._rows(idx, dim) for idx in range(start.y, end.y))
            return rows + self._row(end, dim) - self._row(start, dim)

    def line_start(self, pos: Pos, counting: Counting, dim: Dim) -> Pos:
        if not self._wrapping(counting):
            return Pos(pos.y, 0)
        else:
            return Pos(pos.y, self._row_start(pos.y, self._row(pos, dim), dim))

    def cursor_row(self, dim: Dim) -> int:
        return self.count_lines(
            self.start,
            self.line_start(self.point, Counting.VISUAL, dim),
            Counting.VISUAL,
            dim,
        )

    def cursor_position(self, dim: Dim) -> tuple[int, int]:
        col = self.line_positions(self.y)[self.x]
        if self.options.wrap:
            x = col - self._row(self.point, dim) * dim.width
        else:
            x = col - line_x(col, dim.width)
        return self.cursor_row(dim) + dim.y, x

    def fixup_position(self, dim: Dim) -> None:
        self.y = min(self.y, len(self._lines) - 1)
        self.x = min(self.x, len(self._lines[self.y]))
        self.scroll_screen_if_needed(dim)

    # rendered lines

    def rendered_line(self, idx: int, dim: Dim) -> str:
        x = self.line_positions(idx)[self.x] if idx == self.y else 0
        expanded = self._lines[idx].expandtabs(self.options.tab_size)
        return scrolled_line(expanded, x, dim.width)

    def rendered_rows(self, dim: Dim) -> list[str]:
        ret: list[str] = []
        for idx in range(self.file_y, len(self._lines)):
            if len(ret) >= dim.height:
                break
            elif self.options.wrap:
                expanded = self._lines[idx].expandtabs(self.options.tab_size)
                positions = offsets(expanded, self.options.tab_size)
                rows = wrapped_rows(expanded, positions, dim.width)
                if idx == self.file_y:
                    rows = rows[self._row(self.start, dim):]
                ret.extend(rows)
            else:
                ret.append(self.rendered_line(idx, dim))
        return ret[:dim.height]

    # movement

    def _cursor_row_x(self, dim: Dim) -> int:
        return self.line_start(self.point, Counting.VISUAL, dim).x

    def scroll_screen_if_needed(
            self,
            dim: Dim,
            *,
            center: bool = False,
    ) -> None:
        if not self.options.wrap:
            self.file_x = 0
        # if the `y` is not on screen, recenter or bring it just into view
        if self.file_y <= self.y < self.file_y + dim.height:
            if self.point < self.start:
                self.file_x = self._cursor_row_x(dim)
        elif center or self.options.jump_scroll:
            self.file_y = max(self.y - dim.height // 2, 0)
        elif self.y < self.file_y:
            self.file_y = self.y
            self.file_x = self._cursor_row_x(dim)
        else:
            self.file_y = self.y - dim.height + 1
        # wrapped lines above the cursor can still push it off the bottom
        while self.cursor_row(dim) >= dim.height:
            self.scroll_down(dim)

    # the jump and the native margin only apply while margin keeping is off

    def _scroll_amount(self, dim: Dim) -> int:
        # integer round up without banker's rounding (so 1/2 => 1 instead of 0)
        return int((dim.height + dim.y) / 2 + .5)

    def _native_margin(self, dim: Dim) -> int:
        return max(min(self.options.scroll_margin, (dim.height - 1) // 2), 0)

    def up(self, dim: Dim) -> None:
        if self.y > 0:
            self.y -= 1
            self.x = 0
            top = self.file_y + self._native_margin(dim)
            if self.options.jump_scroll and self.y < top:
                self.file_y = max(self.file_y - self._scroll_amount(dim), 0)
            self.scroll_screen_if_needed(dim)

    def down(self, dim: Dim) -> None:
        if self.y < len(self._lines) - 1:
            self.y += 1
            self.x = 0
            bottom = self.file_y + dim.height - self._native_margin(dim)
            if self.options.jump_scroll and self.y >= bottom:
                self.file_y += self._scroll_amount(dim)
            self.scroll_screen_if_needed(dim)

    # screen movement, one screen row at a time

    def scroll_up(self, dim: Dim) -> ScrollResult:
        row = self._row(self.start, dim)
        if row > 0:
            self.file_x = self._row_start(self.file_y, row - 1, dim)
        elif self.file_y == 0:
            return ScrollResult.BOUNDARY
        else:
            self.file_y -= 1
            self.file_x = self._last_row_start(self.file_y, dim)

        while self.cursor_row(dim) >= dim.height:
            row = self._row(self.point, dim) if self.options.wrap else 0
            if row > 0:
                self.x = self._row_start(self.y, row - 1, dim)
            else:
                self.y -= 1
                self.x = self._last_row_start(self.y, dim)
        return ScrollResult.OK

    def scroll_down(self, dim: Dim) -> ScrollResult:
        row = self._row(self.start, dim)
        if self.options.wrap and row + 1 < self._rows(self.file_y, dim):
            self.file_x = self._row_start(self.file_y, row + 1, dim)
        elif self.file_y >= len(self._lines) - 1:
            return ScrollResult.BOUNDARY
        else:
            self.file_y += 1

        if self.point < self.start:
            self.y, self.x = self.start
        return ScrollResult.OK


class BufView(NamedTuple):
    """a `Buf` as seen through one window"""
    buf: Buf
    dim: Dim

    @property
    def beginning(self) -> Pos:
        return Pos(0, 0)

    @property
    def end(self) -> Pos:
        last = len(self.buf) - 1
        return Pos(last, len(self.buf[last]))

    def viewport_state(self) -> ViewportState:
        # the status line below the file counts as this window's chrome
        return ViewportState(
            height=self.dim.height + 1,
            start=self.buf.start,
            point=self.buf.point,
            chrome_rows=1,
        )

    def count_lines(self, start: Pos, end: Pos, counting: Counting) -> int:
        return self.buf.count_lines(start, end, counting, self.dim)

    def line_start(self, pos: Pos, counting: Counting) -> Pos:
        return self.buf.line_start(pos, counting, self.dim)

    def scroll_toward_start(self) -> ScrollResult:
        return self.buf.scroll_up(self.dim)

    def scroll_toward_end(self) -> ScrollResult:
        return self.buf.scroll_down(self.dim)
