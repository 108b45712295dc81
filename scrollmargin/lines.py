from __future__ import annotations

import enum
from typing import NamedTuple
from typing import Protocol


class Pos(NamedTuple):
    y: int
    x: int = 0


class Counting(enum.Enum):
    LOGICAL = enum.auto()
    VISUAL = enum.auto()


class LineCounter(Protocol):
    """counts lines between two positions of a document

    `VISUAL` counting follows the rows as they are rendered (wrapping) and
    needs the display width of every character it crosses, so it costs
    more than `LOGICAL` counting on very long lines.
    """

    @property
    def beginning(self) -> Pos: ...

    @property
    def end(self) -> Pos: ...

    def count_lines(self, start: Pos, end: Pos, counting: Counting) -> int:
        """never negative: `end` before `start` counts as 0"""

    def line_start(self, pos: Pos, counting: Counting) -> Pos: ...
