from __future__ import annotations

from typing import NamedTuple


class Dim(NamedTuple):
    x: int
    y: int
    width: int
    height: int


class Layout(NamedTuple):
    header: Dim
    file: Dim
    status: Dim

    @classmethod
    def from_size(cls, lines: int, cols: int) -> Layout:
        file_y = 0
        file_height = lines

        if lines > 2:
            file_y += 1
            file_height -= 2
        elif lines > 1:
            file_height -= 1

        return cls(
            header=Dim(x=0, y=0, width=cols, height=1),
            file=Dim(x=0, y=file_y, width=cols, height=file_height),
            status=Dim(x=0, y=lines - 1, width=cols, height=1),
        )
