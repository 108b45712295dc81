from __future__ import annotations

import wcwidth as _wcwidth


def wcwidth(c: str) -> int:
    # control characters have no width of their own, curses draws them
    # with a caret so give them at least one column
    return max(_wcwidth.wcwidth(c), 1)


def offsets(s: str, tab_size: int) -> tuple[int, ...]:
    ret = [0]
    for c in s:
        if c == '\t':
            ret.append(ret[-1] + (tab_size - ret[-1] % tab_size))
        else:
            ret.append(ret[-1] + wcwidth(c))
    return tuple(ret)


def line_x(x: int, width: int) -> int:
    if x + 1 < width:
        return 0
    elif width == 1:
        return x
    else:
        margin = min(width - 3, 6)
        return (
            width - margin - 2 +
            (x + 1 - width) //
            (width - margin - 2) *
            (width - margin - 2)
        )


def scrolled_line(s: str, x: int, width: int) -> str:
    l_x = line_x(x, width)
    if l_x:
        s = f'«{s[l_x + 1:]}'
        if len(s) > width:
            return f'{s[:width - 1]}»'
        else:
            return s.ljust(width)
    elif len(s) > width:
        return f'{s[:width - 1]}»'
    else:
        return s.ljust(width)


def row_count(positions: tuple[int, ...], width: int) -> int:
    return max(-(-positions[-1] // width), 1)


def row_of(positions: tuple[int, ...], x: int, width: int) -> int:
    return min(positions[x] // width, row_count(positions, width) - 1)


def wrapped_rows(s: str, positions: tuple[int, ...], width: int) -> list[str]:
    """split `s` into screen rows, `positions` are its column offsets"""
    rows = [''] * row_count(positions, width)
    for c, col in zip(s, positions):
        rows[min(col // width, len(rows) - 1)] += c
    return [row.ljust(width) for row in rows]
