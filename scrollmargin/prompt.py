from __future__ import annotations

import curses
import enum
from typing import TYPE_CHECKING

from scrollmargin.horizontal_scrolling import line_x
from scrollmargin.horizontal_scrolling import scrolled_line

if TYPE_CHECKING:
    from scrollmargin.screen import Screen  # XXX: circular

PromptResult = enum.Enum('PromptResult', 'CANCELLED')


def _label(prompt: str, width: int) -> str:
    """`prompt: ` shortened with an ellipsis so some input stays visible"""
    if not prompt or width < 7:
        return ''
    elif len(prompt) + 6 > width:
        return f'{prompt[:width - 7]}…: '
    else:
        return f'{prompt}: '


class Prompt:
    """reads a search pattern, a line number or a `:` command on the
    status row
    """

    def __init__(self, screen: Screen, prompt: str, text: str = '') -> None:
        self._screen = screen
        self._prompt = prompt
        self._text = text
        self._pos = len(text)

    def _render(self) -> None:
        dim = self._screen.layout.status
        label = _label(self._prompt, dim.width)
        width = dim.width - len(label)
        visible = scrolled_line(self._text, self._pos, width)
        self._screen.stdscr.insstr(
            dim.y, 0, f'{label}{visible}', curses.A_REVERSE,
        )
        cursor_x = len(label) + self._pos - line_x(self._pos, width)
        self._screen.stdscr.move(dim.y, cursor_x)

    def _insert(self, s: str) -> None:
        self._text = f'{self._text[:self._pos]}{s}{self._text[self._pos:]}'
        self._pos += len(s)

    def _forward(self) -> None:
        if self._pos < len(self._text):
            self._pos += 1

    def _backward(self) -> None:
        if self._pos > 0:
            self._pos -= 1

    def _to_start(self) -> None:
        self._pos = 0

    def _to_end(self) -> None:
        self._pos = len(self._text)

    def _erase_before(self) -> None:
        if self._pos > 0:
            self._backward()
            self._erase_at()

    def _erase_at(self) -> None:
        self._text = self._text[:self._pos] + self._text[self._pos + 1:]

    def _erase_after(self) -> None:
        self._text = self._text[:self._pos]

    def _erase_all(self) -> None:
        self._text, self._pos = '', 0

    def _resize(self) -> None:
        self._screen.resize()

    def _cancel(self) -> PromptResult:
        return self._screen.status.cancelled()

    def _accept(self) -> str:
        return self._text

    DISPATCH = {
        b'KEY_RIGHT': _forward,
        b'KEY_LEFT': _backward,
        b'KEY_HOME': _to_start,
        b'^A': _to_start,
        b'KEY_END': _to_end,
        b'^E': _to_end,
        b'KEY_BACKSPACE': _erase_before,
        b'KEY_DC': _erase_at,
        b'^K': _erase_after,
        b'^U': _erase_all,
        b'KEY_RESIZE': _resize,
        b'^M': _accept,
        b'^C': _cancel,
        b'^[': _cancel,
    }

    def run(self) -> PromptResult | str:
        while True:
            self._render()

            key = self._screen.get_char()
            if key.keyname == b'STRING':
                assert isinstance(key.wch, str), key.wch
                self._insert(key.wch)
            elif key.keyname in Prompt.DISPATCH:
                ret = Prompt.DISPATCH[key.keyname](self)
                if ret is not None:
                    return ret
