from __future__ import annotations

import curses
import io
import os.path
from typing import Callable
from typing import IO
from typing import Match
from typing import NamedTuple

from identify.identify import tags_from_path

from scrollmargin.buf import Buf
from scrollmargin.buf import BufView
from scrollmargin.layout import Dim
from scrollmargin.options import Options
from scrollmargin.reg import Reg
from scrollmargin.status import Status


def get_lines(sio: IO[str]) -> tuple[list[str], bool]:
    lines = []
    endings = set()
    for line in sio:
        for ending in ('\r\n', '\n'):
            if line.endswith(ending):
                lines.append(line[:-1 * len(ending)])
                endings.add(ending)
                break
        else:
            lines.append(line)
    # always make sure we end in a newline
    lines.append('')
    return lines, len(endings) > 1


class OpenError(RuntimeError):
    pass


def _listing(dirname: str) -> list[str]:
    dirs, files = ['../'], []
    for entry in sorted(os.listdir(dirname)):
        if os.path.isdir(os.path.join(dirname, entry)):
            dirs.append(f'{entry}/')
        else:
            files.append(entry)
    return [*dirs, *files, '']


def _load_file(filename: str) -> tuple[list[str], bool]:
    """returns the lines and whether they are a directory listing"""
    try:
        tags = tags_from_path(os.path.realpath(filename))
    except ValueError:
        raise OpenError(f'error! not a file: {filename!r}')

    if 'directory' in tags:
        try:
            return _listing(filename), True
        except OSError:
            raise OpenError(f'error! cannot list: {filename!r}')
    elif 'binary' in tags:
        raise OpenError(f'error! binary file: {filename!r}')

    try:
        with open(filename, encoding='UTF-8', newline='') as f:
            lines, _ = get_lines(f)
            return lines, False
    except UnicodeDecodeError:
        raise OpenError(f'error! not utf-8: {filename!r}')
    except OSError:
        raise OpenError(f'error! not a file: {filename!r}')


class Found(NamedTuple):
    y: int
    match: Match[str]
    wrapped: bool


class File:
    def __init__(
            self,
            filename: str | None,
            initial_line: int,
            options: Options,
            *,
            is_stdin: bool,
    ) -> None:
        self.filename = filename
        self.initial_line = initial_line
        self.is_stdin = is_stdin
        self.is_listing = False
        self.options = options
        self.buf = Buf([], options)

    def ensure_loaded(self, status: Status, dim: Dim, stdin: str) -> None:
        if self.buf:
            return

        if self.is_stdin:
            status.update('(from stdin)')
            self.is_stdin = False
            lines, mixed = get_lines(io.StringIO(stdin))
        elif self.filename is not None:
            try:
                lines, self.is_listing = _load_file(self.filename)
            except OpenError as e:
                status.update(str(e))
                lines = ['']
            mixed = False
        else:
            lines, mixed = [''], False

        if mixed:
            status.update('mixed newlines')

        self.buf = Buf(lines, self.options)
        # nothing was on screen before so the initial line is centered
        self.go_to_line(self.initial_line, dim, center=True)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.filename!r}>'

    def view(self, dim: Dim) -> BufView:
        return BufView(self.buf, dim)

    @property
    def entry(self) -> str | None:
        """the path under the cursor of a directory listing"""
        if not self.is_listing or not self.buf[self.buf.y]:
            return None
        assert self.filename is not None
        return os.path.normpath(
            os.path.join(self.filename, self.buf[self.buf.y]),
        )

    # movement

    def up(self, dim: Dim) -> None:
        self.buf.up(dim)

    def down(self, dim: Dim) -> None:
        self.buf.down(dim)

    def list_up(self, dim: Dim) -> None:
        self.buf.up(dim)

    def list_down(self, dim: Dim) -> None:
        # the blank line at the end of a listing is not an entry
        if self.buf.y < len(self.buf) - 2:
            self.buf.down(dim)

    def top(self, dim: Dim) -> None:
        self.buf.x = 0
        self.buf.y = self.buf.file_y = 0

    def bottom(self, dim: Dim) -> None:
        self.buf.x = 0
        self.buf.y = len(self.buf) - 1
        self.buf.scroll_screen_if_needed(dim)

    def go_to_line(
            self,
            lineno: int,
            dim: Dim,
            *,
            center: bool = False,
    ) -> None:
        self.buf.x = 0
        if lineno == 0:
            self.buf.y = 0
        elif lineno > len(self.buf):
            self.buf.y = len(self.buf) - 1
        elif lineno < 0:
            self.buf.y = max(0, lineno + len(self.buf))
        else:
            self.buf.y = lineno - 1
        self.buf.scroll_screen_if_needed(dim, center=center)

    def _page_size(self, dim: Dim) -> int:
        return max(dim.height - 2, 1)

    def page_up(self, dim: Dim) -> None:
        if self.buf.y < dim.height:
            self.buf.y = self.buf.file_y = 0
        else:
            pos = max(self.buf.file_y - self._page_size(dim), 0)
            self.buf.y = self.buf.file_y = pos
        self.buf.x = 0

    def page_down(self, dim: Dim) -> None:
        if self.buf.file_y + dim.height >= len(self.buf):
            self.buf.y = len(self.buf) - 1
        else:
            pos = self.buf.file_y + self._page_size(dim)
            self.buf.y = self.buf.file_y = pos
        self.buf.x = 0

    # searching

    def _search_forward(self, reg: Reg) -> Found | None:
        y, x = self.buf.y, self.buf.x
        line = self.buf[y]
        match = reg.search(line, x + 1) if x < len(line) else None
        if match:
            return Found(y, match, wrapped=False)

        for line_y in range(y + 1, len(self.buf)):
            match = reg.search(self.buf[line_y])
            if match:
                return Found(line_y, match, wrapped=False)

        for line_y in range(0, y + 1):
            match = reg.search(self.buf[line_y])
            if match:
                return Found(line_y, match, wrapped=True)

        return None

    def _search_backward(self, reg: Reg) -> Found | None:
        y, x = self.buf.y, self.buf.x
        match = reg.rsearch(self.buf[y], x)
        if match:
            return Found(y, match, wrapped=False)

        for line_y in range(y - 1, -1, -1):
            match = reg.rsearch(self.buf[line_y], len(self.buf[line_y]) + 1)
            if match:
                return Found(line_y, match, wrapped=False)

        for line_y in range(len(self.buf) - 1, y - 1, -1):
            match = reg.rsearch(self.buf[line_y], len(self.buf[line_y]) + 1)
            if match:
                return Found(line_y, match, wrapped=True)

        return None

    def search(
            self,
            reg: Reg,
            status: Status,
            dim: Dim,
            *,
            reverse: bool = False,
    ) -> None:
        if reverse:
            found = self._search_backward(reg)
        else:
            found = self._search_forward(reg)

        if found is None:
            status.update('no matches')
        elif found.y == self.buf.y and found.match.start() == self.buf.x:
            status.update('this is the only occurrence')
        else:
            if found.wrapped:
                status.update('search wrapped')
            self.buf.y = found.y
            self.buf.x = found.match.start()
            self.buf.scroll_screen_if_needed(dim)

    DISPATCH: dict[bytes, Callable[[File, Dim], None]] = {
        b'KEY_UP': up,
        b'^P': up,
        b'KEY_DOWN': down,
        b'^N': down,
        b'KEY_PPAGE': page_up,
        b'KEY_NPAGE': page_down,
        b'KEY_HOME': top,
        b'kHOM5': top,
        b'KEY_END': bottom,
        b'kEND5': bottom,
    }
    CHARS: dict[str, Callable[[File, Dim], None]] = {
        'k': up,
        'j': down,
        'b': page_up,
        ' ': page_down,
        'g': top,
        'G': bottom,
    }
    LISTING = {
        up: list_up,
        down: list_down,
    }

    def command(
            self,
            func: Callable[[File, Dim], None],
    ) -> Callable[[File, Dim], None]:
        if self.is_listing:
            return File.LISTING.get(func, func)
        else:
            return func

    # positioning

    def move_cursor(self, stdscr: curses._CursesWindow, dim: Dim) -> None:
        stdscr.move(*self.buf.cursor_position(dim))

    def draw(self, stdscr: curses._CursesWindow, dim: Dim) -> None:
        rows = self.buf.rendered_rows(dim)

        for i, row in enumerate(rows):
            stdscr.insstr(i + dim.y, 0, row)

        if self.is_listing:
            cursor_y, _ = self.buf.cursor_position(dim)
            stdscr.chgat(cursor_y, 0, dim.width, curses.A_REVERSE)

        for i in range(len(rows), dim.height):
            stdscr.move(i + dim.y, 0)
            stdscr.clrtoeol()
