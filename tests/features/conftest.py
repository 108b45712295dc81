from __future__ import annotations

import contextlib
import curses
from typing import Callable
from typing import NamedTuple
from unittest import mock

import pytest

from scrollmargin.main import main
from scrollmargin.screen import VERSION_STR


@pytest.fixture
def ten_lines(tmpdir):
    f = tmpdir.join('f')
    f.write('\n'.join(f'line_{i}' for i in range(10)))
    return f


@pytest.fixture
def hundred_lines(tmpdir):
    f = tmpdir.join('f')
    f.write('\n'.join(f'line_{i}' for i in range(100)))
    return f


class Terminal:
    """the cells the pager has drawn, along with the cursor"""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.rows = [' ' * width] * height
        self.attrs = [[0] * width for _ in range(height)]
        self.y = self.x = 0
        self.nodelay = False
        self._shown = ''

    def text(self) -> str:
        ret = ''.join(f'{row.rstrip()}\n' for row in self.rows)
        # printed so a failing test shows what was on screen
        if ret != self._shown:
            print(f'{"-" * 79}\n{ret}{"-" * 79}')
            self._shown = ret
        return ret

    def insstr(self, y, x, s, attr):
        self.rows[y] = f'{self.rows[y][:x]}{s}{self.rows[y][x:]}'[:self.width]
        attrs = self.attrs[y][:x] + [attr] * len(s) + self.attrs[y][x:]
        self.attrs[y] = attrs[:self.width]

    def chgat(self, y, x, n, attr):
        self.attrs[y][x:x + n] = [attr] * n

    def move(self, y, x):
        assert 0 <= y < self.height and 0 <= x < self.width, (y, x)
        self.y, self.x = y, x

    def resize(self, width, height):
        rows = (self.rows + [''] * height)[:height]
        attrs = (self.attrs + [[]] * height)[:height]
        self.rows = [row[:width].ljust(width) for row in rows]
        self.attrs = [(attr + [0] * width)[:width] for attr in attrs]
        self.width, self.height = width, height


class Check(NamedTuple):
    message: str
    ok: Callable[[Terminal], bool]

    def __call__(self, terminal: Terminal) -> None:
        if not self.ok(terminal):
            raise AssertionError(self.message)


class Callback(NamedTuple):
    func: Callable[[], object]

    def __call__(self, terminal: Terminal) -> None:
        self.func()


class Resize(NamedTuple):
    width: int
    height: int

    def __call__(self, terminal: Terminal) -> None:
        terminal.resize(self.width, self.height)


class KeyPress(NamedTuple):
    wch: int | str

    def __call__(self, terminal: Terminal) -> None:
        raise AssertionError('unreachable')


class CursesError(NamedTuple):
    """ends a burst of input: reading without delay finds nothing"""

    def __call__(self, terminal: Terminal) -> None:
        if terminal.nodelay:
            raise curses.error()


class FakeWindow:
    def __init__(self, terminal, runner):
        self._terminal = terminal
        self._runner = runner

    def keypad(self, val):
        pass

    def nodelay(self, val):
        self._terminal.nodelay = val

    def insstr(self, y, x, s, attr=0):
        self._terminal.insstr(y, x, s, attr)

    def clrtoeol(self):
        t = self._terminal
        t.insstr(t.y, t.x, ' ' * t.width, 0)

    def chgat(self, y, x, n, attr):
        self._terminal.chgat(y, x, n, attr)

    def move(self, y, x):
        self._terminal.move(y, x)

    def get_wch(self):
        return self._runner.next_key()


# name used by the tests => (curses keyname, what `get_wch` returns)
KEYS = {
    'Enter': (b'^M', '\r'),
    'Down': (b'KEY_DOWN', curses.KEY_DOWN),
    'Left': (b'KEY_LEFT', curses.KEY_LEFT),
    'PageUp': (b'KEY_PPAGE', curses.KEY_PPAGE),
    'PageDown': (b'KEY_NPAGE', curses.KEY_NPAGE),
    '^Home': (b'kHOM5', 535),
    '^End': (b'kEND5', 530),
    'M-Right': (b'kRIT3', 558),
    'M-Left': (b'kLFT3', 543),
    '^C': (b'^C', '\x03'),
    '^J': (b'^J', '\n'),
    '^N': (b'^N', '\x0e'),
    '^P': (b'^P', '\x10'),
    '^W': (b'^W', '\x17'),
    '^X': (b'^X', '\x18'),
    '^[': (b'^[', '\x1b'),
    '^_': (b'^_', '\x1f'),
    '!resize': (b'KEY_RESIZE', curses.KEY_RESIZE),
}
KEYNAMES = {
    wch if isinstance(wch, int) else ord(wch): keyname
    for keyname, wch in KEYS.values()
}


def _unsupported(name):
    def fake(*args, **kwargs):
        raise NotImplementedError(name)
    return fake


class DeferredRunner:
    """queues keys and screen checks, then runs the pager against them

    every check runs right before the pager waits for the next key.
    """

    def __init__(self, command, width=80, height=24):
        self.command = command
        self.terminal = Terminal(width, height)
        self._queue: list[Callable[[Terminal], None]] = []
        self._i = 0

    def next_key(self):
        while not isinstance(self._queue[self._i], KeyPress):
            op = self._queue[self._i]
            self._i += 1
            try:
                op(self.terminal)
            except AssertionError:  # pragma: no cover (only on failures)
                self.terminal.text()
                raise
        key = self._queue[self._i]
        self._i += 1
        assert isinstance(key, KeyPress), key
        return key.wch

    # checks

    def _check(self, message, ok):
        self._queue.append(Check(message, ok))

    def await_text(self, text):
        self._check(f'expected: {text!r}', lambda t: text in t.text())

    def await_text_missing(self, text):
        self._check(
            f'expected missing: {text!r}', lambda t: text not in t.text(),
        )

    def await_cursor_position(self, *, x, y):
        self._check(
            f'expected cursor at x={x} y={y}', lambda t: (t.x, t.y) == (x, y),
        )

    def assert_cursor_line_equals(self, line):
        self._check(
            f'expected cursor line: {line!r}',
            lambda t: t.rows[t.y].rstrip() == line,
        )

    def assert_screen_line_equals(self, n, line):
        self._check(
            f'expected line {n}: {line!r}',
            lambda t: t.rows[n].rstrip() == line,
        )

    def assert_screen_attr_equals(self, n, attr):
        self._check(
            f'expected attrs of line {n}', lambda t: t.attrs[n] == attr,
        )

    def run(self, callback):
        self._queue.append(Callback(callback))

    # input

    def press(self, s):
        if s == 'Escape':
            self._queue.extend((KeyPress('\x1b'), CursesError()))
        elif s in KEYS:
            _, wch = KEYS[s]
            self._queue.append(KeyPress(wch))
        elif s.startswith('^') and len(s) > 1 and s[1].isupper():
            raise AssertionError(f'unknown key {s}')
        else:
            self._queue.extend(KeyPress(c) for c in s)
            self._queue.append(CursesError())

    def press_and_enter(self, s):
        self.press(s)
        self.press('Enter')

    @contextlib.contextmanager
    def resize(self, *, width, height):
        orig = Resize(self.terminal.width, self.terminal.height)
        self._queue.append(Resize(width, height))
        self._queue.append(KeyPress(curses.KEY_RESIZE))
        try:
            yield
        finally:
            self._queue.extend((orig, KeyPress(curses.KEY_RESIZE)))

    # curses

    def _curses__noop(self, *_, **__):
        pass

    _curses_cbreak = _curses_endwin = _curses_noecho = _curses__noop
    _curses_nonl = _curses_raw = _curses_set_escdelay = _curses__noop

    _curses_error = curses.error

    def _curses_keyname(self, k):
        return KEYNAMES.get(k, b'')

    def _curses_update_lines_cols(self):
        curses.LINES = self.terminal.height
        curses.COLS = self.terminal.width

    def _curses_initscr(self):
        self._curses_update_lines_cols()
        return FakeWindow(self.terminal, self)

    def _patch_curses(self):
        fakes = {
            name: getattr(self, f'_curses_{name}', _unsupported(name))
            for name in dir(curses)
            if not name.startswith('_') and callable(getattr(curses, name))
        }
        return mock.patch.multiple(curses, **fakes)

    def await_exit(self):
        with self._patch_curses():
            main(self.command)
        # only trailing "no more input" markers may be left over
        leftover = self._queue[self._i:]
        if any(op != CursesError() for op in leftover):
            raise AssertionError(leftover)


@contextlib.contextmanager
def run_fake(*cmd, **kwargs):
    h = DeferredRunner(cmd, **kwargs)
    h.await_text(VERSION_STR)
    yield h


@pytest.fixture(scope='session', params=[run_fake], ids=['fake'])
def run(request):
    return request.param
