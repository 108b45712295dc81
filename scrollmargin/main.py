from __future__ import annotations

import argparse
import curses
import os
import re
import signal
import sys
from typing import Sequence

from scrollmargin.margin import MarginConfig
from scrollmargin.options import Options
from scrollmargin.perf import Perf
from scrollmargin.perf import perf_log
from scrollmargin.screen import FileInfo
from scrollmargin.screen import make_stdscr
from scrollmargin.screen import Screen
from scrollmargin.screen import ViewResult

CONSOLE = 'CONIN$' if sys.platform == 'win32' else '/dev/tty'
POSITION_RE = re.compile(r'^\+-?\d+$')


def _view(screen: Screen, stdin: str) -> ViewResult:
    screen.file.ensure_loaded(screen.status, screen.layout.file, stdin)

    while True:
        screen.status.tick(screen.layout.file)
        screen.draw()
        screen.file.move_cursor(screen.stdscr, screen.layout.file)

        key = screen.get_char()
        if key.keyname in screen.file.DISPATCH:
            screen.run_file_command(screen.file.DISPATCH[key.keyname])
        elif key.keyname in Screen.DISPATCH:
            ret = Screen.DISPATCH[key.keyname](screen)
            if isinstance(ret, ViewResult):
                return ret
        elif key.keyname == b'STRING':
            assert isinstance(key.wch, str), key.wch
            for c in key.wch:
                ret = screen.press(c)
                if isinstance(ret, ViewResult):
                    return ret
        else:
            screen.status.update(f'unknown key: {key}')


def _switch(screen: Screen, res: ViewResult) -> bool:
    """picks the file to view next, `False` once nothing is left to view"""
    if res == ViewResult.EXIT_ALL:
        return False
    elif res == ViewResult.EXIT:
        del screen.files[screen.i]
        # the next file takes its place unless it was the last one
        screen.i = min(screen.i, len(screen.files) - 1)
    elif res == ViewResult.NEXT:
        screen.i += 1
    elif res == ViewResult.PREV:
        screen.i -= 1
    elif res == ViewResult.OPEN:
        screen.i = len(screen.files) - 1
        return True
    else:
        raise AssertionError(f'unreachable {res}')

    screen.status.clear()
    return bool(screen.files)


def c_main(
        stdscr: curses._CursesWindow,
        file_infos: list[FileInfo],
        stdin: str,
        perf: Perf,
        args: argparse.Namespace,
) -> int:
    screen = Screen(
        stdscr, file_infos, perf,
        options=Options(scroll_margin=args.scroll_margin, wrap=args.wrap),
        config=MarginConfig(margin=args.margin, strict=args.strict),
        smooth=args.smooth,
    )
    while screen.files:
        screen.i %= len(screen.files)
        if not _switch(screen, _view(screen, stdin)):
            break
    return 0


def _file_info(filename: str, initial_line: int) -> FileInfo:
    if filename == '-':
        return FileInfo(None, initial_line, is_stdin=True)
    else:
        return FileInfo(filename, initial_line, is_stdin=False)


def _files(args: list[str]) -> list[FileInfo]:
    """`+LINE` applies to the filename after it"""
    if not args:
        return [_file_info('.', 0)]

    ret = []
    position = None
    for arg in args:
        if position is None and POSITION_RE.match(arg):
            position = arg
        else:
            initial_line = 0 if position is None else int(position[1:])
            ret.append(_file_info(arg, initial_line))
            position = None
    # a trailing `+LINE` names a file
    if position is not None:
        ret.append(_file_info(position, 0))
    return ret


def _non_negative(s: str) -> int:
    try:
        ret = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f'not an integer: {s!r}')
    if ret < 0:
        raise argparse.ArgumentTypeError(f'must not be negative: {ret}')
    return ret


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description='a pager which keeps context around the cursor',
    )
    parser.add_argument('filenames', metavar='filename', nargs='*')
    parser.add_argument(
        '--margin', type=_non_negative, default=10,
        help='lines of context to keep above and below the cursor '
             '(default: %(default)s)',
    )
    parser.add_argument(
        '--no-strict', dest='strict', action='store_false',
        help='count logical lines instead of screen lines',
    )
    parser.add_argument(
        '--no-smooth', dest='smooth', action='store_false',
        help='start with margin keeping turned off',
    )
    parser.add_argument(
        '--scroll-margin', type=_non_negative, default=0,
        help='margin kept by jumping while margin keeping is off '
             '(default: %(default)s)',
    )
    parser.add_argument('--wrap', action='store_true', help='wrap long lines')
    parser.add_argument('--perf-log')
    args = parser.parse_args(argv)

    if '-' in args.filenames:
        print('reading stdin...', file=sys.stderr)
        stdin = sys.stdin.buffer.read().decode()
        tty = os.open(CONSOLE, os.O_RDONLY)
        os.dup2(tty, sys.stdin.fileno())
    else:
        stdin = ''

    # ignore backgrounding signals, we'll handle those in curses
    # fixes a problem with ^Z on termination which would break the terminal
    if sys.platform != 'win32':  # pragma: win32 no cover  # pragma: no branch
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    with perf_log(args.perf_log) as perf, make_stdscr() as stdscr:
        file_infos = _files(args.filenames)
        return c_main(stdscr, file_infos, stdin, perf, args)


if __name__ == '__main__':
    raise SystemExit(main())
