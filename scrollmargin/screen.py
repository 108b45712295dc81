from __future__ import annotations

import contextlib
import curses
import enum
import importlib.metadata
import os
import signal
import sys
from typing import Callable
from typing import Generator
from typing import NamedTuple

from scrollmargin.file import File
from scrollmargin.layout import Dim
from scrollmargin.layout import Layout
from scrollmargin.margin import MarginConfig
from scrollmargin.mode import ModeController
from scrollmargin.options import Options
from scrollmargin.perf import Perf
from scrollmargin.prompt import Prompt
from scrollmargin.prompt import PromptResult
from scrollmargin.reg import make_reg
from scrollmargin.reg import Reg
from scrollmargin.reg import RegError
from scrollmargin.status import Status
from scrollmargin.trigger import MarginKeeper
from scrollmargin.trigger import not_at_beginning
from scrollmargin.trigger import not_at_end

VERSION_STR = f'scrollmargin v{importlib.metadata.version("scrollmargin")}'

SEQUENCE_KEYNAME = {
    '\x1bOH': b'KEY_HOME',
    '\x1bOF': b'KEY_END',
    '\x1b[1~': b'KEY_HOME',
    '\x1b[4~': b'KEY_END',
    '\x1b[1;3C': b'kRIT3',  # M-Right
    '\x1b[1;3D': b'kLFT3',  # M-Left
    '\x1b[1;5H': b'kHOM5',  # ^Home
    '\x1b[1;5F': b'kEND5',  # ^End
}
KEYNAME_REWRITE = {
    # windows-curses: numeric pad arrow keys
    b'KEY_A2': b'KEY_UP',
    b'KEY_C2': b'KEY_DOWN',
    b'KEY_A3': b'KEY_PPAGE',
    b'KEY_C3': b'KEY_NPAGE',
    b'KEY_A1': b'KEY_HOME',
    b'KEY_C1': b'KEY_END',
    # windows-curses: map to our names
    b'CTL_HOME': b'kHOM5',
    b'CTL_END': b'kEND5',
    b'ALT_RIGHT': b'kRIT3',
    b'ALT_LEFT': b'kLFT3',
    # macos: (sends this for backspace key, others interpret this as well)
    b'^?': b'KEY_BACKSPACE',
    b'^H': b'KEY_BACKSPACE',
    b'^D': b'KEY_DC',
    b'PADENTER': b'^M',  # Enter on numpad
}
ON = frozenset(('on', 'yes', 'true', '1'))
OFF = frozenset(('off', 'no', 'false', '0'))


def _get_wch_with_retry(stdscr: curses._CursesWindow) -> str | int:
    while True:
        try:
            return stdscr.get_wch()
        except curses.error:  # pragma: no cover (error during signals?)
            pass


class ViewResult(enum.Enum):
    EXIT = enum.auto()
    EXIT_ALL = enum.auto()
    NEXT = enum.auto()
    PREV = enum.auto()
    OPEN = enum.auto()


class Command(NamedTuple):
    callback: Callable[[Screen, list[str]], ViewResult | None]
    nargs: tuple[int, ...] = (0,)


class Key(NamedTuple):
    wch: int | str
    keyname: bytes


class FileInfo(NamedTuple):
    filename: str | None
    initial_line: int
    is_stdin: bool


class Search(NamedTuple):
    pattern: str
    reg: Reg
    reverse: bool


def _parse_count(s: str) -> int | None:
    try:
        ret = int(s)
    except ValueError:
        return None
    else:
        return ret if ret >= 0 else None


class Screen:
    def __init__(
            self,
            stdscr: curses._CursesWindow,
            file_infos: list[FileInfo],
            perf: Perf,
            *,
            options: Options,
            config: MarginConfig,
            smooth: bool = True,
    ) -> None:
        self.stdscr = stdscr
        self.options = options
        self.config = config
        self.files = [
            File(
                info.filename,
                info.initial_line,
                self.options,
                is_stdin=info.is_stdin,
            )
            for info in file_infos
        ]
        self.i = 0
        self.perf = perf
        self.layout = Layout.from_size(curses.LINES, curses.COLS)
        self.status = Status()
        self.search_state: Search | None = None
        self._count = ''
        self._buffered_input: int | str | None = None

        self.mode = ModeController(self.options)
        self.keeper = MarginKeeper(self.config, self.mode)
        self.keeper.bind('up', not_at_beginning)
        self.keeper.bind('down', not_at_end)
        self.keeper.bind('list_up', not_at_beginning)
        self.keeper.bind('list_down', not_at_end)
        self.keeper.bind('go_to_line')
        for command in ('search', 'search_next', 'search_prev'):
            self.keeper.bind(command)
        self.mode.set_mode(smooth)

    @property
    def file(self) -> File:
        return self.files[self.i]

    @property
    def mode_line(self) -> str:
        if not self.mode.enabled:
            return ''
        counting = 'visual' if self.config.strict else 'logical'
        return f'margin {self.config.margin} ({counting})'

    def _draw_header(self, dim: Dim) -> None:
        name = self.file.filename or '<<stdin>>'
        left = f' {VERSION_STR} '
        if len(self.files) > 1:
            left += f'[{self.i + 1}/{len(self.files)}] '
        s = f'{left}{name.center(dim.width)[len(left):]}'
        self.stdscr.insstr(0, 0, s, curses.A_REVERSE)

    # input

    def _get_pending(self) -> str | None:
        """a character typed along with the current one, if any"""
        try:
            c = self.stdscr.get_wch()
        except curses.error:
            return None
        if isinstance(c, int):
            self._buffered_input = c
            return None
        else:
            return c

    def _get_sequence(self, wch: str) -> str:
        self.stdscr.nodelay(True)
        try:
            c = self._get_pending()
            if c is None:
                return wch
            wch += c
            if c == 'O':
                c = self._get_pending()
                if c is not None:
                    wch += c
            elif c == '[':
                # parameters then one final character: `[4~`, `[1;5H`
                for _ in range(5):
                    c = self._get_pending()
                    if c is None:
                        break
                    wch += c
                    if c not in '0123456789;':
                        break
            return wch
        finally:
            self.stdscr.nodelay(False)

    def _get_string(self, wch: str) -> str:
        self.stdscr.nodelay(True)
        try:
            while True:
                c = self._get_pending()
                if c is None:
                    break
                elif not c.isprintable():
                    self._buffered_input = c
                    break
                wch += c
        finally:
            self.stdscr.nodelay(False)
        return wch

    def _get_char(self) -> Key:
        if self._buffered_input is not None:
            wch, self._buffered_input = self._buffered_input, None
        else:
            wch = _get_wch_with_retry(self.stdscr)
        if isinstance(wch, str) and wch == '\x1b':
            wch = self._get_sequence(wch)
            if len(wch) == 2:
                return Key(wch, f'M-{wch[1]}'.encode())
            elif len(wch) > 1:
                return Key(wch, SEQUENCE_KEYNAME.get(wch, b'unknown'))
        elif isinstance(wch, str) and wch.isprintable():
            return Key(self._get_string(wch), b'STRING')

        keyname = curses.keyname(wch if isinstance(wch, int) else ord(wch))
        return Key(wch, KEYNAME_REWRITE.get(keyname, keyname))

    def get_char(self) -> Key:
        self.perf.end()
        ret = self._get_char()
        self.perf.start(ret.keyname.decode())
        return ret

    def draw(self) -> None:
        self._draw_header(self.layout.header)
        self.file.draw(self.stdscr, self.layout.file)
        self.status.draw(self.stdscr, self.layout.status, self.mode_line)

    def resize(self) -> None:
        curses.update_lines_cols()
        self.layout = Layout.from_size(curses.LINES, curses.COLS)
        self.file.buf.scroll_screen_if_needed(self.layout.file)
        self.draw()

    def prompt(
            self,
            prompt: str,
            *,
            default: str = '',
            previous: str | None = None,
    ) -> str | PromptResult:
        """entering nothing new gives `previous` or cancels"""
        self.status.clear()
        if previous is not None:
            prompt = f'{prompt} [{previous}]'

        ret = Prompt(self, prompt, default).run()
        if ret is PromptResult.CANCELLED or ret != default:
            return ret
        elif previous is not None:
            return previous
        else:
            return self.status.cancelled()

    # movement

    def _take_count(self) -> int:
        count, self._count = int(self._count or '1'), ''
        return max(count, 1)

    def _run(
            self,
            command: str,
            func: Callable[[], object],
            *,
            count: int = 1,
    ) -> None:
        dim = self.layout.file
        scrolled = self.keeper.run(
            command, func, lambda: self.file.view(dim), count=count,
        )
        self.perf.scrolled(scrolled)

    def run_file_command(self, func: Callable[[File, Dim], None]) -> None:
        func = self.file.command(func)
        self._run(
            func.__name__,
            lambda: func(self.file, self.layout.file),
            count=self._take_count(),
        )

    def go_to_line(self) -> None:
        response = self.prompt('enter line number')
        if response is PromptResult.CANCELLED:
            return
        try:
            lineno = int(response)
        except ValueError:
            self.status.update(f'not an integer: {response!r}')
        else:
            self._run(
                'go_to_line',
                lambda: self.file.go_to_line(lineno, self.layout.file),
            )

    def current_position(self) -> None:
        buf = self.file.buf
        total = max(len(buf) - 1, 1)
        plural = '' if total == 1 else 's'
        self.status.update(
            f'line {buf.y + 1}, col {buf.x + 1} (of {total} line{plural})',
        )

    # searching

    def _find(self, command: str, search: Search, *, count: int = 1) -> None:
        def find() -> None:
            self.file.search(
                search.reg, self.status, self.layout.file,
                reverse=search.reverse,
            )

        self._run(command, find, count=count)

    def _search(self, prompt: str, *, reverse: bool) -> None:
        previous = self.search_state.pattern if self.search_state else None
        response = self.prompt(prompt, previous=previous)
        if response is PromptResult.CANCELLED:
            return
        try:
            reg = make_reg(response)
        except RegError:
            self.status.update(f'invalid regex: {response!r}')
        else:
            self.search_state = Search(response, reg, reverse)
            self._find('search', self.search_state)

    def search(self) -> None:
        self._search('search', reverse=False)

    def search_backward(self) -> None:
        self._search('search backward', reverse=True)

    def _repeat_search(self, command: str, *, flip: bool) -> None:
        count = self._take_count()
        if self.search_state is None:
            self.status.update('no previous search')
        elif flip:
            reverse = not self.search_state.reverse
            search = self.search_state._replace(reverse=reverse)
            self._find(command, search, count=count)
        else:
            self._find(command, self.search_state, count=count)

    def search_next(self) -> None:
        self._repeat_search('search_next', flip=False)

    def search_prev(self) -> None:
        self._repeat_search('search_prev', flip=True)

    # commands

    def _command_margin(self, args: list[str]) -> None:
        margin, = args
        parsed = _parse_count(margin)
        if parsed is None:
            self.status.update(f'invalid margin: {margin}')
        else:
            self.config.margin = parsed
            self.status.update(f'margin set to {parsed}')

    def _command_strict(self, args: list[str]) -> None:
        self.config.strict = True
        self.status.update('counting visual lines')

    def _command_nostrict(self, args: list[str]) -> None:
        self.config.strict = False
        self.status.update('counting logical lines')

    def _command_smooth(self, args: list[str]) -> None:
        if not args:
            arg = None
        elif args[0].lower() in ON:
            arg = True
        elif args[0].lower() in OFF:
            arg = False
        else:
            self.status.update(f'invalid argument: {args[0]}')
            return

        if self.mode.set_mode(arg):
            self.status.update('smooth scrolling enabled')
        else:
            self.status.update('smooth scrolling disabled')

    def _command_scrollmargin(self, args: list[str]) -> None:
        margin, = args
        parsed = _parse_count(margin)
        if parsed is None:
            self.status.update(f'invalid scroll margin: {margin}')
        else:
            self.mode.set_native_margin(parsed)
            self.status.update('updated!')

    def _reflow(self) -> None:
        self.file.buf.scroll_screen_if_needed(self.layout.file)
        self.status.update('updated!')

    def _command_wrap(self, args: list[str]) -> None:
        self.options.wrap = True
        self._reflow()

    def _command_nowrap(self, args: list[str]) -> None:
        self.options.wrap = False
        self._reflow()

    def _command_tabsize(self, args: list[str]) -> None:
        tab_size, = args
        parsed = _parse_count(tab_size)
        if not parsed:
            self.status.update(f'invalid size: {tab_size}')
        else:
            self.options.tab_size = parsed
            self._reflow()

    COMMANDS = {
        ':q': Command(lambda self, args: ViewResult.EXIT),
        ':qall': Command(lambda self, args: ViewResult.EXIT_ALL),
        ':margin': Command(_command_margin, nargs=(1,)),
        ':strict': Command(_command_strict),
        ':nostrict': Command(_command_nostrict),
        ':smooth': Command(_command_smooth, nargs=(0, 1)),
        ':scrollmargin': Command(_command_scrollmargin, nargs=(1,)),
        ':wrap': Command(_command_wrap),
        ':nowrap': Command(_command_nowrap),
        ':tabsize': Command(_command_tabsize, nargs=(1,)),
        ':tabstop': Command(_command_tabsize, nargs=(1,)),
    }

    def _command(self, default: str) -> ViewResult | None:
        response = self.prompt('', default=default)
        if response is PromptResult.CANCELLED:
            return None

        words = response.split()
        if not words or words[0] not in self.COMMANDS:
            self.status.update(f'invalid command: {response}')
            return None

        cmd, *args = words
        command = self.COMMANDS[cmd]
        if len(args) not in command.nargs:
            expected = ' or '.join(str(n) for n in command.nargs)
            self.status.update(
                f'`{cmd}`: expected {expected} args but got {len(args)}',
            )
            return None

        return command.callback(self, args)

    def command(self) -> ViewResult | None:
        return self._command('')

    def colon_command(self) -> ViewResult | None:
        return self._command(':')

    # files

    def open_entry(self) -> ViewResult | None:
        entry = self.file.entry
        if entry is None:
            self.status.update('not a directory listing')
            return None
        self.files.append(File(entry, 0, self.options, is_stdin=False))
        return ViewResult.OPEN

    def background(self) -> None:
        if sys.platform == 'win32':  # pragma: win32 cover
            self.status.update('cannot run in background on Windows')
        else:  # pragma: win32 no cover
            curses.endwin()
            os.kill(os.getpid(), signal.SIGSTOP)
            self.stdscr = _init_screen()
            self.resize()

    DISPATCH = {
        b'KEY_RESIZE': resize,
        b'^_': go_to_line,
        b'^C': current_position,
        b'^W': search,
        b'^[': command,
        b'^M': open_entry,
        b'^X': lambda screen: ViewResult.EXIT,
        b'kLFT3': lambda screen: ViewResult.PREV,
        b'kRIT3': lambda screen: ViewResult.NEXT,
        b'^Z': background,
    }
    CHARS = {
        '/': search,
        '?': search_backward,
        'n': search_next,
        'N': search_prev,
        ':': colon_command,
        '=': current_position,
        'q': lambda screen: ViewResult.EXIT,
    }

    def press(self, c: str) -> ViewResult | None:
        if c in '0123456789':
            self._count += c
            return None
        elif c in File.CHARS:
            self.run_file_command(File.CHARS[c])
            return None
        elif c in Screen.CHARS:
            ret = Screen.CHARS[c](self)
            self._count = ''
            return ret
        else:
            self._count = ''
            self.status.update(f'unknown key: {c!r}')
            return None


def _init_screen() -> curses._CursesWindow:
    # a lone escape opens the command prompt, so do not wait long for more
    curses.set_escdelay(25)

    stdscr = curses.initscr()
    curses.noecho()
    curses.cbreak()
    # keep `Enter` (^M) apart from ^J
    curses.nonl()
    # ^Z and friends arrive as keys rather than signals
    curses.raw()
    stdscr.keypad(True)
    return stdscr


@contextlib.contextmanager
def make_stdscr() -> Generator[curses._CursesWindow, None, None]:
    """`curses.wrapper` without the wrapping, `^Z` restarts the screen"""
    try:
        yield _init_screen()
    finally:
        curses.endwin()
