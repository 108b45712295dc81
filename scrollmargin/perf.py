from __future__ import annotations

import contextlib
import cProfile
import time
from typing import Generator
from typing import NamedTuple


class Record(NamedTuple):
    event: str
    duration: float
    scrolled: int

    def line(self) -> str:
        micros = int(self.duration * 1000 * 1000)
        return f'{micros}\t{self.scrolled}\t{self.event}\n'


class Perf:
    """times every key, along with the lines the margin keeper scrolled for
    it, while `--perf-log` is given
    """

    def __init__(self) -> None:
        self._prof: cProfile.Profile | None = None
        self.records: list[Record] = []
        self._current: tuple[str, float] | None = None
        self._scrolled = 0

    def start(self, event: str) -> None:
        if self._prof is None:
            return
        assert self._current is None, self._current
        self._current = (event, time.monotonic())
        self._scrolled = 0
        self._prof.enable()

    def scrolled(self, lines: int) -> None:
        self._scrolled += lines

    def end(self) -> None:
        if self._prof is None:
            return
        assert self._current is not None
        self._prof.disable()
        event, started = self._current
        duration = time.monotonic() - started
        self.records.append(Record(event, duration, self._scrolled))
        self._current = None

    def init_profiling(self) -> None:
        self._prof = cProfile.Profile()
        self.start('startup')

    def save_profiles(self, filename: str) -> None:
        assert self._prof is not None
        self._prof.dump_stats(f'{filename}.pstats')
        with open(filename, 'w', encoding='UTF-8') as f:
            f.write('μs\tscrolled\tevent\n')
            f.writelines(record.line() for record in self.records)


@contextlib.contextmanager
def perf_log(filename: str | None) -> Generator[Perf, None, None]:
    perf = Perf()
    if filename is None:
        yield perf
    else:
        perf.init_profiling()
        try:
            yield perf
        finally:
            perf.end()
            perf.save_profiles(filename)
