from __future__ import annotations

import functools
from typing import Match

import onigurumacffi

RegError = onigurumacffi.OnigError


class Reg:
    def __init__(self, s: str) -> None:
        self._pattern = s
        self._reg = onigurumacffi.compile(self._pattern)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._pattern!r})'

    def search(self, line: str, pos: int = 0) -> Match[str] | None:
        return self._reg.search(line, pos)

    def rsearch(self, line: str, end: int) -> Match[str] | None:
        """the last match starting before `end`"""
        ret = None
        pos = 0
        while pos <= len(line):
            match = self._reg.search(line, pos)
            if match is None or match.start() >= end:
                break
            ret = match
            pos = match.start() + 1
        return ret


make_reg = functools.lru_cache(maxsize=None)(Reg)
