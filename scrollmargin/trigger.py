from __future__ import annotations

import enum
from typing import Callable
from typing import Protocol

from scrollmargin.lines import LineCounter
from scrollmargin.margin import MarginConfig
from scrollmargin.mode import ModeController
from scrollmargin.planner import Direction
from scrollmargin.planner import plan_scroll
from scrollmargin.planner import ScrollDecision
from scrollmargin.viewport import ViewportState


class ScrollResult(enum.Enum):
    OK = enum.auto()
    BOUNDARY = enum.auto()


class MarginHost(LineCounter, Protocol):
    def viewport_state(self) -> ViewportState: ...
    def scroll_toward_start(self) -> ScrollResult: ...
    def scroll_toward_end(self) -> ScrollResult: ...


Guard = Callable[[MarginHost], bool]


def not_at_beginning(host: MarginHost) -> bool:
    return host.viewport_state().point > host.beginning


def not_at_end(host: MarginHost) -> bool:
    return host.viewport_state().point < host.end


def execute(decision: ScrollDecision, host: MarginHost) -> int:
    if decision.direction is Direction.UP:
        scroll = host.scroll_toward_start
    elif decision.direction is Direction.DOWN:
        scroll = host.scroll_toward_end
    else:
        return 0

    for i in range(decision.lines):
        # running into either end of the document just ends the correction
        if scroll() is ScrollResult.BOUNDARY:
            return i
    return decision.lines


class MarginKeeper:
    def __init__(self, config: MarginConfig, mode: ModeController) -> None:
        self.config = config
        self.mode = mode
        self._bindings: dict[str, Guard | None] = {}

    def bind(self, command: str, guard: Guard | None = None) -> None:
        self._bindings[command] = guard

    def unbind(self, command: str) -> None:
        del self._bindings[command]

    def is_bound(self, command: str) -> bool:
        return command in self._bindings

    def after_command(self, command: str, host: MarginHost) -> int:
        if not self.mode.enabled or command not in self._bindings:
            return 0

        guard = self._bindings[command]
        if guard is not None and not guard(host):
            return 0

        decision = plan_scroll(host.viewport_state(), host, self.config)
        return execute(decision, host)

    def run(
            self,
            command: str,
            func: Callable[[], object],
            host: Callable[[], MarginHost],
            *,
            count: int = 1,
    ) -> int:
        for _ in range(count):
            func()
        return self.after_command(command, host())
