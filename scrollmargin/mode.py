from __future__ import annotations

from typing import Protocol


class NativeMargin(Protocol):
    scroll_margin: int
    jump_scroll: bool


class ModeController:
    """owns whether margins are maintained

    the host's own scroll margin and its half window jumps would fight with
    ours so they are parked while the mode is on and handed back when it is
    turned off.
    """

    def __init__(self, host: NativeMargin) -> None:
        self._host = host
        self.enabled = False
        self.saved_margin: int | None = None

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'enabled={self.enabled!r}, saved_margin={self.saved_margin!r}'
            f')'
        )

    def activate(self) -> None:
        if self.enabled:
            return
        self.saved_margin = self._host.scroll_margin
        self._host.scroll_margin = 0
        self._host.jump_scroll = False
        self.enabled = True

    def deactivate(self) -> None:
        if not self.enabled:
            return
        assert self.saved_margin is not None
        self._host.scroll_margin = self.saved_margin
        self._host.jump_scroll = True
        self.saved_margin = None
        self.enabled = False

    def set_mode(self, arg: bool | None = None) -> bool:
        if arg is None:
            arg = not self.enabled
        if arg:
            self.activate()
        else:
            self.deactivate()
        return self.enabled

    def set_native_margin(self, margin: int) -> None:
        if self.enabled:
            self.saved_margin = margin
        else:
            self._host.scroll_margin = margin
