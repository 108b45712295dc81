from __future__ import annotations


class Options:
    """display settings shared by every open file"""

    def __init__(
            self,
            *,
            scroll_margin: int = 0,
            wrap: bool = False,
            tab_size: int = 4,
    ) -> None:
        # lines kept between the cursor and the window edge by jumping
        self.scroll_margin = scroll_margin
        # a cursor leaving the window jumps half a window instead of
        # only being brought back into view
        self.jump_scroll = True
        self.wrap = wrap
        self.tab_size = tab_size

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'scroll_margin={self.scroll_margin!r}, '
            f'jump_scroll={self.jump_scroll!r}, '
            f'wrap={self.wrap!r}, '
            f'tab_size={self.tab_size!r}'
            f')'
        )
