from __future__ import annotations

from scrollmargin.lines import Counting


class MarginConfig:
    def __init__(self, margin: int = 10, strict: bool = True) -> None:
        self.margin = margin
        self.strict = strict

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'margin={self.margin!r}, strict={self.strict!r}'
            f')'
        )

    @property
    def counting(self) -> Counting:
        if self.strict:
            return Counting.VISUAL
        else:
            return Counting.LOGICAL


def allowed_margin(height: int, chrome_rows: int = 1) -> int:
    # both margins plus the cursor line must fit without overlapping
    return max((height - (chrome_rows + 1)) // 2, 0)


def effective_margin(
        config: MarginConfig,
        height: int,
        chrome_rows: int = 1,
) -> int:
    return min(config.margin, allowed_margin(height, chrome_rows))
