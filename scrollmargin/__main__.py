from __future__ import annotations

from scrollmargin.main import main

if __name__ == '__main__':
    raise SystemExit(main())
