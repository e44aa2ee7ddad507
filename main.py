"""hypershare-check from a source checkout.

    DIR=/srv/share BOUNDARY=xyz PORT=8080 python -m main run image.bin

puts `src/` on the path and uploads `$DIR/image.bin`, the same as the
installed `hypershare-check run image.bin`.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    project_root = Path(__file__).resolve().parent
    src = project_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
