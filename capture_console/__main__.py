"""Allow ``python -m capture_console`` to launch the capture console."""

from __future__ import annotations

import sys


def main() -> None:
    from capture_console import run

    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
