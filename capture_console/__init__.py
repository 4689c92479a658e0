"""Top-level package for the packet capture console."""

from __future__ import annotations

from importlib import metadata
from typing import Optional, Sequence

from .capture.main_capture import main

try:
    __version__ = metadata.version("capture-console")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Convenience wrapper around the console entry point."""
    return main(list(argv) if argv is not None else None)


__all__ = ["__version__", "main", "run"]
