"""Punto de entrada ``python -m flare_guard``."""

from __future__ import annotations

from flare_guard.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
