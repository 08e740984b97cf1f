"""Console-script wrapper for the CLI entrypoints."""

from __future__ import annotations

from .app.cli import build_model_parser, build_parser, heisenberg_main, main, potts_main

__all__ = ["build_model_parser", "build_parser", "heisenberg_main", "main", "potts_main"]


if __name__ == "__main__":
    raise SystemExit(main())
