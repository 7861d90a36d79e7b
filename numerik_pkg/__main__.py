"""Main entry point for running numerik_pkg as a module.

This allows running Numerik with:
    python -m numerik_pkg
    python -m numerik_pkg --health-check
    python -m numerik_pkg --roots "x^3-9x+3"

This is equivalent to running:
    python -m numerik_pkg.cli
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
