#!/usr/bin/env python3
"""
Comm code generator wrapper.

This is a convenience wrapper that forwards to the comm_codegen module.
Run with --help to see available options.

Usage:
    python generate.py [options]
    ./generate.py [options]  (on Unix with execute permission)

Examples:
    python generate.py
    python generate.py --comm plot --comm variables
    python generate.py --check --quiet
"""

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def main() -> int:
    """Forward all arguments to the comm_codegen module."""
    return subprocess.call(
        [sys.executable, "-m", "comm_codegen"] + sys.argv[1:],
        cwd=ROOT,
    )


if __name__ == "__main__":
    sys.exit(main())
