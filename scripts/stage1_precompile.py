#!/usr/bin/env python3
"""
Stage 1: call the SHA-256 precompile directly and compare with a local digest.

Usage:
    python scripts/stage1_precompile.py [--rpc-url URL] [--precompile sha256]
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from precompile_check.cli import main


if __name__ == "__main__":
    sys.exit(main(["raw", *sys.argv[1:]]))
