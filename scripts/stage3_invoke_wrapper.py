#!/usr/bin/env python3
"""
Stage 3: call the deployed wrapper for every test vector.

Reads the address written by stage 2 from deployed_address.txt.

Usage:
    python scripts/stage3_invoke_wrapper.py [--rpc-url URL]
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from precompile_check.cli import main


if __name__ == "__main__":
    sys.exit(main(["invoke", *sys.argv[1:]]))
