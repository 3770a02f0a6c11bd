#!/usr/bin/env python3
"""
Stage 2: deploy the Sha256Wrapper contract from artifacts/ and record its address.

Requires DEPLOYER_PRIVATE_KEY in the environment or .env.

Usage:
    python scripts/stage2_deploy_wrapper.py [--rpc-url URL]
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from precompile_check.cli import main


if __name__ == "__main__":
    sys.exit(main(["deploy", *sys.argv[1:]]))
