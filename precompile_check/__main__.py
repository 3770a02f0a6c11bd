import sys

from precompile_check.cli import main

sys.exit(main())
