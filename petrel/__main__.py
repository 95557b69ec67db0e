"""
petrel/__main__.py — Enables `python -m petrel` invocation.
"""

import sys
from petrel.cli import main

if __name__ == "__main__":
    sys.exit(main())
