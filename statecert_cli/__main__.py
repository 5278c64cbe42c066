"""
Module execution entry point.

Allows running with: python -m statecert_cli
"""

import sys
from statecert_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
