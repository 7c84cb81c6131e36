#!/usr/bin/env python3
"""Main entry point for the banking ledger console"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
