"""
Entry point for running kernkeep as a module.

Usage:
    python -m kernkeep [options]
"""

import sys
from kernkeep.cli import main

if __name__ == "__main__":
    sys.exit(main())
