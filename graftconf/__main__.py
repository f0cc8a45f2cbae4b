"""
graftconf command-line entry point.

Usage:
    python -m graftconf describe app.settings:ServerSettings
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
