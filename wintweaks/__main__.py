"""
Entry point for running wintweaks as a module.

Usage:
    python -m wintweaks apply WPFTweaksTele
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
