#!/usr/bin/env python3
"""
Flash arbitrage bot runner
"""
import sys

from flash_arbitrage.cli import main

if __name__ == "__main__":
    sys.exit(main())
