#!/usr/bin/env python3
"""
mac-dev-setup - Install or upgrade the macOS developer toolchain.

Usage:
    setup_mac.py                # Run the full setup
    setup_mac.py --dry-run      # Print changing commands only
    setup_mac.py --fail-fast    # Stop at the first failed step
"""

import os
import sys

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from mac_dev_setup.cli import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
