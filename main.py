"""
Vault Dedup - Duplicate File Finder
===================================

Script entry point. Equivalent to the `vault-dedup` console command:

    python main.py ~/vault-export --recursive --strategy newest
"""

import os
import sys

# ============================================================================
# PATH SETUP
# ============================================================================
# Allow running from a source checkout without installing the package.
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

from vaultdedup.cli import main

if __name__ == "__main__":
    sys.exit(main())
