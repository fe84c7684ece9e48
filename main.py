"""
Catalog Gallery Dedup
=====================

Entry point for running the tool from a source checkout:

    python main.py duplicate:remove --dryrun false SKU-1

The same command is installed as the `catalog-dedup` console script.
"""

import os
import sys

# ============================================================================
# PATH SETUP
# ============================================================================
# Make 'from src.core import ...' work regardless of the working directory.
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

from src.cli import main

if __name__ == "__main__":
    sys.exit(main())
