"""
Entry point for module execution (``python -m cjs_esm``).

This module delegates execution to the CLI handler in ``cjs_esm.cli.__main__``.
"""

import sys
from cjs_esm.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
