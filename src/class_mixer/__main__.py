"""
Entry point for module execution (``python -m class_mixer``).

This module delegates execution to the CLI handler in ``class_mixer.cli.__main__``.
"""

import sys

from class_mixer.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
