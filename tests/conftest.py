"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports (``src`` for the package, ``tests`` for
  the importable contributor fixtures used by artifact round-trips).
- Registry isolation so composite names can be reused across tests.
- Console reset so output injected by one test does not leak into the next.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'class_mixer' without installing it
tests_path = Path(__file__).parent
src_path = tests_path.parent / "src"
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(tests_path))

from class_mixer.core.activation import clear_composites
from class_mixer.utils.console import reset_console


@pytest.fixture(autouse=True)
def isolate_composites():
  """Forgets activated composites before and after every test."""
  clear_composites()
  yield
  clear_composites()


@pytest.fixture(autouse=True)
def cleanup_console():
  reset_console()
  yield
  reset_console()
