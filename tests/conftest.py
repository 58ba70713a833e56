"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Node lookup helper for tests that inspect parsed trees.
- Console isolation so captured CLI output does not leak between tests.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'cjs_esm' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from cjs_esm.utils.console import reset_console  # noqa: E402


def find_node(root, node_type):
  """Returns the first node of `node_type` in document order, or None."""
  stack = [root]
  while stack:
    node = stack.pop()
    if node.type == node_type:
      return node
    stack.extend(reversed(node.children))
  return None


@pytest.fixture
def first_node():
  """Fixture exposing `find_node` to tests."""
  return find_node


@pytest.fixture(autouse=True)
def isolate_console():
  """
  Restores the default console after each test, in case a test redirected it.
  """
  yield
  reset_console()
