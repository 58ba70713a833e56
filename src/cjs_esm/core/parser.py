"""
JavaScript Parser Frontend.

Turns module source text into a tree-sitter syntax tree. The
``tree-sitter-javascript`` grammar accepts both script-level CommonJS code and
module-level ``import``/``export`` syntax, which matters because the output of
this package reintroduces module syntax.

Two details are handled before the grammar sees the text:

1.  **Shebang-like lines**: A single leading line starting with ``#`` is
    tolerated by Node but not by static parsers. It is blanked (replaced by
    spaces) so every offset in the tree still lines up with the original text.
2.  **Offsets**: tree-sitter reports UTF-8 byte offsets. Edits are planned on
    character offsets of the original text, so each `ModuleUnit` carries a
    converter between the two.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import tree_sitter
import tree_sitter_javascript

from cjs_esm.errors import ParseError

_JS_LANGUAGE = tree_sitter.Language(tree_sitter_javascript.language())

SHEBANG_PATTERN = re.compile(r"^[\s\ufeff]*#.*")


@dataclass
class ModuleUnit:
  """
  One module being transformed.

  Attributes:
      module_id: Opaque identity, normally the resolved file path.
      code: The raw source text.
      tree: The parsed syntax tree (owned by this unit for one transform call).
      shebang: Character range of a blanked leading ``#`` line, if any.
  """

  module_id: str
  code: str
  tree: tree_sitter.Tree
  shebang: Optional[Tuple[int, int]] = None
  _char_at_byte: Optional[List[int]] = field(default=None, repr=False)

  @property
  def root(self) -> tree_sitter.Node:
    """The ``program`` node."""
    return self.tree.root_node

  def offset(self, byte_offset: int) -> int:
    """
    Converts a tree-sitter byte offset into a character offset of `code`.

    Args:
        byte_offset: UTF-8 byte offset reported by a node.

    Returns:
        int: The matching index into the source string.
    """
    if self._char_at_byte is None:
      return byte_offset
    return self._char_at_byte[byte_offset]

  def span(self, node: tree_sitter.Node) -> Tuple[int, int]:
    """Returns the half-open character range covered by a node."""
    return self.offset(node.start_byte), self.offset(node.end_byte)

  def text(self, node: tree_sitter.Node) -> str:
    """Returns the source text of a node."""
    start, end = self.span(node)
    return self.code[start:end]


def strip_shebang(code: str) -> Tuple[str, Optional[Tuple[int, int]]]:
  """
  Blanks a leading ``#`` line without shifting any offsets.

  Whitespace and byte order marks before the ``#`` belong to the blanked
  range, so the removed prefix never leaves a stray BOM in the body.

  Args:
      code: Raw module text.

  Returns:
      Tuple[str, Optional[Tuple[int, int]]]: The parseable text and the range of
      the prefix that was blanked (``None`` when there was none).
  """
  match = SHEBANG_PATTERN.match(code)
  if not match:
    return code, None

  end = match.end()
  return " " * end + code[end:], (0, end)


def _build_offset_table(text: str) -> Optional[List[int]]:
  """
  Maps every UTF-8 byte offset of `text` to its character index.

  Returns None for pure ASCII text, where both offsets coincide.
  """
  if text.isascii():
    return None

  table: List[int] = []
  for index, char in enumerate(text):
    table.extend([index] * len(char.encode("utf-8")))
  table.append(len(text))
  return table


def _first_error(root: tree_sitter.Node) -> Optional[tree_sitter.Node]:
  """Finds the first ERROR or MISSING node in document order."""
  stack = [root]
  while stack:
    node = stack.pop()
    if node.type == "ERROR" or node.is_missing:
      return node
    if node.has_error:
      stack.extend(reversed(node.children))
  return None


def parse_module(code: str, module_id: str) -> ModuleUnit:
  """
  Parses JavaScript source into a `ModuleUnit`.

  Args:
      code: Module source text.
      module_id: Module identity, appended to parse failures.

  Returns:
      ModuleUnit: The parsed module.

  Raises:
      ParseError: If the grammar reports a syntax error.
  """
  parseable, shebang = strip_shebang(code)

  parser = tree_sitter.Parser(_JS_LANGUAGE)
  tree = parser.parse(parseable.encode("utf-8"))

  unit = ModuleUnit(
    module_id=module_id,
    code=code,
    tree=tree,
    shebang=shebang,
    _char_at_byte=_build_offset_table(parseable),
  )

  if tree.root_node.has_error:
    bad = _first_error(tree.root_node)
    if bad is None:
      raise ParseError("Unexpected token", module_id)

    start = unit.offset(bad.start_byte)
    line = code.count("\n", 0, start) + 1
    column = start - (code.rfind("\n", 0, start) + 1)
    if bad.is_missing:
      reason = f"Expected {bad.type}"
    else:
      reason = "Unexpected token"
    raise ParseError(reason, module_id, line, column)

  return unit
