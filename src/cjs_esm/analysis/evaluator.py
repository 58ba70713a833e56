"""
Static Guard Evaluator.

Constant-folds the guard of an ``if`` statement or conditional expression to
``True``, ``False`` or ``None`` (cannot be evaluated). The classifier uses the
result to skip branches that can never run, which keeps cross-convention guard
idioms (``typeof module !== 'undefined' && ...``) from producing false
CommonJS signals.

Rules, applied in order:

1.  A literal evaluates to its truthiness.
2.  A parenthesized expression delegates to its inner expression.
3.  ``==``, ``!=``, ``===``, ``!==`` compare two literal operands only
    (abstract vs strict equality); anything else is unknown.
4.  ``!`` negates its operand; unknown stays unknown.
5.  ``&&`` / ``||`` need *both* operands to be known. Short-circuit truth
    tables are deliberately not applied to a single unknown operand.

``typeof`` applied to a free ``module``/``exports`` folds to ``'object'`` and
applied to a free ``require`` folds to ``'function'``: those are the values the
names have inside the emitted wrapper.
"""

import math
import re
from typing import Any, Callable, Dict, Optional, Tuple

import tree_sitter

from cjs_esm.analysis.symbol_table import Scope
from cjs_esm.core.scanners import named_children, string_value, unwrap_parens

Literal = Tuple[str, Any]
"""A ``(kind, value)`` pair; kind is one of string, number, boolean, null, regex."""

TYPEOF_FOLDS = {"module": "object", "exports": "object", "require": "function"}

_NUMERIC_STRING = re.compile(r"^[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)$")


def parse_number(raw: str) -> float:
  """
  Parses a JavaScript numeric literal.

  Handles hex/octal/binary prefixes, legacy octal (``017``), numeric
  separators and the BigInt ``n`` suffix.

  Args:
      raw: Literal text as written in the source.

  Returns:
      float: The numeric value.
  """
  text = raw.replace("_", "")
  if text.endswith("n"):
    text = text[:-1]

  lowered = text.lower()
  if lowered.startswith("0x"):
    return float(int(lowered[2:], 16))
  if lowered.startswith("0o"):
    return float(int(lowered[2:], 8))
  if lowered.startswith("0b"):
    return float(int(lowered[2:], 2))
  if len(text) > 1 and text[0] == "0" and text.isdigit() and not set(text) & {"8", "9"}:
    return float(int(text, 8))
  return float(text)


def to_number(literal: Literal) -> float:
  """ToNumber for a literal, as used by abstract equality."""
  kind, value = literal
  if kind == "number":
    return value
  if kind == "boolean":
    return 1.0 if value else 0.0
  if kind == "null":
    return 0.0
  if kind == "string":
    stripped = value.strip()
    if not stripped:
      return 0.0
    if stripped in ("Infinity", "+Infinity"):
      return math.inf
    if stripped == "-Infinity":
      return -math.inf
    try:
      if stripped.lower().startswith(("0x", "0o", "0b")):
        return parse_number(stripped)
      if _NUMERIC_STRING.match(stripped):
        return float(stripped)
    except ValueError:
      pass
  return math.nan


def literal_value(node: tree_sitter.Node, scope: Optional[Scope] = None) -> Optional[Literal]:
  """
  Reads the constant value of a literal node.

  Args:
      node: Any expression node.
      scope: The scope at the node, used to fold ``typeof`` probes.

  Returns:
      Optional[Literal]: ``(kind, value)`` or None if the node is not constant.
  """
  if node.type == "string":
    return ("string", string_value(node))
  if node.type == "number":
    try:
      return ("number", parse_number(node.text.decode("utf-8")))
    except ValueError:
      return None
  if node.type == "true":
    return ("boolean", True)
  if node.type == "false":
    return ("boolean", False)
  if node.type == "null":
    return ("null", None)
  if node.type == "regex":
    return ("regex", node.text.decode("utf-8"))

  if scope is not None and node.type == "unary_expression" and _operator(node) == "typeof":
    argument = node.child_by_field_name("argument")
    if argument is not None and argument.type == "identifier":
      name = argument.text.decode("utf-8")
      if name in TYPEOF_FOLDS and not scope.contains(name):
        return ("string", TYPEOF_FOLDS[name])

  return None


def truthiness(literal: Literal) -> bool:
  """ToBoolean for a literal."""
  kind, value = literal
  if kind == "string":
    return value != ""
  if kind == "number":
    return value != 0 and not math.isnan(value)
  if kind == "boolean":
    return value
  if kind == "null":
    return False
  return True


def strict_equals(a: Literal, b: Literal) -> bool:
  """``===`` between two literals."""
  if a[0] != b[0] or a[0] == "regex":
    # two regex literals are two distinct objects
    return False
  return a[1] == b[1]


def loose_equals(a: Literal, b: Literal) -> bool:
  """``==`` between two literals (abstract equality)."""
  if a[0] == b[0]:
    return strict_equals(a, b)
  if a[0] == "null" or b[0] == "null":
    return False
  if a[0] == "boolean":
    return loose_equals(("number", to_number(a)), b)
  if b[0] == "boolean":
    return loose_equals(a, ("number", to_number(b)))
  if a[0] == "regex":
    return loose_equals(("string", a[1]), b)
  if b[0] == "regex":
    return loose_equals(a, ("string", b[1]))
  return to_number(a) == to_number(b)


def _operator(node: tree_sitter.Node) -> Optional[str]:
  op = node.child_by_field_name("operator")
  return op.type if op is not None else None


def _not(value: Optional[bool]) -> Optional[bool]:
  return None if value is None else not value


def _equals(node: tree_sitter.Node, scope: Optional[Scope], strict: bool) -> Optional[bool]:
  left = literal_value(unwrap_parens(node.child_by_field_name("left")), scope)
  right = literal_value(unwrap_parens(node.child_by_field_name("right")), scope)
  if left is None or right is None:
    return None
  return strict_equals(left, right) if strict else loose_equals(left, right)


def _both(node: tree_sitter.Node, scope: Optional[Scope]) -> Tuple[Optional[bool], Optional[bool]]:
  return (
    is_truthy(node.child_by_field_name("left"), scope),
    is_truthy(node.child_by_field_name("right"), scope),
  )


def _and(node: tree_sitter.Node, scope: Optional[Scope]) -> Optional[bool]:
  left, right = _both(node, scope)
  if left is None or right is None:
    return None
  return left and right


def _or(node: tree_sitter.Node, scope: Optional[Scope]) -> Optional[bool]:
  left, right = _both(node, scope)
  if left is None or right is None:
    return None
  return left or right


_OPERATORS: Dict[str, Callable[[tree_sitter.Node, Optional[Scope]], Optional[bool]]] = {
  "==": lambda n, s: _equals(n, s, strict=False),
  "!=": lambda n, s: _not(_equals(n, s, strict=False)),
  "===": lambda n, s: _equals(n, s, strict=True),
  "!==": lambda n, s: _not(_equals(n, s, strict=True)),
  "!": lambda n, s: is_falsy(n.child_by_field_name("argument"), s),
  "&&": _and,
  "||": _or,
}


def is_truthy(node: Optional[tree_sitter.Node], scope: Optional[Scope] = None) -> Optional[bool]:
  """
  Statically evaluates a node in boolean context.

  Args:
      node: The guard expression.
      scope: Scope at the guard; enables ``typeof`` folding of free handles.

  Returns:
      Optional[bool]: True/False when decidable, None when unknown.
  """
  if node is None:
    return None

  literal = literal_value(node, None)
  if literal is not None:
    return truthiness(literal)

  if node.type == "parenthesized_expression":
    inner = named_children(node)
    if len(inner) != 1:
      return None
    return is_truthy(inner[0], scope)

  if node.type in ("binary_expression", "unary_expression"):
    handler = _OPERATORS.get(_operator(node))
    if handler is not None:
      return handler(node, scope)

  return None


def is_falsy(node: Optional[tree_sitter.Node], scope: Optional[Scope] = None) -> Optional[bool]:
  """Negation of `is_truthy`, preserving unknown."""
  return _not(is_truthy(node, scope))
