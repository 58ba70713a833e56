"""
Syntax Helpers for CommonJS Detection.

Small, stateless predicates over tree-sitter nodes that the classifier and the
scope tracker share:

1.  `has_commonjs_keywords`: the cheap textual first pass that rejects modules
    which never mention ``require``/``module``/``exports``/``global``.
2.  `get_full_name`: flattens a non-computed member chain (``module.exports.foo``)
    to a dotted key path.
3.  `is_reference`: decides whether an identifier occurrence reads a binding,
    as opposed to naming a property, a method or an export alias.
4.  `string_value`: decodes a string literal to its runtime value.
5.  `make_legal_identifier` / `deconflict`: synthetic name generation.
"""

import re
from typing import List, Optional, Tuple

import tree_sitter

FUNCTION_TYPES = frozenset(
  {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
  }
)
"""Node types that open a function scope."""

THIS_BINDING_TYPES = (FUNCTION_TYPES - {"arrow_function"}) | {"class_static_block"}
"""Node types that rebind ``this``; arrows inherit it lexically."""

_FIRSTPASS_GLOBAL = re.compile(r"\b(?:require|module|exports|global)\b")
_FIRSTPASS_NO_GLOBAL = re.compile(r"\b(?:require|module|exports)\b")

_RESERVED = (
  "break case class catch const continue debugger default delete do else export extends finally for function if "
  "import in instanceof let new return super switch this throw try typeof var void while with yield enum await "
  "implements package protected static interface private public"
).split()
_BUILTINS = (
  "Infinity NaN undefined null true false eval uneval isFinite isNaN parseFloat parseInt decodeURI "
  "decodeURIComponent encodeURI encodeURIComponent escape unescape Object Function Boolean Symbol Error "
  "EvalError InternalError RangeError ReferenceError SyntaxError TypeError URIError Number Math Date String "
  "RegExp Array Int8Array Uint8Array Uint8ClampedArray Int16Array Uint16Array Int32Array Uint32Array "
  "Float32Array Float64Array Map Set WeakMap WeakSet SIMD ArrayBuffer DataView JSON Promise Generator "
  "GeneratorFunction Reflect Proxy Intl"
).split()
_ILLEGAL_NAMES = frozenset(_RESERVED + _BUILTINS)

_SIMPLE_ESCAPES = {
  "n": "\n",
  "t": "\t",
  "r": "\r",
  "b": "\b",
  "f": "\f",
  "v": "\v",
  "0": "\0",
}


def has_commonjs_keywords(code: str, ignore_global: bool = False) -> bool:
  """
  Textual first pass: could this module use CommonJS at all?

  Args:
      code: Raw module text.
      ignore_global: If True, a bare ``global`` does not count.

  Returns:
      bool: False when none of the tracked words appear anywhere.
  """
  pattern = _FIRSTPASS_NO_GLOBAL if ignore_global else _FIRSTPASS_GLOBAL
  return pattern.search(code) is not None


def named_children(node: tree_sitter.Node) -> List[tree_sitter.Node]:
  """Named children of a node, without interleaved comments."""
  return [child for child in node.named_children if child.type != "comment"]


def unwrap_parens(node: tree_sitter.Node) -> tree_sitter.Node:
  """Strips any number of ``( ... )`` wrappers."""
  while node.type == "parenthesized_expression":
    inner = named_children(node)
    if len(inner) != 1:
      break
    node = inner[0]
  return node


def get_full_name(node: tree_sitter.Node) -> Optional[Tuple[str, str]]:
  """
  Flattens a member chain to its base name and dotted key path.

  Args:
      node: An expression node, typically a ``member_expression``.

  Returns:
      Optional[Tuple[str, str]]: ``(base_name, keypath)``, e.g.
      ``("module", "module.exports.foo")``. None if any link is computed,
      optional or private, or if the base is not a plain identifier.

  Example:
      ``module.exports.foo`` -> ``("module", "module.exports.foo")``
  """
  parts = []
  node = unwrap_parens(node)

  while node.type == "member_expression":
    if node.child_by_field_name("optional_chain") is not None:
      return None
    prop = node.child_by_field_name("property")
    if prop is None or prop.type != "property_identifier":
      return None
    parts.insert(0, prop.text.decode("utf-8"))
    node = unwrap_parens(node.child_by_field_name("object"))

  if node.type != "identifier":
    return None

  name = node.text.decode("utf-8")
  parts.insert(0, name)
  return name, ".".join(parts)


def _is_field(parent: tree_sitter.Node, field: str, node: tree_sitter.Node) -> bool:
  child = parent.child_by_field_name(field)
  return child is not None and child.id == node.id


def rebinds_this(node: tree_sitter.Node, parent: Optional[tree_sitter.Node]) -> bool:
  """
  Checks whether ``this`` means something else inside `node`.

  Non-arrow functions and static blocks rebind it, and so does the
  initializer of a class field (``x = this``). A computed field key
  (``[this.k] = 1``) still sees the enclosing ``this``.
  """
  if node.type in THIS_BINDING_TYPES:
    return True
  return parent is not None and parent.type == "field_definition" and _is_field(parent, "value", node)


def is_reference(node: tree_sitter.Node, parent: Optional[tree_sitter.Node]) -> bool:
  """
  Checks whether an identifier occurrence reads a binding.

  Excluded positions: the property side of a non-computed member access, the
  key of an object property, a method name, the exported name in
  ``export { foo as bar }`` and the imported name in ``import { foo as bar }``.

  Args:
      node: The identifier node.
      parent: Its parent node.

  Returns:
      bool: True for a true reference position.
  """
  if parent is None:
    return True

  if parent.type == "member_expression":
    return _is_field(parent, "object", node)

  # disregard the `bar` in { bar: foo }
  if parent.type == "pair":
    return _is_field(parent, "value", node)

  # disregard the `bar` in `class Foo { bar () {...} }`
  if parent.type == "method_definition":
    return False

  # disregard the `bar` in `export { foo as bar }`
  if parent.type == "export_specifier":
    return not _is_field(parent, "alias", node)

  if parent.type == "import_specifier" and parent.child_by_field_name("alias") is not None:
    return not _is_field(parent, "name", node)

  return True


def _decode_escape(body: str, i: int) -> Tuple[str, int]:
  """Decodes the escape sequence starting after the backslash at ``body[i]``."""
  char = body[i]

  if char in _SIMPLE_ESCAPES and not (char == "0" and i + 1 < len(body) and body[i + 1].isdigit()):
    return _SIMPLE_ESCAPES[char], i + 1

  if char == "x":
    return chr(int(body[i + 1 : i + 3], 16)), i + 3

  if char == "u":
    if body[i + 1] == "{":
      close = body.index("}", i)
      return chr(int(body[i + 2 : close], 16)), close + 1
    code = int(body[i + 1 : i + 5], 16)
    end = i + 5
    # join UTF-16 surrogate pairs written as two escapes
    if 0xD800 <= code <= 0xDBFF and body[end : end + 2] == "\\u":
      low = int(body[end + 2 : end + 6], 16)
      if 0xDC00 <= low <= 0xDFFF:
        return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)), end + 6
    return chr(code), end

  if char in "01234567":
    end = i
    while end < len(body) and end < i + 3 and body[end] in "01234567":
      end += 1
    return chr(int(body[i:end], 8)), end

  # line continuation
  if char == "\r":
    return "", i + 2 if body[i + 1 : i + 2] == "\n" else i + 1
  if char in "\n\u2028\u2029":
    return "", i + 1

  return char, i + 1


def string_value(node: tree_sitter.Node) -> str:
  """
  Decodes a ``string`` literal node to its runtime value.

  Args:
      node: A tree-sitter ``string`` node (quotes included in its text).

  Returns:
      str: The value with escape sequences resolved.
  """
  body = node.text.decode("utf-8")[1:-1]
  if "\\" not in body:
    return body

  out = []
  i = 0
  while i < len(body):
    if body[i] == "\\":
      decoded, i = _decode_escape(body, i + 1)
      out.append(decoded)
    else:
      out.append(body[i])
      i += 1
  return "".join(out)


def make_legal_identifier(name: str) -> str:
  """
  Converts an arbitrary string into a usable JavaScript identifier.

  Dashes followed by a word character become camelCase, other illegal
  characters become underscores, and names that start with a digit or collide
  with a reserved word or builtin get a leading underscore.

  Args:
      name: Candidate name (e.g. a file basename like ``my-module``).

  Returns:
      str: A legal identifier (e.g. ``myModule``).
  """
  name = re.sub(r"-(\w)", lambda m: m.group(1).upper(), name)
  name = re.sub(r"[^$_a-zA-Z0-9]", "_", name)
  if (name and name[0].isdigit()) or name in _ILLEGAL_NAMES:
    name = f"_{name}"
  return name


def deconflict(identifier: str, code: str) -> str:
  """
  Probes ``identifier``, ``identifier_1``, ``identifier_2``... until one does
  not occur anywhere in `code`.

  Args:
      identifier: Preferred synthetic name.
      code: Full module text.

  Returns:
      str: A name absent from the text.
  """
  i = 1
  deconflicted = identifier
  while deconflicted in code:
    deconflicted = f"{identifier}_{i}"
    i += 1
  return deconflicted
