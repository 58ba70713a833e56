"""
Lexical Scope Analysis.

This module answers one question for the classifier: *is this name bound
locally at this point of the module?* A reference to ``require``, ``module``,
``exports`` or ``global`` only counts as CommonJS usage when the name is free.

`attach_scopes` runs once per module, before classification, and attaches a
`Scope` to every node that opens one:

1.  **Functions** (declarations, expressions, generators, arrows, methods):
    parameters are bound in the function scope; a named function expression
    also binds its own name there.
2.  **Blocks** that are not a function body, and ``for`` loop heads.
3.  **Catch clauses**, binding the catch parameter.

``var``, function declarations and class declarations hoist through block
scopes to the nearest function (or root) scope, ``let``/``const`` bind in the
current block, and ES module imports bind in the root scope. Declarations are
collected for the whole scope before classification starts, so hoisted names
are visible everywhere in their scope.

The resulting scopes are read-only afterwards. The classifier does not move a
shared cursor around: each traversal frame carries the scope it is in.
"""

from typing import Dict, Iterable, List, Optional, Set

import tree_sitter

from cjs_esm.core.scanners import FUNCTION_TYPES, named_children

_HOISTED_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration", "class_declaration"})
_NAMED_FUNCTION_EXPRESSIONS = frozenset({"function_expression", "function", "generator_function"})
_LOOP_TYPES = frozenset({"for_statement", "for_in_statement"})


class Scope:
  """
  Names bound in one lexical block or function.
  """

  def __init__(self, parent: Optional["Scope"] = None, block: bool = False, params: Iterable[str] = ()):
    """
    Initialize the scope.

    Args:
        parent: The enclosing scope (None for the module root).
        block: True for block and catch scopes, which ``var`` skips over.
        params: Names bound on entry (function or catch parameters).
    """
    self.parent = parent
    self.is_block_scope = block
    self.declarations: Set[str] = set(params)

  def add_declaration(self, names: Iterable[str], is_block_declaration: bool) -> None:
    """
    Binds names, hoisting non-block declarations out of block scopes.

    Args:
        names: Identifiers introduced by one declaration.
        is_block_declaration: True for ``let``/``const``.
    """
    scope = self
    while not is_block_declaration and scope.is_block_scope and scope.parent is not None:
      scope = scope.parent
    scope.declarations.update(names)

  def contains(self, name: str) -> bool:
    """
    Resolve a name through the scope chain.

    Args:
        name: Identifier to look up.

    Returns:
        bool: True if some scope from here to the root binds it.
    """
    scope: Optional[Scope] = self
    while scope is not None:
      if name in scope.declarations:
        return True
      scope = scope.parent
    return False


class ScopeMap:
  """
  Scopes attached to the nodes that open them.
  """

  def __init__(self, root: Scope):
    self.root = root
    self._by_node: Dict[int, Scope] = {}

  def attach(self, node: tree_sitter.Node, scope: Scope) -> None:
    self._by_node[node.id] = scope

  def scope_for(self, node: tree_sitter.Node) -> Optional[Scope]:
    """
    Returns the scope opened by `node`, or None if it opens none.
    """
    return self._by_node.get(node.id)


def extract_names(pattern: Optional[tree_sitter.Node]) -> List[str]:
  """
  Collects every identifier bound by a declaration target or pattern.

  Args:
      pattern: An identifier or a destructuring pattern.

  Returns:
      List[str]: Bound names, in source order.
  """
  if pattern is None:
    return []

  kind = pattern.type
  if kind in ("identifier", "shorthand_property_identifier_pattern"):
    return [pattern.text.decode("utf-8")]

  if kind == "pair_pattern":
    return extract_names(pattern.child_by_field_name("value"))

  if kind in ("assignment_pattern", "object_assignment_pattern"):
    return extract_names(pattern.child_by_field_name("left"))

  if kind in ("object_pattern", "array_pattern", "rest_pattern"):
    names: List[str] = []
    for child in named_children(pattern):
      names.extend(extract_names(child))
    return names

  return []


def _parameter_names(node: tree_sitter.Node) -> List[str]:
  single = node.child_by_field_name("parameter")
  if single is not None:
    return extract_names(single)

  params = node.child_by_field_name("parameters")
  if params is None:
    return []

  names: List[str] = []
  for param in named_children(params):
    names.extend(extract_names(param))
  return names


def _import_names(node: tree_sitter.Node) -> List[str]:
  names: List[str] = []
  for clause in named_children(node):
    if clause.type != "import_clause":
      continue
    for part in named_children(clause):
      if part.type == "identifier":
        names.append(part.text.decode("utf-8"))
      elif part.type == "namespace_import":
        for child in named_children(part):
          names.extend(extract_names(child))
      elif part.type == "named_imports":
        for spec in named_children(part):
          if spec.type != "import_specifier":
            continue
          bound = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
          if bound is not None and bound.type == "identifier":
            names.append(bound.text.decode("utf-8"))
  return names


def _declare(node: tree_sitter.Node, scope: Scope) -> None:
  """Records the bindings a statement introduces into the current scope."""
  kind = node.type

  if kind in _HOISTED_DECLARATIONS:
    scope.add_declaration(extract_names(node.child_by_field_name("name")), is_block_declaration=False)

  elif kind in ("variable_declaration", "lexical_declaration"):
    is_block = kind == "lexical_declaration"
    for declarator in named_children(node):
      if declarator.type == "variable_declarator":
        scope.add_declaration(extract_names(declarator.child_by_field_name("name")), is_block)

  elif kind == "import_statement":
    scope.add_declaration(_import_names(node), is_block_declaration=False)

  elif kind == "for_in_statement":
    # for (const x of xs) carries its declaration kind as a field, not a declaration node
    declaration_kind = node.child_by_field_name("kind")
    if declaration_kind is not None:
      is_block = declaration_kind.type in ("let", "const")
      scope.add_declaration(extract_names(node.child_by_field_name("left")), is_block)


def _open_scope(node: tree_sitter.Node, parent: Optional[tree_sitter.Node], scope: Scope) -> Optional[Scope]:
  """Creates the scope `node` opens, if any."""
  kind = node.type

  if kind in FUNCTION_TYPES:
    inner = Scope(parent=scope, block=False, params=_parameter_names(node))
    # named function expressions: the name belongs to the function's own scope
    if kind in _NAMED_FUNCTION_EXPRESSIONS:
      inner.add_declaration(extract_names(node.child_by_field_name("name")), is_block_declaration=False)
    return inner

  if kind == "statement_block" and (parent is None or parent.type not in FUNCTION_TYPES):
    return Scope(parent=scope, block=True)

  if kind in _LOOP_TYPES:
    return Scope(parent=scope, block=True)

  if kind == "catch_clause":
    return Scope(parent=scope, block=True, params=extract_names(node.child_by_field_name("parameter")))

  return None


def attach_scopes(root: tree_sitter.Node) -> ScopeMap:
  """
  Builds the scope tree for a module.

  Args:
      root: The ``program`` node.

  Returns:
      ScopeMap: The root scope plus the scope opened by each scoping node.
  """
  scopes = ScopeMap(Scope())
  stack = [(root, None, scopes.root)]

  while stack:
    node, parent, scope = stack.pop()

    inner = _open_scope(node, parent, scope)

    # loop heads declare into the loop scope, everything else into the enclosing one
    _declare(node, inner if inner is not None and node.type in _LOOP_TYPES else scope)

    if inner is not None:
      scopes.attach(node, inner)
      scope = inner

    for child in reversed(node.children):
      if child.is_named:
        stack.append((child, node, scope))

  return scopes
