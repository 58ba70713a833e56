"""
Reference Classifier.

A single pre-order traversal over a parsed module that decides whether the
module follows the CommonJS convention and schedules the text edits that turn
it into the body of a module wrapper.

Per visited node, the first matching rule applies:

1.  **Assignment to the exports surface**: ``exports.x = ...``,
    ``module.exports.x = ...`` and ``module.exports = { ... }`` with a free base
    name contribute named exports. No edit is made.
2.  **typeof require**: rewritten to ``'function'`` when ``require`` is free.
3.  **Free module/exports/global reference**: sets the usage flag; ``global``
    is rewritten to the helpers' ``commonjsGlobal`` unless ignored.
4.  **Top-level this**: treated as the global object.
5.  **require('literal')**: recorded as a dependency. A bare call statement is
    removed, any other call site is replaced by the dependency's binding.

Children of a matched node are still visited. Branches of ``if`` statements
and conditional expressions whose guard folds to a constant are skipped
entirely (see `cjs_esm.analysis.evaluator`).

Each stack frame carries ``(node, parent, scope, function_depth)``, so no
traversal state is shared between frames.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

import tree_sitter

from cjs_esm.analysis.evaluator import is_truthy
from cjs_esm.analysis.symbol_table import Scope, attach_scopes
from cjs_esm.core.parser import ModuleUnit
from cjs_esm.core.rewriter.patcher import PatchPlan
from cjs_esm.core.scanners import (
  deconflict,
  get_full_name,
  is_reference,
  make_legal_identifier,
  named_children,
  rebinds_this,
  string_value,
  unwrap_parens,
)
from cjs_esm.core.tracer import TraceLogger

logger = logging.getLogger(__name__)

EXPORTS_PATTERN = re.compile(r"^(?:module\.)?exports(?:\.([a-zA-Z_$][a-zA-Z_$0-9]*))?$")

TRACKED_NAMES = frozenset({"module", "exports", "global"})

_BRANCHING_TYPES = frozenset({"if_statement", "ternary_expression"})


@dataclass
class UsageFlags:
  """
  Free references observed in the module. Flags are only ever set.
  """

  module: bool = False
  exports: bool = False
  global_object: bool = False

  def mark(self, name: str) -> None:
    if name == "module":
      self.module = True
    elif name == "exports":
      self.exports = True
    elif name == "global":
      self.global_object = True

  def any(self, ignore_global: bool = False) -> bool:
    return self.module or self.exports or (self.global_object and not ignore_global)


@dataclass
class DependencyRecord:
  """
  One literal ``require`` specifier.

  Attributes:
      source: The specifier string.
      name: Synthetic binding name (``require$$0``...).
      imports_default: True once any call site uses the returned value.
  """

  source: str
  name: str
  imports_default: bool = False


@dataclass
class Classification:
  """
  Everything the planner and emitter need after the traversal.

  Attributes:
      plan: Scheduled text edits over the original module text.
      usage: Usage flags.
      dependencies: Dependency records in emission order (the most recently
          discovered specifier first).
      named_exports: Configured names followed by detected names, deduplicated.
      helpers_name: Namespace binding for the runtime helpers.
      is_commonjs: False when nothing CommonJS-like was observed.
  """

  plan: PatchPlan
  usage: UsageFlags
  dependencies: List[DependencyRecord]
  named_exports: List[str]
  helpers_name: str
  is_commonjs: bool


def object_literal_keys(node: tree_sitter.Node) -> Iterator[str]:
  """
  Yields the plain identifier keys of an object literal.

  String, numeric and computed keys and spread elements are skipped.
  """
  for prop in named_children(node):
    if prop.type == "shorthand_property_identifier":
      yield prop.text.decode("utf-8")
    elif prop.type in ("pair", "method_definition"):
      key = prop.child_by_field_name("key" if prop.type == "pair" else "name")
      if key is not None and key.type == "property_identifier":
        yield key.text.decode("utf-8")


class ReferenceClassifier:
  """
  Classifies one module and builds its patch plan.
  """

  def __init__(
    self,
    unit: ModuleUnit,
    helpers_name: Optional[str] = None,
    ignore_global: bool = False,
    source_map: bool = False,
    named_exports: Optional[Iterable[str]] = None,
    tracer: Optional[TraceLogger] = None,
  ):
    """
    Initializes the classifier.

    Args:
        unit: The parsed module.
        helpers_name: Helpers namespace; derived from the source text when omitted.
        ignore_global: If True, ``global`` and top-level ``this`` are left alone.
        source_map: If True, every visited node anchors the position map.
        named_exports: Names configured by the caller for this module.
        tracer: Event sink; a private one is created when omitted.
    """
    self.unit = unit
    self.helpers_name = helpers_name or deconflict("commonjsHelpers", unit.code)
    self.ignore_global = ignore_global
    self.source_map = source_map
    self.tracer = tracer or TraceLogger()

    self.plan = PatchPlan(unit.code)
    self.usage = UsageFlags()
    self.named_exports: Dict[str, None] = dict.fromkeys(named_exports or ())

    self._required: Dict[str, DependencyRecord] = {}
    self._sources: List[str] = []
    self._uid = 0

  @property
  def global_accessor(self) -> str:
    return f"{self.helpers_name}.commonjsGlobal"

  def classify(self) -> Classification:
    """
    Runs the traversal.

    Returns:
        Classification: The plan and metadata of the module.
    """
    scopes = attach_scopes(self.unit.root)
    stack = [(self.unit.root, None, scopes.root, 0)]

    while stack:
      node, parent, scope, depth = stack.pop()

      inner = scopes.scope_for(node)
      if inner is not None:
        scope = inner
      if rebinds_this(node, parent):
        depth += 1

      if self.source_map:
        start, end = self.unit.span(node)
        self.plan.add_mapping_location(start)
        self.plan.add_mapping_location(end)

      visitor = getattr(self, f"visit_{node.type}", None)
      if visitor is not None:
        visitor(node, parent, scope, depth)

      for child in reversed(self._live_children(node, scope)):
        stack.append((child, node, scope, depth))

    return Classification(
      plan=self.plan,
      usage=self.usage,
      dependencies=[self._required[source] for source in self._sources],
      named_exports=list(self.named_exports),
      helpers_name=self.helpers_name,
      is_commonjs=bool(self._sources) or self.usage.any(self.ignore_global),
    )

  def _live_children(self, node: tree_sitter.Node, scope: Scope) -> List[tree_sitter.Node]:
    """Named children, minus a branch the guard proves unreachable."""
    children = named_children(node)
    if node.type not in _BRANCHING_TYPES:
      return children

    guard = is_truthy(node.child_by_field_name("condition"), scope)
    if guard is None:
      return children

    dead = node.child_by_field_name("alternative" if guard else "consequence")
    if dead is None:
      return children

    self.tracer.log_inspection(self.unit.text(node.child_by_field_name("condition")), "pruned", dead.type)
    return [child for child in children if child.id != dead.id]

  # --- Rule 1: exports surface ---

  def _add_named_export(self, name: str, origin: str) -> None:
    if name not in self.named_exports:
      self.named_exports[name] = None
      self.tracer.log_named_export(name, origin)

  def visit_assignment_expression(self, node, parent, scope, depth) -> None:
    left = node.child_by_field_name("left")
    if left is not None and left.type == "identifier" and left.text == b"exports" and not scope.contains("exports"):
      self.tracer.log_warning(f"{self.unit.module_id}: `exports` is reassigned; its new properties are not exported")
      return
    if left is None or left.type != "member_expression":
      return

    flattened = get_full_name(left)
    if flattened is None:
      return
    name, keypath = flattened
    if scope.contains(name):
      return

    match = EXPORTS_PATTERN.match(keypath)
    if not match or keypath == "exports":
      return

    right = node.child_by_field_name("right")
    if keypath == "module.exports" and right is not None and unwrap_parens(right).type == "object":
      for key in object_literal_keys(unwrap_parens(right)):
        if key == make_legal_identifier(key):
          self._add_named_export(key, keypath)
      return

    if match.group(1):
      self._add_named_export(match.group(1), keypath)

  visit_augmented_assignment_expression = visit_assignment_expression

  # --- Rule 2: typeof require ---

  def visit_unary_expression(self, node, parent, scope, depth) -> None:
    operator = node.child_by_field_name("operator")
    argument = node.child_by_field_name("argument")
    if operator is None or operator.type != "typeof" or argument is None:
      return

    argument = unwrap_parens(argument)
    if argument.type == "identifier" and argument.text == b"require" and not scope.contains("require"):
      self._overwrite(node, "'function'")

  # --- Rule 3: free module / exports / global ---

  def visit_identifier(self, node, parent, scope, depth) -> None:
    name = node.text.decode("utf-8")
    if name not in TRACKED_NAMES or not is_reference(node, parent) or scope.contains(name):
      return

    self.usage.mark(name)
    if name != "global" or self.ignore_global:
      return

    if node.type == "shorthand_property_identifier":
      self._overwrite(node, f"global: {self.global_accessor}")
    else:
      self._overwrite(node, self.global_accessor)

  visit_shorthand_property_identifier = visit_identifier

  # --- Rule 4: top-level this ---

  def visit_this(self, node, parent, scope, depth) -> None:
    if depth != 0 or self.ignore_global:
      return
    self.usage.global_object = True
    self._overwrite(node, self.global_accessor, store_name=True)

  # --- Rule 5: require('literal') ---

  def visit_call_expression(self, node, parent, scope, depth) -> None:
    callee = node.child_by_field_name("function")
    if callee is None or callee.type != "identifier" or callee.text != b"require":
      return
    if scope.contains("require"):
      return

    arguments = node.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
      return
    values = named_children(arguments)
    if len(values) != 1 or values[0].type != "string":
      return

    source = string_value(values[0])
    record = self._required.get(source)
    first_seen = record is None
    if first_seen:
      record = DependencyRecord(source=source, name=self._next_binding())
      self._required[source] = record
      # most recently discovered specifier goes first
      self._sources.insert(0, source)
      logger.debug(f"{self.unit.module_id}: require('{source}') -> {record.name}")
    self.tracer.log_dependency(source, record.name, first_seen)

    statement = parent
    while statement is not None and statement.type == "parenthesized_expression":
      statement = statement.parent

    if statement is not None and statement.type == "expression_statement":
      start, end = self.unit.span(statement)
      self.plan.remove(start, end)
      self.tracer.log_patch("remove", self.unit.text(statement), "")
    else:
      record.imports_default = True
      self._overwrite(node, record.name)

  def _next_binding(self) -> str:
    name = deconflict(f"require$${self._uid}", self.unit.code)
    self._uid += 1
    return name

  def _overwrite(self, node: tree_sitter.Node, content: str, store_name: bool = False) -> None:
    start, end = self.unit.span(node)
    self.plan.overwrite(start, end, content, store_name)
    self.tracer.log_patch("replace", self.unit.code[start:end], content)


def classify_module(
  unit: ModuleUnit,
  ignore_global: bool = False,
  source_map: bool = False,
  named_exports: Optional[Iterable[str]] = None,
  tracer: Optional[TraceLogger] = None,
) -> Classification:
  """
  Convenience wrapper around `ReferenceClassifier`.

  Args:
      unit: The parsed module.
      ignore_global: Leave ``global``/``this`` untouched.
      source_map: Collect position-map anchors.
      named_exports: Caller-configured names.
      tracer: Optional event sink.

  Returns:
      Classification: Result of the traversal.
  """
  classifier = ReferenceClassifier(
    unit,
    ignore_global=ignore_global,
    source_map=source_map,
    named_exports=named_exports,
    tracer=tracer,
  )
  return classifier.classify()
