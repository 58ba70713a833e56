"""
Export/Import Planner.

Turns a `Classification` into the synthetic text around the module body:

1.  **Import block**: the helpers namespace import, one side-effect import per
    dependency (in dependency order), then one proxy import per dependency,
    binding the dependency's value when some call site used it.
2.  **Wrapper**: ``var <name> = <helpers>.createCommonjsModule(function (module[, exports]) {``
    ... ``});``. ``exports`` is a parameter only when the body references it.
3.  **Export block**: ``__moduleExports`` (not for the entry module), the
    default export (unwrapped through the helpers when the raw text mentions
    ``__esModule``), and one live read-through binding per named export.
"""

import os
from dataclasses import dataclass
from typing import Iterable, List

from cjs_esm.core.rewriter.classifier import Classification, DependencyRecord, UsageFlags
from cjs_esm.core.scanners import make_legal_identifier

HELPERS_ID = "\0commonjsHelpers"
PROXY_PREFIX = "\0commonjs-proxy:"
EXTERNAL_PREFIX = "\0commonjs-external:"

INTEROP_MARKER = "__esModule"

RESERVED_WORDS = frozenset(
  (
    "abstract arguments boolean break byte case catch char class const continue debugger default delete do "
    "double else enum eval export extends false final finally float for function goto if implements import in "
    "instanceof int interface let long native new null package private protected public return short static "
    "super switch synchronized this throw throws transient true try typeof var void volatile while with yield"
  ).split()
)

BLACKLISTED_EXPORTS = RESERVED_WORDS | {INTEROP_MARKER}


@dataclass
class ModulePlan:
  """
  Synthetic text surrounding the transformed body.
  """

  name: str
  import_block: str
  wrapper_start: str
  wrapper_end: str
  export_block: str

  @property
  def prologue(self) -> str:
    return self.import_block + self.wrapper_start

  @property
  def epilogue(self) -> str:
    return self.wrapper_end + self.export_block


def module_name(module_id: str) -> str:
  """
  Legal identifier derived from the module's basename without extension.

  Example:
      ``/src/my-lib.js`` -> ``myLib``
  """
  stem, _ = os.path.splitext(os.path.basename(module_id))
  return make_legal_identifier(stem)


def quote_specifier(specifier: str) -> str:
  """Single-quoted JavaScript string literal for an import specifier."""
  escaped = specifier.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n").replace("\r", "\\r")
  return f"'{escaped}'"


def build_import_block(helpers_name: str, dependencies: List[DependencyRecord]) -> str:
  lines = [f"import * as {helpers_name} from {quote_specifier(HELPERS_ID)};"]
  # the actual module is imported before its proxy, so the proxy knows what it wraps
  lines.extend(f"import {quote_specifier(dep.source)};" for dep in dependencies)
  for dep in dependencies:
    binding = f"{dep.name} from " if dep.imports_default else ""
    lines.append(f"import {binding}{quote_specifier(PROXY_PREFIX + dep.source)};")
  return "\n".join(lines)


def wrapper_args(usage: UsageFlags) -> str:
  return "module, exports" if usage.exports else "module"


def build_export_block(name: str, helpers_name: str, named_exports: Iterable[str], code: str, is_entry: bool) -> str:
  """
  Builds the trailing export statements.

  Args:
      name: The wrapped module binding.
      helpers_name: Helpers namespace binding.
      named_exports: Candidate names; blacklisted ones are dropped here.
      code: Raw module text, searched for the interop marker.
      is_entry: Entry modules do not expose ``__moduleExports``.

  Returns:
      str: Newline-joined export statements.
  """
  lines = [] if is_entry else [f"export {{ {name} as __moduleExports }};"]

  # textual check, so the marker counts even inside a comment or string
  if INTEROP_MARKER in code:
    lines.append(f"export default {helpers_name}.unwrapExports({name});\n")
  else:
    lines.append(f"export default {name};\n")

  for export in named_exports:
    if export in BLACKLISTED_EXPORTS:
      continue
    if export == name:
      lines.append(f"var {export}$$1 = {name}.{export};\nexport {{ {export}$$1 as {export} }};")
    else:
      lines.append(f"export var {export} = {name}.{export};")

  return "\n".join(lines)


def plan_module(classification: Classification, module_id: str, code: str, is_entry: bool = False) -> ModulePlan:
  """
  Plans the synthetic prologue and epilogue of a module.

  Args:
      classification: Result of the reference classifier.
      module_id: Module identity (its basename names the wrapped binding).
      code: Raw module text.
      is_entry: Whether the module is the bundle entry.

  Returns:
      ModulePlan: The planned text.
  """
  name = module_name(module_id)
  helpers_name = classification.helpers_name
  args = wrapper_args(classification.usage)

  return ModulePlan(
    name=name,
    import_block=build_import_block(helpers_name, classification.dependencies),
    wrapper_start=f"\n\nvar {name} = {helpers_name}.createCommonjsModule(function ({args}) {{\n",
    wrapper_end="\n});\n\n",
    export_block=build_export_block(name, helpers_name, classification.named_exports, code, is_entry),
  )
