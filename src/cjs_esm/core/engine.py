"""
Orchestration Engine for Module Transforms.

This module provides the `TransformEngine`, the driver that converts one
CommonJS module into an ES module. The pipeline consists of:

1.  **First Pass**: A regex over the raw text. Modules that never mention
    ``require``, ``module``, ``exports`` (or ``global``) are returned untouched.
2.  **Parsing**: tree-sitter parse, with the module identity attached to failures.
3.  **Classification**: Scope-aware walk collecting usage flags, dependencies
    and named exports while scheduling text edits.
4.  **Planning**: Import block, wrapper and export block.
5.  **Emission**: Patched text plus an optional Source Map.

A ``None`` result means "not a CommonJS module, leave it alone". Every call
gets its own `TraceLogger`; its events are returned with the result.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from cjs_esm.core.emitter import emit
from cjs_esm.core.parser import parse_module
from cjs_esm.core.planner import plan_module
from cjs_esm.core.rewriter.classifier import ReferenceClassifier
from cjs_esm.core.scanners import has_commonjs_keywords
from cjs_esm.core.tracer import TraceLogger
from cjs_esm.errors import ConfigurationError
from cjs_esm.utils.sourcemap import SourceMap

logger = logging.getLogger(__name__)


class TransformResult(BaseModel):
  """
  Structured result of a single module transform.
  """

  code: str = Field(description="The emitted ES module source.")
  map: Optional[SourceMap] = Field(default=None, description="Position map back to the original module.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="A log of internal trace events.")


class TransformEngine:
  """
  Transforms CommonJS modules with one fixed set of options.
  """

  def __init__(self, ignore_global: bool = False, source_map: bool = False):
    """
    Initializes the Engine.

    Args:
        ignore_global: If True, ``global`` and top-level ``this`` are neither
            rewritten nor counted as CommonJS usage.
        source_map: If True, results carry a Source Map.
    """
    self.ignore_global = ignore_global
    self.source_map = source_map

  def run(
    self,
    code: str,
    module_id: str,
    is_entry: bool = False,
    named_exports: Optional[Iterable[str]] = None,
  ) -> Optional[TransformResult]:
    """
    Executes the pipeline on one module.

    Args:
        code: Module source text.
        module_id: Module identity, usually the resolved path.
        is_entry: Whether this is the bundle's entry module.
        named_exports: Names the caller asserts the module exports.

    Returns:
        Optional[TransformResult]: The transformed module, or None if the
        module does not use CommonJS.

    Raises:
        ParseError: If the module looks like CommonJS but does not parse.
        ConfigurationError: If named exports were configured for a module
            that turns out not to be CommonJS.
    """
    configured = list(named_exports or [])
    tracer = TraceLogger()
    tracer.start_phase("Transform", module_id)

    if not has_commonjs_keywords(code, self.ignore_global):
      logger.debug(f"{module_id}: no CommonJS keywords")
      if configured:
        raise ConfigurationError(module_id)
      return None

    tracer.start_phase("Parsing")
    unit = parse_module(code, module_id)
    tracer.end_phase()

    tracer.start_phase("Classification")
    classifier = ReferenceClassifier(
      unit,
      ignore_global=self.ignore_global,
      source_map=self.source_map,
      named_exports=configured,
      tracer=tracer,
    )
    classification = classifier.classify()
    tracer.end_phase()

    if not classification.is_commonjs:
      logger.debug(f"{module_id}: not a CommonJS module")
      if configured:
        raise ConfigurationError(module_id)
      return None

    plan = classification.plan
    if unit.shebang is not None:
      plan.remove(*unit.shebang)

    tracer.start_phase("Planning")
    module_plan = plan_module(classification, module_id, code, is_entry)
    plan.prepend(module_plan.prologue)
    plan.append(module_plan.epilogue)
    tracer.end_phase()

    tracer.start_phase("Emission")
    emitted = emit(plan, module_id, self.source_map)
    tracer.end_phase()
    tracer.end_phase()

    logger.debug(
      f"{module_id}: {len(classification.dependencies)} dependencies, "
      f"{len(classification.named_exports)} named exports"
    )
    return TransformResult(code=emitted.code, map=emitted.map, trace_events=tracer.export())


def transform(
  code: str,
  module_id: str,
  is_entry: bool = False,
  ignore_global: bool = False,
  named_exports: Optional[Iterable[str]] = None,
  source_map: bool = False,
) -> Optional[TransformResult]:
  """
  Transforms one CommonJS module into an ES module.

  Args:
      code: Module source text.
      module_id: Module identity.
      is_entry: Entry modules do not export ``__moduleExports``.
      ignore_global: Leave ``global``/``this`` untouched.
      named_exports: Caller-configured named exports.
      source_map: Also produce a Source Map.

  Returns:
      Optional[TransformResult]: The result, or None for non-CommonJS modules.
  """
  engine = TransformEngine(ignore_global=ignore_global, source_map=source_map)
  return engine.run(code, module_id, is_entry=is_entry, named_exports=named_exports)
