"""
Build Pipeline Adapter.

`CommonJSPlugin` exposes the engine through the three hooks a module bundler
calls per module:

1.  ``resolve_id(importee, importer)``: maps specifiers (including proxy ids)
    to module identities.
2.  ``load(id)``: supplies source for the virtual ids (helpers and proxies).
3.  ``transform(code, id)``: converts CommonJS modules and records them in the
    legacy registry so later proxies can expose them correctly.

The bundler must call ``configure`` once before the first hook and must finish
transforming a dependency before loading its proxy.
"""

import logging
import os
from typing import Optional, Sequence

from cjs_esm.config import RuntimeConfig
from cjs_esm.core.engine import TransformEngine, TransformResult
from cjs_esm.core.registry import LegacyModuleRegistry, get_registry
from cjs_esm.pipeline.filters import create_filter, has_extension
from cjs_esm.pipeline.helpers import (
  EXTERNAL_PREFIX,
  HELPERS,
  HELPERS_ID,
  PROXY_PREFIX,
  commonjs_proxy,
  external_proxy,
)
from cjs_esm.pipeline.resolver import Resolver, default_resolver, first, relative_resolver

logger = logging.getLogger(__name__)


class CommonJSPlugin:
  """
  CommonJS-to-ES-module conversion for a bundler.
  """

  name = "commonjs"

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    resolvers: Optional[Sequence[Resolver]] = None,
    registry: Optional[LegacyModuleRegistry] = None,
    basedir: Optional[str] = None,
  ):
    """
    Initializes the plugin.

    Args:
        config: Options; defaults to `RuntimeConfig()`.
        resolvers: Resolvers of other plugins, consulted before the built-ins.
        registry: Legacy module registry; defaults to the process-wide one.
        basedir: Base directory for named-export keys (defaults to cwd).
    """
    self.config = config or RuntimeConfig()
    self.registry = registry if registry is not None else get_registry()
    self.filter = create_filter(self.config.include or None, self.config.exclude or None)
    self.engine = TransformEngine(ignore_global=self.config.ignore_global, source_map=self.config.source_map)
    self.named_exports = self.config.resolved_named_exports(basedir)

    self._other_resolvers = list(resolvers or [])
    self._resolve_with_others: Resolver = first(self._other_resolvers + [relative_resolver(self.config.extensions)])
    self.entry_id: Optional[str] = None

  def configure(self, entry: Optional[str] = None, resolvers: Optional[Sequence[Resolver]] = None) -> Optional[str]:
    """
    Builds the resolver chain and resolves the entry module.

    Args:
        entry: Entry specifier; defaults to the configured entry.
        resolvers: Replaces the resolvers of other plugins, when given.

    Returns:
        Optional[str]: The resolved entry id.
    """
    if resolvers is not None:
      self._other_resolvers = list(resolvers)
    self._resolve_with_others = first(self._other_resolvers + [relative_resolver(self.config.extensions)])
    entry = entry or self.config.entry
    self.entry_id = self.resolve_id(entry) if entry else None
    logger.debug(f"Entry module: {self.entry_id}")
    return self.entry_id

  def resolve_id(self, importee: str, importer: Optional[str] = None) -> Optional[str]:
    """
    Resolves a specifier, preserving the proxy marker.

    Args:
        importee: Specifier, possibly carrying the proxy prefix.
        importer: Identity of the importing module, possibly a proxy id.

    Returns:
        Optional[str]: A module id, a proxy id, an external proxy id or None.
    """
    if importee == HELPERS_ID:
      return importee

    if importer and importer.startswith(PROXY_PREFIX):
      importer = importer[len(PROXY_PREFIX) :]

    is_proxy = importee.startswith(PROXY_PREFIX)
    if is_proxy:
      importee = importee[len(PROXY_PREFIX) :]

    resolved = self._resolve_with_others(importee, importer)
    if resolved:
      return PROXY_PREFIX + resolved if is_proxy else resolved

    resolved = default_resolver(importee, importer)
    if is_proxy:
      if resolved:
        return PROXY_PREFIX + resolved
      return EXTERNAL_PREFIX + importee

    return resolved

  def load(self, module_id: str) -> Optional[str]:
    """
    Supplies source for virtual ids.

    Returns:
        Optional[str]: Module source, or None for ordinary files.
    """
    if module_id == HELPERS_ID:
      return HELPERS

    if module_id.startswith(EXTERNAL_PREFIX):
      return external_proxy(module_id[len(EXTERNAL_PREFIX) :])

    if module_id.startswith(PROXY_PREFIX):
      actual_id = module_id[len(PROXY_PREFIX) :]
      return commonjs_proxy(actual_id, self.registry.is_legacy(actual_id))

    return None

  def transform(self, code: str, module_id: str) -> Optional[TransformResult]:
    """
    Converts a module if it passes the filter and is CommonJS.

    Args:
        code: Module source.
        module_id: Resolved module identity.

    Returns:
        Optional[TransformResult]: None when the module is left alone.

    Raises:
        ParseError: For CommonJS-looking modules that do not parse.
        ConfigurationError: For named exports configured on a non-CommonJS module.
    """
    if not self.filter(module_id):
      return None
    if not has_extension(module_id, self.config.extensions):
      return None

    result = self.engine.run(
      code,
      module_id,
      is_entry=module_id == self.entry_id,
      named_exports=self.named_exports.get(os.path.abspath(module_id)) or self.named_exports.get(module_id),
    )
    if result is not None:
      self.registry.mark(module_id)
    return result
