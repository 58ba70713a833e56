"""
Legacy Module Registry.

Remembers which module identities were transformed as CommonJS. The proxy
synthesis for a dependency reads it to choose between exposing the wrapped
``__moduleExports`` binding and the module's own declarative exports.

The registry is append-only. A build pipeline must finish transforming a
dependency before asking about it; there is no other ordering guarantee.
"""

from typing import Iterator, Set


class LegacyModuleRegistry:
  """
  Append-only set of module identities judged to be CommonJS.
  """

  def __init__(self):
    self._modules: Set[str] = set()

  def mark(self, module_id: str) -> None:
    self._modules.add(module_id)

  def is_legacy(self, module_id: str) -> bool:
    return module_id in self._modules

  def __contains__(self, module_id: object) -> bool:
    return module_id in self._modules

  def __iter__(self) -> Iterator[str]:
    return iter(sorted(self._modules))

  def __len__(self) -> int:
    return len(self._modules)


_DEFAULT_REGISTRY = LegacyModuleRegistry()


def get_registry() -> LegacyModuleRegistry:
  """Returns the process-wide registry."""
  return _DEFAULT_REGISTRY
