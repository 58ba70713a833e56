"""
Runtime Helpers and Proxy Modules.

Transformed modules import a shared helpers module through the virtual id
``\\0commonjsHelpers`` and import each dependency twice: once for its side
effects and once through a ``\\0commonjs-proxy:`` id. This module produces the
source text a build pipeline should load for those virtual ids.
"""

import json

from cjs_esm.core.planner import EXTERNAL_PREFIX, HELPERS_ID, PROXY_PREFIX, module_name

__all__ = [
  "HELPERS",
  "HELPERS_ID",
  "PROXY_PREFIX",
  "EXTERNAL_PREFIX",
  "external_proxy",
  "commonjs_proxy",
  "is_virtual",
]

HELPERS = """
export var commonjsGlobal = typeof window !== 'undefined' ? window : typeof global !== 'undefined' ? global : typeof self !== 'undefined' ? self : {};

export function unwrapExports (x) {
\treturn x && x.__esModule ? x['default'] : x;
}

export function createCommonjsModule(fn, module) {
\treturn module = { exports: {} }, fn(module, module.exports), module.exports;
}"""


def is_virtual(module_id: str) -> bool:
  """True for ids owned by this package (helpers, proxies, externals)."""
  return module_id == HELPERS_ID or module_id.startswith((PROXY_PREFIX, EXTERNAL_PREFIX))


def external_proxy(actual_id: str) -> str:
  """
  Proxy for a dependency that resolution could not find on disk.

  Args:
      actual_id: The bare specifier, e.g. ``lodash``.

  Returns:
      str: ``import lodash from "lodash"; export default lodash;``
  """
  name = module_name(actual_id)
  return f"import {name} from {json.dumps(actual_id)}; export default {name};"


def commonjs_proxy(actual_id: str, is_legacy: bool) -> str:
  """
  Proxy exposing the value a ``require`` of `actual_id` would return.

  Args:
      actual_id: Resolved module identity.
      is_legacy: Whether `actual_id` was transformed as CommonJS.

  Returns:
      str: A re-export of the wrapped ``__moduleExports`` for CommonJS modules;
      otherwise the namespace's default export, falling back to the namespace.
  """
  quoted = json.dumps(actual_id)
  if is_legacy:
    return f"import {{ __moduleExports }} from {quoted}; export default __moduleExports;"

  name = module_name(actual_id)
  return f"import * as {name} from {quoted}; export default ( {name} && {name}['default'] ) || {name};"
