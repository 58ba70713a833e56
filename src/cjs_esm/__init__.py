"""
cjs-esm Package.

Converts CommonJS modules (``require`` / ``module.exports``) into ES modules
that a static bundler can place in its module graph without executing them.

This package exposes the transformation engine, the build plugin and the
configuration for programmatic usage.

Usage
-----

Single Module
^^^^^^^^^^^^^

.. code-block:: python

    import cjs_esm
    result = cjs_esm.transform("module.exports = 42;", "/src/answer.js")
    print(result.code)

Build Plugin
^^^^^^^^^^^^

.. code-block:: python

    from cjs_esm import CommonJSPlugin, RuntimeConfig

    plugin = CommonJSPlugin(RuntimeConfig(include=["src/**"]))
    plugin.configure(entry="src/index.js")
    out = plugin.transform(code, "/abs/src/lib.js")
"""

from cjs_esm.config import RuntimeConfig
from cjs_esm.core.engine import TransformEngine, TransformResult, transform
from cjs_esm.errors import ConfigurationError, ParseError, PatchConflictError
from cjs_esm.pipeline.plugin import CommonJSPlugin

__version__ = "0.1.0"

__all__ = [
  "CommonJSPlugin",
  "ConfigurationError",
  "ParseError",
  "PatchConflictError",
  "RuntimeConfig",
  "TransformEngine",
  "TransformResult",
  "transform",
  "__version__",
]
