"""
Tests for the helpers module text and proxy synthesis.
"""

from cjs_esm.pipeline.helpers import (
  EXTERNAL_PREFIX,
  HELPERS,
  HELPERS_ID,
  PROXY_PREFIX,
  commonjs_proxy,
  external_proxy,
  is_virtual,
)


def test_helpers_exports():
  assert "export var commonjsGlobal" in HELPERS
  assert "export function unwrapExports" in HELPERS
  assert "export function createCommonjsModule" in HELPERS


def test_is_virtual():
  assert is_virtual(HELPERS_ID)
  assert is_virtual(PROXY_PREFIX + "/a.js")
  assert is_virtual(EXTERNAL_PREFIX + "lodash")
  assert not is_virtual("/a.js")


def test_external_proxy():
  assert external_proxy("lodash") == 'import lodash from "lodash"; export default lodash;'
  assert external_proxy("my-lib") == 'import myLib from "my-lib"; export default myLib;'


def test_commonjs_proxy_legacy():
  assert commonjs_proxy("/src/a.js", True) == (
    'import { __moduleExports } from "/src/a.js"; export default __moduleExports;'
  )


def test_commonjs_proxy_es_module():
  assert commonjs_proxy("/src/a.js", False) == (
    'import * as a from "/src/a.js"; export default ( a && a[\'default\'] ) || a;'
  )
