"""
Tests for import, wrapper and export planning.
"""

from cjs_esm.core.parser import parse_module
from cjs_esm.core.planner import (
  BLACKLISTED_EXPORTS,
  build_export_block,
  build_import_block,
  module_name,
  plan_module,
  quote_specifier,
)
from cjs_esm.core.rewriter.classifier import DependencyRecord, UsageFlags, classify_module
from cjs_esm.core.planner import wrapper_args


def test_module_name():
  assert module_name("/src/my-lib.js") == "myLib"
  assert module_name("/src/1st.js") == "_1st"
  assert module_name("/src/index.cjs") == "index"
  assert module_name("/src/class.js") == "_class"


def test_quote_specifier():
  assert quote_specifier("./a") == "'./a'"
  assert quote_specifier("it's") == "'it\\'s'"
  assert quote_specifier("a\\b") == "'a\\\\b'"


def test_import_block_order():
  deps = [DependencyRecord("c", "require$$1", True), DependencyRecord("a", "require$$0", False)]
  assert build_import_block("H", deps) == (
    "import * as H from '\0commonjsHelpers';\n"
    "import 'c';\n"
    "import 'a';\n"
    "import require$$1 from '\0commonjs-proxy:c';\n"
    "import '\0commonjs-proxy:a';"
  )


def test_wrapper_args():
  assert wrapper_args(UsageFlags(module=True)) == "module"
  assert wrapper_args(UsageFlags(exports=True)) == "module, exports"


def test_export_block_default():
  block = build_export_block("lib", "H", ["foo"], "exports.foo = 1;", is_entry=False)
  assert block == "export { lib as __moduleExports };\nexport default lib;\n\nexport var foo = lib.foo;"


def test_export_block_entry_and_interop():
  block = build_export_block("lib", "H", [], "exports.__esModule = true;", is_entry=True)
  assert block == "export default H.unwrapExports(lib);\n"


def test_export_block_blacklist():
  block = build_export_block("lib", "H", ["default", "__esModule", "class", "ok"], "", is_entry=False)
  assert "export var default" not in block
  assert "export var __esModule" not in block
  assert "export var class" not in block
  assert "export var ok = lib.ok;" in block
  assert {"default", "__esModule", "arguments"} <= BLACKLISTED_EXPORTS


def test_export_named_like_module():
  block = build_export_block("foo", "H", ["foo"], "", is_entry=False)
  assert block.endswith("var foo$$1 = foo.foo;\nexport { foo$$1 as foo };")


def test_plan_module():
  code = "var a = require('a');\nexports.b = a;"
  classification = classify_module(parse_module(code, "/src/b-mod.js"))
  plan = plan_module(classification, "/src/b-mod.js", code)

  assert plan.name == "bMod"
  assert plan.wrapper_start == "\n\nvar bMod = commonjsHelpers.createCommonjsModule(function (module, exports) {\n"
  assert plan.wrapper_end == "\n});\n\n"
  assert plan.prologue.startswith("import * as commonjsHelpers from")
  assert "import require$$0 from '\0commonjs-proxy:a';" in plan.import_block
  assert plan.epilogue.endswith("export var b = bMod.b;")
