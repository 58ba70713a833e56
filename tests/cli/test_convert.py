"""
Tests for the convert command handler against real files.
"""

import json

from cjs_esm.cli.handlers.convert import handle_convert
from cjs_esm.utils.sourcemap import SourceMap


def test_single_file_with_map(tmp_path):
  src = tmp_path / "lib.js"
  src.write_text("exports.a = require('./b');")
  out = tmp_path / "dist" / "lib.js"

  assert handle_convert(src, out) == 0

  code = out.read_text()
  assert "export var a = lib.a;" in code
  assert code.endswith("//# sourceMappingURL=lib.js.map\n")

  smap = SourceMap(**json.loads((tmp_path / "dist" / "lib.js.map").read_text()))
  assert smap.file == "lib.js"
  assert smap.sources == [str(src.resolve())]


def test_single_file_without_map(tmp_path):
  src = tmp_path / "lib.js"
  src.write_text("module.exports = 1;")
  out = tmp_path / "out.js"

  assert handle_convert(src, out, source_map=False) == 0
  assert "sourceMappingURL" not in out.read_text()
  assert not (tmp_path / "out.js.map").exists()


def test_stdout_uses_inline_map(tmp_path, capsys):
  src = tmp_path / "lib.js"
  src.write_text("module.exports = 1;")

  assert handle_convert(src, None) == 0
  printed = capsys.readouterr().out
  assert "createCommonjsModule" in printed
  assert "sourceMappingURL=data:application/json;charset=utf-8;base64," in printed


def test_non_commonjs_printed_unchanged(tmp_path, capsys):
  src = tmp_path / "esm.js"
  src.write_text("export default 1;")
  assert handle_convert(src, None) == 0
  assert "export default 1;" in capsys.readouterr().out


def test_parse_failure_exit_code(tmp_path):
  src = tmp_path / "bad.js"
  src.write_text("module.exports = {")
  assert handle_convert(src, tmp_path / "out.js") == 1


def test_missing_input(tmp_path):
  assert handle_convert(tmp_path / "nope.js", None) == 1


def test_directory_requires_out(tmp_path):
  (tmp_path / "a.js").write_text("module.exports = 1;")
  assert handle_convert(tmp_path, None) == 1


def test_directory_conversion(tmp_path):
  src = tmp_path / "src"
  (src / "sub").mkdir(parents=True)
  (src / "a.js").write_text("module.exports = require('./sub/b');")
  (src / "sub" / "b.js").write_text("exports.b = 1;")
  (src / "c.js").write_text("export default 3;")
  (src / "notes.txt").write_text("module.exports")
  out = tmp_path / "dist"

  assert handle_convert(src, out, json_trace_path=tmp_path / "trace.json") == 0

  assert "createCommonjsModule" in (out / "a.js").read_text()
  assert "export { b$$1 as b };" in (out / "sub" / "b.js").read_text()
  assert (out / "c.js").read_text() == "export default 3;"
  assert not (out / "notes.txt").exists()

  events = json.loads((out / "a.trace.json").read_text())
  assert any(e["type"] == "dependency" for e in events)


def test_directory_reports_failures(tmp_path):
  src = tmp_path / "src"
  src.mkdir()
  (src / "ok.js").write_text("module.exports = 1;")
  (src / "bad.js").write_text("module.exports = {")
  assert handle_convert(src, tmp_path / "dist") == 1
  assert (tmp_path / "dist" / "ok.js").exists()


def test_named_exports_on_esm_fail(tmp_path):
  src = tmp_path / "esm.js"
  src.write_text("export default 1;")
  assert handle_convert(src, tmp_path / "out.js", named_exports={str(src): ["a"]}) == 1
