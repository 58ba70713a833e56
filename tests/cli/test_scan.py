"""
Tests for the scan command handler.
"""

import json

from cjs_esm.cli.handlers.scan import handle_scan, scan_file


def test_scan_file_commonjs(tmp_path):
  src = tmp_path / "a.js"
  src.write_text("var b = require('./b');\nexports.c = b;\nglobal.d = 1;")

  entry = scan_file(src)
  assert entry["commonjs"] is True
  assert entry["dependencies"] == ["./b"]
  assert entry["uses"] == {"module": False, "exports": True, "global": True}
  assert entry["named_exports"] == ["c"]


def test_scan_file_plain(tmp_path):
  src = tmp_path / "esm.js"
  src.write_text("export default 1;")
  entry = scan_file(src)
  assert entry["commonjs"] is False
  assert entry["dependencies"] == []


def test_scan_json_output(tmp_path, capsys):
  (tmp_path / "a.js").write_text("module.exports = 1;")
  (tmp_path / "b.js").write_text("export default 2;")

  assert handle_scan(tmp_path, json_mode=True) == 0
  report = json.loads(capsys.readouterr().out)
  assert [item["commonjs"] for item in report] == [True, False]


def test_scan_reports_parse_failures(tmp_path):
  (tmp_path / "bad.js").write_text("module.exports = {")
  assert handle_scan(tmp_path) == 1


def test_scan_missing_path(tmp_path):
  assert handle_scan(tmp_path / "nope") == 1
