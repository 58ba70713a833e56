"""
Tests for CLI argument parsing and dispatch.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from cjs_esm.cli.__main__ import main


@patch("cjs_esm.cli.commands.handle_convert")
def test_convert_dispatch(mock_convert):
  mock_convert.return_value = 0

  exit_code = main(
    [
      "convert",
      "src/a.js",
      "--out",
      "dist/a.js",
      "--entry",
      "src/a.js",
      "--ignore-global",
      "--no-source-map",
      "--named-exports",
      "react=createElement,Component",
    ]
  )

  assert exit_code == 0
  args, kwargs = mock_convert.call_args
  assert args == (Path("src/a.js"), Path("dist/a.js"))
  assert kwargs["entry"] == "src/a.js"
  assert kwargs["ignore_global"] is True
  assert kwargs["source_map"] is False
  assert kwargs["named_exports"] == {"react": ["createElement", "Component"]}
  assert kwargs["json_trace_path"] is None


@patch("cjs_esm.cli.commands.handle_convert")
def test_convert_defaults_defer_to_config(mock_convert):
  mock_convert.return_value = 1

  assert main(["convert", "src"]) == 1
  args, kwargs = mock_convert.call_args
  assert args == (Path("src"), None)
  assert kwargs["ignore_global"] is None
  assert kwargs["source_map"] is None
  assert kwargs["named_exports"] == {}


@patch("cjs_esm.cli.commands.handle_convert")
def test_bad_named_exports_exit_2(mock_convert):
  assert main(["convert", "a.js", "--named-exports", "nonsense"]) == 2
  mock_convert.assert_not_called()


@patch("cjs_esm.cli.commands.handle_scan")
def test_scan_dispatch(mock_scan):
  mock_scan.return_value = 0
  assert main(["scan", "src", "--json"]) == 0
  mock_scan.assert_called_once_with(Path("src"), True)


def test_version(capsys):
  with pytest.raises(SystemExit) as excinfo:
    main(["--version"])
  assert excinfo.value.code == 0
  assert "0.1.0" in capsys.readouterr().out


def test_missing_command():
  with pytest.raises(SystemExit):
    main([])
