"""
Tests for include/exclude filtering of module ids.
"""

from cjs_esm.pipeline.filters import create_filter, glob_to_regex, has_extension


def test_glob_to_regex():
  assert glob_to_regex("/src/*.js").match("/src/a.js")
  assert not glob_to_regex("/src/*.js").match("/src/lib/a.js")
  assert glob_to_regex("/src/**/*.js").match("/src/a.js")
  assert glob_to_regex("/src/**/*.js").match("/src/lib/deep/a.js")
  assert glob_to_regex("/src/**").match("/src/lib/a.ts")
  assert glob_to_regex("/src/?.js").match("/src/a.js")
  assert not glob_to_regex("/src/?.js").match("/src/ab.js")


def test_default_filter_admits_everything_but_virtual():
  accept = create_filter()
  assert accept("/any/where.js")
  assert not accept("\0commonjsHelpers")
  assert not accept("\0commonjs-proxy:/a.js")


def test_include_and_exclude_relative_to_cwd(tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  accept = create_filter(include="src/**", exclude=["src/vendor/**"])

  assert accept(str(tmp_path / "src" / "a.js"))
  assert accept(str(tmp_path / "src" / "lib" / "b.js"))
  assert not accept(str(tmp_path / "src" / "vendor" / "c.js"))
  assert not accept(str(tmp_path / "lib" / "d.js"))


def test_has_extension():
  assert has_extension("/a/b.js")
  assert not has_extension("/a/b.ts")
  assert has_extension("/a/b.cjs", [".js", ".cjs"])
