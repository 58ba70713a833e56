"""
Tests for the syntax helpers shared by the classifier and scope tracker.
"""

from cjs_esm.core.parser import parse_module
from cjs_esm.core.scanners import (
  deconflict,
  get_full_name,
  has_commonjs_keywords,
  is_reference,
  make_legal_identifier,
  string_value,
)


def _first(first_node, code, node_type):
  unit = parse_module(code, "t.js")
  return first_node(unit.root, node_type)


def test_firstpass_keywords():
  assert has_commonjs_keywords("var x = require('x');")
  assert has_commonjs_keywords("module.exports = 1")
  assert has_commonjs_keywords("global.foo = 1")
  assert not has_commonjs_keywords("export default 42;")


def test_firstpass_word_boundaries():
  assert not has_commonjs_keywords("var requirement = modules;")


def test_firstpass_ignore_global():
  assert not has_commonjs_keywords("global.foo = 1", ignore_global=True)
  assert has_commonjs_keywords("exports.foo = global", ignore_global=True)


def test_get_full_name_chain(first_node):
  member = _first(first_node, "module.exports.foo = 1;", "member_expression")
  assert get_full_name(member) == ("module", "module.exports.foo")


def test_get_full_name_identifier(first_node):
  ident = _first(first_node, "exports;", "identifier")
  assert get_full_name(ident) == ("exports", "exports")


def test_get_full_name_rejects_computed(first_node):
  member = _first(first_node, "module['exports'].foo = 1;", "member_expression")
  assert get_full_name(member) is None


def test_get_full_name_rejects_call_base(first_node):
  member = _first(first_node, "foo().bar = 1;", "member_expression")
  assert get_full_name(member) is None


def test_is_reference_member_property(first_node):
  member = _first(first_node, "a.module;", "member_expression")
  obj = member.child_by_field_name("object")
  prop = member.child_by_field_name("property")
  assert is_reference(obj, member)
  assert not is_reference(prop, member)


def test_is_reference_pair_key(first_node):
  pair = _first(first_node, "x = { exports: exports };", "pair")
  key = pair.child_by_field_name("key")
  value = pair.child_by_field_name("value")
  assert not is_reference(key, pair)
  assert is_reference(value, pair)


def test_is_reference_export_alias(first_node):
  spec = _first(first_node, "var foo; export { foo as module };", "export_specifier")
  name = spec.child_by_field_name("name")
  alias = spec.child_by_field_name("alias")
  assert is_reference(name, spec)
  assert not is_reference(alias, spec)


def test_string_value_plain(first_node):
  node = _first(first_node, "require('./foo');", "string")
  assert string_value(node) == "./foo"


def test_string_value_escapes(first_node):
  node = _first(first_node, r"x('a\nb\x41B\u{43}\'');", "string")
  assert string_value(node) == "a\nbABC'"


def test_make_legal_identifier():
  assert make_legal_identifier("my-module") == "myModule"
  assert make_legal_identifier("foo.bar") == "foo_bar"
  assert make_legal_identifier("1abc") == "_1abc"
  assert make_legal_identifier("class") == "_class"
  assert make_legal_identifier("Object") == "_Object"
  assert make_legal_identifier("lodash") == "lodash"


def test_deconflict_probes_suffixes():
  assert deconflict("commonjsHelpers", "var a;") == "commonjsHelpers"
  assert deconflict("x", "x x_1") == "x_2"
