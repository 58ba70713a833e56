"""
Tests for static guard evaluation.
"""

import math

import pytest

from cjs_esm.analysis.evaluator import is_falsy, is_truthy, loose_equals, parse_number, to_number
from cjs_esm.analysis.symbol_table import Scope
from cjs_esm.core.parser import parse_module


def _expr(code):
  unit = parse_module(code + ";", "guard.js")
  statement = unit.root.named_children[0]
  assert statement.type == "expression_statement"
  return statement.named_children[0]


@pytest.mark.parametrize(
  "code, expected",
  [
    ("0", False),
    ("1", True),
    ("''", False),
    ("'a'", True),
    ("null", False),
    ("true", True),
    ("false", False),
    ("/x/", True),
    ("(0)", False),
  ],
)
def test_literal_truthiness(code, expected):
  assert is_truthy(_expr(code)) is expected


@pytest.mark.parametrize(
  "code, expected",
  [
    ("1 == '1'", True),
    ("1 === '1'", False),
    ("1 != '1'", False),
    ("1 !== '1'", True),
    ("null == 0", False),
    ("true == 1", True),
    ("'0x10' == 16", True),
    ("'a' === 'a'", True),
    ("/a/ === /a/", False),
  ],
)
def test_equality(code, expected):
  assert is_truthy(_expr(code)) is expected


def test_negation():
  assert is_truthy(_expr("!0")) is True
  assert is_truthy(_expr("!'x'")) is False
  assert is_truthy(_expr("!x")) is None


def test_logical_operators_need_both_sides():
  assert is_truthy(_expr("true && 1")) is True
  assert is_truthy(_expr("0 || ''")) is False
  assert is_truthy(_expr("1 || 0")) is True
  # no short-circuit over an unknown operand
  assert is_truthy(_expr("false && x")) is None
  assert is_truthy(_expr("true || x")) is None


def test_unknown_expressions():
  assert is_truthy(_expr("x")) is None
  assert is_truthy(_expr("x == 1")) is None
  assert is_truthy(_expr("f()")) is None
  assert is_truthy(None) is None


def test_typeof_free_handles_fold():
  root = Scope()
  assert is_truthy(_expr("typeof module !== 'undefined'"), root) is True
  assert is_truthy(_expr("typeof exports === 'object'"), root) is True
  assert is_truthy(_expr("typeof require === 'function'"), root) is True
  assert is_truthy(_expr("typeof define === 'function'"), root) is None


def test_typeof_bound_handle_is_unknown():
  scope = Scope()
  scope.add_declaration(["module"], is_block_declaration=False)
  assert is_truthy(_expr("typeof module !== 'undefined'"), scope) is None


def test_typeof_without_scope_is_unknown():
  assert is_truthy(_expr("typeof module !== 'undefined'")) is None


def test_is_falsy():
  assert is_falsy(_expr("0")) is True
  assert is_falsy(_expr("x")) is None


def test_parse_number_forms():
  assert parse_number("0x10") == 16
  assert parse_number("0o17") == 15
  assert parse_number("017") == 15
  assert parse_number("0b11") == 3
  assert parse_number("1_000") == 1000
  assert parse_number("10n") == 10
  assert parse_number("1.5e2") == 150


def test_to_number_strings():
  assert to_number(("string", "  ")) == 0
  assert to_number(("string", "12")) == 12
  assert math.isnan(to_number(("string", "abc")))
  assert to_number(("string", "-Infinity")) == -math.inf


def test_loose_equals_mixed():
  assert loose_equals(("string", ""), ("boolean", False))
  assert not loose_equals(("null", None), ("boolean", False))
