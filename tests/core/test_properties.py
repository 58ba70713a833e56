"""
Property-based tests for name generation, guard folding and export detection.
"""

import re

from hypothesis import given, settings, strategies as st

from cjs_esm.analysis.evaluator import is_truthy
from cjs_esm.core.parser import parse_module
from cjs_esm.core.rewriter.classifier import classify_module
from cjs_esm.core.scanners import deconflict, make_legal_identifier

IDENTIFIER = re.compile(r"^[$_a-zA-Z][$_a-zA-Z0-9]*$")

names = st.from_regex(r"x[a-zA-Z0-9_]{0,8}", fullmatch=True)


def _guard(code):
  statement = parse_module(code + ";", "guard.js").root.named_children[0]
  return statement.named_children[0]


@given(st.text(min_size=1, max_size=20))
@settings(max_examples=50)
def test_legal_identifier_shape(raw):
  assert IDENTIFIER.match(make_legal_identifier(raw))


@given(names, st.text(max_size=40))
@settings(max_examples=50)
def test_deconflict_avoids_text(name, code):
  result = deconflict(name, code)
  assert result not in code
  assert result.startswith(name)


@given(st.integers(min_value=0, max_value=10**6), st.integers(min_value=0, max_value=10**6))
@settings(max_examples=30)
def test_numeric_equality_folds(a, b):
  assert is_truthy(_guard(f"{a} == {b}")) is (a == b)
  assert is_truthy(_guard(f"{a} !== {b}")) is (a != b)


@given(st.lists(names, min_size=1, max_size=5, unique=True))
@settings(max_examples=20)
def test_export_detection_is_repeatable(exports):
  code = "\n".join(f"exports.{name} = {i};" for i, name in enumerate(exports))
  first = classify_module(parse_module(code, "/x/m.js")).named_exports
  second = classify_module(parse_module(code, "/x/m.js")).named_exports
  assert first == second == exports
