"""
Tests for rendering patch plans and building the position map.
"""

from cjs_esm.core.emitter import emit, trim_segments
from cjs_esm.core.rewriter.patcher import PatchPlan, Segment


def test_trim_moves_verbatim_origin():
  segments = [Segment("\n\n  foo", 10, True), Segment("bar \n", None, False)]
  trimmed = trim_segments(segments)
  assert trimmed[0] == Segment("foo", 14, True)
  assert trimmed[1].text == "bar"


def test_trim_drops_blank_segments():
  segments = [Segment("  ", 0, True), Segment("x", None, False), Segment("\n", 5, True)]
  assert [s.text for s in trim_segments(segments)] == ["x"]


def test_emit_joins_intro_body_outro():
  plan = PatchPlan("\n\nbody();\n\n")
  plan.prepend("\n  intro {\n")
  plan.append("\n} outro\n")
  emitted = emit(plan, "m.js")
  assert emitted.code == "intro {\nbody();\n} outro\n"
  assert emitted.map is None


def test_emit_empty_body():
  plan = PatchPlan("require('a');")
  plan.remove(0, 13)
  plan.prepend("head\n\n")
  plan.append("\ntail")
  assert emit(plan, "m.js").code == "head\ntail"


def test_map_verbatim_lines():
  plan = PatchPlan("a();\nb();")
  plan.prepend("X\n")
  emitted = emit(plan, "/src/m.js", source_map=True)
  smap = emitted.map

  assert smap.sources == ["/src/m.js"]
  assert smap.sources_content == ["a();\nb();"]
  assert smap.original_position_for(1, 0) is None
  first = smap.original_position_for(2, 0)
  second = smap.original_position_for(3, 2)
  assert (first.line, first.column) == (1, 0)
  assert (second.line, second.column) == (2, 0)


def test_map_replacement_name():
  plan = PatchPlan("this.x = 1;")
  plan.overwrite(0, 4, "G.commonjsGlobal", store_name=True)
  emitted = emit(plan, "t.js", source_map=True)

  pos = emitted.map.original_position_for(1, 3)
  assert (pos.line, pos.column, pos.name) == (1, 0, "this")
  after = emitted.map.original_position_for(1, len("G.commonjsGlobal"))
  assert (after.line, after.column, after.name) == (1, 4, None)


def test_map_outro_is_synthetic():
  plan = PatchPlan("x();")
  plan.append("\n});")
  emitted = emit(plan, "t.js", source_map=True)
  assert emitted.map.original_position_for(1, 0).column == 0
  assert emitted.map.original_position_for(1, 4) is None
  assert emitted.map.original_position_for(2, 0) is None
