"""
Tests for the TraceLogger.
"""

import json

from cjs_esm.core.tracer import TraceEventType, TraceLogger


def test_tracer_phases_nesting():
  """
  Verify parent_id linkage for nested phases.
  """
  tracer = TraceLogger()

  root = tracer.start_phase("Transform", "/src/a.js")
  child = tracer.start_phase("Parsing")
  tracer.end_phase()
  tracer.end_phase()

  events = tracer.export()
  assert len(events) == 4
  assert events[0]["id"] == root
  assert events[0]["metadata"]["detail"] == "/src/a.js"
  assert events[1]["id"] == child
  assert events[1]["parent_id"] == root
  assert events[2]["type"] == TraceEventType.PHASE_END
  assert events[2]["parent_id"] == child
  assert events[3]["parent_id"] == root


def test_end_phase_without_start_is_noop():
  tracer = TraceLogger()
  tracer.end_phase()
  assert tracer.export() == []


def test_event_payloads():
  tracer = TraceLogger()
  phase = tracer.start_phase("Classification")
  tracer.log_dependency("./a", "require$$0", True)
  tracer.log_named_export("foo", "exports.foo")
  tracer.log_patch("replace", "global", "commonjsHelpers.commonjsGlobal")
  tracer.log_warning("odd")
  tracer.log_inspection("typeof module", "pruned", "statement_block")

  events = tracer.export()[1:]
  assert all(e["parent_id"] == phase for e in events)
  assert events[0]["metadata"] == {"source": "./a", "name": "require$$0", "first_seen": True}
  assert events[1]["type"] == TraceEventType.NAMED_EXPORT
  assert events[2]["metadata"]["after"] == "commonjsHelpers.commonjsGlobal"
  assert events[3]["metadata"]["level"] == "warning"
  assert events[4]["metadata"]["outcome"] == "pruned"


def test_export_is_json_serializable():
  tracer = TraceLogger()
  tracer.log_dependency("a", "require$$0", False)
  dumped = json.loads(json.dumps(tracer.export()))
  assert dumped[0]["type"] == "dependency"
