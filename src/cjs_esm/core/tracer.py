"""
Per-module transform trace.

A `TraceLogger` is created for each ``transform`` call and collects what the
engine decided while rewriting that module:

- phase boundaries (parsing, classification, planning, emission),
- literal dependencies (``require('./foo')`` bound to ``require$$0``),
- named exports found on ``exports``/``module.exports``,
- text patches, e.g. ``global`` to ``commonjsHelpers.commonjsGlobal``,
- inspections that left the source untouched (pruned branches).

`TraceLogger.export` flattens the events into plain dicts that `json.dumps`
accepts. Nothing is shared between modules.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  DEPENDENCY = "dependency"
  NAMED_EXPORT = "named_export"
  TEXT_PATCH = "text_patch"
  ANALYSIS_WARNING = "analysis_warning"
  INSPECTION = "inspection"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Event sink shared by the engine and the reference classifier.

  Events logged while a phase is open carry that phase's id as
  ``parent_id``; a phase's end event points at the phase it closes.
  """

  def __init__(self):
    self._events: List[TraceEvent] = []
    self._open: List[str] = []

  @property
  def _current(self) -> Optional[str]:
    return self._open[-1] if self._open else None

  def _record(
    self,
    kind: TraceEventType,
    description: str,
    metadata: Optional[Dict[str, Any]] = None,
    parent_id: Optional[str] = None,
    event_id: Optional[str] = None,
  ) -> str:
    event = TraceEvent(
      id=event_id or uuid.uuid4().hex,
      type=kind,
      timestamp=time.time(),
      description=description,
      parent_id=parent_id if parent_id is not None else self._current,
      metadata=metadata or {},
    )
    self._events.append(event)
    return event.id

  def start_phase(self, name: str, description: str = "") -> str:
    """
    Opens a phase nested in the current one.

    Returns:
        str: Id of the phase; later events point at it until `end_phase`.
    """
    phase_id = self._record(TraceEventType.PHASE_START, name, {"detail": description})
    self._open.append(phase_id)
    return phase_id

  def end_phase(self):
    """Closes the innermost open phase. Does nothing when none is open."""
    if self._open:
      closed = self._open.pop()
      self._record(TraceEventType.PHASE_END, "End Phase", parent_id=closed)

  def log_dependency(self, source: str, name: str, first_seen: bool):
    """Records a literal ``require`` call and the name bound to it."""
    self._record(
      TraceEventType.DEPENDENCY,
      f"require('{source}') -> {name}",
      {"source": source, "name": name, "first_seen": first_seen},
    )

  def log_named_export(self, name: str, origin: str):
    self._record(TraceEventType.NAMED_EXPORT, f"Named export '{name}'", {"name": name, "origin": origin})

  def log_patch(self, kind: str, before: str, after: str):
    self._record(TraceEventType.TEXT_PATCH, f"{kind} patch", {"before": before, "after": after})

  def log_warning(self, message: str):
    self._record(TraceEventType.ANALYSIS_WARNING, message, {"level": "warning"})

  def log_inspection(self, node_str: str, outcome: str, detail: str = ""):
    """Records a node that was examined but not rewritten."""
    self._record(TraceEventType.INSPECTION, f"Inspecting '{node_str}'", {"outcome": outcome, "detail": detail})

  def export(self) -> List[Dict[str, Any]]:
    return [asdict(event) for event in self._events]
