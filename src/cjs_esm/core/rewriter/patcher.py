"""
Text Patch Plan.

The classifier never rewrites the syntax tree. It schedules position-addressed
edits against the original text instead, so everything it does not touch
(comments, formatting, odd whitespace) survives byte for byte:

- `ReplaceAction`: overwrite the half-open range ``[start, end)``.
- `RemoveAction`: delete the half-open range ``[start, end)``.
- `InsertAction`: insert text at ``start`` (``start == end``).

A plan also carries a prologue and an epilogue (the synthetic imports, the
wrapper and the export block) and, when a position map was requested, the set
of original offsets that should anchor a mapping.

Edits must not overlap. Rendering walks them in position order.
"""

from dataclasses import dataclass
from typing import List, Optional, Set

from cjs_esm.errors import PatchConflictError


@dataclass
class PatchAction:
  """Base class for patch instructions. Offsets are character offsets."""

  start: int
  end: int


@dataclass
class ReplaceAction(PatchAction):
  """
  Overwrite an original range.

  Attributes:
      content: Replacement text.
      store_name: If True, the position map records the original text as the
          symbol name of the mapping (used when ``this`` becomes a helper call).
  """

  content: str
  store_name: bool = False


@dataclass
class RemoveAction(PatchAction):
  """Delete an original range."""

  pass


@dataclass
class InsertAction(PatchAction):
  """Insert text at ``start``; the original range is empty."""

  content: str


@dataclass
class Segment:
  """
  One piece of rendered body text.

  Attributes:
      text: The emitted characters.
      origin: Original offset of the first character, or None for synthetic text.
      verbatim: True when `text` is an unchanged slice of the original.
      name: Original symbol name for the mapping, if stored.
  """

  text: str
  origin: Optional[int]
  verbatim: bool
  name: Optional[str] = None


class PatchPlan:
  """
  Ordered edits over one module's original text.
  """

  def __init__(self, original: str):
    """
    Initialize an empty plan.

    Args:
        original: The module text every offset refers to.
    """
    self.original = original
    self.actions: List[PatchAction] = []
    self.mapping_locations: Set[int] = set()
    self.intro = ""
    self.outro = ""

  def overwrite(self, start: int, end: int, content: str, store_name: bool = False) -> None:
    self.actions.append(ReplaceAction(start, end, content, store_name))

  def remove(self, start: int, end: int) -> None:
    self.actions.append(RemoveAction(start, end))

  def insert(self, position: int, content: str) -> None:
    self.actions.append(InsertAction(position, position, content))

  def prepend(self, content: str) -> None:
    """Adds text before everything else, including earlier prepends."""
    self.intro = content + self.intro

  def append(self, content: str) -> None:
    """Adds text after everything else, including earlier appends."""
    self.outro = self.outro + content

  def add_mapping_location(self, position: int) -> None:
    """Marks an original offset that the position map should anchor."""
    self.mapping_locations.add(position)

  def ordered(self) -> List[PatchAction]:
    """
    Returns the edits in position order.

    Raises:
        PatchConflictError: If two edits overlap.
    """
    actions = sorted(enumerate(self.actions), key=lambda item: (item[1].start, item[1].end, item[0]))
    ordered = [action for _, action in actions]

    for previous, current in zip(ordered, ordered[1:]):
      if current.start < previous.end:
        raise PatchConflictError(
          f"Overlapping edits: [{previous.start}, {previous.end}) and [{current.start}, {current.end})"
        )
    return ordered

  def segments(self) -> List[Segment]:
    """
    Renders the edited body as a list of segments.

    Returns:
        List[Segment]: Verbatim slices, replacements and insertions in output
        order. Removed ranges produce nothing.
    """
    out: List[Segment] = []
    cursor = 0

    for action in self.ordered():
      if action.start > cursor:
        out.append(Segment(self.original[cursor : action.start], cursor, True))

      if isinstance(action, ReplaceAction):
        name = self.original[action.start : action.end] if action.store_name else None
        out.append(Segment(action.content, action.start, False, name))
      elif isinstance(action, InsertAction):
        out.append(Segment(action.content, None, False))

      cursor = max(cursor, action.end)

    if cursor < len(self.original):
      out.append(Segment(self.original[cursor:], cursor, True))

    return [segment for segment in out if segment.text]

  def __str__(self) -> str:
    return self.intro + "".join(segment.text for segment in self.segments()) + self.outro
