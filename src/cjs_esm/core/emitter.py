"""
Code Emitter.

Renders a `PatchPlan` into the final module text and, on request, a Source
Map v3 document pointing back into the original module.

Rendering order:

1.  Apply the edits (verbatim slices, replacements, insertions).
2.  Trim leading and trailing whitespace from the edited body.
3.  Prepend the prologue and trim again, then append the epilogue.

Mapping rules: every verbatim slice is anchored at its first character, at
the start of each of its lines and at each anchor the classifier collected.
A replacement is anchored at its first character only (optionally with the
original text as symbol name). Insertions, the prologue and the epilogue are
synthetic and map to nothing.
"""

import bisect
from dataclasses import dataclass
from typing import List, Optional, Tuple

from cjs_esm.core.rewriter.patcher import PatchPlan, Segment
from cjs_esm.utils.sourcemap import LineIndex, SourceMap, SourceMapBuilder


@dataclass
class EmittedModule:
  code: str
  map: Optional[SourceMap] = None


def trim_segments(segments: List[Segment]) -> List[Segment]:
  """
  Strips leading whitespace from the first segments and trailing whitespace
  from the last ones. Verbatim origins move with the stripped prefix.
  """
  out = list(segments)

  while out:
    first = out[0]
    stripped = first.text.lstrip()
    if stripped == first.text:
      break
    removed = len(first.text) - len(stripped)
    origin = first.origin + removed if first.verbatim and first.origin is not None else first.origin
    if stripped:
      out[0] = Segment(stripped, origin, first.verbatim, first.name)
      break
    out.pop(0)

  while out:
    last = out[-1]
    stripped = last.text.rstrip()
    if stripped == last.text:
      break
    if stripped:
      out[-1] = Segment(stripped, last.origin, last.verbatim, last.name)
      break
    out.pop()

  return out


def _advance(line: int, column: int, text: str) -> Tuple[int, int]:
  """Generated position after emitting `text` from ``(line, column)``."""
  newlines = text.count("\n")
  if not newlines:
    return line, column + len(text)
  return line + newlines, len(text) - text.rfind("\n") - 1


class _MapWriter:
  def __init__(self, plan: PatchPlan, source: str):
    self.builder = SourceMapBuilder(source, plan.original)
    self.index = LineIndex(plan.original)
    self.anchors = sorted(plan.mapping_locations)

  def verbatim(self, segment: Segment, line: int, column: int) -> None:
    text = segment.text
    offsets = {0}
    offsets.update(i + 1 for i, char in enumerate(text) if char == "\n" and i + 1 < len(text))

    low = bisect.bisect_left(self.anchors, segment.origin)
    high = bisect.bisect_left(self.anchors, segment.origin + len(text))
    offsets.update(anchor - segment.origin for anchor in self.anchors[low:high])

    previous = 0
    for offset in sorted(offsets):
      line, column = _advance(line, column, text[previous:offset])
      previous = offset
      orig_line, orig_column = self.index.locate(segment.origin + offset)
      self.builder.add(line, column, orig_line, orig_column)

  def replacement(self, segment: Segment, line: int, column: int) -> None:
    orig_line, orig_column = self.index.locate(segment.origin)
    self.builder.add(line, column, orig_line, orig_column, segment.name)

  def synthetic(self, line: int, column: int) -> None:
    self.builder.add_unmapped(line, column)


def emit(plan: PatchPlan, module_id: str, source_map: bool = False) -> EmittedModule:
  """
  Renders the final module.

  Args:
      plan: Edits plus prologue (``intro``) and epilogue (``outro``).
      module_id: Recorded as the single ``sources`` entry of the map.
      source_map: If True, also build the position map.

  Returns:
      EmittedModule: Code and optional map.
  """
  body = trim_segments(plan.segments())
  body_text = "".join(segment.text for segment in body)

  intro = plan.intro.lstrip()
  if not body_text:
    intro = intro.rstrip()
  code = intro + body_text + plan.outro

  if not source_map:
    return EmittedModule(code=code)

  writer = _MapWriter(plan, module_id)
  line, column = _advance(0, 0, intro)

  for segment in body:
    if segment.origin is None:
      writer.synthetic(line, column)
    elif segment.verbatim:
      writer.verbatim(segment, line, column)
    else:
      writer.replacement(segment, line, column)
      # lines after the first line of a replacement have no origin
      if "\n" in segment.text:
        end_line, _ = _advance(line, column, segment.text)
        writer.synthetic(end_line, 0)
    line, column = _advance(line, column, segment.text)

  if plan.outro:
    writer.synthetic(line, column)

  return EmittedModule(code=code, map=writer.builder.build(file=None))
