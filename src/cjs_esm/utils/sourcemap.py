"""
Source Map v3 Support.

Builds and reads the position map that ties emitted code back to the original
module. Only one source is ever involved (the module being transformed);
synthetic regions of the output (imports, wrapper, export block) carry no
mapping at all, so a lookup inside them yields ``None``.

Components:

- `LineIndex`: character offset -> (line, column) over the original text.
- `SourceMapBuilder`: accumulates mapping segments during emission.
- `SourceMap`: the serialized document, with `original_position_for` lookup.
- `encode_vlq` / `decode_vlq`: the base64 VLQ codec used by ``mappings``.
"""

import base64
import bisect
import json
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_INDEX: Dict[str, int] = {char: index for index, char in enumerate(_B64)}


def encode_vlq(value: int) -> str:
  """
  Encodes one signed integer as base64 VLQ.

  Args:
      value: The integer to encode.

  Returns:
      str: Base64 VLQ digits.
  """
  vlq = (-value << 1) | 1 if value < 0 else value << 1
  out = []
  while True:
    digit = vlq & 0b11111
    vlq >>= 5
    if vlq:
      digit |= 0b100000
    out.append(_B64[digit])
    if not vlq:
      return "".join(out)


def decode_vlq(segment: str) -> List[int]:
  """
  Decodes a run of base64 VLQ digits.

  Args:
      segment: One comma-free segment of a ``mappings`` string.

  Returns:
      List[int]: The decoded signed integers.
  """
  values = []
  shift = 0
  accum = 0
  for char in segment:
    digit = _B64_INDEX[char]
    accum += (digit & 0b11111) << shift
    if digit & 0b100000:
      shift += 5
      continue
    values.append(-(accum >> 1) if accum & 1 else accum >> 1)
    shift = 0
    accum = 0
  return values


class LineIndex:
  """
  Converts character offsets of a text into zero-based (line, column) pairs.
  """

  def __init__(self, text: str):
    self._starts = [0]
    for index, char in enumerate(text):
      if char == "\n":
        self._starts.append(index + 1)

  def locate(self, offset: int) -> Tuple[int, int]:
    line = bisect.bisect_right(self._starts, offset) - 1
    return line, offset - self._starts[line]


class OriginalPosition(BaseModel):
  """
  A location in the original module.

  Attributes:
      source: The original module identity.
      line: 1-based line.
      column: 0-based column.
      name: Original symbol name, when the mapping stored one.
  """

  source: str
  line: int
  column: int
  name: Optional[str] = None


class SourceMap(BaseModel):
  """
  A Source Map v3 document.
  """

  model_config = ConfigDict(populate_by_name=True)

  version: int = 3
  file: Optional[str] = None
  sources: List[str] = Field(default_factory=list)
  sources_content: List[Optional[str]] = Field(default_factory=list, alias="sourcesContent")
  names: List[str] = Field(default_factory=list)
  mappings: str = ""

  def to_dict(self) -> Dict[str, object]:
    """Returns the document with its standard camelCase keys."""
    return self.model_dump(by_alias=True, exclude_none=True)

  def to_json(self) -> str:
    return json.dumps(self.to_dict())

  def to_url(self) -> str:
    """Returns the document as a base64 ``data:`` URL."""
    payload = base64.b64encode(self.to_json().encode("utf-8")).decode("ascii")
    return f"data:application/json;charset=utf-8;base64,{payload}"

  def decoded(self) -> List[List[Tuple[int, ...]]]:
    """
    Decodes ``mappings`` to absolute values.

    Returns:
        List[List[Tuple[int, ...]]]: Per generated line, segments of
        ``(gen_column, source, orig_line, orig_column[, name])``, all zero-based.
    """
    lines: List[List[Tuple[int, ...]]] = []
    source = orig_line = orig_column = name = 0

    for raw_line in self.mappings.split(";"):
      gen_column = 0
      segments: List[Tuple[int, ...]] = []
      for raw in filter(None, raw_line.split(",")):
        fields = decode_vlq(raw)
        gen_column += fields[0]
        if len(fields) == 1:
          segments.append((gen_column,))
          continue
        source += fields[1]
        orig_line += fields[2]
        orig_column += fields[3]
        if len(fields) > 4:
          name += fields[4]
          segments.append((gen_column, source, orig_line, orig_column, name))
        else:
          segments.append((gen_column, source, orig_line, orig_column))
      lines.append(segments)

    return lines

  def original_position_for(self, line: int, column: int) -> Optional[OriginalPosition]:
    """
    Maps a generated position back to the original module.

    Args:
        line: 1-based generated line.
        column: 0-based generated column.

    Returns:
        Optional[OriginalPosition]: The nearest preceding mapping on that line,
        or None when the position lies in synthetic output.
    """
    lines = self.decoded()
    if line < 1 or line > len(lines):
      return None

    segments = lines[line - 1]
    columns = [segment[0] for segment in segments]
    index = bisect.bisect_right(columns, column) - 1
    if index < 0 or len(segments[index]) < 4:
      return None

    segment = segments[index]
    name = self.names[segment[4]] if len(segment) > 4 else None
    return OriginalPosition(
      source=self.sources[segment[1]],
      line=segment[2] + 1,
      column=segment[3],
      name=name,
    )


class SourceMapBuilder:
  """
  Collects mapping segments in generated order and serializes them.
  """

  def __init__(self, source: str, content: Optional[str] = None):
    """
    Args:
        source: Identity of the single original module.
        content: Original text, embedded as ``sourcesContent``.
    """
    self.source = source
    self.content = content
    self._lines: List[List[Tuple[int, Optional[int], int, Optional[int]]]] = [[]]
    self._names: List[str] = []

  def _segments_for(self, gen_line: int) -> List[Tuple[int, Optional[int], int, Optional[int]]]:
    while len(self._lines) <= gen_line:
      self._lines.append([])
    return self._lines[gen_line]

  def add(self, gen_line: int, gen_column: int, orig_line: int, orig_column: int, name: Optional[str] = None) -> None:
    """
    Records one mapping. All coordinates are zero-based.
    """
    name_index = None
    if name is not None:
      if name not in self._names:
        self._names.append(name)
      name_index = self._names.index(name)

    segments = self._segments_for(gen_line)
    if segments and segments[-1][0] == gen_column:
      return
    segments.append((gen_column, orig_line, orig_column, name_index))

  def add_unmapped(self, gen_line: int, gen_column: int) -> None:
    """Marks the start of synthetic output that has no original position."""
    segments = self._segments_for(gen_line)
    if segments and segments[-1][0] == gen_column:
      return
    segments.append((gen_column, None, 0, None))

  def build(self, file: Optional[str] = None) -> SourceMap:
    out_lines = []
    prev_orig_line = prev_orig_column = prev_name = 0

    for segments in self._lines:
      prev_gen_column = 0
      encoded = []
      for gen_column, orig_line, orig_column, name_index in segments:
        parts = [encode_vlq(gen_column - prev_gen_column)]
        prev_gen_column = gen_column
        if orig_line is None:
          encoded.append(parts[0])
          continue

        parts.extend(
          [
            encode_vlq(0),
            encode_vlq(orig_line - prev_orig_line),
            encode_vlq(orig_column - prev_orig_column),
          ]
        )
        if name_index is not None:
          parts.append(encode_vlq(name_index - prev_name))
          prev_name = name_index
        encoded.append("".join(parts))
        prev_orig_line = orig_line
        prev_orig_column = orig_column
      out_lines.append(",".join(encoded))

    return SourceMap(
      file=file,
      sources=[self.source],
      sources_content=[self.content],
      names=list(self._names),
      mappings=";".join(out_lines),
    )
