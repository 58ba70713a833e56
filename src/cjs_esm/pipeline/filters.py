"""
Module Id Filters.

`create_filter` builds the include/exclude predicate applied before a module
is handed to the engine. Patterns are globs resolved against the working
directory:

- ``*`` matches within one path segment,
- ``**`` matches across directories,
- ``?`` matches one character of a segment.

Virtual ids (containing ``\\0``) never pass.
"""

import os
import re
from typing import Callable, Iterable, List, Optional, Pattern, Sequence, Union

DEFAULT_EXTENSIONS = (".js",)

Patterns = Optional[Union[str, Iterable[str]]]


def _normalize(path: str) -> str:
  return path.replace("\\", "/")


def glob_to_regex(pattern: str) -> Pattern[str]:
  """
  Compiles a path glob into an anchored regular expression.

  Args:
      pattern: Glob such as ``/src/**/*.js``.

  Returns:
      Pattern[str]: Regex matching whole normalized paths.
  """
  out = []
  i = 0
  while i < len(pattern):
    char = pattern[i]
    if pattern.startswith("**/", i):
      out.append("(?:.*/)?")
      i += 3
    elif pattern.startswith("**", i):
      out.append(".*")
      i += 2
    elif char == "*":
      out.append("[^/]*")
      i += 1
    elif char == "?":
      out.append("[^/]")
      i += 1
    else:
      out.append(re.escape(char))
      i += 1
  return re.compile("^" + "".join(out) + "$")


def _compile(patterns: Patterns) -> List[Pattern[str]]:
  if patterns is None:
    return []
  if isinstance(patterns, str):
    patterns = [patterns]
  return [glob_to_regex(_normalize(os.path.abspath(pattern))) for pattern in patterns]


def create_filter(include: Patterns = None, exclude: Patterns = None) -> Callable[[str], bool]:
  """
  Builds an id predicate.

  Args:
      include: Globs an id must match (any of them). None admits everything.
      exclude: Globs that reject an id.

  Returns:
      Callable[[str], bool]: True when the id should be transformed.
  """
  includes = _compile(include)
  excludes = _compile(exclude)

  def _filter(module_id: str) -> bool:
    if "\0" in module_id:
      return False

    path = _normalize(os.path.abspath(module_id))
    if any(pattern.match(path) for pattern in excludes):
      return False
    if not includes:
      return True
    return any(pattern.match(path) for pattern in includes)

  return _filter


def has_extension(module_id: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> bool:
  """True when the id's extension is one of `extensions`."""
  return os.path.splitext(module_id)[1] in extensions
