"""
Module Resolution.

Turns an import specifier into a concrete file path. All resolvers share the
signature ``(importee, importer) -> Optional[str]``; ``None`` means "not
mine", letting a chain built with `first` fall through to the next resolver.

1.  `default_resolver`: absolute paths, entry ids (no importer) against the
    working directory, and relative specifiers against the importer's
    directory. Bare specifiers are left to other resolvers.
2.  `relative_resolver`: relative specifiers probed against a configurable
    extension list, including ``index`` files.
3.  `resolve_package`: Node-style lookup through ``node_modules`` used for
    configuration keys such as ``named_exports = { "react" = [...] }``.
"""

import json
import os
import re
from typing import Callable, List, Optional, Sequence

from cjs_esm.pipeline.filters import DEFAULT_EXTENSIONS

Resolver = Callable[[str, Optional[str]], Optional[str]]

_ABSOLUTE_PATH = re.compile(r"^(?:/|(?:[A-Za-z]:)?[\\|/])")


def is_file(path: str) -> bool:
  return os.path.isfile(path)


def is_absolute(path: str) -> bool:
  return _ABSOLUTE_PATH.match(path) is not None


def add_js_extension_if_necessary(path: str) -> Optional[str]:
  """Returns `path` or ``path + '.js'``, whichever is a file, else None."""
  if is_file(path):
    return path
  path += ".js"
  if is_file(path):
    return path
  return None


def default_resolver(importee: str, importer: Optional[str] = None) -> Optional[str]:
  """
  Resolves the specifiers every build understands.

  Args:
      importee: The specifier.
      importer: Identity of the importing module; None for the entry.

  Returns:
      Optional[str]: An existing file path, or None.
  """
  if is_absolute(importee):
    return add_js_extension_if_necessary(os.path.abspath(importee))

  # entry point: resolve against cwd
  if importer is None:
    return add_js_extension_if_necessary(os.path.abspath(importee))

  # bare specifiers belong to other resolvers
  if not importee.startswith("."):
    return None

  return add_js_extension_if_necessary(os.path.abspath(os.path.join(os.path.dirname(importer), importee)))


def candidates(resolved: str, extensions: Sequence[str]) -> List[str]:
  """``resolved`` itself, then ``resolved<ext>`` and ``resolved/index<ext>`` per extension."""
  paths = [resolved]
  for extension in extensions:
    paths.append(resolved + extension)
    paths.append(os.path.join(resolved, "index" + extension))
  return paths


def relative_resolver(extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> Resolver:
  """
  Builds a resolver for relative specifiers.

  Args:
      extensions: Extensions to probe, in order.

  Returns:
      Resolver: Returns the first existing candidate, or None.
  """

  def _resolve(importee: str, importer: Optional[str] = None) -> Optional[str]:
    if not importee.startswith(".") or not importer:
      return None

    resolved = os.path.abspath(os.path.join(os.path.dirname(importer), importee))
    for candidate in candidates(resolved, extensions):
      if is_file(candidate):
        return candidate
    return None

  return _resolve


def first(resolvers: Sequence[Resolver]) -> Resolver:
  """
  Chains resolvers; the first non-None answer wins.
  """

  def _resolve(importee: str, importer: Optional[str] = None) -> Optional[str]:
    for resolver in resolvers:
      result = resolver(importee, importer)
      if result is not None:
        return result
    return None

  return _resolve


def _load_as_file(path: str, extensions: Sequence[str]) -> Optional[str]:
  if is_file(path):
    return path
  for extension in extensions:
    if is_file(path + extension):
      return path + extension
  return None


def _load_as_directory(path: str, extensions: Sequence[str]) -> Optional[str]:
  manifest = os.path.join(path, "package.json")
  if is_file(manifest):
    with open(manifest, "r", encoding="utf-8") as f:
      try:
        main = json.load(f).get("main")
      except json.JSONDecodeError:
        main = None
    if isinstance(main, str) and main:
      target = os.path.normpath(os.path.join(path, main))
      found = _load_as_file(target, extensions) or _load_as_file(os.path.join(target, "index"), extensions)
      if found:
        return found
  return _load_as_file(os.path.join(path, "index"), extensions)


def _load(path: str, extensions: Sequence[str]) -> Optional[str]:
  return _load_as_file(path, extensions) or _load_as_directory(path, extensions)


def resolve_package(module_id: str, basedir: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str:
  """
  Node-style resolution of a module id.

  Args:
      module_id: Relative path, absolute path or package name (``react``,
          ``lodash/fp``).
      basedir: Directory to resolve from.
      extensions: File extensions to probe.

  Returns:
      str: Absolute path of the resolved file.

  Raises:
      FileNotFoundError: If no candidate exists.
  """
  if module_id.startswith(("./", "../")) or module_id in (".", "..") or is_absolute(module_id):
    found = _load(os.path.abspath(os.path.join(basedir, module_id)), extensions)
    if found:
      return found
    raise FileNotFoundError(f"Cannot find module '{module_id}' from '{basedir}'")

  directory = os.path.abspath(basedir)
  while True:
    if os.path.basename(directory) != "node_modules":
      found = _load(os.path.join(directory, "node_modules", module_id), extensions)
      if found:
        return found
    parent = os.path.dirname(directory)
    if parent == directory:
      break
    directory = parent

  raise FileNotFoundError(f"Cannot find module '{module_id}' from '{basedir}'")
