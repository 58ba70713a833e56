"""
Runtime Configuration Store.

Options come from the ``[tool.cjs_esm]`` table of the nearest
``pyproject.toml`` and are overridden by explicit arguments (usually CLI
flags)::

    [tool.cjs_esm]
    include = ["src/**"]
    exclude = ["src/vendor/**"]
    extensions = [".js", ".cjs"]
    ignore_global = false
    source_map = true
    entry = "src/index.js"

    [tool.cjs_esm.named_exports]
    "node_modules/react/index.js" = ["createElement", "Component"]
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from cjs_esm.pipeline.filters import DEFAULT_EXTENSIONS
from cjs_esm.pipeline.resolver import resolve_package

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

logger = logging.getLogger(__name__)


class RuntimeConfig(BaseModel):
  """
  Configuration for the build plugin and the command line.
  """

  include: List[str] = Field(default_factory=list, description="Globs a module id must match.")
  exclude: List[str] = Field(default_factory=list, description="Globs that reject a module id.")
  extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS), description="Recognized extensions.")
  ignore_global: bool = Field(False, description="Leave `global` and top-level `this` untouched.")
  source_map: bool = Field(True, description="Emit Source Maps.")
  named_exports: Dict[str, List[str]] = Field(
    default_factory=dict, description="Module key -> names the module is known to export."
  )
  entry: Optional[str] = Field(None, description="Entry module id; it does not export `__moduleExports`.")

  @field_validator("extensions")
  @classmethod
  def validate_extensions(cls, v: List[str]) -> List[str]:
    """
    Ensures every extension starts with a dot.

    Raises:
        ValueError: For entries such as ``js``.
    """
    for ext in v:
      if not ext.startswith("."):
        raise ValueError(f"Extension '{ext}' must start with '.'")
    return v

  def resolved_named_exports(self, basedir: Optional[str] = None) -> Dict[str, List[str]]:
    """
    Keys `named_exports` by resolved module path.

    Keys resolve Node-style from `basedir`; keys that cannot be resolved fall
    back to their absolute path.

    Args:
        basedir: Resolution base (defaults to the working directory).

    Returns:
        Dict[str, List[str]]: Resolved path -> names.
    """
    base = basedir or os.getcwd()
    resolved: Dict[str, List[str]] = {}
    for key, names in self.named_exports.items():
      try:
        module_id = resolve_package(key, base, self.extensions)
      except FileNotFoundError:
        module_id = os.path.abspath(os.path.join(base, key))
      resolved[module_id] = list(names)
    return resolved

  @classmethod
  def load(
    cls,
    include: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
    extensions: Optional[List[str]] = None,
    ignore_global: Optional[bool] = None,
    source_map: Optional[bool] = None,
    named_exports: Optional[Dict[str, List[str]]] = None,
    entry: Optional[str] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with explicit arguments.

    Args:
        include (Optional[List[str]]): Override for include globs.
        exclude (Optional[List[str]]): Override for exclude globs.
        extensions (Optional[List[str]]): Override for recognized extensions.
        ignore_global (Optional[bool]): Override for global substitution.
        source_map (Optional[bool]): Override for Source Map emission.
        named_exports (Optional[Dict]): Merged over the TOML table.
        entry (Optional[str]): Override for the entry module.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    final_ignore_global = ignore_global if ignore_global is not None else toml_config.get("ignore_global", False)
    final_source_map = source_map if source_map is not None else toml_config.get("source_map", True)

    final_named = {**toml_config.get("named_exports", {}), **(named_exports or {})}

    final_entry = entry
    if final_entry is None and "entry" in toml_config:
      # relative to the pyproject that declared it
      final_entry = str((toml_dir / toml_config["entry"]).resolve()) if toml_dir else toml_config["entry"]

    return cls(
      include=include if include is not None else toml_config.get("include", []),
      exclude=exclude if exclude is not None else toml_config.get("exclude", []),
      extensions=extensions if extensions is not None else toml_config.get("extensions", list(DEFAULT_EXTENSIONS)),
      ignore_global=final_ignore_global,
      source_map=final_source_map,
      named_exports=final_named,
      entry=final_entry,
    )


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches parents for 'pyproject.toml' and extracts the ``[tool.cjs_esm]`` table.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        logger.warning(f"Ignoring malformed {toml_path}: {e}")
        return {}, None
      return data.get("tool", {}).get("cjs_esm", {}), parent

  return {}, None


def parse_named_export_args(items: Optional[List[str]]) -> Dict[str, List[str]]:
  """
  Parses ``--named-exports`` values of the form ``id=name1,name2``.

  Repeated ids accumulate names.

  Args:
      items (Optional[List[str]]): Raw CLI strings directly from argparse.

  Returns:
      Dict[str, List[str]]: Module key -> names.

  Raises:
      ValueError: If an item has no ``=``.
  """
  if not items:
    return {}

  result: Dict[str, List[str]] = {}
  for item in items:
    if "=" not in item:
      raise ValueError(f"Invalid named export '{item}'. Expected 'id=name1,name2'.")
    key, names = item.split("=", 1)
    bucket = result.setdefault(key.strip(), [])
    for name in names.split(","):
      name = name.strip()
      if name and name not in bucket:
        bucket.append(name)
  return result
