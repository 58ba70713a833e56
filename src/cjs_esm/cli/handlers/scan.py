"""
Scan Command Handler.

Reports what the classifier sees in each file without rewriting anything:
whether the file is CommonJS, its literal dependencies, its usage flags and
its detected named exports.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from rich.table import Table

from cjs_esm.config import RuntimeConfig
from cjs_esm.core.parser import parse_module
from cjs_esm.core.rewriter.classifier import ReferenceClassifier
from cjs_esm.core.scanners import has_commonjs_keywords
from cjs_esm.utils.console import console, log_error, log_info


def scan_file(path: Path, ignore_global: bool = False) -> Dict[str, Any]:
  """
  Classifies one file.

  Args:
      path: JavaScript file.
      ignore_global: Do not count ``global``/``this`` as CommonJS usage.

  Returns:
      Dict[str, Any]: Report entry with keys ``file``, ``commonjs``,
      ``dependencies``, ``uses`` and ``named_exports``.

  Raises:
      ParseError: If a CommonJS-looking file does not parse.
  """
  code = path.read_text("utf-8")
  entry: Dict[str, Any] = {
    "file": str(path),
    "commonjs": False,
    "dependencies": [],
    "uses": {"module": False, "exports": False, "global": False},
    "named_exports": [],
  }
  if not has_commonjs_keywords(code, ignore_global):
    return entry

  unit = parse_module(code, str(path))
  classification = ReferenceClassifier(unit, ignore_global=ignore_global).classify()

  entry["commonjs"] = classification.is_commonjs
  entry["dependencies"] = [dep.source for dep in classification.dependencies]
  entry["uses"] = {
    "module": classification.usage.module,
    "exports": classification.usage.exports,
    "global": classification.usage.global_object,
  }
  entry["named_exports"] = classification.named_exports
  return entry


def handle_scan(path: Path, json_mode: bool = False) -> int:
  """
  Scans a file or directory for CommonJS usage.

  Args:
      path: Input source file or directory.
      json_mode: If True, print JSON to stdout instead of a table.

  Returns:
      int: Exit code (1 if a file could not be parsed or read).
  """
  if not path.exists():
    log_error(f"Path not found: {path}")
    return 1

  config = RuntimeConfig.load(search_path=path if path.is_dir() else path.parent)
  files = [path] if path.is_file() else sorted(p for p in path.rglob("*") if p.suffix in config.extensions)

  if not json_mode:
    log_info(f"Scanning {len(files)} files...")

  report: List[Dict[str, Any]] = []
  failed = False
  for f in files:
    try:
      report.append(scan_file(f, config.ignore_global))
    except (ValueError, OSError) as e:
      log_error(f"Failed to scan {f.name}: {e}")
      failed = True

  if json_mode:
    print(json.dumps(report, indent=2))
    return 1 if failed else 0

  table = Table(title="CommonJS Scan")
  table.add_column("File", style="cyan")
  table.add_column("CommonJS", justify="center")
  table.add_column("Uses", style="dim")
  table.add_column("Dependencies", style="specifier")
  table.add_column("Named Exports", style="export")

  for item in report:
    uses = ", ".join(name for name, used in item["uses"].items() if used)
    table.add_row(
      item["file"],
      "✅" if item["commonjs"] else "-",
      uses,
      ", ".join(item["dependencies"]),
      ", ".join(item["named_exports"]),
    )

  console.print(table)
  legacy = sum(1 for item in report if item["commonjs"])
  console.print(f"\n[bold]Summary:[/bold] {legacy}/{len(report)} files use CommonJS.")
  return 1 if failed else 0
