"""
Convert Command Handler.

This module implements the logic for the `cjs-esm convert` command.
It orchestrates:
1. Configuration loading (pyproject ``[tool.cjs_esm]`` plus CLI overrides).
2. Build plugin setup (filter, entry module, named exports).
3. Module transformation via the plugin.
4. Output writing (code, ``.map`` files) and trace logging.
"""

import json
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from rich.table import Table

from cjs_esm.config import RuntimeConfig
from cjs_esm.pipeline.plugin import CommonJSPlugin
from cjs_esm.utils.console import console, log_error, log_info, log_success, log_warning


class ConversionOutcome(BaseModel):
  """
  Result of converting one file on the command line.
  """

  transformed: bool = Field(default=False, description="True if the file was CommonJS and got rewritten.")
  success: bool = Field(default=True, description="False if the file could not be processed.")
  errors: List[str] = Field(default_factory=list, description="Error messages encountered.")


def handle_convert(
  input_path: Path,
  output_path: Optional[Path],
  entry: Optional[str] = None,
  ignore_global: Optional[bool] = None,
  source_map: Optional[bool] = None,
  named_exports: Optional[Dict[str, List[str]]] = None,
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'convert' command execution.

  Args:
      input_path: Source file or directory.
      output_path: Destination file or directory. A single file without it is
          printed to stdout.
      entry: Entry module specifier (overrides config).
      ignore_global: Leave ``global``/``this`` untouched (overrides config).
      source_map: Emit Source Maps (overrides config).
      named_exports: Extra named-export configuration.
      json_trace_path: Optional path to dump the trace JSON of a single file.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  search_dir = input_path if input_path.is_dir() else input_path.parent
  config = RuntimeConfig.load(
    ignore_global=ignore_global,
    source_map=source_map,
    named_exports=named_exports,
    entry=entry,
    search_path=search_dir,
  )
  plugin = CommonJSPlugin(config)
  plugin.configure()

  if input_path.is_file():
    outcome = _convert_single_file(input_path, output_path, plugin, json_trace_path)
    return 0 if outcome.success else 1

  if not output_path:
    log_error("Directory conversion requires --out destination directory.")
    return 1

  files = sorted(p for p in input_path.rglob("*") if p.is_file() and p.suffix in config.extensions)
  if not files:
    log_warning(f"No {'/'.join(config.extensions)} files found in {input_path}")
    return 0

  log_info(f"Processing {len(files)} files from {input_path}...")

  batch_results: Dict[str, ConversionOutcome] = {}
  for src_file in files:
    rel_path = src_file.relative_to(input_path)
    dest_file = output_path / rel_path
    batch_trace = dest_file.with_suffix(".trace.json") if json_trace_path else None
    batch_results[str(rel_path)] = _convert_single_file(src_file, dest_file, plugin, batch_trace)

  _print_batch_summary(batch_results)
  return 1 if any(not r.success for r in batch_results.values()) else 0


def _write_trace(path: Path, events: List[dict]) -> None:
  path.parent.mkdir(parents=True, exist_ok=True)
  with open(path, "wt", encoding="utf-8") as f:
    json.dump(events, f, indent=2)
  log_info(f"Trace saved to [path]{path}[/path]")


def _convert_single_file(
  input_path: Path,
  output_path: Optional[Path],
  plugin: CommonJSPlugin,
  json_trace_path: Optional[Path] = None,
) -> ConversionOutcome:
  """
  Transforms one file and writes the result.

  Non-CommonJS files are copied unchanged when an output path is given.

  Args:
      input_path: Source file path.
      output_path: Destination file path (stdout when None).
      plugin: Configured build plugin.
      json_trace_path: Path to save trace event logs.

  Returns:
      ConversionOutcome: Status of the file.
  """
  module_id = str(input_path.resolve())
  try:
    with open(input_path, "rt", encoding="utf-8") as f:
      code = f.read()
    result = plugin.transform(code, module_id)
  except (ValueError, OSError) as e:
    log_error(f"Failed to convert {input_path}: {e}")
    return ConversionOutcome(success=False, errors=[str(e)])

  if result is None:
    if output_path:
      if output_path.resolve() != input_path.resolve():
        output_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(input_path, output_path)
      log_info(f"Not CommonJS, copied: [path]{input_path}[/path]")
    else:
      print(code)
    return ConversionOutcome(transformed=False)

  if json_trace_path and result.trace_events:
    _write_trace(json_trace_path, result.trace_events)

  output = result.code
  if output_path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if result.map is not None:
      map_path = output_path.with_name(output_path.name + ".map")
      result.map.file = output_path.name
      map_path.write_text(result.map.to_json(), encoding="utf-8")
      output += f"\n//# sourceMappingURL={map_path.name}\n"
    output_path.write_text(output, encoding="utf-8")
    log_success(f"Converted: [path]{input_path}[/path] -> [path]{output_path}[/path]")
  else:
    if result.map is not None:
      output += f"\n//# sourceMappingURL={result.map.to_url()}\n"
    print(output)

  return ConversionOutcome(transformed=True)


def _print_batch_summary(results: Dict[str, ConversionOutcome]) -> None:
  """
  Renders a summary table of conversion results to the console.

  Args:
      results: Dictionary mapping filenames to outcomes.
  """
  total = len(results)
  converted = sum(1 for r in results.values() if r.success and r.transformed)
  copied = sum(1 for r in results.values() if r.success and not r.transformed)
  failures = sum(1 for r in results.values() if not r.success)

  if failures == 0:
    log_success(f"Batch Complete: {converted} converted, {copied} copied unchanged ({total} files).")
    return

  table = Table(title="Conversion Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success:
      continue
    issues = "; ".join(res.errors) if res.errors else "Unknown Error"
    table.add_row(filename, "❌ Failed", issues)

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {converted} converted, {copied} copied, {failures} failed.")
