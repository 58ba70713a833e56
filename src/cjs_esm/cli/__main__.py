"""
Main Entry Point for cjs-esm CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `cjs_esm.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from cjs_esm import __version__
from cjs_esm.cli import commands
from cjs_esm.config import parse_named_export_args
from cjs_esm.utils.console import log_error


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="cjs-esm: CommonJS to ES module converter")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CONVERT ---
  cmd_conv = subparsers.add_parser("convert", help="Convert a JavaScript file or directory")
  cmd_conv.add_argument("path", type=Path, help="Input source file or directory")
  cmd_conv.add_argument("--out", type=Path, help="Output destination (file or dir)")
  cmd_conv.add_argument("--entry", default=None, help="Entry module; it does not export __moduleExports")
  cmd_conv.add_argument(
    "--ignore-global",
    action="store_true",
    default=None,
    help="Leave `global` and top-level `this` untouched (Overrides config)",
  )
  cmd_conv.add_argument(
    "--no-source-map",
    dest="source_map",
    action="store_false",
    default=None,
    help="Do not emit Source Maps (Overrides config)",
  )
  cmd_conv.add_argument(
    "--named-exports",
    nargs="*",
    help="Named exports per module in id=name1,name2 format (e.g. node_modules/react/index.js=createElement)",
  )
  cmd_conv.add_argument(
    "--json-trace", type=Path, default=None, help="Dump the transform trace events to a JSON file."
  )

  # --- Command: SCAN ---
  cmd_scan = subparsers.add_parser("scan", help="Report CommonJS usage without converting")
  cmd_scan.add_argument("path", type=Path, help="Input source file or directory")
  cmd_scan.add_argument("--json", dest="json_mode", action="store_true", help="Print JSON to stdout")

  args = parser.parse_args(argv)

  if args.command == "convert":
    try:
      named = parse_named_export_args(args.named_exports)
    except ValueError as e:
      log_error(str(e))
      return 2
    return commands.handle_convert(
      args.path,
      args.out,
      entry=args.entry,
      ignore_global=args.ignore_global,
      source_map=args.source_map,
      named_exports=named,
      json_trace_path=args.json_trace,
    )

  elif args.command == "scan":
    return commands.handle_scan(args.path, args.json_mode)

  return 0


if __name__ == "__main__":
  sys.exit(main())
