"""
CLI Command Handlers Facade.

Re-exports the handlers from `cjs_esm.cli.handlers` so the dispatcher (and
tests patching it) address a single module.
"""

from cjs_esm.cli.handlers.convert import (
  handle_convert,
  _convert_single_file,
  _print_batch_summary,
)
from cjs_esm.cli.handlers.scan import handle_scan, scan_file

__all__ = [
  "_convert_single_file",
  "_print_batch_summary",
  "handle_convert",
  "handle_scan",
  "scan_file",
]
