"""
Error Taxonomy.

Failures raised by the transformation core:

1.  **ParseError**: A module that looks like CommonJS could not be parsed.
    Fatal for that module only. The module identity is appended to the message.
2.  **ConfigurationError**: Named exports were configured for a module that the
    analysis proves is not CommonJS.
3.  **PatchConflictError**: Two scheduled text edits overlap. This is a
    programming defect in the classifier, never a user-facing condition.

Modules that simply do not use CommonJS are not errors; `transform` returns
``None`` for them.
"""

from typing import Optional


class ParseError(ValueError):
  """
  Raised when the JavaScript grammar rejects a module.

  Attributes:
      module_id: Identity (usually the resolved path) of the failing module.
      line: 1-based line of the first syntax error, if known.
      column: 0-based column of the first syntax error, if known.
  """

  def __init__(self, reason: str, module_id: str, line: Optional[int] = None, column: Optional[int] = None):
    self.reason = reason
    self.module_id = module_id
    self.line = line
    self.column = column

    location = f" ({line}:{column})" if line is not None else ""
    super().__init__(f"{reason}{location} in {module_id}")


class ConfigurationError(ValueError):
  """
  Raised when the caller asserted a CommonJS shape the module does not exhibit.
  """

  def __init__(self, module_id: str):
    self.module_id = module_id
    super().__init__(
      f"Custom named exports were specified for {module_id} but it does not appear to be a CommonJS module"
    )


class PatchConflictError(RuntimeError):
  """
  Raised when the patch plan receives overlapping edits.
  """
