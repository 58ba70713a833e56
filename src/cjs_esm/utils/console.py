"""
Console and Logging Utilities.

All user-facing output of the command line goes through one `rich` console,
and the standard `logging` root logger is routed to that same console through
`rich.logging.RichHandler`. Library modules never print; they log through
``logging.getLogger(__name__)`` at debug level for per-module decisions.

The console sits behind a small proxy so tests (or an embedding build tool)
can redirect output into a buffer with `set_console` while every module keeps
its ``from cjs_esm.utils.console import console`` reference.

Markup styles available in messages and table columns:

- ``[path]``: file system paths and module ids.
- ``[specifier]``: ``require`` specifiers.
- ``[export]``: named exports.

Attributes:
    console (_ConsoleProxy): Stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "specifier": "magenta",
    "export": "green",
  }
)


def _new_console() -> Console:
  return Console(theme=_THEME)


def _install_handler(target: Console) -> None:
  """
  Points the root logger at `target`, replacing any handler installed before.
  """
  root = logging.getLogger()
  for handler in [h for h in root.handlers if isinstance(h, RichHandler)]:
    root.removeHandler(handler)

  root.addHandler(
    RichHandler(
      console=target,
      show_time=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
  )
  root.setLevel(logging.INFO)


class _ConsoleProxy:
  """
  Forwards printing to a swappable `rich.console.Console` backend.

  Swapping the backend also re-points the logging handler, so
  ``logging.info(...)`` lands wherever ``console.print(...)`` does.
  """

  def __init__(self) -> None:
    self._backend = _new_console()
    _install_handler(self._backend)

  @property
  def backend(self) -> Console:
    return self._backend

  def set_backend(self, new_console: Console) -> None:
    # markup such as [path] must resolve on injected consoles too
    new_console.push_theme(_THEME)
    self._backend = new_console
    _install_handler(new_console)

  def reset(self) -> None:
    self.set_backend(_new_console())

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Returns recorded output (the backend must be created with ``record=True``).
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Redirects console output and logging to `new_console`.

  Args:
      new_console (Console): The Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  console.reset()


def get_console() -> Console:
  return console.backend


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content. Can include markup like ``[path]``.
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  logging.error(f"❌ {msg}", extra={"markup": True})
