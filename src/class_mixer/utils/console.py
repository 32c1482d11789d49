"""
Logging and Console Utilities.

All user-facing output goes through the standard ``logging`` module rendered by
``rich``. The Rich console sits behind a proxy so the destination (stdout or an
in-memory recorder) can be swapped at runtime via ``set_console``; tests use
this to assert on warnings emitted while recovering from cache failures.

Attributes:
    console (_ConsoleProxy): Stable module-level reference to the active console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_LOGGER_NAME = "class_mixer"

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


class _ConsoleProxy:
  """
  Proxy around ``rich.console.Console``.

  Forwards printing to a swappable backend and keeps the ``class_mixer``
  logger's ``RichHandler`` pointed at that backend.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME)
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and rewires the log handler.

    Args:
        new_console (Console): The Rich Console to write to.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Restores a fresh standard output console."""
    self._backend = Console(theme=_THEME)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    return self._backend

  def _configure_logging(self) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    logger.setLevel(logging.INFO)
    logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Returns captured output (requires a recording backend).

    Args:
        **kwargs: Options passed to ``Console.export_text``.

    Returns:
        str: The captured text.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def get_logger() -> logging.Logger:
  """Returns the package logger every helper below writes to."""
  return logging.getLogger(_LOGGER_NAME)


def set_console(new_console: Console) -> None:
  """
  Redirects console output and logging to ``new_console``.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Resets logging and console to standard output."""
  console.reset()


def get_console() -> Console:
  return console.backend


def log_debug(msg: str) -> None:
  get_logger().debug(msg, extra={"markup": True})


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  get_logger().info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  get_logger().log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning, used for failures the engine recovers from.

  Args:
      msg (str): The message content.
  """
  get_logger().warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  get_logger().error(f"❌ {msg}", extra={"markup": True})
