"""
Render Command Handler.

This module implements the logic for the `class-mixer render` command:

1. Configuration loading (``[tool.class_mixer]`` plus CLI overrides).
2. Definition parsing and validation.
3. Composite build and source rendering.
4. Output to stdout or a file.
"""

from pathlib import Path
from typing import Optional

from rich.markup import escape

from class_mixer.compiler.backends.python import PythonBackend
from class_mixer.config import MixerConfig
from class_mixer.core.dsl import MixDefinition
from class_mixer.errors import MixerError
from class_mixer.utils.console import log_error, log_success


def handle_render(definition_path: Path, output_path: Optional[Path], strict: Optional[bool]) -> int:
  """
  Handles the 'render' command execution.

  Args:
      definition_path: JSON or TOML file holding a ``MixDefinition``.
      output_path: Where to write the source. Printed to stdout when omitted.
      strict: Override for strict mode (unknown member names raise).

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not definition_path.is_file():
    log_error(f"Definition not found: [path]{escape(str(definition_path))}[/path]")
    return 1

  config = MixerConfig.load(strict_mode=strict, search_path=definition_path.resolve().parent)

  try:
    definition = MixDefinition.from_file(definition_path)
    descriptor = definition.build(config)
    source = PythonBackend(with_imports=True).compile(descriptor)
  except MixerError as e:
    log_error(f"Cannot render [path]{escape(str(definition_path))}[/path]: {escape(str(e))}")
    return 1

  if output_path is None:
    print(source, end="")
    return 0

  try:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(source, encoding="utf-8")
  except OSError as e:
    log_error(f"Cannot write [path]{escape(str(output_path))}[/path]: {escape(str(e))}")
    return 1

  log_success(f"Rendered [code]{escape(descriptor.name)}[/code] to [path]{escape(str(output_path))}[/path]")
  return 0
