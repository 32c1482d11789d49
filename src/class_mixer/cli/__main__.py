"""
Main Entry Point for class-mixer CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `class_mixer.cli.handlers`.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from class_mixer import __version__
from class_mixer.cli import handlers
from class_mixer.enums import Role
from class_mixer.utils.console import get_logger


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="class-mixer: Composite classes from a base and mixins")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
  parser.add_argument(
    "--path",
    dest="import_paths",
    action="append",
    type=Path,
    default=[],
    help="Directory prepended to sys.path before importing contributors (repeatable)",
  )

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: RENDER ---
  cmd_render = subparsers.add_parser("render", help="Render the source of a composite described by a definition file")
  cmd_render.add_argument("definition", type=Path, help="JSON or TOML mix definition")
  cmd_render.add_argument("--out", type=Path, default=None, help="Output file (default: stdout)")
  cmd_render.add_argument(
    "--strict",
    action="store_true",
    default=None,
    help="Fail on cutpoints or combinators naming unknown members (Overrides config)",
  )

  # --- Command: INSPECT ---
  cmd_inspect = subparsers.add_parser("inspect", help="Print the manifest of a class as JSON")
  cmd_inspect.add_argument("type", help="Class to inspect, as 'module:qualname'")
  cmd_inspect.add_argument(
    "--role",
    choices=[r.value for r in Role],
    default=None,
    help="Only list members eligible for mixing in this role",
  )

  # --- Command: SCHEMA ---
  subparsers.add_parser("schema", help="Print the JSON schema of mix definition files")

  args = parser.parse_args(argv)

  if args.verbose:
    get_logger().setLevel(logging.DEBUG)

  for import_path in reversed(args.import_paths):
    sys.path.insert(0, str(import_path.resolve()))

  if args.command == "render":
    return handlers.handle_render(args.definition, args.out, args.strict)

  elif args.command == "inspect":
    return handlers.handle_inspect(args.type, args.role)

  elif args.command == "schema":
    return handlers.handle_schema()

  return 0


if __name__ == "__main__":
  sys.exit(main())
