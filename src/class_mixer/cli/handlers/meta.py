"""
Meta Command Handlers.

This module provides handlers for schema export, enabling editors and external
tools to validate mix definition files.
"""

import json

from class_mixer.core.dsl import MixDefinition


def handle_schema() -> int:
  """
  Exports the Mix Definition JSON Schema.

  Prints the JSON schema derived from the Pydantic model `MixDefinition`
  to standard output. This schema defines the structure required for valid
  JSON or TOML inputs to the `render` command.

  Returns:
      int: Exit code (0 for success).
  """
  schema = MixDefinition.model_json_schema()
  print(json.dumps(schema, indent=2))
  return 0
