"""
Inspect Command Handler.

Prints the ``TypeManifest`` of a live class as JSON: the members and fields the
composition engine would see, optionally filtered to the members eligible for
mixing in a given role.
"""

from typing import Optional

from rich.markup import escape

from class_mixer.core.inspector import LiveTypeProvider
from class_mixer.core.inventory import available_members
from class_mixer.enums import Role
from class_mixer.errors import MixerError
from class_mixer.utils.console import log_error


def handle_inspect(type_path: str, role: Optional[str] = None) -> int:
  """
  Handles the 'inspect' command execution.

  Args:
      type_path: The class to inspect, as 'module:qualname'.
      role: 'base' or 'mixin' to list only the members eligible in that role.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  try:
    provider = LiveTypeProvider()
    ref = provider.resolve(type_path)
    manifest = provider.manifest(ref)
    if role is not None:
      manifest = manifest.model_copy(update={"members": available_members(provider, ref, Role(role))})
  except MixerError as e:
    log_error(f"Cannot inspect [code]{escape(type_path)}[/code]: {escape(str(e))}")
    return 1

  print(manifest.model_dump_json(indent=2))
  return 0
