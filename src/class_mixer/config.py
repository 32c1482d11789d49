"""
Runtime Configuration Store.

``MixerConfig`` holds the knobs shared by the composite builder and the
activation façade. Values come from ``[tool.class_mixer]`` in the nearest
``pyproject.toml`` and can be overridden programmatically or from the CLI.

.. code-block:: toml

    [tool.class_mixer]
    strict_mode = true
    cache_dir = "build/mixed"
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore


class MixerConfig(BaseModel):
  """
  Global configuration container for composite builds and activation.
  """

  strict_mode: bool = Field(
    False,
    description="If True, cutpoints or combinators naming unknown members raise instead of being ignored.",
  )
  cache_dir: Optional[Path] = Field(None, description="Directory that relative cache artifact paths resolve against.")
  module_prefix: str = Field(
    "class_mixer_generated",
    description="Module name prefix for composites activated in-process or loaded from artifacts.",
  )

  @field_validator("module_prefix")
  @classmethod
  def validate_module_prefix(cls, v: str) -> str:
    """
    Ensures the prefix is a dotted Python identifier.

    Args:
        v (str): The configured prefix.

    Returns:
        str: The stripped prefix.

    Raises:
        ValueError: If any dotted component is not an identifier.
    """
    v_clean = v.strip()
    if not v_clean or not all(part.isidentifier() for part in v_clean.split(".")):
      raise ValueError(f"Invalid module prefix: '{v_clean}'")
    return v_clean

  def resolve_cache_path(self, path: Path) -> Path:
    """
    Resolves a cache artifact path, anchoring relative paths at ``cache_dir``.

    Args:
        path (Path): Caller supplied artifact path.

    Returns:
        Path: The absolute artifact location.
    """
    path = Path(path)
    if not path.is_absolute() and self.cache_dir is not None:
      path = self.cache_dir / path
    return path.resolve()

  def module_name(self, class_name: str) -> str:
    return f"{self.module_prefix}.{class_name}"

  @classmethod
  def load(
    cls,
    strict_mode: Optional[bool] = None,
    cache_dir: Optional[Path] = None,
    module_prefix: Optional[str] = None,
    search_path: Optional[Path] = None,
  ) -> "MixerConfig":
    """
    Loads configuration from pyproject.toml and applies explicit overrides.

    Args:
        strict_mode (Optional[bool]): Override for strict mode.
        cache_dir (Optional[Path]): Override for the cache directory.
        module_prefix (Optional[str]): Override for the generated module prefix.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        MixerConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    if strict_mode is not None:
      final_strict = strict_mode
    else:
      final_strict = bool(toml_config.get("strict_mode", False))

    final_cache = cache_dir
    if final_cache is None and "cache_dir" in toml_config:
      final_cache = Path(toml_config["cache_dir"])
      if toml_dir and not final_cache.is_absolute():
        final_cache = (toml_dir / final_cache).resolve()

    final_prefix = module_prefix or toml_config.get("module_prefix", "class_mixer_generated")

    return cls(strict_mode=final_strict, cache_dir=final_cache, module_prefix=final_prefix)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("class_mixer", {}), parent

  return {}, None
