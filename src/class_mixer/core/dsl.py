"""
Mix Definition Language.

This module defines the Pydantic models used to validate declarative composite
definitions (JSON or TOML files). A definition carries everything a build
needs, so composites can be rendered from the command line or checked into a
repository next to the classes they combine.

.. code-block:: toml

    new_class = "AuditedAccount"
    base = "bank.models:Account"
    mixins = ["bank.audit:AuditTrail"]
    before_cutpoints = ["withdraw"]

    [combinators.save]
    function = "class_mixer.combinators:execute"
    order = ["bank.audit:AuditTrail", "bank.models:Account"]
"""

import json
import keyword
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from class_mixer.compiler.ir import CompositeDescriptor
from class_mixer.config import MixerConfig, tomllib
from class_mixer.core.emitter import build
from class_mixer.core.provider import ManifestProvider, TypeProvider
from class_mixer.core.schema import TypeManifest
from class_mixer.errors import ConfigurationError


class CombinatorDef(BaseModel):
  """
  Combination function with an explicit contributor order.
  """

  function: str = Field(..., description="Combination function as 'module:qualname'.")
  order: Optional[List[str]] = Field(
    None, description="Contributor paths in combination order. Types not defining the member are skipped."
  )


class MixDefinition(BaseModel):
  """
  Declarative description of one composite class.
  """

  new_class: str = Field(..., description="Name of the generated class.")
  base: str = Field(..., description="Base type as 'module:qualname'.")
  mixins: List[str] = Field(default_factory=list, description="Mixin types in priority order.")
  combinators: Dict[str, Union[str, CombinatorDef]] = Field(
    default_factory=dict, description="Member name to function path, or to a {function, order} table."
  )
  before_cutpoints: Union[bool, List[str], None] = Field(
    None, description="true for every member, or the member names (may include 'ALL') receiving before-advice."
  )
  after_cutpoints: Union[bool, List[str], None] = Field(
    None, description="true for every member, or the member names (may include 'ALL') receiving after-advice."
  )
  manifests: Optional[List[TypeManifest]] = Field(
    None, description="Explicit type snapshots. When set, contributors are not imported to plan the build."
  )

  @field_validator("new_class")
  @classmethod
  def validate_new_class(cls, v: str) -> str:
    if not v.isidentifier() or keyword.iskeyword(v):
      raise ValueError(f"'{v}' is not a valid class name")
    return v

  @classmethod
  def from_file(cls, path: Path) -> "MixDefinition":
    """
    Loads a definition from a ``.json`` or ``.toml`` file.

    Args:
        path (Path): The definition file.

    Returns:
        MixDefinition: The validated definition.

    Raises:
        ConfigurationError: If the file cannot be parsed or fails validation.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".toml"):
      raise ConfigurationError(f"Unsupported definition format '{path.suffix}'. Use .json or .toml.")
    if suffix == ".toml" and tomllib is None:
      raise ConfigurationError("Reading TOML definitions requires 'tomli' on Python < 3.11.")

    try:
      if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
      else:
        with open(path, "rb") as f:
          data = tomllib.load(f)
    except (OSError, ValueError) as e:
      raise ConfigurationError(f"Cannot read mix definition '{path}': {e}") from e

    try:
      return cls.model_validate(data)
    except ValidationError as e:
      raise ConfigurationError(f"Invalid mix definition '{path}':\n{e}") from e

  def combinator_entries(self) -> Dict[str, Any]:
    """Converts the declared combinators to the forms ``build`` accepts."""
    entries: Dict[str, Any] = {}
    for member, entry in self.combinators.items():
      if isinstance(entry, CombinatorDef):
        entries[member] = entry.function if entry.order is None else (entry.function, list(entry.order))
      else:
        entries[member] = entry
    return entries

  def provider(self) -> Optional[TypeProvider]:
    if self.manifests is None:
      return None
    return ManifestProvider(self.manifests)

  def build(self, config: Optional[MixerConfig] = None) -> CompositeDescriptor:
    """
    Builds the described composite.

    Args:
        config (Optional[MixerConfig]): Runtime configuration (strict mode).

    Returns:
        CompositeDescriptor: The composite IR.
    """
    return build(
      self.new_class,
      self.base,
      self.mixins,
      self.combinator_entries(),
      self.before_cutpoints,
      self.after_cutpoints,
      provider=self.provider(),
      config=config,
    )
