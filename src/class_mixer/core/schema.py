"""
Type Descriptor Schema.

Serializable snapshots of everything the composition engine needs to know
about a contributing type. The engine never touches live classes directly: it
reads these models from a ``TypeProvider``, so a mix can be planned from a
JSON manifest as easily as from an imported class.

Classes:
    SymbolRef: Importable address of a class or function (``module:qualname``).
    ParamSpec: One method parameter.
    MemberSignature: One method member.
    FieldSpec: One field (class attribute, property or annotation-only declaration).
    TypeManifest: The full snapshot of a contributing type.
"""

import importlib
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from class_mixer.enums import MemberKind, ParamKind, Visibility
from class_mixer.errors import ConfigurationError

# Class attribute holding a composite's contributor metadata.
RESERVED_FIELD = "__mixer__"

CONSTRUCTOR_NAMES = frozenset(
  {
    "__init__",
    "__new__",
    "__del__",
    "__init_subclass__",
    "__class_getitem__",
    "__subclasshook__",
  }
)


class SymbolRef(BaseModel):
  """
  Address of a class or function that generated code can import.
  """

  model_config = ConfigDict(frozen=True)

  module: str
  qualname: str

  @property
  def path(self) -> str:
    """The canonical ``module:qualname`` string."""
    return f"{self.module}:{self.qualname}"

  @property
  def name(self) -> str:
    return self.qualname.split(".")[-1]

  @property
  def importable(self) -> bool:
    """False for symbols defined inside functions, lambdas and disambiguated variants."""
    return "<" not in self.qualname and "#" not in self.qualname

  def variant(self, index: int) -> "SymbolRef":
    """
    Distinct reference for another object sharing this qualname (e.g. two lambdas).

    Args:
        index: Disambiguation counter (2 for the second object, ...).
    """
    return SymbolRef(module=self.module, qualname=f"{self.qualname}#{index}")

  @classmethod
  def parse(cls, path: str) -> "SymbolRef":
    """
    Parses ``pkg.mod:Qual.Name`` (or the dotted shorthand ``pkg.mod.Name``).

    Args:
        path: The textual reference.

    Returns:
        SymbolRef: The parsed reference.

    Raises:
        ConfigurationError: If the text has no module part.
    """
    text = path.strip()
    if ":" in text:
      module, qualname = text.split(":", 1)
    else:
      module, _, qualname = text.rpartition(".")
    if not module or not qualname:
      raise ConfigurationError(f"Invalid symbol reference '{path}'. Expected 'module:qualname'.")
    return cls(module=module, qualname=qualname)

  @classmethod
  def from_object(cls, obj: Any) -> "SymbolRef":
    """
    Builds the reference of a live class or function.

    Raises:
        ConfigurationError: If the object carries no module/qualname.
    """
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if not module or not qualname:
      raise ConfigurationError(f"Cannot derive an importable reference for {obj!r}.")
    return cls(module=module, qualname=qualname)


def import_symbol(ref: SymbolRef) -> Any:
  """
  Imports the object a ``SymbolRef`` points at.

  Args:
      ref: The reference to resolve.

  Returns:
      The live object.

  Raises:
      ConfigurationError: If the module or attribute chain cannot be resolved.
  """
  if not ref.importable:
    raise ConfigurationError(f"'{ref.path}' is a local symbol and cannot be imported.")
  try:
    obj = importlib.import_module(ref.module)
    for part in ref.qualname.split("."):
      obj = getattr(obj, part)
  except (ImportError, AttributeError) as e:
    raise ConfigurationError(f"Cannot import '{ref.path}': {e}") from e
  return obj


class ParamSpec(BaseModel):
  """
  Serializable representation of a method parameter (receiver excluded).
  """

  name: str
  kind: ParamKind = ParamKind.POSITIONAL_OR_KEYWORD
  default: Optional[str] = Field(None, description="Source text (repr) of the default. None means no default.")
  annotation: Optional[str] = None

  @property
  def has_default(self) -> bool:
    return self.default is not None


class MemberSignature(BaseModel):
  """
  Serializable snapshot of one method member.
  """

  name: str
  kind: MemberKind = MemberKind.INSTANCE
  visibility: Visibility = Visibility.PUBLIC
  params: List[ParamSpec] = Field(default_factory=list)
  is_abstract: bool = False
  is_final: bool = False
  is_async: bool = False

  @property
  def is_constructor(self) -> bool:
    """True for constructors, destructors and implicit class-creation hooks."""
    return self.name in CONSTRUCTOR_NAMES


class FieldSpec(BaseModel):
  """
  Serializable snapshot of one field declaration.
  """

  name: str
  default: Optional[str] = Field(None, description="Source text (repr) of the value. None means declared but unset.")
  annotation: Optional[str] = None
  visibility: Visibility = Visibility.PUBLIC
  is_static: bool = Field(False, description="True for ClassVar declarations, which are never copied.")
  is_descriptor: bool = Field(False, description="True for properties, copied by reference to their origin.")


class TypeManifest(BaseModel):
  """
  Snapshot of a contributing type.

  Members and fields are kept in discovery order, which the engine relies on
  for deterministic output.
  """

  ref: SymbolRef
  members: List[MemberSignature] = Field(default_factory=list)
  fields: List[FieldSpec] = Field(default_factory=list)
  capability_sets: List[SymbolRef] = Field(default_factory=list)

  def member(self, name: str) -> Optional[MemberSignature]:
    for sig in self.members:
      if sig.name == name:
        return sig
    return None
