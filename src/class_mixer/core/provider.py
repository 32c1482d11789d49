"""
Type Descriptor Providers.

A ``TypeProvider`` is the reflection collaborator of the composition engine.
It turns whatever the caller passes as a contributing type (a class, a
``module:qualname`` string, a ``SymbolRef``) into a ``SymbolRef`` and serves the
``TypeManifest`` describing it.

Two implementations exist:

- ``LiveTypeProvider`` (``class_mixer.core.inspector``) introspects live classes.
- ``ManifestProvider`` serves manifests supplied up-front, e.g. loaded from
  JSON, so a composite can be planned without importing its contributors.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Union

from class_mixer.core.schema import FieldSpec, MemberSignature, SymbolRef, TypeManifest
from class_mixer.errors import ConfigurationError

TypeLike = Union[type, str, SymbolRef]


class TypeProvider(ABC):
  """
  Abstract reflection collaborator.
  """

  @abstractmethod
  def resolve(self, type_like: TypeLike) -> SymbolRef:
    """
    Normalizes a caller-supplied type reference.

    Args:
        type_like: A class, a ``module:qualname`` string or a SymbolRef.

    Returns:
        SymbolRef: The canonical reference.
    """

  @abstractmethod
  def manifest(self, ref: SymbolRef) -> TypeManifest:
    """Returns the snapshot for a resolved reference."""

  def binding(self, ref: SymbolRef) -> Optional[Any]:
    """
    Returns the live object behind ``ref`` if the provider holds one.

    Providers without live objects return None and activation falls back to
    importing the reference.
    """
    return None

  def list_members(self, ref: SymbolRef) -> List[MemberSignature]:
    return list(self.manifest(ref).members)

  def signature(self, ref: SymbolRef, name: str) -> MemberSignature:
    """
    Returns the signature of member ``name`` on ``ref``.

    Raises:
        ConfigurationError: If the type has no such member.
    """
    sig = self.manifest(ref).member(name)
    if sig is None:
      raise ConfigurationError(f"'{ref.path}' defines no member '{name}'.")
    return sig

  def list_fields(self, ref: SymbolRef) -> List[FieldSpec]:
    return list(self.manifest(ref).fields)

  def capability_sets(self, ref: SymbolRef) -> List[SymbolRef]:
    return list(self.manifest(ref).capability_sets)


class ManifestProvider(TypeProvider):
  """
  Serves explicit manifests, keyed by their ``module:qualname`` path.
  """

  def __init__(self, manifests: Iterable[TypeManifest]):
    self._manifests: Dict[str, TypeManifest] = {m.ref.path: m for m in manifests}

  def resolve(self, type_like: TypeLike) -> SymbolRef:
    if isinstance(type_like, SymbolRef):
      ref = type_like
    elif isinstance(type_like, str):
      ref = SymbolRef.parse(type_like)
    else:
      ref = SymbolRef.from_object(type_like)

    if ref.path not in self._manifests:
      raise ConfigurationError(f"No manifest registered for '{ref.path}'.")
    return ref

  def manifest(self, ref: SymbolRef) -> TypeManifest:
    try:
      return self._manifests[ref.path]
    except KeyError:
      raise ConfigurationError(f"No manifest registered for '{ref.path}'.") from None
