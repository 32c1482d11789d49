"""
Live Introspection.

Builds ``TypeManifest`` snapshots from live Python classes using ``inspect``.

Discovery rules:

1.  The MRO is walked from the class itself towards its ancestors, skipping
    ``object`` and the ``ABC``/``Protocol``/``Generic`` markers. Inside each
    class, ``__dict__`` definition order is used. An annotation-only name is
    placed before the next annotated name that has a value, or at the end of
    the class when none follows. The first occurrence of a name wins, whether
    it is a method or a field, exactly like attribute lookup.
2.  Functions, ``staticmethod`` and ``classmethod`` objects are members.
    Plain values, annotation-only names and properties (``property``,
    ``functools.cached_property``) are fields. Other descriptors (slots) and
    dunder data such as ``__doc__`` are ignored.
3.  ``ClassVar`` annotations mark static fields.
4.  Visibility follows Python naming: ``__x`` is private (stored mangled as
    ``_Owner__x``), ``_x`` protected, anything else public.
"""

import abc
import functools
import inspect
import sys
import typing
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from class_mixer.core.provider import TypeLike, TypeProvider
from class_mixer.core.schema import (
  RESERVED_FIELD,
  FieldSpec,
  MemberSignature,
  ParamSpec,
  SymbolRef,
  TypeManifest,
  import_symbol,
)
from class_mixer.enums import MemberKind, ParamKind, Visibility
from class_mixer.errors import ConfigurationError, UnsupportedHostVersion

MIN_PYTHON = (3, 10)

_PARAM_KINDS = {
  inspect.Parameter.POSITIONAL_ONLY: ParamKind.POSITIONAL_ONLY,
  inspect.Parameter.POSITIONAL_OR_KEYWORD: ParamKind.POSITIONAL_OR_KEYWORD,
  inspect.Parameter.VAR_POSITIONAL: ParamKind.VAR_POSITIONAL,
  inspect.Parameter.KEYWORD_ONLY: ParamKind.KEYWORD_ONLY,
  inspect.Parameter.VAR_KEYWORD: ParamKind.VAR_KEYWORD,
}

# Marker bases that never count as capability sets on their own.
_IGNORED_CAPABILITIES = (abc.ABC, typing.Protocol, typing.Generic)

# Descriptors carried into composites by reference.
_PROPERTY_TYPES = (property, functools.cached_property)

# Bookkeeping entries ABCMeta, Protocol and the compiler store in class dicts.
_INTERNAL_ATTRIBUTES = frozenset(
  {"_abc_impl", "_is_protocol", "_is_runtime_protocol", "__annotate__", "__annotate_func__"}
)


def ensure_supported_host(version_info: Optional[Tuple[int, ...]] = None) -> None:
  """
  Verifies the interpreter provides the introspection the engine relies on.

  Args:
      version_info: Version tuple to check. Defaults to ``sys.version_info``.

  Raises:
      UnsupportedHostVersion: If the version is older than ``MIN_PYTHON``
          or ``inspect`` lacks ``get_annotations``.
  """
  version = tuple(version_info if version_info is not None else sys.version_info[:2])
  if version[:2] < MIN_PYTHON or not hasattr(inspect, "get_annotations"):
    wanted = ".".join(str(p) for p in MIN_PYTHON)
    found = ".".join(str(p) for p in version[:3])
    raise UnsupportedHostVersion(f"class-mixer requires Python {wanted} or above (found {found}).")


def name_visibility(name: str, owners: Iterable[type] = ()) -> Visibility:
  """
  Derives the visibility of an attribute from its name.

  Args:
      name: The attribute name as stored in the class ``__dict__``.
      owners: Classes whose mangling prefix identifies private names.

  Returns:
      Visibility: The inferred visibility.
  """
  if name.startswith("__") and name.endswith("__"):
    return Visibility.PUBLIC
  if name.startswith("__"):
    return Visibility.PRIVATE
  for owner in owners:
    prefix = f"_{owner.__name__.lstrip('_')}__"
    if name.startswith(prefix) and len(name) > len(prefix):
      return Visibility.PRIVATE
  if name.startswith("_"):
    return Visibility.PROTECTED
  return Visibility.PUBLIC


def _annotation_text(annotation: Any) -> str:
  if isinstance(annotation, str):
    return annotation
  if isinstance(annotation, type):
    return annotation.__name__
  return str(annotation)


def _safe_repr(value: Any) -> str:
  try:
    return repr(value)
  except Exception:
    return f"<unrepresentable {type(value).__name__}>"


def _is_classvar(annotation: Any) -> bool:
  if isinstance(annotation, str):
    text = annotation.strip()
    return text.startswith("ClassVar") or text.startswith("typing.ClassVar")
  return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def _is_capability_set(klass: type) -> bool:
  if klass in _IGNORED_CAPABILITIES:
    return False
  return isinstance(klass, abc.ABCMeta) or bool(getattr(klass, "_is_protocol", False))


def _unwrap_method(value: Any) -> Optional[Tuple[Any, MemberKind]]:
  if isinstance(value, staticmethod):
    return value.__func__, MemberKind.STATIC
  if isinstance(value, classmethod):
    return value.__func__, MemberKind.CLASS
  if inspect.isfunction(value):
    return value, MemberKind.INSTANCE
  return None


def _is_field_value(name: str, value: Any) -> bool:
  if name == RESERVED_FIELD:
    return True
  if name.startswith("__") and name.endswith("__"):
    return False
  if isinstance(value, _PROPERTY_TYPES):
    return True
  # Slot descriptors and other descriptors are not fields.
  return not hasattr(type(value), "__get__")


def _declaration_order(owner: type, annotations: Dict[str, Any]) -> List[str]:
  # Annotation-only names have no dict entry; they are anchored to the next
  # annotated name that does.
  annotated = list(annotations)
  order: List[str] = []
  cursor = 0
  for name in owner.__dict__:
    if name in annotations:
      position = annotated.index(name)
      order.extend(n for n in annotated[cursor:position] if n not in owner.__dict__)
      cursor = max(cursor, position + 1)
    order.append(name)
  order.extend(n for n in annotated[cursor:] if n not in owner.__dict__)
  return order


class LiveInspector:
  """
  Facade extracting ``TypeManifest`` snapshots from live classes.
  """

  @staticmethod
  def inspect(
    klass: type,
    ref: Optional[SymbolRef] = None,
    name_of: Optional[Callable[[type], SymbolRef]] = None,
  ) -> TypeManifest:
    """
    Creates a TypeManifest from a live class.

    Args:
        klass: The class to inspect.
        ref: Reference to record. Derived from the class when omitted.
        name_of: Names capability-set ancestors. Defaults to ``SymbolRef.from_object``.

    Returns:
        TypeManifest: Members, fields and capability sets in discovery order.

    Raises:
        ConfigurationError: If ``klass`` is not a class.
    """
    if not inspect.isclass(klass):
      raise ConfigurationError(f"Expected a class, got {klass!r}.")

    lineage = [k for k in klass.__mro__ if k is not object and k not in _IGNORED_CAPABILITIES]
    seen = set()
    members: List[MemberSignature] = []
    fields: List[FieldSpec] = []

    for owner in lineage:
      annotations = inspect.get_annotations(owner)

      for name in _declaration_order(owner, annotations):
        if name in seen or name in _INTERNAL_ATTRIBUTES:
          continue
        if name not in owner.__dict__:
          if name.startswith("__") and name.endswith("__"):
            continue
          seen.add(name)
          fields.append(
            FieldSpec(
              name=name,
              default=None,
              annotation=_annotation_text(annotations[name]),
              visibility=name_visibility(name, lineage),
              is_static=_is_classvar(annotations[name]),
            )
          )
          continue

        value = owner.__dict__[name]
        unwrapped = _unwrap_method(value)
        if unwrapped is not None:
          seen.add(name)
          func, kind = unwrapped
          members.append(LiveInspector.inspect_method(name, value, func, kind, lineage))
        elif _is_field_value(name, value):
          seen.add(name)
          fields.append(
            FieldSpec(
              name=name,
              default=_safe_repr(value),
              annotation=_annotation_text(annotations[name]) if name in annotations else None,
              visibility=name_visibility(name, lineage),
              is_static=name in annotations and _is_classvar(annotations[name]),
              is_descriptor=isinstance(value, _PROPERTY_TYPES),
            )
          )

    name_of = name_of or SymbolRef.from_object
    capability_sets = []
    for ancestor in klass.__mro__[1:]:
      if ancestor is not object and _is_capability_set(ancestor):
        capability_sets.append(name_of(ancestor))

    return TypeManifest(
      ref=ref or SymbolRef.from_object(klass),
      members=members,
      fields=fields,
      capability_sets=capability_sets,
    )

  @staticmethod
  def inspect_method(name: str, raw: Any, func: Any, kind: MemberKind, owners: Iterable[type] = ()) -> MemberSignature:
    """
    Snapshots one method.

    The receiver (``self`` / ``cls``) is dropped from the parameter list.
    Callables whose signature cannot be read are recorded as ``(*args, **kwargs)``.

    Args:
        name: Attribute name of the method.
        raw: The object stored in the class dict (may be a static/class method wrapper).
        func: The underlying function.
        kind: Binding flavour.
        owners: Classes used to recognise mangled private names.

    Returns:
        MemberSignature: The signature snapshot.
    """
    params: List[ParamSpec] = []
    try:
      sig_params = list(inspect.signature(func).parameters.values())
      if kind != MemberKind.STATIC and sig_params and sig_params[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
      ):
        sig_params = sig_params[1:]
      for param in sig_params:
        params.append(
          ParamSpec(
            name=param.name,
            kind=_PARAM_KINDS[param.kind],
            default=None if param.default is inspect.Parameter.empty else _safe_repr(param.default),
            annotation=None if param.annotation is inspect.Parameter.empty else _annotation_text(param.annotation),
          )
        )
    except (ValueError, TypeError):
      params = [
        ParamSpec(name="args", kind=ParamKind.VAR_POSITIONAL),
        ParamSpec(name="kwargs", kind=ParamKind.VAR_KEYWORD),
      ]

    return MemberSignature(
      name=name,
      kind=kind,
      visibility=name_visibility(name, owners),
      params=params,
      is_abstract=bool(getattr(raw, "__isabstractmethod__", False) or getattr(func, "__isabstractmethod__", False)),
      is_final=bool(getattr(raw, "__final__", False) or getattr(func, "__final__", False)),
      is_async=inspect.iscoroutinefunction(func),
    )


class LiveTypeProvider(TypeProvider):
  """
  Reflection collaborator backed by live classes.

  Accepts classes directly or ``module:qualname`` strings, which are imported.
  Manifests are computed once per type and cached. Distinct classes sharing a
  qualname (e.g. produced by a class factory) receive variant references so
  each keeps its own manifest.
  """

  def __init__(self) -> None:
    ensure_supported_host()
    self._objects: Dict[str, type] = {}
    self._manifests: Dict[str, TypeManifest] = {}

  def _claim(self, obj: type) -> SymbolRef:
    ref = SymbolRef.from_object(obj)
    candidate = ref
    index = 1
    while candidate.path in self._objects and self._objects[candidate.path] is not obj:
      index += 1
      candidate = ref.variant(index)
    self._objects[candidate.path] = obj
    return candidate

  def resolve(self, type_like: TypeLike) -> SymbolRef:
    if isinstance(type_like, (str, SymbolRef)):
      ref = SymbolRef.parse(type_like) if isinstance(type_like, str) else type_like
      obj = self._objects.get(ref.path)
      if obj is None:
        obj = import_symbol(ref)
        if not inspect.isclass(obj):
          raise ConfigurationError(f"'{ref.path}' is not a class.")
        self._objects[ref.path] = obj
      return ref

    if not inspect.isclass(type_like):
      raise ConfigurationError(f"Expected a class, got {type_like!r}.")
    return self._claim(type_like)

  def manifest(self, ref: SymbolRef) -> TypeManifest:
    cached = self._manifests.get(ref.path)
    if cached is None:
      klass = self._objects.get(ref.path)
      if klass is None:
        ref = self.resolve(ref)
        klass = self._objects[ref.path]
      cached = LiveInspector.inspect(klass, ref, name_of=self._claim)
      self._manifests[ref.path] = cached
    return cached

  def binding(self, ref: SymbolRef) -> Optional[Any]:
    return self._objects.get(ref.path)
