"""
Combinator Resolver.

Decides, for one member defined by several contributors, which combination
function applies and in which order the contributors are combined.

Caller-side forms accepted for a combinator entry:

- a callable or ``"module:qualname"`` string: applied to all contributors in
  discovery order;
- a ``(function, [types...])`` pair: the explicit order is intersected with
  the contributors that really define the member, keeping the explicit order.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from rich.markup import escape

from class_mixer.core.provider import TypeProvider
from class_mixer.core.schema import SymbolRef, import_symbol
from class_mixer.errors import ConfigurationError
from class_mixer.utils.console import log_warning


@dataclass(frozen=True)
class CombinatorSpec:
  """
  A combination function plus an optional explicit contributor order.
  """

  function: SymbolRef
  order: Optional[Tuple[SymbolRef, ...]] = None
  binding: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)

  @classmethod
  def of(cls, function: Any, order: Optional[Sequence[SymbolRef]] = None) -> "CombinatorSpec":
    """
    Builds a spec from a callable or a textual function reference.

    Raises:
        ConfigurationError: If ``function`` is neither callable nor a string.
    """
    if isinstance(function, str):
      ref = SymbolRef.parse(function)
      binding = None
    elif callable(function):
      ref = SymbolRef.from_object(function)
      binding = function
    else:
      raise ConfigurationError(f"Combinator must be a callable or 'module:qualname' string, got {function!r}.")
    return cls(function=ref, order=tuple(order) if order is not None else None, binding=binding)

  def resolve_binding(self) -> Callable[..., Any]:
    if self.binding is not None:
      return self.binding
    return import_symbol(self.function)


def parse_combinator(member: str, raw: Any, provider: TypeProvider, participants: Sequence[SymbolRef]) -> CombinatorSpec:
  """
  Normalizes one caller-supplied combinator entry.

  Args:
      member: Member the entry applies to (for error messages).
      raw: The caller's entry.
      provider: Resolves the types named in an explicit order.
      participants: Base and mixins of the build; explicit orders may only name these.

  Returns:
      CombinatorSpec: The normalized spec.

  Raises:
      ConfigurationError: If the entry is malformed or its order names a type outside the mix.
  """
  if isinstance(raw, CombinatorSpec):
    spec = raw
  elif isinstance(raw, (tuple, list)):
    if len(raw) != 2 or isinstance(raw[1], (str, bytes)) or not isinstance(raw[1], (tuple, list)):
      raise ConfigurationError(
        f"Combinator for '{member}' must be a function or a (function, [types...]) pair, got {raw!r}."
      )
    function, order = raw
    spec = CombinatorSpec.of(function, [provider.resolve(t) for t in order])
  elif isinstance(raw, str) or callable(raw):
    spec = CombinatorSpec.of(raw)
  else:
    raise ConfigurationError(f"Invalid combinator for '{member}': {raw!r}.")

  if spec.order is not None:
    known = {p.path for p in participants}
    for ref in spec.order:
      if ref.path not in known:
        raise ConfigurationError(f"Combinator order for '{member}' names '{ref.path}', which is not part of the mix.")
  return spec


def parse_combinators(
  raw: Optional[Mapping[str, Any]],
  provider: TypeProvider,
  participants: Sequence[SymbolRef],
) -> Dict[str, CombinatorSpec]:
  """Normalizes the whole member -> combinator mapping, keeping caller order."""
  specs: Dict[str, CombinatorSpec] = {}
  claimed: Dict[str, Any] = {}
  for member, entry in (raw or {}).items():
    spec = parse_combinator(member, entry, provider, participants)
    specs[member] = _claim(spec, claimed)
  return specs


def _claim(spec: CombinatorSpec, claimed: Dict[str, Any]) -> CombinatorSpec:
  # Distinct callables may share a qualname (two lambdas in one scope).
  if spec.binding is None:
    return spec
  ref = spec.function
  index = 1
  while ref.path in claimed and claimed[ref.path] is not spec.binding:
    index += 1
    ref = spec.function.variant(index)
  claimed[ref.path] = spec.binding
  if ref == spec.function:
    return spec
  return replace(spec, function=ref)


def resolve_combinator(
  member: str,
  contributors: Sequence[SymbolRef],
  spec: Optional[CombinatorSpec],
) -> Tuple[Optional[CombinatorSpec], List[SymbolRef]]:
  """
  Resolves the combination policy for one member.

  Args:
      member: The member name.
      contributors: Types defining the member, in discovery order (base first).
      spec: The registered combinator, if any.

  Returns:
      Tuple[Optional[CombinatorSpec], List[SymbolRef]]: The combinator (None for
      pass-through) and the contributors to combine, in combination order.
  """
  if spec is None:
    return None, list(contributors)

  if spec.order is None:
    return spec, list(contributors)

  defined = {c.path for c in contributors}
  ordered = [ref for ref in spec.order if ref.path in defined]
  if not ordered:
    log_warning(
      f"Combinator order for [code]{escape(member)}[/code] names no type defining it. "
      "Falling back to the first contributor."
    )
    return None, list(contributors)
  return spec, ordered
