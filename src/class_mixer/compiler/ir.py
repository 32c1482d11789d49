"""
Intermediate Representation (IR).

This module defines the structured description of a composite class, as
produced by the Composite Emitter and consumed by code emission backends.

The IR never contains source text for behaviour: each method is a record of
steps (advice calls, a single call or a combination, return), and backends
decide how to express them.
"""

import ast
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from class_mixer.advice import Replace, ShortCircuit
from class_mixer.core.schema import MemberSignature, SymbolRef
from class_mixer.enums import AdvicePhase, AdviceScope, MemberKind, Visibility
from class_mixer.runtime import parameter_default

# Locals of generated method bodies.
RETURN_SLOT = "_mixer_ret"
DECISION_SLOT = "_mixer_decision"

# Names generated code relies on; symbol aliases never take them.
RESERVED_IDENTIFIERS = frozenset(
  {"self", "cls", RETURN_SLOT, DECISION_SLOT, "isinstance", "staticmethod", "classmethod"}
)

SHORT_CIRCUIT_REF = SymbolRef.from_object(ShortCircuit)
REPLACE_REF = SymbolRef.from_object(Replace)
PARAMETER_DEFAULT_REF = SymbolRef.from_object(parameter_default)


def is_literal_source(text: str) -> bool:
  """
  Checks whether a repr can be emitted verbatim.

  Args:
      text (str): Source text of a value.

  Returns:
      bool: True if ``ast.literal_eval`` accepts the text.
  """
  try:
    ast.literal_eval(text)
  except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
    return False
  return True


@dataclass
class CompositeHeader:
  """
  Identity of the composite class.
  """

  name: str
  """Name of the new class."""

  base: str
  """Path (``module:qualname``) of the base class the composite extends."""

  mixins: List[str] = field(default_factory=list)
  """Mixin paths in caller-given order."""

  capability_sets: List[str] = field(default_factory=list)
  """Union of the capability sets of base and mixins, duplicates removed."""

  base_capability_sets: List[str] = field(default_factory=list)
  """Capability sets inherited without being listed (through the base or another listed set)."""

  @property
  def extra_bases(self) -> List[str]:
    """Capability sets the composite must list explicitly next to its base."""
    inherited = set(self.base_capability_sets)
    return [c for c in self.capability_sets if c not in inherited]


@dataclass
class FieldDef:
  """
  One field declaration of the composite.
  """

  name: str
  default: Optional[str]
  """Source text of the value, or None for an annotation-only declaration."""

  origin: str
  """Path of the contributor the field was taken from."""

  annotation: Optional[str] = None
  visibility: Visibility = Visibility.PUBLIC
  is_descriptor: bool = False
  """True for properties, which are always referenced from their origin."""


@dataclass
class CallStep:
  """
  Invocation of one contributor's implementation of a member.
  """

  contributor: str
  member: str


@dataclass
class CombineStep:
  """
  Invocation of every listed contributor, results passed in order to a combinator.
  """

  combinator: str
  calls: List[CallStep] = field(default_factory=list)


@dataclass
class AdviceCall:
  """
  Invocation of an advice hook around the core step.
  """

  hook: str
  phase: AdvicePhase
  scope: AdviceScope
  is_async: bool = False
  """True when the hook is a coroutine function and must be awaited."""


@dataclass
class MethodDef:
  """
  One synthesized method of the composite.
  """

  name: str
  member_id: str
  """Fully qualified identifier passed to the catch-all hooks (``Composite.member``)."""

  signature: MemberSignature
  """Reference signature, taken from the first discovered contributor."""

  reference: str
  """Path of the contributor the signature (and non-literal defaults) come from."""

  core: Union[CallStep, CombineStep]
  before: List[AdviceCall] = field(default_factory=list)
  after: List[AdviceCall] = field(default_factory=list)

  @property
  def kind(self) -> MemberKind:
    return self.signature.kind

  @property
  def is_advised(self) -> bool:
    return bool(self.before or self.after)

  @property
  def has_computed_defaults(self) -> bool:
    """True if a parameter default must be read back from the reference implementation."""
    return any(p.has_default and not is_literal_source(p.default) for p in self.signature.params)

  @property
  def contributors(self) -> List[str]:
    if isinstance(self.core, CombineStep):
      return [c.contributor for c in self.core.calls]
    return [self.core.contributor]


@dataclass
class CompositeDescriptor:
  """
  Generation-ready description of a composite class.
  """

  header: CompositeHeader
  fields: List[FieldDef] = field(default_factory=list)
  methods: List[MethodDef] = field(default_factory=list)

  symbols: Dict[str, SymbolRef] = field(default_factory=dict)
  """Every symbol the generated code references, keyed by path."""

  aliases: Dict[str, str] = field(default_factory=dict)
  """Identifier used in generated code for each symbol path."""

  bindings: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
  """Live objects for symbol paths, when known at build time."""

  @property
  def name(self) -> str:
    return self.header.name

  @property
  def member_names(self) -> List[str]:
    return [m.name for m in self.methods]

  @property
  def field_names(self) -> List[str]:
    return [f.name for f in self.fields]

  def method(self, name: str) -> Optional[MethodDef]:
    for method in self.methods:
      if method.name == name:
        return method
    return None

  def alias(self, path: str) -> str:
    return self.aliases[path]
