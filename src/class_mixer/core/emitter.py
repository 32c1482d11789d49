"""
Composite Emitter.

Orchestrates inventory, combinator resolution, advice weaving, method and field
synthesis across every contributor and produces one ``CompositeDescriptor``.

Pipeline:
    1.  Resolve contributors and the union of their capability sets.
    2.  Synthesize the field block (base first, then mixins).
    3.  Build the member -> contributors map (discovery order).
    4.  Expand cutpoint specs and register default combinators for the advice
        pseudo-members they imply.
    5.  Select the members that need a generated override.
    6.  Synthesize those members.
    7.  Collect referenced symbols and assign their generated-code aliases.

The build is a pure function of its inputs: it performs no I/O and keeps no
state between calls.
"""

import keyword
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from rich.markup import escape

from class_mixer import combinators as builtin_combinators
from class_mixer import runtime
from class_mixer.advice import (
  AFTER_PREFIX,
  ALL,
  BEFORE_PREFIX,
  Replace,
  ShortCircuit,
  is_advice_member,
  is_global_advice,
)
from class_mixer.compiler.ir import (
  PARAMETER_DEFAULT_REF,
  REPLACE_REF,
  RESERVED_IDENTIFIERS,
  SHORT_CIRCUIT_REF,
  AdviceCall,
  CombineStep,
  CompositeDescriptor,
  CompositeHeader,
  MethodDef,
)
from class_mixer.config import MixerConfig
from class_mixer.core.combinator import CombinatorSpec, parse_combinators, resolve_combinator
from class_mixer.core.fields import synthesize_fields
from class_mixer.core.inventory import available_members
from class_mixer.core.provider import TypeLike, TypeProvider
from class_mixer.core.schema import MemberSignature, SymbolRef
from class_mixer.core.synthesizer import synthesize_method
from class_mixer.core.weaver import AdvicePlan, weave
from class_mixer.enums import Role
from class_mixer.errors import ConfigurationError
from class_mixer.utils.console import log_debug, log_warning

CutpointSpec = Any

_NON_IDENTIFIER = re.compile(r"\W")


def expand_cutpoints(spec: CutpointSpec, plain_members: Sequence[str]) -> List[str]:
  """
  Expands a cutpoint spec into an ordered list of names.

  Args:
      spec: ``True`` (every plain member plus ``ALL``), ``False``/``None`` (none),
          a single member name, or an iterable of names that may contain ``ALL``.
      plain_members: Discovered member names that are not advice hooks.

  Returns:
      List[str]: Names in caller order, duplicates removed. May include ``ALL``.

  Raises:
      ConfigurationError: If ``spec`` has an unsupported type.
  """
  if spec is True:
    return [*plain_members, ALL]
  if spec is None or spec is False:
    return []
  if isinstance(spec, str):
    return [spec]
  if isinstance(spec, Iterable):
    names: List[str] = []
    for name in spec:
      if not isinstance(name, str):
        raise ConfigurationError(f"Cutpoint names must be strings, got {name!r}.")
      if name not in names:
        names.append(name)
    return names
  raise ConfigurationError(f"Invalid cutpoint spec {spec!r}. Expected True, a name or a collection of names.")


def _default_advice_combinator(hook: str) -> CombinatorSpec:
  if is_global_advice(hook):
    return CombinatorSpec.of(builtin_combinators.execute)
  return CombinatorSpec.of(builtin_combinators.last_decision)


def _alias_seed(ref: SymbolRef) -> str:
  seed = _NON_IDENTIFIER.sub("_", ref.name.split("#")[0]) or "_sym"
  if seed[0].isdigit():
    seed = f"_{seed}"
  return seed


def assign_aliases(symbols: Iterable[SymbolRef], reserved: Iterable[str]) -> Dict[str, str]:
  """
  Gives every symbol a unique identifier for generated code.

  Aliases start from the symbol's own name and get a numeric suffix on
  collision. Keywords and ``reserved`` names are never used.

  Args:
      symbols: Symbols in the order aliases should be claimed.
      reserved: Identifiers already bound in the generated module or methods.

  Returns:
      Dict[str, str]: Symbol path -> alias.
  """
  taken: Set[str] = set(reserved) | set(keyword.kwlist)
  aliases: Dict[str, str] = {}
  for ref in symbols:
    if ref.path in aliases:
      continue
    seed = _alias_seed(ref)
    alias = seed
    index = 1
    while alias in taken:
      index += 1
      alias = f"{seed}_{index}"
    taken.add(alias)
    aliases[ref.path] = alias
  return aliases


class CompositeEmitter:
  """
  Builds composite descriptors.

  Attributes:
      provider (TypeProvider): Reflection collaborator.
      config (MixerConfig): Controls strict handling of unknown member names.
  """

  def __init__(self, provider: Optional[TypeProvider] = None, config: Optional[MixerConfig] = None) -> None:
    if provider is None:
      from class_mixer.core.inspector import LiveTypeProvider

      provider = LiveTypeProvider()
    self.provider = provider
    self.config = config or MixerConfig()

  def build(
    self,
    new_class: str,
    base: TypeLike,
    mixins: Sequence[TypeLike] = (),
    combinators: Optional[Mapping[str, Any]] = None,
    before_cutpoints: CutpointSpec = None,
    after_cutpoints: CutpointSpec = None,
  ) -> CompositeDescriptor:
    """
    Produces the descriptor of a composite class.

    Args:
        new_class: Identifier of the class to generate.
        base: The type the composite extends.
        mixins: Types whose members are pulled in, in priority order.
        combinators: Member name -> combinator entry.
        before_cutpoints: Members receiving before-advice.
        after_cutpoints: Members receiving after-advice.

    Returns:
        CompositeDescriptor: The generation-ready composite.

    Raises:
        ConfigurationError: On invalid names, duplicate contributors, malformed
            combinators or, in strict mode, unknown member references.
    """
    if not new_class.isidentifier() or keyword.iskeyword(new_class):
      raise ConfigurationError(f"'{new_class}' is not a valid class name.")

    base_ref = self.provider.resolve(base)
    mixin_refs = [self.provider.resolve(m) for m in mixins]
    participants = [base_ref, *mixin_refs]
    seen_paths: Set[str] = set()
    for ref in participants:
      if ref.path in seen_paths:
        raise ConfigurationError(f"'{ref.path}' appears more than once in the mix.")
      seen_paths.add(ref.path)

    # 1. Capability sets
    capability_sets = self._capability_union(participants)
    base_caps = {c.path for c in self.provider.capability_sets(base_ref)} | {base_ref.path}
    extra_caps = self._minimal_bases([c for c in capability_sets if c.path not in base_caps])
    header = CompositeHeader(
      name=new_class,
      base=base_ref.path,
      mixins=[m.path for m in mixin_refs],
      capability_sets=[c.path for c in capability_sets],
      base_capability_sets=[c.path for c in capability_sets if c.path not in {e.path for e in extra_caps}],
    )

    # 2. Fields
    fields = synthesize_fields(self.provider, base_ref, mixin_refs, header.capability_sets)

    # 3. Member map
    member_map: Dict[str, List[Tuple[SymbolRef, MemberSignature]]] = {}
    for ref in participants:
      role = Role.BASE if ref is base_ref else Role.MIXIN
      for sig in available_members(self.provider, ref, role):
        member_map.setdefault(sig.name, []).append((ref, sig))
    plain_members = [name for name in member_map if not is_advice_member(name)]

    # 4. Cutpoints and combinators
    specs = parse_combinators(combinators, self.provider, participants)
    for name in list(specs):
      if name not in member_map:
        self._unknown(f"Combinator registered for '{name}', which no contributor defines.")
        del specs[name]

    before_names = self._checked_cutpoints("before", before_cutpoints, plain_members, member_map)
    after_names = self._checked_cutpoints("after", after_cutpoints, plain_members, member_map)
    for prefix, names in ((BEFORE_PREFIX, before_names), (AFTER_PREFIX, after_names)):
      for name in names:
        hook = prefix + name
        if hook in member_map and hook not in specs:
          specs[hook] = _default_advice_combinator(hook)

    before_enabled = set(before_names) - {ALL}
    after_enabled = set(after_names) - {ALL}
    async_hooks = {name for name, entries in member_map.items() if is_advice_member(name) and entries[0][1].is_async}

    # 5 + 6. Methods
    methods: List[MethodDef] = []
    for name, entries in member_map.items():
      contributors = [ref for ref, _ in entries]
      has_before = name in before_enabled
      has_after = name in after_enabled
      if not (has_before or has_after or len(contributors) > 1 or contributors[0] != base_ref):
        continue

      spec, ordered = resolve_combinator(name, contributors, specs.get(name))
      plan = weave(new_class, name, has_before, has_after, member_map, async_hooks)
      reference, reference_sig = entries[0]
      if not reference_sig.is_async:
        self._drop_async_hooks(name, plan)
      methods.append(synthesize_method(name, ordered, spec, plan, reference_sig, reference))

    # 7. Symbols
    symbols, bindings = self._collect_symbols(participants, extra_caps, methods, specs)
    reserved = set(RESERVED_IDENTIFIERS) | {new_class}
    reserved.update(f.name for f in fields)
    for method in methods:
      reserved.add(method.name)
      reserved.update(p.name for p in method.signature.params)
    aliases = assign_aliases(symbols.values(), reserved)

    log_debug(f"Built composite [code]{escape(new_class)}[/code] with {len(methods)} generated method(s).")
    return CompositeDescriptor(
      header=header,
      fields=fields,
      methods=methods,
      symbols=symbols,
      aliases=aliases,
      bindings=bindings,
    )

  def _unknown(self, message: str) -> None:
    if self.config.strict_mode:
      raise ConfigurationError(message)
    log_warning(f"{escape(message)} Ignoring it.")

  def _drop_async_hooks(self, member: str, plan: AdvicePlan) -> None:
    # A synchronous member cannot await a coroutine hook.
    def usable(calls: List[AdviceCall]) -> List[AdviceCall]:
      kept = []
      for call in calls:
        if call.is_async:
          self._unknown(f"Advice hook '{call.hook}' is a coroutine function but '{member}' is synchronous.")
        else:
          kept.append(call)
      return kept

    plan.before = usable(plan.before)
    plan.after = usable(plan.after)

  def _checked_cutpoints(
    self,
    phase: str,
    spec: CutpointSpec,
    plain_members: Sequence[str],
    member_map: Mapping[str, Any],
  ) -> List[str]:
    names = []
    for name in expand_cutpoints(spec, plain_members):
      if name == ALL:
        names.append(name)
      elif is_advice_member(name):
        self._unknown(f"Advice hook '{name}' cannot carry {phase}-advice.")
      elif name not in member_map:
        self._unknown(f"{phase.capitalize()} cutpoint names '{name}', which no contributor defines.")
      else:
        names.append(name)
    return names

  def _capability_union(self, participants: Sequence[SymbolRef]) -> List[SymbolRef]:
    union: List[SymbolRef] = []
    for ref in participants:
      for cap in self.provider.capability_sets(ref):
        if cap not in union:
          union.append(cap)
    return union

  def _minimal_bases(self, caps: Sequence[SymbolRef]) -> List[SymbolRef]:
    # Listing a class next to one of its own subclasses breaks the MRO.
    implied: Set[str] = set()
    for cap in caps:
      try:
        implied.update(c.path for c in self.provider.capability_sets(cap))
      except ConfigurationError:
        log_debug(f"No manifest for capability set [code]{escape(cap.path)}[/code]; assuming no ancestors.")
    return [c for c in caps if c.path not in implied]

  def _collect_symbols(
    self,
    participants: Sequence[SymbolRef],
    extra_caps: Sequence[SymbolRef],
    methods: Sequence[MethodDef],
    specs: Mapping[str, CombinatorSpec],
  ) -> Tuple[Dict[str, SymbolRef], Dict[str, Any]]:
    symbols: Dict[str, SymbolRef] = {}
    bindings: Dict[str, Any] = {}

    def claim(ref: SymbolRef, binding: Any) -> None:
      if ref.path not in symbols:
        symbols[ref.path] = ref
      if binding is not None:
        bindings.setdefault(ref.path, binding)

    for ref in [*participants, *extra_caps]:
      claim(ref, self.provider.binding(ref))

    combinator_refs = {spec.function.path: spec for spec in specs.values()}
    for method in methods:
      if isinstance(method.core, CombineStep):
        spec = combinator_refs[method.core.combinator]
        claim(spec.function, spec.binding)

    if any(m.before for m in methods):
      claim(SHORT_CIRCUIT_REF, ShortCircuit)
    if any(m.after for m in methods):
      claim(REPLACE_REF, Replace)
    if any(m.has_computed_defaults for m in methods):
      claim(PARAMETER_DEFAULT_REF, runtime.parameter_default)
    return symbols, bindings


def build(
  new_class: str,
  base: TypeLike,
  mixins: Sequence[TypeLike] = (),
  combinators: Optional[Mapping[str, Any]] = None,
  before_cutpoints: CutpointSpec = None,
  after_cutpoints: CutpointSpec = None,
  provider: Optional[TypeProvider] = None,
  config: Optional[MixerConfig] = None,
) -> CompositeDescriptor:
  """
  Builds a composite descriptor with a fresh emitter.

  See ``CompositeEmitter.build`` for the arguments.
  """
  emitter = CompositeEmitter(provider=provider, config=config)
  return emitter.build(new_class, base, mixins, combinators, before_cutpoints, after_cutpoints)
