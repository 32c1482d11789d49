"""
Method Synthesizer.

Turns the combinator decision and the advice plan of one member into a
``MethodDef``.

All combined contributors are assumed to share the reference signature (the
first discovered contributor's). Divergent signatures are a caller
precondition violation and are not reconciled.
"""

from typing import Optional, Sequence

from class_mixer.advice import is_advice_member
from class_mixer.compiler.ir import CallStep, CombineStep, MethodDef
from class_mixer.core.combinator import CombinatorSpec
from class_mixer.core.schema import MemberSignature, SymbolRef
from class_mixer.core.weaver import AdvicePlan


def synthesize_method(
  member: str,
  ordered: Sequence[SymbolRef],
  combinator: Optional[CombinatorSpec],
  plan: AdvicePlan,
  reference_sig: MemberSignature,
  reference: SymbolRef,
) -> MethodDef:
  """
  Synthesizes one composite method.

  A pass-through call to the first ordered contributor is generated when no
  combinator applies or only one contributor remains; otherwise every ordered
  contributor is called and the results are combined.

  Args:
      member: The member name.
      ordered: Contributors in combination order (never empty).
      combinator: Combination function, or None for pass-through.
      plan: Advice hook calls (ignored for advice members).
      reference_sig: Signature preserved by the generated method.
      reference: Contributor the signature was taken from.

  Returns:
      MethodDef: The method record.
  """
  if combinator is None or len(ordered) == 1:
    core = CallStep(contributor=ordered[0].path, member=member)
  else:
    core = CombineStep(
      combinator=combinator.function.path,
      calls=[CallStep(contributor=ref.path, member=member) for ref in ordered],
    )

  advised = not is_advice_member(member)
  return MethodDef(
    name=member,
    member_id=plan.member_id,
    signature=reference_sig.model_copy(deep=True),
    reference=reference.path,
    core=core,
    before=list(plan.before) if advised else [],
    after=list(plan.after) if advised else [],
  )
