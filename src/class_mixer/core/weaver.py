"""
Advice Weaver.

Plans the hook calls surrounding the core call of one composite method.

Ordering:
    before: ``BEFORE_ALL`` then ``BEFORE_<member>`` (a global guard sees every
    call before a specific hook can short-circuit it).
    after: ``AFTER_<member>`` then ``AFTER_ALL`` (global observers see the final,
    possibly replaced, result).

Hooks are only planned when the composite defines them. Advice members never
receive advice themselves.
"""

from dataclasses import dataclass, field
from typing import Container, List

from class_mixer.advice import AFTER_ALL, BEFORE_ALL, after_hook, before_hook, is_advice_member
from class_mixer.compiler.ir import AdviceCall
from class_mixer.enums import AdvicePhase, AdviceScope


@dataclass
class AdvicePlan:
  """
  Hook calls to wrap around one member's core step.
  """

  member_id: str
  before: List[AdviceCall] = field(default_factory=list)
  after: List[AdviceCall] = field(default_factory=list)


def member_identifier(new_class: str, member: str) -> str:
  return f"{new_class}.{member}"


def weave(
  new_class: str,
  member: str,
  before: bool,
  after: bool,
  defined_members: Container[str],
  async_hooks: Container[str] = (),
) -> AdvicePlan:
  """
  Builds the advice plan of one member.

  Args:
      new_class: Name of the composite.
      member: The advised member.
      before: Whether before-advice is enabled for the member.
      after: Whether after-advice is enabled for the member.
      defined_members: Every member name the composite defines.
      async_hooks: Hook names implemented as coroutine functions.

  Returns:
      AdvicePlan: Hook calls in execution order (empty for advice members).
  """
  plan = AdvicePlan(member_id=member_identifier(new_class, member))
  if is_advice_member(member):
    return plan

  if before:
    if BEFORE_ALL in defined_members:
      plan.before.append(AdviceCall(BEFORE_ALL, AdvicePhase.BEFORE, AdviceScope.GLOBAL, BEFORE_ALL in async_hooks))
    specific = before_hook(member)
    if specific in defined_members:
      plan.before.append(AdviceCall(specific, AdvicePhase.BEFORE, AdviceScope.MEMBER, specific in async_hooks))

  if after:
    specific = after_hook(member)
    if specific in defined_members:
      plan.after.append(AdviceCall(specific, AdvicePhase.AFTER, AdviceScope.MEMBER, specific in async_hooks))
    if AFTER_ALL in defined_members:
      plan.after.append(AdviceCall(AFTER_ALL, AdvicePhase.AFTER, AdviceScope.GLOBAL, AFTER_ALL in async_hooks))

  return plan
