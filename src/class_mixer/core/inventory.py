"""
Member Inventory.

Decides which members of a contributing type may be pulled into a composite.

Always excluded: abstract members, constructors/destructors and private
members. A mixin only contributes public members. The base also contributes
protected members, which stay reachable because the composite extends the
base, but never final ones: those are inherited as-is instead of being
re-synthesized.
"""

from typing import List

from class_mixer.core.provider import TypeProvider
from class_mixer.core.schema import MemberSignature, SymbolRef
from class_mixer.enums import Role, Visibility


def is_eligible(sig: MemberSignature, role: Role) -> bool:
  """
  Applies the eligibility rules to one member.

  Args:
      sig: The member snapshot.
      role: Role of the type declaring it.

  Returns:
      bool: True if the member may be mixed.
  """
  if sig.is_abstract or sig.is_constructor:
    return False
  if sig.visibility == Visibility.PRIVATE:
    return False
  if role == Role.MIXIN and sig.visibility == Visibility.PROTECTED:
    return False
  if role == Role.BASE and sig.is_final:
    return False
  return True


def available_members(provider: TypeProvider, ref: SymbolRef, role: Role) -> List[MemberSignature]:
  """
  Lists the members of ``ref`` eligible for mixing, in discovery order.

  Args:
      provider: Reflection collaborator serving the type's manifest.
      ref: The contributing type.
      role: Whether the type is the base or a mixin.

  Returns:
      List[MemberSignature]: Eligible members, order preserved.
  """
  return [sig for sig in provider.list_members(ref) if is_eligible(sig, role)]
