"""
Advice Hook Contract.

Advice hooks are ordinary methods following a naming convention:

- ``BEFORE_ALL(member_id, *args, **kwargs)``: observes every advised call.
- ``BEFORE_<name>(*args, **kwargs)``: may veto the call by returning ``ShortCircuit(value)``.
- ``AFTER_<name>(result, *args, **kwargs)``: may swap the result by returning ``Replace(value)``.
- ``AFTER_ALL(member_id, result, *args, **kwargs)``: observes the final result.

Any return value other than the tags below means "carry on".

Example:

.. code-block:: python

    class Guard:
      def BEFORE_withdraw(self, amount):
        if amount > 100:
          return ShortCircuit("denied")
"""

from dataclasses import dataclass
from typing import Any

BEFORE_PREFIX = "BEFORE_"
AFTER_PREFIX = "AFTER_"
ALL = "ALL"

BEFORE_ALL = BEFORE_PREFIX + ALL
AFTER_ALL = AFTER_PREFIX + ALL


@dataclass(frozen=True)
class ShortCircuit:
  """
  Returned by a before-hook to skip the core call and all after-advice.

  ``value`` becomes the composite method's return value, ``None`` included.
  """

  value: Any = None


@dataclass(frozen=True)
class Replace:
  """
  Returned by an after-hook to replace the result seen by later advice and the caller.
  """

  value: Any = None


def is_advice_member(name: str) -> bool:
  """True if ``name`` is an advice hook (``BEFORE_*`` / ``AFTER_*``)."""
  return name.startswith(BEFORE_PREFIX) or name.startswith(AFTER_PREFIX)


def is_global_advice(name: str) -> bool:
  """True for the catch-all hooks ``BEFORE_ALL`` and ``AFTER_ALL``."""
  return name in (BEFORE_ALL, AFTER_ALL)


def before_hook(member: str) -> str:
  return BEFORE_PREFIX + member


def after_hook(member: str) -> str:
  return AFTER_PREFIX + member
