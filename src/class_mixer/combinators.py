"""
Built-in combination functions.

A combinator receives the results of every combined contributor, positionally
and in combination order, and returns the composite method's result.
"""

from typing import Any


def execute(*results: Any) -> None:
  """
  Fire-and-forget fan-out: every contributor runs, all results are discarded.
  """
  return None


def last(*results: Any) -> Any:
  """
  Returns the result of the final contributor, or ``None`` if nothing ran.
  """
  if results:
    return results[-1]
  return None


def last_decision(*results: Any) -> Any:
  """
  Returns the last non-``None`` result.

  Default combinator for member-specific advice hooks, so a ``ShortCircuit`` or
  ``Replace`` returned by any contributing hook survives the combination.
  """
  for result in reversed(results):
    if result is not None:
      return result
  return None
