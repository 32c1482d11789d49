"""
Runtime Support for Generated Code.

Helpers referenced by the source of composite classes.
"""

import inspect
from typing import Any, Callable


def parameter_default(function: Callable, name: str) -> Any:
  """
  Reads the default of one parameter of a contributor's method.

  Uses ``inspect.signature`` so decorated functions (``functools.wraps``)
  report the default of the wrapped function, as introspection saw it.

  Args:
      function: The contributor's function (receiver included).
      name: The parameter name.

  Returns:
      Any: The default value.
  """
  return inspect.signature(function).parameters[name].default
