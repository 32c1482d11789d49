"""
Compiler Backend Protocol.

Defines the abstract interface for backends that consume a CompositeDescriptor
and emit a target artifact (Python source text today).
"""

from abc import ABC, abstractmethod
from typing import Any

from class_mixer.compiler.ir import CompositeDescriptor


class CompilerBackend(ABC):
  """
  Abstract base class for code emission backends.
  """

  @abstractmethod
  def compile(self, descriptor: CompositeDescriptor) -> Any:
    """
    Compiles the composite IR into a target artifact.

    Args:
        descriptor (CompositeDescriptor): The fully resolved composite.

    Returns:
        Any: The compiled output (e.g., a source code string).
    """
    pass
