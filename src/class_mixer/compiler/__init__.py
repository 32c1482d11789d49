"""
Compiler Package.

Defines the composite Intermediate Representation (IR) and the backend
interface that turns it into executable artifacts.
"""

from class_mixer.compiler.backend import CompilerBackend
from class_mixer.compiler.ir import (
  AdviceCall,
  CallStep,
  CombineStep,
  CompositeDescriptor,
  CompositeHeader,
  FieldDef,
  MethodDef,
)

__all__ = [
  "AdviceCall",
  "CallStep",
  "CombineStep",
  "CompilerBackend",
  "CompositeDescriptor",
  "CompositeHeader",
  "FieldDef",
  "MethodDef",
]
