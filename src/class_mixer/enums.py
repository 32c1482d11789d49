"""
Enumerations for class-mixer.

This module defines the standard enumerations used to describe contributing
types, their members and the advice woven around composite methods.
"""

from enum import Enum


class Role(str, Enum):
  """
  Role a contributing type plays in a composite.

  The role decides which members are eligible for mixing (see
  ``class_mixer.core.inventory``).
  """

  BASE = "base"
  MIXIN = "mixin"


class Visibility(str, Enum):
  """
  Name-based visibility of a member or field.
  """

  PUBLIC = "public"
  PROTECTED = "protected"  # _name
  PRIVATE = "private"  # __name (mangled to _Owner__name)


class MemberKind(str, Enum):
  """
  Binding flavour of a method member.
  """

  INSTANCE = "instance"
  STATIC = "static"  # @staticmethod
  CLASS = "class"  # @classmethod


class ParamKind(str, Enum):
  """
  Parameter kinds, mirroring ``inspect.Parameter`` kinds.
  """

  POSITIONAL_ONLY = "positional_only"
  POSITIONAL_OR_KEYWORD = "positional_or_keyword"
  VAR_POSITIONAL = "var_positional"
  KEYWORD_ONLY = "keyword_only"
  VAR_KEYWORD = "var_keyword"


class AdvicePhase(str, Enum):
  """
  Cutpoint around the core call of a composite method.
  """

  BEFORE = "before"
  AFTER = "after"


class AdviceScope(str, Enum):
  """
  Whether an advice hook is the catch-all ``*_ALL`` hook or a member-specific one.
  """

  GLOBAL = "global"
  MEMBER = "member"
