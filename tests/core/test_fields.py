"""
Tests for the Field Synthesizer.

Verifies first-seen-wins merging, static field exclusion, visibility carry-over
and the reserved metadata field.
"""

import ast
from typing import ClassVar

import pytest

from class_mixer.core.fields import RESERVED_FIELD, synthesize_fields
from class_mixer.core.inspector import LiveTypeProvider
from class_mixer.enums import Visibility
from class_mixer.errors import ConfigurationError


class Base:
  x = 1
  shared: ClassVar[int] = 7


class Mixin:
  x = 2
  y: int
  _z: str = "z"
  counter: ClassVar[int] = 0


class Clashing:
  __mixer__ = {}


class PreviouslyMixed:
  __mixer__ = {"base": "pkg:A", "mixins": [], "capability_sets": []}
  kept = True


def test_first_seen_wins_and_statics_skipped():
  provider = LiveTypeProvider()
  base, mixin = provider.resolve(Base), provider.resolve(Mixin)
  fields = synthesize_fields(provider, base, [mixin])

  assert [f.name for f in fields] == [RESERVED_FIELD, "x", "y", "_z"]
  x = fields[1]
  assert x.default == "1"
  assert x.origin == base.path
  y = fields[2]
  assert y.default is None and y.annotation == "int"
  assert fields[3].visibility == Visibility.PROTECTED
  assert fields[3].annotation == "str"


def test_reserved_field_describes_the_mix():
  provider = LiveTypeProvider()
  base, mixin = provider.resolve(Base), provider.resolve(Mixin)
  fields = synthesize_fields(provider, base, [mixin], ["pkg:Cap"])

  meta = ast.literal_eval(fields[0].default)
  assert meta == {"base": base.path, "mixins": [mixin.path], "capability_sets": ["pkg:Cap"]}


def test_reserved_field_name_rejected():
  provider = LiveTypeProvider()
  with pytest.raises(ConfigurationError, match="reserved"):
    synthesize_fields(provider, provider.resolve(Base), [provider.resolve(Clashing)])


def test_composite_metadata_is_not_inherited():
  provider = LiveTypeProvider()
  base = provider.resolve(PreviouslyMixed)
  fields = synthesize_fields(provider, base, [])

  assert [f.name for f in fields] == [RESERVED_FIELD, "kept"]
  assert ast.literal_eval(fields[0].default)["base"] == base.path


class Described:
  @property
  def label(self):
    return "described"


class Relabelled:
  label = "plain"


def test_properties_are_referenced_fields():
  provider = LiveTypeProvider()
  described, relabelled = provider.resolve(Described), provider.resolve(Relabelled)
  fields = synthesize_fields(provider, provider.resolve(Base), [described, relabelled])

  labels = [f for f in fields if f.name == "label"]
  assert len(labels) == 1
  assert labels[0].is_descriptor
  assert labels[0].origin == described.path
