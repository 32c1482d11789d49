"""
Tests for Live Introspection.

Verifies:
1. Name based visibility (protected, mangled private, dunders).
2. Method discovery: binding kinds, receiver removal, parameter kinds, defaults.
3. Field discovery: declaration order, annotation-only names, ClassVar statics, properties.
4. Abstract / final / async flags.
5. Capability sets and provider resolution.
"""

import abc
from typing import ClassVar

import pytest

from class_mixer.core.inspector import (
  LiveInspector,
  LiveTypeProvider,
  ensure_supported_host,
  name_visibility,
)
from class_mixer.core.schema import SymbolRef
from class_mixer.enums import MemberKind, ParamKind, Visibility
from class_mixer.errors import ConfigurationError, UnsupportedHostVersion


def mark_final(func):
  func.__final__ = True
  return func


class Sample:
  x = 1
  y: int
  z: ClassVar[int] = 5
  _hidden = "p"
  __secret = "s"

  def __init__(self):
    self.state = 0

  def plain(self, a, b=2):
    return a + b

  def shapes(self, a, /, b, *rest, c=3, **extra):
    return a

  @staticmethod
  def stat(v):
    return v

  @classmethod
  def klass(cls, v="k"):
    return v

  @property
  def prop(self):
    return 1

  async def later(self):
    return 1

  @mark_final
  def sealed(self):
    return 1

  def _helper(self):
    return 1


def test_name_visibility_rules():
  assert name_visibility("value") == Visibility.PUBLIC
  assert name_visibility("__init__") == Visibility.PUBLIC
  assert name_visibility("_value") == Visibility.PROTECTED
  assert name_visibility("__value") == Visibility.PRIVATE
  assert name_visibility("_Sample__secret", [Sample]) == Visibility.PRIVATE
  assert name_visibility("_Sample__secret") == Visibility.PROTECTED


def test_method_kinds_and_receiver_dropped():
  manifest = LiveInspector.inspect(Sample)
  plain = manifest.member("plain")
  assert plain.kind == MemberKind.INSTANCE
  assert [p.name for p in plain.params] == ["a", "b"]
  assert plain.params[1].default == "2"

  assert manifest.member("stat").kind == MemberKind.STATIC
  assert [p.name for p in manifest.member("stat").params] == ["v"]

  klass = manifest.member("klass")
  assert klass.kind == MemberKind.CLASS
  assert klass.params[0].name == "v"
  assert klass.params[0].default == "'k'"


def test_parameter_kinds_are_preserved():
  sig = LiveInspector.inspect(Sample).member("shapes")
  kinds = [(p.name, p.kind) for p in sig.params]
  assert kinds == [
    ("a", ParamKind.POSITIONAL_ONLY),
    ("b", ParamKind.POSITIONAL_OR_KEYWORD),
    ("rest", ParamKind.VAR_POSITIONAL),
    ("c", ParamKind.KEYWORD_ONLY),
    ("extra", ParamKind.VAR_KEYWORD),
  ]
  assert sig.params[3].default == "3"


def test_flags_and_discovery_order():
  manifest = LiveInspector.inspect(Sample)
  names = [m.name for m in manifest.members]
  assert names == ["__init__", "plain", "shapes", "stat", "klass", "later", "sealed", "_helper"]
  assert manifest.member("later").is_async
  assert manifest.member("sealed").is_final
  assert manifest.member("__init__").is_constructor
  assert manifest.member("_helper").visibility == Visibility.PROTECTED
  assert manifest.member("prop") is None


def test_fields():
  fields = {f.name: f for f in LiveInspector.inspect(Sample).fields}
  assert fields["x"].default == "1"
  assert fields["y"].default is None
  assert fields["y"].annotation == "int"
  assert fields["z"].is_static
  assert fields["_hidden"].visibility == Visibility.PROTECTED
  assert fields["_Sample__secret"].visibility == Visibility.PRIVATE
  assert fields["prop"].is_descriptor
  assert not fields["x"].is_descriptor
  assert "__doc__" not in fields


def test_annotation_only_fields_keep_declaration_order():
  class Declared:
    first = 1
    pending: int
    second: str = "b"
    trailing: float
    loose = None

  names = [f.name for f in LiveInspector.inspect(Declared).fields]
  assert names == ["first", "pending", "second", "loose", "trailing"]


def test_first_occurrence_wins_along_mro():
  class Parent:
    value = "parent"

    def run(self):
      return "parent"

  class Child(Parent):
    def run(self):
      return "child"

  manifest = LiveInspector.inspect(Child)
  assert [m.name for m in manifest.members] == ["run"]
  assert manifest.fields[0].name == "value"


def test_abstract_members_and_capability_sets():
  class Port(abc.ABC):
    @abc.abstractmethod
    def send(self, data):
      pass

  class Adapter(Port):
    def send(self, data):
      return data

  port_manifest = LiveInspector.inspect(Port)
  assert port_manifest.member("send").is_abstract
  assert port_manifest.capability_sets == []

  adapter_manifest = LiveInspector.inspect(Adapter)
  assert not adapter_manifest.member("send").is_abstract
  assert adapter_manifest.capability_sets == [SymbolRef.from_object(Port)]
  assert all(f.name != "_abc_impl" for f in adapter_manifest.fields)


def test_non_class_rejected():
  with pytest.raises(ConfigurationError):
    LiveInspector.inspect(len)


def test_host_version_check():
  ensure_supported_host((3, 12))
  with pytest.raises(UnsupportedHostVersion, match="3.10"):
    ensure_supported_host((3, 9, 1))


def test_provider_resolves_strings_and_classes():
  provider = LiveTypeProvider()
  ref = provider.resolve("mixer_fixtures:Greeter")
  assert ref.path == "mixer_fixtures:Greeter"
  assert provider.binding(ref).__name__ == "Greeter"
  assert provider.signature(ref, "greet").name == "greet"
  with pytest.raises(ConfigurationError, match="no member 'missing'"):
    provider.signature(ref, "missing")

  with pytest.raises(ConfigurationError):
    provider.resolve("mixer_fixtures:concat")
  with pytest.raises(ConfigurationError):
    provider.resolve("mixer_fixtures:Missing")


def test_provider_keeps_same_named_classes_apart():
  def make(value):
    class Made:
      def get(self):
        return value

    return Made

  first, second = make(1), make(2)
  provider = LiveTypeProvider()
  ref_a = provider.resolve(first)
  ref_b = provider.resolve(second)

  assert ref_a != ref_b
  assert ref_b.qualname.endswith("#2")
  assert not ref_b.importable
  assert provider.binding(ref_a) is first
  assert provider.binding(ref_b) is second
  assert provider.resolve(first) == ref_a
