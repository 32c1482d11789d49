"""
Tests for the Combinator Resolver.

Verifies:
1. Accepted caller forms (callable, path string, (function, order) pair).
2. Explicit orders naming types outside the mix are rejected.
3. Resolution: no spec, single function, explicit order intersection.
4. Empty intersections fall back to pass-through with a warning.
5. Distinct callables sharing a qualname get distinct references.
"""

import logging

import pytest

from class_mixer.combinators import execute, last
from class_mixer.core.combinator import CombinatorSpec, parse_combinator, parse_combinators, resolve_combinator
from class_mixer.core.inspector import LiveTypeProvider
from class_mixer.core.schema import SymbolRef
from class_mixer.errors import ConfigurationError

import mixer_fixtures

A = SymbolRef(module="pkg", qualname="A")
B = SymbolRef(module="pkg", qualname="B")
C = SymbolRef(module="pkg", qualname="C")


@pytest.fixture
def provider():
  return LiveTypeProvider()


@pytest.fixture
def participants(provider):
  return [provider.resolve(mixer_fixtures.Greeter), provider.resolve(mixer_fixtures.Echo)]


def test_parse_callable(provider, participants):
  spec = parse_combinator("greet", last, provider, participants)
  assert spec.function.path == "class_mixer.combinators:last"
  assert spec.order is None
  assert spec.resolve_binding() is last


def test_parse_path_string(provider, participants):
  spec = parse_combinator("greet", "mixer_fixtures:concat", provider, participants)
  assert spec.binding is None
  assert spec.resolve_binding() is mixer_fixtures.concat


def test_parse_explicit_order(provider, participants):
  spec = parse_combinator("greet", (last, [mixer_fixtures.Echo, "mixer_fixtures:Greeter"]), provider, participants)
  assert [r.name for r in spec.order] == ["Echo", "Greeter"]


def test_parse_rejects_order_outside_mix(provider, participants):
  with pytest.raises(ConfigurationError, match="not part of the mix"):
    parse_combinator("greet", (last, [mixer_fixtures.Guard]), provider, participants)


@pytest.mark.parametrize("raw", [42, (last,), (last, "Greeter"), (last, [], "extra")])
def test_parse_rejects_malformed(raw, provider, participants):
  with pytest.raises(ConfigurationError):
    parse_combinator("greet", raw, provider, participants)


def test_resolve_without_spec():
  assert resolve_combinator("m", [A, B], None) == (None, [A, B])


def test_resolve_single_function_keeps_discovery_order():
  spec = CombinatorSpec.of(execute)
  assert resolve_combinator("m", [A, B, C], spec) == (spec, [A, B, C])


def test_resolve_explicit_order_intersects():
  spec = CombinatorSpec.of(execute, [C, A, B])
  resolved, ordered = resolve_combinator("m", [A, C], spec)
  assert resolved is spec
  assert ordered == [C, A]


def test_resolve_empty_intersection_falls_back(caplog):
  spec = CombinatorSpec.of(execute, [C])
  with caplog.at_level(logging.WARNING, logger="class_mixer"):
    resolved, ordered = resolve_combinator("m", [A, B], spec)
  assert resolved is None
  assert ordered == [A, B]
  assert "names no type defining it" in caplog.text


def test_lambdas_sharing_a_qualname_are_disambiguated(provider, participants):
  funcs = [lambda *r: "one", lambda *r: "two"]
  specs = parse_combinators({"greet": funcs[0], "echo": funcs[1]}, provider, participants)
  assert specs["greet"].function != specs["echo"].function
  assert specs["echo"].function.qualname.endswith("#2")
  assert specs["echo"].resolve_binding() is funcs[1]


def test_same_callable_shares_reference(provider, participants):
  specs = parse_combinators({"greet": last, "echo": last}, provider, participants)
  assert specs["greet"].function == specs["echo"].function
