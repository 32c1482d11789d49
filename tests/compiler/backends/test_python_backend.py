"""
Tests for Python Backend.

Verifies artifact vs in-process rendering, field and parameter emission, advice
bodies and the failure raised for symbols that cannot be imported.
"""

import ast

import pytest

from class_mixer.compiler.backends.python import HEADER_COMMENT, PythonBackend, is_literal_source
from class_mixer.core.emitter import build
from class_mixer.errors import CacheWriteFailure
from mixer_fixtures import Echo, Greeter, Guard, Outer, Tagged, concat

_MARKER = object()


class Holder:
  marker = _MARKER
  _hint = "h"
  __secret = 1
  pending: int

  @property
  def shown(self):
    return self.marker


class Marked:
  def pick(self, value=_MARKER, *, other=_MARKER):
    return value, other


class Async:
  async def fetch(self, key, /, *, retries=3):
    return key


@pytest.fixture
def artifact_backend() -> PythonBackend:
  return PythonBackend(with_imports=True)


@pytest.fixture
def inline_backend() -> PythonBackend:
  return PythonBackend(with_imports=False)


def validate_python(code: str) -> None:
  try:
    ast.parse(code)
  except SyntaxError as e:
    pytest.fail(f"Generated Invalid Python:\n{e}\n\nCode:\n{code}")


def test_artifact_header_and_imports(artifact_backend: PythonBackend) -> None:
  descriptor = build("Mixed", Greeter, [Echo], {"greet": (concat, [Echo, Greeter])})
  code = artifact_backend.compile(descriptor)
  validate_python(code)

  assert code.startswith(HEADER_COMMENT)
  assert "from mixer_fixtures import Greeter as Greeter" in code
  assert "from mixer_fixtures import Echo as Echo" in code
  assert "class Mixed(Greeter):" in code
  assert "return concat(Echo.greet(self), Greeter.greet(self))" in code


def test_inline_source_has_no_imports(inline_backend: PythonBackend) -> None:
  code = inline_backend.compile(build("Mixed", Greeter, [Echo]))
  validate_python(code)
  assert "import" not in code
  assert HEADER_COMMENT not in code
  assert "return Echo.echo(self, text, times=times)" in code


def test_nested_class_import(artifact_backend: PythonBackend) -> None:
  code = artifact_backend.compile(build("Mixed", Greeter, [Outer.Inner]))
  assert "from mixer_fixtures import Outer as Inner" in code
  assert "Inner = Inner.Inner" in code


def test_local_symbol_cannot_be_imported(artifact_backend: PythonBackend, inline_backend: PythonBackend) -> None:
  class Local:
    def hello(self):
      return "local"

  descriptor = build("Mixed", Greeter, [Local])
  with pytest.raises(CacheWriteFailure, match="local scope"):
    artifact_backend.compile(descriptor)
  validate_python(inline_backend.compile(descriptor))


def test_fields(inline_backend: PythonBackend) -> None:
  code = inline_backend.compile(build("Mixed", Greeter, [Holder]))
  validate_python(code)

  assert "__mixer__ = {" in code
  assert "greeting = 'hi'" in code
  assert "marker = Holder.marker" in code
  assert "_hint = 'h'  # was protected" in code
  assert "_Holder__secret = 1  # was private" in code
  assert "pending: 'int'" in code
  assert "shown = Holder.shown" in code


def test_non_literal_defaults_are_read_back(inline_backend: PythonBackend, artifact_backend: PythonBackend) -> None:
  descriptor = build("Mixed", Greeter, [Marked])
  code = inline_backend.compile(descriptor)
  validate_python(code)

  assert "value = parameter_default(Marked.pick, 'value')" in code
  assert "other = parameter_default(Marked.pick, 'other')" in code
  assert "from class_mixer.runtime import parameter_default as parameter_default" in artifact_backend.compile(descriptor)


def test_static_and_class_methods(inline_backend: PythonBackend) -> None:
  code = inline_backend.compile(build("Mixed", Greeter, [Tagged]))
  validate_python(code)

  assert "@staticmethod" in code
  assert "return Tagged.kind()" in code
  assert "@classmethod" in code
  assert "return Tagged.label.__func__(cls, suffix)" in code


def test_async_signature(inline_backend: PythonBackend) -> None:
  code = inline_backend.compile(build("Mixed", Greeter, [Async]))
  validate_python(code)

  tree = ast.parse(code)
  fetch = next(node for node in ast.walk(tree) if isinstance(node, ast.AsyncFunctionDef))
  assert [a.arg for a in fetch.args.posonlyargs] == ["self", "key"]
  assert [a.arg for a in fetch.args.kwonlyargs] == ["retries"]
  assert fetch.args.vararg is None
  assert "return await Async.fetch(self, key, retries=retries)" in code


def test_advised_body(inline_backend: PythonBackend) -> None:
  code = inline_backend.compile(build("Guarded", Greeter, [Guard], before_cutpoints=["greet"]))
  validate_python(code)

  assert "_mixer_decision = self.BEFORE_greet()" in code
  assert "if isinstance(_mixer_decision, ShortCircuit):" in code
  assert "return _mixer_decision.value" in code
  assert "_mixer_ret = Greeter.greet(self)" in code
  assert "return _mixer_ret" in code


def test_rendering_is_deterministic(artifact_backend: PythonBackend) -> None:
  first = artifact_backend.compile(build("Mixed", Greeter, [Echo, Tagged], before_cutpoints=True))
  second = artifact_backend.compile(build("Mixed", Greeter, [Echo, Tagged], before_cutpoints=True))
  assert first == second


@pytest.mark.parametrize(
  "text, expected",
  [
    ("1", True),
    ("'a'", True),
    ("[1, (2, 3)]", True),
    ("{'k': None}", True),
    ("<object object at 0x7f>", False),
    ("datetime.date(2020, 1, 1)", False),
  ],
)
def test_is_literal_source(text: str, expected: bool) -> None:
  assert is_literal_source(text) is expected
