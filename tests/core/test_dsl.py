"""
Tests for the Mix Definition Language.

Verifies:
1. Loading definitions from JSON and TOML.
2. Validation failures surface as ConfigurationError.
3. Combinator tables are converted to build entries.
4. Embedded manifests plan a composite without importing contributors.
"""

import json

import pytest

from class_mixer.compiler.backends.python import PythonBackend
from class_mixer.compiler.ir import CombineStep
from class_mixer.core.dsl import CombinatorDef, MixDefinition
from class_mixer.core.provider import ManifestProvider
from class_mixer.errors import ConfigurationError

MANIFEST_DEFINITION = {
  "new_class": "Account",
  "base": "bank.models:Account",
  "mixins": ["bank.audit:AuditTrail"],
  "combinators": {
    "save": {"function": "class_mixer.combinators:execute", "order": ["bank.audit:AuditTrail", "bank.models:Account"]}
  },
  "before_cutpoints": ["save"],
  "manifests": [
    {
      "ref": {"module": "bank.models", "qualname": "Account"},
      "members": [{"name": "save"}],
      "fields": [{"name": "balance", "default": "0"}],
    },
    {
      "ref": {"module": "bank.audit", "qualname": "AuditTrail"},
      "members": [{"name": "save"}, {"name": "BEFORE_save"}],
    },
  ],
}

TOML_DEFINITION = """
new_class = "Mixed"
base = "mixer_fixtures:Greeter"
mixins = ["mixer_fixtures:Echo", "mixer_fixtures:Guard"]
before_cutpoints = true

[combinators]
echo = "class_mixer.combinators:last"

[combinators.greet]
function = "mixer_fixtures:concat"
order = ["mixer_fixtures:Echo", "mixer_fixtures:Greeter"]
"""


def test_load_json(tmp_path):
  path = tmp_path / "account.json"
  path.write_text(json.dumps(MANIFEST_DEFINITION), encoding="utf-8")

  definition = MixDefinition.from_file(path)
  assert definition.new_class == "Account"
  assert isinstance(definition.combinators["save"], CombinatorDef)
  assert isinstance(definition.provider(), ManifestProvider)


def test_load_toml(tmp_path):
  path = tmp_path / "mixed.toml"
  path.write_text(TOML_DEFINITION, encoding="utf-8")

  definition = MixDefinition.from_file(path)
  assert definition.before_cutpoints is True
  assert definition.provider() is None
  assert definition.combinator_entries() == {
    "echo": "class_mixer.combinators:last",
    "greet": ("mixer_fixtures:concat", ["mixer_fixtures:Echo", "mixer_fixtures:Greeter"]),
  }


def test_build_from_toml(tmp_path):
  path = tmp_path / "mixed.toml"
  path.write_text(TOML_DEFINITION, encoding="utf-8")

  descriptor = MixDefinition.from_file(path).build()
  greet = descriptor.method("greet")
  assert isinstance(greet.core, CombineStep)
  assert greet.contributors == ["mixer_fixtures:Echo", "mixer_fixtures:Greeter"]
  assert [c.hook for c in greet.before] == ["BEFORE_greet"]


def test_build_from_manifests_without_imports():
  descriptor = MixDefinition.model_validate(MANIFEST_DEFINITION).build()

  save = descriptor.method("save")
  assert save.contributors == ["bank.audit:AuditTrail", "bank.models:Account"]
  assert [c.hook for c in save.before] == ["BEFORE_save"]
  assert descriptor.field_names == ["__mixer__", "balance"]

  code = PythonBackend(with_imports=True).compile(descriptor)
  assert "from bank.models import Account as Account_2" in code
  assert "class Account(Account_2):" in code


@pytest.mark.parametrize(
  "name, content",
  [
    ("mix.yaml", "new_class: X"),
    ("mix.json", "{not json"),
    ("mix.toml", "new_class = "),
    ("mix.json", json.dumps({"base": "a:B"})),
    ("mix.json", json.dumps({"new_class": "class", "base": "a:B"})),
  ],
)
def test_invalid_definitions(tmp_path, name, content):
  path = tmp_path / name
  path.write_text(content, encoding="utf-8")
  with pytest.raises(ConfigurationError):
    MixDefinition.from_file(path)


def test_missing_file(tmp_path):
  with pytest.raises(ConfigurationError, match="Cannot read"):
    MixDefinition.from_file(tmp_path / "absent.json")
