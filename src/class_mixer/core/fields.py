"""
Field Synthesizer.

Merges field declarations across the base and all mixins.

Rules:
    - Contributors are visited base first, then mixins in order.
    - The first declaration of a name wins; later duplicates are dropped.
    - Static (``ClassVar``) fields are never copied.
    - Properties are fields too; they are bound to the contributor's own
      descriptor object.
    - Non-public fields keep their stored (mangled) name so the contributor's
      own methods still reach them, and carry their original visibility.
    - The reserved ``__mixer__`` field is always emitted first. Contributors
      may not declare it, except composites, whose own metadata is dropped.
"""

import ast
from typing import List, Optional, Sequence

from class_mixer.compiler.ir import FieldDef
from class_mixer.core.provider import TypeProvider
from class_mixer.core.schema import RESERVED_FIELD, SymbolRef
from class_mixer.errors import ConfigurationError

_METADATA_KEYS = {"base", "mixins", "capability_sets"}


def composite_metadata(base: SymbolRef, mixins: Sequence[SymbolRef], capability_sets: Sequence[str]) -> str:
  """
  Renders the literal stored in the reserved field.

  Returns:
      str: A dict literal describing the composite's contributors.
  """
  data = {
    "base": base.path,
    "mixins": [m.path for m in mixins],
    "capability_sets": list(capability_sets),
  }
  return repr(data)


def _is_composite_metadata(text: Optional[str]) -> bool:
  if text is None:
    return False
  try:
    value = ast.literal_eval(text)
  except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
    return False
  return isinstance(value, dict) and set(value) == _METADATA_KEYS


def synthesize_fields(
  provider: TypeProvider,
  base: SymbolRef,
  mixins: Sequence[SymbolRef],
  capability_sets: Sequence[str] = (),
) -> List[FieldDef]:
  """
  Builds the composite's field block.

  Args:
      provider: Reflection collaborator.
      base: The base contributor.
      mixins: Mixin contributors in order.
      capability_sets: Paths recorded in the reserved field.

  Returns:
      List[FieldDef]: Reserved field first, then merged fields in discovery order.

  Raises:
      ConfigurationError: If a contributor that is not a composite declares the reserved field name.
  """
  fields: List[FieldDef] = [
    FieldDef(
      name=RESERVED_FIELD,
      default=composite_metadata(base, mixins, capability_sets),
      origin="",
    )
  ]
  seen = {RESERVED_FIELD}

  for ref in [base, *mixins]:
    for spec in provider.list_fields(ref):
      if spec.name == RESERVED_FIELD:
        if _is_composite_metadata(spec.default):
          continue
        raise ConfigurationError(f"'{ref.path}' declares the reserved field '{RESERVED_FIELD}'.")
      if spec.is_static or spec.name in seen:
        continue
      seen.add(spec.name)
      fields.append(
        FieldDef(
          name=spec.name,
          default=spec.default,
          origin=ref.path,
          annotation=spec.annotation,
          visibility=spec.visibility,
          is_descriptor=spec.is_descriptor,
        )
      )
  return fields
