"""
Error hierarchy for class-mixer.

Every error raised by the package derives from ``MixerError`` so callers can
catch composition failures with a single clause.

Combining contributors whose method signatures are not call-compatible is a
caller precondition and is deliberately not detected: there is no
``SignatureMismatch`` error.
"""


class MixerError(Exception):
  """Base error."""


class ConfigurationError(MixerError, ValueError):
  """
  Raised when the inputs of a build are invalid.

  Covers malformed combinator specs, explicit references to types that are not
  part of the mix, reserved names, invalid identifiers and, in strict mode,
  cutpoint or combinator entries naming members no contributor defines.
  """


class UnsupportedHostVersion(MixerError):
  """Raised when the interpreter lacks the introspection facilities the engine needs."""


class DuplicateType(MixerError):
  """Raised when a composite name is activated twice in the same process."""

  def __init__(self, name: str):
    self.name = name
    super().__init__(f"Composite type '{name}' is already defined in this process.")


class CacheWriteFailure(MixerError):
  """
  Raised when a composite cannot be persisted as a cache artifact.

  Recovered by ``activate_from_cache``, which falls back to in-process activation.
  """
