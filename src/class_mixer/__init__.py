"""
class-mixer Package.

Builds composite ("mixed") classes from one base class and an ordered list of
mixin classes. Member collisions are resolved by combinators, and before/after
advice hooks can observe, veto or replace the result of any composite method.

Usage
-----

Simple Mixing
^^^^^^^^^^^^^

.. code-block:: python

    import class_mixer as cm

    class Greeter:
      def greet(self):
        return "hi"

    class Polite:
      def BEFORE_greet(self):
        return None

    Mixed = cm.mix("Mixed", Greeter, [Polite], before_cutpoints=["greet"])
    Mixed().greet()
    # 'hi'

Cached Artifacts
^^^^^^^^^^^^^^^^

.. code-block:: python

    from class_mixer import activate_from_cache, execute

    Account = activate_from_cache(
      "build/account.py",
      False,
      "Account",
      "bank.models:Account",
      ["bank.audit:AuditTrail"],
      combinators={"save": execute},
    )

Advice Contract
^^^^^^^^^^^^^^^

Before-hooks return ``ShortCircuit(value)`` to skip the call, after-hooks
return ``Replace(value)`` to swap the result. See ``class_mixer.advice``.
"""

from class_mixer.advice import Replace, ShortCircuit
from class_mixer.combinators import execute, last, last_decision
from class_mixer.compiler.ir import CompositeDescriptor
from class_mixer.config import MixerConfig
from class_mixer.core.activation import (
  activate,
  activate_from_cache,
  clear_composites,
  composite_info,
  get_composite,
  mix,
  render,
)
from class_mixer.core.combinator import CombinatorSpec
from class_mixer.core.emitter import CompositeEmitter, build
from class_mixer.core.inspector import LiveTypeProvider
from class_mixer.core.provider import ManifestProvider, TypeProvider
from class_mixer.errors import (
  CacheWriteFailure,
  ConfigurationError,
  DuplicateType,
  MixerError,
  UnsupportedHostVersion,
)

__version__ = "0.1.0"

__all__ = [
  "CacheWriteFailure",
  "CombinatorSpec",
  "CompositeDescriptor",
  "CompositeEmitter",
  "ConfigurationError",
  "DuplicateType",
  "LiveTypeProvider",
  "ManifestProvider",
  "MixerConfig",
  "MixerError",
  "Replace",
  "ShortCircuit",
  "TypeProvider",
  "UnsupportedHostVersion",
  "__version__",
  "activate",
  "activate_from_cache",
  "build",
  "clear_composites",
  "composite_info",
  "execute",
  "get_composite",
  "last",
  "last_decision",
  "mix",
  "render",
]
