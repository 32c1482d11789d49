"""
Activation Façade.

Turns composite descriptors into live classes.

Entry points:

- ``activate``: executes the rendered composite in a fresh module.
- ``activate_from_cache``: reuses a source artifact on disk, creating it when
  missing (or when ``rewrite`` is set). Write and load failures are logged and
  recovered by activating in-process.
- ``mix`` / ``render``: build and activate, or build and render, in one call.

The module keeps the only process-wide state of the package: the registry of
activated composite names. Activating a name twice raises ``DuplicateType``.
"""

import linecache
import sys
import types
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Sequence, Union

from rich.markup import escape

from class_mixer.compiler.backends.python import PythonBackend
from class_mixer.compiler.ir import CompositeDescriptor
from class_mixer.config import MixerConfig
from class_mixer.core.emitter import CutpointSpec, build
from class_mixer.core.provider import TypeLike, TypeProvider
from class_mixer.core.schema import RESERVED_FIELD, import_symbol
from class_mixer.errors import CacheWriteFailure, ConfigurationError, DuplicateType
from class_mixer.utils.console import log_debug, log_warning

_COMPOSITES: Dict[str, type] = {}


def get_composite(name: str) -> Optional[type]:
  """Returns the composite activated under ``name``, if any."""
  return _COMPOSITES.get(name)


def clear_composites() -> None:
  """
  Forgets every activated composite and unloads their generated modules.

  Source lines registered for tracebacks go with them. Classes already
  handed out stay usable.
  """
  for cls in _COMPOSITES.values():
    module = sys.modules.get(cls.__module__)
    if module is not None and getattr(module, cls.__name__, None) is cls:
      del sys.modules[cls.__module__]
      linecache.cache.pop(module.__file__, None)
  _COMPOSITES.clear()


def composite_info(cls: type) -> Dict[str, Any]:
  """
  Reads the contributor metadata stored on a composite class.

  Args:
      cls (type): A class produced by this package.

  Returns:
      Dict[str, Any]: ``base``, ``mixins`` and ``capability_sets`` paths.

  Raises:
      ConfigurationError: If ``cls`` is not a composite.
  """
  info = cls.__dict__.get(RESERVED_FIELD)
  if not isinstance(info, dict):
    raise ConfigurationError(f"{cls!r} is not a composite class.")
  return dict(info)


def _ensure_available(name: str) -> None:
  if name in _COMPOSITES:
    raise DuplicateType(name)


def _register(cls: type, namespace: Optional[MutableMapping[str, Any]]) -> type:
  _COMPOSITES[cls.__name__] = cls
  if namespace is not None:
    namespace[cls.__name__] = cls
  return cls


def _symbol_namespace(descriptor: CompositeDescriptor) -> Dict[str, Any]:
  seeded = {}
  for path, ref in descriptor.symbols.items():
    obj = descriptor.bindings.get(path)
    if obj is None:
      obj = import_symbol(ref)
    seeded[descriptor.alias(path)] = obj
  return seeded


def _execute(
  source: str,
  filename: str,
  module_name: str,
  class_name: str,
  seed: Optional[Mapping[str, Any]] = None,
) -> type:
  module = types.ModuleType(module_name)
  module.__file__ = filename
  if seed:
    module.__dict__.update(seed)

  code = compile(source, filename, "exec")
  sys.modules[module_name] = module
  try:
    exec(code, module.__dict__)
    cls = module.__dict__.get(class_name)
    if not isinstance(cls, type):
      raise ImportError(f"'{filename}' does not define class '{class_name}'.")
  except BaseException:
    sys.modules.pop(module_name, None)
    raise
  return cls


def load_artifact(path: Path, class_name: str, config: Optional[MixerConfig] = None) -> type:
  """
  Executes a cache artifact and returns the class it defines.

  Args:
      path (Path): The artifact file.
      class_name (str): Name of the composite defined by the artifact.
      config (Optional[MixerConfig]): Supplies the module name prefix.

  Returns:
      type: The composite class (not registered).

  Raises:
      OSError: If the file cannot be read.
      ImportError: If the artifact does not define ``class_name`` or imports fail.
  """
  config = config or MixerConfig()
  source = Path(path).read_text(encoding="utf-8")
  return _execute(source, str(path), config.module_name(class_name), class_name)


def activate(
  descriptor: CompositeDescriptor,
  namespace: Optional[MutableMapping[str, Any]] = None,
  config: Optional[MixerConfig] = None,
) -> type:
  """
  Defines the composite in the running process.

  Args:
      descriptor (CompositeDescriptor): The composite to activate.
      namespace (Optional[MutableMapping]): Mapping (e.g. ``globals()``) to bind the class into.
      config (Optional[MixerConfig]): Supplies the module name prefix.

  Returns:
      type: The new class.

  Raises:
      DuplicateType: If a composite with this name was already activated.
  """
  config = config or MixerConfig()
  _ensure_available(descriptor.name)

  source = PythonBackend(with_imports=False).compile(descriptor)
  module_name = config.module_name(descriptor.name)
  filename = f"<class-mixer:{module_name}>"
  linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)

  cls = _execute(source, filename, module_name, descriptor.name, _symbol_namespace(descriptor))
  log_debug(f"Activated [code]{escape(descriptor.name)}[/code] in-process.")
  return _register(cls, namespace)


def activate_from_cache(
  cache_path: Union[str, Path],
  rewrite: bool,
  new_class: str,
  base: TypeLike,
  mixins: Sequence[TypeLike] = (),
  combinators: Optional[Mapping[str, Any]] = None,
  before_cutpoints: CutpointSpec = None,
  after_cutpoints: CutpointSpec = None,
  *,
  provider: Optional[TypeProvider] = None,
  config: Optional[MixerConfig] = None,
  namespace: Optional[MutableMapping[str, Any]] = None,
) -> type:
  """
  Activates a composite through a source artifact on disk.

  An existing artifact is loaded as-is unless ``rewrite`` is set; nothing is
  rebuilt in that case. Otherwise the composite is built, rendered with
  imports, written and loaded. When writing fails (``OSError``, or
  ``CacheWriteFailure`` for contributors defined in local scopes) or the
  artifact cannot be loaded, a warning is logged and the composite is
  activated in-process instead.

  Args:
      cache_path: Artifact location. Relative paths resolve against ``config.cache_dir``.
      rewrite: Regenerate the artifact even if it exists.
      new_class: Name of the composite.
      base: The type the composite extends.
      mixins: Mixin types in priority order.
      combinators: Member name -> combinator entry.
      before_cutpoints: Members receiving before-advice.
      after_cutpoints: Members receiving after-advice.
      provider: Reflection collaborator. Defaults to live introspection.
      config: Runtime configuration.
      namespace: Mapping to bind the class into.

  Returns:
      type: The composite class.

  Raises:
      DuplicateType: If a composite with this name was already activated.
  """
  config = config or MixerConfig()
  _ensure_available(new_class)
  path = config.resolve_cache_path(Path(cache_path))

  if not rewrite and path.is_file():
    try:
      cls = load_artifact(path, new_class, config)
    except Exception as e:
      log_warning(
        f"Could not load cache artifact [path]{escape(str(path))}[/path]: {escape(str(e))}. Rebuilding in-process."
      )
    else:
      log_debug(f"Loaded [code]{escape(new_class)}[/code] from [path]{escape(str(path))}[/path].")
      return _register(cls, namespace)
    descriptor = build(
      new_class, base, mixins, combinators, before_cutpoints, after_cutpoints, provider=provider, config=config
    )
    return activate(descriptor, namespace, config)

  descriptor = build(
    new_class, base, mixins, combinators, before_cutpoints, after_cutpoints, provider=provider, config=config
  )
  try:
    source = PythonBackend(with_imports=True).compile(descriptor)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
  except (OSError, CacheWriteFailure) as e:
    log_warning(
      f"Could not write cache artifact [path]{escape(str(path))}[/path]: {escape(str(e))}. Activating in-process."
    )
    return activate(descriptor, namespace, config)

  try:
    cls = load_artifact(path, new_class, config)
  except Exception as e:
    log_warning(
      f"Could not load cache artifact [path]{escape(str(path))}[/path]: {escape(str(e))}. Activating in-process."
    )
    return activate(descriptor, namespace, config)

  log_debug(f"Wrote and loaded [code]{escape(new_class)}[/code] from [path]{escape(str(path))}[/path].")
  return _register(cls, namespace)


def mix(
  new_class: str,
  base: TypeLike,
  mixins: Sequence[TypeLike] = (),
  combinators: Optional[Mapping[str, Any]] = None,
  before_cutpoints: CutpointSpec = None,
  after_cutpoints: CutpointSpec = None,
  *,
  provider: Optional[TypeProvider] = None,
  config: Optional[MixerConfig] = None,
  namespace: Optional[MutableMapping[str, Any]] = None,
) -> type:
  """
  Builds and activates a composite in one call.

  Example:

  .. code-block:: python

      Account = mix("Account", Base, [Audit], combinators={"save": execute})
  """
  descriptor = build(
    new_class, base, mixins, combinators, before_cutpoints, after_cutpoints, provider=provider, config=config
  )
  return activate(descriptor, namespace, config)


def render(
  new_class: str,
  base: TypeLike,
  mixins: Sequence[TypeLike] = (),
  combinators: Optional[Mapping[str, Any]] = None,
  before_cutpoints: CutpointSpec = None,
  after_cutpoints: CutpointSpec = None,
  *,
  provider: Optional[TypeProvider] = None,
  config: Optional[MixerConfig] = None,
  with_imports: bool = True,
) -> str:
  """Builds a composite and returns its source without activating it."""
  descriptor = build(
    new_class, base, mixins, combinators, before_cutpoints, after_cutpoints, provider=provider, config=config
  )
  return PythonBackend(with_imports=with_imports).compile(descriptor)
