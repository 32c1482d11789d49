from .render import handle_render
from .introspect import handle_inspect
from .meta import handle_schema

__all__ = [
  "handle_inspect",
  "handle_render",
  "handle_schema",
]
