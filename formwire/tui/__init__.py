"""Terminal UI bindings for formwire.

Importing this package registers the prompt_toolkit Buffer adapter, so
fields can bind to Buffers directly:

    import formwire.tui  # noqa: F401
    field = Field(Buffer(name="city"), "")
"""

from __future__ import annotations

from formwire.tui.adapters import BufferAdapter, format_bool, parse_bool, parse_optional_int

__all__ = [
    "BufferAdapter",
    "format_bool",
    "parse_bool",
    "parse_optional_int",
]
