"""prompt_toolkit adapters.

Binds fields to prompt_toolkit ``Buffer`` objects, the editable text model
behind every input line of a prompt_toolkit application.

Example:
    >>> buffer = Buffer(name="age")
    >>> age = Field(BufferAdapter(buffer, parse=int), 30, [min_value(18)])
    >>> buffer.text
    '30'
    >>> buffer.text = "17"   # a user edit
    >>> age.value, age.valid
    (17, False)

Importing this module registers BufferAdapter as the default adapter for
Buffer elements, so a Buffer (or a query descriptor resolving to one) can
be passed straight to Field.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from prompt_toolkit.buffer import Buffer

from formwire.lib.adapters import Unsubscribe, register_adapter
from formwire.lib.errors import CoercionError

logger = logging.getLogger(__name__)

__all__ = ["BufferAdapter", "parse_optional_int", "parse_bool", "format_bool"]


def parse_optional_int(text: str) -> Optional[int]:
    """Parse an integer, treating blank text as None."""
    text = text.strip()
    return int(text) if text else None


_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off", ""}


def parse_bool(text: str) -> bool:
    """Parse yes/no style text into a bool."""
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Not a yes/no value: {text!r}")


def format_bool(value: Any) -> str:
    return "yes" if value else "no"


def _format_default(value: Any) -> str:
    return "" if value is None else str(value)


class BufferAdapter:
    """Adapter over a prompt_toolkit Buffer.

    Args:
        buffer: Buffer to bind
        parse: Converts buffer text to the field value (default: identity)
        format: Converts the field value to buffer text (default: str, None -> "")
    """

    def __init__(
        self,
        buffer: Buffer,
        parse: Optional[Callable[[str], Any]] = None,
        format: Optional[Callable[[Any], str]] = None,
    ):
        self.buffer = buffer
        self._parse = parse
        self._format = format or _format_default

    def read_value(self) -> Any:
        """Return the buffer text, parsed.

        Raises:
            CoercionError: If ``parse`` rejects the text
        """
        text = self.buffer.text
        if self._parse is None:
            return text
        try:
            return self._parse(text)
        except (TypeError, ValueError) as exc:
            raise CoercionError(
                f"Could not parse buffer '{self.buffer.name}' text {text!r}",
                raw_value=text,
                cause=exc,
            ) from exc

    def write_value(self, value: Any) -> None:
        text = self._format(value)
        if self.buffer.text != text:
            self.buffer.text = text

    def subscribe(self, on_external_change: Callable[[Any], None]) -> Unsubscribe:
        def handler(_: Buffer) -> None:
            try:
                value = self.read_value()
            except CoercionError as exc:
                # The field keeps its last good value until the text parses.
                logger.warning("%s", exc.message)
                return
            on_external_change(value)

        self.buffer.on_text_changed += handler

        def unsubscribe() -> None:
            self.buffer.on_text_changed -= handler

        return unsubscribe

    def __repr__(self) -> str:
        return f"BufferAdapter({self.buffer.name!r})"


@register_adapter(Buffer)
def _buffer_adapter(buffer: Buffer) -> BufferAdapter:
    return BufferAdapter(buffer)
