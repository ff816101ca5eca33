"""Adapter contract between fields and presentation elements.

A field never touches an element directly. It talks to an adapter that can
read the element's value, write it, and report edits made from outside
(typically by a user). The adapter owns any type coercion between the
element's native representation and the field's value.

References passed to a Field resolve through resolve_adapter():

- an object that already implements the Adapter protocol is used as is
- a live element is wrapped by the factory registered for its type
- a query string (``#id``, ``.class`` or a bare name) is looked up in an
  ElementRegistry and must match exactly one element
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Protocol,
    Type,
    runtime_checkable,
)

from formwire.lib.errors import BindingError, CoercionError

logger = logging.getLogger(__name__)

__all__ = [
    "Adapter",
    "Unsubscribe",
    "ValueAdapter",
    "ElementRegistry",
    "ADAPTER_FACTORIES",
    "register_adapter",
    "adapter_for",
    "resolve_adapter",
    "default_registry",
]

Unsubscribe = Callable[[], None]


@runtime_checkable
class Adapter(Protocol):
    """What a Field needs from a bound presentation element."""

    def read_value(self) -> Any: ...

    def write_value(self, value: Any) -> None: ...

    def subscribe(self, on_external_change: Callable[[Any], None]) -> Unsubscribe: ...


class ValueAdapter:
    """In-memory element, for headless use and tests.

    write_value() is silent, like a programmatic write to a real widget.
    user_input() simulates an edit from outside and notifies subscribers.

    Args:
        value: Initial raw value
        parse: Optional coercion applied to user_input() values
    """

    def __init__(self, value: Any = None, *, parse: Optional[Callable[[Any], Any]] = None):
        self._value = value
        self._parse = parse
        self._subscribers: List[Callable[[Any], None]] = []

    def read_value(self) -> Any:
        return self._value

    def write_value(self, value: Any) -> None:
        self._value = value

    def subscribe(self, on_external_change: Callable[[Any], None]) -> Unsubscribe:
        self._subscribers.append(on_external_change)

        def unsubscribe() -> None:
            if on_external_change in self._subscribers:
                self._subscribers.remove(on_external_change)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def user_input(self, raw: Any) -> None:
        """Store an externally sourced value and notify subscribers.

        Raises:
            CoercionError: If ``parse`` rejects the raw value; nothing is
                stored and no subscriber is notified.
        """
        if self._parse is not None:
            try:
                value = self._parse(raw)
            except (TypeError, ValueError) as exc:
                raise CoercionError(
                    f"Could not parse input {raw!r}", raw_value=raw, cause=exc
                ) from exc
        else:
            value = raw
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def __repr__(self) -> str:
        return f"ValueAdapter({self._value!r})"


@dataclass
class _Entry:
    element: Any
    id: Optional[str] = None
    name: Optional[str] = None
    classes: FrozenSet[str] = field(default_factory=frozenset)


class ElementRegistry:
    """Live elements addressable by query descriptor.

    Descriptors: ``#id`` matches the element id, ``.cls`` matches any
    element carrying that class, anything else matches the element name.
    """

    def __init__(self) -> None:
        self._entries: List[_Entry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def register(
        self,
        element: Any,
        *,
        id: Optional[str] = None,
        name: Optional[str] = None,
        classes: Iterable[str] = (),
    ) -> Any:
        """Register an element and return it.

        Raises:
            ValueError: If ``id`` is already taken
        """
        if id is not None and any(e.id == id for e in self._entries):
            raise ValueError(f"Element id '#{id}' is already registered")
        self._entries.append(_Entry(element, id, name, frozenset(classes)))
        return element

    def unregister(self, element: Any) -> None:
        self._entries = [e for e in self._entries if e.element is not element]

    def clear(self) -> None:
        self._entries.clear()

    def query(self, descriptor: str) -> List[Any]:
        """Return every element matching ``descriptor``, in registration order."""
        descriptor = descriptor.strip()
        if descriptor.startswith("#"):
            key = descriptor[1:]
            return [e.element for e in self._entries if e.id == key]
        if descriptor.startswith("."):
            key = descriptor[1:]
            return [e.element for e in self._entries if key in e.classes]
        return [e.element for e in self._entries if e.name == descriptor]


default_registry = ElementRegistry()

ADAPTER_FACTORIES: Dict[Type[Any], Callable[[Any], Adapter]] = {}


def register_adapter(
    element_type: Type[Any],
) -> Callable[[Callable[[Any], Adapter]], Callable[[Any], Adapter]]:
    """Register the adapter factory used for elements of ``element_type``."""

    def decorator(factory: Callable[[Any], Adapter]) -> Callable[[Any], Adapter]:
        ADAPTER_FACTORIES[element_type] = factory
        return factory

    return decorator


def adapter_for(element: Any) -> Adapter:
    """Wrap a live element in its registered adapter.

    Raises:
        BindingError: If no factory is registered for the element's type
    """
    if isinstance(element, Adapter):
        return element
    for klass in type(element).__mro__:
        factory = ADAPTER_FACTORIES.get(klass)
        if factory is not None:
            return factory(element)
    raise BindingError(
        f"No adapter registered for elements of type {type(element).__name__}",
        ref=element,
        suggestion="Register one with @register_adapter(ElementType)",
    )


def resolve_adapter(ref: Any, registry: Optional[ElementRegistry] = None) -> Adapter:
    """Resolve an adapter reference to exactly one adapter.

    Args:
        ref: Adapter, live element, or query descriptor string
        registry: Registry for query descriptors (defaults to default_registry)

    Raises:
        BindingError: On zero matches, several matches, or an unadaptable element
    """
    if ref is None:
        raise BindingError("Adapter reference is None", ref=ref, matches=0)

    if isinstance(ref, str):
        source = registry if registry is not None else default_registry
        matches = source.query(ref)
        if not matches:
            raise BindingError(
                f"No element matches '{ref}'",
                ref=ref,
                matches=0,
                suggestion="Register the element before binding a field to it",
            )
        if len(matches) > 1:
            raise BindingError(
                f"'{ref}' is ambiguous: {len(matches)} elements match",
                ref=ref,
                matches=len(matches),
                suggestion="Use an '#id' descriptor to address a single element",
            )
        logger.debug("Resolved '%s' to %r", ref, matches[0])
        return adapter_for(matches[0])

    return adapter_for(ref)
