"""Ordered listener registry with explicit unsubscribe handles."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from formwire.lib.settings import get_settings

logger = logging.getLogger(__name__)

__all__ = ["ChangeEvent", "ChangeListener", "ListenerRegistry", "Subscription", "dispatch_depth"]

T = TypeVar("T")


@dataclass(frozen=True)
class ChangeEvent(Generic[T]):
    """A value transition. Only ever delivered when ``prev != value``."""

    prev: T
    value: T


ChangeListener = Callable[[ChangeEvent[Any]], None]

# Nesting depth of dispatches currently on the stack, across all registries.
_depth = 0


def dispatch_depth() -> int:
    """Current nesting depth of change dispatches."""
    return _depth


class Subscription:
    """Handle returned by ListenerRegistry.subscribe.

    Calling the handle, or its unsubscribe() method, removes the listener.
    Removing twice is harmless.
    """

    __slots__ = ("_registry", "_key")

    def __init__(self, registry: "ListenerRegistry", key: int) -> None:
        self._registry: Optional[ListenerRegistry] = registry
        self._key = key

    @property
    def active(self) -> bool:
        return self._registry is not None and self._key in self._registry._listeners

    def unsubscribe(self) -> None:
        if self._registry is not None:
            self._registry._listeners.pop(self._key, None)
            self._registry = None

    __call__ = unsubscribe

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"<Subscription #{self._key} {state}>"


class ListenerRegistry:
    """Listeners kept in registration order.

    dispatch() delivers an event to a snapshot of the listeners taken when
    it starts: a listener removed mid-dispatch still gets the event in
    flight, one added mid-dispatch waits for the next event.
    """

    def __init__(self, owner: str = "") -> None:
        self.owner = owner
        self._listeners: Dict[int, ChangeListener] = {}
        self._keys = itertools.count()

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ChangeListener) -> Subscription:
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {type(listener).__name__}")
        key = next(self._keys)
        self._listeners[key] = listener
        return Subscription(self, key)

    def clear(self) -> None:
        self._listeners.clear()

    def dispatch(self, event: ChangeEvent[Any]) -> None:
        """Call every listener synchronously, in registration order."""
        global _depth
        listeners: List[ChangeListener] = list(self._listeners.values())
        if not listeners:
            return

        _depth += 1
        try:
            threshold = get_settings().dispatch_depth_warning
            if _depth == threshold + 1:
                logger.warning(
                    "Change dispatch nested %d levels deep in %s; listeners may be "
                    "updating each other in a loop",
                    _depth,
                    self.owner or "an anonymous registry",
                )
            for listener in listeners:
                listener(event)
        finally:
            _depth -= 1
