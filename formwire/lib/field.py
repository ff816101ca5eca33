"""Field: one reactive value bound to one adapter.

A Field keeps its value and its adapter's externally visible value equal,
re-runs its validator pipeline whenever the value changes, and notifies
listeners of each transition.

Writes travel in exactly one direction per change:

- assigning ``field.value`` writes model -> adapter
- an edit reported by the adapter updates adapter -> model, and is never
  written back

Example:
    >>> field = Field(ValueAdapter(), "", [required])
    >>> field.valid
    False
    >>> sub = field.on_value_change(lambda e: print(e.prev, "->", e.value))
    >>> field.value = "Mike"
     -> Mike
    >>> field.valid
    True
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Optional, Tuple, TypeVar

from formwire.lib.adapters import Adapter, ElementRegistry, resolve_adapter
from formwire.lib.listeners import ChangeEvent, ChangeListener, ListenerRegistry, Subscription
from formwire.lib.settings import get_settings
from formwire.lib.validation import (
    ValidationReport,
    Validator,
    ValidatorSpec,
    build_pipeline,
    evaluate,
)

logger = logging.getLogger(__name__)

__all__ = ["Field", "values_equal"]

T = TypeVar("T")


def values_equal(a: Any, b: Any) -> bool:
    """Equality used for change detection: identity, then ``==``."""
    return a is b or bool(a == b)


class Field(Generic[T]):
    """Atomic reactive cell.

    Args:
        adapter_ref: Adapter, live element or query descriptor to bind to
        initial_value: Starting value; also the target of reset()
        validators: Validators, check functions or zero-argument factories
        registry: ElementRegistry used to resolve query descriptors
        name: Optional label used in logs

    Raises:
        BindingError: If ``adapter_ref`` does not resolve to exactly one element
    """

    def __init__(
        self,
        adapter_ref: Any,
        initial_value: T,
        validators: Iterable[ValidatorSpec] = (),
        *,
        registry: Optional[ElementRegistry] = None,
        name: Optional[str] = None,
    ) -> None:
        adapter = resolve_adapter(adapter_ref, registry)

        self.name = name
        self._pipeline: Tuple[Validator, ...] = build_pipeline(validators)
        self._initial_value: T = initial_value
        self._value: T = initial_value
        self._adapter: Adapter = adapter
        self._listeners = ListenerRegistry(owner=self._label)
        self._writing = False
        self._released = False

        # Construction is not a mutation: push the value, tell nobody.
        self._write(initial_value)
        self._unsubscribe_adapter = adapter.subscribe(self._on_external_change)
        self._report = self._run_pipeline()

        logger.debug("Bound %s to %r", self._label, adapter)

    @property
    def _label(self) -> str:
        return f"field '{self.name}'" if self.name else "field"

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, next_value: T) -> None:
        self._apply(next_value, push=True)

    @property
    def initial_value(self) -> T:
        return self._initial_value

    @property
    def adapter(self) -> Adapter:
        return self._adapter

    @property
    def validators(self) -> Tuple[Validator, ...]:
        return self._pipeline

    @property
    def report(self) -> ValidationReport:
        """Report from the most recent pipeline run."""
        return self._report

    @property
    def valid(self) -> bool:
        return len(self._report) == 0

    @property
    def errors(self) -> Optional[ValidationReport]:
        """None when valid, otherwise the failures in pipeline order."""
        return None if self.valid else self._report

    @property
    def dirty(self) -> bool:
        """Whether the value differs from the initial value."""
        return not values_equal(self._value, self._initial_value)

    @property
    def pristine(self) -> bool:
        return not self.dirty

    @property
    def released(self) -> bool:
        return self._released

    def on_value_change(self, listener: ChangeListener) -> Subscription:
        """Register a listener for value transitions.

        Listeners run synchronously, in registration order, after the
        adapter write and the validation run for the change.
        """
        return self._listeners.subscribe(listener)

    def reset(self) -> None:
        """Return to the initial value through the normal assignment path."""
        self.value = self._initial_value

    def validate(self) -> bool:
        """Re-run the pipeline against the current value and return validity.

        Useful when a validator depends on state outside this field. No
        change event is emitted.
        """
        self._report = self._run_pipeline()
        return self.valid

    def release(self) -> None:
        """Drop the adapter binding. Later changes no longer reach the adapter."""
        if self._released:
            return
        self._unsubscribe_adapter()
        self._released = True
        logger.debug("Released %s", self._label)

    def _apply(self, next_value: T, *, push: bool) -> None:
        if values_equal(next_value, self._value):
            return

        prev = self._value
        self._value = next_value
        if push and not self._released:
            try:
                self._write(next_value)
            except Exception:
                # The adapter still shows prev, so the field keeps it too.
                self._value = prev
                raise
        self._report = self._run_pipeline()
        self._listeners.dispatch(ChangeEvent(prev, next_value))

    def _write(self, value: T) -> None:
        self._writing = True
        try:
            self._adapter.write_value(value)
        finally:
            self._writing = False

    def _on_external_change(self, value: T) -> None:
        # Adapters that report their own programmatic writes echo back here.
        if self._writing or self._released:
            return
        logger.debug("External edit on %s: %r", self._label, value)
        self._apply(value, push=False)

    def _run_pipeline(self) -> ValidationReport:
        report = evaluate(self._pipeline, self._value, self)
        if report and get_settings().log_validation_failures:
            logger.debug("%s failed validation: %s", self._label, report.names)
        return report

    def __repr__(self) -> str:
        status = "valid" if self.valid else "invalid"
        label = f"{self.name}=" if self.name else ""
        return f"<Field {label}{self._value!r} {status}>"
