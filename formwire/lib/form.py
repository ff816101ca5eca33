"""Form: a fixed, named group of fields and nested forms.

A Form derives its value and validity from its members and re-broadcasts
every member change as a change of the whole mapping.

Example:
    >>> form = Form({
    ...     "username": ("#u", "John"),
    ...     "password": ("#p", "", [required]),
    ... })
    >>> form.valid
    False
    >>> form.controls.password.value = "hunter22"
    >>> form.valid
    True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from formwire.lib.adapters import ElementRegistry
from formwire.lib.errors import FormDefinitionError
from formwire.lib.field import Field, values_equal
from formwire.lib.listeners import ChangeEvent, ChangeListener, ListenerRegistry, Subscription

logger = logging.getLogger(__name__)

__all__ = ["Form", "Controls", "Member"]

Member = Union[Field, "Form"]


class Controls(MappingABC):
    """Read-only live view of a form's members.

    Supports item access (``controls["name"]``) and attribute access
    (``controls.name``). Members are returned by reference.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Dict[str, Member]) -> None:
        object.__setattr__(self, "_members", members)

    def __getitem__(self, name: str) -> Member:
        return self._members[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __getattr__(self, name: str) -> Member:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(f"Form has no member named {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Form members are fixed at construction")

    def __repr__(self) -> str:
        return f"Controls({list(self._members)!r})"


class Form:
    """Composite of named members.

    Each ``spec`` entry is one of:

    - an existing Field or Form, shared with the caller
    - a tuple ``(adapter_ref, initial_value[, validators])`` creating a Field
    - a nested mapping creating a nested Form

    Members created here are owned by the form and released with it.

    Raises:
        FormDefinitionError: If an entry has none of the shapes above
        BindingError: If a member cannot bind; members already created are
            released first
    """

    def __init__(
        self,
        spec: Mapping[str, Any],
        *,
        registry: Optional[ElementRegistry] = None,
        name: Optional[str] = None,
    ) -> None:
        self.name = name
        self._members: Dict[str, Member] = {}
        self._owned: List[Member] = []
        self._subscriptions: List[Subscription] = []
        self._listeners = ListenerRegistry(owner=f"form '{name}'" if name else "form")
        self._released = False

        try:
            for member_name, entry in spec.items():
                if not isinstance(member_name, str) or not member_name:
                    raise FormDefinitionError(
                        f"Member names must be non-empty strings, got {member_name!r}",
                        source=name,
                    )
                self._members[member_name] = self._build_member(member_name, entry, registry)
        except Exception:
            for member in self._owned:
                member.release()
            raise

        self.controls = Controls(self._members)

        for member_name, member in self._members.items():
            self._subscriptions.append(
                member.on_value_change(self._member_listener(member_name))
            )

        logger.debug("Built %s with members %s", self._listeners.owner, list(self._members))

    def _build_member(
        self, member_name: str, entry: Any, registry: Optional[ElementRegistry]
    ) -> Member:
        if isinstance(entry, (Field, Form)):
            return entry

        if isinstance(entry, MappingABC):
            nested = Form(entry, registry=registry, name=member_name)
            self._owned.append(nested)
            return nested

        if isinstance(entry, (tuple, list)) and len(entry) in (2, 3):
            adapter_ref, initial_value = entry[0], entry[1]
            validators = entry[2] if len(entry) == 3 else ()
            if validators is None:
                validators = ()
            created = Field(
                adapter_ref, initial_value, validators, registry=registry, name=member_name
            )
            self._owned.append(created)
            return created

        raise FormDefinitionError(
            f"Member '{member_name}' must be a Field, a Form, a nested mapping or an "
            "(adapter_ref, initial_value[, validators]) tuple",
            member=member_name,
            source=self.name,
            details={"got": type(entry).__name__},
        )

    def _member_listener(self, member_name: str) -> ChangeListener:
        def on_member_change(event: ChangeEvent[Any]) -> None:
            after = self.value
            before = dict(after)
            before[member_name] = event.prev
            if values_equal(before, after):
                return
            self._listeners.dispatch(ChangeEvent(before, after))

        return on_member_change

    @property
    def value(self) -> Dict[str, Any]:
        """Fresh ``{name: member.value}`` snapshot."""
        return {member_name: member.value for member_name, member in self._members.items()}

    @property
    def valid(self) -> bool:
        return all(member.valid for member in self._members.values())

    @property
    def errors(self) -> Optional[Dict[str, Any]]:
        """None when valid, otherwise the errors of each invalid member."""
        found = {
            member_name: member.errors
            for member_name, member in self._members.items()
            if not member.valid
        }
        return found or None

    @property
    def dirty(self) -> bool:
        return any(member.dirty for member in self._members.values())

    @property
    def released(self) -> bool:
        return self._released

    def on_value_change(self, listener: ChangeListener) -> Subscription:
        """Register a listener for whole-form snapshots.

        Fires once per member change, with the full mapping immediately
        before and after that change. ``prev`` is rebuilt from the current
        snapshot with the changed member's old value put back, so if an
        earlier listener on that member already changed another member,
        ``prev`` shows the other member's new value.
        """
        return self._listeners.subscribe(listener)

    def reset(self) -> None:
        """Reset every member in declaration order."""
        for member in self._members.values():
            member.reset()

    def release(self) -> None:
        """Stop observing members and release the ones this form created."""
        if self._released:
            return
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        for member in self._owned:
            member.release()
        self._released = True

    def __getitem__(self, member_name: str) -> Member:
        return self._members[member_name]

    def __contains__(self, member_name: object) -> bool:
        return member_name in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        status = "valid" if self.valid else "invalid"
        label = f"{self.name} " if self.name else ""
        return f"<Form {label}{list(self._members)} {status}>"
