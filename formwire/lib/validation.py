"""Validator pipeline.

A pipeline is an ordered tuple of named validators. Evaluating it against a
candidate value runs every validator in declaration order, with no
short-circuit, and collects the failures into a ValidationReport.

Example:
    >>> @validator("even")
    ... def even(ctx):
    ...     return None if ctx.value % 2 == 0 else True
    >>> pipeline = build_pipeline([even])
    >>> evaluate(pipeline, 3).to_list()
    [{'even': True}]
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
    overload,
)

from formwire.lib.errors import ValidatorExecutionError

if TYPE_CHECKING:
    from formwire.lib.field import Field

logger = logging.getLogger(__name__)

__all__ = [
    "SUCCESS",
    "Success",
    "Failure",
    "Outcome",
    "ValidationContext",
    "ValidationReport",
    "Validator",
    "validator",
    "build_pipeline",
    "evaluate",
    "is_validator_factory",
]


class Success:
    """Marker outcome for a validator that passed. Use the SUCCESS singleton."""

    _instance: Optional["Success"] = None

    def __new__(cls) -> "Success":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SUCCESS"

    def __bool__(self) -> bool:
        return True


SUCCESS = Success()


@dataclass(frozen=True)
class Failure:
    """A failed rule: the validator's name and its payload.

    The payload is ``True`` for a bare failure, or any structured detail
    value the validator chose to report.
    """

    name: str
    payload: Any = True

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``{name: payload}`` form of this entry."""
        return {self.name: self.payload}


Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class ValidationContext:
    """Observable state handed to each validator.

    Attributes:
        value: The candidate value being validated
        initial_value: The owning field's initial value (None without owner)
        field: The owning Field, or None when evaluated standalone
    """

    value: Any
    initial_value: Any = None
    field: Optional["Field"] = None


class ValidationReport(Sequence[Failure]):
    """Ordered, immutable sequence of failures from one pipeline run.

    Order matches pipeline declaration order. Entries are never merged,
    even when two validators share a name.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[Failure] = ()) -> None:
        self._entries: Tuple[Failure, ...] = tuple(entries)

    @overload
    def __getitem__(self, index: int) -> Failure: ...

    @overload
    def __getitem__(self, index: slice) -> "ValidationReport": ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Failure, "ValidationReport"]:
        if isinstance(index, slice):
            return ValidationReport(self._entries[index])
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Failure]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ValidationReport):
            return self._entries == other._entries
        if isinstance(other, (list, tuple)):
            return list(self._entries) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"ValidationReport({list(self._entries)!r})"

    @property
    def names(self) -> List[str]:
        """Names of the failing validators, in report order."""
        return [entry.name for entry in self._entries]

    def to_list(self) -> List[Dict[str, Any]]:
        """Return entries as a list of ``{name: payload}`` mappings."""
        return [entry.to_dict() for entry in self._entries]

    def to_dict(self) -> Dict[str, Any]:
        """Return a ``{name: payload}`` mapping.

        When two entries share a name the later payload wins; use
        to_list() when every entry matters.
        """
        return {entry.name: entry.payload for entry in self._entries}


CheckFunction = Callable[[ValidationContext], Any]


class Validator:
    """A named validation rule.

    The wrapped check receives a ValidationContext. None, SUCCESS, False
    and an empty mapping mean the rule passed. A returned Failure is used
    as is, and a single-key mapping ``{name: payload}`` is read as a
    failure under that name. Any other value becomes the payload of a
    failure named after the validator; return ``Failure(self.name, {...})``
    to report a single-key payload under the validator's own name.
    """

    __slots__ = ("name", "check")

    def __init__(self, name: str, check: CheckFunction) -> None:
        if not name:
            raise ValueError("Validator name must be a non-empty string")
        self.name = name
        self.check = check

    def __call__(self, ctx: ValidationContext) -> Outcome:
        result = self.check(ctx)
        if result is None or result is False or isinstance(result, Success):
            return SUCCESS
        if isinstance(result, Failure):
            return result
        if isinstance(result, MappingABC):
            if not result:
                return SUCCESS
            if len(result) == 1:
                ((name, payload),) = result.items()
                return Failure(str(name), payload)
        return Failure(self.name, result)

    def __repr__(self) -> str:
        return f"Validator({self.name!r})"


def validator(name: Optional[str] = None) -> Callable[[CheckFunction], Validator]:
    """Decorator turning a check function into a named Validator.

    Args:
        name: Name reported on failure (defaults to the function name)
    """

    def decorator(check: CheckFunction) -> Validator:
        return Validator(name or check.__name__, check)

    return decorator


ValidatorSpec = Union[Validator, Callable[..., Any]]


def is_validator_factory(candidate: Callable[..., Any]) -> bool:
    """Whether a callable takes no required positional arguments."""
    try:
        signature = inspect.signature(candidate)
    except (TypeError, ValueError):
        return False
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            return False
    return True


def _coerce_validator(entry: ValidatorSpec) -> Validator:
    if isinstance(entry, Validator):
        return entry
    if not callable(entry):
        raise TypeError(f"Validator entries must be callable, got {type(entry).__name__}")

    if is_validator_factory(entry):
        produced = entry()
        if isinstance(produced, Validator):
            return produced
        if callable(produced):
            return Validator(getattr(produced, "__name__", None) or entry.__name__, produced)
        raise TypeError(
            f"Validator factory {entry.__name__!r} returned {type(produced).__name__}, "
            "expected a validator"
        )

    name = getattr(entry, "__name__", None)
    if not name:
        raise TypeError(f"Cannot derive a validator name from {entry!r}; use @validator(name)")
    return Validator(name, entry)


def build_pipeline(entries: Iterable[ValidatorSpec] = ()) -> Tuple[Validator, ...]:
    """Normalize validator entries into an immutable pipeline.

    Accepts Validator instances, single-argument check functions (named
    after ``__name__``), and zero-argument factories returning a validator.
    Factories are invoked here, once; never per evaluation.
    """
    return tuple(_coerce_validator(entry) for entry in entries)


def evaluate(
    pipeline: Sequence[Validator],
    candidate: Any,
    owner: Optional["Field"] = None,
) -> ValidationReport:
    """Run every validator against ``candidate`` and collect the failures.

    A validator that raises does not stop the run: its entry becomes a
    Failure whose payload is a ValidatorExecutionError wrapping the cause.

    Args:
        pipeline: Validators in declaration order
        candidate: Value being validated
        owner: Field that owns the pipeline, if any

    Returns:
        ValidationReport with one entry per failing validator
    """
    ctx = ValidationContext(
        value=candidate,
        initial_value=owner.initial_value if owner is not None else None,
        field=owner,
    )

    failures: List[Failure] = []
    for rule in pipeline:
        try:
            outcome = rule(ctx)
        except Exception as exc:
            logger.warning(
                "Validator %r raised %s; recording it as a failure",
                rule.name,
                type(exc).__name__,
                exc_info=True,
            )
            failures.append(Failure(rule.name, ValidatorExecutionError(rule.name, exc)))
            continue
        if isinstance(outcome, Failure):
            failures.append(outcome)

    return ValidationReport(failures)
