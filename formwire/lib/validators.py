"""Built-in validators.

Parameterized validators are factories: ``min_length(8)`` returns a
Validator named ``min_length``. Payloads carry enough detail for callers to
render their own messages; no message text is produced here.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Collection, Dict, Pattern, Union

from formwire.lib.validation import ValidationContext, Validator, validator

__all__ = [
    "required",
    "min_length",
    "max_length",
    "pattern",
    "email",
    "min_value",
    "max_value",
    "one_of",
    "VALIDATOR_CATALOG",
]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


@validator("required")
def required(ctx: ValidationContext) -> Any:
    """Fail with ``True`` when the value is None, blank or an empty collection."""
    return True if _is_empty(ctx.value) else None


def min_length(length: int) -> Validator:
    """Require ``len(value) >= length``.

    Failure payload: ``{"must_be": length, "current_length": n}``.
    """

    def check(ctx: ValidationContext) -> Any:
        current = len(ctx.value) if ctx.value is not None else 0
        if current < length:
            return {"must_be": length, "current_length": current}
        return None

    return Validator("min_length", check)


def max_length(length: int) -> Validator:
    """Require ``len(value) <= length``."""

    def check(ctx: ValidationContext) -> Any:
        current = len(ctx.value) if ctx.value is not None else 0
        if current > length:
            return {"must_be": length, "current_length": current}
        return None

    return Validator("max_length", check)


def pattern(regex: Union[str, Pattern[str]]) -> Validator:
    """Require the whole string value to match ``regex``.

    Empty values pass; combine with ``required`` to reject them.
    """
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def check(ctx: ValidationContext) -> Any:
        if _is_empty(ctx.value):
            return None
        if compiled.fullmatch(str(ctx.value)) is None:
            return {"required_pattern": compiled.pattern, "actual_value": ctx.value}
        return None

    return Validator("pattern", check)


@validator("email")
def email(ctx: ValidationContext) -> Any:
    """Loose address check: something@something.tld. Empty values pass."""
    if _is_empty(ctx.value):
        return None
    return None if _EMAIL_RE.match(str(ctx.value)) else True


def min_value(minimum: Any) -> Validator:
    """Require ``value >= minimum``. None passes."""

    def check(ctx: ValidationContext) -> Any:
        if ctx.value is None:
            return None
        if ctx.value < minimum:
            return {"min": minimum, "actual": ctx.value}
        return None

    return Validator("min_value", check)


def max_value(maximum: Any) -> Validator:
    """Require ``value <= maximum``. None passes."""

    def check(ctx: ValidationContext) -> Any:
        if ctx.value is None:
            return None
        if ctx.value > maximum:
            return {"max": maximum, "actual": ctx.value}
        return None

    return Validator("max_value", check)


def one_of(choices: Collection[Any]) -> Validator:
    """Require the value to be one of ``choices``."""
    allowed = list(choices)

    def check(ctx: ValidationContext) -> Any:
        if ctx.value not in allowed:
            return {"allowed": allowed, "actual": ctx.value}
        return None

    return Validator("one_of", check)


# Names usable from declarative form documents. Plain validators map to the
# Validator itself, parameterized ones to their factory.
VALIDATOR_CATALOG: Dict[str, Union[Validator, Callable[..., Validator]]] = {
    "required": required,
    "min_length": min_length,
    "max_length": max_length,
    "pattern": pattern,
    "email": email,
    "min_value": min_value,
    "max_value": max_value,
    "one_of": one_of,
}
