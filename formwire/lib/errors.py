"""Structured exception hierarchy for formwire.

Provides specific exception types for the failure modes of binding,
validation and form definition, with rich context for debugging.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "FormwireError",
    "BindingError",
    "ValidatorExecutionError",
    "FormDefinitionError",
    "CoercionError",
]


class FormwireError(Exception):
    """Base exception for all formwire errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

        parts = [message]

        if self.details:
            detail_lines = [f"  {k}: {v}" for k, v in self.details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class BindingError(FormwireError):
    """An adapter reference could not be resolved to exactly one element.

    Raised synchronously at Field construction; no partial Field is created.
    """

    def __init__(
        self,
        message: str,
        *,
        ref: Any = None,
        matches: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        self.ref = ref
        self.matches = matches

        details = kwargs.pop("details", {})
        if ref is not None:
            details["ref"] = repr(ref)
        if matches is not None:
            details["matches"] = matches

        super().__init__(message, details=details, **kwargs)


class ValidatorExecutionError(FormwireError):
    """A validator raised while being evaluated.

    The pipeline never raises this; an instance becomes the payload of the
    failing report entry so callers can see which rule broke and why.
    """

    def __init__(self, validator_name: str, cause: BaseException) -> None:
        self.validator_name = validator_name
        self.cause = cause

        super().__init__(
            f"Validator '{validator_name}' raised {type(cause).__name__}: {cause}",
            details={
                "validator": validator_name,
                "cause": str(cause),
                "cause_type": type(cause).__name__,
            },
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidatorExecutionError):
            return NotImplemented
        return (
            self.validator_name == other.validator_name
            and type(self.cause) is type(other.cause)
            and self.cause.args == other.cause.args
        )

    def __hash__(self) -> int:
        return hash((self.validator_name, type(self.cause), self.cause.args))


class FormDefinitionError(FormwireError):
    """A form definition (Python mapping or YAML document) is malformed."""

    def __init__(
        self,
        message: str,
        *,
        member: Optional[str] = None,
        source: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.member = member
        self.source = source

        details = kwargs.pop("details", {})
        if member:
            details["member"] = member
        if source:
            details["source"] = source

        super().__init__(message, details=details, **kwargs)


class CoercionError(FormwireError):
    """An adapter could not translate its native value into the field type."""

    def __init__(
        self,
        message: str,
        *,
        raw_value: Any = None,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.raw_value = raw_value
        self.cause = cause

        details = kwargs.pop("details", {})
        details["raw_value"] = repr(raw_value)
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, details=details, **kwargs)
