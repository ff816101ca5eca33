"""Reactive value binding and validation for form-like state.

A Field keeps one value in sync with one presentation element and
validates it on every change; a Form groups fields, derives whole-form
value and validity, and re-broadcasts member changes.

Usage:
    from formwire import Field, Form, ValueAdapter, required, min_length

    form = Form({
        "username": (ValueAdapter(), "John"),
        "password": (ValueAdapter(), "", [required, min_length(8)]),
    })
    form.on_value_change(lambda e: print(e.prev, "->", e.value))
    form.controls.username.value = "Mike"

    python -m formwire check signup.yaml --set username=Mike
"""

from formwire.lib import (
    SUCCESS,
    BindingError,
    ChangeEvent,
    ElementRegistry,
    Failure,
    Field,
    Form,
    FormDefinitionError,
    ValidationReport,
    Validator,
    ValidatorExecutionError,
    ValueAdapter,
    email,
    evaluate,
    load_form,
    max_length,
    max_value,
    min_length,
    min_value,
    one_of,
    pattern,
    required,
    validator,
)

__version__ = "0.1.0"

__all__ = [
    "SUCCESS",
    "BindingError",
    "ChangeEvent",
    "ElementRegistry",
    "Failure",
    "Field",
    "Form",
    "FormDefinitionError",
    "ValidationReport",
    "Validator",
    "ValidatorExecutionError",
    "ValueAdapter",
    "email",
    "evaluate",
    "load_form",
    "max_length",
    "max_value",
    "min_length",
    "min_value",
    "one_of",
    "pattern",
    "required",
    "validator",
]
