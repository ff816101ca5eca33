"""formwire library modules.

This package contains the binding, validation and aggregation engine:
adapters, validators, fields and forms, plus settings and logging helpers.
"""

from formwire.lib.adapters import (
    Adapter,
    ElementRegistry,
    ValueAdapter,
    adapter_for,
    default_registry,
    register_adapter,
    resolve_adapter,
)
from formwire.lib.config_loader import load_form, parse_form_document
from formwire.lib.errors import (
    BindingError,
    CoercionError,
    FormDefinitionError,
    FormwireError,
    ValidatorExecutionError,
)
from formwire.lib.field import Field
from formwire.lib.form import Controls, Form
from formwire.lib.listeners import ChangeEvent, Subscription
from formwire.lib.settings import FormwireSettings, get_settings
from formwire.lib.validation import (
    SUCCESS,
    Failure,
    Success,
    ValidationContext,
    ValidationReport,
    Validator,
    build_pipeline,
    evaluate,
    validator,
)
from formwire.lib.validators import (
    VALIDATOR_CATALOG,
    email,
    max_length,
    max_value,
    min_length,
    min_value,
    one_of,
    pattern,
    required,
)

__all__ = [
    # Adapters
    "Adapter",
    "ElementRegistry",
    "ValueAdapter",
    "adapter_for",
    "default_registry",
    "register_adapter",
    "resolve_adapter",
    # Declarative forms
    "load_form",
    "parse_form_document",
    # Errors
    "BindingError",
    "CoercionError",
    "FormDefinitionError",
    "FormwireError",
    "ValidatorExecutionError",
    # Fields and forms
    "Field",
    "Form",
    "Controls",
    "ChangeEvent",
    "Subscription",
    # Settings
    "FormwireSettings",
    "get_settings",
    # Validation
    "SUCCESS",
    "Failure",
    "Success",
    "ValidationContext",
    "ValidationReport",
    "Validator",
    "build_pipeline",
    "evaluate",
    "validator",
    # Built-in validators
    "VALIDATOR_CATALOG",
    "email",
    "max_length",
    "max_value",
    "min_length",
    "min_value",
    "one_of",
    "pattern",
    "required",
]
