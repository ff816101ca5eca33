"""YAML loader for declarative forms.

Allows forms to be defined in YAML instead of Python.

Example YAML (signup.yaml):
    name: signup
    form:
      username:
        ref: "#username"
        initial: ""
        validators: [required, {min_length: 3}]
      email:
        ref: "#email"
        initial: ""
        validators: [required, email]
      address:
        fields:
          city: {ref: "#city", initial: ""}
          zip: {ref: "#zip", initial: "", validators: [{pattern: "[0-9]{5}"}]}

Usage:
    from formwire.lib.config_loader import load_form
    form = load_form("./forms/signup.yaml", registry=registry)

Validator entries are names from VALIDATOR_CATALOG (plus any extra
validators passed in), either bare (``required``) or with arguments
(``{min_length: 3}``; a list is spread as positional arguments).
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from formwire.lib.adapters import ElementRegistry
from formwire.lib.errors import FormDefinitionError
from formwire.lib.form import Form
from formwire.lib.validation import Validator, ValidatorSpec, is_validator_factory
from formwire.lib.validators import VALIDATOR_CATALOG

logger = logging.getLogger(__name__)

__all__ = [
    "FieldDocument",
    "GroupDocument",
    "FormDocument",
    "parse_form_document",
    "iter_field_documents",
    "build_validators",
    "load_form",
]

ValidatorEntry = Union[str, Dict[str, Any]]


class FieldDocument(BaseModel):
    """One field: its element reference, initial value and validators."""

    model_config = ConfigDict(extra="forbid")

    ref: str
    initial: Any = None
    validators: List[ValidatorEntry] = []


class GroupDocument(BaseModel):
    """A nested form."""

    model_config = ConfigDict(extra="forbid")

    fields: Dict[str, Union[FieldDocument, "GroupDocument"]]


GroupDocument.model_rebuild()


class FormDocument(BaseModel):
    """Top-level form document."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    form: Dict[str, Union[FieldDocument, GroupDocument]]


def _looks_like_path(text: str) -> bool:
    candidate = text.strip()
    if not candidate or "\n" in candidate:
        return False
    return candidate.endswith((".yaml", ".yml")) or os.path.isfile(candidate)


def _read_source(source: Union[str, Path, Mapping[str, Any]]) -> Tuple[Any, Optional[str]]:
    if isinstance(source, MappingABC):
        return dict(source), None

    if isinstance(source, str) and _looks_like_path(source):
        source = Path(source.strip())

    if isinstance(source, Path):
        path = source
        if not path.exists():
            raise FileNotFoundError(f"Form definition not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        origin: Optional[str] = str(path)
    else:
        text = source
        origin = None

    try:
        return yaml.safe_load(text), origin
    except yaml.YAMLError as e:
        raise FormDefinitionError(f"Invalid YAML syntax: {e}", source=origin) from e


def parse_form_document(source: Union[str, Path, Mapping[str, Any]]) -> FormDocument:
    """Parse and structurally validate a form document.

    Args:
        source: Path to a YAML file (a string naming an existing file, or one
            ending in .yaml/.yml), YAML text, or an already-parsed mapping

    Raises:
        FormDefinitionError: If the document is empty or malformed
        FileNotFoundError: If a path is given and does not exist
    """
    data, origin = _read_source(source)

    if not data:
        raise FormDefinitionError("Empty form definition", source=origin)
    if not isinstance(data, MappingABC):
        raise FormDefinitionError(
            f"Form definition must be a mapping, got {type(data).__name__}", source=origin
        )

    try:
        return FormDocument.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise FormDefinitionError(
            f"Invalid form definition: {problems}",
            source=origin,
            suggestion="Each member needs either 'ref' (a field) or 'fields' (a group)",
        ) from e


def iter_field_documents(
    members: Mapping[str, Union[FieldDocument, GroupDocument]],
    prefix: str = "",
) -> Iterator[Tuple[str, FieldDocument]]:
    """Yield ``(dotted_name, FieldDocument)`` for every field, depth first."""
    for member_name, member in members.items():
        dotted = f"{prefix}{member_name}"
        if isinstance(member, GroupDocument):
            yield from iter_field_documents(member.fields, prefix=f"{dotted}.")
        else:
            yield dotted, member


def _resolve_validator(
    entry: ValidatorEntry,
    catalog: Mapping[str, Any],
    member: str,
) -> ValidatorSpec:
    if isinstance(entry, str):
        validator_name, args, has_args = entry, [], False
    else:
        if len(entry) != 1:
            raise FormDefinitionError(
                f"Validator entries with arguments must have exactly one key, got {sorted(entry)}",
                member=member,
            )
        validator_name, raw_args = next(iter(entry.items()))
        args = list(raw_args) if isinstance(raw_args, list) else [raw_args]
        has_args = True

    if validator_name not in catalog:
        valid = ", ".join(sorted(catalog))
        raise FormDefinitionError(
            f"Unknown validator '{validator_name}'. Valid options: {valid}",
            member=member,
        )

    target = catalog[validator_name]
    if isinstance(target, Validator):
        if has_args:
            raise FormDefinitionError(
                f"Validator '{validator_name}' takes no arguments", member=member
            )
        return target

    if not has_args:
        if is_validator_factory(target):
            return target
        raise FormDefinitionError(
            f"Validator '{validator_name}' requires arguments, e.g. {{{validator_name}: ...}}",
            member=member,
        )

    try:
        return target(*args)
    except (TypeError, ValueError, re.error) as e:
        raise FormDefinitionError(
            f"Bad arguments for validator '{validator_name}': {e}", member=member
        ) from e


def build_validators(
    entries: List[ValidatorEntry],
    *,
    extra: Optional[Mapping[str, Any]] = None,
    member: str = "",
) -> List[ValidatorSpec]:
    """Turn document validator entries into pipeline entries."""
    catalog: Dict[str, Any] = dict(VALIDATOR_CATALOG)
    if extra:
        catalog.update(extra)
    return [_resolve_validator(entry, catalog, member) for entry in entries]


def _to_spec(
    members: Mapping[str, Union[FieldDocument, GroupDocument]],
    extra: Optional[Mapping[str, Any]],
    prefix: str = "",
) -> Dict[str, Any]:
    spec: Dict[str, Any] = {}
    for member_name, member in members.items():
        dotted = f"{prefix}{member_name}"
        if isinstance(member, GroupDocument):
            spec[member_name] = _to_spec(member.fields, extra, prefix=f"{dotted}.")
        else:
            spec[member_name] = (
                member.ref,
                member.initial,
                build_validators(member.validators, extra=extra, member=dotted),
            )
    return spec


def load_form(
    source: Union[str, Path, Mapping[str, Any], FormDocument],
    *,
    registry: Optional[ElementRegistry] = None,
    validators: Optional[Mapping[str, Any]] = None,
) -> Form:
    """Build a Form from a declarative document.

    Args:
        source: YAML path, YAML text, parsed mapping or FormDocument
        registry: ElementRegistry used to resolve each field's ``ref``
        validators: Extra validators or factories, by name

    Returns:
        Form whose members are all owned by it

    Raises:
        FormDefinitionError: If the document or a validator entry is invalid
        BindingError: If a field's ``ref`` does not resolve to one element
    """
    document = source if isinstance(source, FormDocument) else parse_form_document(source)
    spec = _to_spec(document.form, validators)
    form = Form(spec, registry=registry, name=document.name)
    logger.info("Loaded form %s with %d members", document.name or "<unnamed>", len(form))
    return form
