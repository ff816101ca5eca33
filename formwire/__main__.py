"""CLI entry point for checking declarative forms.

Usage:
    python -m formwire check signup.yaml
    python -m formwire check signup.yaml --set username=Mike --set address.zip=12345
    python -m formwire check signup.yaml --set age=17 --json

Each field is bound to an in-memory element registered under its ``ref``.
``--set`` values are applied as user edits, in order; values are parsed as
YAML scalars, so ``age=17`` sets the integer 17.

Exit codes:
    0 - form is valid
    1 - form is invalid
    2 - the form definition or an assignment is broken
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

import yaml

from formwire.lib.adapters import ElementRegistry, ValueAdapter
from formwire.lib.config_loader import iter_field_documents, load_form, parse_form_document
from formwire.lib.errors import FormwireError
from formwire.lib.field import Field
from formwire.lib.form import Form
from formwire.lib.observability import setup_logging_from_settings

logger = logging.getLogger(__name__)


def _register(registry: ElementRegistry, ref: str, element: ValueAdapter) -> None:
    ref = ref.strip()
    if ref.startswith("#"):
        registry.register(element, id=ref[1:])
    elif ref.startswith("."):
        registry.register(element, classes=[ref[1:]])
    else:
        registry.register(element, name=ref)


def _parse_assignment(raw: str) -> Tuple[str, Any]:
    name, sep, text = raw.partition("=")
    if not sep or not name.strip():
        raise ValueError(f"Expected NAME=VALUE, got {raw!r}")
    if not text.strip():
        return name.strip(), ""
    try:
        value = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Could not parse value for '{name.strip()}': {e}") from e
    return name.strip(), value


def _lookup(form: Form, dotted: str) -> Field:
    member: Any = form
    for part in dotted.split("."):
        member = member.controls[part]
    return member


def _collect_errors(form: Form, names: List[str]) -> Dict[str, List[Dict[str, Any]]]:
    errors: Dict[str, List[Dict[str, Any]]] = {}
    for dotted in names:
        field = _lookup(form, dotted)
        if not field.valid:
            errors[dotted] = field.report.to_list()
    return errors


def cmd_check(args: argparse.Namespace) -> int:
    """Build a form, apply assignments and report validity."""
    try:
        document = parse_form_document(args.form)
    except (FormwireError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    registry = ElementRegistry()
    elements: Dict[str, ValueAdapter] = {}
    names: List[str] = []
    try:
        for dotted, field_doc in iter_field_documents(document.form):
            element = ValueAdapter(field_doc.initial)
            _register(registry, field_doc.ref, element)
            elements[dotted] = element
            names.append(dotted)
        form = load_form(document, registry=registry)
    except (FormwireError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    for raw in args.set or []:
        try:
            name, value = _parse_assignment(raw)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        if name not in elements:
            print(f"Error: unknown field '{name}'. Fields: {', '.join(names)}", file=sys.stderr)
            return 2
        logger.debug("Setting %s = %r", name, value)
        elements[name].user_input(value)

    errors = _collect_errors(form, names)

    if args.json:
        print(
            json.dumps(
                {"name": document.name, "valid": form.valid, "value": form.value, "errors": errors},
                indent=2,
                default=str,
            )
        )
    else:
        print(f"{document.name or args.form}: {'VALID' if form.valid else 'INVALID'}")
        for dotted, entries in errors.items():
            for entry in entries:
                for validator_name, payload in entry.items():
                    print(f"  {dotted}: {validator_name} {payload}")

    return 0 if form.valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formwire",
        description="Check declarative forms",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    check = subparsers.add_parser("check", help="Build a form and report its validity")
    check.add_argument("form", help="Path to the form YAML file")
    check.add_argument(
        "--set",
        action="append",
        metavar="NAME=VALUE",
        help="Apply a user edit (dotted names reach nested groups); repeatable",
    )
    check.add_argument("--json", action="store_true", help="Print a JSON report")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging_from_settings(verbose=args.verbose)

    if not getattr(args, "func", None):
        parser.print_help()
        return 2

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
