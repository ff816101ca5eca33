"""Tests for the validator pipeline."""

from __future__ import annotations

import logging

import pytest

from formwire.lib.errors import ValidatorExecutionError
from formwire.lib.validation import (
    SUCCESS,
    Failure,
    Success,
    ValidationContext,
    ValidationReport,
    Validator,
    build_pipeline,
    evaluate,
    is_validator_factory,
    validator,
)
from formwire.lib.validators import min_length, required


@validator("starts_with_a")
def starts_with_a(ctx: ValidationContext):
    return None if str(ctx.value).startswith("a") else True


@validator("always_ok")
def always_ok(ctx: ValidationContext):
    return SUCCESS


@validator("ends_with_z")
def ends_with_z(ctx: ValidationContext):
    if str(ctx.value).endswith("z"):
        return None
    return {"expected": "z", "last": str(ctx.value)[-1:]}


class TestOutcomes:
    """Tests for Success, Failure and Validator outcome wrapping."""

    def test_success_is_singleton(self) -> None:
        assert Success() is SUCCESS
        assert repr(SUCCESS) == "SUCCESS"

    def test_failure_to_dict(self) -> None:
        assert Failure("required").to_dict() == {"required": True}
        assert Failure("min_length", {"must_be": 8}).to_dict() == {"min_length": {"must_be": 8}}

    def test_validator_none_means_success(self) -> None:
        rule = Validator("noop", lambda ctx: None)
        assert rule(ValidationContext(value=1)) is SUCCESS

    def test_validator_payload_becomes_failure(self) -> None:
        rule = Validator("bad", lambda ctx: {"why": "because", "code": 7})
        assert rule(ValidationContext(value=1)) == Failure("bad", {"why": "because", "code": 7})

    def test_false_and_empty_mapping_mean_success(self) -> None:
        def no_problems(ctx: ValidationContext):
            return {}

        assert Validator("predicate", lambda ctx: False)(ValidationContext(value=1)) is SUCCESS
        assert Validator("no_problems", no_problems)(ValidationContext(value=1)) is SUCCESS
        assert evaluate(build_pipeline([no_problems]), "x") == []

    def test_single_key_mapping_names_the_failure(self) -> None:
        def check(ctx: ValidationContext):
            return {"minLength": {"mustBe": 8, "currentLength": len(ctx.value)}}

        report = evaluate(build_pipeline([check]), "")

        assert report.to_list() == [{"minLength": {"mustBe": 8, "currentLength": 0}}]
        assert report.names == ["minLength"]

    def test_explicit_failure_keeps_single_key_payload(self) -> None:
        rule = Validator("limit", lambda ctx: Failure("limit", {"max": 5}))
        assert rule(ValidationContext(value=9)) == Failure("limit", {"max": 5})

    def test_validator_passes_failure_through(self) -> None:
        rule = Validator("outer", lambda ctx: Failure("inner", 3))
        assert rule(ValidationContext(value=1)) == Failure("inner", 3)

    def test_validator_requires_name(self) -> None:
        with pytest.raises(ValueError):
            Validator("", lambda ctx: None)

    def test_decorator_defaults_to_function_name(self) -> None:
        @validator()
        def positive(ctx: ValidationContext):
            return None if ctx.value > 0 else True

        assert isinstance(positive, Validator)
        assert positive.name == "positive"


class TestBuildPipeline:
    """Tests for pipeline construction."""

    def test_plain_function_is_named_after_itself(self) -> None:
        def no_spaces(ctx: ValidationContext):
            return True if " " in ctx.value else None

        (rule,) = build_pipeline([no_spaces])
        assert rule.name == "no_spaces"

    def test_factory_invoked_once_at_construction(self) -> None:
        calls = []

        def make_rule():
            calls.append(1)
            return min_length(3)

        pipeline = build_pipeline([make_rule])
        assert len(calls) == 1

        for value in ["", "ab", "abcd"]:
            evaluate(pipeline, value)
        assert len(calls) == 1
        assert pipeline[0].name == "min_length"

    def test_factory_returning_plain_function(self) -> None:
        def make_rule():
            def is_upper(ctx: ValidationContext):
                return None if ctx.value.isupper() else True

            return is_upper

        (rule,) = build_pipeline([make_rule])
        assert rule.name == "is_upper"

    def test_factory_returning_non_callable_rejected(self) -> None:
        def broken():
            return 42

        with pytest.raises(TypeError):
            build_pipeline([broken])

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(TypeError):
            build_pipeline(["required"])

    def test_is_validator_factory(self) -> None:
        assert is_validator_factory(lambda: None) is True
        assert is_validator_factory(lambda ctx: None) is False
        assert is_validator_factory(lambda ctx=None: None) is True


class TestEvaluate:
    """Tests for evaluate()."""

    def test_empty_pipeline_gives_empty_report(self) -> None:
        report = evaluate((), "anything")
        assert len(report) == 0
        assert report == []

    def test_order_preserved_and_passes_omitted(self) -> None:
        """A and C fail, B passes: report is [A, C] in that order."""
        pipeline = build_pipeline([starts_with_a, always_ok, ends_with_z])

        report = evaluate(pipeline, "xyz0")

        assert report.names == ["starts_with_a", "ends_with_z"]
        assert report.to_list() == [
            {"starts_with_a": True},
            {"ends_with_z": {"expected": "z", "last": "0"}},
        ]

    def test_runs_every_validator(self) -> None:
        seen = []

        def track(name: str) -> Validator:
            def check(ctx: ValidationContext):
                seen.append(name)
                return True

            return Validator(name, check)

        evaluate(build_pipeline([track("a"), track("b"), track("c")]), 1)
        assert seen == ["a", "b", "c"]

    def test_deterministic(self) -> None:
        pipeline = build_pipeline([required, min_length(8), starts_with_a])
        for value in ["", "abc", "abcdefgh", "zzzzzzzzzz"]:
            assert evaluate(pipeline, value) == evaluate(pipeline, value)

    def test_duplicate_names_not_merged(self) -> None:
        pipeline = build_pipeline([Validator("rule", lambda c: 1), Validator("rule", lambda c: 2)])
        report = evaluate(pipeline, None)
        assert report.to_list() == [{"rule": 1}, {"rule": 2}]
        assert report.to_dict() == {"rule": 2}

    def test_context_without_owner(self) -> None:
        captured = []
        evaluate(build_pipeline([Validator("c", lambda ctx: captured.append(ctx))]), 5)
        assert captured[0].value == 5
        assert captured[0].field is None
        assert captured[0].initial_value is None

    def test_raising_validator_becomes_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        def explode(ctx: ValidationContext):
            raise RuntimeError("boom")

        pipeline = build_pipeline([explode, required])

        with caplog.at_level(logging.WARNING, logger="formwire.lib.validation"):
            report = evaluate(pipeline, "")

        assert report.names == ["explode", "required"]
        payload = report[0].payload
        assert isinstance(payload, ValidatorExecutionError)
        assert isinstance(payload.cause, RuntimeError)
        assert payload.validator_name == "explode"
        assert "explode" in caplog.text

    def test_raising_validator_is_deterministic(self) -> None:
        def explode(ctx: ValidationContext):
            raise ValueError("bad input")

        pipeline = build_pipeline([explode])
        assert evaluate(pipeline, 1) == evaluate(pipeline, 1)


class TestValidationReport:
    """Tests for the report container."""

    def test_sequence_behaviour(self) -> None:
        report = ValidationReport([Failure("a"), Failure("b", 2)])

        assert len(report) == 2
        assert report[1] == Failure("b", 2)
        assert isinstance(report[:1], ValidationReport)
        assert list(report) == [Failure("a"), Failure("b", 2)]

    def test_equality(self) -> None:
        assert ValidationReport([Failure("a")]) == ValidationReport([Failure("a")])
        assert ValidationReport([Failure("a")]) == [Failure("a")]
        assert ValidationReport([Failure("a")]) != ValidationReport([Failure("b")])

    def test_hashable(self) -> None:
        assert hash(ValidationReport([Failure("a")])) == hash(ValidationReport([Failure("a")]))
