"""Tests for the pipeline compiler and the guard routine it emits."""
from __future__ import annotations

import pytest

from hardtype.core.errors import DiagnosticCode
from hardtype.engines import compile_guard, compile_pipeline
from hardtype.models import TypeSpec
from tests import rule_fixtures


def _guard(**fields):
    spec = TypeSpec(name=fields.pop("name", "Thing"), **fields)
    return compile_guard(spec).unwrap().bind()


# -----------------------------
# Ordering
# -----------------------------


def test_sanitizers_then_validators_in_declaration_order():
    guard = _guard(
        inner_kind="text",
        sanitizers=[("with", "tests.rule_fixtures:strip_dots"), ("with", "tests.rule_fixtures:shout")],
        validators=[("with", "tests.rule_fixtures:has_vowel"), ("with", "tests.rule_fixtures:short")],
    )
    value, error = guard("..abc..")
    assert (value, error) == ("ABC", None)
    assert rule_fixtures.CALLS == ["strip_dots", "shout", "has_vowel", "short"]


def test_validators_see_sanitized_value():
    guard = _guard(inner_kind="text", sanitizers=["trim", "lowercase"], validators=[("regex", "^[a-z]+$")])
    assert guard("  HeLLo ") == ("hello", None)


def test_fail_fast_skips_later_validators():
    guard = _guard(
        inner_kind="text",
        validators=[("with", "tests.rule_fixtures:has_vowel"), ("with", "tests.rule_fixtures:short")],
    )
    value, error = guard("xyzzy-brr")
    assert error is not None
    assert error.kind.value == "has_vowel"
    assert rule_fixtures.CALLS == ["has_vowel"]


def test_first_failing_validator_wins():
    guard = _guard(inner_kind="signed_integer", validators=[("greater", 0), ("less", 10), ("with", "tests.rule_fixtures:is_even")])
    assert guard(-1)[1].kind.value == "greater"
    assert guard(11)[1].kind.value == "less"
    assert guard(3)[1].kind.value == "is_even"
    assert guard(4) == (4, None)


def test_no_validators_is_infallible():
    guard = _guard(inner_kind="text", sanitizers=["trim"])
    assert guard("   ") == ("", None)


def test_dotted_custom_reference():
    guard = _guard(inner_kind="signed_integer", validators=[("with", "tests.rule_fixtures:Checks.positive")])
    assert guard(1) == (1, None)
    assert guard(0)[1].kind.value == "positive"


def test_clamp_sanitizer():
    guard = _guard(inner_kind="floating_point", sanitizers=[("clamp", 0, 1)])
    assert guard(7) == (1.0, None)
    assert guard(-0.5) == (0.0, None)


# -----------------------------
# Prologue
# -----------------------------


def test_prologue_rejects_wrong_type():
    with pytest.raises(TypeError, match="Thing expects str"):
        _guard(inner_kind="text")(42)


def test_prologue_rejects_bool_for_integers():
    with pytest.raises(TypeError):
        _guard(inner_kind="signed_integer")(True)


def test_prologue_rejects_negative_unsigned():
    with pytest.raises(OverflowError):
        _guard(inner_kind="unsigned_integer")(-1)


def test_prologue_widens_int_to_float():
    value, _ = _guard(inner_kind="floating_point")(3)
    assert value == 3.0
    assert isinstance(value, float)


def test_prologue_other_kind_checks_instance():
    from decimal import Decimal

    guard = _guard(inner_kind="other", inner_type="decimal:Decimal")
    assert guard(Decimal("1.5")) == (Decimal("1.5"), None)
    with pytest.raises(TypeError, match="expects Decimal"):
        guard(1.5)


def test_prologue_runs_again_after_sanitizers():
    guard = _guard(inner_kind="unsigned_integer", sanitizers=[("with", "tests.rule_fixtures:negate")])
    assert guard(0) == (0, None)
    with pytest.raises(OverflowError):
        guard(3)


def test_validate_routine_skips_sanitizers():
    spec = TypeSpec(
        name="Thing",
        inner_kind="signed_integer",
        sanitizers=[("with", "tests.rule_fixtures:double")],
        validators=[("less", 10)],
    )
    compiled = compile_guard(spec).unwrap()
    assert f"def {compiled.validate_name}(" in compiled.source
    assert compiled.source.rstrip().endswith(f"return {compiled.validate_name}(value)")

    guard = compiled.bind()
    rule_fixtures.reset()
    assert guard(4) == (8, None)
    assert rule_fixtures.CALLS == ["double"]
    assert guard.__globals__[compiled.validate_name](8) == (8, None)
    assert rule_fixtures.CALLS == ["double"]


# -----------------------------
# Diagnostics
# -----------------------------


def test_unknown_rules_reported_with_suggestions():
    spec = TypeSpec(name="Thing", inner_kind="text", sanitizers=["trimm"], validators=[("min_length", 3)])
    diagnostics = compile_pipeline(spec).unwrap_err()
    by_code = {d.code: d for d in diagnostics}
    assert by_code[DiagnosticCode.E3001_UNKNOWN_SANITIZER].suggestions[0] == "trim"
    assert "min_len" in by_code[DiagnosticCode.E3002_UNKNOWN_VALIDATOR].suggestions


def test_rule_not_admissible_for_kind():
    spec = TypeSpec(name="Thing", inner_kind="signed_integer", sanitizers=["trim"], validators=["finite"])
    diagnostics = compile_pipeline(spec).unwrap_err()
    assert [d.code for d in diagnostics] == [DiagnosticCode.E3003_RULE_NOT_ADMISSIBLE] * 2


def test_duplicate_validator_identifiers():
    spec = TypeSpec(name="Thing", inner_kind="text", validators=[("min_len", 1), ("min_len", 2)])
    diagnostics = compile_pipeline(spec).unwrap_err()
    assert diagnostics.codes == {DiagnosticCode.E3006_DUPLICATE_VALIDATOR}


def test_duplicate_rule_with_distinct_names_is_fine():
    spec = TypeSpec(
        name="Thing",
        inner_kind="text",
        validators=[{"rule": "min_len", "params": [1]}, {"rule": "min_len", "params": [2], "name": "min_len_strict"}],
    )
    assert compile_pipeline(spec).is_ok()


@pytest.mark.parametrize(
    "validators",
    [
        [("min_len", 5), ("max_len", 3)],
        [("greater_or_equal", 10), ("less_or_equal", 9)],
        [("greater", 5), ("less", 5)],
        [("greater", 5), ("less_or_equal", 5)],
        [("range", 1, 10), ("greater", 10)],
    ],
)
def test_contradictory_bounds(validators):
    kind = "text" if validators[0][0].endswith("_len") else "signed_integer"
    spec = TypeSpec(name="Thing", inner_kind=kind, validators=validators)
    assert compile_pipeline(spec).unwrap_err().codes == {DiagnosticCode.E3005_CONTRADICTORY_BOUNDS}


def test_touching_inclusive_bounds_are_satisfiable():
    spec = TypeSpec(name="Thing", inner_kind="signed_integer", validators=[("greater_or_equal", 5), ("less_or_equal", 5)])
    assert compile_pipeline(spec).is_ok()


def test_not_empty_against_zero_max_len():
    spec = TypeSpec(name="Thing", inner_kind="text", validators=["not_empty", ("max_len", 0)])
    assert compile_pipeline(spec).unwrap_err().codes == {DiagnosticCode.E3005_CONTRADICTORY_BOUNDS}


def test_all_rule_problems_reported_together():
    spec = TypeSpec(
        name="Thing",
        inner_kind="text",
        sanitizers=["nope"],
        validators=[("min_len", "x"), ("regex", "("), ("max_len", 1), ("max_len", 2)],
    )
    codes = compile_pipeline(spec).unwrap_err().codes
    assert codes == {
        DiagnosticCode.E3001_UNKNOWN_SANITIZER,
        DiagnosticCode.E3004_INVALID_RULE_PARAMS,
        DiagnosticCode.E3008_INVALID_REGEX,
        DiagnosticCode.E3006_DUPLICATE_VALIDATOR,
    }


def test_compiled_guard_metadata():
    spec = TypeSpec(name="Thing", inner_kind="text", sanitizers=["trim"], validators=["not_empty", ("max_len", 3)])
    pipeline = compile_pipeline(spec).unwrap()
    assert pipeline.guard.fallible
    assert pipeline.guard.sanitizer_ids == ("trim",)
    assert pipeline.guard.validator_ids == ("not_empty", "max_len")
    assert [v.member for v in pipeline.error_model.variants] == ["NOT_EMPTY", "MAX_LEN"]
    assert "def _guard(value: str)" in pipeline.guard.source
