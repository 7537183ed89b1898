"""Tests for the capability dependency resolver."""
from __future__ import annotations

import pytest

from hardtype.core.config import PrerequisitePolicy
from hardtype.core.errors import DiagnosticCode
from hardtype.engines import CAPABILITY_RULES, CapabilityResolver, CapabilityRule, resolve_capabilities
from hardtype.models import Capability, TypeSpec


def _spec(kind: str = "text", caps=(), validators=(), **extra) -> TypeSpec:
    return TypeSpec(name="Thing", inner_kind=kind, capabilities=list(caps), validators=list(validators), **extra)


# -----------------------------
# Accepted sets
# -----------------------------


def test_accepts_consistent_set():
    spec = _spec(caps=["equality", "partial_ordering", "ordering", "hash", "clone", "debug"])
    resolved = resolve_capabilities(spec).unwrap()
    assert resolved.capabilities == spec.capabilities
    assert resolved.added == frozenset()
    assert resolved.ordered[0] is Capability.EQUALITY


def test_empty_set_is_valid():
    assert resolve_capabilities(_spec()).unwrap().capabilities == frozenset()


def test_float_ordering_allowed_with_finite_validator():
    spec = _spec("floating_point", ["equality", "partial_ordering", "ordering", "hash", "strict_equality"], ["finite"])
    assert resolve_capabilities(spec).is_ok()


def test_copy_on_integer_with_clone():
    assert resolve_capabilities(_spec("signed_integer", ["clone", "copy"])).is_ok()


# -----------------------------
# Conflicts
# -----------------------------


def test_copy_on_text_without_clone_reports_both_conflicts():
    result = resolve_capabilities(_spec("text", ["copy"]))
    codes = result.unwrap_err().codes
    assert codes == {DiagnosticCode.E2001_MISSING_PREREQUISITE, DiagnosticCode.E2002_FORBIDDEN_FOR_INNER_KIND}


def test_conflicts_are_reported_as_complete_set():
    spec = _spec(
        "floating_point",
        ["ordering", "hash", "raw_conversion_in_unchecked", "default"],
        [("greater", 0)],
    )
    diagnostics = resolve_capabilities(spec).unwrap_err()
    subjects = {(d.code, d.subject) for d in diagnostics}
    assert (DiagnosticCode.E2006_FORBIDDEN_WITHOUT_VALIDATOR, "ORDERING") in subjects
    assert (DiagnosticCode.E2006_FORBIDDEN_WITHOUT_VALIDATOR, "HASH") in subjects
    assert (DiagnosticCode.E2003_FORBIDDEN_WITH_VALIDATORS, "RAW_CONVERSION_IN_UNCHECKED") in subjects
    assert (DiagnosticCode.E2005_REQUIRES_DEFAULT_VALUE, "DEFAULT") in subjects
    assert (DiagnosticCode.E2001_MISSING_PREREQUISITE, "ORDERING") in subjects
    assert (DiagnosticCode.E2001_MISSING_PREREQUISITE, "HASH") in subjects


def test_unchecked_with_validator_names_the_validators():
    spec = _spec("text", ["raw_conversion_in_unchecked"], ["not_empty"])
    (diagnostic,) = resolve_capabilities(spec).unwrap_err()
    assert diagnostic.code is DiagnosticCode.E2003_FORBIDDEN_WITH_VALIDATORS
    assert "not_empty" in diagnostic.message


def test_unchecked_without_validators_is_fine():
    assert resolve_capabilities(_spec("text", ["raw_conversion_in_unchecked"])).is_ok()


def test_parse_from_text_forbidden_on_other():
    spec = _spec("other", ["parse_from_text"], inner_type="decimal:Decimal")
    (diagnostic,) = resolve_capabilities(spec).unwrap_err()
    assert diagnostic.code is DiagnosticCode.E2002_FORBIDDEN_FOR_INNER_KIND


def test_reflect_requires_validators():
    (diagnostic,) = resolve_capabilities(_spec("text", ["reflect_invalid_value"])).unwrap_err()
    assert diagnostic.code is DiagnosticCode.E2004_REQUIRES_VALIDATORS


def test_default_with_value_accepted():
    assert resolve_capabilities(_spec("signed_integer", ["default"], default_value=0)).is_ok()


# -----------------------------
# AUTO policy
# -----------------------------


def test_auto_adds_prerequisites_transitively():
    spec = _spec("signed_integer", ["ordering"])
    resolved = resolve_capabilities(spec, PrerequisitePolicy.AUTO).unwrap()
    assert resolved.capabilities == {Capability.ORDERING, Capability.PARTIAL_ORDERING, Capability.EQUALITY}
    assert resolved.added == {Capability.PARTIAL_ORDERING, Capability.EQUALITY}


def test_auto_still_reports_forbidden_requested_capability():
    result = resolve_capabilities(_spec("text", ["copy"]), PrerequisitePolicy.AUTO)
    assert result.unwrap_err().codes == {DiagnosticCode.E2002_FORBIDDEN_FOR_INNER_KIND}


def test_auto_reports_forbidden_prerequisite():
    rules = dict(CAPABILITY_RULES)
    rules[Capability.DISPLAY] = CapabilityRule(requires=(Capability.DEFAULT,))
    resolver = CapabilityResolver(rules=rules, policy=PrerequisitePolicy.AUTO)
    diagnostics = resolver.resolve(_spec("text", ["display"])).unwrap_err()
    assert diagnostics.codes == {
        DiagnosticCode.E2001_MISSING_PREREQUISITE,
        DiagnosticCode.E2005_REQUIRES_DEFAULT_VALUE,
    }


@pytest.mark.parametrize("policy", list(PrerequisitePolicy))
def test_resolver_never_partially_accepts(policy):
    result = resolve_capabilities(_spec("text", ["debug", "copy", "clone"]), policy)
    assert result.is_err()
