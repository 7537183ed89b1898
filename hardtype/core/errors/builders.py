"""Diagnostic Builders

Ergonomic constructors for generation-time diagnostics, one per failure shape.
Each builder returns a ``Diagnostic`` with the appropriate code; callers decide
whether to collect it or wrap it in ``Err``.
"""
from difflib import get_close_matches
from typing import Iterable

from .types import Diagnostic, DiagnosticCode


def suggest(name: str, known: Iterable[str], limit: int = 3) -> tuple[str, ...]:
    """Close matches for an unknown identifier, best first."""
    return tuple(get_close_matches(name, sorted(set(known)), n=limit, cutoff=0.6))


# =============================================================================
# Malformed specification (E1xxx)
# =============================================================================

def spec_malformed(
    subject: str,
    message: str,
    *,
    code: DiagnosticCode = DiagnosticCode.E1000_SPEC_MALFORMED,
) -> Diagnostic:
    return Diagnostic(code=code, subject=subject, message=message)


def missing_field(field: str) -> Diagnostic:
    return spec_malformed(field, f"Required field '{field}' is missing", code=DiagnosticCode.E1001_MISSING_FIELD)


def invalid_type_name(name: str) -> Diagnostic:
    return spec_malformed(
        name or "<empty>",
        "Type name must be a valid, non-keyword Python identifier",
        code=DiagnosticCode.E1002_INVALID_TYPE_NAME,
    )


def unknown_inner_kind(kind: str, known: Iterable[str]) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E1003_UNKNOWN_INNER_KIND,
        subject=kind or "<empty>",
        message=f"Unknown inner kind '{kind}'",
        suggestions=suggest(kind.lower(), known),
    )


def missing_inner_type(kind: str) -> Diagnostic:
    return spec_malformed(
        "inner_type",
        f"Inner kind {kind} requires an importable inner_type reference ('module:Name')",
        code=DiagnosticCode.E1004_MISSING_INNER_TYPE,
    )


def unknown_capability(tag: str, known: Iterable[str]) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E1005_UNKNOWN_CAPABILITY,
        subject=tag,
        message=f"Unknown capability '{tag}'",
        suggestions=suggest(tag.lower(), known),
    )


def invalid_field_value(field: str, message: str) -> Diagnostic:
    return spec_malformed(field, message, code=DiagnosticCode.E1006_INVALID_FIELD_VALUE)


# =============================================================================
# Capability conflicts (E2xxx)
# =============================================================================

def missing_prerequisite(capability: str, prerequisite: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E2001_MISSING_PREREQUISITE,
        subject=capability,
        message=f"Capability {capability} requires {prerequisite}, which was not requested",
    )


def forbidden_for_inner_kind(capability: str, kind: str, reason: str = "") -> Diagnostic:
    msg = f"Capability {capability} is not available for inner kind {kind}"
    if reason:
        msg += f": {reason}"
    return Diagnostic(code=DiagnosticCode.E2002_FORBIDDEN_FOR_INNER_KIND, subject=capability, message=msg)


def forbidden_with_validators(capability: str, validators: Iterable[str]) -> Diagnostic:
    names = ", ".join(validators)
    return Diagnostic(
        code=DiagnosticCode.E2003_FORBIDDEN_WITH_VALIDATORS,
        subject=capability,
        message=f"Capability {capability} would bypass declared validators ({names})",
    )


def requires_validators(capability: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E2004_REQUIRES_VALIDATORS,
        subject=capability,
        message=f"Capability {capability} has no effect without at least one validator",
    )


def requires_default_value(capability: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E2005_REQUIRES_DEFAULT_VALUE,
        subject=capability,
        message=f"Capability {capability} requires a default_value in the specification",
    )


def forbidden_without_validator(capability: str, kind: str, validator: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E2006_FORBIDDEN_WITHOUT_VALIDATOR,
        subject=capability,
        message=f"Capability {capability} on inner kind {kind} requires the '{validator}' validator",
    )


# =============================================================================
# Rules (E3xxx)
# =============================================================================

def unknown_rule(rule: str, role: str, known: Iterable[str]) -> Diagnostic:
    code = DiagnosticCode.E3001_UNKNOWN_SANITIZER if role == "sanitizer" else DiagnosticCode.E3002_UNKNOWN_VALIDATOR
    return Diagnostic(
        code=code,
        subject=rule,
        message=f"Unknown {role} '{rule}'",
        suggestions=suggest(rule, known),
    )


def rule_not_admissible(rule: str, role: str, kind: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E3003_RULE_NOT_ADMISSIBLE,
        subject=rule,
        message=f"The {role} '{rule}' cannot be applied to inner kind {kind}",
    )


def invalid_rule_params(rule: str, message: str) -> Diagnostic:
    return Diagnostic(code=DiagnosticCode.E3004_INVALID_RULE_PARAMS, subject=rule, message=message)


def contradictory_bounds(subject: str, message: str) -> Diagnostic:
    return Diagnostic(code=DiagnosticCode.E3005_CONTRADICTORY_BOUNDS, subject=subject, message=message)


def duplicate_validator(identifier: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E3006_DUPLICATE_VALIDATOR,
        subject=identifier,
        message=f"Validator identifier '{identifier}' is declared more than once; give one of them a distinct name",
    )


def invalid_custom_function(rule: str, reference: str, reason: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E3007_INVALID_CUSTOM_FUNCTION,
        subject=rule,
        message=f"Custom function reference '{reference}' is invalid: {reason}",
    )


def invalid_regex(rule: str, pattern: str, reason: str) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E3008_INVALID_REGEX,
        subject=rule,
        message=f"Pattern {pattern!r} does not compile: {reason}",
    )


# =============================================================================
# Internal (E9xxx)
# =============================================================================

def internal_error(subject: str, exc: Exception) -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.E9001_UNEXPECTED_ERROR,
        subject=subject,
        message=f"Unexpected {type(exc).__name__}: {exc}",
    )
