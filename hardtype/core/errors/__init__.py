"""Monadic Error Handling System

Generation-time failures are values, not exceptions: each stage returns
``Result[T, DiagnosticSet]`` and the facade decides whether to raise.

Usage:
    from hardtype.core.errors import Ok, Err, DiagnosticSet, missing_prerequisite

    def check(spec) -> Result[TypeSpec, DiagnosticSet]:
        if problem:
            return Err(DiagnosticSet.of(missing_prerequisite("COPY", "CLONE")))
        return Ok(spec)
"""
from .types import (
    # Core types
    Result,
    Ok,
    Err,
    Diagnostic,
    DiagnosticCode,
    DiagnosticSet,
    GenerationError,
    # Constructors
    ok,
    err,
    from_diagnostics,
    # Combinators
    collect_results,
)

from .builders import (
    suggest,
    # Spec (E1xxx)
    spec_malformed,
    missing_field,
    invalid_type_name,
    unknown_inner_kind,
    missing_inner_type,
    unknown_capability,
    invalid_field_value,
    # Capabilities (E2xxx)
    missing_prerequisite,
    forbidden_for_inner_kind,
    forbidden_with_validators,
    requires_validators,
    requires_default_value,
    forbidden_without_validator,
    # Rules (E3xxx)
    unknown_rule,
    rule_not_admissible,
    invalid_rule_params,
    contradictory_bounds,
    duplicate_validator,
    invalid_custom_function,
    invalid_regex,
    # Internal (E9xxx)
    internal_error,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSet",
    "GenerationError",
    "ok",
    "err",
    "from_diagnostics",
    "collect_results",
    "suggest",
    "spec_malformed",
    "missing_field",
    "invalid_type_name",
    "unknown_inner_kind",
    "missing_inner_type",
    "unknown_capability",
    "invalid_field_value",
    "missing_prerequisite",
    "forbidden_for_inner_kind",
    "forbidden_with_validators",
    "requires_validators",
    "requires_default_value",
    "forbidden_without_validator",
    "unknown_rule",
    "rule_not_admissible",
    "invalid_rule_params",
    "contradictory_bounds",
    "duplicate_validator",
    "invalid_custom_function",
    "invalid_regex",
    "internal_error",
]
