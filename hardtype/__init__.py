"""hardtype: generate smart types that can never hold an invalid value.

A TypeSpec names an inner primitive, ordered sanitizers and validators and a
set of capabilities. ``generate`` checks the request as a whole and emits a
standalone Python module defining the smart type, its error types and its
guard routine.
"""
from hardtype.core.errors import Diagnostic, DiagnosticCode, DiagnosticSet, Err, GenerationError, Ok, Result
from hardtype.generator import generate, generate_all, generate_or_raise, load_spec, materialize
from hardtype.models import (
    Capability,
    GeneratedArtifact,
    InnerKind,
    SanitizerEntry,
    TypeSpec,
    ValidatorEntry,
    Visibility,
)
from hardtype.rules import DEFAULT_REGISTRY, RuleDefinition, RuleEmission, RuleRegistry, RuleRole

__version__ = "0.1.0"

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSet",
    "Err",
    "GenerationError",
    "Ok",
    "Result",
    "generate",
    "generate_all",
    "generate_or_raise",
    "load_spec",
    "materialize",
    "Capability",
    "GeneratedArtifact",
    "InnerKind",
    "SanitizerEntry",
    "TypeSpec",
    "ValidatorEntry",
    "Visibility",
    "DEFAULT_REGISTRY",
    "RuleDefinition",
    "RuleEmission",
    "RuleRegistry",
    "RuleRole",
]
