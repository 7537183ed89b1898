"""Rule tables consumed by the pipeline compiler.

``DEFAULT_REGISTRY`` holds the standard text, numeric and custom-function
rules. Treat it as read-only; call ``DEFAULT_REGISTRY.copy()`` and register
additional rules on the copy.
"""
from .registry import (
    ALL_KINDS,
    TEXT_KINDS,
    INTEGER_KINDS,
    NUMERIC_KINDS,
    FLOAT_KINDS,
    RuleRole,
    ParamKind,
    Param,
    Bound,
    RuleContext,
    RuleEmission,
    RuleDefinition,
    RuleRegistry,
)
from .params import normalize_params, parse_number
from .text import TEXT_RULES
from .numeric import NUMERIC_RULES
from .custom import CUSTOM_RULES, import_alias


def build_default_registry() -> RuleRegistry:
    return RuleRegistry((*TEXT_RULES, *NUMERIC_RULES, *CUSTOM_RULES))


DEFAULT_REGISTRY = build_default_registry()

__all__ = [
    "ALL_KINDS",
    "TEXT_KINDS",
    "INTEGER_KINDS",
    "NUMERIC_KINDS",
    "FLOAT_KINDS",
    "RuleRole",
    "ParamKind",
    "Param",
    "Bound",
    "RuleContext",
    "RuleEmission",
    "RuleDefinition",
    "RuleRegistry",
    "normalize_params",
    "parse_number",
    "TEXT_RULES",
    "NUMERIC_RULES",
    "CUSTOM_RULES",
    "import_alias",
    "build_default_registry",
    "DEFAULT_REGISTRY",
]
