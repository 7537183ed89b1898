"""Pipeline Compiler

Turns the ordered sanitizers and validators of a TypeSpec into two private
routines:

    def _guard(value) -> tuple[inner, <Name>Error | None]
    def _validate(value) -> tuple[inner, <Name>Error | None]

``_guard``:

1. inner-kind prologue: type check, int->float widening, sign check
2. sanitizers in declaration order, each feeding the next
3. hands the sanitized value to ``_validate``

``_validate``:

1. the inner-kind prologue again, so a sanitizer cannot leave a value of the
   wrong type or sign behind
2. validators in declaration order; the first rejection returns its error
   variant and later validators never run (fail-fast)
3. every validator passed: ``(value, None)``

Every construction path of the generated type goes through ``_guard``.
Unpickling and copying an existing instance go through ``_validate`` only,
since the stored value is already sanitized.
Rule lookup, parameter coercion and cross-rule bound checks happen here, at
generation time, and all problems are reported together.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable

from hardtype.core.errors import (
    Diagnostic,
    DiagnosticSet,
    Err,
    Ok,
    Result,
    contradictory_bounds,
    duplicate_validator,
    invalid_field_value,
    rule_not_admissible,
    unknown_rule,
)
from hardtype.core.logging import engine_logger
from hardtype.models.artifact import ErrorModel
from hardtype.models.spec import Capability, InnerKind, SanitizerEntry, TypeSpec, ValidatorEntry
from hardtype.rules import (
    DEFAULT_REGISTRY,
    Bound,
    RuleContext,
    RuleDefinition,
    RuleEmission,
    RuleRegistry,
    RuleRole,
    import_alias,
    normalize_params,
)

from .error_model import build_error_model, inner_annotation, render_validation_error

log = engine_logger()

GUARD_NAME = "_guard"
VALIDATE_NAME = "_validate"
_DISCRIMINANT = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass(frozen=True, slots=True)
class BoundRule:
    """A spec entry matched to its rule definition and rendered."""
    role: RuleRole
    identifier: str
    definition: RuleDefinition
    params: tuple[Any, ...]
    emission: RuleEmission
    slot: int


@dataclass(frozen=True, slots=True)
class CompiledGuard:
    """The guard and validate routines in source form plus what they need at module level."""
    name: str
    validate_name: str
    lines: tuple[str, ...]
    imports: frozenset[str]
    helpers: tuple[str, ...]
    fallible: bool
    sanitizer_ids: tuple[str, ...]
    validator_ids: tuple[str, ...]
    support: tuple[str, ...] = field(default=())  # error types the guard references

    @property
    def source(self) -> str:
        return "\n".join(self.lines) + "\n"

    def bind(self) -> Callable[[Any], tuple[Any, Any]]:
        """Execute the guard in an isolated module and return it.

        Custom rule modules are imported as a side effect.
        """
        parts = ["from __future__ import annotations", *sorted(self.imports)]
        if self.support:
            parts.append("from enum import Enum")
        parts += ["", *self.support, "", *self.helpers, "", *self.lines]
        module = ModuleType(f"hardtype_guard_{self.name.strip('_')}")
        exec(compile("\n".join(parts) + "\n", module.__name__, "exec"), module.__dict__)
        return module.__dict__[self.name]


@dataclass(frozen=True, slots=True)
class CompiledPipeline:
    guard: CompiledGuard
    error_model: ErrorModel
    rules: tuple[BoundRule, ...]


def _prologue(spec: TypeSpec) -> list[str]:
    kind, name = spec.inner_kind, spec.name
    if kind is InnerKind.TEXT:
        return [
            "    if not isinstance(value, str):",
            f'        raise TypeError(f"{name} expects str, got {{type(value).__name__}}")',
        ]
    if kind.is_integer:
        lines = [
            "    if not isinstance(value, int) or isinstance(value, bool):",
            f'        raise TypeError(f"{name} expects int, got {{type(value).__name__}}")',
        ]
        if kind is InnerKind.UNSIGNED_INTEGER:
            lines += [
                "    if value < 0:",
                f'        raise OverflowError(f"{name} expects a non-negative int, got {{value}}")',
            ]
        return lines
    if kind is InnerKind.FLOATING_POINT:
        return [
            "    if isinstance(value, bool) or not isinstance(value, (int, float)):",
            f'        raise TypeError(f"{name} expects float, got {{type(value).__name__}}")',
            "    value = float(value)",
        ]
    return [
        "    if not isinstance(value, _Inner):",
        f'        raise TypeError(f"{name} expects {{_Inner.__name__}}, got {{type(value).__name__}}")',
    ]


def _bind_entries(
    spec: TypeSpec,
    registry: RuleRegistry,
) -> tuple[list[BoundRule], list[Diagnostic]]:
    problems: list[Diagnostic] = []
    bound: list[BoundRule] = []
    entries: list[tuple[RuleRole, SanitizerEntry | ValidatorEntry]] = [
        *((RuleRole.SANITIZER, s) for s in spec.sanitizers),
        *((RuleRole.VALIDATOR, v) for v in spec.validators),
    ]

    for slot, (role, entry) in enumerate(entries):
        definition = registry.lookup(role, entry.rule)
        if definition is None:
            problems.append(unknown_rule(entry.rule, role.value, registry.names(role)))
            continue
        if not definition.admits(spec.inner_kind):
            problems.append(rule_not_admissible(entry.rule, role.value, spec.inner_kind.name))
            continue
        params, found = normalize_params(definition, entry.params, spec.inner_kind)
        if found:
            problems.extend(found)
            continue
        identifier = entry.identifier
        emission = definition.emit(RuleContext(spec.inner_kind, params, slot, identifier))
        bound.append(BoundRule(role, identifier, definition, params, emission, slot))

    return bound, problems


def _check_identifiers(spec: TypeSpec) -> list[Diagnostic]:
    problems: list[Diagnostic] = []
    seen: set[str] = set()
    for entry in spec.validators:
        ident = entry.identifier
        if not _DISCRIMINANT.match(ident):
            problems.append(invalid_field_value(
                ident, "validator identifiers must start with a letter and contain only letters, digits and '_'",
            ))
            continue
        key = ident.upper()
        if key in seen:
            problems.append(duplicate_validator(ident))
        seen.add(key)
    return problems


def _check_bounds(rules: list[BoundRule]) -> list[Diagnostic]:
    """Report validator combinations no value can satisfy."""
    problems: list[Diagnostic] = []
    lowers: dict[str, tuple[Bound, str]] = {}
    uppers: dict[str, tuple[Bound, str]] = {}

    for rule in rules:
        if rule.role is not RuleRole.VALIDATOR or rule.definition.bound is None:
            continue
        b = rule.definition.bound(rule.params)
        if b is None:
            continue
        if b.lower is not None:
            current = lowers.get(b.dimension)
            if current is None or b.lower > current[0].lower or (b.lower == current[0].lower and b.lower_strict):
                lowers[b.dimension] = (b, rule.identifier)
        if b.upper is not None:
            current = uppers.get(b.dimension)
            if current is None or b.upper < current[0].upper or (b.upper == current[0].upper and b.upper_strict):
                uppers[b.dimension] = (b, rule.identifier)

    for dimension in sorted(lowers.keys() & uppers.keys()):
        (low, low_id), (high, high_id) = lowers[dimension], uppers[dimension]
        empty = low.lower > high.upper or (low.lower == high.upper and (low.lower_strict or high.upper_strict))
        if empty:
            subject = low_id if low_id == high_id else f"{low_id}/{high_id}"
            problems.append(contradictory_bounds(
                subject,
                f"no {dimension} can satisfy both {low_id} (lower {low.lower!r}) "
                f"and {high_id} (upper {high.upper!r})",
            ))
    return problems


def _signature(spec: TypeSpec, model: ErrorModel) -> str:
    annotation = inner_annotation(spec)
    error = f"{model.error_name} | None" if model.is_fallible else "None"
    return f"(value: {annotation}) -> tuple[{annotation}, {error}]"


def _render_validate(
    spec: TypeSpec,
    rules: list[BoundRule],
    model: ErrorModel,
) -> list[str]:
    lines = [f"def {VALIDATE_NAME}{_signature(spec, model)}:"]
    lines += _prologue(spec)

    for rule in rules:
        if rule.role is not RuleRole.VALIDATOR:
            continue
        variant = model.variant(rule.identifier)
        args = f"{model.kind_name}.{variant.member}, {variant.expected!r}"
        if model.reflects_value:
            args += ", value"
        lines += [
            f"    if not ({rule.emission.condition}):",
            f"        return value, {model.error_name}({args})",
        ]

    lines.append("    return value, None")
    return lines


def _render_guard(
    spec: TypeSpec,
    rules: list[BoundRule],
    model: ErrorModel,
) -> list[str]:
    lines = [f"def {GUARD_NAME}{_signature(spec, model)}:"]

    sanitizers = [rule for rule in rules if rule.role is RuleRole.SANITIZER]
    if sanitizers:
        lines += _prologue(spec)
    for rule in sanitizers:
        lines.append(f"    # sanitize: {rule.identifier}")
        lines += [f"    {line}" for line in rule.emission.lines]

    # the inner-kind checks run again in _validate, after the last sanitizer
    lines.append(f"    return {VALIDATE_NAME}(value)")
    return [*_render_validate(spec, rules, model), "", "", *lines]


def compile_pipeline(
    spec: TypeSpec,
    capabilities: frozenset[Capability] | None = None,
    registry: RuleRegistry | None = None,
) -> Result[CompiledPipeline, DiagnosticSet]:
    """Compile sanitizers and validators into the guard routine and error model."""
    registry = DEFAULT_REGISTRY if registry is None else registry
    capabilities = spec.capabilities if capabilities is None else capabilities

    problems = _check_identifiers(spec)
    rules, found = _bind_entries(spec, registry)
    problems += found
    if not found:
        problems += _check_bounds(rules)

    if problems:
        diagnostics = DiagnosticSet.from_iterable(problems)
        log.debug("pipeline_rejected", type_name=spec.name, count=len(diagnostics))
        return Err(diagnostics)

    expectations = [(r.identifier, r.emission.expected) for r in rules if r.role is RuleRole.VALIDATOR]
    model = build_error_model(spec, frozenset(capabilities), expectations)

    imports: set[str] = set()
    helpers: list[str] = []
    for rule in rules:
        imports |= rule.emission.imports
        helpers += rule.emission.helpers
    if spec.inner_kind is InnerKind.OTHER:
        more, extra = import_alias(spec.inner_type, "_Inner")
        imports |= more
        helpers = [*extra, *helpers]

    guard = CompiledGuard(
        name=GUARD_NAME,
        validate_name=VALIDATE_NAME,
        lines=tuple(_render_guard(spec, rules, model)),
        imports=frozenset(imports),
        helpers=tuple(helpers),
        fallible=model.is_fallible,
        sanitizer_ids=spec.sanitizer_ids,
        validator_ids=spec.validator_ids,
        support=tuple(render_validation_error(model)),
    )
    log.debug(
        "pipeline_compiled",
        type_name=spec.name,
        sanitizers=list(guard.sanitizer_ids),
        validators=list(guard.validator_ids),
        fallible=guard.fallible,
    )
    return Ok(CompiledPipeline(guard=guard, error_model=model, rules=tuple(rules)))


def compile_guard(
    spec: TypeSpec,
    registry: RuleRegistry | None = None,
) -> Result[CompiledGuard, DiagnosticSet]:
    """Compile only the guard routine of ``spec``."""
    return compile_pipeline(spec, registry=registry).map(lambda pipeline: pipeline.guard)
