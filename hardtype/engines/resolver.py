"""Capability Dependency Resolver

Checks a requested capability set against a declarative rule table and either
accepts it (possibly with prerequisites added) or reports every conflict at
once. The table is data: adding a capability rule never touches emission code.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from hardtype.core.config import PrerequisitePolicy
from hardtype.core.errors import (
    Diagnostic,
    DiagnosticSet,
    Err,
    Ok,
    Result,
    forbidden_for_inner_kind,
    forbidden_with_validators,
    forbidden_without_validator,
    missing_prerequisite,
    requires_default_value,
    requires_validators,
)
from hardtype.core.logging import engine_logger
from hardtype.models.spec import Capability, InnerKind, TypeSpec

log = engine_logger()


@dataclass(frozen=True, slots=True)
class CapabilityRule:
    """Constraints attached to one capability.

    - requires: capabilities that must also be present
    - forbidden_kinds: inner kinds for which the capability is never available
    - unless_validator: for ``guarded_kinds``, a validator rule that lifts the ban
    - forbid_with_validators: capability would bypass the guard
    - needs_validators: capability is meaningless without validators
    - spec_check: extra predicate over the spec, returning a diagnostic or None
    """
    requires: tuple[Capability, ...] = ()
    forbidden_kinds: frozenset[InnerKind] = frozenset()
    forbidden_reason: str = ""
    guarded_kinds: frozenset[InnerKind] = frozenset()
    unless_validator: str = ""
    forbid_with_validators: bool = False
    needs_validators: bool = False
    spec_check: Callable[[Capability, TypeSpec], Diagnostic | None] | None = None


def _needs_default(capability: Capability, spec: TypeSpec) -> Diagnostic | None:
    if spec.default_value is None:
        return requires_default_value(capability.name)
    return None


_FLOAT = frozenset({InnerKind.FLOATING_POINT})

CAPABILITY_RULES: dict[Capability, CapabilityRule] = {
    Capability.STRICT_EQUALITY: CapabilityRule(
        requires=(Capability.EQUALITY,),
        guarded_kinds=_FLOAT,
        unless_validator="finite",
    ),
    Capability.PARTIAL_ORDERING: CapabilityRule(requires=(Capability.EQUALITY,)),
    Capability.ORDERING: CapabilityRule(
        requires=(Capability.PARTIAL_ORDERING,),
        guarded_kinds=_FLOAT,
        unless_validator="finite",
    ),
    Capability.HASH: CapabilityRule(
        requires=(Capability.EQUALITY,),
        guarded_kinds=_FLOAT,
        unless_validator="finite",
    ),
    Capability.COPY: CapabilityRule(
        requires=(Capability.CLONE,),
        forbidden_kinds=frozenset({InnerKind.TEXT}),
        forbidden_reason="text values own a heap buffer and are cloned, not copied",
    ),
    Capability.RAW_CONVERSION_IN_UNCHECKED: CapabilityRule(forbid_with_validators=True),
    Capability.PARSE_FROM_TEXT: CapabilityRule(
        forbidden_kinds=frozenset({InnerKind.OTHER}),
        forbidden_reason="there is no textual decoder for an arbitrary inner type",
    ),
    Capability.DEFAULT: CapabilityRule(spec_check=_needs_default),
    Capability.REFLECT_INVALID_VALUE: CapabilityRule(needs_validators=True),
}


@dataclass(frozen=True, slots=True)
class ResolvedCapabilities:
    """Accepted capability set.

    ``added`` lists prerequisites inserted under the AUTO policy.
    """
    capabilities: frozenset[Capability]
    added: frozenset[Capability] = frozenset()

    @property
    def ordered(self) -> tuple[Capability, ...]:
        return Capability.canonical_order(self.capabilities)

    def __contains__(self, capability: Capability) -> bool:
        return capability in self.capabilities


class CapabilityResolver:
    """Data-driven resolver over ``CAPABILITY_RULES``."""

    def __init__(
        self,
        rules: dict[Capability, CapabilityRule] | None = None,
        policy: PrerequisitePolicy = PrerequisitePolicy.STRICT,
    ):
        self.rules = CAPABILITY_RULES if rules is None else rules
        self.policy = policy

    def rule_for(self, capability: Capability) -> CapabilityRule:
        return self.rules.get(capability, CapabilityRule())

    def forbidden(self, capability: Capability, spec: TypeSpec) -> list[Diagnostic]:
        """Reasons ``capability`` can never be emitted for ``spec``."""
        rule = self.rule_for(capability)
        found: list[Diagnostic] = []
        kind = spec.inner_kind
        if kind in rule.forbidden_kinds:
            found.append(forbidden_for_inner_kind(capability.name, kind.name, rule.forbidden_reason))
        if kind in rule.guarded_kinds and not spec.has_validator_rule(rule.unless_validator):
            found.append(forbidden_without_validator(capability.name, kind.name, rule.unless_validator))
        if rule.forbid_with_validators and spec.has_validators:
            found.append(forbidden_with_validators(capability.name, spec.validator_ids))
        if rule.needs_validators and not spec.has_validators:
            found.append(requires_validators(capability.name))
        if rule.spec_check is not None and (d := rule.spec_check(capability, spec)) is not None:
            found.append(d)
        return found

    def resolve(self, spec: TypeSpec) -> Result[ResolvedCapabilities, DiagnosticSet]:
        requested = frozenset(spec.capabilities)
        accepted = set(requested)
        problems: list[Diagnostic] = []

        for capability in Capability.canonical_order(requested):
            problems.extend(self.forbidden(capability, spec))

        # Walk prerequisites breadth-first so AUTO closes over chains (ORDERING -> PARTIAL_ORDERING -> EQUALITY).
        pending = list(Capability.canonical_order(requested))
        while pending:
            capability = pending.pop(0)
            for prerequisite in self.rule_for(capability).requires:
                if prerequisite in accepted:
                    continue
                if self.policy is PrerequisitePolicy.STRICT:
                    problems.append(missing_prerequisite(capability.name, prerequisite.name))
                    continue
                blocked = self.forbidden(prerequisite, spec)
                if blocked:
                    problems.append(missing_prerequisite(capability.name, prerequisite.name))
                    problems.extend(blocked)
                    continue
                accepted.add(prerequisite)
                pending.append(prerequisite)
                log.debug("prerequisite_added", capability=capability.value, prerequisite=prerequisite.value)

        if problems:
            diagnostics = DiagnosticSet.from_iterable(problems)
            log.debug("capabilities_rejected", type_name=spec.name, count=len(diagnostics))
            return Err(diagnostics)

        resolved = ResolvedCapabilities(frozenset(accepted), frozenset(accepted - requested))
        log.debug("capabilities_resolved", type_name=spec.name, capabilities=[c.value for c in resolved.ordered])
        return Ok(resolved)


def resolve_capabilities(
    spec: TypeSpec,
    policy: PrerequisitePolicy = PrerequisitePolicy.STRICT,
) -> Result[ResolvedCapabilities, DiagnosticSet]:
    """Resolve ``spec.capabilities`` with the default rule table."""
    return CapabilityResolver(policy=policy).resolve(spec)
