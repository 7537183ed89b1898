"""Extensible Rule Table

Sanitizers and validators are looked up by stable string identifiers in a
``RuleRegistry``. A rule definition knows which inner kinds it applies to,
what parameters it takes, and how to render itself into the guard routine.
Nothing is resolved reflectively: an identifier missing from the registry is
a generation-time diagnostic.

Usage:
    registry = DEFAULT_REGISTRY.copy()
    registry.register(RuleDefinition(
        name="even",
        role=RuleRole.VALIDATOR,
        kinds=INTEGER_KINDS,
        emit=lambda ctx: RuleEmission(condition="value % 2 == 0", expected="an even number"),
    ))
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from hardtype.models.spec import InnerKind

ALL_KINDS = frozenset(InnerKind)
TEXT_KINDS = frozenset({InnerKind.TEXT})
INTEGER_KINDS = frozenset({InnerKind.SIGNED_INTEGER, InnerKind.UNSIGNED_INTEGER})
NUMERIC_KINDS = INTEGER_KINDS | {InnerKind.FLOATING_POINT}
FLOAT_KINDS = frozenset({InnerKind.FLOATING_POINT})


class RuleRole(str, Enum):
    SANITIZER = "sanitizer"
    VALIDATOR = "validator"


class ParamKind(str, Enum):
    """How a raw rule parameter is normalized."""
    COUNT = "count"        # non-negative int, e.g. a length
    NUMBER = "number"      # a value of the inner kind (int or float)
    PATTERN = "pattern"    # regular expression source
    FUNCTION = "function"  # importable 'module:qualname' reference


@dataclass(frozen=True, slots=True)
class Param:
    name: str
    kind: ParamKind


@dataclass(frozen=True, slots=True)
class Bound:
    """Interval a validator imposes on one dimension ('length' or 'value')."""
    dimension: str
    lower: int | float | None = None
    upper: int | float | None = None
    lower_strict: bool = False
    upper_strict: bool = False


@dataclass(frozen=True, slots=True)
class RuleContext:
    """What a rule sees when it renders itself."""
    kind: InnerKind
    params: tuple[Any, ...]
    slot: int  # position in the pipeline; unique suffix for helper names
    identifier: str = ""


@dataclass(frozen=True, slots=True)
class RuleEmission:
    """Rendered form of one rule.

    Sanitizers fill ``lines`` (statements rebinding ``value``); validators fill
    ``condition`` (an expression over ``value``, truthy when valid) and
    ``expected`` (the declared expectation, used in error messages).
    """
    lines: tuple[str, ...] = ()
    condition: str = ""
    expected: str = ""
    imports: frozenset[str] = frozenset()
    helpers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    name: str
    role: RuleRole
    kinds: frozenset[InnerKind]
    emit: Callable[[RuleContext], RuleEmission]
    params: tuple[Param, ...] = ()
    bound: Callable[[tuple[Any, ...]], Bound | None] | None = None
    check: Callable[[tuple[Any, ...]], str | None] | None = None
    aliases: tuple[str, ...] = ()

    def admits(self, kind: InnerKind) -> bool:
        return kind in self.kinds


class RuleRegistry:
    """Mapping of (role, identifier) to rule definitions, aliases included."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[RuleDefinition] = ()):
        self._rules: dict[tuple[RuleRole, str], RuleDefinition] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: RuleDefinition) -> None:
        for name in (rule.name, *rule.aliases):
            key = (rule.role, name)
            if key in self._rules:
                raise ValueError(f"{rule.role.value} '{name}' is already registered")
            self._rules[key] = rule

    def lookup(self, role: RuleRole, name: str) -> RuleDefinition | None:
        return self._rules.get((role, name))

    def names(self, role: RuleRole) -> list[str]:
        return sorted(name for r, name in self._rules if r is role)

    def copy(self) -> RuleRegistry:
        clone = RuleRegistry()
        clone._rules = dict(self._rules)
        return clone

    def __contains__(self, key: tuple[RuleRole, str]) -> bool:
        return key in self._rules

    def __len__(self) -> int:
        return len(self._rules)
