"""Emitter plumbing shared by every capability emitter.

An emitter receives the resolved capability set, the compiled guard and the
error model, and returns class-body blocks plus the imports they need. It
never decides legality: the resolver already did.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from hardtype.models.artifact import ErrorModel
from hardtype.models.spec import Capability, InnerKind, TypeSpec

from ..pipeline import CompiledGuard

INDENT = "    "


@dataclass(frozen=True, slots=True)
class EmissionContext:
    spec: TypeSpec
    capabilities: frozenset[Capability]
    guard: CompiledGuard
    error_model: ErrorModel

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def kind(self) -> InnerKind:
        return self.spec.inner_kind

    @property
    def annotation(self) -> str:
        return self.error_model.inner_annotation

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True, slots=True)
class Emission:
    """Class-body blocks (already indented one level) and required imports."""
    blocks: tuple[tuple[str, ...], ...] = ()
    imports: frozenset[str] = frozenset()

    @classmethod
    def of(cls, *blocks: Iterable[str], imports: Iterable[str] = ()) -> Emission:
        return cls(tuple(tuple(b) for b in blocks if b), frozenset(imports))

    def __bool__(self) -> bool:
        return bool(self.blocks)


Emitter = Callable[[EmissionContext], Emission]

EMITTERS: dict[Capability, Emitter] = {}


def emitter(*capabilities: Capability) -> Callable[[Emitter], Emitter]:
    """Register ``fn`` as the emitter of ``capabilities``."""
    def decorate(fn: Emitter) -> Emitter:
        for capability in capabilities:
            if capability in EMITTERS:
                raise ValueError(f"{capability.name} already has an emitter")
            EMITTERS[capability] = fn
        return fn
    return decorate


def method(*lines: str) -> tuple[str, ...]:
    """Indent a method definition into the class body."""
    return tuple(f"{INDENT}{line}" if line else "" for line in lines)


def isinstance_guard(name: str, other: str = "other") -> str:
    return f"if not isinstance({other}, {name}):"
