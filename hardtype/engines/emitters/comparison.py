"""Equality, ordering and hashing.

All comparisons delegate to the inner value. A foreign operand yields
``NotImplemented`` so Python can try the reflected operation.
"""
from __future__ import annotations

from hardtype.models.spec import Capability

from .base import Emission, EmissionContext, emitter, isinstance_guard, method

_OPERATORS = (("lt", "<"), ("le", "<="), ("gt", ">"), ("ge", ">="))


@emitter(Capability.EQUALITY)
def emit_equality(ctx: EmissionContext) -> Emission:
    return Emission.of(method(
        "def __eq__(self, other: object) -> bool:",
        f"    {isinstance_guard(ctx.name)}",
        "        return NotImplemented",
        "    return self._value == other._value",
    ))


@emitter(Capability.STRICT_EQUALITY)
def emit_strict_equality(ctx: EmissionContext) -> Emission:
    # Reflexivity follows from the inner kind (or the finite validator); __eq__ is shared.
    return Emission()


@emitter(Capability.PARTIAL_ORDERING)
def emit_partial_ordering(ctx: EmissionContext) -> Emission:
    blocks = []
    for dunder, op in _OPERATORS:
        blocks.append(method(
            f"def __{dunder}__(self, other: object) -> bool:",
            f"    {isinstance_guard(ctx.name)}",
            "        return NotImplemented",
            f"    return self._value {op} other._value",
        ))
    return Emission.of(*blocks)


@emitter(Capability.ORDERING)
def emit_ordering(ctx: EmissionContext) -> Emission:
    name = ctx.name
    return Emission.of(
        method(
            f"def max(self, other: {name}) -> {name}:",
            "    return other if other._value > self._value else self",
        ),
        method(
            f"def min(self, other: {name}) -> {name}:",
            "    return other if other._value < self._value else self",
        ),
        method(
            f"def clamp(self, low: {name}, high: {name}) -> {name}:",
            '    """Restrict ``self`` to ``[low, high]``."""',
            "    if low._value > high._value:",
            '        raise ValueError("clamp requires low <= high")',
            "    if self._value < low._value:",
            "        return low",
            "    if self._value > high._value:",
            "        return high",
            "    return self",
        ),
    )


@emitter(Capability.HASH)
def emit_hash(ctx: EmissionContext) -> Emission:
    return Emission.of(method(
        "def __hash__(self) -> int:",
        "    return hash(self._value)",
    ))
