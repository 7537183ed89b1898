"""Capability Emitters

One emitter per capability, registered in ``EMITTERS``. Emitters only add
behavior; they never decide legality and never bypass the guard, except
RAW_CONVERSION_IN_UNCHECKED, which the resolver forbids whenever validators
exist.
"""
from __future__ import annotations

from hardtype.models.spec import Capability

from .base import EMITTERS, Emission, EmissionContext, Emitter, emitter, method
from .construction import emit_construction
from . import comparison, conversion, copying, formatting, parsing, serde  # noqa: F401  (registration)


def emit_all(ctx: EmissionContext) -> list[Emission]:
    """Construction blocks followed by every capability, in canonical order.

    An emitter shared by several capabilities runs once.
    """
    emissions = [emit_construction(ctx)]
    seen: set[Emitter] = set()
    for capability in Capability.canonical_order(ctx.capabilities):
        fn = EMITTERS.get(capability)
        if fn is None or fn in seen:
            continue
        seen.add(fn)
        emission = fn(ctx)
        if emission or emission.imports:
            emissions.append(emission)
    return emissions


__all__ = [
    "EMITTERS",
    "Emission",
    "EmissionContext",
    "Emitter",
    "emitter",
    "method",
    "emit_construction",
    "emit_all",
]
