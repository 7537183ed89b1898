"""Conversions between the smart type and its inner value."""
from __future__ import annotations

import math

from hardtype.models.spec import Capability, InnerKind

from .base import Emission, EmissionContext, emitter, method


@emitter(Capability.RAW_CONVERSION_IN)
def emit_raw_conversion_in(ctx: EmissionContext) -> Emission:
    doc = (
        f'    """Build from an inner value; raises {ctx.error_model.error_name} when it is rejected."""'
        if ctx.guard.fallible else
        '    """Build from an inner value."""'
    )
    return Emission.of(method(
        "@classmethod",
        f"def from_inner(cls, value: {ctx.annotation}) -> {ctx.name}:",
        doc,
        "    return cls(value)",
    ))


@emitter(Capability.RAW_CONVERSION_IN_UNCHECKED)
def emit_raw_conversion_in_unchecked(ctx: EmissionContext) -> Emission:
    return Emission.of(method(
        "@classmethod",
        f"def new_unchecked(cls, value: {ctx.annotation}) -> {ctx.name}:",
        '    """Wrap ``value`` as is. Sanitizers are skipped."""',
        "    return cls._adopt(value)",
    ))


@emitter(Capability.RAW_CONVERSION_OUT)
def emit_raw_conversion_out(ctx: EmissionContext) -> Emission:
    blocks = [method(
        f"def to_inner(self) -> {ctx.annotation}:",
        "    return self._value",
    )]
    kind = ctx.kind
    if kind.is_integer:
        blocks += [
            method("def __int__(self) -> int:", "    return self._value"),
            method("def __index__(self) -> int:", "    return self._value"),
        ]
    elif kind is InnerKind.FLOATING_POINT:
        blocks.append(method("def __float__(self) -> float:", "    return self._value"))
    elif kind is InnerKind.TEXT and not ctx.has(Capability.DISPLAY):
        blocks.append(method("def __str__(self) -> str:", "    return self._value"))
    return Emission.of(*blocks)


@emitter(Capability.BORROW_INNER)
def emit_borrow_inner(ctx: EmissionContext) -> Emission:
    return Emission.of(method(
        "@property",
        f"def inner(self) -> {ctx.annotation}:",
        "    return self._value",
    ))


def _literal(value: object) -> str:
    """Source text for ``value``; non-finite floats have no literal form."""
    if isinstance(value, float) and not math.isfinite(value):
        return f"float({str(value)!r})"
    return repr(value)


@emitter(Capability.DEFAULT)
def emit_default(ctx: EmissionContext) -> Emission:
    return Emission.of(method(
        "@classmethod",
        f"def default(cls) -> {ctx.name}:",
        f"    return cls({_literal(ctx.spec.default_value)})",
    ))
