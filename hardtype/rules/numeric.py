"""Standard rules for integer and floating-point inner values."""
from __future__ import annotations

from .registry import (
    Bound,
    FLOAT_KINDS,
    NUMERIC_KINDS,
    Param,
    ParamKind,
    RuleContext,
    RuleDefinition,
    RuleEmission,
    RuleRole,
)


def _comparison(name: str, op: str, phrase: str, bound) -> RuleDefinition:
    def emit(ctx: RuleContext) -> RuleEmission:
        (limit,) = ctx.params
        return RuleEmission(condition=f"value {op} {limit!r}", expected=f"{phrase} {limit!r}")

    return RuleDefinition(
        name=name,
        role=RuleRole.VALIDATOR,
        kinds=NUMERIC_KINDS,
        emit=emit,
        params=(Param("limit", ParamKind.NUMBER),),
        bound=bound,
    )


def _check_ordered(params: tuple) -> str | None:
    low, high = params
    if low > high:
        return f"lower bound {low!r} is greater than upper bound {high!r}"
    return None


def _emit_range(ctx: RuleContext) -> RuleEmission:
    low, high = ctx.params
    return RuleEmission(
        condition=f"{low!r} <= value <= {high!r}",
        expected=f"between {low!r} and {high!r} (inclusive)",
    )


def _emit_clamp(ctx: RuleContext) -> RuleEmission:
    low, high = ctx.params
    return RuleEmission(lines=(f"value = min(max(value, {low!r}), {high!r})",))


def _emit_finite(ctx: RuleContext) -> RuleEmission:
    return RuleEmission(
        condition="math.isfinite(value)",
        expected="a finite number",
        imports=frozenset({"import math"}),
    )


GREATER = _comparison("greater", ">", "greater than", lambda p: Bound("value", lower=p[0], lower_strict=True))
GREATER_OR_EQUAL = _comparison("greater_or_equal", ">=", "at least", lambda p: Bound("value", lower=p[0]))
LESS = _comparison("less", "<", "less than", lambda p: Bound("value", upper=p[0], upper_strict=True))
LESS_OR_EQUAL = _comparison("less_or_equal", "<=", "at most", lambda p: Bound("value", upper=p[0]))

RANGE = RuleDefinition(
    name="range",
    role=RuleRole.VALIDATOR,
    kinds=NUMERIC_KINDS,
    emit=_emit_range,
    params=(Param("min", ParamKind.NUMBER), Param("max", ParamKind.NUMBER)),
    bound=lambda p: Bound("value", lower=p[0], upper=p[1]),
    check=_check_ordered,
)

FINITE = RuleDefinition(
    name="finite",
    role=RuleRole.VALIDATOR,
    kinds=FLOAT_KINDS,
    emit=_emit_finite,
)

CLAMP = RuleDefinition(
    name="clamp",
    role=RuleRole.SANITIZER,
    kinds=NUMERIC_KINDS,
    emit=_emit_clamp,
    params=(Param("min", ParamKind.NUMBER), Param("max", ParamKind.NUMBER)),
    check=_check_ordered,
)

NUMERIC_RULES = (GREATER, GREATER_OR_EQUAL, LESS, LESS_OR_EQUAL, RANGE, FINITE, CLAMP)
