"""Standard rules for text inner values.

Sanitizers rebind ``value``; validators render a condition over it. Lengths
count code points, the same unit ``len()`` uses.
"""
from __future__ import annotations

from .registry import (
    Bound,
    Param,
    ParamKind,
    RuleContext,
    RuleDefinition,
    RuleEmission,
    RuleRole,
    TEXT_KINDS,
)


def _method_sanitizer(name: str, method: str) -> RuleDefinition:
    return RuleDefinition(
        name=name,
        role=RuleRole.SANITIZER,
        kinds=TEXT_KINDS,
        emit=lambda ctx: RuleEmission(lines=(f"value = value.{method}()",)),
    )


def _emit_not_empty(ctx: RuleContext) -> RuleEmission:
    return RuleEmission(condition="len(value) > 0", expected="non-empty text")


def _emit_min_len(ctx: RuleContext) -> RuleEmission:
    (n,) = ctx.params
    return RuleEmission(condition=f"len(value) >= {n!r}", expected=f"at least {n} character(s)")


def _emit_max_len(ctx: RuleContext) -> RuleEmission:
    (n,) = ctx.params
    return RuleEmission(condition=f"len(value) <= {n!r}", expected=f"at most {n} character(s)")


def _emit_len_char_range(ctx: RuleContext) -> RuleEmission:
    low, high = ctx.params
    return RuleEmission(
        condition=f"{low!r} <= len(value) <= {high!r}",
        expected=f"between {low} and {high} character(s)",
    )


def _emit_regex(ctx: RuleContext) -> RuleEmission:
    (pattern,) = ctx.params
    helper = f"_PATTERN_{ctx.slot}"
    return RuleEmission(
        condition=f"{helper}.search(value) is not None",
        expected=f"text matching {pattern!r}",
        imports=frozenset({"import re"}),
        helpers=(f"{helper} = re.compile({pattern!r})",),
    )


def _check_len_range(params: tuple) -> str | None:
    low, high = params
    if low > high:
        return f"lower length {low} is greater than upper length {high}"
    return None


TRIM = _method_sanitizer("trim", "strip")
LOWERCASE = _method_sanitizer("lowercase", "lower")
UPPERCASE = _method_sanitizer("uppercase", "upper")

NOT_EMPTY = RuleDefinition(
    name="not_empty",
    role=RuleRole.VALIDATOR,
    kinds=TEXT_KINDS,
    emit=_emit_not_empty,
    bound=lambda params: Bound("length", lower=1),
    aliases=("non_empty",),
)

MIN_LEN = RuleDefinition(
    name="min_len",
    role=RuleRole.VALIDATOR,
    kinds=TEXT_KINDS,
    emit=_emit_min_len,
    params=(Param("min", ParamKind.COUNT),),
    bound=lambda params: Bound("length", lower=params[0]),
)

MAX_LEN = RuleDefinition(
    name="max_len",
    role=RuleRole.VALIDATOR,
    kinds=TEXT_KINDS,
    emit=_emit_max_len,
    params=(Param("max", ParamKind.COUNT),),
    bound=lambda params: Bound("length", upper=params[0]),
)

LEN_CHAR_RANGE = RuleDefinition(
    name="len_char_range",
    role=RuleRole.VALIDATOR,
    kinds=TEXT_KINDS,
    emit=_emit_len_char_range,
    params=(Param("min", ParamKind.COUNT), Param("max", ParamKind.COUNT)),
    bound=lambda params: Bound("length", lower=params[0], upper=params[1]),
    check=_check_len_range,
)

REGEX = RuleDefinition(
    name="regex",
    role=RuleRole.VALIDATOR,
    kinds=TEXT_KINDS,
    emit=_emit_regex,
    params=(Param("pattern", ParamKind.PATTERN),),
)

TEXT_RULES = (TRIM, LOWERCASE, UPPERCASE, NOT_EMPTY, MIN_LEN, MAX_LEN, LEN_CHAR_RANGE, REGEX)
