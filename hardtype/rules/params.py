"""Explicit Parameter Coercion for Rule Arguments

Rule parameters come from a front end as ints, floats or strings. Coercion is
explicit and per parameter kind: a bound for an integer inner kind must be an
integer, a length must be a non-negative integer, and numeric strings may use
``_`` digit separators (``"1_000"``) just like numeric literals.
"""
from __future__ import annotations

import math
import re
from typing import Any

from hardtype.core.errors import Diagnostic, invalid_custom_function, invalid_regex, invalid_rule_params
from hardtype.models.spec import InnerKind, is_importable_reference

from .registry import ParamKind, RuleDefinition

_INT_LITERAL = re.compile(r"^[+-]?\d+(?:_\d+)*$")


def parse_number(raw: Any, kind: InnerKind) -> int | float:
    """Coerce ``raw`` to a value of the inner kind. Raises ValueError."""
    if isinstance(raw, bool):
        raise ValueError(f"expected a number, got {raw!r}")
    if isinstance(raw, str):
        text = raw.strip()
        if kind.is_integer:
            if not _INT_LITERAL.match(text):
                raise ValueError(f"expected an integer, got {raw!r}")
            return int(text.replace("_", ""))
        try:
            raw = float(text.replace("_", ""))
        except ValueError:
            raise ValueError(f"expected a number, got {raw!r}") from None
    if kind.is_integer:
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        raise ValueError(f"expected an integer, got {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
        if not math.isfinite(value):
            raise ValueError(f"{value!r} is not a usable bound")
        return value
    raise ValueError(f"expected a number, got {type(raw).__name__}")


def _coerce(param_kind: ParamKind, raw: Any, kind: InnerKind) -> Any:
    if param_kind is ParamKind.COUNT:
        value = parse_number(raw, InnerKind.UNSIGNED_INTEGER)
        if value < 0:
            raise ValueError(f"expected a non-negative integer, got {raw!r}")
        return value
    if param_kind is ParamKind.NUMBER:
        value = parse_number(raw, kind)
        if kind is InnerKind.UNSIGNED_INTEGER and value < 0:
            raise ValueError(f"{value} is out of range for a non-negative integer")
        return value
    if param_kind is ParamKind.PATTERN:
        if isinstance(raw, re.Pattern):
            return raw.pattern
        if not isinstance(raw, str):
            raise ValueError(f"expected a pattern string, got {type(raw).__name__}")
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"expected a 'module:function' reference, got {type(raw).__name__}")
    return raw


def normalize_params(
    rule: RuleDefinition,
    raw_params: tuple[Any, ...],
    kind: InnerKind,
) -> tuple[tuple[Any, ...], list[Diagnostic]]:
    """Coerce raw parameters against the rule signature.

    Returns the normalized tuple and every problem found; the tuple is only
    meaningful when the list is empty.
    """
    problems: list[Diagnostic] = []
    expected = len(rule.params)
    if len(raw_params) != expected:
        names = ", ".join(p.name for p in rule.params) or "no parameters"
        problems.append(invalid_rule_params(
            rule.name, f"expects {expected} parameter(s) ({names}), got {len(raw_params)}",
        ))
        return (), problems

    values: list[Any] = []
    for param, raw in zip(rule.params, raw_params):
        try:
            value = _coerce(param.kind, raw, kind)
        except ValueError as e:
            problems.append(invalid_rule_params(rule.name, f"parameter '{param.name}': {e}"))
            continue
        if param.kind is ParamKind.PATTERN:
            try:
                re.compile(value)
            except re.error as e:
                problems.append(invalid_regex(rule.name, value, str(e)))
                continue
        if param.kind is ParamKind.FUNCTION and not is_importable_reference(value):
            problems.append(invalid_custom_function(
                rule.name, value, "use a module-level function reachable as 'package.module:function'",
            ))
            continue
        values.append(value)

    if problems:
        return (), problems

    normalized = tuple(values)
    if rule.check is not None and (message := rule.check(normalized)):
        problems.append(invalid_rule_params(rule.name, message))
    return normalized, problems
