"""Custom rules: user functions referenced as ``package.module:function``.

The artifact imports the function under a private alias, so generated code
depends on the user's module but never on hardtype. A custom sanitizer must
return the transformed value; a custom validator must return a truthy value
when the input is acceptable.
"""
from __future__ import annotations

from .registry import ALL_KINDS, Param, ParamKind, RuleContext, RuleDefinition, RuleEmission, RuleRole


def import_alias(reference: str, alias: str) -> tuple[frozenset[str], tuple[str, ...]]:
    """Import lines and helper lines that bind ``reference`` to ``alias``.

    ``pkg.mod:Outer.method`` imports ``Outer`` and binds the attribute path.
    """
    module, qualname = reference.split(":", 1)
    head, _, rest = qualname.partition(".")
    if not rest:
        return frozenset({f"from {module} import {head} as {alias}"}), ()
    base = f"{alias}_base"
    return frozenset({f"from {module} import {head} as {base}"}), (f"{alias} = {base}.{rest}",)


def _emit_custom_sanitizer(ctx: RuleContext) -> RuleEmission:
    (reference,) = ctx.params
    alias = f"_sanitize_{ctx.slot}"
    imports, helpers = import_alias(reference, alias)
    return RuleEmission(lines=(f"value = {alias}(value)",), imports=imports, helpers=helpers)


def _emit_custom_validator(ctx: RuleContext) -> RuleEmission:
    (reference,) = ctx.params
    alias = f"_validate_{ctx.slot}"
    imports, helpers = import_alias(reference, alias)
    function = reference.split(":", 1)[1]
    return RuleEmission(
        condition=f"{alias}(value)",
        expected=f"a value accepted by {function}",
        imports=imports,
        helpers=helpers,
    )


WITH_SANITIZER = RuleDefinition(
    name="with",
    role=RuleRole.SANITIZER,
    kinds=ALL_KINDS,
    emit=_emit_custom_sanitizer,
    params=(Param("function", ParamKind.FUNCTION),),
)

WITH_VALIDATOR = RuleDefinition(
    name="with",
    role=RuleRole.VALIDATOR,
    kinds=ALL_KINDS,
    emit=_emit_custom_validator,
    params=(Param("function", ParamKind.FUNCTION),),
)

CUSTOM_RULES = (WITH_SANITIZER, WITH_VALIDATOR)
