"""CLONE and COPY.

Without either capability the copy module falls back to ``__reduce__``, which
re-runs the validators on the stored value but never the sanitizers.
"""
from __future__ import annotations

from hardtype.models.spec import Capability, InnerKind

from .base import Emission, EmissionContext, emitter, method


@emitter(Capability.CLONE)
def emit_clone(ctx: EmissionContext) -> Emission:
    name = ctx.name
    clone = method(
        f"def clone(self) -> {name}:",
        '    """A fresh instance holding the same, already validated, value."""',
        "    return self._adopt(self._value)",
    )
    if ctx.has(Capability.COPY):
        return Emission.of(clone)

    imports: tuple[str, ...] = ()
    if ctx.kind is InnerKind.OTHER:
        imports = ("import copy",)
        deep = method(
            f"def __deepcopy__(self, memo: dict) -> {name}:",
            "    return self._adopt(copy.deepcopy(self._value, memo))",
        )
    else:
        deep = method(
            f"def __deepcopy__(self, memo: dict) -> {name}:",
            "    return self.clone()",
        )
    shallow = method(
        f"def __copy__(self) -> {name}:",
        "    return self.clone()",
    )
    return Emission.of(clone, shallow, deep, imports=imports)


@emitter(Capability.COPY)
def emit_copy(ctx: EmissionContext) -> Emission:
    name = ctx.name
    return Emission.of(
        method(
            f"def __copy__(self) -> {name}:",
            "    return self",
        ),
        method(
            f"def __deepcopy__(self, memo: dict) -> {name}:",
            "    return self",
        ),
    )
