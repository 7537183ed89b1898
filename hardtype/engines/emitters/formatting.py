"""DEBUG and DISPLAY."""
from __future__ import annotations

from hardtype.models.spec import Capability

from .base import Emission, EmissionContext, emitter, method


@emitter(Capability.DEBUG)
def emit_debug(ctx: EmissionContext) -> Emission:
    return Emission.of(method(
        "def __repr__(self) -> str:",
        f'    return f"{ctx.name}({{self._value!r}})"',
    ))


@emitter(Capability.DISPLAY)
def emit_display(ctx: EmissionContext) -> Emission:
    return Emission.of(
        method(
            "def __str__(self) -> str:",
            "    return str(self._value)",
        ),
        method(
            "def __format__(self, format_spec: str) -> str:",
            "    return format(self._value, format_spec)",
        ),
    )
