"""Blocks every smart type has, whatever capabilities were requested.

- ``__slots__`` and the capability manifest
- ``__init__`` running the guard
- ``_adopt``, wrapping a value that already went through the guard
- immutability (``__setattr__`` / ``__delattr__``)
- ``into_inner()``
- ``_restore``, rebuilding a stored value through the validators only
- ``__reduce__`` so pickling and the copy module go through ``_restore``
"""
from __future__ import annotations

from hardtype.models.spec import Capability

from .base import Emission, EmissionContext, emitter, method


def emit_construction(ctx: EmissionContext) -> Emission:
    names = [repr(c.value) for c in Capability.canonical_order(ctx.capabilities)]
    trailing = "," if len(names) == 1 else ""
    header = (
        '    __slots__ = ("_value",)',
        f"    __capabilities__ = ({', '.join(names)}{trailing})",
    )

    if ctx.guard.fallible:
        init = method(
            f"def __init__(self, value: {ctx.annotation}) -> None:",
            f'    """Sanitize and validate ``value``; raises {ctx.error_model.error_name} when it is rejected."""',
            f"    value, error = {ctx.guard.name}(value)",
            "    if error is not None:",
            "        raise error",
            '    object.__setattr__(self, "_value", value)',
        )
    else:
        init = method(
            f"def __init__(self, value: {ctx.annotation}) -> None:",
            f"    value, _ = {ctx.guard.name}(value)",
            '    object.__setattr__(self, "_value", value)',
        )

    immutability = method(
        "def __setattr__(self, name: str, value: object) -> None:",
        '    raise AttributeError(f"{type(self).__name__} is immutable")',
        "",
        "def __delattr__(self, name: str) -> None:",
        '    raise AttributeError(f"{type(self).__name__} is immutable")',
    )

    adopt = method(
        "@classmethod",
        f"def _adopt(cls, value: {ctx.annotation}) -> {ctx.name}:",
        "    instance = object.__new__(cls)",
        '    object.__setattr__(instance, "_value", value)',
        "    return instance",
    )

    into_inner = method(
        f"def into_inner(self) -> {ctx.annotation}:",
        '    """The validated inner value."""',
        "    return self._value",
    )

    if ctx.guard.fallible:
        restore = method(
            "@classmethod",
            f"def _restore(cls, value: {ctx.annotation}) -> {ctx.name}:",
            f"    value, error = {ctx.guard.validate_name}(value)",
            "    if error is not None:",
            "        raise error",
            "    return cls._adopt(value)",
        )
    else:
        restore = method(
            "@classmethod",
            f"def _restore(cls, value: {ctx.annotation}) -> {ctx.name}:",
            f"    value, _ = {ctx.guard.validate_name}(value)",
            "    return cls._adopt(value)",
        )

    reduce = method(
        "def __reduce__(self):",
        "    return type(self)._restore, (self._value,)",
    )

    return Emission.of(header, init, adopt, restore, immutability, into_inner, reduce)


@emitter(Capability.REFLECT_INVALID_VALUE)
def emit_reflect_invalid_value(ctx: EmissionContext) -> Emission:
    # Only changes the error model: errors carry the rejected value.
    return Emission()
