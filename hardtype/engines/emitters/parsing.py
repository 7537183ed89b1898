"""PARSE_FROM_TEXT.

``parse`` decodes text into the inner kind, then runs the guard. A decoding
failure is MALFORMED; a guard rejection is INVALID and chains the validation
error. Numbers are decoded strictly: surrounding whitespace, ``_`` digit
separators and non-ASCII digits are MALFORMED even though ``int()`` and
``float()`` accept them.
"""
from __future__ import annotations

from hardtype.models.spec import Capability, InnerKind

from ..error_model import INVALID, MALFORMED
from .base import Emission, EmissionContext, emitter, method


def _decode(ctx: EmissionContext) -> list[str]:
    model = ctx.error_model
    kind = ctx.kind
    if kind is InnerKind.TEXT:
        return ["    raw = text"]

    member = f"{model.parse_kind_name}.{model.parse_variant(MALFORMED).member}"
    converter = "float" if kind is InnerKind.FLOATING_POINT else "int"
    lines = [
        '    if not text.isascii() or text != text.strip() or "_" in text:',
        f"        raise {model.parse_error_name}({member}, text)",
        "    try:",
        f"        raw = {converter}(text)",
        "    except ValueError:",
        f"        raise {model.parse_error_name}({member}, text) from None",
    ]
    if kind is InnerKind.UNSIGNED_INTEGER:
        lines += [
            "    if raw < 0:",
            f"        raise {model.parse_error_name}({member}, text)",
        ]
    return lines


@emitter(Capability.PARSE_FROM_TEXT)
def emit_parse_from_text(ctx: EmissionContext) -> Emission:
    model = ctx.error_model
    lines = [
        "@classmethod",
        f"def parse(cls, text: str) -> {ctx.name}:",
    ]
    if model.has_parse_error:
        lines.append(f'    """Build from text; raises {model.parse_error_name} on bad input."""')
    lines += [
        "    if not isinstance(text, str):",
        '        raise TypeError(f"parse expects str, got {type(text).__name__}")',
    ]
    lines += _decode(ctx)

    invalid = model.parse_variant(INVALID)
    if invalid is None:
        lines += [f"    value, _ = {ctx.guard.name}(raw)"]
    else:
        lines += [
            f"    value, error = {ctx.guard.name}(raw)",
            "    if error is not None:",
            f"        raise {model.parse_error_name}({model.parse_kind_name}.{invalid.member}, text, error) from error",
        ]
    lines.append("    return cls._adopt(value)")
    return Emission.of(method(*lines))
