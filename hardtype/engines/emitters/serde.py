"""SERIALIZE and DESERIALIZE through the pydantic core schema hook.

Both capabilities share one ``__get_pydantic_core_schema__`` classmethod, so a
single emitter handles either or both. Serialization is transparent: the inner
value is written. Deserialization validates the inner representation with the
matching core schema, then runs the guard; a rejection raises the parse error,
which pydantic reports as a ``ValidationError``.
"""
from __future__ import annotations

from hardtype.models.spec import Capability, InnerKind

from ..error_model import INVALID
from .base import Emission, EmissionContext, emitter, method

CORE_SCHEMA_IMPORT = "from pydantic_core import core_schema"

_INNER_SCHEMAS = {
    InnerKind.TEXT: "core_schema.str_schema()",
    InnerKind.SIGNED_INTEGER: "core_schema.int_schema()",
    InnerKind.UNSIGNED_INTEGER: "core_schema.int_schema(ge=0)",
    InnerKind.FLOATING_POINT: "core_schema.float_schema()",
    InnerKind.OTHER: "handler.generate_schema(_Inner)",
}


def _deserialize(ctx: EmissionContext) -> tuple[str, ...]:
    model = ctx.error_model
    lines = [
        "@classmethod",
        f"def _deserialize(cls, raw: {ctx.annotation}) -> {ctx.name}:",
    ]
    invalid = model.parse_variant(INVALID)
    if invalid is None:
        lines.append(f"    value, _ = {ctx.guard.name}(raw)")
    else:
        lines += [
            f"    value, error = {ctx.guard.name}(raw)",
            "    if error is not None:",
            f"        raise {model.parse_error_name}({model.parse_kind_name}.{invalid.member}, raw, error) from error",
        ]
    lines.append("    return cls._adopt(value)")
    return method(*lines)


def _schema_hook(ctx: EmissionContext) -> tuple[str, ...]:
    serialize = ctx.has(Capability.SERIALIZE)
    deserialize = ctx.has(Capability.DESERIALIZE)
    serializer = "core_schema.plain_serializer_function_ser_schema(cls.into_inner)"

    lines = [
        "@classmethod",
        "def __get_pydantic_core_schema__(cls, source_type: object, handler) -> core_schema.CoreSchema:",
    ]
    if not deserialize:
        lines += [
            f"    return core_schema.is_instance_schema(cls, serialization={serializer})",
        ]
        return method(*lines)

    lines += [
        f"    from_inner = core_schema.no_info_after_validator_function(cls._deserialize, {_INNER_SCHEMAS[ctx.kind]})",
        "    return core_schema.json_or_python_schema(",
        "        json_schema=from_inner,",
        "        python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_inner]),",
    ]
    if serialize:
        lines.append(f"        serialization={serializer},")
    lines.append("    )")
    return method(*lines)


@emitter(Capability.SERIALIZE, Capability.DESERIALIZE)
def emit_serde(ctx: EmissionContext) -> Emission:
    blocks = [_schema_hook(ctx)]
    if ctx.has(Capability.DESERIALIZE):
        blocks.append(_deserialize(ctx))
    return Emission.of(*blocks, imports=(CORE_SCHEMA_IMPORT,))
