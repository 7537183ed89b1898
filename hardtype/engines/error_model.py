"""Error Model Builder

Derives the construction-time error shapes of a smart type and renders them
as Python source:

- ``<Name>ErrorKind`` / ``<Name>Error``: one enum member per validator, in
  declaration order. Omitted when the constructor is infallible.
- ``<Name>ParseErrorKind`` / ``<Name>ParseError``: MALFORMED when text could
  not be decoded into the inner kind, INVALID when decoded input failed
  validation. Omitted when neither can happen.

Errors carry the declared expectation. The rejected value is attached only
when REFLECT_INVALID_VALUE is requested, so large inputs are not copied into
error paths by default.
"""
from __future__ import annotations

from typing import Sequence

from hardtype.models.artifact import ErrorModel, ErrorVariant
from hardtype.models.spec import Capability, InnerKind, TypeSpec

MALFORMED = "malformed"
INVALID = "invalid"


def inner_annotation(spec: TypeSpec) -> str:
    """Annotation for the inner value inside generated code."""
    return spec.inner_kind.python_type or "_Inner"


def member_name(identifier: str) -> str:
    return identifier.upper()


def build_error_model(
    spec: TypeSpec,
    capabilities: frozenset[Capability],
    expectations: Sequence[tuple[str, str]],
) -> ErrorModel:
    """Build the error model from ``(identifier, expected)`` pairs in validator order."""
    variants = tuple(
        ErrorVariant(identifier=ident, member=member_name(ident), expected=expected)
        for ident, expected in expectations
    )

    parse_variants: list[ErrorVariant] = []
    if Capability.PARSE_FROM_TEXT in capabilities and spec.inner_kind is not InnerKind.TEXT:
        parse_variants.append(ErrorVariant(
            identifier=MALFORMED,
            member=member_name(MALFORMED),
            expected=f"a textual {spec.inner_kind.description}",
        ))
    if variants and capabilities & {Capability.PARSE_FROM_TEXT, Capability.DESERIALIZE}:
        parse_variants.append(ErrorVariant(
            identifier=INVALID,
            member=member_name(INVALID),
            expected="input satisfying every validator",
        ))

    return ErrorModel(
        type_name=spec.name,
        inner_annotation=inner_annotation(spec),
        variants=variants,
        parse_variants=tuple(parse_variants),
        reflects_value=Capability.REFLECT_INVALID_VALUE in capabilities,
    )


def _render_kind_enum(name: str, doc: str, variants: Sequence[ErrorVariant]) -> list[str]:
    lines = [f"class {name}(Enum):", f'    """{doc}"""', ""]
    lines.extend(f"    {v.member} = {v.identifier!r}" for v in variants)
    return lines


def render_validation_error(model: ErrorModel) -> list[str]:
    """Source lines of the validation error enum and exception; empty when infallible."""
    if not model.is_fallible:
        return []

    name, kind = model.error_name, model.kind_name
    lines = _render_kind_enum(kind, f"Which validator of {model.type_name} rejected a value.", model.variants)
    lines += ["", ""]
    lines += [
        f"class {name}(ValueError):",
        f'    """Raised when a value does not satisfy the validators of {model.type_name}."""',
        "",
    ]
    if model.reflects_value:
        lines += [
            f"    def __init__(self, kind: {kind}, expected: str, value: {model.inner_annotation}) -> None:",
            "        self.kind = kind",
            "        self.expected = expected",
            "        self.value = value",
            f'        super().__init__(f"{model.type_name} rejected by {{kind.value}}: expected {{expected}}, got {{value!r}}")',
            "",
            "    def __reduce__(self):",
            "        return type(self), (self.kind, self.expected, self.value)",
        ]
    else:
        lines += [
            f"    def __init__(self, kind: {kind}, expected: str) -> None:",
            "        self.kind = kind",
            "        self.expected = expected",
            f'        super().__init__(f"{model.type_name} rejected by {{kind.value}}: expected {{expected}}")',
            "",
            "    def __reduce__(self):",
            "        return type(self), (self.kind, self.expected)",
        ]
    return lines


def render_parse_error(model: ErrorModel, inner_kind: InnerKind) -> list[str]:
    """Source lines of the parse error enum and exception; empty when parsing cannot fail."""
    if not model.has_parse_error:
        return []

    name, kind = model.parse_error_name, model.parse_kind_name
    lines = _render_kind_enum(
        kind, f"Why input could not be turned into a {model.type_name}.", model.parse_variants,
    )
    lines += ["", ""]
    lines += [
        f"class {name}(ValueError):",
        f'    """Raised when text or serialized input cannot be turned into a {model.type_name}."""',
        "",
    ]

    invalid = model.parse_variant(INVALID) is not None
    subject = "{raw!r}" if model.reflects_value else "input"
    malformed_text = f"not a valid {inner_kind.description}"

    signature = f"self, kind: {kind}, raw: object"
    if invalid:
        signature += f", validation_error: {model.error_name} | None = None"
    lines.append(f"    def __init__({signature}) -> None:")
    lines += ["        self.kind = kind"]
    lines += ["        self.raw = raw" if model.reflects_value else "        self.raw = None"]
    if invalid:
        lines += [
            "        self.validation_error = validation_error",
            "        if validation_error is not None:",
            f'            message = f"{model.type_name} could not be built from {subject}: {{validation_error}}"',
            "        else:",
            f'            message = f"{model.type_name} could not be built from {subject}: {malformed_text}"',
        ]
    else:
        lines += [
            "        self.validation_error = None",
            f'        message = f"{model.type_name} could not be built from {subject}: {malformed_text}"',
        ]
    lines += ["        super().__init__(message)", ""]
    lines += ["    def __reduce__(self):"]
    if invalid:
        lines.append("        return type(self), (self.kind, self.raw, self.validation_error)")
    else:
        lines.append("        return type(self), (self.kind, self.raw)")
    return lines
