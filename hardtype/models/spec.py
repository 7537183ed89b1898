"""Specification Model

The normalized, immutable description of one smart type request. Every engine
stage reads a ``TypeSpec`` and nothing else; the model itself only enforces
shape (identifiers, field types). Semantic checks such as capability conflicts
and rule admissibility belong to the resolver and the pipeline compiler so
they can be reported together.
"""
from __future__ import annotations

import keyword
import re
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_REFERENCE = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class InnerKind(str, Enum):
    """The primitive a smart type wraps."""
    TEXT = "text"
    SIGNED_INTEGER = "signed_integer"
    UNSIGNED_INTEGER = "unsigned_integer"
    FLOATING_POINT = "floating_point"
    OTHER = "other"

    @property
    def python_type(self) -> str | None:
        """Builtin annotation used in generated code; None for OTHER."""
        return {
            InnerKind.TEXT: "str",
            InnerKind.SIGNED_INTEGER: "int",
            InnerKind.UNSIGNED_INTEGER: "int",
            InnerKind.FLOATING_POINT: "float",
        }.get(self)

    @property
    def is_integer(self) -> bool:
        return self in (InnerKind.SIGNED_INTEGER, InnerKind.UNSIGNED_INTEGER)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self is InnerKind.FLOATING_POINT

    @property
    def description(self) -> str:
        return {
            InnerKind.TEXT: "text",
            InnerKind.SIGNED_INTEGER: "integer",
            InnerKind.UNSIGNED_INTEGER: "non-negative integer",
            InnerKind.FLOATING_POINT: "number",
            InnerKind.OTHER: "value",
        }[self]


class Capability(str, Enum):
    """A requested piece of generated behavior.

    Declaration order is the canonical emission order.
    """
    EQUALITY = "equality"
    STRICT_EQUALITY = "strict_equality"
    PARTIAL_ORDERING = "partial_ordering"
    ORDERING = "ordering"
    HASH = "hash"
    CLONE = "clone"
    COPY = "copy"
    DEBUG = "debug"
    DISPLAY = "display"
    RAW_CONVERSION_IN = "raw_conversion_in"
    RAW_CONVERSION_IN_UNCHECKED = "raw_conversion_in_unchecked"
    RAW_CONVERSION_OUT = "raw_conversion_out"
    BORROW_INNER = "borrow_inner"
    PARSE_FROM_TEXT = "parse_from_text"
    DEFAULT = "default"
    SERIALIZE = "serialize"
    DESERIALIZE = "deserialize"
    REFLECT_INVALID_VALUE = "reflect_invalid_value"

    @classmethod
    def parse(cls, tag: Capability | str) -> Capability | None:
        """Look up a tag by value, member name or derive-style alias. None when unknown."""
        if isinstance(tag, Capability):
            return tag
        if not isinstance(tag, str):
            return None
        key = tag.strip().lower().replace("-", "_")
        if key in _CAPABILITY_VALUES:
            return cls(key)
        return _CAPABILITY_ALIASES.get(key.replace("_", ""))

    @classmethod
    def known_tags(cls) -> list[str]:
        return [c.value for c in cls] + sorted(_CAPABILITY_ALIASES)

    @classmethod
    def canonical_order(cls, capabilities: frozenset[Capability] | set[Capability]) -> tuple[Capability, ...]:
        return tuple(c for c in cls if c in capabilities)


_CAPABILITY_VALUES = frozenset(c.value for c in Capability)

# Derive-style names accepted from front ends, compared without underscores.
_CAPABILITY_ALIASES: dict[str, Capability] = {
    "partialeq": Capability.EQUALITY,
    "eq": Capability.STRICT_EQUALITY,
    "partialord": Capability.PARTIAL_ORDERING,
    "ord": Capability.ORDERING,
    "fromstr": Capability.PARSE_FROM_TEXT,
    "from": Capability.RAW_CONVERSION_IN,
    "tryfrom": Capability.RAW_CONVERSION_IN,
    "newunchecked": Capability.RAW_CONVERSION_IN_UNCHECKED,
    "into": Capability.RAW_CONVERSION_OUT,
    "asref": Capability.BORROW_INNER,
    "deref": Capability.BORROW_INNER,
    "borrow": Capability.BORROW_INNER,
}


class Visibility(str, Enum):
    """Whether the outward-facing names are exported through ``__all__``."""
    PUBLIC = "public"
    PRIVATE = "private"


def callable_reference(fn: Callable[..., Any]) -> str:
    """Importable ``module:qualname`` reference for a function object."""
    module = getattr(fn, "__module__", None) or "__main__"
    qualname = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", repr(fn))
    return f"{module}:{qualname}"


def is_importable_reference(reference: str) -> bool:
    """True for ``module:qualname`` references that an ``import`` can reach."""
    return bool(_REFERENCE.match(reference)) and "<" not in reference and not reference.startswith("__main__:")


def _normalize_params(params: Any) -> tuple[Any, ...]:
    if params is None:
        return ()
    if isinstance(params, (list, tuple)):
        values = tuple(params)
    else:
        values = (params,)
    return tuple(callable_reference(p) if callable(p) and not isinstance(p, type) else p for p in values)


class SanitizerEntry(BaseModel):
    """One transformation step, e.g. ``trim`` or ``with("pkg.mod:fn")``."""
    model_config = ConfigDict(frozen=True)

    rule: str = Field(min_length=1)
    params: tuple[Any, ...] = ()

    @field_validator("params", mode="before")
    @classmethod
    def _params(cls, v: Any) -> tuple[Any, ...]:
        return _normalize_params(v)

    @property
    def identifier(self) -> str:
        return self.rule


class ValidatorEntry(BaseModel):
    """One predicate step, e.g. ``min_len(3)``.

    ``identifier`` is the stable error discriminant: the explicit ``name`` when
    given, the function name for custom predicates, the rule id otherwise.
    """
    model_config = ConfigDict(frozen=True)

    rule: str = Field(min_length=1)
    params: tuple[Any, ...] = ()
    name: str | None = None

    @field_validator("params", mode="before")
    @classmethod
    def _params(cls, v: Any) -> tuple[Any, ...]:
        return _normalize_params(v)

    @property
    def identifier(self) -> str:
        if self.name:
            return self.name
        if self.rule == "with" and self.params and isinstance(self.params[0], str) and ":" in self.params[0]:
            return self.params[0].rsplit(":", 1)[1].rsplit(".", 1)[-1]
        return self.rule


def _entry(value: Any) -> Any:
    """Accept ``"trim"``, ``("min_len", 3)`` and mappings besides model instances."""
    if isinstance(value, str):
        return {"rule": value}
    if isinstance(value, (tuple, list)) and value and isinstance(value[0], str):
        return {"rule": value[0], "params": value[1:]}
    return value


class TypeSpec(BaseModel):
    """Immutable request for one smart type; the unit of work for the engine."""
    model_config = ConfigDict(frozen=True)

    name: str
    inner_kind: InnerKind
    inner_type: str | None = None
    sanitizers: tuple[SanitizerEntry, ...] = ()
    validators: tuple[ValidatorEntry, ...] = ()
    capabilities: frozenset[Capability] = frozenset()
    visibility: Visibility = Visibility.PUBLIC
    doc: str | None = None
    default_value: str | int | float | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        if not _IDENTIFIER.match(v) or keyword.iskeyword(v):
            raise ValueError(f"'{v}' is not a valid Python class name")
        return v

    @field_validator("inner_kind", mode="before")
    @classmethod
    def _inner_kind(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("sanitizers", mode="before")
    @classmethod
    def _sanitizers(cls, v: Any) -> Any:
        return tuple(_entry(item) for item in (v or ()))

    @field_validator("validators", mode="before")
    @classmethod
    def _validators(cls, v: Any) -> Any:
        return tuple(_entry(item) for item in (v or ()))

    @field_validator("capabilities", mode="before")
    @classmethod
    def _capabilities(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, (str, Capability)):
            v = (v,)
        parsed = []
        for tag in v:
            cap = Capability.parse(tag)
            if cap is None:
                raise ValueError(f"unknown capability '{tag}'")
            parsed.append(cap)
        return frozenset(parsed)

    @model_validator(mode="after")
    def _inner_type(self) -> TypeSpec:
        if self.inner_kind is InnerKind.OTHER:
            if not self.inner_type:
                raise ValueError("inner kind 'other' requires inner_type ('module:Name')")
            if not is_importable_reference(self.inner_type):
                raise ValueError(f"inner_type '{self.inner_type}' is not an importable 'module:Name' reference")
        return self

    @property
    def module_name(self) -> str:
        """snake_case module name derived from the type name."""
        return _CAMEL_BOUNDARY.sub("_", self.name).lower()

    @property
    def validator_ids(self) -> tuple[str, ...]:
        return tuple(v.identifier for v in self.validators)

    @property
    def sanitizer_ids(self) -> tuple[str, ...]:
        return tuple(s.identifier for s in self.sanitizers)

    @property
    def has_validators(self) -> bool:
        return bool(self.validators)

    def has_validator_rule(self, rule: str) -> bool:
        return any(v.rule == rule for v in self.validators)

    def with_capabilities(self, capabilities: frozenset[Capability]) -> TypeSpec:
        return self.model_copy(update={"capabilities": frozenset(capabilities)})
