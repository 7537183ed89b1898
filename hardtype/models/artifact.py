"""Output value objects: the error model and the generated artifact."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path

from .spec import Capability


@dataclass(frozen=True, slots=True)
class ErrorVariant:
    """One discriminant of a generated error kind enum."""
    identifier: str   # stable id, used as the enum value
    member: str       # enum member name
    expected: str = ""  # declared expectation shown in messages


@dataclass(frozen=True, slots=True)
class ErrorModel:
    """Shape of the construction-time errors of one smart type.

    ``variants`` mirrors the validators in declaration order; it is empty when
    the constructor is infallible, in which case no validation error class is
    emitted. ``parse_variants`` is empty when no parse error class is needed.
    """
    type_name: str
    inner_annotation: str
    variants: tuple[ErrorVariant, ...] = ()
    parse_variants: tuple[ErrorVariant, ...] = ()
    reflects_value: bool = False

    @property
    def is_fallible(self) -> bool:
        return bool(self.variants)

    @property
    def has_parse_error(self) -> bool:
        return bool(self.parse_variants)

    @property
    def error_name(self) -> str:
        return f"{self.type_name}Error"

    @property
    def kind_name(self) -> str:
        return f"{self.type_name}ErrorKind"

    @property
    def parse_error_name(self) -> str:
        return f"{self.type_name}ParseError"

    @property
    def parse_kind_name(self) -> str:
        return f"{self.type_name}ParseErrorKind"

    def variant(self, identifier: str) -> ErrorVariant:
        for v in self.variants:
            if v.identifier == identifier:
                return v
        raise KeyError(identifier)

    def parse_variant(self, identifier: str) -> ErrorVariant | None:
        return next((v for v in self.parse_variants if v.identifier == identifier), None)

    @property
    def exported_names(self) -> tuple[str, ...]:
        names: list[str] = []
        if self.is_fallible:
            names += [self.error_name, self.kind_name]
        if self.has_parse_error:
            names += [self.parse_error_name, self.parse_kind_name]
        return tuple(names)


@dataclass(frozen=True, slots=True)
class GeneratedArtifact:
    """Terminal output of one generation run: a standalone Python module.

    Produced once per TypeSpec. ``source`` never imports hardtype, so the
    artifact can be written next to user code and shipped on its own.
    """
    type_name: str
    module_name: str
    source: str
    exports: tuple[str, ...]
    capabilities: tuple[Capability, ...]
    error_model: ErrorModel
    fingerprint: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fingerprint", hashlib.sha256(self.source.encode("utf-8")).hexdigest())

    @property
    def filename(self) -> str:
        return f"{self.module_name}.py"

    def write_to(self, directory: str | Path) -> Path:
        """Write the module into ``directory`` and return its path."""
        target = Path(directory) / self.filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.source, encoding="utf-8")
        return target

    def to_dict(self) -> dict:
        return {
            "type_name": self.type_name,
            "module_name": self.module_name,
            "exports": list(self.exports),
            "capabilities": [c.value for c in self.capabilities],
            "fingerprint": self.fingerprint,
        }
