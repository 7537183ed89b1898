from hardtype.models.spec import (
    InnerKind,
    Capability,
    Visibility,
    SanitizerEntry,
    ValidatorEntry,
    TypeSpec,
    callable_reference,
    is_importable_reference,
)
from hardtype.models.artifact import ErrorVariant, ErrorModel, GeneratedArtifact

__all__ = [
    "InnerKind",
    "Capability",
    "Visibility",
    "SanitizerEntry",
    "ValidatorEntry",
    "TypeSpec",
    "callable_reference",
    "is_importable_reference",
    "ErrorVariant",
    "ErrorModel",
    "GeneratedArtifact",
]
