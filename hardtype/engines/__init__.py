"""Generation engines, leaf-first: resolver, pipeline, error model, emitters, assembler."""
from .resolver import (
    CAPABILITY_RULES,
    CapabilityRule,
    CapabilityResolver,
    ResolvedCapabilities,
    resolve_capabilities,
)
from .error_model import build_error_model, render_parse_error, render_validation_error
from .pipeline import BoundRule, CompiledGuard, CompiledPipeline, compile_guard, compile_pipeline
from .emitters import EMITTERS, Emission, EmissionContext, emit_all
from .assembler import assemble, render_module

__all__ = [
    "CAPABILITY_RULES",
    "CapabilityRule",
    "CapabilityResolver",
    "ResolvedCapabilities",
    "resolve_capabilities",
    "build_error_model",
    "render_parse_error",
    "render_validation_error",
    "BoundRule",
    "CompiledGuard",
    "CompiledPipeline",
    "compile_guard",
    "compile_pipeline",
    "EMITTERS",
    "Emission",
    "EmissionContext",
    "emit_all",
    "assemble",
    "render_module",
]
