"""Assembler

Merges the pieces of one smart type into a single module source:

    header comment
    module docstring
    imports (sorted, deduplicated)
    __all__
    rule helpers
    error classes
    guard routine
    the smart type class

Only the outward-facing parts are affected by visibility and doc. The
assembler receives already resolved capabilities and a compiled pipeline, so
it never reports spec problems itself; an exception while emitting is an
internal error.
"""
from __future__ import annotations

from hardtype.core.errors import DiagnosticSet, Err, Ok, Result, internal_error
from hardtype.core.logging import engine_logger
from hardtype.models.artifact import GeneratedArtifact
from hardtype.models.spec import TypeSpec, Visibility

from .emitters import EmissionContext, emit_all
from .error_model import render_parse_error
from .pipeline import CompiledPipeline
from .resolver import ResolvedCapabilities

log = engine_logger()

HEADER = "# Generated by hardtype. Do not edit: regenerate from the TypeSpec instead."
FUTURE_IMPORT = "from __future__ import annotations"
ENUM_IMPORT = "from enum import Enum"


def _docstring(text: str, indent: str = "") -> list[str]:
    text = text.strip().replace('"""', '\\"\\"\\"')
    lines = text.splitlines() or [""]
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    return [f'{indent}"""{lines[0]}', *(f"{indent}{line}".rstrip() for line in lines[1:]), f'{indent}"""']


def _class_doc(spec: TypeSpec) -> str:
    if spec.doc:
        return spec.doc
    return f"{spec.name}: validated {spec.inner_type or spec.inner_kind.description}."


def _exports(spec: TypeSpec, pipeline: CompiledPipeline) -> tuple[str, ...]:
    return (spec.name, *pipeline.error_model.exported_names)


def _render_all(names: tuple[str, ...]) -> list[str]:
    if not names:
        return ["__all__: list[str] = []"]
    return ["__all__ = [", *(f"    {name!r}," for name in names), "]"]


def _sections(*sections: list[str]) -> list[str]:
    """Join non-empty top-level sections with two blank lines."""
    out: list[str] = []
    for section in sections:
        if not section:
            continue
        if out:
            out += ["", ""]
        out += section
    return out


def render_module(
    spec: TypeSpec,
    resolved: ResolvedCapabilities,
    pipeline: CompiledPipeline,
    *,
    emit_header: bool = True,
) -> tuple[str, tuple[str, ...]]:
    """Return ``(source, exports)`` for one smart type."""
    guard, model = pipeline.guard, pipeline.error_model
    ctx = EmissionContext(spec=spec, capabilities=resolved.capabilities, guard=guard, error_model=model)
    emissions = emit_all(ctx)

    imports = set(guard.imports)
    for emission in emissions:
        imports |= emission.imports
    if model.is_fallible or model.has_parse_error:
        imports.add(ENUM_IMPORT)

    body: list[str] = [f"class {spec.name}:", *_docstring(_class_doc(spec), "    ")]
    for emission in emissions:
        for block in emission.blocks:
            body.append("")
            body += block

    exports = _exports(spec, pipeline)
    public = exports if spec.visibility is Visibility.PUBLIC else ()

    head = [HEADER] if emit_header else []
    head += _docstring(f"Smart type {spec.name} ({spec.inner_type or spec.inner_kind.description}).")
    head += ["", FUTURE_IMPORT]
    if imports:
        head += ["", *sorted(imports)]
    head += ["", *_render_all(public)]

    lines = _sections(
        head,
        list(guard.helpers),
        list(guard.support),
        render_parse_error(model, spec.inner_kind),
        list(guard.lines),
        body,
    )
    return "\n".join(lines) + "\n", exports


def assemble(
    spec: TypeSpec,
    resolved: ResolvedCapabilities,
    pipeline: CompiledPipeline,
    *,
    emit_header: bool = True,
) -> Result[GeneratedArtifact, DiagnosticSet]:
    """Build the GeneratedArtifact; any emitter failure becomes an E9000 diagnostic."""
    try:
        source, exports = render_module(spec, resolved, pipeline, emit_header=emit_header)
    except Exception as e:
        log.exception("assembly_failed", type_name=spec.name)
        return Err(DiagnosticSet.of(internal_error(spec.name, e)))

    artifact = GeneratedArtifact(
        type_name=spec.name,
        module_name=spec.module_name,
        source=source,
        exports=exports,
        capabilities=resolved.ordered,
        error_model=pipeline.error_model,
    )
    log.debug("module_assembled", type_name=spec.name, fingerprint=artifact.fingerprint[:12])
    return Ok(artifact)
