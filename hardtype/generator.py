"""Generator facade

Runs resolver, pipeline compiler and assembler for one TypeSpec and returns a
``Result``. Diagnostics from the resolver and the pipeline are merged so one
run reports every problem it can find.

Usage:
    from hardtype import generate, load_spec

    result = load_spec({"name": "Username", "inner_kind": "text",
                        "sanitizers": ["trim"], "validators": ["not_empty"],
                        "capabilities": ["debug", "parse_from_text"]})
    artifact = result.and_then(generate).unwrap()
    artifact.write_to("src/myapp/types")
"""
from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from types import ModuleType
from typing import Any

from pydantic import ValidationError

from hardtype.core.config import Settings, get_settings
from hardtype.core.errors import (
    Diagnostic,
    DiagnosticSet,
    Err,
    GenerationError,
    Ok,
    Result,
    collect_results,
    from_diagnostics,
    invalid_field_value,
    invalid_type_name,
    missing_field,
    missing_inner_type,
    spec_malformed,
    unknown_capability,
    unknown_inner_kind,
)
from hardtype.core.logging import bind_context, generate_run_id, generator_logger, unbind_context
from hardtype.engines import CapabilityResolver, CompiledPipeline, ResolvedCapabilities, assemble, compile_pipeline
from hardtype.models import Capability, GeneratedArtifact, InnerKind, TypeSpec
from hardtype.rules import RuleRegistry

log = generator_logger()


# =============================================================================
# Spec loading
# =============================================================================

def _unknown_capabilities(raw: Mapping[str, Any]) -> list[Diagnostic]:
    tags = raw.get("capabilities") or ()
    if isinstance(tags, (str, Capability)):
        tags = (tags,)
    if not isinstance(tags, Iterable):
        return []
    return [
        unknown_capability(str(tag), Capability.known_tags())
        for tag in tags
        if Capability.parse(tag) is None
    ]


def _diagnostic_for(error: dict[str, Any], raw: Mapping[str, Any]) -> Diagnostic | None:
    loc = tuple(str(part) for part in error.get("loc", ()))
    field = ".".join(loc)
    kind = error.get("type", "")
    message = str(error.get("msg", "")).removeprefix("Value error, ")

    if kind == "missing":
        return missing_field(field)
    if not loc:
        if "requires inner_type" in message:
            return missing_inner_type(str(raw.get("inner_kind", "")).upper())
        return invalid_field_value("inner_type" if "inner_type" in message else "spec", message)
    if loc[0] == "capabilities":
        return None  # reported by _unknown_capabilities
    if loc == ("name",):
        return invalid_type_name(str(raw.get("name", "")))
    if loc == ("inner_kind",):
        return unknown_inner_kind(str(raw.get("inner_kind", "")), [k.value for k in InnerKind])
    return invalid_field_value(field, message)


def load_spec(raw: Mapping[str, Any] | TypeSpec) -> Result[TypeSpec, DiagnosticSet]:
    """Convert front-end output (plain mappings and strings) to a TypeSpec."""
    if isinstance(raw, TypeSpec):
        return Ok(raw)
    if not isinstance(raw, Mapping):
        return Err(DiagnosticSet.of(spec_malformed("spec", f"Expected a mapping, got {type(raw).__name__}")))

    problems = _unknown_capabilities(raw)
    try:
        spec = TypeSpec.model_validate(dict(raw))
    except ValidationError as e:
        problems += [d for d in (_diagnostic_for(item, raw) for item in e.errors()) if d is not None]
        if not problems:
            problems.append(spec_malformed("spec", str(e)))
        return Err(DiagnosticSet.from_iterable(problems))
    return Ok(spec)


# =============================================================================
# Generation
# =============================================================================

def _check_default(spec: TypeSpec, pipeline: CompiledPipeline) -> list[Diagnostic]:
    """Run the guard on the declared default so ``default()`` can never raise."""
    value = spec.default_value
    try:
        guard = pipeline.guard.bind()
        value, error = guard(value)
    except (TypeError, OverflowError) as e:
        return [invalid_field_value("default_value", f"Default value {value!r} has the wrong type: {e}")]
    except (ImportError, AttributeError) as e:
        return [spec_malformed("default_value", f"Could not load the guard to check the default value: {e}")]
    if error is not None:
        return [invalid_field_value("default_value", f"Default value {spec.default_value!r} is rejected: {error}")]
    return []


def _run(
    spec: TypeSpec,
    registry: RuleRegistry | None,
    settings: Settings,
) -> Result[GeneratedArtifact, DiagnosticSet]:
    resolver = CapabilityResolver(policy=settings.PREREQUISITE_POLICY)
    resolved = resolver.resolve(spec)
    capabilities = resolved.unwrap().capabilities if resolved.is_ok() else spec.capabilities
    compiled = compile_pipeline(spec, capabilities, registry)

    problems = DiagnosticSet()
    for result in (resolved, compiled):
        if result.is_err():
            problems = problems.merge(result.unwrap_err())
    if problems:
        return Err(problems)

    caps: ResolvedCapabilities = resolved.unwrap()
    pipeline: CompiledPipeline = compiled.unwrap()
    found = _check_default(spec, pipeline) if Capability.DEFAULT in caps else []
    return from_diagnostics(found, pipeline).and_then(
        lambda compiled_pipeline: assemble(spec, caps, compiled_pipeline, emit_header=settings.EMIT_HEADER)
    )


def generate(
    spec: TypeSpec | Mapping[str, Any],
    *,
    registry: RuleRegistry | None = None,
    settings: Settings | None = None,
) -> Result[GeneratedArtifact, DiagnosticSet]:
    """Generate the module of one smart type.

    Args:
        spec: a TypeSpec, or a raw mapping accepted by ``load_spec``
        registry: rule registry; defaults to the standard rule table
        settings: overrides ``get_settings()``

    Returns:
        Ok(GeneratedArtifact) or Err(DiagnosticSet) listing every problem found.
    """
    settings = settings or get_settings()
    loaded = load_spec(spec)
    if loaded.is_err():
        log.warning("generation_failed", stage="load", codes=_codes(loaded.unwrap_err()))
        return loaded
    spec = loaded.unwrap()

    bind_context(type_name=spec.name, run_id=generate_run_id())
    try:
        log.info(
            "generation_started",
            inner_kind=spec.inner_kind.value,
            capabilities=[c.value for c in Capability.canonical_order(spec.capabilities)],
            policy=settings.PREREQUISITE_POLICY.value,
        )
        result = _run(spec, registry, settings)
        if result.is_err():
            log.warning("generation_failed", codes=_codes(result.unwrap_err()))
        else:
            artifact = result.unwrap()
            log.info(
                "generation_succeeded",
                module=artifact.module_name,
                exports=list(artifact.exports),
                fingerprint=artifact.fingerprint[:12],
            )
        return result
    finally:
        unbind_context("type_name", "run_id")


def generate_or_raise(
    spec: TypeSpec | Mapping[str, Any],
    *,
    registry: RuleRegistry | None = None,
    settings: Settings | None = None,
) -> GeneratedArtifact:
    """Like ``generate`` but raises ``GenerationError`` carrying the diagnostics."""
    result = generate(spec, registry=registry, settings=settings)
    if result.is_err():
        name = spec.name if isinstance(spec, TypeSpec) else str(spec.get("name", ""))
        raise GenerationError(result.unwrap_err(), type_name=name)
    return result.unwrap()


def generate_all(
    specs: Iterable[TypeSpec | Mapping[str, Any]],
    *,
    registry: RuleRegistry | None = None,
    settings: Settings | None = None,
) -> Result[list[GeneratedArtifact], DiagnosticSet]:
    """Generate several types; the diagnostics of every failing spec are merged."""
    return collect_results(generate(s, registry=registry, settings=settings) for s in specs)


def materialize(artifact: GeneratedArtifact, *, register: bool = False) -> ModuleType:
    """Execute the artifact source as a fresh module.

    With ``register`` the module is added to ``sys.modules`` under its module
    name, which pickling of generated instances requires.
    """
    module = ModuleType(artifact.module_name)
    module.__file__ = f"<hardtype:{artifact.filename}>"
    code = compile(artifact.source, module.__file__, "exec")
    if register:
        sys.modules[artifact.module_name] = module
    try:
        exec(code, module.__dict__)
    except BaseException:
        if register:
            sys.modules.pop(artifact.module_name, None)
        raise
    return module


def _codes(diagnostics: DiagnosticSet) -> list[str]:
    return sorted(code.name for code in diagnostics.codes)
