"""End-to-end tests for the generator facade."""
from __future__ import annotations

import ast
import importlib.util

import pytest

from hardtype import (
    DiagnosticCode,
    GenerationError,
    RuleDefinition,
    RuleEmission,
    RuleRole,
    DEFAULT_REGISTRY,
    generate,
    generate_all,
    generate_or_raise,
    load_spec,
    materialize,
)
from hardtype.core.config import Settings
from hardtype.rules import INTEGER_KINDS
from tests.specs import int_spec, text_spec


# -----------------------------
# Scenarios
# -----------------------------


def test_text_trim_not_empty_scenario(build):
    mod = build(text_spec(validators=["non_empty"]))
    assert mod.Username.parse("  alice ").into_inner() == "alice"
    with pytest.raises(mod.UsernameParseError) as exc:
        mod.Username.parse("   ")
    assert exc.value.kind is mod.UsernameParseErrorKind.INVALID
    assert exc.value.validation_error.kind is mod.UsernameErrorKind.NON_EMPTY


def test_signed_integer_range_scenario(build):
    mod = build(int_spec())
    with pytest.raises(mod.PercentError) as exc:
        mod.Percent(150)
    assert exc.value.kind is mod.PercentErrorKind.RANGE
    assert mod.Percent(50).into_inner() == 50


# -----------------------------
# Artifact
# -----------------------------


def test_generation_is_idempotent():
    first = generate_or_raise(text_spec())
    second = generate_or_raise(text_spec())
    assert first.source == second.source
    assert first.fingerprint == second.fingerprint
    assert len(first.fingerprint) == 64


def test_different_specs_differ():
    assert generate_or_raise(text_spec()).fingerprint != generate_or_raise(text_spec(sanitizers=[])).fingerprint


def test_source_is_standalone():
    artifact = generate_or_raise(int_spec(capabilities=["equality", "hash", "debug", "serialize", "deserialize"]))
    tree = ast.parse(artifact.source)
    imported = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imported |= {alias.name.split(".")[0] for alias in node.names}
        elif isinstance(node, ast.ImportFrom):
            imported.add((node.module or "").split(".")[0])
    assert "hardtype" not in imported
    assert imported <= {"__future__", "enum", "pydantic_core"}


def test_artifact_metadata():
    artifact = generate_or_raise(int_spec())
    assert artifact.type_name == "Percent"
    assert artifact.module_name == "percent"
    assert artifact.filename == "percent.py"
    assert artifact.exports == (
        "Percent", "PercentError", "PercentErrorKind", "PercentParseError", "PercentParseErrorKind",
    )
    assert [c.value for c in artifact.capabilities] == ["equality", "debug", "parse_from_text"]
    assert artifact.to_dict()["fingerprint"] == artifact.fingerprint


def test_write_to(tmp_path):
    artifact = generate_or_raise(int_spec())
    path = artifact.write_to(tmp_path / "types")
    assert path == tmp_path / "types" / "percent.py"
    assert path.read_text(encoding="utf-8") == artifact.source

    spec = importlib.util.spec_from_file_location("percent_from_disk", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    assert module.Percent(10).into_inner() == 10


def test_header_setting():
    with_header = generate_or_raise(int_spec(), settings=Settings(EMIT_HEADER=True))
    without = generate_or_raise(int_spec(), settings=Settings(EMIT_HEADER=False))
    assert with_header.source.startswith("# Generated by hardtype")
    assert without.source.startswith('"""')


def test_doc_is_applied():
    artifact = generate_or_raise(int_spec(doc="A percentage in [1, 100]."))
    assert '"""A percentage in [1, 100]."""' in artifact.source


# -----------------------------
# Visibility
# -----------------------------


def test_public_visibility_exports_outward_names():
    module = materialize(generate_or_raise(int_spec()))
    assert module.__all__ == [
        "Percent", "PercentError", "PercentErrorKind", "PercentParseError", "PercentParseErrorKind",
    ]


def test_private_visibility_exports_nothing():
    module = materialize(generate_or_raise(int_spec(visibility="private")))
    assert module.__all__ == []
    assert module.Percent(5).into_inner() == 5


def test_internal_helpers_are_private():
    source = generate_or_raise(text_spec(validators=[("regex", "^[a-z]+$")])).source
    assert "def _guard(" in source
    assert "_PATTERN_0 = re.compile" not in source  # slot 1: after the trim sanitizer
    assert "_PATTERN_1 = re.compile('^[a-z]+$')" in source


# -----------------------------
# Failures
# -----------------------------


def test_resolver_and_pipeline_diagnostics_are_merged():
    result = generate(text_spec(capabilities=["copy"], validators=["not_emptyy"]))
    codes = result.unwrap_err().codes
    assert codes == {
        DiagnosticCode.E2001_MISSING_PREREQUISITE,
        DiagnosticCode.E2002_FORBIDDEN_FOR_INNER_KIND,
        DiagnosticCode.E3002_UNKNOWN_VALIDATOR,
    }


def test_generate_or_raise_raises_with_diagnostics():
    with pytest.raises(GenerationError) as exc:
        generate_or_raise(text_spec(capabilities=["raw_conversion_in_unchecked"]))
    assert exc.value.type_name == "Username"
    assert exc.value.diagnostics.codes == {DiagnosticCode.E2003_FORBIDDEN_WITH_VALIDATORS}


def test_default_value_is_checked():
    result = generate(int_spec(capabilities=["default"], default_value=0))
    (diagnostic,) = result.unwrap_err()
    assert diagnostic.code is DiagnosticCode.E1006_INVALID_FIELD_VALUE
    assert diagnostic.subject == "default_value"


def test_default_value_of_wrong_type():
    (diagnostic,) = generate(int_spec(capabilities=["default"], default_value="ten")).unwrap_err()
    assert "wrong type" in diagnostic.message


def test_generate_all_merges_failures():
    result = generate_all([int_spec(), text_spec(capabilities=["copy"]), int_spec(name="Other", validators=["nope"])])
    codes = result.unwrap_err().codes
    assert DiagnosticCode.E2002_FORBIDDEN_FOR_INNER_KIND in codes
    assert DiagnosticCode.E3002_UNKNOWN_VALIDATOR in codes


def test_generate_all_success():
    artifacts = generate_all([int_spec(), text_spec()]).unwrap()
    assert [a.type_name for a in artifacts] == ["Percent", "Username"]


def test_custom_registry(build):
    registry = DEFAULT_REGISTRY.copy()
    registry.register(RuleDefinition(
        name="even",
        role=RuleRole.VALIDATOR,
        kinds=INTEGER_KINDS,
        emit=lambda ctx: RuleEmission(condition="value % 2 == 0", expected="an even number"),
    ))
    mod = build(int_spec(name="Even", validators=["even"], capabilities=[]), registry=registry)
    assert mod.Even(4).into_inner() == 4
    with pytest.raises(mod.EvenError) as exc:
        mod.Even(3)
    assert exc.value.expected == "an even number"
    assert generate(int_spec(name="Even", validators=["even"])).is_err()


# -----------------------------
# load_spec
# -----------------------------


def test_load_spec_ok():
    spec = load_spec(text_spec()).unwrap()
    assert spec.name == "Username"


def test_load_spec_unknown_capability_with_suggestion():
    diagnostics = load_spec(text_spec(capabilities=["debugg", "equality"])).unwrap_err()
    (diagnostic,) = diagnostics
    assert diagnostic.code is DiagnosticCode.E1005_UNKNOWN_CAPABILITY
    assert "debug" in diagnostic.suggestions


def test_load_spec_reports_every_field():
    raw = {"name": "class", "inner_kind": "strng", "capabilities": ["nope"]}
    codes = load_spec(raw).unwrap_err().codes
    assert codes == {
        DiagnosticCode.E1002_INVALID_TYPE_NAME,
        DiagnosticCode.E1003_UNKNOWN_INNER_KIND,
        DiagnosticCode.E1005_UNKNOWN_CAPABILITY,
    }


def test_load_spec_missing_fields():
    diagnostics = load_spec({"capabilities": []}).unwrap_err()
    assert {d.subject for d in diagnostics} == {"name", "inner_kind"}
    assert diagnostics.codes == {DiagnosticCode.E1001_MISSING_FIELD}


def test_load_spec_other_without_inner_type():
    (diagnostic,) = load_spec({"name": "Money", "inner_kind": "other"}).unwrap_err()
    assert diagnostic.code is DiagnosticCode.E1004_MISSING_INNER_TYPE


def test_load_spec_rejects_non_mapping():
    (diagnostic,) = load_spec(["not", "a", "mapping"]).unwrap_err()
    assert diagnostic.code is DiagnosticCode.E1000_SPEC_MALFORMED


def test_unknown_inner_kind_suggestion():
    (diagnostic,) = load_spec({"name": "A", "inner_kind": "txt"}).unwrap_err()
    assert diagnostic.suggestions == ("text",)
