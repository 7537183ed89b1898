"""Tests for the command line entry point."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from hardtype.cli import main, read_specs
from tests.specs import int_spec, text_spec


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logger = logging.getLogger("hardtype")
    logger.handlers = []
    logger.propagate = True


def _write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def _yaml_ready(spec: dict) -> dict:
    """YAML has no tuples: turn ``("range", 1, 100)`` entries into lists."""
    spec = dict(spec)
    spec["validators"] = [list(v) if isinstance(v, tuple) else v for v in spec.get("validators", [])]
    return spec


def test_read_specs_shapes(tmp_path):
    single = _write_yaml(tmp_path / "one.yaml", _yaml_ready(int_spec()))
    many = _write_yaml(tmp_path / "many.yaml", [_yaml_ready(int_spec()), text_spec()])
    wrapped = _write_yaml(tmp_path / "wrapped.yaml", {"types": [text_spec()]})
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")

    assert [s["name"] for s in read_specs(single)] == ["Percent"]
    assert [s["name"] for s in read_specs(many)] == ["Percent", "Username"]
    assert [s["name"] for s in read_specs(wrapped)] == ["Username"]
    assert read_specs(empty) == []


def test_read_specs_rejects_scalars(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("42\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_specs(path)


def test_main_writes_modules(tmp_path, capsys):
    specs = _write_yaml(tmp_path / "types.yaml", [_yaml_ready(int_spec()), text_spec()])
    out = tmp_path / "out"
    assert main([str(specs), "-o", str(out)]) == 0
    assert (out / "percent.py").exists()
    assert (out / "username.py").exists()
    assert "Percent" in capsys.readouterr().out


def test_main_check_detects_stale_modules(tmp_path):
    specs = _write_yaml(tmp_path / "types.yaml", _yaml_ready(int_spec()))
    out = tmp_path / "out"
    assert main([str(specs), "-o", str(out), "--check"]) == 1
    assert main([str(specs), "-o", str(out)]) == 0
    assert main([str(specs), "-o", str(out), "--check"]) == 0


def test_main_reports_diagnostics(tmp_path, capsys):
    specs = _write_yaml(tmp_path / "types.yaml", text_spec(capabilities=["copy"]))
    assert main([str(specs), "-o", str(tmp_path)]) == 1
    err = capsys.readouterr().err
    assert "E2002_FORBIDDEN_FOR_INNER_KIND" in err
    assert not (tmp_path / "username.py").exists()


def test_main_policy_and_header_flags(tmp_path):
    specs = _write_yaml(tmp_path / "types.yaml", _yaml_ready(int_spec(capabilities=["ordering"])))
    assert main([str(specs), "-o", str(tmp_path)]) == 1
    assert main([str(specs), "-o", str(tmp_path), "--policy", "auto", "--no-header"]) == 0
    source = (tmp_path / "percent.py").read_text(encoding="utf-8")
    assert not source.startswith("#")
    assert "def __lt__" in source


def test_main_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.yaml")]) == 2
