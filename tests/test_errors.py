"""Tests for the Result monad and diagnostic collections."""
from __future__ import annotations

import pytest

from hardtype.core.errors import (
    DiagnosticCode,
    DiagnosticSet,
    Err,
    GenerationError,
    Ok,
    collect_results,
    err,
    from_diagnostics,
    missing_field,
    ok,
    suggest,
    unknown_capability,
)


def test_ok_and_err_constructors():
    assert ok(1) == Ok(1)
    assert err("boom") == Err("boom")
    assert ok(1).is_ok() and not ok(1).is_err()
    assert err("boom").is_err() and not err("boom").is_ok()


def test_unwrap_or():
    assert ok(1).unwrap_or(0) == 1
    assert err("boom").unwrap_or(0) == 0


def test_match_dispatches_on_variant():
    assert ok(2).match(ok=lambda v: v * 10, err=lambda e: -1) == 20
    assert err("boom").match(ok=lambda v: v, err=lambda e: e.upper()) == "BOOM"


def test_map_and_and_then():
    assert ok(2).map(lambda v: v + 1) == Ok(3)
    assert err("boom").map(lambda v: v + 1) == Err("boom")
    assert err("boom").map_err(str.upper) == Err("BOOM")
    assert ok(2).and_then(lambda v: err(f"no {v}")) == Err("no 2")


def test_iteration_yields_only_success():
    assert list(ok(5)) == [5]
    assert list(err("boom")) == []


def test_unwrap_err_on_ok_raises():
    with pytest.raises(ValueError):
        ok(1).unwrap_err()


def test_unwrap_diagnostics_raises_generation_error():
    with pytest.raises(GenerationError) as exc:
        err(DiagnosticSet.of(missing_field("name"))).unwrap()
    assert exc.value.diagnostics.codes == {DiagnosticCode.E1001_MISSING_FIELD}


def test_from_diagnostics():
    assert from_diagnostics([], "value") == Ok("value")
    result = from_diagnostics([missing_field("name"), missing_field("name")], "value")
    assert len(result.unwrap_err()) == 1


def test_collect_results_merges_every_error():
    result = collect_results([ok(1), err(DiagnosticSet.of(missing_field("a"))), err(DiagnosticSet.of(missing_field("b")))])
    assert [d.subject for d in result.unwrap_err()] == ["a", "b"]
    assert collect_results([ok(1), ok(2)]) == Ok([1, 2])


def test_diagnostic_set_is_ordered_and_deduplicated():
    a, b = missing_field("a"), missing_field("b")
    merged = DiagnosticSet.of(a, b).merge(DiagnosticSet.of(b, a))
    assert list(merged) == [a, b]
    assert merged.by_code(DiagnosticCode.E1001_MISSING_FIELD) == [a, b]
    assert not DiagnosticSet()


def test_suggestions():
    assert suggest("debugg", ["debug", "display", "default"]) == ("debug",)
    diagnostic = unknown_capability("hsh", ["hash", "equality"])
    assert "hash" in diagnostic.suggestions
    assert "did you mean: hash" in str(diagnostic)
