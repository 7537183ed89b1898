"""Shared fixtures: spec builders and a loader for generated modules."""
from __future__ import annotations

import sys
from types import ModuleType
from typing import Any, Callable, Iterator

import pytest

from hardtype import generate_or_raise, materialize
from hardtype.core.config import PrerequisitePolicy, Settings
from tests import rule_fixtures


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def strict_settings() -> Settings:
    return Settings(PREREQUISITE_POLICY=PrerequisitePolicy.STRICT, EMIT_HEADER=True)


@pytest.fixture
def auto_settings() -> Settings:
    return Settings(PREREQUISITE_POLICY=PrerequisitePolicy.AUTO, EMIT_HEADER=True)


# ---------------------------------------------------------------------------
# Generated modules
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_rule_calls():
    rule_fixtures.reset()
    yield
    rule_fixtures.reset()


@pytest.fixture
def build() -> Iterator[Callable[..., ModuleType]]:
    """Generate a spec and load the artifact as a registered module.

    Registration makes pickling of generated instances work; modules are
    removed from ``sys.modules`` after the test.
    """
    created: list[str] = []

    def _build(spec: Any, **kwargs: Any) -> ModuleType:
        artifact = generate_or_raise(spec, **kwargs)
        module = materialize(artifact, register=True)
        created.append(artifact.module_name)
        return module

    yield _build
    for name in created:
        sys.modules.pop(name, None)
