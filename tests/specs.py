"""Raw spec mappings shared by the test modules."""
from __future__ import annotations

from typing import Any


def text_spec(**overrides: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "name": "Username",
        "inner_kind": "text",
        "sanitizers": ["trim"],
        "validators": ["not_empty"],
        "capabilities": ["equality", "debug", "parse_from_text"],
    }
    spec.update(overrides)
    return spec


def int_spec(**overrides: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "name": "Percent",
        "inner_kind": "signed_integer",
        "validators": [("range", 1, 100)],
        "capabilities": ["equality", "debug", "parse_from_text"],
    }
    spec.update(overrides)
    return spec
