"""Conformance fixture loader for parambind.

Loads YAML fixtures from tests/conformance/ and turns them into
(kind, token, expectation) cases for parametrized scalar conversion tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

import parambind
from parambind import BoolKind, FloatKind, IntKind, Kind, StrKind

CONFORMANCE_DIR = Path(__file__).resolve().parent / "conformance"

KINDS: dict[str, Kind] = {
    "int": IntKind(),
    "int8": IntKind(bits=8),
    "int16": IntKind(bits=16),
    "int32": IntKind(bits=32),
    "int64": IntKind(bits=64),
    "uint": IntKind(bits=64, signed=False),
    "uint8": IntKind(bits=8, signed=False),
    "uint16": IntKind(bits=16, signed=False),
    "uint32": IntKind(bits=32, signed=False),
    "uint64": IntKind(bits=64, signed=False),
    "float32": FloatKind(bits=32),
    "float64": FloatKind(bits=64),
    "bool": BoolKind(),
    "str": StrKind(),
}


@dataclass
class ConversionCase:
    """A single scalar conversion case from a conformance fixture."""

    fixture_name: str
    case_name: str
    kind: Kind
    token: str
    expect: Any
    error: type[Exception] | None


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_conversion_fixtures() -> list[ConversionCase]:
    """Load every conversion fixture under tests/conformance/."""
    cases: list[ConversionCase] = []
    for yaml_file in sorted(CONFORMANCE_DIR.glob("*.yaml")):
        cases.extend(_load_file(yaml_file))
    return cases


def _load_file(path: Path) -> list[ConversionCase]:
    """Load a single fixture YAML file (may contain multiple documents)."""
    cases: list[ConversionCase] = []
    with path.open() as f:
        for doc in yaml.safe_load_all(f):
            if doc is None:
                continue
            kind = KINDS[doc["kind"]]
            for case in doc["cases"]:
                cases.append(
                    ConversionCase(
                        fixture_name=doc["name"],
                        case_name=case["name"],
                        kind=kind,
                        token=str(case["token"]),
                        expect=case.get("expect"),
                        error=_error_type(case.get("error")),
                    )
                )
    return cases


def _error_type(name: str | None) -> type[Exception] | None:
    if name is None:
        return None
    error = getattr(parambind, name, None)
    if not (isinstance(error, type) and issubclass(error, parambind.BindError)):
        msg = f"Unknown error type in fixture: {name}"
        raise ValueError(msg)
    return error
