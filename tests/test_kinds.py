"""Tests for the annotation classifier (parambind._kinds)."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Optional, Union

import pytest

from parambind import (
    BoolKind,
    Float32,
    Float64,
    FloatKind,
    Int8,
    Int16,
    Int32,
    Int64,
    IntKind,
    OpaqueKind,
    OptionalKind,
    RecordKind,
    SequenceKind,
    StrKind,
    TimeKind,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    classify,
    describe,
)


@dataclass
class Address:
    city: str = ""


class Level(IntEnum):
    ONE = 1


type Port = UInt16


class TestScalars:
    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (int, IntKind()),
            (Int8, IntKind(bits=8)),
            (Int16, IntKind(bits=16)),
            (Int32, IntKind(bits=32)),
            (Int64, IntKind(bits=64)),
            (UInt, IntKind(bits=64, signed=False)),
            (UInt8, IntKind(bits=8, signed=False)),
            (UInt16, IntKind(bits=16, signed=False)),
            (UInt32, IntKind(bits=32, signed=False)),
            (UInt64, IntKind(bits=64, signed=False)),
            (float, FloatKind()),
            (Float32, FloatKind(bits=32)),
            (Float64, FloatKind(bits=64)),
            (bool, BoolKind()),
            (str, StrKind()),
            (datetime, TimeKind()),
        ],
    )
    def test_classify(self, annotation: object, expected: object) -> None:
        assert classify(annotation) == expected

    def test_bool_is_not_int(self) -> None:
        assert isinstance(classify(bool), BoolKind)

    def test_int_subclass_keeps_type(self) -> None:
        assert classify(Level) == IntKind(py_type=Level)

    def test_type_alias_unwrapped(self) -> None:
        assert classify(Port) == IntKind(bits=16, signed=False)


class TestComposites:
    def test_dataclass_is_record(self) -> None:
        assert classify(Address) == RecordKind(py_type=Address)

    @pytest.mark.parametrize("annotation", [list[int], Sequence[int]])
    def test_list_like(self, annotation: object) -> None:
        assert classify(annotation) == SequenceKind(element=IntKind(), container=list)

    def test_homogeneous_tuple(self) -> None:
        assert classify(tuple[str, ...]) == SequenceKind(element=StrKind(), container=tuple)

    def test_fixed_tuple_is_opaque(self) -> None:
        assert isinstance(classify(tuple[int, str]), OpaqueKind)

    @pytest.mark.parametrize("annotation", [int | None, Optional[int], Union[None, int]])
    def test_optional(self, annotation: object) -> None:
        assert classify(annotation) == OptionalKind(inner=IntKind())

    def test_wide_union_is_opaque(self) -> None:
        assert isinstance(classify(int | str), OpaqueKind)

    def test_unknown_class_is_opaque(self) -> None:
        assert classify(Decimal) == OpaqueKind(py_type=Decimal)

    def test_optional_list_of_width(self) -> None:
        kind = classify(list[Int8] | None)
        assert kind == OptionalKind(inner=SequenceKind(element=IntKind(bits=8)))


class TestDescribe:
    @pytest.mark.parametrize(
        ("annotation", "name"),
        [
            (int, "int"),
            (Int8, "int8"),
            (UInt64, "uint64"),
            (Float32, "float32"),
            (float, "float64"),
            (list[int], "list[int]"),
            (tuple[str, ...], "tuple[str, ...]"),
            (int | None, "int | None"),
            (Address, "Address"),
            (Level, "Level"),
            (Decimal, "Decimal"),
        ],
    )
    def test_names(self, annotation: object, name: str) -> None:
        assert describe(classify(annotation)) == name
