"""Declared field kinds and the annotation classifier.

classify() turns a resolved type annotation into a Kind, the small tagged
union the converter and the walker dispatch on:

| Annotation                          | Kind                          |
|-------------------------------------|-------------------------------|
| int, Int8 … Int64, UInt … UInt64    | IntKind(bits, signed)         |
| float, Float32, Float64             | FloatKind(bits)               |
| bool                                | BoolKind                      |
| str                                 | StrKind                       |
| datetime                            | TimeKind                      |
| dataclass                           | RecordKind                    |
| list[T], tuple[T, ...], Sequence[T] | SequenceKind(element)         |
| T | None                            | OptionalKind(inner)           |
| anything else                       | OpaqueKind                    |

Subclasses of int/float/str (IntEnum, StrEnum, NewType-like classes) keep
the underlying kind with py_type set to the subclass; the converter passes
the parsed value through that constructor.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Annotated, Any, TypeAliasType, Union, get_args, get_origin

from annotated_types import Interval

# ═══════════════════════════════════════════════════════════════════════════════
# Width markers and aliases
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class IntWidth:
    """Bit width marker for integer fields (used inside Annotated)."""

    bits: int
    signed: bool = True


@dataclass(frozen=True, slots=True)
class FloatWidth:
    """Bit width marker for float fields (32 or 64)."""

    bits: int


def _signed(bits: int) -> Any:
    bound = 1 << (bits - 1)
    return Annotated[int, IntWidth(bits), Interval(ge=-bound, le=bound - 1)]


def _unsigned(bits: int) -> Any:
    return Annotated[int, IntWidth(bits, signed=False), Interval(ge=0, le=(1 << bits) - 1)]


Int8 = _signed(8)
Int16 = _signed(16)
Int32 = _signed(32)
Int64 = _signed(64)
UInt = _unsigned(64)
UInt8 = _unsigned(8)
UInt16 = _unsigned(16)
UInt32 = _unsigned(32)
UInt64 = _unsigned(64)
Float32 = Annotated[float, FloatWidth(32)]
Float64 = Annotated[float, FloatWidth(64)]

# ═══════════════════════════════════════════════════════════════════════════════
# Kinds
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class IntKind:
    """Integer kind. Plain int is the unsized kind: 64-bit signed."""

    bits: int = 64
    signed: bool = True
    py_type: type = int

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


@dataclass(frozen=True, slots=True)
class FloatKind:
    bits: int = 64
    py_type: type = float


@dataclass(frozen=True, slots=True)
class BoolKind:
    py_type: type = bool


@dataclass(frozen=True, slots=True)
class StrKind:
    py_type: type = str


@dataclass(frozen=True, slots=True)
class TimeKind:
    py_type: type = datetime


@dataclass(frozen=True, slots=True)
class RecordKind:
    """A nested dataclass."""

    py_type: type


@dataclass(frozen=True, slots=True)
class SequenceKind:
    """A homogeneous sequence; container is list or tuple."""

    element: Kind
    container: type = list


@dataclass(frozen=True, slots=True)
class OptionalKind:
    """T | None. Unset storage is allocated on assignment."""

    inner: Kind


@dataclass(frozen=True, slots=True)
class OpaqueKind:
    """Any other annotation. Only bindable through a custom hook."""

    py_type: Any


type Kind = (
    IntKind
    | FloatKind
    | BoolKind
    | StrKind
    | TimeKind
    | RecordKind
    | SequenceKind
    | OptionalKind
    | OpaqueKind
)


def classify(annotation: Any) -> Kind:
    """Classify a resolved type annotation."""
    if isinstance(annotation, TypeAliasType):
        return classify(annotation.__value__)

    origin = get_origin(annotation)

    if origin is Annotated:
        base, *extras = get_args(annotation)
        kind = classify(base)
        for marker in extras:
            if isinstance(marker, IntWidth) and isinstance(kind, IntKind):
                kind = replace(kind, bits=marker.bits, signed=marker.signed)
            elif isinstance(marker, FloatWidth) and isinstance(kind, FloatKind):
                kind = replace(kind, bits=marker.bits)
        return kind

    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        present = [a for a in args if a is not types.NoneType]
        if len(present) == 1 and len(args) == 2:
            return OptionalKind(inner=classify(present[0]))
        return OpaqueKind(py_type=annotation)

    if origin is list or origin is collections.abc.Sequence:
        (element,) = get_args(annotation) or (Any,)
        return SequenceKind(element=classify(element), container=list)

    if origin is tuple:
        args = get_args(annotation)
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceKind(element=classify(args[0]), container=tuple)
        return OpaqueKind(py_type=annotation)

    if not isinstance(annotation, type):
        return OpaqueKind(py_type=annotation)

    # bool before int: bool is an int subclass.
    if issubclass(annotation, bool):
        return BoolKind(py_type=annotation)
    if issubclass(annotation, int):
        return IntKind(py_type=annotation)
    if issubclass(annotation, float):
        return FloatKind(py_type=annotation)
    if issubclass(annotation, str):
        return StrKind(py_type=annotation)
    if issubclass(annotation, datetime):
        return TimeKind(py_type=annotation)
    if dataclasses.is_dataclass(annotation):
        return RecordKind(py_type=annotation)
    return OpaqueKind(py_type=annotation)


def describe(kind: Kind) -> str:
    """Human-readable kind name used in error messages."""
    match kind:
        case IntKind(bits=bits, signed=signed, py_type=tp):
            if tp is not int:
                return tp.__name__
            if bits == 64 and signed:
                return "int"
            return f"int{bits}" if signed else f"uint{bits}"
        case FloatKind(bits=bits, py_type=tp):
            return tp.__name__ if tp is not float else f"float{bits}"
        case SequenceKind(element=element, container=container):
            if container is tuple:
                return f"tuple[{describe(element)}, ...]"
            return f"list[{describe(element)}]"
        case OptionalKind(inner=inner):
            return f"{describe(inner)} | None"
        case BoolKind(py_type=tp) | StrKind(py_type=tp) | TimeKind(py_type=tp) | RecordKind(py_type=tp):
            return tp.__name__
        case OpaqueKind(py_type=tp):
            return getattr(tp, "__name__", repr(tp))
    return repr(kind)  # pragma: no cover
