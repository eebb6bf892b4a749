"""Scalar and timestamp conversion.

convert() turns one string token into a value of a declared kind. It is
pure: it never touches a record, the walker assigns the result.

Leniency: an empty token is the kind's zero value (0, 0.0, False) instead
of a parse failure, since blank form fields are common.

Numeric token grammar is checked with ``google-re2`` before handing the
token to int()/float(), which would otherwise accept underscores,
surrounding whitespace and non-ASCII digits. Tokens are untrusted request
input, so matching stays linear-time.
"""

from __future__ import annotations

import dataclasses
import math
import struct
import typing
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import re2

from parambind._errors import (
    BooleanSyntaxError,
    ConversionError,
    FloatSyntaxError,
    IntegerOverflowError,
    IntegerSyntaxError,
    MissingTimeFormatError,
    TimeSyntaxError,
    UnknownTimeZoneError,
    UnsupportedKindError,
)
from parambind._fields import TimeFormat
from parambind._kinds import (
    BoolKind,
    FloatKind,
    IntKind,
    Kind,
    OpaqueKind,
    OptionalKind,
    RecordKind,
    SequenceKind,
    StrKind,
    TimeKind,
    classify,
    describe,
)

_SIGNED_INT = re2.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re2.compile(r"[0-9]+")
_FLOAT = re2.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?(?i:inf|infinity)|(?i:nan)"
)
_INF = re2.compile(r"[+-]?(?i:inf|infinity)")

# Digits in the widest bound (uint64 max).
_MAX_INT_DIGITS = 20

TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# Zero value of a timestamp: the first instant of year 1, UTC.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def convert(kind: Kind, token: str, *, field: str | None = None) -> Any:
    """Convert a single token into a value of `kind`.

    OptionalKind converts into its inner kind, so assigning through an
    unset optional yields a set value.

    Raises:
        IntegerSyntaxError, IntegerOverflowError, BooleanSyntaxError,
        FloatSyntaxError: malformed or out-of-range token
        UnsupportedKindError: the kind has no scalar conversion
    """
    match kind:
        case OptionalKind(inner=inner):
            return convert(inner, token, field=field)
        case IntKind():
            return _rewrap(kind, _parse_int(kind, token, field), token, field)
        case FloatKind():
            return _rewrap(kind, _parse_float(kind, token, field), token, field)
        case BoolKind():
            if token == "" or token in FALSE_STRINGS:
                return False
            if token in TRUE_STRINGS:
                return True
            raise BooleanSyntaxError(field, token)
        case StrKind(py_type=tp):
            return token if tp is str else _rewrap(kind, token, token, field)
    raise UnsupportedKindError(field, token, describe(kind))


def _parse_int(kind: IntKind, token: str, field: str | None) -> int:
    if token == "":
        return 0
    pattern = _SIGNED_INT if kind.signed else _UNSIGNED_INT
    if pattern.fullmatch(token) is None:
        raise IntegerSyntaxError(field, token, describe(kind))
    # int() refuses very long digit strings; nothing that long fits a kind.
    if len(token.lstrip("+-").lstrip("0")) > _MAX_INT_DIGITS:
        raise IntegerOverflowError(field, token, describe(kind))
    value = int(token)
    if not kind.min <= value <= kind.max:
        raise IntegerOverflowError(field, token, describe(kind))
    return value


def _parse_float(kind: FloatKind, token: str, field: str | None) -> float:
    if token == "":
        return 0.0
    if _FLOAT.fullmatch(token) is None:
        raise FloatSyntaxError(field, token, describe(kind))
    value = float(token)
    if math.isinf(value) and not _INF.fullmatch(token):
        raise FloatSyntaxError(field, token, describe(kind), "value out of range")
    if kind.bits == 32:
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as e:
            raise FloatSyntaxError(field, token, describe(kind), "value out of range") from e
    return value


def _rewrap(kind: IntKind | FloatKind | StrKind, value: Any, token: str, field: str | None) -> Any:
    """Pass a parsed value through a subclass constructor (IntEnum, StrEnum, ...)."""
    tp = kind.py_type
    if tp in (int, float, str):
        return value
    try:
        return tp(value)
    except (ValueError, TypeError) as e:
        if isinstance(kind, IntKind):
            raise IntegerSyntaxError(field, token, describe(kind)) from e
        if isinstance(kind, FloatKind):
            raise FloatSyntaxError(field, token, describe(kind)) from e
        raise ConversionError(field, token, f"invalid {describe(kind)} value") from e


# ═══════════════════════════════════════════════════════════════════════════════
# Timestamps
# ═══════════════════════════════════════════════════════════════════════════════


def convert_time(token: str, fmt: TimeFormat | None, *, field: str | None = None) -> datetime:
    """Parse a timestamp token using the field's time annotations.

    The format check comes first: a missing layout fails even for an empty
    token, since skipping it would hide a declaration mistake.

    A token without zone information is placed in the resolved zone:
    time_location if set, else UTC if time_utc, else the system zone.

    Raises:
        MissingTimeFormatError: no time_format on the field
        UnknownTimeZoneError: time_location does not name a known zone
        TimeSyntaxError: token does not match the layout
    """
    if fmt is None or not fmt.layout:
        raise MissingTimeFormatError(field, token)
    if token == "":
        return ZERO_TIME

    zone = _resolve_zone(fmt, token, field)
    try:
        parsed = datetime.strptime(token, fmt.layout)
    except ValueError as e:
        raise TimeSyntaxError(field, token, fmt.layout) from e

    if parsed.tzinfo is not None:
        return parsed
    if zone is None:
        # Naive astimezone() reads the value as system local time with the
        # offset in effect on that date.
        return parsed.astimezone()
    return parsed.replace(tzinfo=zone)


def _resolve_zone(fmt: TimeFormat, token: str, field: str | None) -> tzinfo | None:
    if fmt.location:
        try:
            return ZoneInfo(fmt.location)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise UnknownTimeZoneError(field, token, fmt.location) from e
    if fmt.utc:
        return timezone.utc
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Zero values
# ═══════════════════════════════════════════════════════════════════════════════


def zero_value(kind: Kind) -> Any:
    """The zero value of a kind, used to allocate unset storage.

    Records are built from the zero values of their required fields.

    Raises:
        UnsupportedKindError: no zero value can be constructed
    """
    match kind:
        case OptionalKind():
            return None
        case IntKind() | FloatKind() | BoolKind() | StrKind():
            return convert(kind, "")
        case TimeKind():
            return ZERO_TIME
        case SequenceKind(container=container):
            return container()
        case RecordKind(py_type=tp):
            return _zero_record(tp)
        case OpaqueKind(py_type=tp) if isinstance(tp, type):
            try:
                return tp()
            except TypeError as e:
                raise UnsupportedKindError(None, "", describe(kind)) from e
    raise UnsupportedKindError(None, "", describe(kind))


def _zero_record(tp: type) -> Any:
    hints = typing.get_type_hints(tp, include_extras=True)
    required = {
        f.name: zero_value(classify(hints[f.name]))
        for f in dataclasses.fields(tp)
        if f.init
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
    }
    return tp(**required)
