"""Error taxonomy for parambind.

Every failure raised by the binder derives from BindError. The HTTP layer
is expected to map these to responses; nothing here knows about status
codes.

Field conversion failures share the ConversionError base, which carries
the field name and the raw offending token.
"""

from __future__ import annotations

from enum import StrEnum

# ═══════════════════════════════════════════════════════════════════════════════
# Front-end errors
# ═══════════════════════════════════════════════════════════════════════════════


class BindError(Exception):
    """Base class for all binding failures."""


class EmptyBodyError(BindError):
    """A request that requires a body arrived without one."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"request body can't be empty for {method} requests")


class UnsupportedMediaTypeError(BindError):
    """No binding path is registered for the request content type."""

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"unsupported media type: {content_type!r}")


class NotARecordError(BindError):
    """The binding target is not a mutable record (dataclass instance)."""

    def __init__(self, target_type: str, reason: str = "binding element must be a dataclass") -> None:
        self.target_type = target_type
        self.reason = reason
        super().__init__(f"{reason} (got {target_type})")


class NestingTooDeepError(BindError):
    """Nested record recursion exceeded the depth limit."""

    def __init__(self, depth: int, max_: int) -> None:
        self.depth = depth
        self.max = max_
        super().__init__(f"record nesting depth {depth} exceeds maximum {max_}")


class FormDecodeError(BindError):
    """The request context failed to decode its form parameters."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"form decode error: {detail}")


class DecodeErrorKind(StrEnum):
    TYPE_MISMATCH = "type_mismatch"
    SYNTAX = "syntax"
    OTHER = "other"


class DecodeError(BindError):
    """A structured (JSON/XML) document could not be decoded into the target.

    Only the attributes the underlying decoder supplies are set; the rest
    stay None.
    """

    def __init__(
        self,
        kind: DecodeErrorKind,
        detail: str,
        *,
        expected_type: str | None = None,
        actual_value: str | None = None,
        field: str | None = None,
        offset: int | None = None,
        line: int | None = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.expected_type = expected_type
        self.actual_value = actual_value
        self.field = field
        self.offset = offset
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        match self.kind:
            case DecodeErrorKind.TYPE_MISMATCH:
                return (
                    f"unmarshal type error: expected={self.expected_type}, "
                    f"got={self.actual_value}, field={self.field}, "
                    f"offset={self.offset}"
                )
            case DecodeErrorKind.SYNTAX if self.line is not None:
                return f"syntax error: line={self.line}, error={self.detail}"
            case DecodeErrorKind.SYNTAX:
                return f"syntax error: offset={self.offset}, error={self.detail}"
            case _:
                return self.detail


# ═══════════════════════════════════════════════════════════════════════════════
# Field conversion errors
# ═══════════════════════════════════════════════════════════════════════════════


class ConversionError(BindError):
    """A source token could not be converted into a field's declared kind."""

    def __init__(self, field: str | None, value: str, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        where = f"field {field!r}" if field is not None else "value"
        super().__init__(f"{where}: {reason}: {value!r}")


class IntegerSyntaxError(ConversionError):
    def __init__(self, field: str | None, value: str, kind: str) -> None:
        self.kind = kind
        super().__init__(field, value, f"invalid {kind} syntax")


class IntegerOverflowError(ConversionError):
    def __init__(self, field: str | None, value: str, kind: str) -> None:
        self.kind = kind
        super().__init__(field, value, f"value out of range for {kind}")


class BooleanSyntaxError(ConversionError):
    def __init__(self, field: str | None, value: str) -> None:
        super().__init__(field, value, "invalid boolean syntax")


class FloatSyntaxError(ConversionError):
    def __init__(self, field: str | None, value: str, kind: str, reason: str = "invalid syntax") -> None:
        self.kind = kind
        super().__init__(field, value, f"{reason} for {kind}")


class UnsupportedKindError(ConversionError):
    """The declared field type has no string conversion."""

    def __init__(self, field: str | None, value: str, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(field, value, f"unsupported type {type_name}")


class CustomUnmarshalError(ConversionError):
    """A custom "parse from string" hook rejected the token."""

    def __init__(self, field: str | None, value: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(field, value, f"custom unmarshal failed ({cause})")


class MissingTimeFormatError(ConversionError):
    """A timestamp field has no time_format annotation.

    Raised regardless of the supplied value.
    """

    def __init__(self, field: str | None, value: str) -> None:
        super().__init__(field, value, "blank time format")


class UnknownTimeZoneError(ConversionError):
    def __init__(self, field: str | None, value: str, name: str) -> None:
        self.name = name
        super().__init__(field, value, f"unknown time zone {name!r}")


class TimeSyntaxError(ConversionError):
    def __init__(self, field: str | None, value: str, layout: str) -> None:
        self.layout = layout
        super().__init__(field, value, f"does not match time format {layout!r}")
