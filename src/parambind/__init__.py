"""parambind — runtime data binding of request parameters into dataclasses.

All public types are exported from this module for flat imports:

    from parambind import bind, bind_params, param, BinderBuilder
"""

__version__ = "0.1.0"

# Front-end and builder — see parambind._binder for details
from parambind._binder import (
    BODYLESS_METHODS,
    DEFAULT_BINDER,
    FORM_MEDIA_TYPES,
    MIME_APPLICATION_FORM,
    MIME_APPLICATION_JSON,
    MIME_APPLICATION_XML,
    MIME_MULTIPART_FORM,
    MIME_TEXT_XML,
    Binder,
    BinderBuilder,
    BindingMode,
    MediaRoute,
    bind,
    bind_params,
    register_default_decoders,
    register_stdlib_unmarshalers,
)

# Conversion
from parambind._convert import ZERO_TIME, convert, convert_time, zero_value
from parambind._decoders import decode_json, decode_xml

# Errors
from parambind._errors import (
    BindError,
    BooleanSyntaxError,
    ConversionError,
    CustomUnmarshalError,
    DecodeError,
    DecodeErrorKind,
    EmptyBodyError,
    FloatSyntaxError,
    FormDecodeError,
    IntegerOverflowError,
    IntegerSyntaxError,
    MissingTimeFormatError,
    NestingTooDeepError,
    NotARecordError,
    TimeSyntaxError,
    UnknownTimeZoneError,
    UnsupportedKindError,
    UnsupportedMediaTypeError,
)

# Record descriptors
from parambind._fields import FieldSpec, RecordSpec, TimeFormat, param, record_spec

# Kinds
from parambind._kinds import (
    BoolKind,
    Float32,
    Float64,
    FloatKind,
    FloatWidth,
    Int8,
    Int16,
    Int32,
    Int64,
    IntKind,
    IntWidth,
    Kind,
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
from parambind._params import Params

# Protocols
from parambind._types import ParamUnmarshaler, RequestContext, StructuredDecoder, Unmarshaler
from parambind._walker import MAX_DEPTH

__all__ = [
    # Protocols
    "ParamUnmarshaler",
    "RequestContext",
    "StructuredDecoder",
    "Unmarshaler",
    # Binder
    "Binder",
    "BinderBuilder",
    "BindingMode",
    "MediaRoute",
    "DEFAULT_BINDER",
    "bind",
    "bind_params",
    "register_default_decoders",
    "register_stdlib_unmarshalers",
    "BODYLESS_METHODS",
    "FORM_MEDIA_TYPES",
    "MIME_APPLICATION_JSON",
    "MIME_APPLICATION_XML",
    "MIME_TEXT_XML",
    "MIME_APPLICATION_FORM",
    "MIME_MULTIPART_FORM",
    "MAX_DEPTH",
    # Source data
    "Params",
    # Descriptors
    "param",
    "record_spec",
    "FieldSpec",
    "RecordSpec",
    "TimeFormat",
    # Kinds
    "Kind",
    "IntKind",
    "FloatKind",
    "BoolKind",
    "StrKind",
    "TimeKind",
    "RecordKind",
    "SequenceKind",
    "OptionalKind",
    "OpaqueKind",
    "IntWidth",
    "FloatWidth",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "classify",
    "describe",
    # Conversion
    "convert",
    "convert_time",
    "zero_value",
    "ZERO_TIME",
    "decode_json",
    "decode_xml",
    # Errors
    "BindError",
    "EmptyBodyError",
    "UnsupportedMediaTypeError",
    "NotARecordError",
    "NestingTooDeepError",
    "FormDecodeError",
    "DecodeError",
    "DecodeErrorKind",
    "ConversionError",
    "IntegerSyntaxError",
    "IntegerOverflowError",
    "BooleanSyntaxError",
    "FloatSyntaxError",
    "UnsupportedKindError",
    "CustomUnmarshalError",
    "MissingTimeFormatError",
    "UnknownTimeZoneError",
    "TimeSyntaxError",
]
