"""Binder front-end and its builder.

The front-end picks the data source for a request:

| Request                                   | Path                              |
|-------------------------------------------|-----------------------------------|
| no body, GET/DELETE                       | query params → walker ("query")   |
| no body, any other method                 | EmptyBodyError                    |
| form content type (urlencoded, multipart) | form params → walker ("form")     |
| registered decoder prefix (JSON, XML)     | structured decoder                |
| anything else                             | UnsupportedMediaTypeError         |

Hooks and decoders are registered on a BinderBuilder; .build() freezes them
into an immutable Binder.

Example::

    builder = register_default_decoders(BinderBuilder())
    builder.unmarshaler(Money, Money.parse)
    binder = builder.build()

    binder.bind(target, request)
"""

from __future__ import annotations

import datetime
import decimal
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from parambind._decoders import decode_json, decode_xml
from parambind._errors import EmptyBodyError, FormDecodeError, UnsupportedMediaTypeError
from parambind._params import Params
from parambind._walker import walk

if TYPE_CHECKING:
    from parambind._types import RequestContext, StructuredDecoder, Unmarshaler

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Media types
# ═══════════════════════════════════════════════════════════════════════════════

MIME_APPLICATION_JSON = "application/json"
MIME_APPLICATION_XML = "application/xml"
MIME_TEXT_XML = "text/xml"
MIME_APPLICATION_FORM = "application/x-www-form-urlencoded"
MIME_MULTIPART_FORM = "multipart/form-data"

FORM_MEDIA_TYPES = (MIME_APPLICATION_FORM, MIME_MULTIPART_FORM)
BODYLESS_METHODS = frozenset({"GET", "DELETE"})


class BindingMode(StrEnum):
    """Which source-tag family the walker consults."""

    QUERY = "query"
    FORM = "form"


@dataclass(frozen=True, slots=True)
class MediaRoute:
    """A content-type prefix and the decoder it selects.

    The prefix is casefolded at construction time; matching is a
    case-insensitive startswith, so parameters such as ``; charset=utf-8``
    do not matter.
    """

    prefix: str
    decoder: StructuredDecoder
    _cmp_prefix: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cmp_prefix", self.prefix.casefold())

    def matches(self, content_type: str) -> bool:
        return content_type.casefold().startswith(self._cmp_prefix)


def _is_form(content_type: str) -> bool:
    folded = content_type.casefold()
    return any(folded.startswith(prefix) for prefix in FORM_MEDIA_TYPES)


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════


class BinderBuilder:
    """Builder for constructing a Binder.

    Register custom unmarshal hooks by type and structured decoders by
    content-type prefix, then call build() to produce an immutable Binder.
    """

    def __init__(self) -> None:
        self._unmarshalers: dict[type, Unmarshaler] = {}
        self._routes: list[MediaRoute] = []

    def unmarshaler(self, tp: type, factory: Unmarshaler) -> BinderBuilder:
        """Register a "parse from string" hook for a type."""
        self._unmarshalers[tp] = factory
        return self

    def decoder(self, prefix: str, decoder: StructuredDecoder) -> BinderBuilder:
        """Register a structured decoder for a content-type prefix.

        Routes are tried in registration order; the first match wins.
        """
        self._routes.append(MediaRoute(prefix=prefix, decoder=decoder))
        return self

    def build(self) -> Binder:
        """Freeze the binder. No further registration is possible."""
        return Binder(
            _unmarshalers=MappingProxyType(dict(self._unmarshalers)),
            _routes=tuple(self._routes),
        )


def register_default_decoders(builder: BinderBuilder) -> BinderBuilder:
    """Register the JSON and XML document decoders."""
    return (
        builder.decoder(MIME_APPLICATION_JSON, decode_json)
        .decoder(MIME_APPLICATION_XML, decode_xml)
        .decoder(MIME_TEXT_XML, decode_xml)
    )


def register_stdlib_unmarshalers(builder: BinderBuilder) -> BinderBuilder:
    """Register hooks for standard library value types.

    uuid.UUID, decimal.Decimal, datetime.date (ISO 8601) and
    datetime.time (ISO 8601).
    """
    return (
        builder.unmarshaler(uuid.UUID, uuid.UUID)
        .unmarshaler(decimal.Decimal, decimal.Decimal)
        .unmarshaler(datetime.date, datetime.date.fromisoformat)
        .unmarshaler(datetime.time, datetime.time.fromisoformat)
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Binder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Binder:
    """Immutable binder. Constructed via BinderBuilder.

    Holds no per-request state; one instance can serve concurrent requests.
    """

    _unmarshalers: MappingProxyType[type, Unmarshaler] = field(
        default_factory=lambda: MappingProxyType({})
    )
    _routes: tuple[MediaRoute, ...] = ()

    def bind(self, target: Any, ctx: RequestContext) -> None:
        """Populate `target` from a request.

        Raises:
            EmptyBodyError: bodiless request with a method other than GET/DELETE
            UnsupportedMediaTypeError: no path for the content type
            FormDecodeError: the context could not decode its form body
            DecodeError: structured document failed to decode
            NotARecordError: target is not a mutable dataclass instance
            ConversionError: a query/form value failed to convert
        """
        if ctx.content_length == 0:
            method = ctx.method.upper()
            if method in BODYLESS_METHODS:
                logger.debug("binding %s from query params", type(target).__name__)
                self.bind_params(target, ctx.query_params(), BindingMode.QUERY)
                return
            raise EmptyBodyError(method)

        content_type = ctx.content_type
        if _is_form(content_type):
            try:
                params = ctx.form_params()
            except ValueError as e:
                raise FormDecodeError(str(e)) from e
            logger.debug("binding %s from form params", type(target).__name__)
            self.bind_params(target, params, BindingMode.FORM)
            return

        for route in self._routes:
            if route.matches(content_type):
                logger.debug("decoding %s body into %s", route.prefix, type(target).__name__)
                route.decoder(ctx.body.read(), target)
                return

        raise UnsupportedMediaTypeError(content_type)

    def bind_params(
        self,
        target: Any,
        params: Params | Mapping[str, str | Sequence[str]],
        mode: str = BindingMode.QUERY,
    ) -> None:
        """Run the struct walker over a flat multi-valued map.

        Raises:
            NotARecordError: target is not a mutable dataclass instance
            NestingTooDeepError: nested records exceed MAX_DEPTH
            ConversionError: a value failed to convert
        """
        walk(target, Params.from_mapping(params), str(mode), self._unmarshalers)

    @property
    def unmarshaler_count(self) -> int:
        """Number of registered unmarshal hooks."""
        return len(self._unmarshalers)

    def contains_unmarshaler(self, tp: type) -> bool:
        return tp in self._unmarshalers

    def media_types(self) -> list[str]:
        """Registered decoder prefixes, in match order."""
        return [route.prefix for route in self._routes]


DEFAULT_BINDER = register_stdlib_unmarshalers(register_default_decoders(BinderBuilder())).build()


def bind(target: Any, ctx: RequestContext) -> None:
    """Bind a request into `target` with the default binder."""
    DEFAULT_BINDER.bind(target, ctx)


def bind_params(
    target: Any,
    params: Params | Mapping[str, str | Sequence[str]],
    mode: str = BindingMode.QUERY,
) -> None:
    """Run the default binder's struct walker over `params`."""
    DEFAULT_BINDER.bind_params(target, params, mode)
