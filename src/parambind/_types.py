"""Core protocols and type aliases for parambind.

- RequestContext is the collaborator port the binder front-end reads from
- ParamUnmarshaler is the opt-in "parse self from string" capability
- StructuredDecoder decodes a whole document (JSON/XML) into a record
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from parambind._params import Params

# A registered hook: raw token in, field value out.
type Unmarshaler = Callable[[str], Any]


@runtime_checkable
class ParamUnmarshaler(Protocol):
    """A type that knows how to build itself from a query/form token.

    Detection is a class-level check (issubclass), so a type opts in by
    defining the classmethod; no registration is needed. Types that cannot
    be modified are registered on the BinderBuilder instead.
    """

    @classmethod
    def from_param(cls, param: str, /) -> Self: ...


class RequestContext(Protocol):
    """What the binder front-end needs from an incoming request.

    content_length of None means "unknown" (e.g. chunked) and is treated
    as a request that carries a body.
    """

    @property
    def method(self) -> str: ...

    @property
    def content_length(self) -> int | None: ...

    @property
    def content_type(self) -> str: ...

    @property
    def body(self) -> BinaryIO: ...

    def query_params(self) -> Params: ...

    def form_params(self) -> Params:
        """Decode form parameters. May raise FormDecodeError."""
        ...


class StructuredDecoder(Protocol):
    """Decode a complete document into an existing record in place.

    Raises DecodeError on failure.
    """

    def __call__(self, body: bytes, target: Any, /) -> None: ...
