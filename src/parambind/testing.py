"""Test utilities for parambind.

Provides a request context built directly from Params, for tests and
examples that do not want to encode a real HTTP request.

For real servers, adapt your framework's request object to the
RequestContext protocol (or use parambind.http.HttpRequest).
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import BinaryIO

from parambind._errors import FormDecodeError
from parambind._params import Params


@dataclass(frozen=True, slots=True)
class StubRequest:
    """A RequestContext with explicit query and form params.

    form_error, when set, is raised from form_params() as a FormDecodeError
    to simulate a malformed form body.

    >>> from parambind.testing import StubRequest
    >>> req = StubRequest.get({"id": "7"})
    >>> req.query_params().first("id")
    '7'
    """

    method: str = "GET"
    content_type: str = ""
    content: bytes = b""
    content_length: int | None = None
    query: Params = field(default_factory=Params)
    form: Params = field(default_factory=Params)
    form_error: str | None = None

    def __post_init__(self) -> None:
        if self.content_length is None:
            object.__setattr__(self, "content_length", len(self.content))

    @classmethod
    def get(cls, query: Mapping[str, str | Sequence[str]]) -> StubRequest:
        """A bodiless GET carrying query params."""
        return cls(method="GET", query=Params.from_mapping(query))

    @classmethod
    def post_form(
        cls,
        form: Mapping[str, str | Sequence[str]],
        content_type: str = "application/x-www-form-urlencoded",
    ) -> StubRequest:
        """A POST whose decoded form params are given directly."""
        return cls(
            method="POST",
            content_type=content_type,
            content=b"<form>",
            form=Params.from_mapping(form),
        )

    @classmethod
    def post_body(cls, content_type: str, content: bytes) -> StubRequest:
        return cls(method="POST", content_type=content_type, content=content)

    @property
    def body(self) -> BinaryIO:
        return io.BytesIO(self.content)

    def query_params(self) -> Params:
        return self.query

    def form_params(self) -> Params:
        if self.form_error is not None:
            raise FormDecodeError(self.form_error)
        return self.form
