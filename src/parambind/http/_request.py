"""HttpRequest — a concrete request context for the binder.

Holds method, path (without query string), headers (case-insensitive),
and the raw body bytes. Query and form parameters are decoded on demand.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.parser import BytesParser
from email.policy import HTTP
from typing import BinaryIO

from parambind._errors import FormDecodeError
from parambind._params import Params

_FORM_URLENCODED = "application/x-www-form-urlencoded"
_MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """HTTP request context for binding.

    The path should be provided as-is from the wire (may include query string).
    Query parameters are parsed and percent-decoded, and the path is cleaned.

    Headers are stored with lowercased keys for case-insensitive lookup.
    """

    method: str = "GET"
    raw_path: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    # Computed fields — parsed from raw_path and headers
    _clean_path: str = field(init=False, repr=False)
    _query_string: str = field(init=False, repr=False)
    _lower_headers: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        path, _, query_string = self.raw_path.partition("?")
        object.__setattr__(self, "_clean_path", path)
        object.__setattr__(self, "_query_string", query_string)
        object.__setattr__(
            self,
            "_lower_headers",
            {k.lower(): v for k, v in self.headers.items()},
        )

    @property
    def path(self) -> str:
        """Path without query string."""
        return self._clean_path

    @property
    def content_type(self) -> str:
        return self.header("content-type") or ""

    @property
    def content_length(self) -> int | None:
        """Declared body length.

        Falls back to the body size when the header is absent; a
        non-numeric header means "unknown" (None).
        """
        declared = self.header("content-length")
        if declared is None:
            return len(self.content)
        try:
            return int(declared)
        except ValueError:
            return None

    @property
    def body(self) -> BinaryIO:
        """A fresh readable stream over the body."""
        return io.BytesIO(self.content)

    def header(self, name: str) -> str | None:
        """Get a header value by name (case-insensitive)."""
        return self._lower_headers.get(name.lower())

    def query_params(self) -> Params:
        """Parsed query parameters.

        Raises:
            FormDecodeError: percent-escapes are not valid UTF-8.
        """
        try:
            return Params.from_query_string(self._query_string)
        except UnicodeDecodeError as e:
            raise FormDecodeError(f"invalid query string: {e.reason}") from e

    def form_params(self) -> Params:
        """Decode the form body, followed by the URL query values.

        Body values come first for keys present in both, so the first value
        of a key is the body's.

        Raises:
            FormDecodeError: malformed body or unsupported form content type.
        """
        content_type = self.content_type
        folded = content_type.casefold()
        if folded.startswith(_FORM_URLENCODED):
            try:
                text = self.content.decode("utf-8")
                pairs = Params.from_query_string(text).items()
            except UnicodeDecodeError as e:
                raise FormDecodeError(f"invalid form body: {e.reason}") from e
        elif folded.startswith(_MULTIPART):
            pairs = _parse_multipart(content_type, self.content)
        else:
            msg = f"not a form content type: {content_type!r}"
            raise FormDecodeError(msg)

        merged: dict[str, list[str]] = {}
        for key, values in pairs:
            merged.setdefault(key, []).extend(values)
        for key, values in self.query_params().items():
            merged.setdefault(key, []).extend(values)
        return Params({k: tuple(v) for k, v in merged.items()})


def _parse_multipart(content_type: str, content: bytes) -> list[tuple[str, tuple[str, ...]]]:
    """Text fields of a multipart/form-data body. File parts are skipped."""
    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=HTTP).parsebytes(head + content)
    if not isinstance(message, EmailMessage) or not message.is_multipart():
        msg = "malformed multipart body"
        raise FormDecodeError(msg)
    if message.get_boundary() is None or message.defects:
        msg = "malformed multipart body: " + ", ".join(type(d).__name__ for d in message.defects)
        raise FormDecodeError(msg)

    grouped: dict[str, list[str]] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not isinstance(name, str) or part.get_filename() is not None:
            continue
        payload = part.get_payload(decode=True) or b""
        try:
            value = payload.decode(part.get_content_charset() or "utf-8")
        except (LookupError, UnicodeDecodeError) as e:
            raise FormDecodeError(f"invalid multipart field {name!r}: {e}") from e
        grouped.setdefault(name, []).append(value)
    return [(k, tuple(v)) for k, v in grouped.items()]
