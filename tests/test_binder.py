"""Tests for the binder front-end and builder (parambind._binder)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from parambind import (
    DEFAULT_BINDER,
    MIME_APPLICATION_JSON,
    MIME_APPLICATION_XML,
    MIME_TEXT_XML,
    Binder,
    BinderBuilder,
    DecodeError,
    DecodeErrorKind,
    EmptyBodyError,
    FormDecodeError,
    IntegerSyntaxError,
    MediaRoute,
    UnsupportedMediaTypeError,
    bind,
    param,
    register_default_decoders,
)
from parambind.testing import StubRequest


@dataclass
class Person:
    name: str = ""
    age: int = 0


@dataclass
class Search:
    term: str = param("", query="q", form="search")
    tags: list[str] = field(default_factory=list)


class TestBuilder:
    def test_empty_builder(self) -> None:
        binder = BinderBuilder().build()
        assert isinstance(binder, Binder)
        assert binder.unmarshaler_count == 0
        assert binder.media_types() == []

    def test_registers_and_freezes(self) -> None:
        builder = BinderBuilder().unmarshaler(complex, complex)
        binder = builder.build()
        builder.unmarshaler(bytes, str.encode)

        assert binder.unmarshaler_count == 1
        assert binder.contains_unmarshaler(complex)
        assert not binder.contains_unmarshaler(bytes)

    def test_default_decoders(self) -> None:
        binder = register_default_decoders(BinderBuilder()).build()
        assert binder.media_types() == [MIME_APPLICATION_JSON, MIME_APPLICATION_XML, MIME_TEXT_XML]

    def test_default_binder(self) -> None:
        assert DEFAULT_BINDER.unmarshaler_count == 4
        assert MIME_APPLICATION_JSON in DEFAULT_BINDER.media_types()

    def test_route_matching_ignores_case_and_params(self) -> None:
        route = MediaRoute(prefix="application/json", decoder=lambda body, target: None)
        assert route.matches("Application/JSON; charset=utf-8")
        assert not route.matches("text/json")


class TestBodilessRequests:
    def test_get_binds_query(self) -> None:
        p = Person()
        bind(p, StubRequest.get({"name": "Ann", "age": "30"}))
        assert p == Person(name="Ann", age=30)

    def test_delete_binds_query(self) -> None:
        p = Person()
        req = StubRequest(method="DELETE", query=StubRequest.get({"age": "4"}).query)
        bind(p, req)
        assert p.age == 4

    def test_query_mode_tags(self) -> None:
        s = Search()
        bind(s, StubRequest.get({"q": "shoes", "search": "ignored"}))
        assert s.term == "shoes"

    def test_lowercase_method(self) -> None:
        p = Person()
        bind(p, StubRequest(method="get", query=StubRequest.get({"age": "1"}).query))
        assert p.age == 1

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
    def test_empty_body_rejected(self, method: str) -> None:
        with pytest.raises(EmptyBodyError) as exc_info:
            bind(Person(), StubRequest(method=method, content_type=MIME_APPLICATION_JSON))
        assert exc_info.value.method == method
        assert "can't be empty" in str(exc_info.value)

    def test_query_conversion_error_propagates(self) -> None:
        with pytest.raises(IntegerSyntaxError):
            bind(Person(), StubRequest.get({"age": "old"}))


class TestFormRequests:
    def test_form_mode_tags(self) -> None:
        s = Search()
        bind(s, StubRequest.post_form({"search": "hats", "q": "ignored", "tags": ["a", "b"]}))
        assert s == Search(term="hats", tags=["a", "b"])

    def test_multipart(self) -> None:
        p = Person()
        bind(p, StubRequest.post_form({"name": "Ann"}, "multipart/form-data; boundary=x"))
        assert p.name == "Ann"

    def test_form_decode_failure(self) -> None:
        req = StubRequest(
            method="POST",
            content_type="application/x-www-form-urlencoded",
            content=b"%%%",
            form_error="bad escape",
        )
        with pytest.raises(FormDecodeError) as exc_info:
            bind(Person(), req)
        assert exc_info.value.detail == "bad escape"

    def test_form_value_error_wrapped(self) -> None:
        class Broken(StubRequest):
            def form_params(self) -> Any:
                msg = "truncated body"
                raise ValueError(msg)

        req = Broken(method="POST", content_type="application/x-www-form-urlencoded", content=b"x")
        with pytest.raises(FormDecodeError) as exc_info:
            bind(Person(), req)
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestStructuredBodies:
    def test_json(self) -> None:
        p = Person(age=1)
        bind(p, StubRequest.post_body(MIME_APPLICATION_JSON, b'{"name": "Ann"}'))
        assert p == Person(name="Ann", age=1)

    def test_json_with_charset(self) -> None:
        p = Person()
        bind(p, StubRequest.post_body("application/json; charset=utf-8", b'{"age": 3}'))
        assert p.age == 3

    def test_xml(self) -> None:
        p = Person()
        bind(p, StubRequest.post_body(MIME_TEXT_XML, b"<person><name>Ann</name><age>5</age></person>"))
        assert p == Person(name="Ann", age=5)

    def test_malformed_json(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            bind(Person(), StubRequest.post_body(MIME_APPLICATION_JSON, b'{"name": '))
        assert exc_info.value.kind is DecodeErrorKind.SYNTAX
        assert exc_info.value.offset is not None
        assert exc_info.value.offset >= 0

    def test_negative_content_length_reads_body(self) -> None:
        p = Person()
        req = StubRequest(
            method="POST",
            content_type=MIME_APPLICATION_JSON,
            content=b'{"name": "Ann"}',
            content_length=-1,
        )
        bind(p, req)
        assert p.name == "Ann"

    def test_unsupported_media_type(self) -> None:
        with pytest.raises(UnsupportedMediaTypeError) as exc_info:
            bind(Person(), StubRequest.post_body("application/octet-stream", b"\x00\x01"))
        assert exc_info.value.content_type == "application/octet-stream"

    def test_missing_content_type(self) -> None:
        with pytest.raises(UnsupportedMediaTypeError):
            bind(Person(), StubRequest.post_body("", b"{}"))

    def test_custom_decoder_route(self) -> None:
        seen: list[bytes] = []

        def decode_csv(body: bytes, target: Any) -> None:
            seen.append(body)
            target.name, age = body.decode().split(",")
            target.age = int(age)

        binder = BinderBuilder().decoder("text/csv", decode_csv).build()
        p = Person()
        binder.bind(p, StubRequest.post_body("text/csv", b"Ann,7"))
        assert p == Person(name="Ann", age=7)
        assert seen == [b"Ann,7"]

    def test_first_route_wins(self) -> None:
        calls: list[str] = []
        binder = (
            BinderBuilder()
            .decoder("application/", lambda body, target: calls.append("generic"))
            .decoder("application/json", lambda body, target: calls.append("json"))
            .build()
        )
        binder.bind(Person(), StubRequest.post_body(MIME_APPLICATION_JSON, b"{}"))
        assert calls == ["generic"]

    def test_form_not_routed_to_decoders(self) -> None:
        binder = BinderBuilder().decoder("application/", lambda body, target: None).build()
        p = Person()
        binder.bind(p, StubRequest.post_form({"name": "Ann"}))
        assert p.name == "Ann"
