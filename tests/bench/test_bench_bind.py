"""Binding benchmarks for parambind.

Measures the hot paths: scalar conversion, the struct walker over query
params, and JSON decoding through the front-end.

Run: uv run pytest tests/bench/test_bench_bind.py --benchmark-enable --benchmark-only
"""

from __future__ import annotations

from dataclasses import dataclass, field

from parambind import (
    DEFAULT_BINDER,
    MIME_APPLICATION_JSON,
    FloatKind,
    IntKind,
    Params,
    convert,
    param,
)
from parambind.testing import StubRequest

# ── Fixtures ─────────────────────────────────────────────────────────────────


@dataclass
class Paging:
    page: int = 1
    size: int = param(20, query="per_page")


@dataclass
class Listing:
    term: str = param("", query="q")
    tags: list[str] = field(default_factory=list)
    min_price: float = 0.0
    in_stock: bool = False
    paging: Paging = field(default_factory=Paging)


QUERY = Params.from_mapping(
    {
        "q": "shoes",
        "tags": ["red", "leather", "sale"],
        "Min_Price": "19.99",
        "in_stock": "true",
        "page": "3",
        "per_page": "50",
    }
)

JSON_BODY = b'{"term": "shoes", "tags": ["red", "leather"], "min_price": 19.99, "paging": {"page": 2}}'


# ── Scalar conversion ────────────────────────────────────────────────────────


def test_bench_convert_int(benchmark):
    benchmark(convert, IntKind(bits=32), "123456")


def test_bench_convert_float(benchmark):
    benchmark(convert, FloatKind(), "-12.5e3")


# ── Walker ───────────────────────────────────────────────────────────────────


def test_bench_walk_query(benchmark):
    def run() -> Listing:
        target = Listing()
        DEFAULT_BINDER.bind_params(target, QUERY)
        return target

    result = benchmark(run)
    assert result.paging.size == 50


def test_bench_bind_get(benchmark):
    request = StubRequest(method="GET", query=QUERY)

    def run() -> Listing:
        target = Listing()
        DEFAULT_BINDER.bind(target, request)
        return target

    result = benchmark(run)
    assert result.min_price == 19.99


# ── Structured ───────────────────────────────────────────────────────────────


def test_bench_bind_json(benchmark):
    request = StubRequest.post_body(MIME_APPLICATION_JSON, JSON_BODY)

    def run() -> Listing:
        target = Listing()
        DEFAULT_BINDER.bind(target, request)
        return target

    result = benchmark(run)
    assert result.paging.page == 2
