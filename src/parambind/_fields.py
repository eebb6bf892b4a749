"""Record descriptors — the per-type field table the walker iterates.

A descriptor is derived from a dataclass's fields and resolved type hints.
It describes the type, never a particular value, so it is cached
process-wide keyed by type. The cache is write-once per key: concurrent
first builds may both do the work, setdefault() keeps the first result
and the duplicate is discarded. No lock is needed.

Field metadata keys:

| Key             | Meaning                                          |
|-----------------|--------------------------------------------------|
| "query"/"form"  | source key override per binding mode             |
| "xml"           | element/attribute name for the XML decoder       |
| "time_format"   | strptime layout for datetime fields              |
| "time_utc"      | interpret timestamps in UTC                      |
| "time_location" | IANA zone name (wins over time_utc)              |
| "bind"          | False excludes the field from binding            |
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Mapping
from dataclasses import MISSING, dataclass
from types import MappingProxyType
from typing import Any

from parambind._errors import NotARecordError
from parambind._kinds import Kind, classify

TIME_FORMAT = "time_format"
TIME_UTC = "time_utc"
TIME_LOCATION = "time_location"
BIND = "bind"

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})


@dataclass(frozen=True, slots=True)
class TimeFormat:
    """Timestamp annotations of a single field."""

    layout: str | None = None
    utc: bool = False
    location: str | None = None


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One bindable field of a record type."""

    name: str
    annotation: Any
    kind: Kind
    tags: Mapping[str, Any]
    time: TimeFormat

    def source_tag(self, mode: str) -> str | None:
        """Explicit source key for a binding mode, or None."""
        tag = self.tags.get(mode)
        if isinstance(tag, str) and tag:
            return tag
        return None


@dataclass(frozen=True, slots=True)
class RecordSpec:
    """Descriptor of a record type: its bindable fields in declaration order."""

    py_type: type
    fields: tuple[FieldSpec, ...]
    frozen: bool = False


_SPECS: dict[type, RecordSpec] = {}


def record_spec(tp: type) -> RecordSpec:
    """Return the (cached) descriptor for a dataclass type.

    Raises:
        NotARecordError: tp is not a dataclass or its
            annotations cannot be resolved.
    """
    spec = _SPECS.get(tp)
    if spec is None:
        spec = _SPECS.setdefault(tp, _build_spec(tp))
    return spec


def target_spec(target: Any) -> RecordSpec:
    """Descriptor for a binding target, which must be a mutable instance.

    Raises:
        NotARecordError: target is a type, not a dataclass instance, or frozen.
    """
    if isinstance(target, type):
        raise NotARecordError(f"type {_type_name(target)}", "binding element must be an instance")
    spec = record_spec(type(target))
    if spec.frozen:
        raise NotARecordError(_type_name(type(target)), "binding element must not be frozen")
    return spec


def is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _build_spec(tp: type) -> RecordSpec:
    if not is_record_type(tp):
        raise NotARecordError(_type_name(tp))
    try:
        hints = typing.get_type_hints(tp, include_extras=True)
    except (NameError, TypeError) as e:
        raise NotARecordError(_type_name(tp), f"unresolvable annotations: {e}") from e

    fields = tuple(
        _field_spec(f, hints[f.name]) for f in dataclasses.fields(tp) if _is_bindable(f)
    )
    params = getattr(tp, "__dataclass_params__", None)
    frozen = params is not None and params.frozen
    return RecordSpec(py_type=tp, fields=fields, frozen=frozen)


def _is_bindable(f: dataclasses.Field[Any]) -> bool:
    return f.init and not f.name.startswith("_") and f.metadata.get(BIND, True) is not False


def _field_spec(f: dataclasses.Field[Any], annotation: Any) -> FieldSpec:
    meta = f.metadata
    utc = meta.get(TIME_UTC, False)
    if isinstance(utc, str):
        utc = utc in _TRUE_STRINGS
    time = TimeFormat(
        layout=meta.get(TIME_FORMAT) or None,
        utc=bool(utc),
        location=meta.get(TIME_LOCATION) or None,
    )
    return FieldSpec(
        name=f.name,
        annotation=annotation,
        kind=classify(annotation),
        tags=MappingProxyType(dict(meta)),
        time=time,
    )


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", type(tp).__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Field helper
# ═══════════════════════════════════════════════════════════════════════════════


def param(
    default: Any = MISSING,
    *,
    default_factory: Any = MISSING,
    query: str | None = None,
    form: str | None = None,
    xml: str | None = None,
    time_format: str | None = None,
    time_utc: bool = False,
    time_location: str | None = None,
    bind: bool = True,
    metadata: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> Any:
    """dataclasses.field() with binding metadata.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Search:
    ...     term: str = param("", query="q")
    ...     page: int = param(1, query="p", form="page_no")
    """
    meta: dict[str, Any] = dict(metadata or {})
    for key, value in (("query", query), ("form", form), ("xml", xml)):
        if value is not None:
            meta[key] = value
    if time_format is not None:
        meta[TIME_FORMAT] = time_format
    if time_utc:
        meta[TIME_UTC] = True
    if time_location is not None:
        meta[TIME_LOCATION] = time_location
    if not bind:
        meta[BIND] = False
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=meta, **kwargs
    )
