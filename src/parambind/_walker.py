"""Struct walker — populates a record from a flat multi-valued map.

Per field, in declaration order:

1. Resolve the source key: the mode's tag, else the field name.
2. Untagged nested records without a hook are walked in place with the
   same data, so flat query/form maps fill embedded records without
   dotted keys. Frozen nested records are rebuilt with the bound values
   (dataclasses.replace) and assigned back.
3. Fields with no matching key (exact, then case-insensitive) are skipped;
   partial binding is legal.
4. Custom hook first, then sequences (every value), then timestamps and
   scalars (first value).

First error wins: the walk stops and the error propagates. Fields already
assigned keep their new values.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from parambind._convert import convert, convert_time, zero_value
from parambind._errors import NestingTooDeepError
from parambind._fields import record_spec, target_spec
from parambind._hooks import apply_hook, find_hook
from parambind._kinds import OptionalKind, RecordKind, SequenceKind, TimeKind

if TYPE_CHECKING:
    from parambind._fields import FieldSpec, RecordSpec
    from parambind._kinds import Kind
    from parambind._params import Params
    from parambind._types import Unmarshaler

logger = logging.getLogger(__name__)

MAX_DEPTH = 32


def walk(
    target: Any,
    data: Params,
    mode: str,
    registry: Mapping[type, Unmarshaler],
    *,
    depth: int = 0,
) -> None:
    """Bind `data` into the dataclass instance `target` in place.

    Raises:
        NotARecordError: target is not a mutable dataclass instance
        NestingTooDeepError: nested records go deeper than MAX_DEPTH
        ConversionError: any field conversion failure
    """
    if depth > MAX_DEPTH:
        raise NestingTooDeepError(depth, MAX_DEPTH)
    spec = target_spec(target)
    for name, value in _bound_fields(target, spec, data, mode, registry, depth):
        setattr(target, name, value)


def _rebuild(
    current: Any,
    data: Params,
    mode: str,
    registry: Mapping[type, Unmarshaler],
    depth: int,
) -> Any:
    """Bind into a frozen record by building a changed copy.

    Returns `current` itself when no field was bound.
    """
    if depth > MAX_DEPTH:
        raise NestingTooDeepError(depth, MAX_DEPTH)
    spec = record_spec(type(current))
    changes = dict(_bound_fields(current, spec, data, mode, registry, depth))
    if not changes:
        return current
    return dataclasses.replace(current, **changes)


def _bound_fields(
    target: Any,
    spec: RecordSpec,
    data: Params,
    mode: str,
    registry: Mapping[type, Unmarshaler],
    depth: int,
) -> Iterator[tuple[str, Any]]:
    """Yield (field name, new value) pairs in declaration order.

    Values are produced lazily, so a consumer that assigns each pair keeps
    the fields bound before a failing one.
    """
    for fs in spec.fields:
        key = fs.source_tag(mode)
        if key is None:
            nested = _nested_record(fs, registry)
            if nested is not None:
                yield from _bind_nested(target, fs, nested, data, mode, registry, depth)
                continue
            key = fs.name

        values = data.lookup(key)
        if values is None:
            continue

        yield fs.name, _convert_field(fs, values, registry)


def _nested_record(fs: FieldSpec, registry: Mapping[type, Unmarshaler]) -> RecordKind | None:
    """The record kind of an untagged nested field, or None if fs is not one."""
    kind = fs.kind.inner if isinstance(fs.kind, OptionalKind) else fs.kind
    if not isinstance(kind, RecordKind) or find_hook(kind, registry) is not None:
        return None
    return kind


def _bind_nested(
    target: Any,
    fs: FieldSpec,
    kind: RecordKind,
    data: Params,
    mode: str,
    registry: Mapping[type, Unmarshaler],
    depth: int,
) -> Iterator[tuple[str, Any]]:
    owner = type(target).__name__
    current = getattr(target, fs.name)
    allocated = current is None
    if allocated:
        if isinstance(fs.kind, OptionalKind):
            logger.debug("skipping unset optional record %s.%s", owner, fs.name)
            return
        current = zero_value(kind)

    logger.debug("walking nested record %s.%s", owner, fs.name)
    if record_spec(type(current)).frozen:
        rebuilt = _rebuild(current, data, mode, registry, depth + 1)
        if allocated or rebuilt is not current:
            yield fs.name, rebuilt
        return

    if allocated:
        yield fs.name, current
    walk(current, data, mode, registry, depth=depth + 1)


def _convert_field(
    fs: FieldSpec, values: tuple[str, ...], registry: Mapping[type, Unmarshaler]
) -> Any:
    kind = fs.kind
    if isinstance(kind, OptionalKind) and isinstance(kind.inner, SequenceKind):
        kind = kind.inner
    # Sequence subclasses with their own parser are OpaqueKind and take the
    # first value through the hook in _convert_one.
    if isinstance(kind, SequenceKind):
        return kind.container(_convert_one(fs, kind.element, v, registry) for v in values)
    return _convert_one(fs, kind, values[0], registry)


def _convert_one(
    fs: FieldSpec, kind: Kind, token: str, registry: Mapping[type, Unmarshaler]
) -> Any:
    hook = find_hook(kind, registry)
    if hook is not None:
        return apply_hook(hook, token, field=fs.name)
    inner = kind.inner if isinstance(kind, OptionalKind) else kind
    if isinstance(inner, TimeKind):
        return convert_time(token, fs.time, field=fs.name)
    return convert(kind, token, field=fs.name)
