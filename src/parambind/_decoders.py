"""Structured document decoders (JSON, XML).

Both decoders turn the document into a plain dict keyed by field name and
validate each present field against its annotation with a pydantic
``TypeAdapter``. Only fields present in the document are assigned; the
rest of the target keeps its current values.

JSON values are validated in pydantic's strict JSON mode, so a quoted
number or a non-boolean string is a type mismatch. XML text carries no
types of its own and is validated in lax mode ("42" is an int).

Key matching follows the usual JSON convention: the field's "json" tag or
its name, exact first, then case-insensitive. XML matches element (or
attribute) names exactly, using the "xml" tag when present.

Failures surface as DecodeError:

| Source                        | DecodeErrorKind | Preserved            |
|-------------------------------|-----------------|----------------------|
| json.JSONDecodeError          | SYNTAX          | byte offset          |
| xml ParseError                | SYNTAX          | line                 |
| pydantic ValidationError      | TYPE_MISMATCH   | field, types, value  |
| unsupported field annotation  | OTHER           | field                |
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from parambind._convert import zero_value
from parambind._errors import DecodeError, DecodeErrorKind
from parambind._fields import record_spec, target_spec
from parambind._kinds import (
    BoolKind,
    FloatKind,
    IntKind,
    OptionalKind,
    RecordKind,
    SequenceKind,
    StrKind,
    describe,
)

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from parambind._fields import FieldSpec, RecordSpec
    from parambind._kinds import Kind

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[type, str] = {
    dict: "object",
    list: "array",
    str: "string",
    int: "number",
    float: "number",
    bool: "bool",
    type(None): "null",
}

_ADAPTERS: dict[tuple[type, str], TypeAdapter[Any]] = {}


# ═══════════════════════════════════════════════════════════════════════════════
# JSON
# ═══════════════════════════════════════════════════════════════════════════════


def decode_json(body: bytes, target: Any) -> None:
    """Decode a JSON object into `target` in place.

    A top-level ``null`` leaves the target untouched.

    Raises:
        DecodeError: syntax error, non-object document or field type mismatch
        NotARecordError: target is not a mutable dataclass instance
    """
    spec = target_spec(target)
    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        raise DecodeError(DecodeErrorKind.SYNTAX, e.msg, offset=e.pos) from e
    except UnicodeDecodeError as e:
        raise DecodeError(DecodeErrorKind.SYNTAX, e.reason, offset=e.start) from e

    if document is None:
        return
    if not isinstance(document, dict):
        raise DecodeError(
            DecodeErrorKind.TYPE_MISMATCH,
            "document is not an object",
            expected_type=spec.py_type.__qualname__,
            actual_value=_json_type(document),
            offset=0,
        )
    _assign(target, spec, _pick_json(document, spec), from_json=True)


def _pick_json(document: dict[str, Any], spec: RecordSpec) -> dict[str, Any]:
    folded: dict[str, str] = {}
    for key in sorted(document):
        folded.setdefault(key.lower(), key)

    picked: dict[str, Any] = {}
    for fs in spec.fields:
        name = fs.source_tag("json") or fs.name
        key = name if name in document else folded.get(name.lower())
        if key is not None:
            picked[fs.name] = _reshape_json(document[key], fs.kind)
    return picked


def _reshape_json(value: Any, kind: Kind) -> Any:
    """Apply field-name matching to nested records."""
    match kind:
        case OptionalKind(inner=inner):
            return _reshape_json(value, inner)
        case RecordKind(py_type=tp) if isinstance(value, dict):
            return _pick_json(value, record_spec(tp))
        case SequenceKind(element=element) if isinstance(value, list):
            return [_reshape_json(v, element) for v in value]
    return value


def _json_type(value: Any) -> str:
    return _JSON_TYPES.get(type(value), type(value).__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# XML
# ═══════════════════════════════════════════════════════════════════════════════


def decode_xml(body: bytes, target: Any) -> None:
    """Decode an XML document into `target` in place.

    The root element stands for the target; child elements (or attributes)
    supply fields. Repeated elements fill sequence fields in document order;
    for other fields the last occurrence wins.

    Raises:
        DecodeError: syntax error or field type mismatch
        NotARecordError: target is not a mutable dataclass instance
    """
    spec = target_spec(target)
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as e:
        line, _column = e.position
        raise DecodeError(DecodeErrorKind.SYNTAX, str(e), line=line) from e
    _assign(target, spec, _pick_xml(root, spec), from_json=False)


def _pick_xml(element: Element, spec: RecordSpec) -> dict[str, Any]:
    picked: dict[str, Any] = {}
    for fs in spec.fields:
        name = fs.source_tag("xml") or fs.name
        kind = fs.kind.inner if isinstance(fs.kind, OptionalKind) else fs.kind
        children = [child for child in element if child.tag == name]

        if isinstance(kind, SequenceKind):
            if children:
                picked[fs.name] = [_xml_value(c, kind.element) for c in children]
        elif children:
            picked[fs.name] = _xml_value(children[-1], kind)
        elif name in element.attrib:
            picked[fs.name] = _text_value(element.attrib[name], kind)
    return picked


def _xml_value(element: Element, kind: Kind) -> Any:
    if isinstance(kind, OptionalKind):
        kind = kind.inner
    if isinstance(kind, RecordKind):
        return _pick_xml(element, record_spec(kind.py_type))
    return _text_value(element.text or "", kind)


def _text_value(text: str, kind: Kind) -> Any:
    if isinstance(kind, StrKind):
        return text
    text = text.strip()
    if text == "" and isinstance(kind, IntKind | FloatKind | BoolKind):
        return zero_value(kind)
    return text


# ═══════════════════════════════════════════════════════════════════════════════
# Field validation
# ═══════════════════════════════════════════════════════════════════════════════


def _assign(target: Any, spec: RecordSpec, picked: dict[str, Any], *, from_json: bool) -> None:
    """Validate every picked field, then assign them all.

    Nothing is assigned unless every present field validates.
    """
    fields = {fs.name: fs for fs in spec.fields}
    decoded = {
        name: _validate(spec.py_type, fields[name], value, from_json=from_json)
        for name, value in picked.items()
    }
    logger.debug("decoded %d field(s) into %s", len(decoded), spec.py_type.__name__)
    for name, value in decoded.items():
        setattr(target, name, value)


def _validate(tp: type, fs: FieldSpec, value: Any, *, from_json: bool) -> Any:
    adapter = _adapter(tp, fs)
    try:
        if from_json:
            return adapter.validate_json(json.dumps(value), strict=True)
        return adapter.validate_python(value)
    except ValidationError as e:
        first = e.errors()[0]
        loc = tuple(first["loc"])
        raise DecodeError(
            DecodeErrorKind.TYPE_MISMATCH,
            first["msg"],
            expected_type=_expected_type(fs.kind, loc) or first["type"],
            actual_value=_json_type(first["input"]),
            field=".".join(str(part) for part in (fs.name, *loc)),
        ) from e


def _expected_type(kind: Kind, loc: tuple[int | str, ...]) -> str | None:
    """Name of the kind at an error location inside a field, if it resolves."""
    for part in loc:
        if isinstance(kind, OptionalKind):
            kind = kind.inner
        match kind:
            case SequenceKind(element=element) if isinstance(part, int):
                kind = element
            case RecordKind(py_type=tp) if isinstance(part, str):
                nested = {f.name: f.kind for f in record_spec(tp).fields}
                if part not in nested:
                    return None
                kind = nested[part]
            case _:
                return None
    return describe(kind)


def _adapter(tp: type, fs: FieldSpec) -> TypeAdapter[Any]:
    key = (tp, fs.name)
    adapter = _ADAPTERS.get(key)
    if adapter is None:
        try:
            built = TypeAdapter(fs.annotation)
        except PydanticSchemaGenerationError as e:
            msg = f"field {fs.name!r}: no structured decoding for {describe(fs.kind)}"
            raise DecodeError(DecodeErrorKind.OTHER, msg, field=fs.name) from e
        adapter = _ADAPTERS.setdefault(key, built)
    return adapter
