"""Custom-unmarshal hook resolution.

A field type takes over its own string parsing in one of two ways:

1. It is registered on the BinderBuilder (typed registry lookup), for
   types the caller does not own (UUID, Decimal, ...).
2. It implements the ParamUnmarshaler protocol (a from_param classmethod).

Registry entries win. OptionalKind is unwrapped first, so `T | None`
resolves to T's hook and the converted value fills the unset storage.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from parambind._errors import CustomUnmarshalError
from parambind._kinds import OptionalKind, SequenceKind
from parambind._types import ParamUnmarshaler

if TYPE_CHECKING:
    from parambind._kinds import Kind
    from parambind._types import Unmarshaler


def find_hook(kind: Kind, registry: Mapping[type, Unmarshaler]) -> Unmarshaler | None:
    """Return the parse-from-string hook for a field kind, or None."""
    if isinstance(kind, OptionalKind):
        return find_hook(kind.inner, registry)
    if isinstance(kind, SequenceKind):
        return None

    tp = kind.py_type
    hook = registry.get(tp)
    if hook is not None:
        return hook
    if isinstance(tp, type) and issubclass(tp, ParamUnmarshaler):
        return tp.from_param
    return None


def apply_hook(hook: Unmarshaler, token: str, *, field: str | None = None) -> Any:
    """Run a hook on a raw token.

    Raises:
        CustomUnmarshalError: the hook raised; the original exception is
            chained and kept as ``cause``.
    """
    try:
        return hook(token)
    except Exception as e:
        raise CustomUnmarshalError(field, token, e) from e
