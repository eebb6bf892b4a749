"""Params — the source data map fed to the struct walker.

Maps a source key to a non-empty, ordered tuple of string values, so the
"first value vs. all values" distinction is explicit at the type level.
Repeated query/form keys keep their arrival order.

Lookup is case-sensitive; resolve() adds the case-insensitive fallback
used by field resolution.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import parse_qsl


@dataclass(frozen=True, slots=True, eq=False)
class Params(Mapping[str, tuple[str, ...]]):
    """Immutable multi-valued parameter map.

    Keys whose value list is empty are dropped at construction, so every
    stored entry has at least one value.

    When several keys lower-case to the same string, the fallback
    picks the lexicographically smallest one, which keeps resolution
    deterministic regardless of insertion order.
    """

    data: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    # Computed fields
    _folded: Mapping[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        cleaned = {k: tuple(v) for k, v in self.data.items() if v}
        object.__setattr__(self, "data", MappingProxyType(cleaned))

        folded: dict[str, str] = {}
        for key in cleaned:
            lowered = key.lower()
            current = folded.get(lowered)
            if current is None or key < current:
                folded[lowered] = key
        object.__setattr__(self, "_folded", MappingProxyType(folded))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> Params:
        """Build from (key, value) pairs, grouping repeated keys in order."""
        grouped: dict[str, list[str]] = {}
        for key, value in pairs:
            grouped.setdefault(key, []).append(value)
        return cls({k: tuple(v) for k, v in grouped.items()})

    @classmethod
    def from_mapping(cls, data: Mapping[str, str | Sequence[str]]) -> Params:
        """Build from a mapping of key to a single value or a value list."""
        if isinstance(data, Params):
            return data
        return cls(
            {
                k: (v,) if isinstance(v, str) else tuple(v)
                for k, v in data.items()
            }
        )

    @classmethod
    def from_query_string(cls, query: str) -> Params:
        """Parse an URL query string (percent-decoded, blank values kept).

        Raises:
            UnicodeDecodeError: percent-escapes do not decode as UTF-8.
        """
        return cls.from_pairs(parse_qsl(query, keep_blank_values=True, errors="strict"))

    def __getitem__(self, key: str) -> tuple[str, ...]:
        return self.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def first(self, key: str) -> str | None:
        """First value for an exact key, or None."""
        values = self.data.get(key)
        return values[0] if values else None

    def resolve(self, key: str) -> str | None:
        """Return the stored key that supplies `key`.

        Exact match first, then a case-insensitive scan. None means the
        field is unresolved and should be skipped.
        """
        if key in self.data:
            return key
        return self._folded.get(key.lower())

    def lookup(self, key: str) -> tuple[str, ...] | None:
        """Values for `key` using the same resolution as resolve()."""
        resolved = self.resolve(key)
        if resolved is None:
            return None
        return self.data[resolved]
