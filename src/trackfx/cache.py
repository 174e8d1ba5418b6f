"""Derivation cache store — per-object memo table for derived fields.

Each tracked object owns one cache. An entry maps a derivation name to the
fields it read during its last compute and the value that compute produced.
Invalidation clears the value but keeps the dependency set, so the next read
recomputes and rediscovers.

Any object implementing DerivationCache can be plugged in through
``wrap(source, cache_factory=...)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, Protocol, runtime_checkable

if TYPE_CHECKING:
    from trackfx.field import FieldRef


class _Absent:
    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


# Marks a cache entry whose value must be recomputed. Distinct from every
# real value, falsy ones included.
ABSENT = _Absent()


@dataclass(slots=True)
class CacheEntry:
    """One derivation's dependency set and cached value."""

    dependencies: set = field(default_factory=set)
    value: object = ABSENT

    @property
    def has_value(self) -> bool:
        return self.value is not ABSENT


@runtime_checkable
class DerivationCache(Protocol):
    """Contract every cache implementation satisfies."""

    def get(self, name: str) -> CacheEntry | None: ...

    def add(self, name: str, deps: Iterable[FieldRef]) -> None: ...

    def remove(self, name: str) -> None: ...

    def add_dependency(self, name: str, ref: FieldRef) -> None: ...

    def invalidate(self, ref: FieldRef) -> None: ...


class MapCache:
    """Dict-backed DerivationCache. The default."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get(self, name: str) -> CacheEntry | None:
        return self._entries.get(name)

    def add(self, name: str, deps: Iterable[FieldRef]) -> None:
        """Create (or overwrite) an entry with the given deps and no value."""
        self._entries[name] = CacheEntry(set(deps))

    def remove(self, name: str) -> None:
        self._entries.pop(name, None)

    def add_dependency(self, name: str, ref: FieldRef) -> None:
        entry = self._entries.get(name)
        if entry is not None:
            entry.dependencies.add(ref)

    def invalidate(self, ref: FieldRef) -> None:
        """Clear the value of every entry that read ref. Entries stay."""
        for entry in self._entries.values():
            if ref in entry.dependencies:
                entry.value = ABSENT

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"MapCache({list(self._entries)!r})"
