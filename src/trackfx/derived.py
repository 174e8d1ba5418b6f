"""Derived fields — memoized values computed from other tracked fields.

A derived field wraps a compute function taking the tracked object. The
first read runs it with the derivation active, so every field it touches is
recorded into the object's cache entry for that name. Later reads return the
cached value until a write to one of those fields invalidates the entry.

Derived fields are lazy — they only recompute when read.
"""

from __future__ import annotations

from typing import Callable

from trackfx._tracking import deriving, report_reads
from trackfx.errors import ConfigurationError
from trackfx.field import FieldRef, check_name


class _Derivation:
    """Tracking consumer that records reads into one cache entry."""

    __slots__ = ("owner", "name")

    def __init__(self, owner, name: str) -> None:
        self.owner = owner
        self.name = name

    def track(self, ref: FieldRef) -> None:
        cache = self.owner._tracked_cache
        if cache.get(self.name) is None:
            cache.add(self.name, [ref])
        else:
            cache.add_dependency(self.name, ref)
        if ref.owner is not self.owner:
            ref.owner._tracked_dependents.setdefault(self.owner, set()).add(self.name)


def _unlink(obj, name: str, entry) -> None:
    """Forget the cross-object links recorded by entry's last compute."""
    if entry is None:
        return
    for ref in entry.dependencies:
        if ref.owner is obj:
            continue
        readers = ref.owner._tracked_dependents.get(obj)
        if readers is not None:
            readers.discard(name)
            if not readers:
                del ref.owner._tracked_dependents[obj]


class DerivedField:
    """Data descriptor serving a derived field from the object's cache."""

    __slots__ = ("name", "compute", "setter")

    def __init__(
        self,
        name: str,
        compute: Callable[[object], object],
        setter: Callable[[object, object], None] | None = None,
    ) -> None:
        self.name = name
        self.compute = compute
        self.setter = setter

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return read_derived(obj, self.name, self.compute)

    def __set__(self, obj, value) -> None:
        if self.setter is None:
            raise AttributeError(f"derived field {self.name!r} is read-only")
        self.setter(obj, value)

    def __repr__(self) -> str:
        return f"DerivedField({self.name!r})"


def read_derived(obj, name: str, compute: Callable[[object], object]) -> object:
    """Return the cached value for name, recomputing it if absent.

    The entry's dependencies are forwarded to any enclosing derivation or
    reaction, on hits as well as recomputes.
    """
    cache = obj._tracked_cache
    entry = cache.get(name)
    if entry is None or not entry.has_value:
        # Dependency set is rediscovered from scratch on every compute.
        _unlink(obj, name, entry)
        cache.add(name, [])
        with deriving(_Derivation(obj, name)):
            value = compute(obj)
        entry = cache.get(name)
        if entry is None:
            cache.add(name, [])
            entry = cache.get(name)
            if entry is None:
                # Cache declined to keep it; serve this value uncached.
                return value
        entry.value = value
    report_reads(entry.dependencies)
    return entry.value


def wrap_derivation(
    obj,
    name: str,
    compute: Callable[[object], object],
    setter: Callable[[object, object], None] | None = None,
) -> None:
    """Install a memoized derived field ``name`` on the tracked object ``obj``.

    Usage:
        point = wrap({"x": 3, "y": 4})
        wrap_derivation(point, "norm", lambda p: (p.x ** 2 + p.y ** 2) ** 0.5)

        point.norm  # 5.0
        point.x = 6
        point.norm  # 7.21..., recomputed
    """
    check_name(obj, name)
    if name in obj._tracked_values:
        raise ConfigurationError(
            f"Derived field {name!r} would shadow an observable field of {type(obj).__name__}"
        )
    _unlink(obj, name, obj._tracked_cache.get(name))
    obj._tracked_cache.remove(name)
    setattr(type(obj), name, DerivedField(name, compute, setter))


def evict(obj, name: str) -> None:
    """Drop the cache entry for name. The next read recomputes it."""
    _unlink(obj, name, obj._tracked_cache.get(name))
    obj._tracked_cache.remove(name)
