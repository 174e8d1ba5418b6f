"""Tracked objects — the reactive view over a plain record.

wrap() copies the record's field values, resolves its class hierarchy into a
flat schema once, and installs the schema on a class generated for that one
object: an ObservableField per value, a DerivedField per property, and the
record's methods so they run against the tracked view.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import types
import weakref
from collections.abc import Mapping
from typing import Callable

from trackfx.cache import DerivationCache, MapCache
from trackfx.derived import DerivedField, wrap_derivation
from trackfx.errors import ConfigurationError
from trackfx.field import RESERVED_PREFIX, wrap_field

logger = logging.getLogger("trackfx.tracked")

_CARRIED = (
    property,
    functools.cached_property,
    types.FunctionType,
    staticmethod,
    classmethod,
)


class TrackedObject:
    """Base class of every wrapped record.

    Only schema attributes can be assigned; anything else raises
    AttributeError.
    """

    __slots__ = ("_tracked_values", "_tracked_cache", "_tracked_dependents", "__weakref__")

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._tracked_values.items())
        return f"{type(self).__name__}({fields})"


def _slot_names(cls: type) -> list[str]:
    names = []
    for klass in cls.__mro__:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in ("__dict__", "__weakref__"))
    return names


def _field_values(source: object) -> dict:
    """Shallow copy of the record's field values."""
    if isinstance(source, Mapping):
        return dict(source)
    if isinstance(source, type):
        raise ConfigurationError(f"Cannot wrap a class ({source.__name__}); wrap an instance")
    if dataclasses.is_dataclass(source):
        return {
            f.name: getattr(source, f.name)
            for f in dataclasses.fields(source)
            if hasattr(source, f.name)
        }

    values = {}
    for name in _slot_names(type(source)):
        if hasattr(source, name):
            values[name] = getattr(source, name)
    if hasattr(source, "__dict__"):
        values.update(vars(source))
    elif not values:
        raise ConfigurationError(
            f"Cannot wrap {type(source).__name__}: it has no fields to track"
        )
    return values


def _flatten_members(cls: type) -> dict[str, object]:
    """Class attributes to carry over, nearest class in the MRO winning."""
    members: dict[str, object] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name.startswith("__") and name.endswith("__"):
                continue
            if isinstance(member, _CARRIED):
                members[name] = member
            else:
                # Plain attribute in a nearer class hides anything inherited.
                members.pop(name, None)
    return members


def wrap(
    source: object,
    cache_factory: Callable[[], DerivationCache] = MapCache,
    *,
    derived: Mapping[str, Callable[[object], object]] | None = None,
) -> TrackedObject:
    """Return a tracked view of source.

    Every field value becomes an observable field. Properties found anywhere
    in the source's class hierarchy (and any extra ``derived`` functions)
    become memoized derived fields. The source itself is never mutated.

    Usage:
        cart = wrap({"price": 10, "qty": 2}, derived={"total": lambda c: c.price * c.qty})
        cart.total  # 20
        cart.qty = 3
        cart.total  # 30
    """
    values = _field_values(source)
    cache = cache_factory()
    if not isinstance(cache, DerivationCache):
        raise ConfigurationError(
            f"cache_factory returned {type(cache).__name__}, which is not a DerivationCache"
        )

    source_name = type(source).__name__
    cls_name = f"Tracked{source_name[:1].upper()}{source_name[1:]}"
    cls = type(cls_name, (TrackedObject,), {"__slots__": ()})
    obj = cls()
    obj._tracked_values = values
    obj._tracked_cache = cache
    obj._tracked_dependents = weakref.WeakKeyDictionary()

    for name in values:
        wrap_field(obj, name)

    n_derived = 0
    if not isinstance(source, Mapping):
        for name, member in _flatten_members(type(source)).items():
            if name in values or name.startswith(RESERVED_PREFIX):
                continue
            if isinstance(member, property):
                if member.fget is not None:
                    wrap_derivation(obj, name, member.fget, member.fset)
                    n_derived += 1
            elif isinstance(member, functools.cached_property):
                wrap_derivation(obj, name, member.func)
                n_derived += 1
            else:
                setattr(cls, name, member)

    for name, compute in (derived or {}).items():
        wrap_derivation(obj, name, compute)
        n_derived += 1

    logger.debug(
        "Wrapped %s: %d field(s), %d derived", type(source).__name__, len(values), n_derived
    )
    return obj


def cache_of(obj: TrackedObject) -> DerivationCache:
    """The derivation cache owned by obj."""
    return obj._tracked_cache


def snapshot(obj: TrackedObject) -> dict:
    """Current field values, read without tracking."""
    return dict(obj._tracked_values)


def derived_fields(obj: TrackedObject) -> list[str]:
    """Names of the derived fields installed on obj."""
    return [name for name, member in vars(type(obj)).items() if isinstance(member, DerivedField)]
