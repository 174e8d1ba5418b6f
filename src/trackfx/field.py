"""Observable fields — record attributes that track their readers.

Reading a field inside a derivation or reaction registers a FieldRef edge.
Writing a field invalidates every cached derivation that read it, stores the
value, then re-runs the reactions that read it. All of this happens before
the assignment returns.
"""

from __future__ import annotations

from trackfx._tracking import report_read
from trackfx.errors import ConfigurationError
from trackfx.reaction import dispatch

RESERVED_PREFIX = "_tracked_"


class FieldRef:
    """One field of one tracked object. Equal by object identity and name."""

    __slots__ = ("owner", "name")

    def __init__(self, owner: object, name: str) -> None:
        self.owner = owner
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldRef):
            return NotImplemented
        return self.owner is other.owner and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.owner), self.name))

    def __repr__(self) -> str:
        return f"FieldRef({type(self.owner).__name__}@{id(self.owner):#x}.{self.name})"


class ObservableField:
    """Data descriptor routing attribute access to read_field/write_field."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return read_field(obj, self.name)

    def __set__(self, obj, value) -> None:
        write_field(obj, self.name, value)

    def __delete__(self, obj) -> None:
        raise AttributeError(f"cannot delete tracked field {self.name!r}")

    def __repr__(self) -> str:
        return f"ObservableField({self.name!r})"


def read_field(obj, name: str) -> object:
    """Return the stored value, recording the read into active consumers."""
    report_read(FieldRef(obj, name))
    return obj._tracked_values[name]


def write_field(obj, name: str, value: object) -> None:
    """Invalidate dependents, store value, then dispatch reactions."""
    ref = FieldRef(obj, name)
    obj._tracked_cache.invalidate(ref)
    # Objects whose derivations read this object keep the edge in their own cache.
    for dependent in list(obj._tracked_dependents):
        dependent._tracked_cache.invalidate(ref)
    obj._tracked_values[name] = value
    dispatch(ref)


def check_name(obj, name: object) -> None:
    if not isinstance(name, str):
        raise ConfigurationError(f"Field names must be strings, got {name!r}")
    if (
        name.startswith(RESERVED_PREFIX)
        or (name.startswith("__") and name.endswith("__"))
        # Anything TrackedObject or object already defines.
        or any(name in vars(klass) for klass in type(obj).__mro__[1:])
    ):
        raise ConfigurationError(
            f"Field {name!r} collides with {type(obj).__name__} internals"
        )


def wrap_field(obj, name: str) -> None:
    """Make ``name`` an observable field of the tracked object ``obj``.

    The field must exist in the record ``obj`` was wrapped from.
    """
    check_name(obj, name)
    if name not in obj._tracked_values:
        raise ConfigurationError(
            f"Field {name!r} does not exist on the record wrapped by {type(obj).__name__}"
        )
    setattr(type(obj), name, ObservableField(name))
