"""Reactions — side effects re-run whenever a field they read is written.

register_reaction(fn) runs fn immediately with fn as the active reaction;
every field it reads joins its dependency set. When one of those fields is
written, dispatch() re-runs fn, which rediscovers its dependencies from
scratch. A branch not taken on the latest run is no longer a dependency.

Registry state lives in _anchor: reaction body -> ReactionEntry, plus an
inverted index FieldRef -> entries so a write only looks at the reactions
that actually read the written field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from trackfx import _anchor
from trackfx._tracking import current_reaction, reacting
from trackfx.config import get_config
from trackfx.errors import UnboundedReactionRecursion

if TYPE_CHECKING:
    from trackfx.field import FieldRef

logger = logging.getLogger("trackfx.reaction")


@dataclass(eq=False, slots=True)
class ReactionEntry:
    """Registry record for one reaction body."""

    body: Callable[[], object]
    seq: int
    dependencies: set = field(default_factory=set)
    previous: frozenset = frozenset()
    depth: int = 0
    disposed: bool = False

    def track(self, ref: FieldRef) -> None:
        if self.disposed:
            return
        if ref not in self.dependencies:
            self.dependencies.add(ref)
            _anchor.subscribers.setdefault(ref, set()).add(self)


class Reaction:
    """Handle returned by register_reaction. Call .dispose() to stop it."""

    __slots__ = ("_entry",)

    def __init__(self, entry: ReactionEntry) -> None:
        self._entry = entry

    @property
    def dependencies(self) -> frozenset:
        """Fields read during the most recent run."""
        return frozenset(self._entry.dependencies)

    @property
    def disposed(self) -> bool:
        return self._entry.disposed

    def dispose(self) -> None:
        """Stop this reaction. It is removed from the registry."""
        entry = self._entry
        entry.disposed = True
        _clear_dependencies(entry)
        if _anchor.reactions.get(entry.body) is entry:
            del _anchor.reactions[entry.body]

    def __repr__(self) -> str:
        state = "disposed" if self._entry.disposed else "active"
        name = getattr(self._entry.body, "__name__", repr(self._entry.body))
        return f"Reaction({name}, {state})"


def _clear_dependencies(entry: ReactionEntry) -> None:
    for ref in entry.dependencies:
        subscribed = _anchor.subscribers.get(ref)
        if subscribed is not None:
            subscribed.discard(entry)
            if not subscribed:
                del _anchor.subscribers[ref]
    entry.dependencies = set()


def _run(entry: ReactionEntry) -> None:
    """Run the body with a fresh dependency set."""
    if entry.disposed:
        return

    # A cycle through several reactions grows the stack without any single
    # entry getting deep, so the ceiling also applies to all runs combined.
    depth = max(entry.depth, _anchor.run_depth)
    if depth >= get_config().max_reaction_depth:
        logger.warning(
            "Reaction %s re-entered %d deep; aborting the write that triggered it",
            getattr(entry.body, "__qualname__", entry.body), depth,
        )
        raise UnboundedReactionRecursion(entry.body, depth)

    entry.previous = frozenset(entry.dependencies)
    _clear_dependencies(entry)

    entry.depth += 1
    _anchor.run_depth += 1
    try:
        with reacting(entry):
            entry.body()
    finally:
        _anchor.run_depth -= 1
        entry.depth -= 1


def dispatch(ref: FieldRef) -> None:
    """Re-run, in registration order, every reaction that read ref."""
    subscribed = _anchor.subscribers.get(ref)
    if not subscribed:
        return

    entries = sorted(subscribed, key=lambda e: e.seq)
    logger.debug("Dispatching %r to %d reaction(s)", ref, len(entries))
    for entry in entries:
        # An earlier re-run in this loop may have disposed or re-subscribed it.
        if entry.disposed or ref not in entry.dependencies:
            continue
        _run(entry)


def register_reaction(fn: Callable[[], object]) -> Reaction:
    """Run fn immediately, then re-run it whenever a field it read is written.

    Registering the same callable again re-runs it and keeps its place in
    dispatch order. Returns the Reaction (call .dispose() to stop).

    Usage:
        counter = wrap({"count": 0})
        log = []

        r = register_reaction(lambda: log.append(counter.count))
        # log == [0] — ran immediately

        counter.count = 1
        # log == [0, 1] — re-ran because count changed

        r.dispose()
        counter.count = 2
        # log == [0, 1] — stopped
    """
    entry = _anchor.reactions.get(fn)
    if entry is None:
        entry = ReactionEntry(fn, _anchor.next_seq())
        _anchor.reactions[fn] = entry
    _run(entry)
    return Reaction(entry)


autorun = register_reaction


def retain_dependencies() -> None:
    """Keep the running reaction subscribed to what its previous run read.

    For reactions that decide to skip their body on this run but must still
    fire on the next relevant write. No-op outside a reaction.
    """
    entry = current_reaction.get()
    if entry is None:
        return
    for ref in entry.previous:
        entry.track(ref)
