"""Dependency tracking context — who is reading right now.

Two independent slots: the derivation currently computing and the reaction
currently running. Both are contextvars; entering a consumer sets a token and
leaving resets it, so a nested consumer restores the outer one on exit.

A consumer is anything with a ``track(ref)`` method.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterable, Iterator, Protocol

if TYPE_CHECKING:
    from trackfx.field import FieldRef


class Consumer(Protocol):
    def track(self, ref: FieldRef) -> None: ...


# The derivation being computed. Field reads land in its cache entry.
current_derivation: contextvars.ContextVar[Consumer | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# The reaction being run. Field reads land in its dependency set.
current_reaction: contextvars.ContextVar[Consumer | None] = contextvars.ContextVar(
    "current_reaction", default=None
)


def report_read(ref: FieldRef) -> None:
    """Record a field read into every active consumer."""
    derivation = current_derivation.get()
    if derivation is not None:
        derivation.track(ref)
    reaction = current_reaction.get()
    if reaction is not None:
        reaction.track(ref)


def report_reads(refs: Iterable[FieldRef]) -> None:
    if current_derivation.get() is None and current_reaction.get() is None:
        return
    for ref in refs:
        report_read(ref)


@contextmanager
def deriving(consumer: Consumer) -> Iterator[None]:
    """Make consumer the active derivation for the duration of the block."""
    token = current_derivation.set(consumer)
    try:
        yield
    finally:
        current_derivation.reset(token)


@contextmanager
def reacting(consumer: Consumer) -> Iterator[None]:
    """Make consumer the active reaction for the duration of the block."""
    token = current_reaction.set(consumer)
    try:
        yield
    finally:
        current_reaction.reset(token)


@contextmanager
def untracked() -> Iterator[None]:
    """Read fields without recording them into any active consumer."""
    derivation_token = current_derivation.set(None)
    reaction_token = current_reaction.set(None)
    try:
        yield
    finally:
        current_reaction.reset(reaction_token)
        current_derivation.reset(derivation_token)
