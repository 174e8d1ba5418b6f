"""TrackFX error hierarchy.

All trackfx-specific errors inherit from TrackFXError for easy catching.
"""

from __future__ import annotations


class TrackFXError(Exception):
    """Base error for all trackfx operations."""


class ConfigurationError(TrackFXError):
    """A tracked object or the engine was set up with an invalid definition.

    Raised at wrap/definition time, before any read or write happens.
    """


class UnboundedReactionRecursion(TrackFXError):
    """Reactions kept re-triggering themselves, directly or through a cycle."""

    def __init__(self, reaction, depth: int) -> None:
        self.reaction = reaction
        self.depth = depth
        name = getattr(reaction, "__qualname__", repr(reaction))
        super().__init__(
            f"Reaction {name} hit reaction depth {depth}; "
            "writes keep re-triggering reactions"
        )
