"""Engine configuration.

TrackingConfig is frozen; configure() swaps in a new process-wide instance.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from trackfx.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class TrackingConfig:
    """Configuration for the tracking engine.

    Attributes:
        max_reaction_depth: How many reaction runs may be nested on one call
            stack, per reaction and across all reactions, before
            UnboundedReactionRecursion is raised.

    """

    max_reaction_depth: int = 50

    def __post_init__(self) -> None:
        if not isinstance(self.max_reaction_depth, int) or self.max_reaction_depth < 1:
            raise ConfigurationError(
                f"max_reaction_depth must be a positive int, got {self.max_reaction_depth!r}"
            )


_config = TrackingConfig()


def get_config() -> TrackingConfig:
    """The configuration currently in effect."""
    return _config


def configure(**changes) -> TrackingConfig:
    """Replace the process-wide configuration. Returns the new config.

    Usage:
        trackfx.configure(max_reaction_depth=10)
    """
    global _config
    try:
        _config = dataclasses.replace(_config, **changes)
    except TypeError as exc:
        raise ConfigurationError(str(exc)) from exc
    return _config
