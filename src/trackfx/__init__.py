"""TrackFX: dependency-tracking reactive views over plain Python records."""

from importlib.metadata import version as _version

__version__ = _version("trackfx")

from trackfx._tracking import untracked
from trackfx.cache import ABSENT, CacheEntry, DerivationCache, MapCache
from trackfx.config import TrackingConfig, configure, get_config
from trackfx.derived import evict, wrap_derivation
from trackfx.errors import ConfigurationError, TrackFXError, UnboundedReactionRecursion
from trackfx.field import FieldRef, wrap_field
from trackfx.reaction import Reaction, autorun, register_reaction, retain_dependencies
from trackfx.tracked import TrackedObject, cache_of, derived_fields, snapshot, wrap
# textual bridge NOT auto-imported — opt-in only

__all__ = [
    "wrap",
    "wrap_field",
    "wrap_derivation",
    "evict",
    "cache_of",
    "snapshot",
    "derived_fields",
    "untracked",
    "TrackedObject",
    "FieldRef",
    "CacheEntry",
    "DerivationCache",
    "MapCache",
    "ABSENT",
    "register_reaction",
    "autorun",
    "Reaction",
    "retain_dependencies",
    "TrackingConfig",
    "configure",
    "get_config",
    "TrackFXError",
    "ConfigurationError",
    "UnboundedReactionRecursion",
]
