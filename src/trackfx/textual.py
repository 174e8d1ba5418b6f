"""Textual integration for trackfx. Opt-in — requires textual.

Reactions that update widgets go through autorun(app, fn) here. They are
skipped while the app is not running or while a widget swap is in progress,
and NoMatches from widget queries is swallowed. A skipped run stays
subscribed to the fields its last real run read.

// Textual coupling is isolated in this module — core trackfx stays agnostic.
// _paused_apps has a single owner (this module); id present <-> inside pause().
"""

import logging
from contextlib import contextmanager

from textual.css.query import NoMatches

from trackfx.reaction import register_reaction, retain_dependencies

logger = logging.getLogger("trackfx.textual")

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded reactions during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def autorun(app, fn):
    """register_reaction() that safely bridges to Textual widgets."""

    def _guarded():
        if not is_safe(app):
            logger.debug("Skipping %s: app paused or not running", getattr(fn, "__name__", fn))
            retain_dependencies()
            return
        try:
            fn()
        except NoMatches:
            pass

    return register_reaction(_guarded)
