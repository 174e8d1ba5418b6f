"""Data anchor — plain Python structures that hold the reaction registry.

Behavior lives in trackfx.reaction; this module only owns the state so the
registry is a single process-wide table.
"""

import itertools

# reaction body -> ReactionEntry, in registration order
reactions: dict = {}

# FieldRef -> set of reaction bodies whose dependency set contains it
subscribers: dict = {}

# Registration order. itertools.count is thread-safe (C-level GIL atomic)
_seq_counter = itertools.count(1)


def next_seq() -> int:
    return next(_seq_counter)

# Reaction runs currently on the call stack, across all reactions
run_depth: int = 0
