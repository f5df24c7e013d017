"""Iterative release of a list's ownership of its chain.

Releasing a head the naive way recurses: the slot frees its `next`, which
frees its `next`, and so on. Here the walk carries the one share it owns
from slot to slot, detaching each `next` before freeing the slot, and stops
at the first slot some other owner still holds.
"""

from __future__ import annotations

from typing import NamedTuple

from cons_core.alloc import NodeArena
from cons_core.domains import NULL_NODE, NodeId
from cons_metrics.metrics import _teardown_metrics_update


class TeardownStats(NamedTuple):
    freed: int
    stopped_shared: bool


def release_chain(arena: NodeArena, head: NodeId) -> TeardownStats:
    """Release one share of `head` and free every slot that drops to zero."""
    freed = 0
    stopped_shared = False
    cur = head
    while cur != NULL_NODE:
        if not arena.is_unique(cur):
            arena.release_shared(cur)
            stopped_shared = True
            break
        nxt = arena.take_next(cur)
        arena.free(cur)
        freed += 1
        cur = nxt
    _teardown_metrics_update(freed, stopped_shared)
    return TeardownStats(freed=freed, stopped_shared=stopped_shared)


__all__ = [
    "TeardownStats",
    "release_chain",
]
