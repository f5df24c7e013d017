import os

import numpy as np

_arena_metrics_allocs = 0
_arena_metrics_frees = 0
_arena_metrics_teardowns = 0
_arena_metrics_teardown_shared_stops = 0


def _arena_metrics_enabled():
    value = os.environ.get("CONS_ARENA_METRICS", "").strip().lower()
    return value in ("1", "true", "yes", "on")


def arena_metrics_reset():
    global _arena_metrics_allocs
    global _arena_metrics_frees
    global _arena_metrics_teardowns
    global _arena_metrics_teardown_shared_stops
    _arena_metrics_allocs = 0
    _arena_metrics_frees = 0
    _arena_metrics_teardowns = 0
    _arena_metrics_teardown_shared_stops = 0


def arena_metrics_get():
    if not _arena_metrics_enabled():
        return {
            "allocs": 0,
            "frees": 0,
            "teardowns": 0,
            "teardown_shared_stops": 0,
            "shared_stop_rate": 0.0,
        }
    teardowns = int(_arena_metrics_teardowns)
    shared_stops = int(_arena_metrics_teardown_shared_stops)
    rate = (shared_stops / teardowns) if teardowns else 0.0
    return {
        "allocs": int(_arena_metrics_allocs),
        "frees": int(_arena_metrics_frees),
        "teardowns": teardowns,
        "teardown_shared_stops": shared_stops,
        "shared_stop_rate": float(rate),
    }


def _alloc_metrics_update(count=1):
    global _arena_metrics_allocs
    if not _arena_metrics_enabled():
        return
    _arena_metrics_allocs += int(count)


def _teardown_metrics_update(freed, stopped_shared):
    global _arena_metrics_frees
    global _arena_metrics_teardowns
    global _arena_metrics_teardown_shared_stops
    if not _arena_metrics_enabled():
        return
    _arena_metrics_teardowns += 1
    _arena_metrics_frees += int(freed)
    if stopped_shared:
        _arena_metrics_teardown_shared_stops += 1


def arena_sharing_snapshot(arena):
    """Summarize how much of an arena is structurally shared.

    A slot is shared when more than one owner (list head or `next` link)
    holds it. Row 0 is the null sentinel and is skipped.
    """
    capacity = int(arena.capacity)
    refcount = np.asarray(arena.refcount[1:capacity])
    live_mask = refcount > 0
    live = int(live_mask.sum())
    if live == 0:
        return {
            "live": 0,
            "shared": 0,
            "max_refcount": 0,
            "sharing_rate": 0.0,
        }
    shared = int((refcount > 1).sum())
    return {
        "live": live,
        "shared": shared,
        "max_refcount": int(refcount.max()),
        "sharing_rate": float(shared / live),
    }


__all__ = [
    "arena_metrics_reset",
    "arena_metrics_get",
    "arena_sharing_snapshot",
    "_arena_metrics_enabled",
    "_alloc_metrics_update",
    "_teardown_metrics_update",
]
