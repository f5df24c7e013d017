from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional

from cons_core.domains import NULL_NODE
from cons_core.errors import ConsArenaCorruptError

_TRUTHY = ("1", "true", "yes", "on")

TEST_GUARDS = os.environ.get("CONS_TEST_GUARDS", "").strip().lower() in _TRUTHY


def _guards_enabled():
    return TEST_GUARDS


@dataclass(frozen=True, slots=True)
class GuardConfig:
    """Guard DI bundle (host-side control surface)."""

    guards_enabled_fn: Optional[Callable[[], bool]] = None
    guard_live_fn: Optional[Callable[..., None]] = None


DEFAULT_GUARD_CONFIG = GuardConfig()


def guards_enabled_cfg(*, cfg: GuardConfig = DEFAULT_GUARD_CONFIG) -> bool:
    fn = cfg.guards_enabled_fn or _guards_enabled
    return bool(fn())


def _guard_live(refcount, capacity, node, label):
    node = int(node)
    if node == NULL_NODE or node >= capacity:
        raise ConsArenaCorruptError(
            f"guard failed: {label} id out of range", node=node, context=label
        )
    if int(refcount[node]) <= 0:
        raise ConsArenaCorruptError(
            f"guard failed: {label} on free slot", node=node, context=label
        )


def guard_live_cfg(
    refcount,
    capacity,
    node,
    label,
    *,
    cfg: GuardConfig = DEFAULT_GUARD_CONFIG,
):
    """Raise if `node` is not an allocated slot (no-op unless guards are on)."""
    if not guards_enabled_cfg(cfg=cfg):
        return
    fn = cfg.guard_live_fn or _guard_live
    fn(refcount, capacity, node, label)


__all__ = [
    "TEST_GUARDS",
    "GuardConfig",
    "DEFAULT_GUARD_CONFIG",
    "guards_enabled_cfg",
    "guard_live_cfg",
]
