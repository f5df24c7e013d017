"""Public surface for conslist.

Re-exports the list handle, arena, config, errors and diagnostics from the
cons_* packages so callers can `import conslist as cl`.
"""

from cons_core.alloc import ArenaStats, NodeArena
from cons_core.audit import AuditReport, audit_arena, require_audit_ok
from cons_core.config import ArenaConfig, DEFAULT_ARENA_CONFIG, arena_config_from_env
from cons_core.domains import NULL_NODE, NodeId
from cons_core.errors import (
    ConsArenaCorruptError,
    ConsArenaExhaustedError,
    ConsConfigError,
    ConsListReleasedError,
    ConsValidateModeError,
)
from cons_core.guards import DEFAULT_GUARD_CONFIG, GuardConfig
from cons_core.modes import ValidateMode, coerce_validate_mode
from cons_list.handle import List
from cons_list.iterator import Iter
from cons_list.node import Node
from cons_list.render import render, render_debug
from cons_list.teardown import TeardownStats, release_chain
from cons_metrics.metrics import (
    arena_metrics_get,
    arena_metrics_reset,
    arena_sharing_snapshot,
)


def new(arena=None, *, cfg=None) -> List:
    return List.new(arena, cfg=cfg)


__all__ = [
    "ArenaConfig",
    "ArenaStats",
    "AuditReport",
    "ConsArenaCorruptError",
    "ConsArenaExhaustedError",
    "ConsConfigError",
    "ConsListReleasedError",
    "ConsValidateModeError",
    "DEFAULT_ARENA_CONFIG",
    "DEFAULT_GUARD_CONFIG",
    "GuardConfig",
    "Iter",
    "List",
    "NULL_NODE",
    "Node",
    "NodeArena",
    "NodeId",
    "TeardownStats",
    "ValidateMode",
    "arena_config_from_env",
    "arena_metrics_get",
    "arena_metrics_reset",
    "arena_sharing_snapshot",
    "audit_arena",
    "coerce_validate_mode",
    "new",
    "release_chain",
    "render",
    "render_debug",
    "require_audit_ok",
]
