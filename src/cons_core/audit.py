"""Whole-arena reference count audit.

Recomputes every slot's owner count from first principles (one per `next`
link out of a live slot, one per live list head) and compares it to the
stored counts. The audit is only exact when `lists` holds every live handle
on the arena; handles left out show up as mismatches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import jax
import jax.numpy as jnp

from cons_core.domains import NULL_NODE
from cons_core.errors import ConsArenaCorruptError
from cons_core.modes import ValidateMode, coerce_validate_mode


@dataclass(frozen=True, slots=True)
class AuditReport:
    live: int
    mismatched: int
    leaked: int
    dangling: int

    @property
    def ok(self) -> bool:
        return self.mismatched == 0 and self.leaked == 0 and self.dangling == 0


def _host_int(value) -> int:
    return int(jax.device_get(value))


def _expected_counts(next_arr, live, roots, capacity):
    # Links out of free slots are zero and land on the null row.
    links = jnp.where(live, next_arr, NULL_NODE)
    expected = jnp.zeros((capacity,), dtype=jnp.int32)
    expected = expected.at[links].add(1)
    expected = expected.at[roots].add(1)
    return expected.at[NULL_NODE].set(0)


def audit_arena(arena, lists: Iterable = ()) -> AuditReport:
    """Check stored counts against counts derived from links and `lists`."""
    capacity = int(arena.capacity)
    refcount = jnp.asarray(arena.refcount, dtype=jnp.int32)
    next_arr = jnp.asarray(arena.next, dtype=jnp.int32)
    roots = jnp.asarray(
        [int(lst.head_id) for lst in lists if not lst.released],
        dtype=jnp.int32,
    )
    live = refcount > 0
    expected = _expected_counts(next_arr, live, roots, capacity)
    body = jnp.arange(capacity) != NULL_NODE
    mismatched = body & live & (expected != refcount)
    leaked = body & live & (expected == 0)
    dangling = body & (~live) & (expected > 0)
    return AuditReport(
        live=_host_int(jnp.sum(live & body)),
        mismatched=_host_int(jnp.sum(mismatched)),
        leaked=_host_int(jnp.sum(leaked)),
        dangling=_host_int(jnp.sum(dangling)),
    )


def require_audit_ok(
    arena,
    lists: Iterable = (),
    *,
    validate_mode: ValidateMode | str | None = ValidateMode.STRICT,
    context: str | None = None,
) -> AuditReport | None:
    """Run the audit under STRICT mode and raise on any violation."""
    validate_mode = coerce_validate_mode(validate_mode, context=context)
    if validate_mode == ValidateMode.NONE:
        return None
    report = audit_arena(arena, lists)
    if not report.ok:
        raise ConsArenaCorruptError(
            "arena audit failed: "
            f"mismatched={report.mismatched} leaked={report.leaked} "
            f"dangling={report.dangling}",
            context=context,
        )
    return report


__all__ = [
    "AuditReport",
    "audit_arena",
    "require_audit_ok",
]
