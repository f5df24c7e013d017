from __future__ import annotations

import os
from dataclasses import dataclass

from cons_core.errors import ConsConfigError
from cons_core.guards import GuardConfig


@dataclass(frozen=True, slots=True)
class ArenaConfig:
    """NodeArena DI bundle.

    initial_capacity counts the reserved null row, so an arena created with
    capacity N can hold N - 1 nodes before it grows. max_capacity=None lets
    the arena double without bound.
    """

    initial_capacity: int = 64
    max_capacity: int | None = None
    guard_cfg: GuardConfig | None = None

    def __post_init__(self):
        if self.initial_capacity < 2:
            raise ConsConfigError(
                "initial_capacity must be >= 2", name="initial_capacity"
            )
        if self.max_capacity is not None and self.max_capacity < self.initial_capacity:
            raise ConsConfigError(
                "max_capacity must be >= initial_capacity", name="max_capacity"
            )


DEFAULT_ARENA_CONFIG = ArenaConfig()


def _env_int(name: str) -> int | None:
    value = os.environ.get(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConsConfigError(f"{name} must be an integer", name=name) from None


def arena_config_from_env(
    base: ArenaConfig = DEFAULT_ARENA_CONFIG,
) -> ArenaConfig:
    """Overlay CONS_ARENA_CAPACITY / CONS_ARENA_MAX_CAPACITY onto `base`."""
    capacity = _env_int("CONS_ARENA_CAPACITY")
    max_capacity = _env_int("CONS_ARENA_MAX_CAPACITY")
    if capacity is None and max_capacity is None:
        return base
    return ArenaConfig(
        initial_capacity=base.initial_capacity if capacity is None else capacity,
        max_capacity=base.max_capacity if max_capacity is None else max_capacity,
        guard_cfg=base.guard_cfg,
    )


__all__ = [
    "ArenaConfig",
    "DEFAULT_ARENA_CONFIG",
    "arena_config_from_env",
]
