"""Host-side node arena backing shared cons cells.

Slots are rows of three parallel columns:
  elems[i]     element object owned by slot i
  next[i]      id of the next slot (NULL_NODE at the end of a chain)
  refcount[i]  owners of slot i (list heads plus `next` links of live slots)

Row 0 is reserved for NULL_NODE and is never handed out. Free rows live on
`free_stack[:free_top]`; allocation pops from the top and freeing pushes back.
When the stack is empty the arena doubles, up to ArenaConfig.max_capacity.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple

import numpy as np

from cons_core.config import ArenaConfig, arena_config_from_env
from cons_core.domains import NULL_NODE, RESERVED_NODE, NodeId
from cons_core.errors import ConsArenaCorruptError, ConsArenaExhaustedError
from cons_core.guards import DEFAULT_GUARD_CONFIG, guard_live_cfg
from cons_list.node import Node
from cons_metrics.metrics import _alloc_metrics_update

_INDEX_DTYPE = np.int64


class ArenaStats(NamedTuple):
    capacity: int
    live_count: int
    free_count: int
    total_allocs: int
    total_frees: int


def _free_stack_for(start: int, stop: int, capacity: int) -> np.ndarray:
    # Highest id at the bottom so the lowest free id is popped first.
    stack = np.zeros(capacity, dtype=_INDEX_DTYPE)
    stack[: stop - start] = np.arange(stop - 1, start - 1, -1, dtype=_INDEX_DTYPE)
    return stack


class NodeArena:
    """Reference-counted slot storage shared by every list derived from it.

    Not thread-safe: counts are plain integers updated without locking.
    """

    def __init__(self, cfg: ArenaConfig | None = None):
        if cfg is None:
            cfg = arena_config_from_env()
        self.cfg = cfg
        self._guard_cfg = cfg.guard_cfg or DEFAULT_GUARD_CONFIG
        capacity = int(cfg.initial_capacity)
        self.elems: list = [None] * capacity
        self.next = np.zeros(capacity, dtype=_INDEX_DTYPE)
        self.refcount = np.zeros(capacity, dtype=_INDEX_DTYPE)
        self.free_stack = _free_stack_for(RESERVED_NODE + 1, capacity, capacity)
        self.free_top = capacity - 1
        self.live_count = 0
        self.total_allocs = 0
        self.total_frees = 0

    @property
    def capacity(self) -> int:
        return len(self.elems)

    def stats(self) -> ArenaStats:
        return ArenaStats(
            capacity=self.capacity,
            live_count=self.live_count,
            free_count=self.free_top,
            total_allocs=self.total_allocs,
            total_frees=self.total_frees,
        )

    def _grow(self) -> None:
        old = self.capacity
        new = old * 2
        max_capacity = self.cfg.max_capacity
        if max_capacity is not None:
            new = min(new, int(max_capacity))
        if new <= old:
            raise ConsArenaExhaustedError(capacity=old, max_capacity=int(max_capacity))
        self.elems.extend([None] * (new - old))
        self.next = np.concatenate([self.next, np.zeros(new - old, dtype=_INDEX_DTYPE)])
        self.refcount = np.concatenate(
            [self.refcount, np.zeros(new - old, dtype=_INDEX_DTYPE)]
        )
        stack = _free_stack_for(old, new, new)
        # Finalizers run by the cyclic GC during the copies above may have
        # pushed slots already; they stay on top of the new rows.
        pending = self.free_stack[: self.free_top]
        base = new - old
        stack[base : base + len(pending)] = pending
        self.free_stack = stack
        self.free_top = base + len(pending)

    def _guard(self, node: NodeId, label: str) -> None:
        guard_live_cfg(self.refcount, self.capacity, node, label, cfg=self._guard_cfg)

    def alloc(self, elem, next_node: NodeId = NULL_NODE) -> NodeId:
        """Allocate a slot owning `elem` and a new share of `next_node`.

        The returned id carries one count, owned by the caller.
        """
        if next_node != NULL_NODE:
            self.retain(next_node)
        if self.free_top == 0:
            try:
                self._grow()
            except ConsArenaExhaustedError:
                if next_node != NULL_NODE:
                    self.refcount[next_node] -= 1
                raise
        self.free_top -= 1
        node = NodeId(int(self.free_stack[self.free_top]))
        self.elems[node] = elem
        self.next[node] = next_node
        self.refcount[node] = 1
        self.live_count += 1
        self.total_allocs += 1
        _alloc_metrics_update()
        return node

    def retain(self, node: NodeId) -> NodeId:
        self._guard(node, "retain")
        self.refcount[node] += 1
        return node

    def is_unique(self, node: NodeId) -> bool:
        self._guard(node, "is_unique")
        return int(self.refcount[node]) == 1

    def release_shared(self, node: NodeId) -> None:
        """Drop one count of a slot that another owner still holds."""
        self._guard(node, "release_shared")
        if int(self.refcount[node]) < 2:
            raise ConsArenaCorruptError(
                "release_shared on a uniquely owned slot",
                node=int(node),
                context="release_shared",
            )
        self.refcount[node] -= 1

    def take_next(self, node: NodeId) -> NodeId:
        """Detach and return the `next` link of a uniquely owned slot.

        The caller inherits the share the slot held on its successor.
        """
        self._guard(node, "take_next")
        nxt = NodeId(int(self.next[node]))
        self.next[node] = NULL_NODE
        return nxt

    def free(self, node: NodeId):
        """Return a uniquely owned, detached slot to the free stack.

        Returns the element so the caller drops it only after the arena is
        consistent again (dropping it may re-enter the arena).
        """
        self._guard(node, "free")
        if int(self.refcount[node]) != 1 or int(self.next[node]) != NULL_NODE:
            raise ConsArenaCorruptError(
                "free of a shared or linked slot", node=int(node), context="free"
            )
        elem = self.elems[node]
        self.elems[node] = None
        self.refcount[node] = 0
        self.free_stack[self.free_top] = node
        self.free_top += 1
        self.live_count -= 1
        self.total_frees += 1
        return elem

    def elem(self, node: NodeId):
        self._guard(node, "elem")
        return self.elems[node]

    def next_of(self, node: NodeId) -> NodeId:
        self._guard(node, "next_of")
        return NodeId(int(self.next[node]))

    def walk(self, node: NodeId) -> Iterator[NodeId]:
        """Yield slot ids from `node` to the end of its chain."""
        while node != NULL_NODE:
            yield node
            node = self.next_of(node)

    def node(self, node: NodeId) -> Node:
        self._guard(node, "node")
        return Node(
            id=int(node),
            elem=self.elems[node],
            next=int(self.next[node]),
            refcount=int(self.refcount[node]),
        )


__all__ = [
    "ArenaStats",
    "NodeArena",
]
