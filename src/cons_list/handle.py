"""Persistent list handles over a shared NodeArena.

A List owns exactly one count on its head slot. Deriving a list never
touches the chain it came from:

  l1 = List.new().prepend(1).prepend(2).prepend(3)
  l2 = l1.tail()
  l3 = l2.prepend("x")

  l1 -> 3 ---+
             v
  l2 ------> 2 -> 1
             ^
  l3 -> x ---+

Dropping l1 frees slot 3 and stops at slot 2, which l2 and l3 still share.
"""

from __future__ import annotations

import weakref
from typing import Any, Iterable

from cons_core.alloc import NodeArena
from cons_core.config import ArenaConfig
from cons_core.domains import NULL_NODE, NodeId
from cons_core.errors import ConsListReleasedError
from cons_list.iterator import Iter
from cons_list.render import render
from cons_list.teardown import release_chain


class List:
    __slots__ = ("_arena", "_head", "_released", "_finalizer", "__weakref__")

    def __init__(self, arena: NodeArena | None = None, *, cfg: ArenaConfig | None = None):
        """Create an empty list, on `arena` or on a fresh one built from `cfg`."""
        if arena is None:
            arena = NodeArena(cfg)
        self._adopt(arena, NULL_NODE)

    @classmethod
    def new(cls, arena: NodeArena | None = None, *, cfg: ArenaConfig | None = None) -> "List":
        return cls(arena, cfg=cfg)

    @classmethod
    def _wrap(cls, arena: NodeArena, head: NodeId) -> "List":
        # `head` must already carry the count this handle will own.
        lst = cls.__new__(cls)
        lst._adopt(arena, head)
        return lst

    def _adopt(self, arena: NodeArena, head: NodeId) -> None:
        self._arena = arena
        self._head = head
        self._released = False
        if head == NULL_NODE:
            self._finalizer = None
            return
        self._finalizer = weakref.finalize(self, release_chain, arena, head)
        # No teardown walk at interpreter exit.
        self._finalizer.atexit = False

    @classmethod
    def from_iterable(cls, items: Iterable[Any], arena: NodeArena | None = None) -> "List":
        """Build a list that iterates in the same order as `items`."""
        items = list(items)
        acc = cls(arena)
        for item in reversed(items):
            nxt = acc.prepend(item)
            acc.drop()
            acc = nxt
        return acc

    def _check(self, op: str) -> None:
        if self._released:
            raise ConsListReleasedError(op=op)

    @property
    def arena(self) -> NodeArena:
        return self._arena

    @property
    def released(self) -> bool:
        return self._released

    @property
    def head_id(self) -> NodeId:
        return self._head

    def is_empty(self) -> bool:
        self._check("is_empty")
        return self._head == NULL_NODE

    def prepend(self, elem) -> "List":
        self._check("prepend")
        node = self._arena.alloc(elem, self._head)
        return List._wrap(self._arena, node)

    def tail(self) -> "List":
        self._check("tail")
        if self._head == NULL_NODE:
            return List._wrap(self._arena, NULL_NODE)
        nxt = self._arena.next_of(self._head)
        if nxt != NULL_NODE:
            self._arena.retain(nxt)
        return List._wrap(self._arena, nxt)

    def head(self):
        """Return the first element, or None for an empty list."""
        self._check("head")
        if self._head == NULL_NODE:
            return None
        return self._arena.elem(self._head)

    def share(self) -> "List":
        """Return another handle on the same chain."""
        self._check("share")
        if self._head != NULL_NODE:
            self._arena.retain(self._head)
        return List._wrap(self._arena, self._head)

    __copy__ = share

    def iter(self) -> Iter:
        self._check("iter")
        return Iter(self)

    def drop(self):
        """Release this handle's share of its chain.

        Idempotent. Returns the TeardownStats of the release, or None when
        there was nothing to release.
        """
        if self._released:
            return None
        self._released = True
        self._head = NULL_NODE
        finalizer, self._finalizer = self._finalizer, None
        if finalizer is None:
            return None
        return finalizer()

    def __enter__(self) -> "List":
        self._check("__enter__")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.drop()

    def __iter__(self) -> Iter:
        return self.iter()

    def __len__(self) -> int:
        self._check("__len__")
        return sum(1 for _ in self._arena.walk(self._head))

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __str__(self) -> str:
        return render(self)

    def __repr__(self) -> str:
        if self._released:
            return "List(<released>)"
        return f"List([{', '.join(repr(x) for x in self)}])"


__all__ = ["List"]
