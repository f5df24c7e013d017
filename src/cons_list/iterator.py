from __future__ import annotations

from cons_core.domains import NULL_NODE
from cons_core.errors import ConsListReleasedError


class Iter:
    """Forward cursor over a list's elements.

    Elements are returned as stored, not copied. The cursor keeps its list
    alive; if the list is dropped explicitly mid-walk, the next step raises
    instead of reading released slots. Do not keep element references past
    the list's lifetime if the elements are meant to be freed with it.
    """

    __slots__ = ("_list", "_arena", "_node")

    def __init__(self, lst):
        self._list = lst
        self._arena = lst.arena
        self._node = lst.head_id

    def __iter__(self) -> "Iter":
        return self

    def __next__(self):
        node = self._node
        if node == NULL_NODE:
            raise StopIteration
        if self._list.released:
            self._node = NULL_NODE
            raise ConsListReleasedError(op="iter.next")
        elem = self._arena.elem(node)
        self._node = self._arena.next_of(node)
        return elem


__all__ = ["Iter"]
