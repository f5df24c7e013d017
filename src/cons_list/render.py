from __future__ import annotations

from cons_core.domains import NULL_NODE


def render(lst, *, sep: str = ", ", open: str = "[", close: str = "]") -> str:
    """Render elements in traversal order with their own str()."""
    return open + sep.join(str(elem) for elem in lst.iter()) + close


def render_debug(lst) -> str:
    """Render slots with their share counts, e.g. "(3 rc=1) -> (2 rc=2) -> nil"."""
    if lst.released:
        return "<released>"
    arena = lst.arena
    parts = []
    node = lst.head_id
    while node != NULL_NODE:
        snap = arena.node(node)
        parts.append(f"({snap.elem!s} rc={snap.refcount})")
        node = snap.next
    parts.append("nil")
    return " -> ".join(parts)


__all__ = [
    "render",
    "render_debug",
]
