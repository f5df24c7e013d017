from typing import Any, NamedTuple


class Node(NamedTuple):
    """Read-only snapshot of one arena slot."""

    id: int
    elem: Any
    next: int
    refcount: int

    @property
    def is_shared(self) -> bool:
        return self.refcount > 1


__all__ = ["Node"]
