"""Shared domain types and sentinel conventions.

Node ids index rows of a NodeArena. Row 0 is never allocated so that a zero
id can stand for "no node" in `next` links and list heads.
"""

from typing import NewType

# Host-only domain tags (type checkers only).
NodeId = NewType("NodeId", int)

NULL_NODE = NodeId(0)  # Empty list / end of chain.
RESERVED_NODE = 0  # Arena row backing the NULL_NODE sentinel.


__all__ = [
    "NodeId",
    "NULL_NODE",
    "RESERVED_NODE",
]
