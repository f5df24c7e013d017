from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ConsArenaExhaustedError(MemoryError):
    capacity: int
    max_capacity: int

    def __str__(self) -> str:
        return (
            f"node arena exhausted: capacity={self.capacity} "
            f"max_capacity={self.max_capacity}"
        )


@dataclass(frozen=True)
class ConsListReleasedError(RuntimeError):
    op: str

    def __str__(self) -> str:
        return f"list already released (op={self.op})"


@dataclass(frozen=True)
class ConsArenaCorruptError(RuntimeError):
    message: str
    node: int | None = None
    context: str | None = None

    def __str__(self) -> str:
        if self.node is None:
            return self.message
        return f"{self.message} (node={self.node})"


@dataclass(frozen=True)
class ConsValidateModeError(ValueError):
    mode: object
    allowed: tuple[str, ...] = ("none", "strict")
    context: str | None = None

    def __str__(self) -> str:
        return f"unknown validate_mode={self.mode!r}"


@dataclass(frozen=True)
class ConsConfigError(ValueError):
    message: str
    name: str | None = None

    def __str__(self) -> str:
        return self.message


def _allowed_tuple(values: Iterable[str] | None) -> tuple[str, ...] | None:
    if values is None:
        return None
    return tuple(values)


__all__ = [
    "ConsArenaExhaustedError",
    "ConsListReleasedError",
    "ConsArenaCorruptError",
    "ConsValidateModeError",
    "ConsConfigError",
    "_allowed_tuple",
]
