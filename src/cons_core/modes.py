from __future__ import annotations

from enum import Enum

from cons_core.errors import ConsValidateModeError, _allowed_tuple


class ValidateMode(str, Enum):
    NONE = "none"
    STRICT = "strict"


def coerce_validate_mode(
    mode: ValidateMode | str | None, *, context: str | None = None
) -> ValidateMode:
    if mode is None:
        return ValidateMode.NONE
    if isinstance(mode, ValidateMode):
        return mode
    if isinstance(mode, str):
        value = mode.strip().lower()
        if value == ValidateMode.NONE.value:
            return ValidateMode.NONE
        if value == ValidateMode.STRICT.value:
            return ValidateMode.STRICT
    raise ConsValidateModeError(
        mode=mode,
        allowed=_allowed_tuple(m.value for m in ValidateMode),
        context=context,
    )


__all__ = [
    "ValidateMode",
    "coerce_validate_mode",
]
