from __future__ import annotations

from typing import Any

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off", ""}


def coerce_bool(value: Any, *, default: bool = False) -> bool:
    """Read a flag from YAML or the environment.

    Strings such as "off" or "0" are false; anything unrecognised, and None,
    yields `default`.
    """
    if value is None:
        return default
    if isinstance(value, (bool, int, float)):
        return bool(value) if value == value else default
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False if s else default
    return default


def coerce_int(value: Any, *, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 10)
    except ValueError:
        return default
