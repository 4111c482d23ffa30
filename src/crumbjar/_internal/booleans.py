"""Permissive boolean parsing for configuration values.

Configuration arrives as real booleans or as strings (environment,
INI files, query strings). Both must behave identically.
"""

from typing import Any

_TRUE_LITERALS = frozenset({"1", "true", "on", "yes"})


def parse_bool(value: Any) -> bool:
    """Coerce *value* to ``bool`` using a fixed literal set.

    ``"1"``, ``"true"``, ``"on"`` and ``"yes"`` (any case, surrounding
    whitespace ignored) are true. Every other string is false, including
    the empty string. ``None`` is false. Numbers are true when non-zero.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_LITERALS
    if isinstance(value, int | float):
        return value != 0
    return bool(value)
