"""Cookie jar and cookie configuration.

JarConfig and CookieOptions are frozen dataclasses — immutable after
creation, IDE-autocompletable, no string-key dict lookups.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, TypeAlias

from crumbjar._internal.booleans import parse_bool
from crumbjar.errors import ConfigurationError

# Relative seconds, a textual date expression, or an absolute instant
Lifetime: TypeAlias = int | str | datetime


@dataclass(frozen=True, slots=True)
class JarConfig:
    """Jar-wide cookie defaults. Immutable after creation.

    Every cookie made through the jar inherits these unless the caller
    overrides a field explicitly::

        config = JarConfig(lifetime=3600, salt="_v1", secure=True)
    """

    # Expiration: 0 means session cookie (no Expires attribute)
    lifetime: Lifetime = 0

    # Scope
    path: str | None = None
    domain: str | None = None

    # Flags
    secure: bool | None = None
    httponly: bool = True
    raw: bool = False
    samesite: str | None = None

    # Suffix appended to every cookie name
    salt: str | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> JarConfig:
        """Build a config from a loosely-keyed configuration bag.

        Accepts both the snake_case field names and the legacy keys
        (``expire``, ``httpOnly``, ``sameSite``). A ``value`` key is
        tolerated and ignored: cookie values are never jar-wide.
        """
        values: dict[str, Any] = {}
        for key, value in mapping.items():
            if key == "value":
                continue
            field_name = _CONFIG_ALIASES.get(key, key)
            if field_name not in _JAR_FIELDS:
                msg = f"Unknown cookie jar configuration key: {key!r}"
                raise ConfigurationError(msg)
            values[field_name] = value

        for flag in ("httponly", "raw"):
            if flag in values:
                values[flag] = parse_bool(values[flag])
        if values.get("secure") is not None:
            values["secure"] = parse_bool(values["secure"])
        return cls(**values)


@dataclass(frozen=True, slots=True)
class CookieOptions:
    """Per-cookie construction options.

    ``None`` means "not supplied": the jar default applies, or the
    feature is off (``encrypted``, ``prefix``) or absent (``value``).
    """

    name: str | None = None
    value: Any = None
    lifetime: Lifetime | None = None
    path: str | None = None
    domain: str | None = None
    secure: bool | str | None = None
    httponly: bool | str | None = None
    raw: bool | str | None = None
    samesite: str | None = None
    salt: str | None = None
    encrypted: bool | str | None = None
    prefix: str | None = None


_JAR_FIELDS = frozenset(f.name for f in fields(JarConfig))
COOKIE_OPTION_FIELDS = frozenset(f.name for f in fields(CookieOptions))

_CONFIG_ALIASES = {
    "expire": "lifetime",
    "httpOnly": "httponly",
    "sameSite": "samesite",
}
