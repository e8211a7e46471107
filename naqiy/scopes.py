"""Denominational scopes shared by the trust score and the ruling resolver."""

from __future__ import annotations

from enum import Enum


class Scope(str, Enum):
    GENERAL = "general"
    HANAFI = "hanafi"
    SHAFII = "shafii"
    MALIKI = "maliki"
    HANBALI = "hanbali"

    @classmethod
    def parse(cls, value: "Scope | str | None") -> "Scope":
        """Accept a Scope, its value, or None (general)."""
        if value is None:
            return cls.GENERAL
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown scope {value!r}. Expected one of: "
                f"{', '.join(s.value for s in cls)}"
            ) from None


# The four schools, in display order
MADHABS = (Scope.HANAFI, Scope.SHAFII, Scope.MALIKI, Scope.HANBALI)
