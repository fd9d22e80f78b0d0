# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity scale shared by every adapter."""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from .errors import InvalidSeverityValue


class Severity(IntEnum):
    """Diagnostic severity ordinals where lower values are more severe."""

    ERROR = 1
    WARN = 2
    INFO = 3
    HINT = 4

    @classmethod
    def coerce(cls, value: Severity | int | str) -> Severity:
        """Return the :class:`Severity` denoted by ``value``.

        Args:
            value: Enum member, ordinal, or case-insensitive level name.

        Returns:
            Severity: Matching severity member.

        Raises:
            InvalidSeverityValue: If ``value`` does not name a known severity.
        """

        if isinstance(value, bool):
            raise InvalidSeverityValue(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as exc:
                raise InvalidSeverityValue(value) from exc
        if isinstance(value, str):
            key = value.strip().upper()
            if key.isdigit():
                return cls.coerce(int(key))
            key = _SEVERITY_ALIASES.get(key, key)
            try:
                return cls[key]
            except KeyError as exc:
                raise InvalidSeverityValue(value) from exc
        raise InvalidSeverityValue(value)


_SEVERITY_ALIASES: Final[dict[str, str]] = {
    "WARNING": "WARN",
    "ERR": "ERROR",
    "INFORMATION": "INFO",
    "NOTE": "HINT",
}

DEFAULT_MINIMUM_SEVERITY: Final[Severity] = Severity.HINT


def is_valid_severity(value: object) -> bool:
    """Return ``True`` when ``value`` is one of the defined severity ordinals."""

    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value in {member.value for member in Severity}


def map_severity(
    label: object,
    mapping: dict[str, Severity] | None,
    default: Severity,
) -> Severity:
    """Translate a tool-native severity label through ``mapping``.

    Lookups are case-insensitive; unknown or non-string labels yield ``default``.
    """

    if not mapping or not isinstance(label, str):
        return default
    normalised = {key.upper(): sev for key, sev in mapping.items()}
    return normalised.get(label.upper(), default)


__all__ = [
    "DEFAULT_MINIMUM_SEVERITY",
    "Severity",
    "is_valid_severity",
    "map_severity",
]
