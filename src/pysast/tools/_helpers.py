# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Small coercion helpers shared by built-in integrations."""

from __future__ import annotations

from collections.abc import Mapping

from ..models import JsonValue


def mapping_field(payload: Mapping[str, JsonValue], key: str) -> Mapping[str, JsonValue]:
    """Return ``payload[key]`` when it is a mapping, otherwise an empty mapping."""

    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def one_based_to_zero(value: JsonValue | None) -> int:
    """Convert a 1-based position reported by a tool into a 0-based one."""

    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(value - 1, 0)
