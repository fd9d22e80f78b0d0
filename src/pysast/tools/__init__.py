# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Built-in tool integrations."""

from __future__ import annotations

from functools import lru_cache

from ..spec import ToolIntegration
from .bandit import BanditIntegration
from .registry import IntegrationRegistry
from .semgrep import SemgrepIntegration


@lru_cache(maxsize=1)
def builtin_registry() -> IntegrationRegistry:
    """Return the registry holding every built-in integration."""

    registry = IntegrationRegistry()
    registry.register(SemgrepIntegration())
    registry.register(BanditIntegration())
    return registry


def available_integrations() -> tuple[str, ...]:
    """Return the names of the built-in integrations."""

    return tuple(builtin_registry())


def get_integration(name: str) -> ToolIntegration | None:
    """Return the built-in integration called ``name`` or ``None``."""

    return builtin_registry().try_get(name)


__all__ = [
    "BanditIntegration",
    "IntegrationRegistry",
    "SemgrepIntegration",
    "available_integrations",
    "builtin_registry",
    "get_integration",
]
