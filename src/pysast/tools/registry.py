# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Registry of built-in tool integrations keyed by name."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from ..spec import ToolIntegration, ensure_integration


class IntegrationRegistry(Mapping[str, ToolIntegration]):
    """Read-only mapping of tool names to integrations with explicit registration."""

    def __init__(self) -> None:
        self._integrations: dict[str, ToolIntegration] = {}

    def register(self, integration: ToolIntegration) -> None:
        """Register ``integration`` enforcing uniqueness by name.

        Raises:
            ValueError: If an integration with the same name is already registered.
        """

        validated = ensure_integration(integration)
        if validated.name in self._integrations:
            raise ValueError(f"Integration '{validated.name}' already registered")
        self._integrations[validated.name] = validated

    def try_get(self, name: str) -> ToolIntegration | None:
        """Return the integration named ``name`` or ``None``."""
        return self._integrations.get(name)

    def __getitem__(self, key: str) -> ToolIntegration:
        return self._integrations[key]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._integrations))

    def __len__(self) -> int:
        return len(self._integrations)


__all__ = ["IntegrationRegistry"]
