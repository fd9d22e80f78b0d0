# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter configuration model and the operations that read or mutate it."""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError, InvalidSeverityValue
from .logging import Notifier, default_notifier
from .severity import DEFAULT_MINIMUM_SEVERITY, Severity

RunMode = Literal["save", "change"]
AttachCallback = Callable[..., None]

DEFAULT_DEBOUNCE_MS: Final[int] = 1000


class AdapterConfig(BaseModel):
    """Mutable per-adapter settings.

    Keys not declared here are retained as extras so tool integrations can
    carry their own options (for example a rule set path) through the same
    merge and render operations.
    """

    model_config = ConfigDict(validate_assignment=True, extra="allow", arbitrary_types_allowed=True)

    enabled: bool = True
    filetypes: list[str] = Field(default_factory=list)
    run_mode: RunMode = "save"
    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0)
    minimum_severity: Severity | None = DEFAULT_MINIMUM_SEVERITY
    extra_args: list[str] = Field(default_factory=list)
    on_attach: AttachCallback | None = None
    run_on_setup: bool = False
    timeout_s: float | None = Field(default=None, gt=0)

    @field_validator("minimum_severity", mode="before")
    @classmethod
    def _coerce_minimum_severity(cls, value: object) -> object:
        if value is None or isinstance(value, Severity):
            return value
        if isinstance(value, (int, str)):
            return Severity.coerce(value)
        return value

    @field_validator("run_mode", mode="before")
    @classmethod
    def _normalise_run_mode(cls, value: object) -> object:
        if isinstance(value, str):
            normalised = value.strip().lower()
            return _RUN_MODE_ALIASES.get(normalised, normalised)
        return value

    @property
    def debounce_seconds(self) -> float:
        """Return the debounce interval expressed in seconds."""
        return self.debounce_ms / 1000.0


_RUN_MODE_ALIASES: Final[dict[str, str]] = {
    "on-save": "save",
    "on_save": "save",
    "on-change": "change",
    "on_change": "change",
}


def create_config(tool_name: str) -> AdapterConfig:
    """Return a configuration populated with default values.

    Args:
        tool_name: Name of the tool the configuration belongs to. Defaults do
            not vary per tool; the name is accepted for symmetry with the other
            store operations.

    Returns:
        AdapterConfig: Fresh configuration instance.
    """

    del tool_name
    return AdapterConfig()


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def merge_config(base: AdapterConfig, overrides: Mapping[str, Any] | None) -> AdapterConfig:
    """Merge user ``overrides`` into ``base`` returning a new configuration.

    Overlapping keys take the override value; nested mappings merge recursively.

    Args:
        base: Configuration supplying the starting values.
        overrides: User-provided values that win over ``base``.

    Returns:
        AdapterConfig: Newly validated configuration.

    Raises:
        ConfigError: If the merged payload fails validation.
    """

    if not overrides:
        return snapshot_config(base)
    if not isinstance(overrides, Mapping):
        raise ConfigError("configuration overrides must be a mapping")
    merged = _deep_merge(_config_payload(base), overrides)
    try:
        return AdapterConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"invalid adapter configuration: {exc}") from exc


def _config_payload(config: AdapterConfig) -> dict[str, Any]:
    payload = {name: getattr(config, name) for name in AdapterConfig.model_fields}
    payload.update(config.model_extra or {})
    return payload


def snapshot_config(config: AdapterConfig) -> AdapterConfig:
    """Return an independent copy of ``config`` for use by a single scan.

    Values are deep-copied; callables such as ``on_attach`` are shared.
    """

    payload = {
        key: value if callable(value) else copy.deepcopy(value) for key, value in _config_payload(config).items()
    }
    return AdapterConfig.model_validate(payload)


def _render_value(value: object) -> str:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (list, tuple, dict)):
        return repr(value)
    return str(value)


def render_config(config: AdapterConfig, tool_name: str) -> str:
    """Return a human-readable listing of every non-callable setting.

    Args:
        config: Configuration to describe.
        tool_name: Tool name used in the heading line.

    Returns:
        str: Multi-line ``key: value`` listing.
    """

    lines = [f"Current {tool_name} Configuration:"]
    for key, value in _config_payload(config).items():
        if value is None or callable(value):
            continue
        lines.append(f"{key}: {_render_value(value)}")
    return "\n".join(lines)


def print_config(config: AdapterConfig, tool_name: str, *, notifier: Notifier | None = None) -> None:
    """Report :func:`render_config` output through ``notifier``."""

    (notifier or default_notifier()).info(render_config(config, tool_name))


def set_minimum_severity(
    config: AdapterConfig,
    level: Severity | int | str,
    *,
    notifier: Notifier | None = None,
) -> bool:
    """Validate ``level`` and store it as the minimum severity threshold.

    Args:
        config: Configuration to update in place.
        level: Requested threshold.
        notifier: Channel receiving the outcome message.

    Returns:
        bool: ``True`` when the threshold changed, ``False`` when rejected.
    """

    channel = notifier or default_notifier()
    try:
        severity = Severity.coerce(level)
    except InvalidSeverityValue:
        channel.error("Invalid severity level")
        return False
    config.minimum_severity = severity
    channel.info(f"Minimum severity set to: {severity.name}")
    return True


__all__ = [
    "AdapterConfig",
    "AttachCallback",
    "DEFAULT_DEBOUNCE_MS",
    "RunMode",
    "create_config",
    "merge_config",
    "print_config",
    "render_config",
    "set_minimum_severity",
    "snapshot_config",
]
