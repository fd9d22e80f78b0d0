# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Capability interface describing how to run and interpret one tool."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final, Protocol, runtime_checkable

from .config import AdapterConfig
from .errors import AdapterSpecError
from .models import Diagnostic, JsonValue
from .severity import Severity

BuildArgs = Callable[[AdapterConfig, str], Sequence[str]]
ValidateResult = Callable[[JsonValue], bool]
TransformResult = Callable[[JsonValue, AdapterConfig], "Diagnostic | Mapping[str, Any]"]

REQUIRED_FIELDS: Final[tuple[str, ...]] = (
    "name",
    "executable",
    "build_args",
    "validate_result",
    "transform_result",
)


@runtime_checkable
class ToolIntegration(Protocol):
    """Protocol implemented once per supported analysis tool."""

    name: str
    executable: str | Sequence[str]
    severity_map: Mapping[str, Severity] | None
    default_severity: Severity | None

    def build_args(self, config: AdapterConfig, file_path: str) -> Sequence[str]:
        """Return the ordered argument list for scanning ``file_path``."""
        ...

    def validate_result(self, result: JsonValue) -> bool:
        """Return ``True`` when ``result`` can be transformed."""
        ...

    def transform_result(self, result: JsonValue, config: AdapterConfig) -> Diagnostic | Mapping[str, Any]:
        """Convert a validated raw result into a diagnostic record."""
        ...


@dataclass(frozen=True, slots=True)
class AdapterSpec:
    """:class:`ToolIntegration` assembled from plain callables.

    Construction fails with :class:`AdapterSpecError` when any required member
    is missing.
    """

    name: str
    executable: str | Sequence[str]
    build_args_fn: BuildArgs
    validate_result_fn: ValidateResult
    transform_result_fn: TransformResult
    severity_map: Mapping[str, Severity] | None = None
    default_severity: Severity | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        checks = {
            "name": self.name,
            "executable": self.executable,
            "build_args": self.build_args_fn,
            "validate_result": self.validate_result_fn,
            "transform_result": self.transform_result_fn,
        }
        for key in REQUIRED_FIELDS:
            if not checks[key]:
                raise AdapterSpecError(key)
        for key in ("build_args", "validate_result", "transform_result"):
            if not callable(checks[key]):
                raise AdapterSpecError(key)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> AdapterSpec:
        """Build a spec from a table keyed like the integration contract.

        Args:
            payload: Mapping providing ``name``, ``executable``, ``build_args``,
                ``validate_result``, ``transform_result`` and optionally
                ``severity_map`` and ``default_severity``.

        Returns:
            AdapterSpec: Validated specification.

        Raises:
            AdapterSpecError: If a required key is absent or empty.
        """

        for key in REQUIRED_FIELDS:
            if not payload.get(key):
                raise AdapterSpecError(key)
        known = set(REQUIRED_FIELDS) | {"severity_map", "default_severity"}
        default_severity = payload.get("default_severity")
        return cls(
            name=payload["name"],
            executable=payload["executable"],
            build_args_fn=payload["build_args"],
            validate_result_fn=payload["validate_result"],
            transform_result_fn=payload["transform_result"],
            severity_map=payload.get("severity_map"),
            default_severity=Severity.coerce(default_severity) if default_severity is not None else None,
            extra={key: value for key, value in payload.items() if key not in known},
        )

    def build_args(self, config: AdapterConfig, file_path: str) -> Sequence[str]:
        return self.build_args_fn(config, file_path)

    def validate_result(self, result: JsonValue) -> bool:
        return bool(self.validate_result_fn(result))

    def transform_result(self, result: JsonValue, config: AdapterConfig) -> Diagnostic | Mapping[str, Any]:
        return self.transform_result_fn(result, config)


def ensure_integration(candidate: ToolIntegration | Mapping[str, Any]) -> ToolIntegration:
    """Return ``candidate`` as a validated :class:`ToolIntegration`.

    Mappings are converted with :meth:`AdapterSpec.from_mapping`; objects are
    checked for every required member.

    Raises:
        AdapterSpecError: If a required member is missing.
    """

    if isinstance(candidate, Mapping):
        return AdapterSpec.from_mapping(candidate)
    for key in REQUIRED_FIELDS:
        if not getattr(candidate, key, None):
            raise AdapterSpecError(key)
    return candidate


def executable_candidates(integration: ToolIntegration) -> tuple[str, ...]:
    """Return the ordered executable candidates declared by ``integration``."""

    executable = integration.executable
    if isinstance(executable, str):
        return (executable,)
    return tuple(executable)


__all__ = [
    "AdapterSpec",
    "BuildArgs",
    "REQUIRED_FIELDS",
    "ToolIntegration",
    "TransformResult",
    "ValidateResult",
    "ensure_integration",
    "executable_candidates",
]
