# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception types raised across the adapter pipeline."""

from __future__ import annotations

from collections.abc import Sequence


class PySastError(Exception):
    """Base class for all pysast errors."""


class AdapterSpecError(PySastError):
    """Raised when an adapter specification is missing a required member."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Adapter spec missing required field: {field}")
        self.field = field


class ExecutableNotFound(PySastError):
    """Raised when none of the candidate executables resolve on ``PATH``."""

    def __init__(self, candidates: Sequence[str]) -> None:
        self.candidates = tuple(candidates)
        super().__init__(f"No executable found in PATH: {', '.join(self.candidates)}")


class InvalidSeverityValue(PySastError, ValueError):
    """Raised when a value does not belong to the severity scale."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid severity level: {value!r}")
        self.value = value


class ConfigError(PySastError):
    """Raised when configuration input is invalid."""


__all__ = [
    "AdapterSpecError",
    "ConfigError",
    "ExecutableNotFound",
    "InvalidSeverityValue",
    "PySastError",
]
