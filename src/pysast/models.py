# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the pysast package."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import Severity

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = "JsonScalar | list[JsonValue] | dict[str, JsonValue]"


class Diagnostic(BaseModel):
    """Normalised finding ready to hand to a diagnostic consumer.

    Line and column numbers are zero-based and negative values are clamped to
    0. ``severity`` and ``source`` may be left unset by a transformer; the
    pipeline fills ``source`` with the tool name and the severity filter drops
    records without a severity whenever a threshold is configured.
    """

    model_config = ConfigDict(validate_assignment=True)

    lnum: int = Field(ge=0)
    col: int = Field(default=0, ge=0)
    end_lnum: int | None = Field(default=None, ge=0)
    end_col: int | None = Field(default=None, ge=0)
    severity: Severity | None = None
    message: str
    source: str | None = None
    code: str | None = None
    user_data: dict[str, Any] | None = None

    @field_validator("lnum", "col", "end_lnum", "end_col", mode="before")
    @classmethod
    def _clamp_position(cls, value: object) -> object:
        """Clamp negative positions to zero.

        Tools report file-level findings on line 0; converting that to a
        zero-based position yields ``-1``.
        """
        if isinstance(value, int) and not isinstance(value, bool) and value < 0:
            return 0
        return value

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> object:
        """Accept severity names as well as ordinals."""
        if value is None or isinstance(value, Severity):
            return value
        if isinstance(value, (int, str)):
            return Severity.coerce(value)
        return value


def coerce_diagnostic(candidate: Diagnostic | Mapping[str, Any]) -> Diagnostic:
    """Return ``candidate`` as a :class:`Diagnostic`.

    Transformers may return plain mappings such as
    ``{"lnum": 0, "col": 0, "message": "..."}``; these are validated into a
    fresh model instance.
    """

    if isinstance(candidate, Diagnostic):
        return candidate
    return Diagnostic.model_validate(dict(candidate))


__all__ = ["Diagnostic", "JsonScalar", "JsonValue", "coerce_diagnostic"]
