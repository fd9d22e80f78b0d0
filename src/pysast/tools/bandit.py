# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bandit integration."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final, cast

from ..config import AdapterConfig
from ..models import Diagnostic, JsonValue
from ..severity import Severity, map_severity
from ._helpers import one_based_to_zero

BANDIT_SEVERITY: Final[dict[str, Severity]] = {
    "HIGH": Severity.ERROR,
    "MEDIUM": Severity.WARN,
    "LOW": Severity.INFO,
}


class BanditIntegration:
    """Run ``bandit -f json`` on one Python file."""

    name = "bandit"
    executable: tuple[str, ...] = ("bandit",)
    severity_map: Mapping[str, Severity] | None = BANDIT_SEVERITY
    default_severity: Severity | None = Severity.WARN

    def build_args(self, config: AdapterConfig, file_path: str) -> Sequence[str]:
        return ["-f", "json", "-q", *config.extra_args, file_path]

    def validate_result(self, result: JsonValue) -> bool:
        return (
            isinstance(result, Mapping)
            and isinstance(result.get("line_number"), int)
            and bool(result.get("issue_text"))
        )

    def transform_result(self, result: JsonValue, config: AdapterConfig) -> Diagnostic:
        del config
        payload = cast(Mapping[str, JsonValue], result)
        col = payload.get("col_offset")
        end_col = payload.get("end_col_offset")
        line_range = payload.get("line_range")
        end_line = line_range[-1] if isinstance(line_range, list) and line_range else None
        test_id = payload.get("test_id")
        default = self.default_severity or Severity.WARN
        return Diagnostic(
            lnum=one_based_to_zero(payload.get("line_number")),
            col=col if isinstance(col, int) and col >= 0 else 0,
            end_lnum=one_based_to_zero(end_line) if isinstance(end_line, int) else None,
            end_col=end_col if isinstance(end_col, int) and end_col >= 0 else None,
            severity=map_severity(payload.get("issue_severity"), dict(self.severity_map or {}), default),
            message=str(payload.get("issue_text", "")).strip(),
            code=str(test_id) if test_id else None,
            user_data={
                "confidence": payload.get("issue_confidence"),
                "more_info": payload.get("more_info"),
            },
        )


__all__ = ["BANDIT_SEVERITY", "BanditIntegration"]
