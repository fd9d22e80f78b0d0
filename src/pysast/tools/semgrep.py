# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Semgrep integration."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final, cast

from ..config import AdapterConfig
from ..models import Diagnostic, JsonValue
from ..severity import Severity, map_severity
from ._helpers import mapping_field, one_based_to_zero

SEMGREP_SEVERITY: Final[dict[str, Severity]] = {
    "ERROR": Severity.ERROR,
    "WARNING": Severity.WARN,
    "INFO": Severity.INFO,
    "INVENTORY": Severity.HINT,
    "EXPERIMENT": Severity.HINT,
}


class SemgrepIntegration:
    """Run ``semgrep scan --json`` on one file.

    The rule set comes from the ``rules`` configuration key (``auto`` when
    unset). The opengrep fork accepts the same command line and is used when
    semgrep itself is not installed.
    """

    name = "semgrep"
    executable: tuple[str, ...] = ("semgrep", "opengrep")
    severity_map: Mapping[str, Severity] | None = SEMGREP_SEVERITY
    default_severity: Severity | None = Severity.WARN

    def build_args(self, config: AdapterConfig, file_path: str) -> Sequence[str]:
        rules = getattr(config, "rules", None) or "auto"
        rule_args: list[str] = []
        for rule in [rules] if isinstance(rules, str) else list(rules):
            rule_args.extend(["--config", str(rule)])
        return ["scan", "--json", "--quiet", *rule_args, *config.extra_args, file_path]

    def validate_result(self, result: JsonValue) -> bool:
        if not isinstance(result, Mapping):
            return False
        start = result.get("start")
        extra = result.get("extra")
        return (
            isinstance(start, Mapping)
            and isinstance(start.get("line"), int)
            and isinstance(extra, Mapping)
            and bool(extra.get("message"))
        )

    def transform_result(self, result: JsonValue, config: AdapterConfig) -> Diagnostic:
        del config
        payload = cast(Mapping[str, JsonValue], result)
        start = mapping_field(payload, "start")
        end = mapping_field(payload, "end")
        extra = mapping_field(payload, "extra")
        default = self.default_severity or Severity.WARN
        check_id = payload.get("check_id")
        return Diagnostic(
            lnum=one_based_to_zero(start.get("line")),
            col=one_based_to_zero(start.get("col")),
            end_lnum=one_based_to_zero(end.get("line")) if end else None,
            end_col=one_based_to_zero(end.get("col")) if end else None,
            severity=map_severity(extra.get("severity"), dict(self.severity_map or {}), default),
            message=str(extra.get("message", "")).strip(),
            code=str(check_id) if check_id else None,
            user_data={"metadata": extra.get("metadata")} if extra.get("metadata") else None,
        )


__all__ = ["SEMGREP_SEVERITY", "SemgrepIntegration"]
