# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter framework running static-analysis tools and normalising their findings."""

from __future__ import annotations

from .adapter import Adapter, ScanOutcome, ScanStatus, ScanTarget, TargetState, create_adapter
from .config import AdapterConfig, create_config, merge_config, render_config, set_minimum_severity
from .delivery import CallbackSink, DiagnosticSink, InMemorySink
from .diagnostics import transform_results
from .errors import AdapterSpecError, ConfigError, ExecutableNotFound, InvalidSeverityValue, PySastError
from .models import Diagnostic
from .parsing import parse_json_output
from .severity import Severity
from .spec import AdapterSpec, ToolIntegration

__all__ = [
    "Adapter",
    "AdapterConfig",
    "AdapterSpec",
    "AdapterSpecError",
    "CallbackSink",
    "ConfigError",
    "Diagnostic",
    "DiagnosticSink",
    "ExecutableNotFound",
    "InMemorySink",
    "InvalidSeverityValue",
    "PySastError",
    "ScanOutcome",
    "ScanStatus",
    "ScanTarget",
    "Severity",
    "TargetState",
    "ToolIntegration",
    "create_adapter",
    "create_config",
    "merge_config",
    "parse_json_output",
    "render_config",
    "set_minimum_severity",
    "transform_results",
]
