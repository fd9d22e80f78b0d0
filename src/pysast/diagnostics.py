# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Validate, transform and filter raw tool results into diagnostics."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .config import AdapterConfig
from .logging import Notifier
from .models import Diagnostic, JsonValue, coerce_diagnostic
from .parsing import NO_DOCUMENT, iter_results, parse_json_output
from .severity import Severity
from .spec import ToolIntegration


def passes_severity_filter(diagnostic: Diagnostic, threshold: Severity | None) -> bool:
    """Return ``True`` when ``diagnostic`` is at least as severe as ``threshold``.

    With no threshold every diagnostic passes. With a threshold, diagnostics
    lacking a severity are dropped.
    """

    if threshold is None:
        return True
    return diagnostic.severity is not None and diagnostic.severity <= threshold


def transform_results(
    results: JsonValue | None,
    validate: Callable[[JsonValue], bool],
    transform: Callable[[JsonValue, AdapterConfig], Diagnostic | Mapping[str, Any]],
    config: AdapterConfig,
    tool_name: str,
) -> list[Diagnostic]:
    """Convert a decoded tool document into filtered diagnostics.

    Items rejected by ``validate`` are skipped. Output order follows input
    order. Exceptions raised by ``validate`` or ``transform`` propagate.

    Args:
        results: Decoded JSON document (bare array or ``{"results": [...]}``).
        validate: Predicate deciding whether an item can be transformed.
        transform: Converts an accepted item into a diagnostic.
        config: Configuration snapshot providing the severity threshold.
        tool_name: Default ``source`` for diagnostics that do not set one.

    Returns:
        list[Diagnostic]: Diagnostics surviving validation and filtering.
    """

    diagnostics: list[Diagnostic] = []
    threshold = config.minimum_severity
    for item in iter_results(results):
        if not validate(item):
            continue
        diagnostic = coerce_diagnostic(transform(item, config))
        if diagnostic.source is None:
            diagnostic = diagnostic.model_copy(update={"source": tool_name})
        if passes_severity_filter(diagnostic, threshold):
            diagnostics.append(diagnostic)
    return diagnostics


def diagnostics_from_output(
    stdout: str | None,
    integration: ToolIntegration,
    config: AdapterConfig,
    *,
    notifier: Notifier | None = None,
) -> list[Diagnostic]:
    """Parse ``stdout`` and run it through :func:`transform_results`."""

    document = parse_json_output(stdout, integration.name, notifier=notifier)
    if document is NO_DOCUMENT:
        return []
    return transform_results(
        document,
        integration.validate_result,
        integration.transform_result,
        config,
        integration.name,
    )


__all__ = ["diagnostics_from_output", "passes_severity_filter", "transform_results"]
