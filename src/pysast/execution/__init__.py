# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command construction and process execution helpers."""

from __future__ import annotations

from .command import Command, build_command, find_executable, resolve_executable
from .process import (
    SPAWN_FAILURE_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    CompletionCallback,
    ProcessResult,
    execute_async,
    run_process,
)

__all__ = [
    "Command",
    "CompletionCallback",
    "ProcessResult",
    "SPAWN_FAILURE_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "build_command",
    "execute_async",
    "find_executable",
    "resolve_executable",
    "run_process",
]
