# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from pysast.config import AdapterConfig
from pysast.models import Diagnostic, JsonValue
from pysast.severity import Severity

ECHO_SCRIPT = "import sys, time; time.sleep(float(sys.argv[2])); sys.stdout.write(sys.argv[1])"


@dataclass
class RecordingNotifier:
    """Notifier capturing messages instead of printing them."""

    messages: list[tuple[str, str]] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def of(self, level: str) -> list[str]:
        return [message for kind, message in self.messages if kind == level]


def simple_transform(result: JsonValue, config: AdapterConfig) -> Diagnostic:
    del config
    assert isinstance(result, Mapping)
    return Diagnostic(
        lnum=int(result["line"]) - 1,
        col=int(result.get("column", 1)) - 1,
        severity=Severity.coerce(result.get("severity", "error")),
        message=str(result["message"]),
    )


@dataclass
class EchoIntegration:
    """Integration whose "tool" is the Python interpreter echoing queued payloads.

    Each scan pops the next ``(stdout, delay)`` pair; the last pair repeats.
    """

    outputs: list[tuple[str, float]]
    name: str = "echo"
    severity_map: Mapping[str, Severity] | None = None
    default_severity: Severity | None = None
    transform: Callable[[JsonValue, AdapterConfig], Any] = simple_transform
    calls: list[str] = field(default_factory=list)
    executable: Sequence[str] = (sys.executable,)

    def build_args(self, config: AdapterConfig, file_path: str) -> Sequence[str]:
        self.calls.append(file_path)
        payload, delay = self.outputs[0] if len(self.outputs) == 1 else self.outputs.pop(0)
        return ["-c", ECHO_SCRIPT, payload, str(delay), *config.extra_args]

    def validate_result(self, result: JsonValue) -> bool:
        return isinstance(result, Mapping) and result.get("message") is not None

    def transform_result(self, result: JsonValue, config: AdapterConfig) -> Any:
        return self.transform(result, config)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_echo() -> Callable[..., EchoIntegration]:
    def _factory(*outputs: str | tuple[str, float], **kwargs: Any) -> EchoIntegration:
        normalised = [item if isinstance(item, tuple) else (item, 0.0) for item in outputs]
        return EchoIntegration(outputs=normalised or [("", 0.0)], **kwargs)

    return _factory
