# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Consumer boundary receiving diagnostics produced by adapters."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from .models import Diagnostic

DeliveryCallback = Callable[[str, str, Sequence[Diagnostic]], None]


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receiver of per-target diagnostic replacements.

    ``replace`` must be idempotent; an empty list retracts earlier records.
    """

    def replace(self, namespace: str, target: str, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace the diagnostics published for ``target`` under ``namespace``."""
        ...

    def reset(self, namespace: str, target: str) -> None:
        """Retract every diagnostic published for ``target`` under ``namespace``."""
        ...


class InMemorySink:
    """Thread-safe sink keeping the latest diagnostics per namespace and target."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: dict[tuple[str, str], tuple[Diagnostic, ...]] = {}
        self.deliveries = 0

    def replace(self, namespace: str, target: str, diagnostics: Sequence[Diagnostic]) -> None:
        with self._lock:
            self.deliveries += 1
            if diagnostics:
                self._store[(namespace, target)] = tuple(diagnostics)
            else:
                self._store.pop((namespace, target), None)

    def reset(self, namespace: str, target: str) -> None:
        self.replace(namespace, target, ())

    def get(self, namespace: str, target: str) -> list[Diagnostic]:
        """Return the diagnostics currently published for ``target``."""
        with self._lock:
            return list(self._store.get((namespace, target), ()))

    def targets(self, namespace: str) -> list[str]:
        """Return targets that currently hold diagnostics under ``namespace``."""
        with self._lock:
            return [target for ns, target in self._store if ns == namespace]


class CallbackSink:
    """Adapt a plain ``(namespace, target, diagnostics)`` callable to :class:`DiagnosticSink`."""

    def __init__(self, callback: DeliveryCallback) -> None:
        self._callback = callback

    def replace(self, namespace: str, target: str, diagnostics: Sequence[Diagnostic]) -> None:
        self._callback(namespace, target, list(diagnostics))

    def reset(self, namespace: str, target: str) -> None:
        self._callback(namespace, target, [])


__all__ = ["CallbackSink", "DeliveryCallback", "DiagnosticSink", "InMemorySink"]
