# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter orchestrating command construction, execution and delivery per target."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final, Literal

from .config import (
    AdapterConfig,
    create_config,
    merge_config,
    print_config,
    set_minimum_severity,
    snapshot_config,
)
from .delivery import DiagnosticSink, InMemorySink
from .diagnostics import transform_results
from .execution.command import Command, build_command
from .execution.process import ProcessResult, run_process
from .logging import Notifier, default_notifier
from .models import Diagnostic
from .parsing import NO_DOCUMENT, parse_json_output
from .severity import Severity
from .spec import ToolIntegration, ensure_integration

LOGGER = logging.getLogger(__name__)

TriggerEvent = Literal["save", "change"]

_SUFFIX_FILETYPES: Final[dict[str, str]] = {
    ".c": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".go": "go",
    ".h": "c",
    ".java": "java",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".json": "json",
    ".kt": "kotlin",
    ".lua": "lua",
    ".php": "php",
    ".py": "python",
    ".pyi": "python",
    ".rb": "ruby",
    ".rs": "rust",
    ".sh": "sh",
    ".tf": "terraform",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def infer_filetype(path: str | Path) -> str | None:
    """Return the editor-style filetype for ``path`` based on its suffix."""

    suffix = Path(path).suffix.lower()
    if not suffix:
        return None
    return _SUFFIX_FILETYPES.get(suffix, suffix.lstrip("."))


@dataclass(frozen=True, slots=True)
class ScanTarget:
    """Unit of scanning, typically one open file."""

    path: str
    filetype: str | None = None

    @property
    def key(self) -> str:
        """Return the identifier used for timers, sequencing and delivery."""
        return self.path

    @classmethod
    def coerce(cls, value: ScanTarget | str | Path, *, filetype: str | None = None) -> ScanTarget:
        """Return ``value`` as a target, inferring the filetype when absent."""
        if isinstance(value, ScanTarget):
            return value
        path = str(value)
        return cls(path=path, filetype=filetype or infer_filetype(path))


class TargetState(str, Enum):
    """Lifecycle of a single target within an adapter."""

    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"


class ScanStatus(str, Enum):
    """How a single scan ended."""

    DELIVERED = "delivered"
    DISCARDED = "discarded"
    NO_OUTPUT = "no-output"
    MISSING_EXECUTABLE = "missing-executable"
    SPAWN_FAILED = "spawn-failed"
    TIMED_OUT = "timed-out"
    MALFORMED_OUTPUT = "malformed-output"

    @property
    def failed(self) -> bool:
        """Return ``True`` when the tool could not produce a usable result."""
        return self in _FAILED_STATUSES


_FAILED_STATUSES: Final[frozenset[ScanStatus]] = frozenset(
    {
        ScanStatus.MISSING_EXECUTABLE,
        ScanStatus.SPAWN_FAILED,
        ScanStatus.TIMED_OUT,
        ScanStatus.MALFORMED_OUTPUT,
    }
)


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    """Everything a single scan produced."""

    target: ScanTarget
    sequence: int
    command: Command | None
    process: ProcessResult | None
    diagnostics: tuple[Diagnostic, ...]
    status: ScanStatus

    @property
    def delivered(self) -> bool:
        """Return ``True`` when the diagnostics reached the sink."""
        return self.status is ScanStatus.DELIVERED


class Adapter:
    """Configured pipeline bound to one tool integration.

    Triggers are handled on the running event loop. In ``save`` mode each
    trigger starts a scan immediately; in ``change`` mode triggers for the same
    target restart a single debounce timer and only its expiry starts a scan.
    Scans carry a per-target sequence number so a slow, older scan can never
    overwrite the diagnostics of a newer one.
    """

    def __init__(
        self,
        integration: ToolIntegration | Mapping[str, Any],
        *,
        sink: DiagnosticSink | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.integration = ensure_integration(integration)
        self.name = self.integration.name
        self.namespace = f"pysast-{self.name}"
        self.config: AdapterConfig = create_config(self.name)
        self.sink: DiagnosticSink = sink if sink is not None else InMemorySink()
        self.notifier: Notifier = notifier if notifier is not None else default_notifier()
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[ScanOutcome]] = set()
        self._running: dict[str, int] = {}
        self._started_seq: dict[str, int] = {}
        self._delivered_seq: dict[str, int] = {}
        self._known_targets: set[str] = set()
        self._generation = 0

    def __repr__(self) -> str:
        return f"Adapter(name={self.name!r}, enabled={self.config.enabled}, run_mode={self.config.run_mode!r})"

    # configuration ------------------------------------------------------

    def setup(
        self,
        overrides: Mapping[str, Any] | None = None,
        *,
        targets: Iterable[ScanTarget | str | Path] = (),
    ) -> list[asyncio.Task[ScanOutcome]]:
        """Merge ``overrides`` into the configuration and attach ``targets``.

        Each target matching the configured filetypes is passed to
        ``on_attach``. When ``run_on_setup`` is set an initial scan is started
        for each such target, which requires a running event loop.

        Returns:
            list[asyncio.Task[ScanOutcome]]: Initial scans that were started.
        """

        if overrides:
            self.config = merge_config(self.config, overrides)
        started: list[asyncio.Task[ScanOutcome]] = []
        for raw in targets:
            target = ScanTarget.coerce(raw)
            if not self.attach(target):
                continue
            if self.config.enabled and self.config.run_on_setup:
                started.append(self._spawn_scan(target))
        return started

    def attach(self, target: ScanTarget | str | Path) -> bool:
        """Register ``target`` with the adapter and run ``on_attach`` for it.

        Returns:
            bool: ``False`` when the target's filetype is not handled.
        """

        resolved = ScanTarget.coerce(target)
        if not self.handles(resolved):
            return False
        self._known_targets.add(resolved.key)
        if self.config.on_attach is not None:
            self.config.on_attach(resolved, self)
        return True

    def handles(self, target: ScanTarget | str | Path) -> bool:
        """Return ``True`` when ``target`` matches the configured filetypes."""

        filetypes = self.config.filetypes
        if not filetypes:
            return True
        return ScanTarget.coerce(target).filetype in filetypes

    def print_config(self) -> None:
        """Report the current configuration through the adapter's notifier."""

        print_config(self.config, self.name, notifier=self.notifier)

    def set_minimum_severity(self, level: Severity | int | str) -> bool:
        """Validate ``level`` and store it as the minimum severity threshold.

        Args:
            level: Requested threshold as a member, ordinal or name.

        Returns:
            bool: ``True`` when the threshold changed, ``False`` when rejected.
        """

        return set_minimum_severity(self.config, level, notifier=self.notifier)

    def toggle(self) -> bool:
        """Flip the enabled flag and return the new state.

        Disabling cancels pending timers and retracts every diagnostic this
        adapter delivered. Scans already in flight keep running but their
        results are discarded.
        """

        self.config.enabled = not self.config.enabled
        if not self.config.enabled:
            self._generation += 1
            self.cancel_pending()
            for key in sorted(self._known_targets):
                self.sink.reset(self.namespace, key)
            self.notifier.info(f"{self.name} diagnostics disabled")
        else:
            self.notifier.info(f"{self.name} diagnostics enabled")
        return self.config.enabled

    # triggering ---------------------------------------------------------

    def trigger(
        self,
        target: ScanTarget | str | Path,
        *,
        event: TriggerEvent | None = None,
    ) -> bool:
        """Handle a save or change event for ``target``.

        Triggers are ignored while the adapter is disabled, for unhandled
        filetypes, and for events that do not match ``run_mode``.

        Returns:
            bool: ``True`` when a scan was started or (re)scheduled.
        """

        if not self.config.enabled:
            return False
        resolved = ScanTarget.coerce(target)
        if event is not None and event != self.config.run_mode:
            return False
        if not self.handles(resolved):
            return False
        self._known_targets.add(resolved.key)
        if self.config.run_mode == "change":
            self._schedule(resolved)
        else:
            self._spawn_scan(resolved)
        return True

    def _schedule(self, target: ScanTarget) -> None:
        loop = asyncio.get_running_loop()
        previous = self._timers.pop(target.key, None)
        if previous is not None:
            previous.cancel()
        self._timers[target.key] = loop.call_later(self.config.debounce_seconds, self._fire, target)

    def _fire(self, target: ScanTarget) -> None:
        self._timers.pop(target.key, None)
        if not self.config.enabled:
            return
        self._spawn_scan(target)

    def cancel_pending(self, target: ScanTarget | str | Path | None = None) -> None:
        """Cancel the debounce timer for ``target`` or for every target."""

        if target is None:
            keys = list(self._timers)
        else:
            keys = [ScanTarget.coerce(target).key]
        for key in keys:
            handle = self._timers.pop(key, None)
            if handle is not None:
                handle.cancel()

    def state(self, target: ScanTarget | str | Path) -> TargetState:
        """Return the lifecycle state of ``target``."""

        key = ScanTarget.coerce(target).key
        if self._running.get(key):
            return TargetState.RUNNING
        if key in self._timers:
            return TargetState.PENDING
        return TargetState.IDLE

    def _spawn_scan(self, target: ScanTarget) -> asyncio.Task[ScanOutcome]:
        task = asyncio.get_running_loop().create_task(self.run_scan(target), name=f"{self.namespace}:{target.key}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._log_scan_failure)
        return task

    def _log_scan_failure(self, task: asyncio.Task[ScanOutcome]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("%s scan %s failed", self.name, task.get_name(), exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no scan is in flight."""

        while self._timers or self._tasks:
            if self._tasks:
                await asyncio.gather(*tuple(self._tasks))
            else:
                await asyncio.sleep(_IDLE_POLL_SECONDS)

    # scanning -----------------------------------------------------------

    async def run_scan(self, target: ScanTarget | str | Path) -> ScanOutcome:
        """Scan ``target`` once and deliver the resulting diagnostics.

        The configuration is snapshotted before the command is built. Missing
        executables, spawn failures, timeouts and malformed output are
        reported and produce no delivery. Empty output produces no delivery
        either, so earlier diagnostics stay in place. Errors raised by the
        integration's own callables propagate.
        """

        resolved = ScanTarget.coerce(target)
        key = resolved.key
        sequence = self._started_seq.get(key, 0) + 1
        self._started_seq[key] = sequence
        generation = self._generation
        config = snapshot_config(self.config)
        self._running[key] = self._running.get(key, 0) + 1
        try:
            command = build_command(self.integration, config, resolved.path, notifier=self.notifier)
            if command is None:
                return ScanOutcome(resolved, sequence, None, None, (), ScanStatus.MISSING_EXECUTABLE)

            LOGGER.debug("scan %s#%d: %s", key, sequence, command.argv)
            result = await run_process(command.path, command.args, timeout=config.timeout_s)
            if result.spawn_error is not None:
                self.notifier.warn(f"Failed to run {self.name}: {result.spawn_error}")
                return ScanOutcome(resolved, sequence, command, result, (), ScanStatus.SPAWN_FAILED)
            if result.timed_out:
                self.notifier.warn(f"{self.name} timed out after {config.timeout_s}s on {key}")
                return ScanOutcome(resolved, sequence, command, result, (), ScanStatus.TIMED_OUT)

            document = parse_json_output(result.stdout, self.name, notifier=self.notifier)
            if document is NO_DOCUMENT:
                status = ScanStatus.MALFORMED_OUTPUT if result.stdout.strip() else ScanStatus.NO_OUTPUT
                return ScanOutcome(resolved, sequence, command, result, (), status)
            diagnostics = transform_results(
                document,
                self.integration.validate_result,
                self.integration.transform_result,
                config,
                self.name,
            )
            delivered = self._deliver(key, sequence, generation, diagnostics)
            status = ScanStatus.DELIVERED if delivered else ScanStatus.DISCARDED
            return ScanOutcome(resolved, sequence, command, result, tuple(diagnostics), status)
        finally:
            remaining = self._running.get(key, 1) - 1
            if remaining:
                self._running[key] = remaining
            else:
                self._running.pop(key, None)

    def _deliver(self, key: str, sequence: int, generation: int, diagnostics: list[Diagnostic]) -> bool:
        if generation != self._generation or not self.config.enabled:
            LOGGER.debug("dropping scan %s#%d: adapter disabled since scan start", key, sequence)
            return False
        if sequence <= self._delivered_seq.get(key, 0):
            LOGGER.debug("dropping stale scan %s#%d", key, sequence)
            return False
        self._delivered_seq[key] = sequence
        self._known_targets.add(key)
        self.sink.replace(self.namespace, key, diagnostics)
        return True


_IDLE_POLL_SECONDS: Final[float] = 0.01


def create_adapter(
    integration: ToolIntegration | Mapping[str, Any],
    *,
    sink: DiagnosticSink | None = None,
    notifier: Notifier | None = None,
) -> Adapter:
    """Return a new :class:`Adapter` for ``integration``.

    Raises:
        AdapterSpecError: If the integration lacks a required member.
    """

    return Adapter(integration, sink=sink, notifier=notifier)


__all__ = [
    "Adapter",
    "ScanOutcome",
    "ScanStatus",
    "ScanTarget",
    "TargetState",
    "TriggerEvent",
    "create_adapter",
    "infer_filetype",
]
