# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the adapter orchestrator."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import pytest

from pysast import adapter as adapter_module
from pysast.adapter import Adapter, ScanStatus, ScanTarget, TargetState, create_adapter, infer_filetype
from pysast.delivery import CallbackSink, InMemorySink
from pysast.errors import AdapterSpecError
from pysast.execution.process import SPAWN_FAILURE_EXIT_CODE, ProcessResult
from pysast.severity import Severity


def _payload(*messages: str, severity: str = "error") -> str:
    items = [{"message": message, "line": index + 1, "severity": severity} for index, message in enumerate(messages)]
    return json.dumps(items)


def _adapter(integration: Any, notifier: Any, **overrides: Any) -> tuple[Adapter, InMemorySink]:
    sink = InMemorySink()
    adapter = create_adapter(integration, sink=sink, notifier=notifier)
    if overrides:
        adapter.setup(overrides)
    return adapter, sink


def test_create_adapter_validates_integration() -> None:
    with pytest.raises(AdapterSpecError, match="transform_result"):
        create_adapter({"name": "x", "executable": "x", "build_args": print, "validate_result": bool})


def test_adapter_namespace_and_defaults(make_echo, notifier) -> None:
    adapter, _ = _adapter(make_echo(_payload("a")), notifier)
    assert adapter.namespace == "pysast-echo"
    assert adapter.config.run_mode == "save"
    assert "echo" in repr(adapter)


def test_run_scan_delivers_records(make_echo, notifier) -> None:
    adapter, sink = _adapter(make_echo(_payload("bad", "worse")), notifier)
    outcome = asyncio.run(adapter.run_scan("src/app.py"))
    assert outcome.delivered
    assert outcome.sequence == 1
    assert [diag.message for diag in sink.get(adapter.namespace, "src/app.py")] == ["bad", "worse"]
    assert all(diag.source == "echo" for diag in outcome.diagnostics)


def test_save_trigger_runs_immediately(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> None:
        assert adapter.trigger("a.py", event="save")
        await adapter.wait_idle()

    asyncio.run(scenario())
    assert integration.calls == ["a.py"]
    assert len(sink.get(adapter.namespace, "a.py")) == 1
    assert adapter.state("a.py") is TargetState.IDLE


def test_change_mode_debounces_bursts(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    adapter, sink = _adapter(integration, notifier, run_mode="change", debounce_ms=150)
    fired_at: list[float] = []
    original_build_args = integration.build_args

    def timed_build_args(config: Any, path: str) -> Any:
        fired_at.append(asyncio.get_running_loop().time())
        return original_build_args(config, path)

    integration.build_args = timed_build_args  # type: ignore[method-assign]

    async def scenario() -> float:
        last_trigger = 0.0
        for _ in range(5):
            adapter.trigger("a.py", event="change")
            last_trigger = asyncio.get_running_loop().time()
            assert adapter.state("a.py") is TargetState.PENDING
            await asyncio.sleep(0.03)
        await adapter.wait_idle()
        return last_trigger

    last_trigger = asyncio.run(scenario())
    assert len(fired_at) == 1
    assert fired_at[0] - last_trigger >= 0.14
    assert sink.deliveries == 1


def test_change_mode_targets_are_independent(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    adapter, sink = _adapter(integration, notifier, run_mode="change", debounce_ms=20)

    async def scenario() -> None:
        adapter.trigger("a.py")
        adapter.trigger("b.py")
        adapter.trigger("a.py")
        await adapter.wait_idle()

    asyncio.run(scenario())
    assert sorted(integration.calls) == ["a.py", "b.py"]
    assert sorted(sink.targets(adapter.namespace)) == ["a.py", "b.py"]


def test_triggers_ignored_when_disabled_or_mismatched(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    adapter, _ = _adapter(integration, notifier, filetypes=["python"])

    async def scenario() -> list[bool]:
        results = [
            adapter.trigger("notes.md"),
            adapter.trigger("a.py", event="change"),
        ]
        adapter.toggle()
        results.append(adapter.trigger("a.py"))
        await adapter.wait_idle()
        return results

    assert asyncio.run(scenario()) == [False, False, False]
    assert integration.calls == []


def test_newer_scan_wins_over_slow_older_scan(make_echo, notifier) -> None:
    integration = make_echo((_payload("stale"), 0.6), (_payload("fresh"), 0.0))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> tuple[Any, Any]:
        slow = asyncio.create_task(adapter.run_scan("a.py"))
        await asyncio.sleep(0.1)
        fast = asyncio.create_task(adapter.run_scan("a.py"))
        return await slow, await fast

    slow, fast = asyncio.run(scenario())
    assert fast.sequence == 2 and fast.delivered
    assert slow.sequence == 1 and not slow.delivered
    assert [diag.message for diag in sink.get(adapter.namespace, "a.py")] == ["fresh"]


def test_scan_uses_configuration_snapshot(make_echo, notifier) -> None:
    integration = make_echo((_payload("bad", severity="hint"), 0.3))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> Any:
        task = asyncio.create_task(adapter.run_scan("a.py"))
        await asyncio.sleep(0.05)
        adapter.set_minimum_severity(Severity.ERROR)
        return await task

    outcome = asyncio.run(scenario())
    assert [diag.severity for diag in outcome.diagnostics] == [Severity.HINT]
    assert adapter.config.minimum_severity is Severity.ERROR


def test_toggle_retracts_and_discards_in_flight(make_echo, notifier) -> None:
    integration = make_echo((_payload("first"), 0.0), (_payload("late"), 0.4))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> Any:
        await adapter.run_scan("a.py")
        assert sink.get(adapter.namespace, "a.py")
        in_flight = asyncio.create_task(adapter.run_scan("a.py"))
        await asyncio.sleep(0.1)
        assert adapter.toggle() is False
        return await in_flight

    late = asyncio.run(scenario())
    assert not late.delivered
    assert sink.get(adapter.namespace, "a.py") == []
    assert notifier.of("info") == ["echo diagnostics disabled"]
    assert adapter.toggle() is True
    assert notifier.of("info")[-1] == "echo diagnostics enabled"
    assert sink.get(adapter.namespace, "a.py") == []


def test_toggle_cancels_pending_timers(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    adapter, _ = _adapter(integration, notifier, run_mode="change", debounce_ms=50)

    async def scenario() -> None:
        adapter.trigger("a.py")
        adapter.toggle()
        assert adapter.state("a.py") is TargetState.IDLE
        await asyncio.sleep(0.1)
        await adapter.wait_idle()

    asyncio.run(scenario())
    assert integration.calls == []


def test_missing_executable_aborts_scan(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"), executable=("pysast-no-such-tool",))
    adapter, sink = _adapter(integration, notifier)
    outcome = asyncio.run(adapter.run_scan("a.py"))
    assert outcome.command is None and not outcome.delivered
    assert outcome.status is ScanStatus.MISSING_EXECUTABLE
    assert notifier.of("warn") == ["No executable found in PATH: pysast-no-such-tool"]
    assert sink.deliveries == 0


def test_malformed_output_warns_and_keeps_previous_records(make_echo, notifier) -> None:
    integration = make_echo((_payload("kept"), 0.0), ("{not json", 0.0))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> Any:
        await adapter.run_scan("a.py")
        return await adapter.run_scan("a.py")

    outcome = asyncio.run(scenario())
    assert not outcome.delivered
    assert notifier.of("warn") == ["Failed to parse echo JSON output"]
    assert outcome.status is ScanStatus.MALFORMED_OUTPUT and outcome.status.failed
    assert [diag.message for diag in sink.get(adapter.namespace, "a.py")] == ["kept"]


def test_empty_output_keeps_previous_records(make_echo, notifier) -> None:
    integration = make_echo((_payload("real finding"), 0.0), ("", 0.0))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> Any:
        await adapter.run_scan("a.py")
        return await adapter.run_scan("a.py")

    outcome = asyncio.run(scenario())
    assert outcome.status is ScanStatus.NO_OUTPUT
    assert not outcome.delivered and not outcome.status.failed
    assert [diag.message for diag in sink.get(adapter.namespace, "a.py")] == ["real finding"]
    assert sink.deliveries == 1
    assert notifier.messages == []


@pytest.mark.parametrize("document", ["null", "42", "{}", '{"results": {"a": 1}}'])
def test_unrecognised_document_clears_records(make_echo, notifier, document: str) -> None:
    integration = make_echo((_payload("old"), 0.0), (document, 0.0))
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> Any:
        await adapter.run_scan("a.py")
        return await adapter.run_scan("a.py")

    outcome = asyncio.run(scenario())
    assert outcome.status is ScanStatus.DELIVERED
    assert outcome.diagnostics == ()
    assert sink.get(adapter.namespace, "a.py") == []
    assert notifier.messages == []


def test_spawn_failure_is_reported(make_echo, notifier, monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing(*args: Any, **kwargs: Any) -> ProcessResult:
        return ProcessResult("", "", SPAWN_FAILURE_EXIT_CODE, spawn_error="No such file")

    monkeypatch.setattr(adapter_module, "run_process", failing)
    adapter, sink = _adapter(make_echo(_payload("bad")), notifier)
    outcome = asyncio.run(adapter.run_scan("a.py"))
    assert not outcome.delivered
    assert outcome.process is not None and outcome.process.returncode == SPAWN_FAILURE_EXIT_CODE
    assert outcome.status is ScanStatus.SPAWN_FAILED
    assert notifier.of("warn") == ["Failed to run echo: No such file"]
    assert sink.deliveries == 0


def test_timeout_is_reported(make_echo, notifier) -> None:
    adapter, sink = _adapter(make_echo((_payload("slow"), 5.0)), notifier, timeout_s=0.2)
    outcome = asyncio.run(adapter.run_scan("a.py"))
    assert outcome.process is not None and outcome.process.timed_out
    assert outcome.status is ScanStatus.TIMED_OUT
    assert not outcome.delivered
    assert "timed out" in notifier.of("warn")[0]


def test_transformer_errors_propagate_from_scan(make_echo, notifier) -> None:
    def broken(result: Any, config: Any) -> Any:
        raise ValueError("bad integration")

    adapter, _ = _adapter(make_echo(_payload("bad"), transform=broken), notifier)
    with pytest.raises(ValueError, match="bad integration"):
        asyncio.run(adapter.run_scan("a.py"))
    assert adapter.state("a.py") is TargetState.IDLE


def test_failed_triggered_scan_is_logged(make_echo, notifier, caplog: pytest.LogCaptureFixture) -> None:
    def broken(result: Any, config: Any) -> Any:
        raise ValueError("bad integration")

    adapter, _ = _adapter(make_echo(_payload("bad"), transform=broken), notifier)

    async def scenario() -> None:
        assert adapter.trigger("a.py")
        with pytest.raises(ValueError, match="bad integration"):
            await adapter.wait_idle()

    with caplog.at_level(logging.ERROR, logger="pysast.adapter"):
        asyncio.run(scenario())
    failures = [record for record in caplog.records if "echo scan" in record.getMessage()]
    assert len(failures) == 1
    assert failures[0].exc_info is not None
    assert isinstance(failures[0].exc_info[1], ValueError)


def test_setup_attaches_and_runs_initial_scans(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    attached: list[tuple[str, Adapter]] = []
    adapter, sink = _adapter(integration, notifier)

    async def scenario() -> int:
        tasks = adapter.setup(
            {
                "filetypes": ["python"],
                "run_on_setup": True,
                "on_attach": lambda target, owner: attached.append((target.path, owner)),
            },
            targets=["a.py", "README.md", ScanTarget("b", filetype="python")],
        )
        await adapter.wait_idle()
        return len(tasks)

    assert asyncio.run(scenario()) == 2
    assert [path for path, _ in attached] == ["a.py", "b"]
    assert all(owner is adapter for _, owner in attached)
    assert sorted(sink.targets(adapter.namespace)) == ["a.py", "b"]


def test_setup_without_run_on_setup_does_not_scan(make_echo, notifier) -> None:
    integration = make_echo(_payload("bad"))
    adapter, _ = _adapter(integration, notifier)
    assert adapter.setup({"debounce_ms": 10}, targets=["a.py"]) == []
    assert integration.calls == []


def test_print_config_and_severity_setter_use_notifier(make_echo, notifier) -> None:
    adapter, _ = _adapter(make_echo(_payload("bad")), notifier)
    adapter.print_config()
    assert notifier.of("info")[0].startswith("Current echo Configuration:")
    assert adapter.set_minimum_severity(9) is False
    assert notifier.of("error") == ["Invalid severity level"]


def test_callback_sink_receives_replacements(make_echo, notifier) -> None:
    received: list[tuple[str, str, list[Any]]] = []
    sink = CallbackSink(lambda *args: received.append(args))
    adapter = Adapter(make_echo(_payload("bad")), sink=sink, notifier=notifier)
    asyncio.run(adapter.run_scan("a.py"))
    adapter.toggle()
    assert [(ns, target, len(diags)) for ns, target, diags in received] == [
        ("pysast-echo", "a.py", 1),
        ("pysast-echo", "a.py", 0),
    ]


@pytest.mark.parametrize(
    ("path", "expected"),
    [("src/app.py", "python"), ("x.YML", "yaml"), ("Makefile", None), ("a.zig", "zig")],
)
def test_infer_filetype(path: str, expected: str | None) -> None:
    assert infer_filetype(Path(path)) == expected
