# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry point running built-in integrations on single files."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

import typer
from rich.table import Table

from ..adapter import Adapter, ScanOutcome, ScanStatus
from ..config import render_config
from ..errors import ConfigError, InvalidSeverityValue
from ..logging import ConsoleNotifier, detect_tty, get_console, notify
from ..models import Diagnostic
from ..severity import Severity
from ..tools import available_integrations, get_integration

app = typer.Typer(help="Run static-analysis tools and normalise their findings.", no_args_is_help=True)

EXIT_EXECUTABLE_MISSING: Final[int] = 3
EXIT_SCAN_FAILED: Final[int] = 4


def _parse_assignments(assignments: Sequence[str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected key=value, got '{assignment}'")
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        overrides[key.strip()] = value
    return overrides


def _build_adapter(tool: str, overrides: dict[str, Any], *, use_emoji: bool) -> Adapter:
    integration = get_integration(tool)
    if integration is None:
        known = ", ".join(available_integrations())
        raise typer.BadParameter(f"unknown tool '{tool}' (available: {known})", param_hint="--tool")
    adapter = Adapter(integration, notifier=ConsoleNotifier(use_emoji=use_emoji))
    try:
        adapter.setup(overrides)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return adapter


def _render_table(path: Path, diagnostics: Sequence[Diagnostic]) -> Table:
    table = Table(title=str(path), show_lines=False)
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Severity")
    table.add_column("Source")
    table.add_column("Message")
    for diagnostic in diagnostics:
        severity = diagnostic.severity.name if diagnostic.severity is not None else "-"
        source = diagnostic.source or ""
        if diagnostic.code:
            source = f"{source} {diagnostic.code}"
        table.add_row(
            str(diagnostic.lnum + 1),
            str(diagnostic.col + 1),
            severity,
            source,
            diagnostic.message,
        )
    return table


@app.command("scan")
def scan(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to analyse."),
    tool: str = typer.Option(..., "--tool", "-t", help="Built-in integration to run."),
    min_severity: str | None = typer.Option(
        None,
        "--min-severity",
        help="Drop findings less severe than this level (error, warn, info, hint).",
    ),
    extra_args: list[str] = typer.Option([], "--arg", help="Extra argument passed to the tool."),
    settings: list[str] = typer.Option([], "--set", help="Configuration override as key=value."),
    timeout: float | None = typer.Option(None, "--timeout", min=0.1, help="Kill the tool after SECONDS."),
    as_json: bool = typer.Option(False, "--json", help="Emit diagnostics as JSON."),
    use_emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Decorate notifications with emoji."),
) -> None:
    """Scan PATH once and print the normalised diagnostics.

    Exits 1 when findings were reported, 0 when none were, 3 when no tool
    executable is installed and 4 when the tool failed to produce usable output.
    """

    overrides = _parse_assignments(settings)
    if extra_args:
        overrides["extra_args"] = list(extra_args)
    if timeout is not None:
        overrides["timeout_s"] = timeout
    if min_severity is not None:
        try:
            overrides["minimum_severity"] = Severity.coerce(min_severity)
        except InvalidSeverityValue as exc:
            raise typer.BadParameter(str(exc), param_hint="--min-severity") from exc

    adapter = _build_adapter(tool, overrides, use_emoji=use_emoji)
    outcome: ScanOutcome = asyncio.run(adapter.run_scan(path.resolve()))
    if outcome.status is ScanStatus.MISSING_EXECUTABLE:
        raise typer.Exit(code=EXIT_EXECUTABLE_MISSING)
    if outcome.status.failed:
        raise typer.Exit(code=EXIT_SCAN_FAILED)

    diagnostics = list(outcome.diagnostics)
    if as_json:
        typer.echo(json.dumps([diag.model_dump(mode="json") for diag in diagnostics], indent=2))
    elif diagnostics:
        get_console(color=detect_tty(), emoji=use_emoji).print(_render_table(path, diagnostics))
    else:
        notify("ok", f"No {tool} findings for {path}", use_emoji=use_emoji)
    raise typer.Exit(code=1 if diagnostics else 0)


@app.command("tools")
def list_tools() -> None:
    """List the built-in integrations."""

    for name in available_integrations():
        integration = get_integration(name)
        if integration is None:
            continue
        executable = integration.executable
        candidates = executable if isinstance(executable, str) else ", ".join(executable)
        typer.echo(f"{name}: {candidates}")


@app.command("config")
def show_config(
    tool: str = typer.Argument(..., help="Built-in integration name."),
    settings: list[str] = typer.Option([], "--set", help="Configuration override as key=value."),
) -> None:
    """Print the configuration an adapter would use after applying overrides."""

    adapter = _build_adapter(tool, _parse_assignments(settings), use_emoji=False)
    typer.echo(render_config(adapter.config, adapter.name))


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
