# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous process execution for external analysis tools."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

LOGGER = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE: Final[int] = 124
SPAWN_FAILURE_EXIT_CODE: Final[int] = 127

CompletionCallback = Callable[[str, str, int], None]


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Captured output and exit status of a finished process."""

    stdout: str
    stderr: str
    returncode: int
    timed_out: bool = False
    spawn_error: str | None = None


def _decode(value: bytes | None) -> str:
    if not value:
        return ""
    return value.decode("utf-8", errors="replace")


async def _kill(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


async def run_process(
    executable: str,
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Run ``executable`` with ``args`` and capture its text output.

    The process inherits the current environment and working directory unless
    overridden. Spawn failures do not raise; they produce an empty result with
    :data:`SPAWN_FAILURE_EXIT_CODE`. When ``timeout`` elapses the process is
    killed and the result carries :data:`TIMEOUT_EXIT_CODE`. Cancelling the awaiting
    task kills the process before the cancellation propagates.

    Args:
        executable: Program to launch.
        args: Arguments passed after the executable.
        cwd: Working directory; defaults to the current directory.
        env: Environment; defaults to a copy of :data:`os.environ`.
        timeout: Optional limit in seconds; ``None`` waits indefinitely.

    Returns:
        ProcessResult: Decoded streams and exit status.
    """

    workdir = cwd if cwd is not None else Path.cwd()
    environment = dict(env) if env is not None else dict(os.environ)
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=str(workdir),
            env=environment,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        LOGGER.debug("failed to spawn %s: %s", executable, exc)
        return ProcessResult(stdout="", stderr="", returncode=SPAWN_FAILURE_EXIT_CODE, spawn_error=str(exc))

    LOGGER.debug("spawned %s (pid %s)", executable, proc.pid)
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        await _kill(proc)
        LOGGER.debug("%s timed out after %.1fs", executable, timeout)
        return ProcessResult(
            stdout="",
            stderr=f"Command timed out after {timeout:.1f}s",
            returncode=TIMEOUT_EXIT_CODE,
            timed_out=True,
        )
    except asyncio.CancelledError:
        await _kill(proc)
        LOGGER.debug("%s killed after cancellation", executable)
        raise

    returncode = proc.returncode if proc.returncode is not None else 0
    LOGGER.debug("%s exited with status %s", executable, returncode)
    return ProcessResult(stdout=_decode(stdout), stderr=_decode(stderr), returncode=returncode)


def execute_async(
    executable: str,
    args: Sequence[str],
    callback: CompletionCallback,
    *,
    timeout: float | None = None,
) -> asyncio.Task[None]:
    """Schedule ``executable`` on the running loop and report through ``callback``.

    The call returns immediately. ``callback`` receives ``(stdout, stderr,
    exit_code)`` once the process terminates, including when it failed to
    spawn.

    Returns:
        asyncio.Task[None]: Task driving the process; awaiting it is optional.
    """

    async def _drive() -> None:
        result = await run_process(executable, args, timeout=timeout)
        callback(result.stdout, result.stderr, result.returncode)

    return asyncio.get_running_loop().create_task(_drive(), name=f"pysast-exec-{executable}")


__all__ = [
    "CompletionCallback",
    "ProcessResult",
    "SPAWN_FAILURE_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "execute_async",
    "run_process",
]
