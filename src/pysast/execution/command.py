# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve tool executables and assemble their argument vectors."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from shutil import which as _which

from ..config import AdapterConfig
from ..errors import ExecutableNotFound
from ..logging import Notifier, default_notifier
from ..spec import ToolIntegration, executable_candidates


@dataclass(frozen=True, slots=True)
class Command:
    """Executable and arguments ready to be spawned."""

    name: str
    path: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        """Return the full argument vector including the executable."""
        return [self.path, *self.args]


def find_executable(cmd: str) -> str | None:
    """Return the fully-qualified path to ``cmd`` if it exists on ``PATH``."""

    return _which(cmd)


def resolve_executable(candidates: Sequence[str]) -> tuple[str, str]:
    """Return the first resolvable candidate and its absolute path.

    Args:
        candidates: Executable names in preference order.

    Returns:
        tuple[str, str]: Candidate name and the path it resolved to.

    Raises:
        ExecutableNotFound: If no candidate resolves.
    """

    for candidate in candidates:
        path = find_executable(candidate)
        if path:
            return candidate, path
    raise ExecutableNotFound(candidates)


def build_command(
    integration: ToolIntegration,
    config: AdapterConfig,
    file_path: str,
    *,
    notifier: Notifier | None = None,
) -> Command | None:
    """Build the command that scans ``file_path`` with ``integration``.

    A missing executable is reported through ``notifier`` and yields ``None``;
    callers must not execute anything in that case. Errors raised by the
    integration's argument builder propagate unchanged.

    Args:
        integration: Tool integration supplying candidates and ``build_args``.
        config: Configuration snapshot handed to ``build_args``.
        file_path: Target file to analyse.
        notifier: Channel receiving the not-found warning.

    Returns:
        Command | None: Command to spawn, or ``None`` when unresolvable.
    """

    try:
        name, path = resolve_executable(executable_candidates(integration))
    except ExecutableNotFound as exc:
        (notifier or default_notifier()).warn(str(exc))
        return None
    args = tuple(str(arg) for arg in integration.build_args(config, file_path))
    return Command(name=name, path=path, args=args)


__all__ = ["Command", "build_command", "find_executable", "resolve_executable"]
