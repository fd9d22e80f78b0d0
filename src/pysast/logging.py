# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing notifications rendered through a shared Rich console."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Final, Literal, Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

NoticeLevel = Literal["info", "ok", "warn", "error"]


@dataclass(frozen=True, slots=True)
class _NoticeStyle:
    glyph: str
    style: str


_NOTICE_STYLES: Final[dict[NoticeLevel, _NoticeStyle]] = {
    "info": _NoticeStyle("ℹ️ ", "cyan"),
    "ok": _NoticeStyle("✅ ", "green"),
    "warn": _NoticeStyle("⚠️ ", "yellow"),
    "error": _NoticeStyle("❌ ", "red"),
}


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=8)
def _console(color: bool, emoji: bool, tty: bool) -> Console:
    return Console(
        color_system="auto" if color and tty else None,
        force_terminal=tty,
        no_color=not (color and tty),
        emoji=emoji,
        soft_wrap=True,
    )


def get_console(*, color: bool, emoji: bool) -> Console:
    """Return the shared console for the given presentation flags.

    Args:
        color: ``True`` when ANSI colour output is wanted. Colour is only
            emitted when stdout is a terminal.
        emoji: ``True`` when Rich should render emoji glyphs.

    Returns:
        Console: Cached console keyed by the flags and the current TTY state.
    """

    return _console(color, emoji, detect_tty())


def notify(level: NoticeLevel, message: str, *, use_emoji: bool = False, use_color: bool | None = None) -> None:
    """Print ``message`` styled for ``level``.

    Args:
        level: Notification level selecting the glyph and colour.
        message: Text to display.
        use_emoji: Prefix the message with the level's glyph.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
    """

    look = _NOTICE_STYLES[level]
    color = detect_tty() if use_color is None else use_color
    text = Text(f"{look.glyph if use_emoji else ''}{message}")
    if color:
        text.stylize(look.style)
    get_console(color=color, emoji=use_emoji).print(text)


@runtime_checkable
class Notifier(Protocol):
    """Channel used by adapters to report conditions to the user."""

    def info(self, message: str) -> None:
        """Report an informational message."""
        ...

    def warn(self, message: str) -> None:
        """Report a recoverable problem."""
        ...

    def error(self, message: str) -> None:
        """Report a rejected operation."""
        ...


@dataclass(slots=True)
class ConsoleNotifier:
    """:class:`Notifier` that renders messages through the Rich console."""

    use_emoji: bool = False
    use_color: bool | None = None

    def info(self, message: str) -> None:
        notify("info", message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        notify("ok", message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        notify("warn", message, use_emoji=self.use_emoji, use_color=self.use_color)

    def error(self, message: str) -> None:
        notify("error", message, use_emoji=self.use_emoji, use_color=self.use_color)


def default_notifier() -> Notifier:
    """Return the notifier used when callers do not supply one."""

    return ConsoleNotifier()


__all__ = [
    "ConsoleNotifier",
    "NoticeLevel",
    "Notifier",
    "default_notifier",
    "detect_tty",
    "get_console",
    "notify",
]
