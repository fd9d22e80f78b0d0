# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decode raw tool output into structured result payloads."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Final, TypeAlias, cast

from .logging import Notifier, default_notifier
from .models import JsonValue

LOGGER = logging.getLogger(__name__)

RESULTS_FIELD: Final[str] = "results"


class _NoDocument(Enum):
    """Provide the sentinel returned when output carries no JSON document."""

    NO_DOCUMENT = "no-document"


NO_DOCUMENT: Final = _NoDocument.NO_DOCUMENT


def parse_json_output(
    stdout: str | None,
    tool_name: str,
    *,
    notifier: Notifier | None = None,
) -> JsonValue | _NoDocument:
    """Decode ``stdout`` as JSON.

    Empty output means "no results" and is not reported. Output that is not
    valid JSON produces a single warning naming ``tool_name`` and is also
    treated as "no results". A literal ``null`` document decodes to ``None``
    and is distinct from both cases.

    Args:
        stdout: Text captured from the tool's standard output.
        tool_name: Tool name used in the warning message.
        notifier: Channel receiving the malformed-output warning.

    Returns:
        JsonValue | _NoDocument: Decoded document, or :data:`NO_DOCUMENT` when there is
            nothing to process.
    """

    if stdout is None or not stdout.strip():
        return NO_DOCUMENT
    try:
        return cast(JsonValue, json.loads(stdout))
    except json.JSONDecodeError as exc:
        LOGGER.debug("%s produced malformed JSON: %s", tool_name, exc)
        (notifier or default_notifier()).warn(f"Failed to parse {tool_name} JSON output")
        return NO_DOCUMENT


@dataclass(frozen=True, slots=True)
class BareResults:
    """Top-level JSON array of result objects."""

    items: tuple[JsonValue, ...]


@dataclass(frozen=True, slots=True)
class WrappedResults:
    """Top-level JSON object holding the array under ``results``."""

    items: tuple[JsonValue, ...]
    envelope: Mapping[str, JsonValue]


@dataclass(frozen=True, slots=True)
class UnrecognisedPayload:
    """Any other top-level shape; contributes no results."""

    payload: JsonValue


ResultsPayload: TypeAlias = BareResults | WrappedResults | UnrecognisedPayload


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def decode_payload(document: JsonValue | None) -> ResultsPayload:
    """Classify a decoded JSON document by the shape of its results container."""

    match document:
        case Mapping() if _is_sequence(document.get(RESULTS_FIELD)):
            items = cast(Sequence[JsonValue], document[RESULTS_FIELD])
            return WrappedResults(items=tuple(items), envelope=document)
        case _ if _is_sequence(document):
            return BareResults(items=tuple(cast(Sequence[JsonValue], document)))
        case _:
            return UnrecognisedPayload(payload=document)


def iter_results(document: JsonValue | None) -> tuple[JsonValue, ...]:
    """Return the result items carried by ``document`` in their original order."""

    match decode_payload(document):
        case BareResults(items=items) | WrappedResults(items=items):
            return items
        case UnrecognisedPayload():
            return ()


__all__ = [
    "BareResults",
    "NO_DOCUMENT",
    "RESULTS_FIELD",
    "ResultsPayload",
    "UnrecognisedPayload",
    "WrappedResults",
    "decode_payload",
    "iter_results",
    "parse_json_output",
]
