"""Structural checks on raw logs before any decode attempt.

Nodes occasionally deliver truncated or placeholder log objects around
reorgs and provider hiccups. Handing one of those to the ABI decoder ends
in a buffer-bounds error, so every log passes through here first. Pure,
synchronous, no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

HEX_PREFIX = "0x"
EMPTY_DATA = "0x"
# "0x" + one 32-byte ABI word
MIN_DATA_LENGTH = len(HEX_PREFIX) + 64


def rejection_reason(log: Any) -> str | None:
    """Return why ``log`` cannot be decoded, or None if it looks sound."""
    if log is None:
        return "missing log"
    if not isinstance(log, Mapping):
        return f"log is {type(log).__name__}, not a mapping"

    data = log.get("data")
    if data is None:
        return "missing data"
    if not isinstance(data, str):
        return f"data is {type(data).__name__}, not a string"
    if data == EMPTY_DATA or not data:
        return "empty data"
    if not data.startswith(HEX_PREFIX):
        return "data is not 0x-prefixed"
    if len(data) < MIN_DATA_LENGTH:
        return f"data too short ({len(data)} < {MIN_DATA_LENGTH})"

    topics = log.get("topics")
    if topics is None:
        return "missing topics"
    if not isinstance(topics, (list, tuple)):
        return f"topics is {type(topics).__name__}, not a sequence"
    if not topics:
        return "empty topics"

    return None


def is_processable(log: Any) -> bool:
    """True when ``log`` is safe to hand to the decoder."""
    return rejection_reason(log) is None
