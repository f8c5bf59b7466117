"""Opportunistic ABI decoding of Transfer and PoolCreated logs.

Both decode methods return a typed event or a DecodeFailure; nothing
raises past this module. Failures are logged here, once, at a severity
that depends on whether they are the expected noise of a shared topic
hash or something worth a look.
"""

from __future__ import annotations

import logging
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import InsufficientDataBytes
from web3 import Web3

from evm_sniper.models.events import (
    DecodedPoolCreated,
    DecodedTransfer,
    DecodeFailure,
    FeeTier,
    RawLogEvent,
)
from evm_sniper.pipeline.validator import rejection_reason

log = logging.getLogger(__name__)

TRANSFER_SIGNATURE = "Transfer(address,address,uint256)"
POOL_CREATED_SIGNATURE = "PoolCreated(address,address,uint24,int24,address)"

TRANSFER_TOPIC = Web3.to_hex(Web3.keccak(text=TRANSFER_SIGNATURE))
POOL_CREATED_TOPIC = Web3.to_hex(Web3.keccak(text=POOL_CREATED_SIGNATURE))

_BOUNDS_MARKERS = ("out-of-bounds", "out of bounds", "buffer", "insufficient")


def _is_bounds_error(exc: Exception) -> bool:
    """Short or overrun buffers are routine on the Transfer stream."""
    if isinstance(exc, InsufficientDataBytes):
        return True
    msg = str(exc).lower()
    return any(marker in msg for marker in _BOUNDS_MARKERS)


def _hex_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = str(value)
    if text.startswith(("0x", "0X")):
        text = text[2:]
    return bytes.fromhex(text)


def _topic_word(topic: Any) -> bytes:
    word = _hex_bytes(topic)
    if len(word) != 32:
        raise ValueError(f"topic is {len(word)} bytes, out-of-bounds for a 32-byte word")
    return word


def _topic_address(topic: Any) -> str:
    (address,) = abi_decode(["address"], _topic_word(topic))
    return address.lower()


def _normalize_topic(topic: Any) -> str:
    if isinstance(topic, (bytes, bytearray)):
        return "0x" + bytes(topic).hex()
    return str(topic).lower()


def _to_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        text = str(value)
        return int(text, 16) if text.startswith("0x") else int(text)
    except ValueError:
        return None


def _diagnostics(raw: RawLogEvent | None) -> dict:
    """Field presence and sizes only, never the payload itself."""
    if not hasattr(raw, "get"):
        return {"present": raw is not None}
    data = raw.get("data")
    topics = raw.get("topics")
    return {
        "has_data": data is not None,
        "data_length": len(data) if isinstance(data, str) else 0,
        "has_topics": topics is not None,
        "topics_length": len(topics) if isinstance(topics, (list, tuple)) else 0,
        "address": raw.get("address"),
    }


class EventDecoder:
    """Decodes validated raw logs into typed events."""

    def decode_transfer(self, raw: RawLogEvent) -> DecodedTransfer | DecodeFailure:
        """Decode an ERC20 Transfer log."""
        failure = self._precheck(raw, TRANSFER_TOPIC, expected_topics=3)
        if failure is not None:
            return self._report(failure, raw)

        try:
            from_address = _topic_address(raw["topics"][1])
            to_address = _topic_address(raw["topics"][2])
            (value,) = abi_decode(["uint256"], _hex_bytes(raw["data"]))
        except Exception as exc:
            return self._report(self._classify(exc), raw)

        return DecodedTransfer(
            from_address=from_address,
            to_address=to_address,
            value=value,
            contract=str(raw.get("address") or "").lower(),
            block_number=_to_int(raw.get("blockNumber")),
            transaction_hash=raw.get("transactionHash"),
        )

    def decode_pool_created(self, raw: RawLogEvent) -> DecodedPoolCreated | DecodeFailure:
        """Decode a factory PoolCreated log.

        token0, token1 and fee are indexed; tickSpacing and pool are in data.
        """
        failure = self._precheck(raw, POOL_CREATED_TOPIC, expected_topics=4)
        if failure is not None:
            return self._report(failure, raw)

        try:
            topics = raw["topics"]
            token0 = _topic_address(topics[1])
            token1 = _topic_address(topics[2])
            (fee,) = abi_decode(["uint24"], _topic_word(topics[3]))
            tick_spacing, pool = abi_decode(["int24", "address"], _hex_bytes(raw["data"]))
        except Exception as exc:
            return self._report(self._classify(exc), raw)

        return DecodedPoolCreated(
            token0=token0,
            token1=token1,
            fee=FeeTier.coerce(fee),
            tick_spacing=tick_spacing,
            pool_address=pool.lower(),
            block_number=_to_int(raw.get("blockNumber")),
            transaction_hash=raw.get("transactionHash"),
        )

    # ── Internals ──────────────────────────────────────────

    def _precheck(
        self, raw: RawLogEvent, signature_topic: str, expected_topics: int,
    ) -> DecodeFailure | None:
        reason = rejection_reason(raw)
        if reason is not None:
            return DecodeFailure("malformed", reason, expected=True)

        topics = raw["topics"]
        topic0 = _normalize_topic(topics[0])
        if topic0 != signature_topic:
            return DecodeFailure("signature_mismatch", f"topic0={topic0[:18]}")

        if len(topics) != expected_topics:
            # Same topic hash, different indexing (e.g. ERC721 Transfer)
            return DecodeFailure(
                "topic_count",
                f"{len(topics)} topics, expected {expected_topics}",
                expected=True,
            )
        return None

    def _classify(self, exc: Exception) -> DecodeFailure:
        if _is_bounds_error(exc):
            return DecodeFailure("out_of_bounds", str(exc), expected=True)
        return DecodeFailure(type(exc).__name__, str(exc))

    def _report(self, failure: DecodeFailure, raw: RawLogEvent) -> DecodeFailure:
        if failure.expected:
            data = raw.get("data") if hasattr(raw, "get") else None
            log.debug(
                "Skipping undecodable log (%s: %s), data preview %s",
                failure.reason, failure.detail,
                data[:20] + "..." if isinstance(data, str) else "none",
            )
        else:
            log.error(
                "Failed to decode log (%s: %s) %s",
                failure.reason, failure.detail, _diagnostics(raw),
            )
        return failure
