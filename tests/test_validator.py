"""Structural log checks run before any decode attempt."""

from __future__ import annotations

import pytest

from evm_sniper.pipeline.validator import is_processable, rejection_reason

from tests.factories import make_pool_created_log, make_transfer_log


@pytest.mark.parametrize(
    "raw",
    [
        None,
        {},
        {"data": None},
        {"data": "0x"},
        {"data": "0x123", "topics": None},
        {"data": "0x123", "topics": []},
    ],
    ids=["none", "empty", "data-null", "data-empty", "topics-null", "topics-empty"],
)
def test_malformed_logs_rejected(raw):
    assert not is_processable(raw)
    assert rejection_reason(raw) is not None


def test_well_formed_transfer_accepted():
    assert is_processable(make_transfer_log())
    assert rejection_reason(make_transfer_log()) is None


def test_well_formed_pool_created_accepted():
    assert is_processable(make_pool_created_log())


def test_data_must_be_string():
    raw = make_transfer_log()
    raw["data"] = b"\x00" * 32
    assert rejection_reason(raw) == "data is bytes, not a string"


def test_data_must_be_hex_prefixed():
    raw = make_transfer_log()
    raw["data"] = raw["data"][2:] + "00"
    assert rejection_reason(raw) == "data is not 0x-prefixed"


def test_data_shorter_than_one_word():
    raw = make_transfer_log()
    raw["data"] = "0x" + "00" * 31
    assert "too short" in rejection_reason(raw)

    raw["data"] = "0x" + "00" * 32
    assert is_processable(raw)


def test_topics_must_be_sequence():
    raw = make_transfer_log()
    raw["topics"] = "0xddf252ad"
    assert rejection_reason(raw) == "topics is str, not a sequence"


def test_non_mapping_rejected():
    assert rejection_reason(["data", "topics"]) == "log is list, not a mapping"
