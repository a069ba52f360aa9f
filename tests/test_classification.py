from __future__ import annotations

from types import SimpleNamespace

import pytest

from eth_offline_signer.classification import (
    ErrorKind,
    classify_error,
    error_messages,
    is_duplicate_submission,
    is_nonce_conflict,
)


@pytest.mark.parametrize(
    "message",
    [
        "nonce too low",
        "Nonce Too High",
        "invalid nonce",
        "nonce 5 but expected 7",
        "replacement transaction underpriced",
    ],
)
def test_nonce_conflict_messages(message):
    assert classify_error(ValueError(message)) is ErrorKind.NONCE_CONFLICT


@pytest.mark.parametrize(
    "message",
    ["insufficient funds for gas", "execution reverted", "already known", ""],
)
def test_other_messages(message):
    assert classify_error(RuntimeError(message)) is ErrorKind.OTHER


def test_json_rpc_error_payload_in_args():
    error = ValueError({"code": -32000, "message": "nonce too low"})
    assert classify_error(error) is ErrorKind.NONCE_CONFLICT


def test_details_attribute_is_inspected():
    error = RuntimeError("RPC request failed")
    error.details = "Nonce provided for the transaction is lower than the current nonce: invalid nonce"
    assert classify_error(error) is ErrorKind.NONCE_CONFLICT


def test_chained_cause_is_inspected():
    try:
        try:
            raise ValueError("nonce too high")
        except ValueError as inner:
            raise RuntimeError("submission failed") from inner
    except RuntimeError as outer:
        assert classify_error(outer) is ErrorKind.NONCE_CONFLICT


def test_non_exception_values_are_classified_as_other():
    assert classify_error(None) is ErrorKind.OTHER
    assert classify_error(SimpleNamespace()) is ErrorKind.OTHER


def test_plain_string_is_matched():
    assert classify_error("NONCE TOO LOW") is ErrorKind.NONCE_CONFLICT


@pytest.mark.parametrize(
    "message",
    ["already known", "ALREADY KNOWN", "known transaction: 0xabc", "transaction already imported"],
)
def test_duplicate_submission_messages(message):
    assert is_duplicate_submission(ValueError({"code": -32000, "message": message}))


def test_duplicate_does_not_match_nonce_conflicts():
    assert not is_duplicate_submission(ValueError("nonce too low"))


def test_error_messages_collects_every_shape():
    error = ValueError({"message": "from payload"})
    error.details = "from details"
    messages = error_messages(error)
    assert "from payload" in messages
    assert "from details" in messages


def test_is_nonce_conflict_shortcut():
    assert is_nonce_conflict(ValueError("replacement transaction underpriced"))
    assert not is_nonce_conflict(ValueError("execution reverted"))


def test_unknown_transaction_is_not_a_duplicate():
    assert not is_duplicate_submission(ValueError({"code": -32000, "message": "unknown transaction type"}))
