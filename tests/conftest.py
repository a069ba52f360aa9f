"""Shared fixtures for the signer test-suite."""
from __future__ import annotations

import pytest

from eth_offline_signer.params import TransactionParameters

from .fakes import RECIPIENT


@pytest.fixture
def tx_params() -> TransactionParameters:
    return TransactionParameters(
        to=RECIPIENT,
        value="1000000000000000",
        chain_id=11155111,
        nonce=10,
        gas_limit="21000",
        max_fee_per_gas="30000000000",
        max_priority_fee_per_gas="1500000000",
    )


@pytest.fixture(autouse=True)
def clean_signer_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shells from leaking configuration into tests."""

    for key in ("ETH_SIGNER_RPC_URL", "ETH_SIGNER_MAX_RETRIES", "ETH_SIGNER_RECEIPT_TIMEOUT", "ANVIL_RPC_URL"):
        monkeypatch.delenv(key, raising=False)
