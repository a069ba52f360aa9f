"""Test doubles for the JSON-RPC client and the broadcaster."""
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

from eth_offline_signer.broadcaster import BroadcastResult, Receipt

# First development account of Anvil/Hardhat; never holds real funds.
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


def _resolve(outcome: Any) -> Any:
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome


class FakeEth:
    """Stand-in for ``web3.eth`` driven by queued outcomes."""

    def __init__(
        self,
        send_outcomes: List[Any] | None = None,
        lookup_outcomes: List[Any] | None = None,
        receipt: Any = None,
    ) -> None:
        self.send_outcomes = list(send_outcomes or [])
        self.lookup_outcomes = list(lookup_outcomes or [])
        self.receipt = receipt
        self.sent: List[str] = []
        self.lookups: List[str] = []
        self.receipt_calls: List[Dict[str, Any]] = []

    def send_raw_transaction(self, raw: str) -> Any:
        self.sent.append(raw)
        return _resolve(self.send_outcomes.pop(0))

    def get_transaction(self, tx_hash: str) -> Any:
        self.lookups.append(tx_hash)
        return _resolve(self.lookup_outcomes.pop(0))

    def wait_for_transaction_receipt(self, tx_hash: str, timeout: float, poll_latency: float) -> Any:
        self.receipt_calls.append({"hash": tx_hash, "timeout": timeout, "poll_latency": poll_latency})
        return _resolve(self.receipt)


def make_web3(eth: FakeEth) -> SimpleNamespace:
    return SimpleNamespace(eth=eth)


class FakeBroadcaster:
    """Records submissions; each queued outcome is a hash string or an exception."""

    def __init__(self, submit_outcomes: List[Any], receipt: Any = None) -> None:
        self.submit_outcomes = list(submit_outcomes)
        self.receipt = receipt if receipt is not None else Receipt(block_number=123, gas_used=21000)
        self.submitted: List[Dict[str, Any]] = []
        self.receipt_requests: List[Dict[str, Any]] = []

    def submit(self, signed_tx: str, chain_id: int) -> BroadcastResult:
        self.submitted.append({"signed_tx": signed_tx, "chain_id": chain_id})
        outcome = _resolve(self.submit_outcomes.pop(0))
        return BroadcastResult(transaction_hash=outcome, explorer_url=f"https://explorer.test/tx/{outcome}")

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Receipt:
        self.receipt_requests.append({"hash": tx_hash, "timeout": timeout})
        return _resolve(self.receipt)
