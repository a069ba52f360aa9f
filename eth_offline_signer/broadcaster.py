"""Submit signed transactions over JSON-RPC and confirm them.

Duplicate submissions ("already known") are not failures: the node already
holds the exact payload, so its hash is recomputed locally and confirmed
with a read-only lookup.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import urlparse

import requests
from eth_utils import keccak, to_hex
from web3 import Web3

from .classification import is_duplicate_submission
from .config import (
    DEFAULT_DUPLICATE_LOOKUP_DELAY,
    DEFAULT_DUPLICATE_LOOKUP_MAX_DELAY,
    DEFAULT_DUPLICATE_LOOKUP_RETRIES,
    DEFAULT_RECEIPT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_RPC_TIMEOUT,
)
from .errors import BroadcastError, InvalidInputError, NetworkError
from .networks import NetworkConfigOverrides, explorer_tx_url

_LOGGER = logging.getLogger(__name__)

_SIGNED_TX_HEX = re.compile(r"^0x(?:[0-9a-fA-F]{2})+$")


@dataclass(frozen=True)
class BroadcastResult:
    transaction_hash: str
    explorer_url: Optional[str] = None


@dataclass(frozen=True)
class Receipt:
    block_number: int
    gas_used: int


def validate_rpc_url(rpc_url: Any) -> None:
    """Reject anything but an ``http``/``https`` URL with a host.

    Raises:
        NetworkError: Before any connection is attempted.
    """

    if not isinstance(rpc_url, str) or not rpc_url.strip():
        raise NetworkError("An RPC URL is required")
    try:
        parsed = urlparse(rpc_url)
        hostname = parsed.hostname
    except ValueError as exc:
        raise NetworkError(f"Malformed RPC URL: {rpc_url}") from exc
    if parsed.scheme not in ("http", "https"):
        raise NetworkError(f"Unsupported RPC protocol {parsed.scheme or '(none)'!r}; only HTTP and HTTPS are supported")
    if not hostname:
        raise NetworkError(f"RPC URL has no hostname: {rpc_url}")


def transaction_hash_of(signed_tx: str) -> str:
    """Return the keccak hash of a raw signed payload, which is its transaction hash."""

    return to_hex(keccak(hexstr=signed_tx))


def _capped_backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    return min(base_delay * (2 ** attempt), max_delay)


@dataclass
class RpcBroadcaster:
    """Thin wrapper around a :class:`web3.Web3` HTTP client."""

    rpc_url: str
    web3: Optional[Web3] = None
    request_timeout: float = DEFAULT_RPC_TIMEOUT
    lookup_retries: int = DEFAULT_DUPLICATE_LOOKUP_RETRIES
    lookup_delay: float = DEFAULT_DUPLICATE_LOOKUP_DELAY
    lookup_max_delay: float = DEFAULT_DUPLICATE_LOOKUP_MAX_DELAY
    network_overrides: Optional[NetworkConfigOverrides] = None
    sleep: Callable[[float], None] = time.sleep
    logger: Optional[logging.Logger] = None

    def __post_init__(self) -> None:
        validate_rpc_url(self.rpc_url)
        if self.web3 is None:
            provider = Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.request_timeout})
            self.web3 = Web3(provider)
        self._logger = self.logger or _LOGGER

    def submit(self, signed_tx: str, chain_id: int) -> BroadcastResult:
        """Send ``signed_tx`` and return its hash plus an explorer link when known.

        Raises:
            InvalidInputError: If ``chain_id`` is not a positive integer.
            BroadcastError: If the payload is malformed, the node rejects it,
                or a duplicate cannot be confirmed.
            NetworkError: If the endpoint cannot be reached.
        """

        if not isinstance(signed_tx, str) or not _SIGNED_TX_HEX.match(signed_tx):
            raise BroadcastError("Signed transaction must be a non-empty 0x-prefixed hex string")
        if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
            raise InvalidInputError(f"Invalid chain id: {chain_id!r}")

        try:
            tx_hash = to_hex(self.web3.eth.send_raw_transaction(signed_tx))
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise NetworkError(f"Failed to reach RPC endpoint {self.rpc_url}: {exc}") from exc
        except Exception as exc:
            if not is_duplicate_submission(exc):
                raise BroadcastError(f"Transaction rejected by node: {exc}") from exc
            self._logger.info("Node already knows this transaction; confirming by hash")
            tx_hash = self._confirm_duplicate(signed_tx)

        self._logger.info("Transaction submitted: %s", tx_hash)
        return BroadcastResult(transaction_hash=tx_hash, explorer_url=self._explorer_url(chain_id, tx_hash))

    def _confirm_duplicate(self, signed_tx: str) -> str:
        tx_hash = transaction_hash_of(signed_tx)
        attempts = self.lookup_retries + 1
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            try:
                self.web3.eth.get_transaction(tx_hash)
            except Exception as exc:
                last_error = exc
                if attempt < self.lookup_retries:
                    self._logger.info(
                        "Lookup of %s failed (%d/%d), retrying: %s", tx_hash, attempt + 1, attempts, exc
                    )
                    self.sleep(_capped_backoff(attempt, self.lookup_delay, self.lookup_max_delay))
                continue
            if attempt > 0:
                self._logger.info("Lookup of %s succeeded on attempt %d", tx_hash, attempt + 1)
            return tx_hash
        raise BroadcastError(
            f"Duplicate transaction {tx_hash} could not be confirmed after {attempts} attempts: {last_error}"
        )

    def _explorer_url(self, chain_id: int, tx_hash: str) -> Optional[str]:
        try:
            return explorer_tx_url(chain_id, tx_hash, self.network_overrides)
        except Exception as exc:
            self._logger.debug("No explorer URL for chain %s: %s", chain_id, exc)
            return None

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_RECEIPT_POLL_INTERVAL,
    ) -> Receipt:
        """Block until ``tx_hash`` is mined or ``timeout`` seconds pass."""

        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout, poll_latency=poll_interval)
        return Receipt(block_number=int(receipt["blockNumber"]), gas_used=int(receipt["gasUsed"]))


def broadcast_transaction(signed_tx: str, chain_id: int, rpc_url: str, **kwargs: Any) -> BroadcastResult:
    """Submit ``signed_tx`` through a one-off :class:`RpcBroadcaster`."""

    return RpcBroadcaster(rpc_url, **kwargs).submit(signed_tx, chain_id)


__all__ = [
    "BroadcastResult",
    "Receipt",
    "RpcBroadcaster",
    "broadcast_transaction",
    "transaction_hash_of",
    "validate_rpc_url",
]
