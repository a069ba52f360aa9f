"""Sign, optionally broadcast, and confirm a single transaction."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from .broadcaster import BroadcastResult, RpcBroadcaster
from .config import DEFAULT_MAX_RETRIES, DEFAULT_RECEIPT_TIMEOUT, MAX_RETRIES_LIMIT
from .errors import InvalidInputError
from .key_store import SecureKeyStore
from .nonce_retry import BackoffPolicy, NonceRetryFailure, execute_with_nonce_retry
from .params import TransactionParameters
from .signer import sign_transaction

_LOGGER = logging.getLogger(__name__)

BroadcasterFactory = Callable[[str], RpcBroadcaster]


class BroadcastStatus(str, Enum):
    SUCCESS = "SUCCESS"
    BROADCASTED_BUT_UNCONFIRMED = "BROADCASTED_BUT_UNCONFIRMED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class BroadcastReport:
    """Outcome of the broadcast stage.

    ``BROADCASTED_BUT_UNCONFIRMED`` still carries the hash: the node accepted
    the transaction but no receipt arrived within the wait window.
    """

    status: BroadcastStatus
    transaction_hash: Optional[str] = None
    explorer_url: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    final_nonce: Optional[int] = None
    retry_count: Optional[int] = None
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status.value}
        optional_fields = (
            ("transactionHash", self.transaction_hash),
            ("explorerUrl", self.explorer_url),
            ("blockNumber", self.block_number),
            ("gasUsed", self.gas_used),
            ("finalNonce", self.final_nonce),
            ("retryCount", self.retry_count),
            ("error", self.error),
        )
        for key, value in optional_fields:
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True)
class PipelineResult:
    signed_transaction: str
    broadcast: Optional[BroadcastReport] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"signedTransaction": self.signed_transaction}
        if self.broadcast is not None:
            payload["broadcast"] = self.broadcast.as_dict()
        return payload


@dataclass
class TransactionProcessorOptions:
    private_key: Union[str, SecureKeyStore] = field(repr=False)
    tx_params: TransactionParameters
    broadcast: bool = False
    rpc_url: Optional[str] = None
    max_retries: int = DEFAULT_MAX_RETRIES
    logger: Optional[logging.Logger] = None
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    broadcaster_factory: Optional[BroadcasterFactory] = None
    backoff: Optional[BackoffPolicy] = None


def _validate_options(options: TransactionProcessorOptions) -> None:
    if not isinstance(options.tx_params, TransactionParameters):
        raise InvalidInputError("tx_params must be TransactionParameters")
    if not isinstance(options.broadcast, bool):
        raise InvalidInputError("broadcast must be a boolean")
    if options.broadcast and not options.rpc_url:
        raise InvalidInputError("An RPC URL is required when broadcasting")
    if (
        not isinstance(options.max_retries, int)
        or isinstance(options.max_retries, bool)
        or not 0 <= options.max_retries <= MAX_RETRIES_LIMIT
    ):
        raise InvalidInputError(f"max_retries must be an integer between 0 and {MAX_RETRIES_LIMIT}")
    timeout = options.receipt_timeout
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
        raise InvalidInputError("receipt_timeout must be a positive number of seconds")


def process_transaction(options: TransactionProcessorOptions) -> PipelineResult:
    """Run the sign -> broadcast -> confirm pipeline for ``options``.

    The key store is wiped before this function returns or raises. Typed
    errors from :mod:`eth_offline_signer.errors` propagate; broadcast
    failures are reported through :attr:`PipelineResult.broadcast`.
    """

    private_key = options.private_key
    if isinstance(private_key, SecureKeyStore):
        key_store = private_key
    elif isinstance(private_key, str):
        key_store = SecureKeyStore(private_key)
    else:
        raise InvalidInputError("private_key must be a string or a SecureKeyStore")

    with key_store:
        _validate_options(options)
        return _run_pipeline(options, key_store, options.logger or _LOGGER)


def _run_pipeline(
    options: TransactionProcessorOptions,
    key_store: SecureKeyStore,
    log: logging.Logger,
) -> PipelineResult:
    params = options.tx_params
    signed_tx = sign_transaction(key_store.read(), params)
    log.info("Transaction signed offline (chain %d, nonce %d)", params.chain_id, params.nonce)

    if not options.broadcast:
        return PipelineResult(signed_transaction=signed_tx)

    factory = options.broadcaster_factory or RpcBroadcaster
    broadcaster = factory(options.rpc_url)
    submitted = {"signed": signed_tx}

    def execute_transaction(nonce: int) -> BroadcastResult:
        # The nonce is part of the signed payload, so each attempt signs anew.
        attempt_tx = sign_transaction(key_store.read(), params.with_nonce(nonce))
        result = broadcaster.submit(attempt_tx, params.chain_id)
        submitted["signed"] = attempt_tx
        return result

    log.info("Broadcasting transaction")
    outcome = execute_with_nonce_retry(
        execute_transaction,
        initial_nonce=params.nonce,
        max_retries=options.max_retries,
        logger=log,
        backoff=options.backoff,
    )

    if isinstance(outcome, NonceRetryFailure):
        log.error("Broadcast failed after %d retries: %s", outcome.retry_count, outcome.error)
        return PipelineResult(
            signed_transaction=signed_tx,
            broadcast=BroadcastReport(
                status=BroadcastStatus.FAILED,
                final_nonce=outcome.final_nonce,
                retry_count=outcome.retry_count,
                error=str(outcome.error),
            ),
        )

    try:
        receipt = broadcaster.wait_for_receipt(outcome.transaction_hash, timeout=options.receipt_timeout)
    except Exception as exc:
        log.warning("Receipt unavailable, the transaction was sent: %s", exc)
        log.info("Transaction hash: %s", outcome.transaction_hash)
        if outcome.explorer_url:
            log.info("Explorer URL: %s", outcome.explorer_url)
        return PipelineResult(
            signed_transaction=submitted["signed"],
            broadcast=BroadcastReport(
                status=BroadcastStatus.BROADCASTED_BUT_UNCONFIRMED,
                transaction_hash=outcome.transaction_hash,
                explorer_url=outcome.explorer_url,
                final_nonce=outcome.final_nonce,
                retry_count=outcome.retry_count,
                error=str(exc),
            ),
        )

    log.info("Transaction hash: %s", outcome.transaction_hash)
    log.info("Block number: %d", receipt.block_number)
    log.info("Gas used: %d", receipt.gas_used)
    if outcome.explorer_url:
        log.info("Explorer URL: %s", outcome.explorer_url)
    return PipelineResult(
        signed_transaction=submitted["signed"],
        broadcast=BroadcastReport(
            status=BroadcastStatus.SUCCESS,
            transaction_hash=outcome.transaction_hash,
            explorer_url=outcome.explorer_url,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            final_nonce=outcome.final_nonce,
            retry_count=outcome.retry_count,
        ),
    )


__all__ = [
    "BroadcastReport",
    "BroadcastStatus",
    "BroadcasterFactory",
    "PipelineResult",
    "TransactionProcessorOptions",
    "process_transaction",
]
