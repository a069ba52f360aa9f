"""Offline EIP-1559 transaction signing with optional nonce-aware broadcasting."""
from __future__ import annotations

__version__ = "1.1.0"

from .broadcaster import BroadcastResult, Receipt, RpcBroadcaster, broadcast_transaction
from .classification import ErrorKind, classify_error, is_duplicate_submission
from .errors import (
    BroadcastError,
    FileAccessError,
    InvalidInputError,
    NetworkError,
    OfflineSignerError,
    PrivateKeyError,
    SigningError,
)
from .key_store import SecureKeyStore, load_private_key
from .nonce_retry import BackoffPolicy, NonceRetryFailure, NonceRetrySuccess, execute_with_nonce_retry
from .params import AccessListItem, TransactionParameters, load_transaction_params, validate_transaction_params
from .processor import (
    BroadcastReport,
    BroadcastStatus,
    PipelineResult,
    TransactionProcessorOptions,
    process_transaction,
)
from .signer import build_transaction_request, sign_transaction

__all__ = [
    "AccessListItem",
    "BackoffPolicy",
    "BroadcastError",
    "BroadcastReport",
    "BroadcastResult",
    "BroadcastStatus",
    "ErrorKind",
    "FileAccessError",
    "InvalidInputError",
    "NetworkError",
    "NonceRetryFailure",
    "NonceRetrySuccess",
    "OfflineSignerError",
    "PipelineResult",
    "PrivateKeyError",
    "Receipt",
    "RpcBroadcaster",
    "SecureKeyStore",
    "SigningError",
    "TransactionParameters",
    "TransactionProcessorOptions",
    "broadcast_transaction",
    "build_transaction_request",
    "classify_error",
    "execute_with_nonce_retry",
    "is_duplicate_submission",
    "load_private_key",
    "load_transaction_params",
    "process_transaction",
    "sign_transaction",
    "validate_transaction_params",
]
