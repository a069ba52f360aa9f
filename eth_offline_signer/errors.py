"""Exception hierarchy for the offline signer."""
from __future__ import annotations


class OfflineSignerError(Exception):
    """Base class for every error raised by :mod:`eth_offline_signer`."""


class InvalidInputError(OfflineSignerError):
    """Raised when transaction parameters or options are malformed."""


class PrivateKeyError(OfflineSignerError):
    """Raised when the private key is malformed, unreadable or already wiped."""


class FileAccessError(OfflineSignerError):
    """Raised when a key or parameter file cannot be read."""


class SigningError(OfflineSignerError):
    """Raised when numeric conversion or cryptographic signing fails."""


class NetworkError(OfflineSignerError):
    """Raised for malformed RPC URLs and unclassified transport faults."""


class BroadcastError(OfflineSignerError):
    """Raised when a node rejects a transaction or a duplicate cannot be confirmed."""


__all__ = [
    "BroadcastError",
    "FileAccessError",
    "InvalidInputError",
    "NetworkError",
    "OfflineSignerError",
    "PrivateKeyError",
    "SigningError",
]
