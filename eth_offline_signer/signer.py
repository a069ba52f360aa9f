"""Offline EIP-1559 signing on top of :mod:`eth_account`."""
from __future__ import annotations

from typing import Any, Dict, NoReturn, TYPE_CHECKING

from eth_account import Account

from .errors import SigningError
from .params import TransactionParameters

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount

EIP1559_TRANSACTION_TYPE = 2


def _raise_signing_error(error: BaseException, context: str) -> NoReturn:
    raise SigningError(f"{context}: {error}") from error


def _to_int(value: str, field_name: str) -> int:
    if not isinstance(value, str) or not value.strip().isdigit():
        raise SigningError(f"Failed to convert {field_name} to an integer: {value!r} is not a decimal string")
    try:
        return int(value.strip(), 10)
    except ValueError as exc:
        _raise_signing_error(exc, f"Failed to convert {field_name} to an integer")


def _account_from_key(secret: str) -> "LocalAccount":
    try:
        return Account.from_key(secret)
    except Exception as exc:
        _raise_signing_error(exc, "Failed to derive an account from the private key")


def build_transaction_request(params: TransactionParameters) -> Dict[str, Any]:
    """Map validated parameters onto the type-2 dictionary ``eth_account`` signs.

    ``accessList`` is only included when it has entries.
    """

    request: Dict[str, Any] = {
        "type": EIP1559_TRANSACTION_TYPE,
        "to": params.to,
        "value": _to_int(params.value, "value"),
        "chainId": params.chain_id,
        "nonce": params.nonce,
        "gas": _to_int(params.gas_limit, "gasLimit"),
        "maxFeePerGas": _to_int(params.max_fee_per_gas, "maxFeePerGas"),
        "maxPriorityFeePerGas": _to_int(params.max_priority_fee_per_gas, "maxPriorityFeePerGas"),
    }
    if params.access_list:
        request["accessList"] = [
            {"address": item.address, "storageKeys": list(item.storage_keys)}
            for item in params.access_list
        ]
    return request


def derive_address(secret: str) -> str:
    """Return the checksum address controlled by ``secret``."""

    return _account_from_key(secret).address


def sign_transaction(secret: str, params: TransactionParameters) -> str:
    """Sign ``params`` offline and return the raw transaction as ``0x`` hex.

    Raises:
        SigningError: When a numeric field cannot be converted, the key is
            unusable, or ``eth_account`` rejects the transaction.
    """

    account = _account_from_key(secret)
    request = build_transaction_request(params)
    try:
        signed = account.sign_transaction(request)
    except Exception as exc:
        _raise_signing_error(exc, "Failed to sign transaction")

    raw = getattr(signed, "raw_transaction", None)
    if raw is None:
        raw = getattr(signed, "rawTransaction", None)
    if raw is None:
        raise SigningError("Signed transaction is missing its raw payload")
    raw_hex = raw.hex() if isinstance(raw, (bytes, bytearray)) else str(raw)
    return raw_hex if raw_hex.startswith("0x") else f"0x{raw_hex}"


__all__ = [
    "EIP1559_TRANSACTION_TYPE",
    "build_transaction_request",
    "derive_address",
    "sign_transaction",
]
