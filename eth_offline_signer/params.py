"""Transaction parameter model and the JSON parameter-file validator."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from eth_utils import is_hex_address, to_checksum_address

from .errors import InvalidInputError

_NUMERIC_STRING = re.compile(r"^\d+$")
_STORAGE_KEY = re.compile(r"^0x[0-9a-fA-F]{64}$")

NUMERIC_FIELDS: Tuple[str, ...] = ("value", "gasLimit", "maxFeePerGas", "maxPriorityFeePerGas")


@dataclass(frozen=True)
class AccessListItem:
    address: str
    storage_keys: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TransactionParameters:
    """EIP-1559 fields as handed to the signer.

    Wei amounts and gas values stay decimal strings so arbitrarily large
    integers survive JSON round trips untouched.
    """

    to: str
    value: str
    chain_id: int
    nonce: int
    gas_limit: str
    max_fee_per_gas: str
    max_priority_fee_per_gas: str
    access_list: Tuple[AccessListItem, ...] = field(default_factory=tuple)

    def with_nonce(self, nonce: int) -> "TransactionParameters":
        return replace(self, nonce=nonce)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "to": self.to,
            "value": self.value,
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "gasLimit": self.gas_limit,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
        }
        if self.access_list:
            payload["accessList"] = [
                {"address": item.address, "storageKeys": list(item.storage_keys)}
                for item in self.access_list
            ]
        return payload


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_access_list(raw: Any, errors: List[str]) -> Tuple[AccessListItem, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        errors.append("accessList: must be a list")
        return ()

    items: List[AccessListItem] = []
    for index, entry in enumerate(raw):
        prefix = f"accessList.{index}"
        if not isinstance(entry, Mapping):
            errors.append(f"{prefix}: must be an object")
            continue
        address = entry.get("address")
        if not isinstance(address, str) or not is_hex_address(address):
            errors.append(f"{prefix}.address: invalid Ethereum address")
            continue
        storage_keys = entry.get("storageKeys", [])
        if not isinstance(storage_keys, list):
            errors.append(f"{prefix}.storageKeys: must be a list")
            continue
        bad_keys = [key for key in storage_keys if not isinstance(key, str) or not _STORAGE_KEY.match(key)]
        if bad_keys:
            errors.append(f"{prefix}.storageKeys: expected 0x-prefixed 32-byte hex strings")
            continue
        items.append(AccessListItem(address=to_checksum_address(address), storage_keys=tuple(storage_keys)))
    return tuple(items)


def validate_transaction_params(payload: Any) -> TransactionParameters:
    """Validate a decoded parameter file and return :class:`TransactionParameters`.

    Raises:
        InvalidInputError: Listing every offending field.
    """

    if not isinstance(payload, Mapping):
        raise InvalidInputError("Transaction parameters must be a JSON object")

    errors: List[str] = []

    to = payload.get("to")
    if not isinstance(to, str) or not is_hex_address(to):
        errors.append("to: invalid Ethereum address, expected 0x followed by 40 hex characters")

    for name in NUMERIC_FIELDS:
        value = payload.get(name)
        if not isinstance(value, str) or not _NUMERIC_STRING.match(value):
            errors.append(f"{name}: must be a string of decimal digits")

    chain_id = payload.get("chainId")
    if not _is_int(chain_id) or chain_id <= 0:
        errors.append("chainId: must be a positive integer")

    nonce = payload.get("nonce")
    if not _is_int(nonce) or nonce < 0:
        errors.append("nonce: must be a non-negative integer")

    access_list = _validate_access_list(payload.get("accessList"), errors)

    if errors:
        raise InvalidInputError("Invalid transaction parameters: " + "; ".join(errors))

    return TransactionParameters(
        to=to_checksum_address(to),
        value=payload["value"],
        chain_id=chain_id,
        nonce=nonce,
        gas_limit=payload["gasLimit"],
        max_fee_per_gas=payload["maxFeePerGas"],
        max_priority_fee_per_gas=payload["maxPriorityFeePerGas"],
        access_list=access_list,
    )


def load_transaction_params(path: Path | str) -> TransactionParameters:
    """Read and validate a JSON parameter file."""

    resolved = Path(path).expanduser().resolve()
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidInputError(
            f"Failed to read or parse transaction parameter file ({resolved}): {exc}"
        ) from exc
    return validate_transaction_params(payload)


__all__ = [
    "AccessListItem",
    "NUMERIC_FIELDS",
    "TransactionParameters",
    "load_transaction_params",
    "validate_transaction_params",
]
