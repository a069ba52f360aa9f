"""Default tuning values and environment overrides."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import InvalidInputError

DEFAULT_MAX_RETRIES = 3
MAX_RETRIES_LIMIT = 10

# Backoff between nonce-conflict retries, in seconds.
DEFAULT_BACKOFF_BASE_DELAY = 1.0
DEFAULT_BACKOFF_MAX_DELAY = 8.0

# Lookup of an "already known" transaction by hash.
DEFAULT_DUPLICATE_LOOKUP_RETRIES = 3
DEFAULT_DUPLICATE_LOOKUP_DELAY = 1.0
DEFAULT_DUPLICATE_LOOKUP_MAX_DELAY = 8.0

DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_RECEIPT_POLL_INTERVAL = 2.0
DEFAULT_RPC_TIMEOUT = 30.0

DEFAULT_ANVIL_RPC_URL = "http://localhost:8545"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    rpc_url: Optional[str] = None
    max_retries: int = DEFAULT_MAX_RETRIES
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    anvil_rpc_url: str = DEFAULT_ANVIL_RPC_URL


def _get_env() -> Mapping[str, str]:
    """Expose ``os.environ`` (after ``load_dotenv``) separately to simplify testing."""

    load_dotenv()
    return os.environ


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidInputError(f"{key} must be an integer, got {raw!r}") from exc


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidInputError(f"{key} must be a number, got {raw!r}") from exc


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``env`` or the process environment.

    Recognised variables are ``ETH_SIGNER_RPC_URL``, ``ETH_SIGNER_MAX_RETRIES``,
    ``ETH_SIGNER_RECEIPT_TIMEOUT`` and ``ANVIL_RPC_URL``.
    """

    if env is None:
        env = _get_env()

    max_retries = _parse_int(env, "ETH_SIGNER_MAX_RETRIES", DEFAULT_MAX_RETRIES)
    if not 0 <= max_retries <= MAX_RETRIES_LIMIT:
        raise InvalidInputError(
            f"ETH_SIGNER_MAX_RETRIES must be between 0 and {MAX_RETRIES_LIMIT}, got {max_retries}"
        )
    receipt_timeout = _parse_float(env, "ETH_SIGNER_RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT)
    if receipt_timeout <= 0:
        raise InvalidInputError("ETH_SIGNER_RECEIPT_TIMEOUT must be positive")

    return Settings(
        rpc_url=env.get("ETH_SIGNER_RPC_URL") or None,
        max_retries=max_retries,
        receipt_timeout=receipt_timeout,
        anvil_rpc_url=env.get("ANVIL_RPC_URL") or DEFAULT_ANVIL_RPC_URL,
    )


__all__ = [
    "DEFAULT_ANVIL_RPC_URL",
    "DEFAULT_BACKOFF_BASE_DELAY",
    "DEFAULT_BACKOFF_MAX_DELAY",
    "DEFAULT_DUPLICATE_LOOKUP_DELAY",
    "DEFAULT_DUPLICATE_LOOKUP_MAX_DELAY",
    "DEFAULT_DUPLICATE_LOOKUP_RETRIES",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RECEIPT_POLL_INTERVAL",
    "DEFAULT_RECEIPT_TIMEOUT",
    "DEFAULT_RPC_TIMEOUT",
    "MAX_RETRIES_LIMIT",
    "Settings",
    "load_settings",
]
