"""Retry sign-and-submit attempts across nonce conflicts.

The coordinator owns no signing or network code. It calls an injected
``execute_transaction(nonce)`` callback, advances the nonce by exactly one
for every nonce-conflict rejection, and always returns a
:class:`NonceRetrySuccess` or a :class:`NonceRetryFailure` instead of raising.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, ClassVar, Optional, Union

from .broadcaster import BroadcastResult
from .classification import is_nonce_conflict
from .config import DEFAULT_BACKOFF_BASE_DELAY, DEFAULT_BACKOFF_MAX_DELAY, DEFAULT_MAX_RETRIES, MAX_RETRIES_LIMIT
from .errors import InvalidInputError

_LOGGER = logging.getLogger(__name__)

ExecuteTransaction = Callable[[int], BroadcastResult]


@dataclass(frozen=True)
class BackoffPolicy:
    """Capped exponential delay between retries."""

    base_delay: float = DEFAULT_BACKOFF_BASE_DELAY
    max_delay: float = DEFAULT_BACKOFF_MAX_DELAY
    sleep: Callable[[float], None] = time.sleep

    def delay_for(self, step: int) -> float:
        return min(self.base_delay * (2 ** step), self.max_delay)

    def wait(self, step: int) -> None:
        self.sleep(self.delay_for(step))


@dataclass(frozen=True)
class NonceRetrySuccess:
    transaction_hash: str
    final_nonce: int
    retry_count: int
    explorer_url: Optional[str] = None

    success: ClassVar[bool] = True


@dataclass(frozen=True)
class NonceRetryFailure:
    error: Exception
    final_nonce: int
    retry_count: int

    success: ClassVar[bool] = False


NonceRetryResult = Union[NonceRetrySuccess, NonceRetryFailure]


@dataclass
class RetryState:
    current_nonce: int
    attempts_made: int = 0
    last_error: Optional[Exception] = None


def _validate(execute_transaction: ExecuteTransaction, initial_nonce: int, max_retries: int) -> None:
    if not callable(execute_transaction):
        raise InvalidInputError("execute_transaction must be callable")
    if not isinstance(max_retries, int) or isinstance(max_retries, bool) or not 0 <= max_retries <= MAX_RETRIES_LIMIT:
        raise InvalidInputError(f"max_retries must be an integer between 0 and {MAX_RETRIES_LIMIT}")
    if not isinstance(initial_nonce, int) or isinstance(initial_nonce, bool) or initial_nonce < 0:
        raise InvalidInputError("nonce must be a non-negative integer")


def execute_with_nonce_retry(
    execute_transaction: ExecuteTransaction,
    *,
    initial_nonce: int,
    max_retries: int = DEFAULT_MAX_RETRIES,
    logger: Optional[logging.Logger] = None,
    backoff: Optional[BackoffPolicy] = None,
) -> NonceRetryResult:
    """Run ``execute_transaction`` until it succeeds, fails hard, or retries run out.

    Args:
        execute_transaction: Callback that signs and submits at the given nonce.
        initial_nonce: Nonce of the first attempt.
        max_retries: Number of nonce-conflict retries allowed (0-10).
        logger: Optional logger; defaults to this module's logger.
        backoff: Delay policy; the first retry is immediate and every later
            retry waits ``backoff.delay_for(n)`` with ``n`` counting from zero.

    Returns:
        Exactly one of :class:`NonceRetrySuccess` or :class:`NonceRetryFailure`.

    Raises:
        InvalidInputError: Only for invalid arguments.
    """

    _validate(execute_transaction, initial_nonce, max_retries)
    log = logger or _LOGGER
    policy = backoff or BackoffPolicy()
    state = RetryState(current_nonce=initial_nonce)

    while True:
        try:
            result = execute_transaction(state.current_nonce)
        except Exception as exc:
            state.last_error = exc
            if not is_nonce_conflict(exc):
                log.error("Transaction failed at nonce %d: %s", state.current_nonce, exc)
                break
            if state.attempts_made >= max_retries:
                log.error("Nonce conflict persisted after %d retries: %s", state.attempts_made, exc)
                break

            next_nonce = state.current_nonce + 1
            log.warning("Nonce conflict detected: %s", exc)
            log.info(
                "Retrying with nonce %d -> %d (%d/%d)",
                state.current_nonce,
                next_nonce,
                state.attempts_made + 1,
                max_retries,
            )
            if state.attempts_made > 0:
                policy.wait(state.attempts_made - 1)
            state.current_nonce = next_nonce
            state.attempts_made += 1
            continue

        return NonceRetrySuccess(
            transaction_hash=result.transaction_hash,
            explorer_url=result.explorer_url,
            final_nonce=state.current_nonce,
            retry_count=state.attempts_made,
        )

    return NonceRetryFailure(
        error=state.last_error,
        final_nonce=state.current_nonce,
        retry_count=state.attempts_made,
    )


__all__ = [
    "BackoffPolicy",
    "ExecuteTransaction",
    "NonceRetryFailure",
    "NonceRetryResult",
    "NonceRetrySuccess",
    "RetryState",
    "execute_with_nonce_retry",
]
