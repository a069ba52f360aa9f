#!/usr/bin/env python3
"""Command line entry point: sign an EIP-1559 transaction offline and optionally broadcast it.

Diagnostics go to stderr through :mod:`logging`; only the signed payload,
the transaction hash or the ``--json`` document is written to stdout.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, Optional, Sequence, Type

from . import __version__
from .config import MAX_RETRIES_LIMIT, load_settings
from .errors import (
    BroadcastError,
    FileAccessError,
    InvalidInputError,
    NetworkError,
    OfflineSignerError,
    PrivateKeyError,
    SigningError,
)
from .key_store import load_private_key
from .networks import get_display_network_info
from .params import load_transaction_params
from .processor import BroadcastStatus, PipelineResult, TransactionProcessorOptions, process_transaction
from .signer import derive_address

_LOGGER = logging.getLogger(__name__)

_ERROR_LABELS: Dict[Type[OfflineSignerError], str] = {
    InvalidInputError: "Input error",
    PrivateKeyError: "Private key error",
    FileAccessError: "File access error",
    SigningError: "Signing error",
    NetworkError: "Network error",
    BroadcastError: "Broadcast error",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eth-offline-signer",
        description="Sign Ethereum EIP-1559 transactions offline and optionally broadcast them.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    subcommands = parser.add_subparsers(dest="command", required=True)

    sign = subcommands.add_parser(
        "sign",
        help="Sign a transaction offline and optionally broadcast it.",
    )
    sign.add_argument("-k", "--key-file", required=True, help="Path to the file holding the private key (.key).")
    sign.add_argument("-p", "--params", required=True, help="Path to the JSON transaction parameter file.")
    sign.add_argument("--broadcast", action="store_true", help="Broadcast the signed transaction.")
    sign.add_argument(
        "--rpc-url",
        default=None,
        help="RPC endpoint used for broadcasting (falls back to ETH_SIGNER_RPC_URL).",
    )
    sign.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help=f"Nonce-conflict retries, 0-{MAX_RETRIES_LIMIT} (falls back to ETH_SIGNER_MAX_RETRIES).",
    )
    sign.add_argument(
        "--receipt-timeout",
        type=float,
        default=None,
        help="Seconds to wait for a receipt (falls back to ETH_SIGNER_RECEIPT_TIMEOUT).",
    )
    sign.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print the signed transaction or the transaction hash.",
    )
    sign.add_argument("--json", action="store_true", help="Emit the pipeline result as JSON.")
    sign.add_argument("--log-level", default="INFO", help="Logging verbosity (DEBUG, INFO, WARNING)")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )


def _display_network_info(chain_id: int) -> None:
    info = get_display_network_info(chain_id)
    _LOGGER.info("Network: %s (chain id %d)", info["name"], chain_id)
    _LOGGER.info("Explorer: %s", info["explorer"])
    if info["type"] == "custom":
        _LOGGER.warning("Custom network; make sure the broadcast target is the one you intend.")


def _emit(result: PipelineResult, as_json: bool) -> None:
    if as_json:
        json.dump(result.as_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    report = result.broadcast
    if report is None:
        print(result.signed_transaction)
    elif report.transaction_hash:
        print(report.transaction_hash)


def run_sign(args: argparse.Namespace) -> int:
    settings = load_settings()
    max_retries = settings.max_retries if args.max_retries is None else args.max_retries
    receipt_timeout = settings.receipt_timeout if args.receipt_timeout is None else args.receipt_timeout

    params = load_transaction_params(args.params)
    _display_network_info(params.chain_id)

    with load_private_key(args.key_file) as key_store:
        _LOGGER.info("Signing address: %s", derive_address(key_store.read()))
        result = process_transaction(
            TransactionProcessorOptions(
                private_key=key_store,
                tx_params=params,
                broadcast=args.broadcast,
                rpc_url=args.rpc_url or settings.rpc_url,
                max_retries=max_retries,
                receipt_timeout=receipt_timeout,
            )
        )

    _emit(result, args.json)
    if result.broadcast is not None and result.broadcast.status is BroadcastStatus.FAILED:
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging("WARNING" if args.quiet else args.log_level)

    try:
        return run_sign(args)
    except OfflineSignerError as exc:
        _LOGGER.error("%s: %s", _ERROR_LABELS.get(type(exc), "Error"), exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
