"""Wipeable in-memory storage for a single private key.

The key lives in a ``bytearray`` so it can be overwritten in place once the
pipeline is done with it. :class:`SecureKeyStore` is a context manager:
leaving the ``with`` block wipes the buffer whatever happened inside it.
"""
from __future__ import annotations

import logging
import os
import re
import secrets
import stat
from pathlib import Path
from typing import Optional

from .errors import FileAccessError, PrivateKeyError

_LOGGER = logging.getLogger(__name__)

KEY_FILE_SUFFIX = ".key"
RECOMMENDED_KEY_FILE_MODE = 0o400
_PRIVATE_KEY_HEX = re.compile(r"^[0-9a-fA-F]{64}$")


def normalise_private_key(raw_secret: str) -> str:
    """Trim ``raw_secret`` and return it ``0x``-prefixed and validated."""

    if not isinstance(raw_secret, str):
        raise PrivateKeyError("Private key must be provided as text")
    text = raw_secret.strip()
    if not text:
        raise PrivateKeyError("Private key is empty")
    if text[:2].lower() == "0x":
        text = text[2:]
    if not _PRIVATE_KEY_HEX.match(text):
        raise PrivateKeyError("Private key must be 64 hexadecimal characters (optionally 0x-prefixed)")
    return f"0x{text}"


class SecureKeyStore:
    """Hold one private key until :meth:`wipe` is called."""

    def __init__(self, raw_secret: Optional[str] = None) -> None:
        self._buffer: Optional[bytearray] = None
        self._wiped = False
        if raw_secret is not None:
            self.store(raw_secret)

    def store(self, raw_secret: str) -> None:
        if self._wiped:
            raise PrivateKeyError("Key store has already been wiped")
        normalised = normalise_private_key(raw_secret)
        if self._buffer is not None:
            self._overwrite(self._buffer)
        self._buffer = bytearray(bytes.fromhex(normalised[2:]))

    def read(self) -> str:
        """Return the key as ``0x``-prefixed hex.

        Raises:
            PrivateKeyError: If nothing was stored or the store was wiped.
        """

        if self._wiped or self._buffer is None:
            raise PrivateKeyError("Private key is no longer available; the key store has been wiped")
        return "0x" + self._buffer.hex()

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Overwrite the buffer (zero, ones, random, zero) and release it. Idempotent."""

        if self._wiped:
            return
        if self._buffer is not None:
            self._overwrite(self._buffer)
        self._buffer = None
        self._wiped = True

    @staticmethod
    def _overwrite(buffer: bytearray) -> None:
        length = len(buffer)
        for pattern in (b"\x00" * length, b"\xff" * length, secrets.token_bytes(length), b"\x00" * length):
            buffer[:] = pattern

    def __enter__(self) -> "SecureKeyStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else ("loaded" if self._buffer is not None else "empty")
        return f"<SecureKeyStore {state}>"


def _check_permissions(path: Path, logger: logging.Logger) -> None:
    if os.name == "nt":
        return
    mode = stat.S_IMODE(path.stat().st_mode)
    if mode != RECOMMENDED_KEY_FILE_MODE:
        logger.warning(
            "Key file %s has permissions %s; restrict it with 'chmod 400 %s'",
            path,
            oct(mode),
            path,
        )


def load_private_key(key_file: str | Path, logger: Optional[logging.Logger] = None) -> SecureKeyStore:
    """Read a ``.key`` file into a fresh :class:`SecureKeyStore`.

    Raises:
        PrivateKeyError: For a missing/invalid path or malformed key content.
        FileAccessError: When the file cannot be found or read.
    """

    log = logger or _LOGGER
    if key_file is None or not str(key_file).strip():
        raise PrivateKeyError("A private key file path is required")
    path = Path(str(key_file).strip()).expanduser()
    if path.suffix != KEY_FILE_SUFFIX:
        raise PrivateKeyError(f"Private key file must use the {KEY_FILE_SUFFIX} extension: {path}")

    try:
        _check_permissions(path, log)
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileAccessError(f"Private key file not found: {path}") from exc
    except PermissionError as exc:
        raise FileAccessError(f"Permission denied reading private key file: {path}") from exc
    except OSError as exc:
        raise FileAccessError(f"Failed to read private key file {path}: {exc}") from exc

    return SecureKeyStore(content)


__all__ = [
    "KEY_FILE_SUFFIX",
    "RECOMMENDED_KEY_FILE_MODE",
    "SecureKeyStore",
    "load_private_key",
    "normalise_private_key",
]
