from __future__ import annotations

import hashlib
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def sha256(data: BytesLike) -> bytes:
    """Return the SHA-256 digest of *data*."""
    return hashlib.sha256(bytes(data)).digest()


def sha256_hex(data: BytesLike) -> str:
    return sha256(data).hex()


def network_id(passphrase: str) -> bytes:
    """Network identifier: SHA-256 of the UTF-8 passphrase."""
    return sha256(passphrase.encode("utf-8"))


__all__ = ["sha256", "sha256_hex", "network_id", "BytesLike"]
