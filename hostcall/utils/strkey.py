"""
Strkey codec for ed25519 account ids (G...) and secret seeds (S...).

Layout: base32( version_byte || 32-byte payload || crc16-xmodem(le) ), no
padding, uppercase. Only the two version bytes this package needs are
supported.

Helpers
-------
- encode_account(pub32) -> "G..."
- decode_account("G...") -> pub32
- encode_seed(seed32) -> "S..."
- decode_seed("S...") -> seed32
"""

from __future__ import annotations

import base64
import binascii

__all__ = [
    "StrkeyError",
    "VERSION_ACCOUNT_ID",
    "VERSION_SEED",
    "encode",
    "decode",
    "encode_account",
    "decode_account",
    "encode_seed",
    "decode_seed",
    "is_valid_account",
]

VERSION_ACCOUNT_ID = 6 << 3  # 'G'
VERSION_SEED = 18 << 3  # 'S'

_PAYLOAD_LEN = 32
_ENCODED_LEN = 56


class StrkeyError(ValueError):
    pass


def _crc16_xmodem(data: bytes) -> int:
    crc = 0
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            crc = ((crc << 1) ^ 0x1021) if crc & 0x8000 else (crc << 1)
            crc &= 0xFFFF
    return crc


def encode(version: int, payload: bytes) -> str:
    if len(payload) != _PAYLOAD_LEN:
        raise StrkeyError(f"payload must be {_PAYLOAD_LEN} bytes, got {len(payload)}")
    body = bytes([version]) + bytes(payload)
    crc = _crc16_xmodem(body)
    raw = body + crc.to_bytes(2, "little")
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def decode(version: int, text: str) -> bytes:
    if len(text) != _ENCODED_LEN:
        raise StrkeyError(f"strkey must be {_ENCODED_LEN} characters, got {len(text)}")
    if text != text.upper():
        raise StrkeyError("strkey must be uppercase")
    try:
        raw = base64.b32decode(text)
    except (binascii.Error, ValueError) as e:
        raise StrkeyError(f"invalid base32: {e}") from e
    if raw[0] != version:
        raise StrkeyError(f"unexpected version byte {raw[0]:#x}, expected {version:#x}")
    body, checksum = raw[:-2], raw[-2:]
    if _crc16_xmodem(body) != int.from_bytes(checksum, "little"):
        raise StrkeyError("strkey checksum mismatch")
    return body[1:]


def encode_account(public_key: bytes) -> str:
    return encode(VERSION_ACCOUNT_ID, public_key)


def decode_account(text: str) -> bytes:
    return decode(VERSION_ACCOUNT_ID, text)


def encode_seed(seed: bytes) -> str:
    return encode(VERSION_SEED, seed)


def decode_seed(text: str) -> bytes:
    return decode(VERSION_SEED, text)


def is_valid_account(text: str) -> bool:
    try:
        decode_account(text)
        return True
    except StrkeyError:
        return False
