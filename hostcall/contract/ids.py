"""
Contract identifiers.

A contract created by a source account is addressed by

    contract_id = sha256(xdr(HashIdPreimage::ContractIdFromSourceAccount{account, salt}))

Both execution strategies derive ids through `contract_id_from_source_account`
so they agree on where a contract lives.
"""

from __future__ import annotations

import binascii
import secrets

from ..errors import InvalidContractId, InvalidSalt
from ..types.tx import ContractIdPreimage
from ..utils.hash import sha256

CONTRACT_ID_LEN = 32
SALT_LEN = 32
ZERO_SALT = bytes(SALT_LEN)


def contract_id_from_source_account(source_account: bytes, salt: bytes) -> bytes:
    if len(source_account) != 32:
        raise ValueError("source account must be a 32-byte ed25519 public key")
    if len(salt) != SALT_LEN:
        raise ValueError("salt must be 32 bytes")
    return sha256(ContractIdPreimage(bytes(source_account), bytes(salt)).to_xdr())


def resolve_salt(salt: bytes, *, randomize: bool) -> bytes:
    """
    Return the salt to deploy with.

    The all-zero salt is a sentinel: when `randomize` is set (remote
    deployments) it is replaced with 32 random bytes. Any other salt, and the
    sandbox, use the value verbatim.
    """
    if randomize and salt == ZERO_SALT:
        return secrets.token_bytes(SALT_LEN)
    return salt


def _parse_hex32(text: str) -> bytes:
    s = text.strip()
    if len(s) != 64:
        raise ValueError(f"expected 64 hex characters, got {len(s)}")
    return binascii.unhexlify(s)


def parse_contract_id(text: str) -> bytes:
    try:
        return _parse_hex32(text)
    except (ValueError, binascii.Error) as e:
        raise InvalidContractId(text, cause=e) from e


def parse_salt(text: str) -> bytes:
    try:
        return _parse_hex32(text)
    except (ValueError, binascii.Error) as e:
        raise InvalidSalt(text, cause=e) from e


__all__ = [
    "CONTRACT_ID_LEN",
    "ZERO_SALT",
    "contract_id_from_source_account",
    "resolve_salt",
    "parse_contract_id",
    "parse_salt",
]
