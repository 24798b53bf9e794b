"""
hostcall.wallet.signer
======================

Ed25519 keypairs for signing transaction payloads.

A `Keypair` is parsed from an `S...` strkey secret seed and exists only in
process memory; nothing here reads or writes key material to disk. The public
identity is the raw 32-byte ed25519 key, rendered as a `G...` strkey.

Signatures are deterministic (RFC 8032), so signing the same payload twice
yields identical bytes; both verify against the public key.
"""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from ..errors import InvalidSecretKey
from ..utils import strkey

__all__ = ["Keypair", "SignerInfo", "verify_signature"]


@dataclass(frozen=True)
class SignerInfo:
    """Public description of a signer (safe to log)."""

    public_key: bytes
    address: str


class Keypair:
    __slots__ = ("_sk", "_pk")

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._sk = private_key
        self._pk = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
        )

    # --- constructors ----------------------------------------------------

    @classmethod
    def from_seed(cls, seed: bytes) -> "Keypair":
        if len(seed) != 32:
            raise InvalidSecretKey("seed must be 32 bytes")
        return cls(Ed25519PrivateKey.from_private_bytes(bytes(seed)))

    @classmethod
    def from_secret(cls, secret: str) -> "Keypair":
        """Parse an `S...` strkey seed. Raises InvalidSecretKey on any failure."""
        try:
            seed = strkey.decode_seed(secret.strip())
        except strkey.StrkeyError as e:
            raise InvalidSecretKey(str(e), cause=e) from e
        return cls.from_seed(seed)

    @classmethod
    def random(cls) -> "Keypair":
        return cls(Ed25519PrivateKey.generate())

    # --- properties ------------------------------------------------------

    @property
    def public_key(self) -> bytes:
        return self._pk

    @property
    def address(self) -> str:
        return strkey.encode_account(self._pk)

    @property
    def hint(self) -> bytes:
        """Signature hint: last 4 bytes of the public key."""
        return self._pk[-4:]

    def info(self) -> SignerInfo:
        return SignerInfo(public_key=self._pk, address=self.address)

    def secret(self) -> str:
        raw = self._sk.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return strkey.encode_seed(raw)

    # --- operations ------------------------------------------------------

    def sign(self, payload: bytes) -> bytes:
        return self._sk.sign(bytes(payload))

    def verify(self, payload: bytes, signature: bytes) -> bool:
        return verify_signature(self._pk, payload, signature)

    def __repr__(self) -> str:
        return f"Keypair({self.address})"


def verify_signature(public_key: bytes, payload: bytes, signature: bytes) -> bool:
    pk = Ed25519PublicKey.from_public_bytes(bytes(public_key))
    try:
        pk.verify(bytes(signature), bytes(payload))
        return True
    except InvalidSignature:
        return False
