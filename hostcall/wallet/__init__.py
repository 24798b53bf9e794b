"""In-memory ed25519 signing keys."""

from .signer import Keypair, SignerInfo  # noqa: F401

__all__ = ["Keypair", "SignerInfo"]
