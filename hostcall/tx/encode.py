"""
Signing payloads and signed envelopes.

The payload signed for a transaction is

    sha256( network_id || ENVELOPE_TYPE_TX || xdr(tx) ),   network_id = sha256(passphrase)

The passphrase separates networks: an envelope signed for one network fails
verification under any other passphrase.
"""

from __future__ import annotations

from ..types.tx import DecoratedSignature, Transaction, TransactionEnvelope, TransactionSignaturePayload
from ..utils.hash import network_id, sha256
from ..wallet.signer import Keypair, verify_signature

def signature_payload(tx: Transaction, passphrase: str) -> bytes:
    return sha256(TransactionSignaturePayload(network_id(passphrase), tx).to_xdr())

def sign_transaction(keypair: Keypair, tx: Transaction, passphrase: str) -> TransactionEnvelope:
    payload = signature_payload(tx, passphrase)
    sig = DecoratedSignature(hint=keypair.hint, signature=keypair.sign(payload))
    return TransactionEnvelope(tx=tx, signatures=(sig,))

def verify_envelope(envelope: TransactionEnvelope, public_key: bytes, passphrase: str) -> bool:
    """True iff every signature on *envelope* is a valid signature by *public_key*."""
    if not envelope.signatures:
        return False
    payload = signature_payload(envelope.tx, passphrase)
    return all(
        sig.hint == public_key[-4:] and verify_signature(public_key, payload, sig.signature)
        for sig in envelope.signatures
    )

__all__ = ["signature_payload", "sign_transaction", "verify_envelope"]
