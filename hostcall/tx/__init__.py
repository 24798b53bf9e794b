"""
hostcall.tx
===========

Transaction helpers: build and sign.

Submodules
----------
- build : operation builders (invoke / create token / init token) and `build_tx`.
- encode: signing payload, envelope signing and verification.
"""

from .build import build_tx, create_token_op, init_token_op, invoke_op, token_init_parameters  # noqa: F401
from .encode import sign_transaction, signature_payload, verify_envelope  # noqa: F401

__all__ = [
    "build_tx",
    "invoke_op",
    "create_token_op",
    "init_token_op",
    "token_init_parameters",
    "sign_transaction",
    "signature_payload",
    "verify_envelope",
]
