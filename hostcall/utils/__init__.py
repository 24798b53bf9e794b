"""
Utility helpers.

- hash:   SHA-256 and network id
- strkey: G.../S... key encodings
"""

from .hash import network_id, sha256  # noqa: F401
from .strkey import decode_account, encode_account  # noqa: F401

__all__ = ["sha256", "network_id", "encode_account", "decode_account"]
