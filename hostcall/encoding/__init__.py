"""Binary encodings used on the wire and in ledger files."""

from .xdr import Packer, Unpacker, XdrError  # noqa: F401

__all__ = ["Packer", "Unpacker", "XdrError"]
