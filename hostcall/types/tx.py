"""
Transaction structures: host-function operations, transactions, signed
envelopes and the hash preimages derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple

from ..encoding.xdr import Packer, Unpacker, XdrError
from .base import XdrCodable
from .ledger import LedgerFootprint, pack_account_id, unpack_account_id
from .scval import ScVal, pack_scvec, unpack_scvec

MAX_OPS_PER_TX = 100
MAX_SIGNATURES = 20

KEY_TYPE_ED25519 = 0
PRECOND_NONE = 0
MEMO_NONE = 0


class EnvelopeType(IntEnum):
    TX = 2
    CONTRACT_ID_FROM_SOURCE_ACCOUNT = 11


class OperationType(IntEnum):
    INVOKE_HOST_FUNCTION = 24


class HostFunction(IntEnum):
    INVOKE_CONTRACT = 0
    CREATE_CONTRACT_WITH_ED25519 = 1
    CREATE_CONTRACT_WITH_SOURCE_ACCOUNT = 2
    CREATE_TOKEN_CONTRACT_WITH_SOURCE_ACCOUNT = 3
    CREATE_TOKEN_CONTRACT_WITH_ASSET = 4


@dataclass(frozen=True)
class InvokeHostFunctionOp:
    function: HostFunction
    parameters: Tuple[ScVal, ...]
    footprint: LedgerFootprint = field(default_factory=LedgerFootprint)

    def pack(self, p: Packer) -> None:
        p.uint32(int(self.function))
        pack_scvec(p, self.parameters)
        self.footprint.pack(p)

    @classmethod
    def unpack(cls, u: Unpacker) -> "InvokeHostFunctionOp":
        raw = u.uint32()
        try:
            fn = HostFunction(raw)
        except ValueError:
            raise XdrError(f"unknown host function {raw}") from None
        return cls(fn, unpack_scvec(u), LedgerFootprint.unpack(u))


@dataclass(frozen=True)
class Operation(XdrCodable):
    body: InvokeHostFunctionOp
    source_account: Optional[bytes] = None

    def pack(self, p: Packer) -> None:
        p.optional(self.source_account, _pack_muxed)
        p.uint32(int(OperationType.INVOKE_HOST_FUNCTION))
        self.body.pack(p)

    @classmethod
    def unpack(cls, u: Unpacker) -> "Operation":
        source = u.optional(_unpack_muxed)
        op_type = u.uint32()
        if op_type != OperationType.INVOKE_HOST_FUNCTION:
            raise XdrError(f"unsupported operation type {op_type}")
        return cls(InvokeHostFunctionOp.unpack(u), source)


def _pack_muxed(p: Packer, public_key: bytes) -> None:
    p.uint32(KEY_TYPE_ED25519)
    p.fixed_opaque(public_key, 32)


def _unpack_muxed(u: Unpacker) -> bytes:
    kt = u.uint32()
    if kt != KEY_TYPE_ED25519:
        raise XdrError(f"unsupported muxed account type {kt}")
    return u.fixed_opaque(32)


@dataclass(frozen=True)
class Transaction(XdrCodable):
    """Source, fee, sequence and operations; no preconditions, no memo, ext v0."""

    source_account: bytes
    fee: int
    seq_num: int
    operations: Tuple[Operation, ...]

    def pack(self, p: Packer) -> None:
        _pack_muxed(p, self.source_account)
        p.uint32(self.fee)
        p.int64(self.seq_num)
        p.uint32(PRECOND_NONE)
        p.uint32(MEMO_NONE)
        p.array(self.operations, lambda pp, op: op.pack(pp), MAX_OPS_PER_TX)
        p.uint32(0)  # ext v0

    @classmethod
    def unpack(cls, u: Unpacker) -> "Transaction":
        source = _unpack_muxed(u)
        fee = u.uint32()
        seq = u.int64()
        if u.uint32() != PRECOND_NONE:
            raise XdrError("transaction preconditions are not supported")
        if u.uint32() != MEMO_NONE:
            raise XdrError("transaction memos are not supported")
        ops = tuple(u.array(Operation.unpack, MAX_OPS_PER_TX))
        if u.uint32() != 0:
            raise XdrError("unsupported transaction ext")
        return cls(source, fee, seq, ops)


@dataclass(frozen=True)
class DecoratedSignature:
    hint: bytes
    signature: bytes

    def pack(self, p: Packer) -> None:
        p.fixed_opaque(self.hint, 4)
        p.opaque(self.signature, 64)

    @classmethod
    def unpack(cls, u: Unpacker) -> "DecoratedSignature":
        return cls(u.fixed_opaque(4), u.opaque(64))


@dataclass(frozen=True)
class TransactionEnvelope(XdrCodable):
    tx: Transaction
    signatures: Tuple[DecoratedSignature, ...] = ()

    def pack(self, p: Packer) -> None:
        p.uint32(int(EnvelopeType.TX))
        self.tx.pack(p)
        p.array(self.signatures, lambda pp, s: s.pack(pp), MAX_SIGNATURES)

    @classmethod
    def unpack(cls, u: Unpacker) -> "TransactionEnvelope":
        et = u.uint32()
        if et != EnvelopeType.TX:
            raise XdrError(f"unsupported envelope type {et}")
        tx = Transaction.unpack(u)
        return cls(tx, tuple(u.array(DecoratedSignature.unpack, MAX_SIGNATURES)))


@dataclass(frozen=True)
class TransactionSignaturePayload(XdrCodable):
    network_id: bytes
    tx: Transaction

    def pack(self, p: Packer) -> None:
        p.fixed_opaque(self.network_id, 32)
        p.uint32(int(EnvelopeType.TX))
        self.tx.pack(p)


@dataclass(frozen=True)
class ContractIdPreimage(XdrCodable):
    """HashIdPreimage for a contract created by a source account."""

    source_account: bytes
    salt: bytes

    def pack(self, p: Packer) -> None:
        p.uint32(int(EnvelopeType.CONTRACT_ID_FROM_SOURCE_ACCOUNT))
        pack_account_id(p, self.source_account)
        p.fixed_opaque(self.salt, 32)

    @classmethod
    def unpack(cls, u: Unpacker) -> "ContractIdPreimage":
        et = u.uint32()
        if et != EnvelopeType.CONTRACT_ID_FROM_SOURCE_ACCOUNT:
            raise XdrError(f"unexpected preimage type {et}")
        return cls(unpack_account_id(u), u.fixed_opaque(32))


__all__ = [
    "MAX_OPS_PER_TX",
    "EnvelopeType",
    "OperationType",
    "HostFunction",
    "InvokeHostFunctionOp",
    "Operation",
    "Transaction",
    "DecoratedSignature",
    "TransactionEnvelope",
    "TransactionSignaturePayload",
    "ContractIdPreimage",
]
