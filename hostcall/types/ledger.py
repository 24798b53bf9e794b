"""
Ledger keys, entries, footprints and ledger metadata.

Only the two entry kinds this package reads or writes are modelled: accounts
and contract data. `LedgerKey` is hashable so it can index snapshot maps and
footprint sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, FrozenSet, Iterable, Optional

from ..encoding.xdr import Packer, Unpacker, XdrError
from .base import XdrCodable
from .scval import ScVal

PUBLIC_KEY_TYPE_ED25519 = 0

# All-zero ed25519 account: default sandbox invoker and token administrator
ZERO_ACCOUNT_ID = bytes(32)
ZERO_ACCOUNT = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"


class LedgerEntryType(IntEnum):
    ACCOUNT = 0
    CONTRACT_DATA = 6


def pack_account_id(p: Packer, public_key: bytes) -> None:
    p.uint32(PUBLIC_KEY_TYPE_ED25519)
    p.fixed_opaque(public_key, 32)


def unpack_account_id(u: Unpacker) -> bytes:
    kt = u.uint32()
    if kt != PUBLIC_KEY_TYPE_ED25519:
        raise XdrError(f"unsupported public key type {kt}")
    return u.fixed_opaque(32)


def _entry_type(u: Unpacker) -> LedgerEntryType:
    raw = u.uint32()
    try:
        return LedgerEntryType(raw)
    except ValueError:
        raise XdrError(f"unsupported ledger entry type {raw}") from None


@dataclass(frozen=True)
class LedgerKey(XdrCodable):
    type: LedgerEntryType
    account_id: bytes = b""
    contract_id: bytes = b""
    key: Optional[ScVal] = None

    @classmethod
    def account(cls, account_id: bytes) -> "LedgerKey":
        return cls(LedgerEntryType.ACCOUNT, account_id=bytes(account_id))

    @classmethod
    def contract_data(cls, contract_id: bytes, key: ScVal) -> "LedgerKey":
        return cls(LedgerEntryType.CONTRACT_DATA, contract_id=bytes(contract_id), key=key)

    @classmethod
    def contract_code(cls, contract_id: bytes) -> "LedgerKey":
        """Key of the entry holding a contract's WASM code."""
        return cls.contract_data(contract_id, ScVal.ledger_key_contract_code())

    def pack(self, p: Packer) -> None:
        p.uint32(int(self.type))
        if self.type == LedgerEntryType.ACCOUNT:
            pack_account_id(p, self.account_id)
        else:
            p.fixed_opaque(self.contract_id, 32)
            self.key.pack(p)  # type: ignore[union-attr]

    @classmethod
    def unpack(cls, u: Unpacker) -> "LedgerKey":
        t = _entry_type(u)
        if t == LedgerEntryType.ACCOUNT:
            return cls.account(unpack_account_id(u))
        return cls.contract_data(u.fixed_opaque(32), ScVal.unpack(u))

    def __repr__(self) -> str:
        if self.type == LedgerEntryType.ACCOUNT:
            return f"LedgerKey.account({self.account_id.hex()})"
        return f"LedgerKey.contract_data({self.contract_id.hex()}, {self.key!r})"


@dataclass(frozen=True)
class AccountEntry:
    account_id: bytes
    balance: int = 0
    seq_num: int = 0

    def pack(self, p: Packer) -> None:
        pack_account_id(p, self.account_id)
        p.int64(self.balance)
        p.int64(self.seq_num)

    @classmethod
    def unpack(cls, u: Unpacker) -> "AccountEntry":
        return cls(unpack_account_id(u), u.int64(), u.int64())


@dataclass(frozen=True)
class ContractDataEntry:
    contract_id: bytes
    key: ScVal
    val: ScVal

    def pack(self, p: Packer) -> None:
        p.fixed_opaque(self.contract_id, 32)
        self.key.pack(p)
        self.val.pack(p)

    @classmethod
    def unpack(cls, u: Unpacker) -> "ContractDataEntry":
        return cls(u.fixed_opaque(32), ScVal.unpack(u), ScVal.unpack(u))


@dataclass(frozen=True)
class LedgerEntry(XdrCodable):
    last_modified_ledger_seq: int
    data: Any  # AccountEntry | ContractDataEntry

    @classmethod
    def contract_data(cls, contract_id: bytes, key: ScVal, val: ScVal, last_modified_ledger_seq: int = 0) -> "LedgerEntry":
        return cls(last_modified_ledger_seq, ContractDataEntry(bytes(contract_id), key, val))

    @classmethod
    def account(cls, account_id: bytes, balance: int = 0, seq_num: int = 0, last_modified_ledger_seq: int = 0) -> "LedgerEntry":
        return cls(last_modified_ledger_seq, AccountEntry(bytes(account_id), balance, seq_num))

    @property
    def type(self) -> LedgerEntryType:
        return LedgerEntryType.ACCOUNT if isinstance(self.data, AccountEntry) else LedgerEntryType.CONTRACT_DATA

    def ledger_key(self) -> LedgerKey:
        if isinstance(self.data, AccountEntry):
            return LedgerKey.account(self.data.account_id)
        return LedgerKey.contract_data(self.data.contract_id, self.data.key)

    def with_last_modified(self, seq: int) -> "LedgerEntry":
        return replace(self, last_modified_ledger_seq=seq)

    def pack(self, p: Packer) -> None:
        p.uint32(self.last_modified_ledger_seq)
        p.uint32(int(self.type))
        self.data.pack(p)
        p.uint32(0)  # ext v0

    @classmethod
    def unpack(cls, u: Unpacker) -> "LedgerEntry":
        seq = u.uint32()
        t = _entry_type(u)
        data = AccountEntry.unpack(u) if t == LedgerEntryType.ACCOUNT else ContractDataEntry.unpack(u)
        ext = u.uint32()
        if ext != 0:
            raise XdrError(f"unsupported ledger entry ext {ext}")
        return cls(seq, data)


@dataclass(frozen=True)
class LedgerFootprint(XdrCodable):
    """Read-only and read-write key sets. Equality is set equality."""

    read_only: FrozenSet[LedgerKey] = field(default_factory=frozenset)
    read_write: FrozenSet[LedgerKey] = field(default_factory=frozenset)

    @classmethod
    def of(cls, read_only: Iterable[LedgerKey] = (), read_write: Iterable[LedgerKey] = ()) -> "LedgerFootprint":
        return cls(frozenset(read_only), frozenset(read_write))

    @property
    def is_empty(self) -> bool:
        return not self.read_only and not self.read_write

    def pack(self, p: Packer) -> None:
        for keys in (self.read_only, self.read_write):
            ordered = sorted(keys, key=lambda k: k.to_xdr())
            p.array(ordered, lambda pp, k: k.pack(pp))

    @classmethod
    def unpack(cls, u: Unpacker) -> "LedgerFootprint":
        ro = u.array(LedgerKey.unpack)
        rw = u.array(LedgerKey.unpack)
        return cls(frozenset(ro), frozenset(rw))


@dataclass(frozen=True)
class LedgerInfo:
    protocol_version: int = 20
    sequence_number: int = 0
    timestamp: int = 0
    network_id: bytes = bytes(32)
    base_reserve: int = 0

    def bump(self, sequence: int = 1, seconds: int = 5) -> "LedgerInfo":
        """The ledger a new invocation executes in."""
        return replace(self, sequence_number=self.sequence_number + sequence, timestamp=self.timestamp + seconds)

    def to_json(self) -> Dict[str, Any]:
        return {
            "protocol_version": self.protocol_version,
            "sequence_number": self.sequence_number,
            "timestamp": self.timestamp,
            "network_id": self.network_id.hex(),
            "base_reserve": self.base_reserve,
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "LedgerInfo":
        network_id = bytes.fromhex(obj.get("network_id", "00" * 32))
        if len(network_id) != 32:
            raise ValueError("network_id must be 32 bytes")
        return cls(
            protocol_version=int(obj.get("protocol_version", 20)),
            sequence_number=int(obj.get("sequence_number", 0)),
            timestamp=int(obj.get("timestamp", 0)),
            network_id=network_id,
            base_reserve=int(obj.get("base_reserve", 0)),
        )


__all__ = [
    "ZERO_ACCOUNT",
    "ZERO_ACCOUNT_ID",
    "LedgerEntryType",
    "LedgerKey",
    "AccountEntry",
    "ContractDataEntry",
    "LedgerEntry",
    "LedgerFootprint",
    "LedgerInfo",
    "pack_account_id",
    "unpack_account_id",
]
