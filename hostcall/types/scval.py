"""
Contract call values (ScVal)
============================

An `ScVal` is the tagged value passed to and returned from contract functions.
It is a two-level union mirroring its XDR layout:

    ScVal   := U63 | U32 | I32 | STATIC | OBJECT(Optional[ScObject]) | SYMBOL | BITSET | STATUS
    ScObject := VEC | MAP | U64 | I64 | BYTES | ACCOUNT_ID

Design notes
------------
- Values are frozen dataclasses holding only tuples/bytes/ints/str, so they are
  hashable and can be used as ledger-key components and map keys.
- `ScVal.map(...)` sorts its entries by key (`sort_key`). Decoding preserves
  the on-wire order so decode → encode reproduces the input bytes exactly.
- Constructors validate ranges eagerly and raise `ValueError`; the unpacker
  raises `XdrError` for the same conditions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from ..encoding.xdr import Packer, Unpacker, XdrError
from .base import XdrCodable

SCVAL_LIMIT = 256_000
SCSYMBOL_LIMIT = 10

_SYMBOL_RE = re.compile(r"^[A-Za-z0-9_]*$")


class ScValType(IntEnum):
    U63 = 0
    U32 = 1
    I32 = 2
    STATIC = 3
    OBJECT = 4
    SYMBOL = 5
    BITSET = 6
    STATUS = 7


class ScStatic(IntEnum):
    VOID = 0
    TRUE = 1
    FALSE = 2
    LEDGER_KEY_CONTRACT_CODE = 3


class ScObjectType(IntEnum):
    VEC = 0
    MAP = 1
    U64 = 2
    I64 = 3
    BYTES = 4
    ACCOUNT_ID = 7


def is_valid_symbol(s: str) -> bool:
    return len(s) <= SCSYMBOL_LIMIT and bool(_SYMBOL_RE.match(s))


def _check_range(v: int, lo: int, hi: int, what: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError(f"{what} expects an integer, got {type(v).__name__}")
    if not lo <= v <= hi:
        raise ValueError(f"{what} out of range: {v}")
    return v


@dataclass(frozen=True)
class ScObject(XdrCodable):
    type: ScObjectType
    value: Any

    def pack(self, p: Packer) -> None:
        p.uint32(int(self.type))
        t = self.type
        if t == ScObjectType.VEC:
            p.array(self.value, lambda pp, v: v.pack(pp), SCVAL_LIMIT)
        elif t == ScObjectType.MAP:
            p.array(self.value, _pack_map_entry, SCVAL_LIMIT)
        elif t == ScObjectType.U64:
            p.uint64(self.value)
        elif t == ScObjectType.I64:
            p.int64(self.value)
        elif t == ScObjectType.BYTES:
            p.opaque(self.value, SCVAL_LIMIT)
        elif t == ScObjectType.ACCOUNT_ID:
            p.uint32(0)  # PUBLIC_KEY_TYPE_ED25519
            p.fixed_opaque(self.value, 32)
        else:  # pragma: no cover - enum is closed
            raise XdrError(f"unsupported object type {t!r}")

    @classmethod
    def unpack(cls, u: Unpacker) -> "ScObject":
        raw = u.uint32()
        try:
            t = ScObjectType(raw)
        except ValueError:
            raise XdrError(f"unsupported ScObject type {raw}") from None
        if t == ScObjectType.VEC:
            return cls(t, tuple(u.array(ScVal.unpack, SCVAL_LIMIT)))
        if t == ScObjectType.MAP:
            return cls(t, tuple(u.array(_unpack_map_entry, SCVAL_LIMIT)))
        if t == ScObjectType.U64:
            return cls(t, u.uint64())
        if t == ScObjectType.I64:
            return cls(t, u.int64())
        if t == ScObjectType.BYTES:
            return cls(t, u.opaque(SCVAL_LIMIT))
        key_type = u.uint32()
        if key_type != 0:
            raise XdrError(f"unsupported public key type {key_type}")
        return cls(t, u.fixed_opaque(32))


def _pack_map_entry(p: Packer, kv: Tuple["ScVal", "ScVal"]) -> None:
    kv[0].pack(p)
    kv[1].pack(p)


def _unpack_map_entry(u: Unpacker) -> Tuple["ScVal", "ScVal"]:
    return ScVal.unpack(u), ScVal.unpack(u)


@dataclass(frozen=True)
class ScVal(XdrCodable):
    type: ScValType
    value: Any = None

    # ---------------- constructors ----------------

    @classmethod
    def u63(cls, v: int) -> "ScVal":
        return cls(ScValType.U63, _check_range(v, 0, (1 << 63) - 1, "u63"))

    @classmethod
    def u32(cls, v: int) -> "ScVal":
        return cls(ScValType.U32, _check_range(v, 0, 0xFFFFFFFF, "u32"))

    @classmethod
    def i32(cls, v: int) -> "ScVal":
        return cls(ScValType.I32, _check_range(v, -(1 << 31), (1 << 31) - 1, "i32"))

    @classmethod
    def static(cls, s: ScStatic) -> "ScVal":
        return cls(ScValType.STATIC, ScStatic(s))

    @classmethod
    def void(cls) -> "ScVal":
        return cls.static(ScStatic.VOID)

    @classmethod
    def boolean(cls, b: bool) -> "ScVal":
        return cls.static(ScStatic.TRUE if b else ScStatic.FALSE)

    @classmethod
    def ledger_key_contract_code(cls) -> "ScVal":
        return cls.static(ScStatic.LEDGER_KEY_CONTRACT_CODE)

    @classmethod
    def symbol(cls, s: str) -> "ScVal":
        if not is_valid_symbol(s):
            raise ValueError(f"invalid symbol {s!r}: at most {SCSYMBOL_LIMIT} chars of [A-Za-z0-9_]")
        return cls(ScValType.SYMBOL, s)

    @classmethod
    def bitset(cls, v: int) -> "ScVal":
        return cls(ScValType.BITSET, _check_range(v, 0, (1 << 64) - 1, "bitset"))

    @classmethod
    def status(cls, status_type: int, code: int = 0) -> "ScVal":
        _check_range(status_type, 0, 0xFFFFFFFF, "status type")
        _check_range(code, 0, 0xFFFFFFFF, "status code")
        return cls(ScValType.STATUS, (status_type, code))

    @classmethod
    def object(cls, obj: Optional[ScObject]) -> "ScVal":
        return cls(ScValType.OBJECT, obj)

    @classmethod
    def vec(cls, items: Iterable["ScVal"]) -> "ScVal":
        items = tuple(items)
        if len(items) > SCVAL_LIMIT:
            raise ValueError(f"vec longer than {SCVAL_LIMIT}")
        return cls.object(ScObject(ScObjectType.VEC, items))

    @classmethod
    def map(cls, entries: Union[Mapping["ScVal", "ScVal"], Iterable[Tuple["ScVal", "ScVal"]]]) -> "ScVal":
        pairs = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
        pairs.sort(key=lambda kv: kv[0].sort_key())
        for a, b in zip(pairs, pairs[1:]):
            if a[0] == b[0]:
                raise ValueError(f"duplicate map key {a[0]!r}")
        if len(pairs) > SCVAL_LIMIT:
            raise ValueError(f"map larger than {SCVAL_LIMIT}")
        return cls.object(ScObject(ScObjectType.MAP, tuple(pairs)))

    @classmethod
    def u64(cls, v: int) -> "ScVal":
        return cls.object(ScObject(ScObjectType.U64, _check_range(v, 0, (1 << 64) - 1, "u64")))

    @classmethod
    def i64(cls, v: int) -> "ScVal":
        return cls.object(ScObject(ScObjectType.I64, _check_range(v, -(1 << 63), (1 << 63) - 1, "i64")))

    @classmethod
    def bytes_(cls, b: bytes) -> "ScVal":
        b = bytes(b)
        if len(b) > SCVAL_LIMIT:
            raise ValueError(f"bytes longer than {SCVAL_LIMIT}")
        return cls.object(ScObject(ScObjectType.BYTES, b))

    @classmethod
    def account_id(cls, public_key: bytes) -> "ScVal":
        if len(public_key) != 32:
            raise ValueError("account id must be a 32-byte ed25519 public key")
        return cls.object(ScObject(ScObjectType.ACCOUNT_ID, bytes(public_key)))

    # ---------------- accessors ----------------

    @property
    def obj(self) -> Optional[ScObject]:
        return self.value if self.type == ScValType.OBJECT else None

    def is_object(self, t: ScObjectType) -> bool:
        o = self.obj
        return o is not None and o.type == t

    def as_bytes(self) -> Optional[bytes]:
        return self.value.value if self.is_object(ScObjectType.BYTES) else None

    def describe(self) -> str:
        """Short kind name used in error messages, e.g. 'u32' or 'object(map)'."""
        if self.type != ScValType.OBJECT:
            return self.type.name.lower()
        if self.value is None:
            return "object(null)"
        return f"object({self.value.type.name.lower()})"

    def sort_key(self) -> Tuple[Any, ...]:
        """Total order used for map keys; values of different kinds order by tag."""
        t = self.type
        if t == ScValType.OBJECT:
            o = self.value
            if o is None:
                return (int(t), 0)
            if o.type == ScObjectType.VEC:
                inner: Any = tuple(v.sort_key() for v in o.value)
            elif o.type == ScObjectType.MAP:
                inner = tuple((k.sort_key(), v.sort_key()) for k, v in o.value)
            else:
                inner = o.value
            return (int(t), 1, int(o.type), inner)
        if t == ScValType.STATIC:
            return (int(t), int(self.value))
        return (int(t), self.value)

    # ---------------- XDR ----------------

    def pack(self, p: Packer) -> None:
        t = self.type
        p.uint32(int(t))
        if t == ScValType.U63:
            p.int64(self.value)
        elif t == ScValType.U32:
            p.uint32(self.value)
        elif t == ScValType.I32:
            p.int32(self.value)
        elif t == ScValType.STATIC:
            p.uint32(int(self.value))
        elif t == ScValType.OBJECT:
            p.optional(self.value, lambda pp, o: o.pack(pp))
        elif t == ScValType.SYMBOL:
            p.string(self.value, SCSYMBOL_LIMIT)
        elif t == ScValType.BITSET:
            p.uint64(self.value)
        elif t == ScValType.STATUS:
            p.uint32(self.value[0])
            p.uint32(self.value[1])

    @classmethod
    def unpack(cls, u: Unpacker) -> "ScVal":
        raw = u.uint32()
        try:
            t = ScValType(raw)
        except ValueError:
            raise XdrError(f"unknown ScVal type {raw}") from None
        if t == ScValType.U63:
            v = u.int64()
            if v < 0:
                raise XdrError("negative u63")
            return cls(t, v)
        if t == ScValType.U32:
            return cls(t, u.uint32())
        if t == ScValType.I32:
            return cls(t, u.int32())
        if t == ScValType.STATIC:
            s = u.uint32()
            try:
                return cls(t, ScStatic(s))
            except ValueError:
                raise XdrError(f"unknown ScStatic {s}") from None
        if t == ScValType.OBJECT:
            return cls(t, u.optional(ScObject.unpack))
        if t == ScValType.SYMBOL:
            s = u.string(SCSYMBOL_LIMIT)
            if not _SYMBOL_RE.match(s):
                raise XdrError(f"invalid symbol characters in {s!r}")
            return cls(t, s)
        if t == ScValType.BITSET:
            return cls(t, u.uint64())
        return cls(t, (u.uint32(), u.uint32()))


def unpack_scvec(u: Unpacker) -> Tuple[ScVal, ...]:
    return tuple(u.array(ScVal.unpack, SCVAL_LIMIT))


def pack_scvec(p: Packer, items: Tuple[ScVal, ...]) -> None:
    p.array(items, lambda pp, v: v.pack(pp), SCVAL_LIMIT)


__all__ = [
    "SCVAL_LIMIT",
    "SCSYMBOL_LIMIT",
    "ScValType",
    "ScStatic",
    "ScObjectType",
    "ScObject",
    "ScVal",
    "is_valid_symbol",
    "pack_scvec",
    "unpack_scvec",
]
