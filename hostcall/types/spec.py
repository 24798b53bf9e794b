"""
Contract interface description embedded in WASM (`contractspecv0`).

The custom section is a concatenation of XDR `ScSpecEntry` values. Functions
declare ordered, named inputs; user-defined structs and unions are kept so
argument parsing can resolve `udt<name>` parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, List, Optional, Tuple

from ..encoding.xdr import Unpacker, XdrError

NAME_LIMIT = 60
FIELD_LIMIT = 30
TUPLE_LIMIT = 12


class ScSpecType(IntEnum):
    VAL = 0
    U64 = 1
    I64 = 2
    U32 = 3
    I32 = 4
    BOOL = 5
    SYMBOL = 6
    BITSET = 7
    STATUS = 8
    BYTES = 9
    BIG_INT = 10
    INVOKER = 11
    ACCOUNT_ID = 12
    OPTION = 1000
    RESULT = 1001
    VEC = 1002
    SET = 1003
    MAP = 1004
    TUPLE = 1005
    BYTES_N = 1006
    UDT = 2000


class ScSpecEntryKind(IntEnum):
    FUNCTION_V0 = 0
    UDT_STRUCT_V0 = 1
    UDT_UNION_V0 = 2


@dataclass(frozen=True)
class ScSpecTypeDef:
    type: ScSpecType
    params: Tuple["ScSpecTypeDef", ...] = ()
    length: int = 0
    name: str = ""

    @classmethod
    def unpack(cls, u: Unpacker) -> "ScSpecTypeDef":
        raw = u.uint32()
        try:
            t = ScSpecType(raw)
        except ValueError:
            raise XdrError(f"unknown spec type {raw}") from None
        if t in (ScSpecType.OPTION, ScSpecType.VEC, ScSpecType.SET):
            return cls(t, (cls.unpack(u),))
        if t in (ScSpecType.RESULT, ScSpecType.MAP):
            return cls(t, (cls.unpack(u), cls.unpack(u)))
        if t == ScSpecType.TUPLE:
            return cls(t, tuple(u.array(cls.unpack, TUPLE_LIMIT)))
        if t == ScSpecType.BYTES_N:
            return cls(t, length=u.uint32())
        if t == ScSpecType.UDT:
            return cls(t, name=u.string(NAME_LIMIT))
        return cls(t)

    def __str__(self) -> str:
        base = self.type.name.lower()
        if self.type == ScSpecType.BYTES_N:
            return f"bytes_n<{self.length}>"
        if self.type == ScSpecType.UDT:
            return self.name
        if self.params:
            return f"{base}<{', '.join(str(p) for p in self.params)}>"
        return base


@dataclass(frozen=True)
class FunctionInput:
    name: str
    type: ScSpecTypeDef


@dataclass(frozen=True)
class FunctionSpec:
    name: str
    inputs: Tuple[FunctionInput, ...]
    outputs: Tuple[ScSpecTypeDef, ...] = ()

    def signature(self) -> str:
        args = ", ".join(f"{i.name}: {i.type}" for i in self.inputs)
        return f"{self.name}({args})"


@dataclass(frozen=True)
class UdtStructSpec:
    name: str
    fields: Tuple[FunctionInput, ...]


@dataclass(frozen=True)
class UdtUnionCase:
    name: str
    type: Optional[ScSpecTypeDef]


@dataclass(frozen=True)
class UdtUnionSpec:
    name: str
    cases: Tuple[UdtUnionCase, ...]


def _unpack_field(u: Unpacker) -> FunctionInput:
    return FunctionInput(u.string(FIELD_LIMIT), ScSpecTypeDef.unpack(u))


def _unpack_case(u: Unpacker) -> UdtUnionCase:
    return UdtUnionCase(u.string(NAME_LIMIT), u.optional(ScSpecTypeDef.unpack))


def iter_spec_entries(data: bytes) -> Iterator[object]:
    """Decode a `contractspecv0` payload into its entries, in order."""
    u = Unpacker(data)
    while not u.done():
        raw = u.uint32()
        try:
            kind = ScSpecEntryKind(raw)
        except ValueError:
            raise XdrError(f"unknown spec entry kind {raw}") from None
        if kind == ScSpecEntryKind.FUNCTION_V0:
            name = u.string(10)
            inputs = tuple(u.array(_unpack_field, 10))
            outputs = tuple(u.array(ScSpecTypeDef.unpack, 1))
            yield FunctionSpec(name, inputs, outputs)
        elif kind == ScSpecEntryKind.UDT_STRUCT_V0:
            yield UdtStructSpec(u.string(NAME_LIMIT), tuple(u.array(_unpack_field, 40)))
        else:
            yield UdtUnionSpec(u.string(NAME_LIMIT), tuple(u.array(_unpack_case, 50)))


@dataclass(frozen=True)
class ContractSpec:
    functions: Dict[str, FunctionSpec]
    types: Dict[str, object]

    @classmethod
    def from_entries(cls, entries: List[object]) -> "ContractSpec":
        fns: Dict[str, FunctionSpec] = {}
        types: Dict[str, object] = {}
        for e in entries:
            if isinstance(e, FunctionSpec):
                fns[e.name] = e
            else:
                types[e.name] = e  # type: ignore[attr-defined]
        return cls(fns, types)

    def function(self, name: str) -> Optional[FunctionSpec]:
        return self.functions.get(name)


__all__ = [
    "ScSpecType",
    "ScSpecEntryKind",
    "ScSpecTypeDef",
    "FunctionInput",
    "FunctionSpec",
    "UdtStructSpec",
    "UdtUnionCase",
    "UdtUnionSpec",
    "ContractSpec",
    "iter_spec_entries",
]
