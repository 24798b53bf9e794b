"""
Type-directed conversion between command-line text and ScVal.

`from_string(text, type)` parses one CLI token according to the declared
parameter type; composite types take JSON:

    u32/i32/u64/i64/bitset  123, -5, "18446744073709551615"
    bool                    true | false
    symbol                  hello_world
    bytes / bytes_n<N>      hex, e.g. 00ff10
    account_id              G... strkey
    vec<T> / set<T>         [1, 2, 3]
    tuple<A,B>              [1, "sym"]
    map<K,V>                {"1": true}  (keys parsed as K)
    option<T>               null | <T>
    udt struct              {"field": <T>, ...}  → map of symbol → value
    udt union               "Case" | ["Case", <T>] → vec [symbol, value]
    val                     any JSON; ints become u63 (or i32/i64 when negative)

`to_string(value)` renders a result for printing.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from ..errors import ArgumentParseError
from ..types.scval import ScObjectType, ScStatic, ScVal, ScValType, is_valid_symbol
from ..types.spec import ContractSpec, ScSpecType, ScSpecTypeDef, UdtStructSpec, UdtUnionSpec
from ..utils import strkey

# types whose CLI form is plain text rather than JSON
_TEXT_TYPES = (ScSpecType.SYMBOL, ScSpecType.BYTES, ScSpecType.BYTES_N, ScSpecType.ACCOUNT_ID)

_INT_RANGES = {
    ScSpecType.U32: (0, 0xFFFFFFFF),
    ScSpecType.I32: (-(1 << 31), (1 << 31) - 1),
    ScSpecType.U64: (0, (1 << 64) - 1),
    ScSpecType.I64: (-(1 << 63), (1 << 63) - 1),
    ScSpecType.BITSET: (0, (1 << 64) - 1),
}


class _Invalid(ValueError):
    pass


def from_string(text: str, typedef: ScSpecTypeDef, spec: Optional[ContractSpec] = None) -> ScVal:
    try:
        return _from_text(text, typedef, spec)
    except ValueError as e:
        raise ArgumentParseError(text, str(typedef), str(e)) from e


def _from_text(text: str, t: ScSpecTypeDef, spec: Optional[ContractSpec]) -> ScVal:
    if t.type in _TEXT_TYPES and not text.startswith('"'):
        return _from_json(text, t, spec)
    if t.type == ScSpecType.UDT and _is_union(t, spec) and not text.lstrip().startswith(("[", '"')):
        return _from_json(text, t, spec)
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise _Invalid(f"malformed literal: {e.msg}") from e
    return _from_json(value, t, spec)


def _from_json(v: Any, t: ScSpecTypeDef, spec: Optional[ContractSpec]) -> ScVal:
    k = t.type
    if k in _INT_RANGES:
        n = _as_int(v)
        lo, hi = _INT_RANGES[k]
        if not lo <= n <= hi:
            raise _Invalid(f"{n} out of range for {t}")
        if k == ScSpecType.U32:
            return ScVal.u32(n)
        if k == ScSpecType.I32:
            return ScVal.i32(n)
        if k == ScSpecType.U64:
            return ScVal.u64(n)
        if k == ScSpecType.I64:
            return ScVal.i64(n)
        return ScVal.bitset(n)
    if k == ScSpecType.BOOL:
        if not isinstance(v, bool):
            raise _Invalid("expected true or false")
        return ScVal.boolean(v)
    if k == ScSpecType.SYMBOL:
        s = _as_str(v)
        if not is_valid_symbol(s):
            raise _Invalid("symbols are at most 10 characters of [A-Za-z0-9_]")
        return ScVal.symbol(s)
    if k in (ScSpecType.BYTES, ScSpecType.BYTES_N):
        raw = _as_hex(v)
        if k == ScSpecType.BYTES_N and len(raw) != t.length:
            raise _Invalid(f"expected {t.length} bytes, got {len(raw)}")
        return ScVal.bytes_(raw)
    if k == ScSpecType.ACCOUNT_ID:
        try:
            return ScVal.account_id(strkey.decode_account(_as_str(v)))
        except strkey.StrkeyError as e:
            raise _Invalid(f"invalid account id: {e}") from e
    if k == ScSpecType.STATUS:
        if not (isinstance(v, list) and len(v) == 2):
            raise _Invalid("expected [type, code]")
        return ScVal.status(_as_int(v[0]), _as_int(v[1]))
    if k == ScSpecType.OPTION:
        return ScVal.void() if v is None else _from_json(v, t.params[0], spec)
    if k in (ScSpecType.VEC, ScSpecType.SET):
        if not isinstance(v, list):
            raise _Invalid("expected a JSON array")
        items = [_from_json(x, t.params[0], spec) for x in v]
        if k == ScSpecType.SET and len(set(items)) != len(items):
            raise _Invalid("set contains duplicate elements")
        return ScVal.vec(items)
    if k == ScSpecType.TUPLE:
        if not isinstance(v, list) or len(v) != len(t.params):
            raise _Invalid(f"expected a JSON array of {len(t.params)} elements")
        return ScVal.vec(_from_json(x, p, spec) for x, p in zip(v, t.params))
    if k == ScSpecType.MAP:
        if not isinstance(v, dict):
            raise _Invalid("expected a JSON object")
        key_t, val_t = t.params
        return ScVal.map((_from_text(str(key), key_t, spec), _from_json(val, val_t, spec)) for key, val in v.items())
    if k == ScSpecType.UDT:
        return _from_udt(v, t, spec)
    if k == ScSpecType.VAL:
        return _infer(v)
    raise _Invalid(f"arguments of type {t} cannot be given as text")


def _from_udt(v: Any, t: ScSpecTypeDef, spec: Optional[ContractSpec]) -> ScVal:
    udt = spec.types.get(t.name) if spec is not None else None
    if udt is None:
        raise _Invalid(f"unknown user-defined type {t.name!r}")
    if isinstance(udt, UdtStructSpec):
        if not isinstance(v, dict):
            raise _Invalid(f"expected a JSON object for struct {t.name}")
        names = {f.name for f in udt.fields}
        if set(v) != names:
            raise _Invalid(f"struct {t.name} expects fields {sorted(names)}")
        return ScVal.map((ScVal.symbol(f.name), _from_json(v[f.name], f.type, spec)) for f in udt.fields)
    assert isinstance(udt, UdtUnionSpec)
    if isinstance(v, str):
        name, payload = v, []
    elif isinstance(v, list) and v:
        name, payload = v[0], v[1:]
    else:
        raise _Invalid(f"expected \"Case\" or [\"Case\", value] for union {t.name}")
    case = next((c for c in udt.cases if c.name == name), None)
    if case is None:
        raise _Invalid(f"union {t.name} has no case {name!r}")
    if case.type is None:
        if payload:
            raise _Invalid(f"case {name} takes no value")
        return ScVal.vec([ScVal.symbol(case.name)])
    if not payload or len(payload) != 1:
        raise _Invalid(f"case {name} takes exactly one value")
    return ScVal.vec([ScVal.symbol(case.name), _from_json(payload[0], case.type, spec)])


def _is_union(t: ScSpecTypeDef, spec: Optional[ContractSpec]) -> bool:
    return spec is not None and isinstance(spec.types.get(t.name), UdtUnionSpec)


def _infer(v: Any) -> ScVal:
    if v is None:
        return ScVal.void()
    if isinstance(v, bool):
        return ScVal.boolean(v)
    if isinstance(v, int):
        if 0 <= v < (1 << 63):
            return ScVal.u63(v)
        if -(1 << 31) <= v < 0:
            return ScVal.i32(v)
        return ScVal.i64(v)
    if isinstance(v, str):
        if not is_valid_symbol(v):
            raise _Invalid(f"{v!r} is not a valid symbol")
        return ScVal.symbol(v)
    if isinstance(v, list):
        return ScVal.vec(_infer(x) for x in v)
    if isinstance(v, dict):
        return ScVal.map((_infer(str(key)), _infer(val)) for key, val in v.items())
    raise _Invalid(f"cannot infer a value for {v!r}")


def _as_int(v: Any) -> int:
    if isinstance(v, bool):
        raise _Invalid("expected an integer, got a boolean")
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v.strip(), 10)
        except ValueError:
            raise _Invalid(f"{v!r} is not an integer") from None
    raise _Invalid(f"expected an integer, got {type(v).__name__}")


def _as_str(v: Any) -> str:
    if not isinstance(v, str):
        raise _Invalid(f"expected a string, got {type(v).__name__}")
    return v


def _as_hex(v: Any) -> bytes:
    s = _as_str(v).strip()
    if s[:2] in ("0x", "0X"):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise _Invalid(f"{v!r} is not valid hex") from None


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def to_json(v: ScVal) -> Any:
    t = v.type
    if t in (ScValType.U63, ScValType.U32, ScValType.I32, ScValType.BITSET):
        return v.value
    if t == ScValType.STATIC:
        s = v.value
        if s == ScStatic.VOID:
            return None
        if s in (ScStatic.TRUE, ScStatic.FALSE):
            return s == ScStatic.TRUE
        return "LedgerKeyContractCode"
    if t == ScValType.SYMBOL:
        return v.value
    if t == ScValType.STATUS:
        return {"status": list(v.value)}
    o = v.value
    if o is None:
        return None
    if o.type in (ScObjectType.U64, ScObjectType.I64):
        return o.value
    if o.type == ScObjectType.BYTES:
        return o.value.hex()
    if o.type == ScObjectType.ACCOUNT_ID:
        return strkey.encode_account(o.value)
    if o.type == ScObjectType.VEC:
        return [to_json(x) for x in o.value]
    pairs = [(to_json(key), to_json(val)) for key, val in o.value]
    if all(isinstance(key, (str, int)) and not isinstance(key, bool) for key, _ in pairs):
        return {str(key): val for key, val in pairs}
    return [[key, val] for key, val in pairs]


def to_string(v: ScVal) -> str:
    """Render a call result: symbols and scalars bare, composites as JSON."""
    j = to_json(v)
    if isinstance(j, str):
        return j
    return json.dumps(j, separators=(",", ":"))


__all__ = ["from_string", "to_json", "to_string"]
