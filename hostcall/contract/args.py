"""
Argument marshaling
===================

Turns the positional arguments a caller supplied on the command line into the
parameter vector of an `InvokeContract` host function:

    [Bytes(contract_id), Symbol(function), arg0, arg1, ...]

Arguments come from two families, typed text (`--arg`) and raw base64 XDR
(`--arg-xdr`). Each carries the position it had on the command line so the
two families can be merged back into declaration order.

Design notes
------------
- Validation order is fixed: spec lookup, merge, count check, per-argument
  parsing, function-name symbol, total length. A count mismatch is therefore
  reported before any argument is parsed.
- XDR arguments are trusted: they are decoded but not checked against the
  declared parameter type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..encoding.xdr import XdrError
from ..errors import (
    FunctionNameTooLong,
    FunctionNotFound,
    MaxArgumentsReached,
    UnexpectedArgumentCount,
    XdrArgumentParseError,
)
from ..logging import get_logger
from ..types.scval import SCSYMBOL_LIMIT, SCVAL_LIMIT, ScVal, is_valid_symbol
from ..types.spec import ContractSpec, FunctionSpec
from . import strval
from .wasm import read_contract_spec

log = get_logger(__name__)

SCVEC_MAX_LEN = SCVAL_LIMIT


@dataclass(frozen=True)
class TypedArg:
    """Text argument parsed according to the declared parameter type."""

    text: str
    position: int


@dataclass(frozen=True)
class XdrArg:
    """Base64 XDR `ScVal`, used verbatim."""

    base64: str
    position: int


CallArgument = Union[TypedArg, XdrArg]


def merge_arguments(arguments: Iterable[CallArgument]) -> List[CallArgument]:
    """Order both argument families by their original command-line position."""
    return sorted(arguments, key=lambda a: a.position)


def find_function(spec: ContractSpec, function: str) -> FunctionSpec:
    fn = spec.function(function)
    if fn is None:
        raise FunctionNotFound(function, spec.functions.keys())
    return fn


def marshal_arguments(
    fn: FunctionSpec,
    arguments: Iterable[CallArgument],
    *,
    spec: Optional[ContractSpec] = None,
) -> Tuple[ScVal, ...]:
    merged = merge_arguments(arguments)
    if len(merged) != len(fn.inputs):
        raise UnexpectedArgumentCount(provided=len(merged), expected=len(fn.inputs), function=fn.name)

    out: List[ScVal] = []
    for arg, param in zip(merged, fn.inputs):
        if isinstance(arg, XdrArg):
            try:
                out.append(ScVal.from_xdr_base64(arg.base64))
            except XdrError as e:
                raise XdrArgumentParseError(arg.base64, str(e)) from e
        else:
            out.append(strval.from_string(arg.text, param.type, spec))
    return tuple(out)


def host_function_parameters(contract_id: bytes, function: str, args: Sequence[ScVal]) -> Tuple[ScVal, ...]:
    """Prefix call arguments with the contract id and function symbol."""
    if not is_valid_symbol(function):
        raise FunctionNameTooLong(function, SCSYMBOL_LIMIT)
    params = (ScVal.bytes_(contract_id), ScVal.symbol(function), *args)
    if len(params) > SCVEC_MAX_LEN:
        raise MaxArgumentsReached(current=len(params), maximum=SCVEC_MAX_LEN)
    return params


def build_host_function_parameters(
    contract_id: bytes,
    wasm: bytes,
    function: str,
    arguments: Iterable[CallArgument],
) -> Tuple[ScVal, ...]:
    spec = read_contract_spec(wasm)
    fn = find_function(spec, function)
    args = marshal_arguments(fn, arguments, spec=spec)
    params = host_function_parameters(contract_id, function, args)
    log.debug("marshaled arguments", extra={"function": function, "count": len(args)})
    return params


__all__ = [
    "SCVEC_MAX_LEN",
    "TypedArg",
    "XdrArg",
    "CallArgument",
    "merge_arguments",
    "find_function",
    "marshal_arguments",
    "host_function_parameters",
    "build_host_function_parameters",
]
