"""
hostcall.errors
---------------

A single error tree for argument marshaling, contract identifiers, footprint
resolution, transaction signing and both execution strategies.

Design goals
------------
- One root `HostcallError` carrying a machine-stable `code`, a human `message`
  and JSON-safe `data` (offending argument, counts, file path, RPC code).
- Seven categories the CLI can render uniformly: argument, spec, identifier,
  protocol limit, execution, storage and network.
- No retry hints. Every failure is terminal for the invocation that raised it.

Only stdlib is used here so every other module can import it freely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional


class ErrorCode(str, Enum):
    # Arguments
    ARGUMENT = "ARG/INVALID"
    ARG_COUNT = "ARG/UNEXPECTED_COUNT"
    ARG_PARSE = "ARG/PARSE"
    ARG_XDR_PARSE = "ARG/XDR_PARSE"
    ASSET_CODE = "ARG/INVALID_ASSET_CODE"

    # Contract spec
    SPEC = "SPEC/INVALID"
    FUNCTION_NOT_FOUND = "SPEC/FUNCTION_NOT_FOUND"
    CODE_DATA_TYPE = "SPEC/UNEXPECTED_CODE_DATA_TYPE"
    CONTRACT_NOT_FOUND = "SPEC/CONTRACT_NOT_FOUND"

    # Identifiers
    IDENTIFIER = "ID/INVALID"
    CONTRACT_ID = "ID/CONTRACT_ID"
    SALT = "ID/SALT"
    SECRET_KEY = "ID/SECRET_KEY"
    ACCOUNT_ID = "ID/ACCOUNT_ID"

    # Protocol limits
    LIMIT = "LIMIT/EXCEEDED"
    FUNCTION_NAME = "LIMIT/FUNCTION_NAME_TOO_LONG"
    MAX_ARGUMENTS = "LIMIT/MAX_ARGUMENTS"

    # Execution
    EXECUTION = "EXEC/FAILED"
    HOST_UNAVAILABLE = "EXEC/HOST_UNAVAILABLE"

    # Storage
    STORAGE = "STORAGE/FAILED"
    SNAPSHOT_READ = "STORAGE/SNAPSHOT_READ"
    SNAPSHOT_COMMIT = "STORAGE/SNAPSHOT_COMMIT"
    CONTRACT_FILE = "STORAGE/CONTRACT_FILE"

    # Network
    NETWORK = "NET/FAILED"
    RPC = "NET/RPC"
    TX_REJECTED = "NET/TX_REJECTED"


@dataclass(eq=False)
class HostcallError(Exception):
    """
    Root error for hostcall.

    Attributes
    ----------
    code: str
        Machine-stable error code (see ErrorCode).
    message: str
        Human hint; never includes key material.
    data: dict
        JSON-serializable context for rendering.
    cause: Optional[BaseException]
        Wrapped original exception, if any.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(f"{_code_str(self.code)}: {self.message}")
        if self.cause is not None:
            self.__cause__ = self.cause

    @property
    def category(self) -> str:
        return _code_str(self.code).split("/", 1)[0]

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "code": _code_str(self.code),
            "message": self.message,
            "data": _jsonmap(self.data),
        }
        if include_cause and self.cause is not None:
            out["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return out

    def __str__(self) -> str:
        if not self.data:
            return self.message
        preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
        return f"{self.message} [{preview}]"


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class ArgumentError(HostcallError):
    def __init__(self, message="invalid argument", *, code: str = ErrorCode.ARGUMENT, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


class SpecError(HostcallError):
    def __init__(self, message="invalid contract spec", *, code: str = ErrorCode.SPEC, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


class IdentifierError(HostcallError):
    def __init__(self, message="invalid identifier", *, code: str = ErrorCode.IDENTIFIER, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


class ProtocolLimitError(HostcallError):
    def __init__(self, message="protocol limit exceeded", *, code: str = ErrorCode.LIMIT, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


class ExecutionError(HostcallError):
    def __init__(self, message="host invocation failed", *, code: str = ErrorCode.EXECUTION, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


class StorageError(HostcallError):
    def __init__(self, message="storage failure", *, code: str = ErrorCode.STORAGE, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


class NetworkError(HostcallError):
    def __init__(self, message="network error", *, code: str = ErrorCode.NETWORK, cause=None, **data: Any) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data), cause=cause)


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class UnexpectedArgumentCount(ArgumentError):
    def __init__(self, provided: int, expected: int, function: str) -> None:
        super().__init__(
            f"function {function!r} takes {expected} argument(s), {provided} provided",
            code=ErrorCode.ARG_COUNT,
            provided=provided,
            expected=expected,
            function=function,
        )
        self.provided = provided
        self.expected = expected
        self.function = function


class ArgumentParseError(ArgumentError):
    def __init__(self, arg: str, type_name: str, reason: str = "") -> None:
        msg = f"cannot parse argument {arg!r} as {type_name}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, code=ErrorCode.ARG_PARSE, arg=arg, type=type_name)
        self.arg = arg
        self.type_name = type_name


class XdrArgumentParseError(ArgumentError):
    def __init__(self, arg: str, reason: str = "") -> None:
        msg = f"cannot parse XDR argument {arg!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, code=ErrorCode.ARG_XDR_PARSE, arg=arg)
        self.arg = arg


class InvalidAssetCode(ArgumentError):
    def __init__(self, symbol: str, limit: int = 12) -> None:
        super().__init__(
            f"asset code {symbol!r} is longer than {limit} bytes",
            code=ErrorCode.ASSET_CODE,
            symbol=symbol,
            limit=limit,
        )
        self.symbol = symbol


# ---------------------------------------------------------------------------
# Spec
# ---------------------------------------------------------------------------


class FunctionNotFound(SpecError):
    def __init__(self, function: str, available: Iterable[str] = ()) -> None:
        super().__init__(
            f"function {function!r} was not found in the contract spec",
            code=ErrorCode.FUNCTION_NOT_FOUND,
            function=function,
            available=sorted(available),
        )
        self.function = function


class MalformedSpec(SpecError):
    def __init__(self, reason: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"cannot parse contract spec: {reason}", cause=cause, reason=reason)


class UnexpectedContractCodeDataType(SpecError):
    def __init__(self, found: str) -> None:
        super().__init__(
            f"contract code entry holds {found}, expected bytes",
            code=ErrorCode.CODE_DATA_TYPE,
            found=found,
        )


class ContractNotFound(SpecError):
    def __init__(self, contract_id: str) -> None:
        super().__init__(
            f"no contract code stored for {contract_id}",
            code=ErrorCode.CONTRACT_NOT_FOUND,
            contract_id=contract_id,
        )


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class InvalidContractId(IdentifierError):
    def __init__(self, value: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            "contract id must be 32 bytes of hex", code=ErrorCode.CONTRACT_ID, cause=cause, contract_id=value
        )


class InvalidSalt(IdentifierError):
    def __init__(self, value: str, cause: Optional[BaseException] = None) -> None:
        super().__init__("salt must be 32 bytes of hex", code=ErrorCode.SALT, cause=cause, salt=value)


class InvalidSecretKey(IdentifierError):
    def __init__(self, reason: str = "", cause: Optional[BaseException] = None) -> None:
        msg = "cannot parse secret key"
        if reason:
            msg += f": {reason}"
        # the offending value is deliberately not echoed
        super().__init__(msg, code=ErrorCode.SECRET_KEY, cause=cause)


class InvalidAccountId(IdentifierError):
    def __init__(self, value: str, reason: str = "", cause: Optional[BaseException] = None) -> None:
        msg = "cannot parse account id"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, code=ErrorCode.ACCOUNT_ID, cause=cause, account_id=value)


# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------


class FunctionNameTooLong(ProtocolLimitError):
    def __init__(self, function: str, limit: int) -> None:
        super().__init__(
            f"function name {function!r} is not a valid symbol of at most {limit} characters",
            code=ErrorCode.FUNCTION_NAME,
            function=function,
            limit=limit,
        )
        self.function = function


class MaxArgumentsReached(ProtocolLimitError):
    def __init__(self, current: int, maximum: int) -> None:
        super().__init__(
            f"too many host function parameters: {current} > {maximum}",
            code=ErrorCode.MAX_ARGUMENTS,
            current=current,
            maximum=maximum,
        )
        self.current = current
        self.maximum = maximum


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class HostUnavailable(ExecutionError):
    def __init__(self, target: str, reason: str = "", cause: Optional[BaseException] = None) -> None:
        msg = f"host factory {target!r} is not available"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, code=ErrorCode.HOST_UNAVAILABLE, cause=cause, target=target)


class HostInvocationFailed(ExecutionError):
    def __init__(self, function: str, status: Any, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"host invocation of {function!r} failed: {status}", cause=cause, function=function, status=status)
        self.status = status


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class SnapshotReadError(StorageError):
    def __init__(self, filepath: Any, reason: str = "", cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"cannot read ledger file {filepath}" + (f": {reason}" if reason else ""),
            code=ErrorCode.SNAPSHOT_READ,
            cause=cause,
            filepath=filepath,
        )
        self.filepath = filepath


class SnapshotCommitError(StorageError):
    def __init__(self, filepath: Any, reason: str = "", cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"cannot commit ledger file {filepath}" + (f": {reason}" if reason else ""),
            code=ErrorCode.SNAPSHOT_COMMIT,
            cause=cause,
            filepath=filepath,
        )
        self.filepath = filepath


class ContractFileError(StorageError):
    def __init__(self, filepath: Any, reason: str = "", cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"cannot read contract file {filepath}" + (f": {reason}" if reason else ""),
            code=ErrorCode.CONTRACT_FILE,
            cause=cause,
            filepath=filepath,
        )
        self.filepath = filepath


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


class RpcError(NetworkError):
    """JSON-RPC level failure (transport, HTTP status or server error object)."""

    def __init__(
        self,
        method: str,
        rpc_code: int,
        message: str,
        *,
        rpc_data: Any = None,
        http_status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            f"{method} failed: {message}",
            code=ErrorCode.RPC,
            cause=cause,
            method=method,
            rpc_code=rpc_code,
            rpc_data=rpc_data,
            http_status=http_status,
        )
        self.method = method
        self.rpc_code = rpc_code
        self.http_status = http_status


class TransactionRejected(NetworkError):
    def __init__(self, tx_id: str, status: str, error: Any = None) -> None:
        super().__init__(
            f"transaction {tx_id} was rejected with status {status!r}",
            code=ErrorCode.TX_REJECTED,
            tx_id=tx_id,
            status=status,
            error=error,
        )
        self.status = status


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _code_str(code: Any) -> str:
    return code.value if isinstance(code, Enum) else str(code)


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (list, tuple)):
        return [_coerce_json(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _coerce_json(x) for k, x in v.items()}
    if isinstance(v, (bytes, bytearray)):
        return bytes(v).hex()
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "..."


__all__ = [
    "ErrorCode",
    "HostcallError",
    "ArgumentError",
    "SpecError",
    "IdentifierError",
    "ProtocolLimitError",
    "ExecutionError",
    "StorageError",
    "NetworkError",
    "UnexpectedArgumentCount",
    "ArgumentParseError",
    "XdrArgumentParseError",
    "InvalidAssetCode",
    "FunctionNotFound",
    "MalformedSpec",
    "UnexpectedContractCodeDataType",
    "ContractNotFound",
    "InvalidContractId",
    "InvalidSalt",
    "InvalidSecretKey",
    "InvalidAccountId",
    "FunctionNameTooLong",
    "MaxArgumentsReached",
    "HostUnavailable",
    "HostInvocationFailed",
    "SnapshotReadError",
    "SnapshotCommitError",
    "ContractFileError",
    "RpcError",
    "TransactionRejected",
]
