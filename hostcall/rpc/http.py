"""
HTTP JSON-RPC client (sync).

- httpx transport, one POST per call; no retries. Any transport, HTTP or
  JSON-RPC failure raises `RpcError` and ends the invocation.
- Typed helpers for the four methods the remote strategy consumes:
  getAccount, getContractData, simulateTransaction, sendTransaction.

Example:
    from hostcall.rpc.http import RpcClient
    with RpcClient("http://localhost:8000/soroban/rpc") as rpc:
        seq = rpc.get_account("G...").sequence
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import IntEnum
from itertools import count
from typing import Any, Dict, Iterator, Mapping, Optional

import httpx

from ..errors import RpcError, TransactionRejected
from ..logging import get_logger
from ..version import __version__

log = get_logger(__name__)


class JsonRpcCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # client-side: transport failed before a response arrived
    TRANSPORT_ERROR = -32098


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class AccountInfo:
    id: str
    sequence: int


@dataclass(frozen=True)
class SimulationResult:
    footprint: str
    cost: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SendResult:
    id: str
    status: str
    error: Any = None


@dataclass
class RpcClient:
    """Synchronous JSON-RPC 2.0 client over HTTP."""

    url: str
    timeout: float = 30.0
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.BaseTransport] = None
    _id_counter: Iterator[int] = field(default_factory=lambda: count(start=_now_ms()))
    _client: Any = field(init=False, default=None)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"hostcall-py/{__version__}",
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.Client(timeout=self.timeout, headers=merged_headers, transport=self.transport)

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # --- typed methods ---------------------------------------------------

    def get_account(self, address: str) -> AccountInfo:
        res = self._expect_dict("getAccount", self.request("getAccount", {"address": address}))
        try:
            return AccountInfo(id=str(res.get("id", address)), sequence=int(res["sequence"]))
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError("getAccount", JsonRpcCode.INTERNAL_ERROR, "malformed account response", rpc_data=res, cause=e) from e

    def get_contract_data(self, contract_id: str, key: str) -> str:
        """Return the base64 XDR value stored under (contract_id, key)."""
        res = self._expect_dict(
            "getContractData", self.request("getContractData", {"contract_id": contract_id, "key": key})
        )
        xdr = res.get("xdr")
        if not isinstance(xdr, str):
            raise RpcError("getContractData", JsonRpcCode.INTERNAL_ERROR, "response has no xdr field", rpc_data=res)
        return xdr

    def simulate_transaction(self, envelope_b64: str) -> SimulationResult:
        res = self._expect_dict("simulateTransaction", self.request("simulateTransaction", {"transaction": envelope_b64}))
        if res.get("error"):
            raise RpcError("simulateTransaction", JsonRpcCode.INTERNAL_ERROR, "simulation failed", rpc_data=res["error"])
        footprint = res.get("footprint")
        if not isinstance(footprint, str):
            raise RpcError("simulateTransaction", JsonRpcCode.INTERNAL_ERROR, "response has no footprint", rpc_data=res)
        return SimulationResult(footprint=footprint, cost=dict(res.get("cost") or {}))

    def send_transaction(self, envelope_b64: str) -> SendResult:
        """Submit a signed envelope. Does not poll for inclusion."""
        res = self._expect_dict("sendTransaction", self.request("sendTransaction", {"transaction": envelope_b64}))
        out = SendResult(id=str(res.get("id", "")), status=str(res.get("status", "")), error=res.get("error"))
        if out.error or out.status.lower() == "error":
            raise TransactionRejected(out.id, out.status, out.error)
        log.info("transaction submitted", extra={"tx_id": out.id, "status": out.status})
        return out

    # --- generic request -------------------------------------------------

    def request(self, method: str, params: Any = None) -> Any:
        """Perform a single JSON-RPC request and return `result` or raise RpcError."""
        payload = self._make_payload(method, params)
        log.debug("rpc request", extra={"method": method, "rpc_id": payload["id"]})
        return self._send_once(method, payload)

    def _make_payload(self, method: str, params: Any) -> Dict[str, Any]:
        if params is None:
            params = []
        elif isinstance(params, Mapping):
            params = dict(params)
        return {"jsonrpc": "2.0", "id": next(self._id_counter), "method": method, "params": params}

    def _send_once(self, method: str, payload: Dict[str, Any]) -> Any:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = self._client.post(self.url, content=body)
        except httpx.HTTPError as e:
            raise RpcError(method, JsonRpcCode.TRANSPORT_ERROR, f"network error: {e}", cause=e) from e
        try:
            resp = r.json()
        except ValueError as e:
            raise RpcError(
                method,
                JsonRpcCode.INTERNAL_ERROR,
                "non-JSON response from RPC",
                rpc_data=r.text[:256],
                http_status=r.status_code,
                cause=e,
            ) from e
        if not isinstance(resp, dict):
            raise RpcError(method, JsonRpcCode.INTERNAL_ERROR, "invalid JSON-RPC response type", http_status=r.status_code)
        if resp.get("error") is not None:
            err = resp["error"] if isinstance(resp["error"], dict) else {"message": str(resp["error"])}
            raise RpcError(
                method,
                int(err.get("code", JsonRpcCode.INTERNAL_ERROR)),
                str(err.get("message", "unknown error")),
                rpc_data=err.get("data"),
                http_status=r.status_code,
            )
        if r.status_code >= 400:
            raise RpcError(method, JsonRpcCode.INTERNAL_ERROR, f"HTTP {r.status_code}", http_status=r.status_code)
        if "result" not in resp:
            raise RpcError(method, JsonRpcCode.INTERNAL_ERROR, "malformed JSON-RPC response", rpc_data=resp)
        return resp["result"]

    @staticmethod
    def _expect_dict(method: str, result: Any) -> Dict[str, Any]:
        if not isinstance(result, dict):
            raise RpcError(method, JsonRpcCode.INTERNAL_ERROR, "expected an object result", rpc_data=result)
        return result


__all__ = ["RpcClient", "JsonRpcCode", "AccountInfo", "SimulationResult", "SendResult"]
