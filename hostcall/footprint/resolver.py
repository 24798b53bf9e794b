"""
Footprint resolution
====================

A footprint is the set of ledger keys a transaction may read (read-only) and
read/write. Two interchangeable strategies produce the same `LedgerFootprint`:

- `LocalFootprintResolver`: runs the calls for real through the Host over a
  `RecordingStorage`. The footprint is exact for the sandbox ledger at that
  moment, and `run` returns the execution (results, post-call state, cost,
  events) so the sandbox can commit it without re-running anything.
- `SimulationFootprintResolver`: signs an empty-footprint transaction, asks
  the RPC server to simulate it and adopts the footprint it returns. The
  server's ledger can move before the real submission lands; a stale
  footprint is not detected here and surfaces as a rejected submission.

Footprints compare by set equality; key order carries no meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple

from ..encoding.xdr import XdrError
from ..errors import HostcallError, HostInvocationFailed, RpcError
from ..logging import get_logger
from ..rpc.http import JsonRpcCode
from ..sandbox.host import HostCall, HostFactory, HostOutcome
from ..tx.build import DEFAULT_FEE, build_tx, invoke_op
from ..tx.encode import sign_transaction
from ..types.ledger import LedgerEntry, LedgerFootprint, LedgerInfo, LedgerKey
from ..types.scval import ScVal
from ..types.tx import HostFunction
from ..wallet.signer import Keypair
from .recording import RecordingStorage

log = get_logger(__name__)


class FootprintResolver(Protocol):
    def resolve(self, calls: Sequence[HostCall]) -> LedgerFootprint: ...


class _SimulationRpc(Protocol):
    def simulate_transaction(self, envelope_b64: str) -> Any: ...


@dataclass(frozen=True)
class LocalExecution:
    results: Tuple[ScVal, ...]
    footprint: LedgerFootprint
    changes: Dict[LedgerKey, Optional[LedgerEntry]]
    outcome: HostOutcome


def describe_call(call: HostCall) -> str:
    """Name used in logs and errors: the invoked function symbol, or the host function kind."""
    if call.function == HostFunction.INVOKE_CONTRACT and len(call.parameters) > 1:
        sym = call.parameters[1]
        if isinstance(sym.value, str):
            return sym.value
    return call.function.name.lower()


def _host_step(name: str, fn: Callable[..., Any], *args: Any) -> Any:
    try:
        return fn(*args)
    except HostcallError:
        raise
    except Exception as e:  # the Host is opaque; any failure it raises is an execution failure
        raise HostInvocationFailed(name, getattr(e, "status", None) or str(e), cause=e) from e


class LocalFootprintResolver:
    def __init__(
        self,
        host_factory: HostFactory,
        storage: RecordingStorage,
        *,
        source_account: bytes,
        ledger_info: LedgerInfo,
    ) -> None:
        self._factory = host_factory
        self.storage = storage
        self.source_account = source_account
        self.ledger_info = ledger_info

    def run(self, calls: Sequence[HostCall]) -> LocalExecution:
        """Execute `calls` in one Host session and return everything the sandbox commits."""
        host = self._factory(self.storage)
        host.set_source_account(self.source_account)
        host.set_ledger_info(self.ledger_info)

        results = []
        for call in calls:
            results.append(_host_step(describe_call(call), host.invoke_function, call.function, call.parameters))
        outcome = _host_step("finish", host.finish)

        footprint = self.storage.footprint()
        log.debug(
            "local footprint recorded",
            extra={"read_only": len(footprint.read_only), "read_write": len(footprint.read_write)},
        )
        return LocalExecution(tuple(results), footprint, self.storage.changes, outcome)

    def resolve(self, calls: Sequence[HostCall]) -> LedgerFootprint:
        return self.run(calls).footprint


@dataclass
class SimulationFootprintResolver:
    rpc: _SimulationRpc
    keypair: Keypair
    passphrase: str
    sequence: int
    fee: int = DEFAULT_FEE
    cost: Dict[str, Any] = field(default_factory=dict)

    def resolve(self, calls: Sequence[HostCall]) -> LedgerFootprint:
        ops = [invoke_op(c.function, c.parameters) for c in calls]
        tx = build_tx(ops, sequence=self.sequence, fee=self.fee, source=self.keypair.public_key)
        envelope = sign_transaction(self.keypair, tx, self.passphrase)
        sim = self.rpc.simulate_transaction(envelope.to_xdr_base64())
        try:
            footprint = LedgerFootprint.from_xdr_base64(sim.footprint)
        except XdrError as e:
            raise RpcError(
                "simulateTransaction", JsonRpcCode.INTERNAL_ERROR, f"cannot decode footprint: {e}", cause=e
            ) from e
        self.cost = dict(sim.cost)
        log.debug(
            "simulated footprint",
            extra={"read_only": len(footprint.read_only), "read_write": len(footprint.read_write)},
        )
        return footprint


__all__ = [
    "FootprintResolver",
    "LocalExecution",
    "LocalFootprintResolver",
    "SimulationFootprintResolver",
    "describe_call",
]
