"""
hostcall.dispatch.invoke: run one contract function, locally or remotely

Strategy is chosen by configuration: with an RPC URL the call is simulated,
signed and submitted; without one it executes against the sandbox ledger
file through a Host loaded at runtime.

Sandbox
-------
1. read the snapshot, optionally install `--wasm` bytes as the contract's
   code entry (persisted with the commit)
2. read the code back through the recording storage and marshal arguments
   against the spec embedded in it
3. execute in the next ledger (sequence + 1, timestamp + 5); the footprint
   falls out of the same execution
4. commit the merged entries; nothing is written if any earlier step fails

Remote
------
1. parse the signing key, fetch the account sequence N
2. take the code from `--wasm` or from `getContractData`, marshal arguments
3. simulate at N + 1 for the footprint, rebuild with it at N + 1, sign
4. `sendTransaction` and return its id; inclusion is not awaited
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from ..config import HostcallConfig
from ..contract.args import CallArgument, build_host_function_parameters
from ..contract.strval import to_string
from ..encoding.xdr import XdrError
from ..errors import (
    ContractFileError,
    ContractNotFound,
    HostUnavailable,
    InvalidSecretKey,
    RpcError,
    UnexpectedContractCodeDataType,
)
from ..footprint.recording import RecordingStorage
from ..footprint.resolver import LocalFootprintResolver, SimulationFootprintResolver
from ..logging import bind, get_logger
from ..rpc.http import JsonRpcCode, RpcClient
from ..sandbox import snapshot
from ..sandbox.host import CostReport, HostCall, HostFactory, load_host_factory
from ..tx.build import build_tx, invoke_op
from ..tx.encode import sign_transaction
from ..types.ledger import ZERO_ACCOUNT_ID, LedgerEntry, LedgerFootprint, LedgerKey
from ..types.scval import ScVal
from ..types.tx import HostFunction
from ..wallet.signer import Keypair
from .state import DispatchState, DispatchTracker

log = get_logger(__name__)


@dataclass
class InvokeRequest:
    contract_id: bytes
    function: str
    arguments: Sequence[CallArgument] = ()
    wasm: Optional[bytes] = None
    # sandbox only; defaults to the all-zero account
    account_id: Optional[bytes] = None
    cost: bool = False


@dataclass
class InvokeResult:
    strategy: str
    output: str
    result: Optional[ScVal] = None
    tx_id: Optional[str] = None
    footprint: LedgerFootprint = field(default_factory=LedgerFootprint)
    cost: Optional[CostReport] = None
    events: Tuple[Any, ...] = ()


def read_contract_file(path: Path | str) -> bytes:
    p = Path(path)
    try:
        return p.read_bytes()
    except OSError as e:
        raise ContractFileError(str(p), str(e), cause=e) from e


def code_entry(contract_id: bytes, wasm: bytes) -> LedgerEntry:
    return LedgerEntry.contract_data(contract_id, ScVal.ledger_key_contract_code(), ScVal.bytes_(wasm))


def code_from_value(val: ScVal) -> bytes:
    code = val.as_bytes()
    if code is None:
        raise UnexpectedContractCodeDataType(val.describe())
    return code


def host_factory_from(config: HostcallConfig) -> HostFactory:
    if not config.host:
        raise HostUnavailable("<unset>", "set HOSTCALL_HOST or pass --host to use the sandbox")
    return load_host_factory(config.host)


def keypair_from(config: HostcallConfig) -> Keypair:
    if not config.secret_key:
        raise InvalidSecretKey("no secret key configured (HOSTCALL_SECRET_KEY or --secret-key)")
    return Keypair.from_secret(config.secret_key)


class Invoker:
    """
    Dispatch an `InvokeRequest` through the sandbox or the RPC server.

    `host_factory` and `rpc` replace the collaborators that would otherwise be
    built from the configuration (the Host path and the RPC URL).
    """

    def __init__(
        self,
        config: HostcallConfig,
        *,
        host_factory: Optional[HostFactory] = None,
        rpc: Optional[Any] = None,
    ) -> None:
        self.config = config
        self._host_factory = host_factory
        self._rpc = rpc

    @property
    def strategy(self) -> str:
        return "remote" if self.config.is_remote or self._rpc is not None else "sandbox"

    def run(self, request: InvokeRequest) -> InvokeResult:
        tracker = DispatchTracker("invoke", self.strategy)
        with tracker.running():
            bind(contract_id=request.contract_id.hex(), function=request.function)
            if tracker.strategy == "remote":
                return self._run_remote(request, tracker)
            return self._run_sandbox(request, tracker)

    # ---- sandbox ----------------------------------------------------------

    def _run_sandbox(self, request: InvokeRequest, tracker: DispatchTracker) -> InvokeResult:
        tracker.enter(DispatchState.MARSHAL_ARGS)
        factory = self._host_factory or host_factory_from(self.config)
        snap = snapshot.read(self.config.ledger_file)
        entries = dict(snap.entries)
        code_key = LedgerKey.contract_code(request.contract_id)
        if request.wasm is not None:
            entries[code_key] = code_entry(request.contract_id, request.wasm)

        storage = RecordingStorage(entries)
        stored = storage.get(code_key)
        if stored is None:
            raise ContractNotFound(request.contract_id.hex())
        wasm = code_from_value(stored.data.val)
        params = build_host_function_parameters(request.contract_id, wasm, request.function, request.arguments)

        tracker.enter(DispatchState.RESOLVE_FOOTPRINT)
        ledger_info = snap.ledger_info.bump()
        resolver = LocalFootprintResolver(
            factory,
            storage,
            source_account=request.account_id or ZERO_ACCOUNT_ID,
            ledger_info=ledger_info,
        )
        execution = resolver.run([HostCall(HostFunction.INVOKE_CONTRACT, params)])
        footprint = execution.footprint

        tracker.enter(DispatchState.EXECUTE)
        result = execution.results[0]
        cost = execution.outcome.cost
        if request.cost:
            log.info("execution cost", extra={"cpu_insns": cost.cpu_insns, "mem_bytes": cost.mem_bytes})

        tracker.enter(DispatchState.COMMIT)
        snapshot.commit(entries, ledger_info, execution.changes, self.config.ledger_file)

        return InvokeResult(
            strategy="sandbox",
            output=to_string(result),
            result=result,
            footprint=footprint,
            cost=cost if request.cost else None,
            events=tuple(execution.outcome.events),
        )

    # ---- remote -----------------------------------------------------------

    def _run_remote(self, request: InvokeRequest, tracker: DispatchTracker) -> InvokeResult:
        if self._rpc is not None:
            return self._remote(request, tracker, self._rpc)
        with RpcClient(
            self.config.rpc_url,  # type: ignore[arg-type]
            timeout=self.config.request_timeout,
            headers=self.config.http_headers(),
        ) as rpc:
            return self._remote(request, tracker, rpc)

    def _remote(self, request: InvokeRequest, tracker: DispatchTracker, rpc: Any) -> InvokeResult:
        tracker.enter(DispatchState.MARSHAL_ARGS)
        keypair = keypair_from(self.config)
        account = rpc.get_account(keypair.address)
        sequence = account.sequence + 1

        wasm = request.wasm
        if wasm is None:
            wasm = self._fetch_code(rpc, request.contract_id)
        params = build_host_function_parameters(request.contract_id, wasm, request.function, request.arguments)

        tracker.enter(DispatchState.RESOLVE_FOOTPRINT)
        resolver = SimulationFootprintResolver(
            rpc, keypair, self.config.network_passphrase, sequence, fee=self.config.fee
        )
        footprint = resolver.resolve([HostCall(HostFunction.INVOKE_CONTRACT, params)])

        tracker.enter(DispatchState.EXECUTE)
        tx = build_tx(
            [invoke_op(HostFunction.INVOKE_CONTRACT, params, footprint)],
            sequence=sequence,
            fee=self.config.fee,
            source=keypair.public_key,
        )
        envelope = sign_transaction(keypair, tx, self.config.network_passphrase)

        tracker.enter(DispatchState.COMMIT)
        sent = rpc.send_transaction(envelope.to_xdr_base64())
        return InvokeResult(strategy="remote", output=sent.id, tx_id=sent.id, footprint=footprint)

    @staticmethod
    def _fetch_code(rpc: Any, contract_id: bytes) -> bytes:
        key = ScVal.ledger_key_contract_code().to_xdr_base64()
        raw = rpc.get_contract_data(contract_id.hex(), key)
        try:
            val = ScVal.from_xdr_base64(raw)
        except XdrError as e:
            raise RpcError(
                "getContractData", JsonRpcCode.INTERNAL_ERROR, f"cannot decode contract data: {e}", cause=e
            ) from e
        return code_from_value(val)


__all__ = [
    "InvokeRequest",
    "InvokeResult",
    "Invoker",
    "code_entry",
    "read_contract_file",
]
