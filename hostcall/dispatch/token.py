"""
hostcall.dispatch.token: create and initialise a built-in token contract

The contract id is a pure function of (deployer, salt), so the `init` call
can be prepared before the token exists:

  sandbox: both host functions run in one execution against the ledger file;
           the administrator (default: the zero account) is also the deployer.
  remote:  two transactions from the signer, create at N + 1 then init at
           N + 2. An all-zero salt is replaced by a random one so repeated
           runs do not collide. If create lands and init fails the token is
           left uninitialised; that is reported as the init failure and not
           rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import HostcallConfig
from ..contract.ids import contract_id_from_source_account, parse_salt, resolve_salt
from ..errors import ExecutionError, InvalidAssetCode
from ..footprint.recording import RecordingStorage
from ..footprint.resolver import LocalFootprintResolver
from ..logging import bind, get_logger
from ..rpc.http import RpcClient
from ..sandbox import snapshot
from ..sandbox.host import HostCall, HostFactory
from ..tx.build import build_tx, create_token_op, init_token_op, token_init_parameters
from ..tx.encode import sign_transaction
from ..types.ledger import ZERO_ACCOUNT_ID
from ..types.scval import ScVal
from ..types.tx import HostFunction
from .invoke import host_factory_from, keypair_from
from .state import DispatchState, DispatchTracker

log = get_logger(__name__)

# measured in UTF-8 bytes
ASSET_CODE_MAX_LEN = 12
DEFAULT_DECIMALS = 7
DEFAULT_SALT_HEX = "0" * 64


@dataclass
class TokenCreateRequest:
    name: str
    symbol: str
    decimals: int = DEFAULT_DECIMALS
    # 64 hex characters
    salt: str = DEFAULT_SALT_HEX
    admin: Optional[bytes] = None


@dataclass
class TokenCreateResult:
    strategy: str
    contract_id: str
    tx_ids: Tuple[str, ...] = ()


def validate_request(request: TokenCreateRequest) -> bytes:
    """Check the salt and asset code; return the decoded salt."""
    salt = parse_salt(request.salt)
    if len(request.symbol.encode("utf-8")) > ASSET_CODE_MAX_LEN:
        raise InvalidAssetCode(request.symbol, ASSET_CODE_MAX_LEN)
    return salt


class TokenCreator:
    def __init__(
        self,
        config: HostcallConfig,
        *,
        host_factory: Optional[HostFactory] = None,
        rpc: Optional[object] = None,
    ) -> None:
        self.config = config
        self._host_factory = host_factory
        self._rpc = rpc

    @property
    def strategy(self) -> str:
        return "remote" if self.config.is_remote or self._rpc is not None else "sandbox"

    def run(self, request: TokenCreateRequest) -> TokenCreateResult:
        salt = validate_request(request)
        tracker = DispatchTracker("token", self.strategy)
        with tracker.running():
            if tracker.strategy == "remote":
                if self._rpc is not None:
                    return self._remote(request, salt, tracker, self._rpc)
                with RpcClient(
                    self.config.rpc_url,  # type: ignore[arg-type]
                    timeout=self.config.request_timeout,
                    headers=self.config.http_headers(),
                ) as rpc:
                    return self._remote(request, salt, tracker, rpc)
            return self._sandbox(request, salt, tracker)

    def _params(self, request: TokenCreateRequest, contract_id: bytes, admin: bytes) -> Tuple[ScVal, ...]:
        return token_init_parameters(
            contract_id, admin, name=request.name, symbol=request.symbol, decimals=request.decimals
        )

    def _sandbox(self, request: TokenCreateRequest, salt: bytes, tracker: DispatchTracker) -> TokenCreateResult:
        tracker.enter(DispatchState.MARSHAL_ARGS)
        factory = self._host_factory or host_factory_from(self.config)
        admin = request.admin or ZERO_ACCOUNT_ID
        contract_id = contract_id_from_source_account(admin, salt)
        bind(contract_id=contract_id.hex(), function="init")
        calls = [
            HostCall(HostFunction.CREATE_TOKEN_CONTRACT_WITH_SOURCE_ACCOUNT, (ScVal.bytes_(salt),)),
            HostCall(HostFunction.INVOKE_CONTRACT, self._params(request, contract_id, admin)),
        ]

        tracker.enter(DispatchState.RESOLVE_FOOTPRINT)
        snap = snapshot.read(self.config.ledger_file)
        ledger_info = snap.ledger_info.bump()
        resolver = LocalFootprintResolver(
            factory, RecordingStorage(snap.entries), source_account=admin, ledger_info=ledger_info
        )
        execution = resolver.run(calls)

        tracker.enter(DispatchState.EXECUTE)
        created = execution.results[0].as_bytes()
        if created is None or len(created) != len(contract_id):
            raise ExecutionError(
                "token creation did not return a contract id", result=execution.results[0].describe()
            )
        if created != contract_id:
            log.warning(
                "host returned a different token id than derived",
                extra={"returned": created.hex(), "derived": contract_id.hex()},
            )

        tracker.enter(DispatchState.COMMIT)
        snapshot.commit(snap.entries, ledger_info, execution.changes, self.config.ledger_file)
        return TokenCreateResult(strategy="sandbox", contract_id=created.hex())

    def _remote(self, request: TokenCreateRequest, salt: bytes, tracker: DispatchTracker, rpc) -> TokenCreateResult:
        tracker.enter(DispatchState.MARSHAL_ARGS)
        keypair = keypair_from(self.config)
        salt = resolve_salt(salt, randomize=True)
        admin = request.admin or keypair.public_key
        contract_id = contract_id_from_source_account(keypair.public_key, salt)
        bind(contract_id=contract_id.hex(), function="init")
        account = rpc.get_account(keypair.address)
        sequence = account.sequence

        # footprints of both operations are fixed by the token contract layout
        tracker.enter(DispatchState.RESOLVE_FOOTPRINT)
        create = create_token_op(contract_id, salt)
        init = init_token_op(contract_id, self._params(request, contract_id, admin))

        tracker.enter(DispatchState.EXECUTE)
        passphrase = self.config.network_passphrase
        fee = self.config.fee
        create_env = sign_transaction(
            keypair, build_tx([create], sequence=sequence + 1, fee=fee, source=keypair.public_key), passphrase
        )
        init_env = sign_transaction(
            keypair, build_tx([init], sequence=sequence + 2, fee=fee, source=keypair.public_key), passphrase
        )

        tracker.enter(DispatchState.COMMIT)
        created = rpc.send_transaction(create_env.to_xdr_base64())
        initialised = rpc.send_transaction(init_env.to_xdr_base64())
        return TokenCreateResult(strategy="remote", contract_id=contract_id.hex(), tx_ids=(created.id, initialised.id))


__all__ = [
    "ASSET_CODE_MAX_LEN",
    "DEFAULT_DECIMALS",
    "DEFAULT_SALT_HEX",
    "TokenCreateRequest",
    "TokenCreateResult",
    "TokenCreator",
    "validate_request",
]
