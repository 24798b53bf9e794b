"""
hostcall.tx.build
=================

Builders for host-function operations and the transactions that carry them.

The builders return the frozen dataclasses from `hostcall.types.tx`. Feed the
transaction into `hostcall.tx.encode.sign_transaction` to obtain a signed
envelope, then submit it through `hostcall.rpc.http.RpcClient`.

Design notes
------------
- `invoke_op`: contract call; the footprint defaults to empty and is filled in
  after simulation (remote) or is irrelevant (sandbox).
- `create_token_op` / `init_token_op`: the two halves of token creation, each
  with the fixed footprint the token contract is known to touch.
- `build_tx`: no preconditions, no memo, ext v0. The caller owns sequence
  numbering; each transaction of one invocation uses the next number.

Examples
--------
    op = invoke_op(HostFunction.INVOKE_CONTRACT, params)
    tx = build_tx([op], sequence=seq + 1, fee=100, source=keypair.public_key)
    env = sign_transaction(keypair, tx, passphrase)
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from ..types.ledger import LedgerFootprint, LedgerKey
from ..types.scval import ScVal
from ..types.tx import MAX_OPS_PER_TX, HostFunction, InvokeHostFunctionOp, Operation, Transaction

DEFAULT_FEE = 100

# Contract-data keys written by the token contract's init function
TOKEN_ADMIN_KEY = ScVal.symbol("Admin")
TOKEN_METADATA_KEY = ScVal.symbol("Metadata")


def invoke_op(
    function: HostFunction,
    parameters: Sequence[ScVal],
    footprint: Optional[LedgerFootprint] = None,
) -> Operation:
    return Operation(InvokeHostFunctionOp(function, tuple(parameters), footprint or LedgerFootprint()))


def create_token_op(contract_id: bytes, salt: bytes) -> Operation:
    """Deploy the built-in token contract under the source account with *salt*."""
    footprint = LedgerFootprint.of(read_write=[LedgerKey.contract_code(contract_id)])
    return invoke_op(HostFunction.CREATE_TOKEN_CONTRACT_WITH_SOURCE_ACCOUNT, [ScVal.bytes_(salt)], footprint)


def init_token_op(contract_id: bytes, parameters: Sequence[ScVal]) -> Operation:
    footprint = LedgerFootprint.of(
        read_write=[
            LedgerKey.contract_data(contract_id, TOKEN_ADMIN_KEY),
            LedgerKey.contract_data(contract_id, TOKEN_METADATA_KEY),
        ]
    )
    return invoke_op(HostFunction.INVOKE_CONTRACT, parameters, footprint)


def token_init_parameters(
    contract_id: bytes,
    admin: bytes,
    *,
    name: str,
    symbol: str,
    decimals: int,
) -> Tuple[ScVal, ...]:
    """Parameters of `init(admin: Identifier, metadata: TokenMetadata)` on the token contract."""
    return (
        ScVal.bytes_(contract_id),
        ScVal.symbol("init"),
        ScVal.vec([ScVal.symbol("Account"), ScVal.account_id(admin)]),
        ScVal.map(
            {
                ScVal.symbol("decimals"): ScVal.u32(decimals),
                ScVal.symbol("name"): ScVal.bytes_(name.encode("utf-8")),
                ScVal.symbol("symbol"): ScVal.bytes_(symbol.encode("utf-8")),
            }
        ),
    )


def build_tx(
    operations: Iterable[Operation],
    *,
    sequence: int,
    fee: int = DEFAULT_FEE,
    source: bytes,
) -> Transaction:
    ops = tuple(operations)
    if not ops:
        raise ValueError("a transaction needs at least one operation")
    if len(ops) > MAX_OPS_PER_TX:
        raise ValueError(f"too many operations: {len(ops)} > {MAX_OPS_PER_TX}")
    if len(source) != 32:
        raise ValueError("source must be a 32-byte ed25519 public key")
    return Transaction(source_account=bytes(source), fee=int(fee), seq_num=int(sequence), operations=ops)


def with_footprint(tx: Transaction, footprint: LedgerFootprint) -> Transaction:
    """Rebuild *tx* with every operation carrying *footprint*."""
    ops = tuple(
        Operation(InvokeHostFunctionOp(op.body.function, op.body.parameters, footprint), op.source_account)
        for op in tx.operations
    )
    return Transaction(tx.source_account, tx.fee, tx.seq_num, ops)


__all__ = [
    "DEFAULT_FEE",
    "invoke_op",
    "create_token_op",
    "init_token_op",
    "token_init_parameters",
    "build_tx",
    "with_footprint",
]
