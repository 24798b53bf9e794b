from __future__ import annotations

import pytest

from fakes import PASSPHRASE, FakeRpc, demo_wasm
from hostcall.config import HostcallConfig
from hostcall.contract.args import TypedArg, XdrArg
from hostcall.dispatch.invoke import InvokeRequest, Invoker
from hostcall.errors import (
    InvalidSecretKey,
    UnexpectedArgumentCount,
    UnexpectedContractCodeDataType,
)
from hostcall.tx.encode import verify_envelope
from hostcall.types.ledger import LedgerFootprint, LedgerKey
from hostcall.types.scval import ScVal
from hostcall.types.tx import HostFunction, TransactionEnvelope


def _footprint(contract_id: bytes) -> LedgerFootprint:
    return LedgerFootprint.of(
        read_only=[LedgerKey.contract_code(contract_id)],
        read_write=[LedgerKey.contract_data(contract_id, ScVal.symbol("COUNTER"))],
    )


def test_remote_invoke_simulates_signs_and_sends(remote_config, keypair, contract_id, wasm):
    rpc = FakeRpc(sequence=41, footprint=_footprint(contract_id))
    req = InvokeRequest(contract_id, "add", [TypedArg("1", 0), XdrArg(ScVal.u32(2).to_xdr_base64(), 1)], wasm=wasm)
    result = Invoker(remote_config, rpc=rpc).run(req)

    assert rpc.methods() == ["getAccount", "simulateTransaction", "sendTransaction"]
    assert rpc.calls[0] == ("getAccount", keypair.address)
    assert result.strategy == "remote"
    assert result.tx_id == result.output == f"{1:064x}"

    simulated = TransactionEnvelope.from_xdr_base64(rpc.calls[1][1])
    sent = TransactionEnvelope.from_xdr_base64(rpc.sent[0])
    assert simulated.tx.seq_num == sent.tx.seq_num == 42
    assert simulated.tx.operations[0].body.footprint.is_empty
    body = sent.tx.operations[0].body
    assert body.function == HostFunction.INVOKE_CONTRACT
    assert body.parameters == (ScVal.bytes_(contract_id), ScVal.symbol("add"), ScVal.u32(1), ScVal.u32(2))
    assert body.footprint == _footprint(contract_id)
    assert sent.tx.source_account == keypair.public_key
    assert sent.tx.fee == 100
    assert verify_envelope(sent, keypair.public_key, PASSPHRASE)


def test_remote_invoke_fetches_code_when_no_wasm(remote_config, contract_id):
    rpc = FakeRpc(code=demo_wasm())
    Invoker(remote_config, rpc=rpc).run(InvokeRequest(contract_id, "incr"))

    method, (cid_hex, key_b64) = rpc.calls[1]
    assert method == "getContractData"
    assert cid_hex == contract_id.hex()
    assert ScVal.from_xdr_base64(key_b64) == ScVal.ledger_key_contract_code()


def test_remote_code_must_be_bytes(remote_config, contract_id):
    class SymbolCodeRpc(FakeRpc):
        def get_contract_data(self, contract_id, key):
            return ScVal.symbol("nope").to_xdr_base64()

    with pytest.raises(UnexpectedContractCodeDataType):
        Invoker(remote_config, rpc=SymbolCodeRpc()).run(InvokeRequest(contract_id, "incr"))


def test_count_mismatch_fails_before_simulation(remote_config, contract_id, wasm):
    rpc = FakeRpc()
    with pytest.raises(UnexpectedArgumentCount):
        Invoker(remote_config, rpc=rpc).run(InvokeRequest(contract_id, "add", [TypedArg("1", 0)], wasm=wasm))
    assert "simulateTransaction" not in rpc.methods()
    assert rpc.sent == []


def test_remote_requires_a_secret_key(contract_id, wasm):
    config = HostcallConfig(rpc_url="http://localhost:8000/rpc")
    rpc = FakeRpc()
    with pytest.raises(InvalidSecretKey):
        Invoker(config, rpc=rpc).run(InvokeRequest(contract_id, "incr", wasm=wasm))
    assert rpc.calls == []


def test_custom_fee_is_used(keypair, contract_id, wasm):
    config = HostcallConfig(
        rpc_url="http://localhost:8000/rpc", secret_key=keypair.secret(), network_passphrase=PASSPHRASE, fee=250
    )
    rpc = FakeRpc()
    Invoker(config, rpc=rpc).run(InvokeRequest(contract_id, "incr", wasm=wasm))
    assert TransactionEnvelope.from_xdr_base64(rpc.sent[0]).tx.fee == 250
