from __future__ import annotations

import pytest

from fakes import PASSPHRASE, FakeHost, FakeRpc
from hostcall.contract.ids import ZERO_SALT, contract_id_from_source_account
from hostcall.dispatch.token import TokenCreateRequest, TokenCreator
from hostcall.errors import ErrorCode, HostInvocationFailed, InvalidAssetCode, InvalidSalt
from hostcall.sandbox import snapshot
from hostcall.tx.encode import verify_envelope
from hostcall.types.ledger import ZERO_ACCOUNT_ID, LedgerKey
from hostcall.types.scval import ScVal
from hostcall.types.tx import HostFunction, TransactionEnvelope


class ExplodingHost:
    def __init__(self, storage):
        raise AssertionError("the host must not be constructed")


def test_long_symbol_rejected_before_any_io(sandbox_config, ledger_file):
    rpc = FakeRpc()
    req = TokenCreateRequest(name="Coin", symbol="ABCDEFGHIJKLM")
    with pytest.raises(InvalidAssetCode) as ei:
        TokenCreator(sandbox_config, host_factory=ExplodingHost).run(req)
    assert ei.value.code == ErrorCode.ASSET_CODE
    assert not ledger_file.exists()

    with pytest.raises(InvalidAssetCode):
        TokenCreator(sandbox_config, rpc=rpc).run(req)
    assert rpc.calls == []


def test_twelve_character_symbol_is_accepted(sandbox_config):
    result = TokenCreator(sandbox_config, host_factory=FakeHost).run(
        TokenCreateRequest(name="Coin", symbol="ABCDEFGHIJKL")
    )
    assert len(result.contract_id) == 64


@pytest.mark.parametrize("symbol", ["ÄÄÄÄÄÄÄ", "ÄBCDEFGHIJKL"])
def test_symbol_limit_counts_utf8_bytes(sandbox_config, ledger_file, symbol):
    with pytest.raises(InvalidAssetCode):
        TokenCreator(sandbox_config, host_factory=ExplodingHost).run(TokenCreateRequest(name="Coin", symbol=symbol))
    assert not ledger_file.exists()


def test_six_two_byte_characters_fit(sandbox_config):
    result = TokenCreator(sandbox_config, host_factory=FakeHost).run(TokenCreateRequest(name="Coin", symbol="ÄÄÄÄÄÄ"))
    assert len(result.contract_id) == 64


def test_bad_salt_rejected_before_any_io(fake_rpc, remote_config):
    with pytest.raises(InvalidSalt):
        TokenCreator(remote_config, rpc=fake_rpc).run(TokenCreateRequest(name="Coin", symbol="COIN", salt="xyz"))
    assert fake_rpc.calls == []


def test_sandbox_create_and_init(sandbox_config, ledger_file):
    result = TokenCreator(sandbox_config, host_factory=FakeHost).run(
        TokenCreateRequest(name="Coin", symbol="COIN", decimals=2)
    )
    expected = contract_id_from_source_account(ZERO_ACCOUNT_ID, ZERO_SALT)
    assert result.strategy == "sandbox"
    assert result.contract_id == expected.hex()

    snap = snapshot.read(ledger_file)
    assert snap.get(LedgerKey.contract_code(expected)) is not None
    admin = snap.get(LedgerKey.contract_data(expected, ScVal.symbol("Admin")))
    assert admin.data.val == ScVal.vec([ScVal.symbol("Account"), ScVal.account_id(ZERO_ACCOUNT_ID)])
    meta = snap.get(LedgerKey.contract_data(expected, ScVal.symbol("Metadata"))).data.val
    assert dict(meta.value.value)[ScVal.symbol("decimals")] == ScVal.u32(2)
    assert snap.ledger_info.sequence_number == 1


def test_sandbox_admin_is_deployer(sandbox_config):
    admin = b"\x07" * 32
    result = TokenCreator(sandbox_config, host_factory=FakeHost).run(
        TokenCreateRequest(name="Coin", symbol="COIN", admin=admin, salt="01" * 32)
    )
    assert result.contract_id == contract_id_from_source_account(admin, b"\x01" * 32).hex()


def test_sandbox_second_create_with_same_salt_fails_without_commit(sandbox_config, ledger_file):
    creator = TokenCreator(sandbox_config, host_factory=FakeHost)
    creator.run(TokenCreateRequest(name="Coin", symbol="COIN"))
    before = ledger_file.read_bytes()
    with pytest.raises(HostInvocationFailed):
        creator.run(TokenCreateRequest(name="Coin", symbol="COIN"))
    assert ledger_file.read_bytes() == before


def test_remote_create_then_init(remote_config, keypair):
    rpc = FakeRpc(sequence=10)
    salt = "02" * 32
    result = TokenCreator(remote_config, rpc=rpc).run(TokenCreateRequest(name="Coin", symbol="COIN", salt=salt))

    expected = contract_id_from_source_account(keypair.public_key, bytes.fromhex(salt))
    assert result.contract_id == expected.hex()
    assert rpc.methods() == ["getAccount", "sendTransaction", "sendTransaction"]
    assert len(result.tx_ids) == 2

    create, init = (TransactionEnvelope.from_xdr_base64(e) for e in rpc.sent)
    assert (create.tx.seq_num, init.tx.seq_num) == (11, 12)
    assert create.tx.operations[0].body.function == HostFunction.CREATE_TOKEN_CONTRACT_WITH_SOURCE_ACCOUNT
    init_params = init.tx.operations[0].body.parameters
    assert init_params[0] == ScVal.bytes_(expected)
    assert init_params[1] == ScVal.symbol("init")
    # administrator defaults to the signer
    assert init_params[2] == ScVal.vec([ScVal.symbol("Account"), ScVal.account_id(keypair.public_key)])
    for env in (create, init):
        assert verify_envelope(env, keypair.public_key, PASSPHRASE)


def test_remote_zero_salt_is_randomized(remote_config, keypair):
    rpc = FakeRpc()
    result = TokenCreator(remote_config, rpc=rpc).run(TokenCreateRequest(name="Coin", symbol="COIN"))
    assert result.contract_id != contract_id_from_source_account(keypair.public_key, ZERO_SALT).hex()
    create = TransactionEnvelope.from_xdr_base64(rpc.sent[0])
    salt = create.tx.operations[0].body.parameters[0].as_bytes()
    assert salt != ZERO_SALT
    assert result.contract_id == contract_id_from_source_account(keypair.public_key, salt).hex()


def test_remote_explicit_admin(remote_config, keypair):
    admin = b"\x08" * 32
    salt = "03" * 32
    rpc = FakeRpc()
    result = TokenCreator(remote_config, rpc=rpc).run(
        TokenCreateRequest(name="Coin", symbol="COIN", admin=admin, salt=salt)
    )
    # the signer deploys, so the id follows the signer even with another administrator
    assert result.contract_id == contract_id_from_source_account(keypair.public_key, bytes.fromhex(salt)).hex()
    assert result.contract_id != contract_id_from_source_account(admin, bytes.fromhex(salt)).hex()
    init = TransactionEnvelope.from_xdr_base64(rpc.sent[1])
    assert init.tx.operations[0].body.parameters[2] == ScVal.vec([ScVal.symbol("Account"), ScVal.account_id(admin)])
