import hashlib

import pytest

from hostcall.errors import InvalidSecretKey
from hostcall.tx.build import build_tx, create_token_op, init_token_op, invoke_op, token_init_parameters, with_footprint
from hostcall.tx.encode import sign_transaction, signature_payload, verify_envelope
from hostcall.types.ledger import LedgerFootprint, LedgerKey
from hostcall.types.scval import ScVal
from hostcall.types.tx import HostFunction, Transaction, TransactionEnvelope
from hostcall.wallet.signer import Keypair, verify_signature

CID = b"\x33" * 32


def _tx(keypair: Keypair, seq: int = 10) -> Transaction:
    op = invoke_op(HostFunction.INVOKE_CONTRACT, [ScVal.bytes_(CID), ScVal.symbol("f")])
    return build_tx([op], sequence=seq, source=keypair.public_key)


def test_keypair_secret_roundtrip(keypair):
    again = Keypair.from_secret(keypair.secret())
    assert again.public_key == keypair.public_key
    assert again.address == keypair.address
    assert keypair.address.startswith("G")
    assert keypair.hint == keypair.public_key[-4:]


@pytest.mark.parametrize("secret", ["", "SABC", "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"])
def test_invalid_secret_key(secret):
    with pytest.raises(InvalidSecretKey) as ei:
        Keypair.from_secret(secret)
    assert ei.value.data == {}


def test_repr_does_not_leak_secret(keypair):
    assert keypair.secret() not in repr(keypair)


def test_signature_payload_layout(keypair):
    tx = _tx(keypair)
    network_id = hashlib.sha256(b"pass").digest()
    expected = hashlib.sha256(network_id + (2).to_bytes(4, "big") + tx.to_xdr()).digest()
    assert signature_payload(tx, "pass") == expected


def test_two_signatures_of_same_payload_both_verify(keypair):
    tx = _tx(keypair)
    first = sign_transaction(keypair, tx, "pass")
    second = sign_transaction(keypair, tx, "pass")
    payload = signature_payload(tx, "pass")
    for env in (first, second):
        assert verify_signature(keypair.public_key, payload, env.signatures[0].signature)
        assert verify_envelope(env, keypair.public_key, "pass")

    both = TransactionEnvelope(tx, first.signatures + second.signatures)
    assert verify_envelope(both, keypair.public_key, "pass")


def test_wrong_passphrase_or_key_fails(keypair):
    env = sign_transaction(keypair, _tx(keypair), "pass")
    assert not verify_envelope(env, keypair.public_key, "other network")
    other = Keypair.from_seed(b"\x09" * 32)
    assert not verify_envelope(env, other.public_key, "pass")
    assert not verify_envelope(TransactionEnvelope(env.tx), keypair.public_key, "pass")


def test_envelope_roundtrip(keypair):
    env = sign_transaction(keypair, _tx(keypair, seq=99), "pass")
    decoded = TransactionEnvelope.from_xdr_base64(env.to_xdr_base64())
    assert decoded == env
    assert decoded.tx.seq_num == 99
    assert decoded.tx.fee == 100


def test_with_footprint_replaces_every_operation_footprint(keypair):
    fp = LedgerFootprint.of(read_only=[LedgerKey.contract_code(CID)])
    tx = with_footprint(_tx(keypair), fp)
    assert all(op.body.footprint == fp for op in tx.operations)


def test_build_tx_validation(keypair):
    with pytest.raises(ValueError):
        build_tx([], sequence=1, source=keypair.public_key)
    with pytest.raises(ValueError):
        build_tx([invoke_op(HostFunction.INVOKE_CONTRACT, [])], sequence=1, source=b"short")


def test_token_operations_have_fixed_footprints():
    salt = b"\x01" * 32
    create = create_token_op(CID, salt)
    assert create.body.function == HostFunction.CREATE_TOKEN_CONTRACT_WITH_SOURCE_ACCOUNT
    assert create.body.parameters == (ScVal.bytes_(salt),)
    assert create.body.footprint.read_write == frozenset({LedgerKey.contract_code(CID)})

    admin = b"\x02" * 32
    params = token_init_parameters(CID, admin, name="Coin", symbol="COIN", decimals=7)
    init = init_token_op(CID, params)
    assert params[1] == ScVal.symbol("init")
    assert params[2] == ScVal.vec([ScVal.symbol("Account"), ScVal.account_id(admin)])
    assert {k.key for k in init.body.footprint.read_write} == {ScVal.symbol("Admin"), ScVal.symbol("Metadata")}
