import hashlib

import pytest

from hostcall.contract.ids import (
    ZERO_SALT,
    contract_id_from_source_account,
    parse_contract_id,
    parse_salt,
    resolve_salt,
)
from hostcall.errors import ErrorCode, InvalidContractId, InvalidSalt
from hostcall.types.ledger import ZERO_ACCOUNT_ID


def _preimage(account: bytes, salt: bytes) -> bytes:
    # ENVELOPE_TYPE_CONTRACT_ID_FROM_SOURCE_ACCOUNT, PUBLIC_KEY_TYPE_ED25519, key, salt
    return (11).to_bytes(4, "big") + (0).to_bytes(4, "big") + account + salt


def test_derivation_matches_preimage_hash():
    account = bytes(range(32))
    salt = b"\x07" * 32
    expected = hashlib.sha256(_preimage(account, salt)).digest()
    assert contract_id_from_source_account(account, salt) == expected


def test_zero_salt_derivation_is_stable():
    first = contract_id_from_source_account(ZERO_ACCOUNT_ID, ZERO_SALT)
    second = contract_id_from_source_account(ZERO_ACCOUNT_ID, ZERO_SALT)
    assert first == second
    assert first == hashlib.sha256(_preimage(ZERO_ACCOUNT_ID, ZERO_SALT)).digest()


def test_different_salt_or_account_gives_different_id():
    base = contract_id_from_source_account(ZERO_ACCOUNT_ID, ZERO_SALT)
    assert contract_id_from_source_account(ZERO_ACCOUNT_ID, b"\x01" * 32) != base
    assert contract_id_from_source_account(b"\x01" * 32, ZERO_SALT) != base


def test_derivation_rejects_bad_lengths():
    with pytest.raises(ValueError):
        contract_id_from_source_account(b"\x00" * 31, ZERO_SALT)
    with pytest.raises(ValueError):
        contract_id_from_source_account(ZERO_ACCOUNT_ID, b"\x00" * 16)


def test_resolve_salt_randomizes_only_zero_salt_when_asked():
    assert resolve_salt(ZERO_SALT, randomize=False) == ZERO_SALT
    fresh = resolve_salt(ZERO_SALT, randomize=True)
    assert len(fresh) == 32 and fresh != ZERO_SALT
    custom = b"\x05" * 32
    assert resolve_salt(custom, randomize=True) == custom


def test_parse_contract_id():
    assert parse_contract_id("ab" * 32) == b"\xab" * 32
    with pytest.raises(InvalidContractId) as ei:
        parse_contract_id("abc")
    assert ei.value.code == ErrorCode.CONTRACT_ID
    with pytest.raises(InvalidContractId):
        parse_contract_id("zz" * 32)


def test_parse_salt():
    assert parse_salt("0" * 64) == ZERO_SALT
    with pytest.raises(InvalidSalt):
        parse_salt("0" * 63)
