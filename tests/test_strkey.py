import pytest

from hostcall.types.ledger import ZERO_ACCOUNT, ZERO_ACCOUNT_ID
from hostcall.utils import strkey


def test_zero_account_vector():
    assert strkey.encode_account(ZERO_ACCOUNT_ID) == ZERO_ACCOUNT
    assert strkey.decode_account(ZERO_ACCOUNT) == ZERO_ACCOUNT_ID


def test_account_and_seed_roundtrip():
    key = bytes(range(32))
    acc = strkey.encode_account(key)
    seed = strkey.encode_seed(key)
    assert acc.startswith("G") and len(acc) == 56
    assert seed.startswith("S") and len(seed) == 56
    assert strkey.decode_account(acc) == key
    assert strkey.decode_seed(seed) == key


def test_version_byte_is_checked():
    seed = strkey.encode_seed(bytes(32))
    with pytest.raises(strkey.StrkeyError):
        strkey.decode_account(seed)


def test_checksum_is_checked():
    bad = ZERO_ACCOUNT[:-1] + ("A" if ZERO_ACCOUNT[-1] != "A" else "B")
    with pytest.raises(strkey.StrkeyError):
        strkey.decode_account(bad)
    assert not strkey.is_valid_account(bad)


@pytest.mark.parametrize("text", ["", "GABC", ZERO_ACCOUNT.lower()])
def test_malformed_strkeys(text):
    with pytest.raises(strkey.StrkeyError):
        strkey.decode_account(text)
