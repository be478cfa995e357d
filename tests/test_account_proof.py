import pytest

from flowsdk.account_proof import (
    InvalidAppIDError,
    InvalidNonceError,
    encode_account_proof_message,
)
from flowsdk.address import hex_to_address

ADDRESS = hex_to_address("ABC123DEF456")
NONCE = "3037366134636339643564623330316636626239323161663465346131393662"
APP_ID = "AWESOME-APP-ID"
EXPECTED = (
    "f8398e415745534f4d452d4150502d4944880000abc123def456a0"
    "3037366134636339643564623330316636626239323161663465346131393662"
)


def test_valid_inputs():
    msg = encode_account_proof_message(ADDRESS, APP_ID, NONCE)
    assert msg.hex() == EXPECTED


def test_nonce_with_prefix():
    msg = encode_account_proof_message(ADDRESS, APP_ID, "0x" + NONCE)
    assert msg.hex() == EXPECTED


def test_nonce_invalid_hex():
    with pytest.raises(InvalidNonceError):
        encode_account_proof_message(ADDRESS, APP_ID, "asdf")


def test_nonce_too_short():
    with pytest.raises(InvalidNonceError, match="at least 32 bytes"):
        encode_account_proof_message(ADDRESS, APP_ID, "222222")


def test_empty_app_id():
    with pytest.raises(InvalidAppIDError, match="appID can't be empty"):
        encode_account_proof_message(ADDRESS, "", "222222")


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        encode_account_proof_message(ADDRESS, APP_ID, "zz" * 32)