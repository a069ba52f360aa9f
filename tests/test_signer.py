from __future__ import annotations

from dataclasses import replace

import pytest
from eth_account import Account
from eth_utils import to_hex

from eth_offline_signer.broadcaster import transaction_hash_of
from eth_offline_signer.errors import SigningError
from eth_offline_signer.params import AccessListItem
from eth_offline_signer.signer import build_transaction_request, derive_address, sign_transaction

from .fakes import DEV_ADDRESS, DEV_PRIVATE_KEY, RECIPIENT

STORAGE_KEY = "0x" + "00" * 31 + "01"


def test_request_contains_every_eip1559_field(tx_params):
    request = build_transaction_request(tx_params)

    assert request == {
        "type": 2,
        "to": RECIPIENT,
        "value": 1000000000000000,
        "chainId": 11155111,
        "nonce": 10,
        "gas": 21000,
        "maxFeePerGas": 30000000000,
        "maxPriorityFeePerGas": 1500000000,
    }


def test_access_list_only_added_when_present(tx_params):
    params = replace(tx_params, access_list=(AccessListItem(address=RECIPIENT, storage_keys=(STORAGE_KEY,)),))

    request = build_transaction_request(params)

    assert request["accessList"] == [{"address": RECIPIENT, "storageKeys": [STORAGE_KEY]}]
    assert "accessList" not in build_transaction_request(tx_params)


def test_values_beyond_64_bits_are_preserved(tx_params):
    huge = str(2**70)
    params = replace(tx_params, value=huge)
    assert build_transaction_request(params)["value"] == 2**70


def test_signed_payload_recovers_to_signer(tx_params):
    signed = sign_transaction(DEV_PRIVATE_KEY, tx_params)

    assert signed.startswith("0x02")
    assert Account.recover_transaction(signed) == DEV_ADDRESS


def test_signing_is_deterministic(tx_params):
    assert sign_transaction(DEV_PRIVATE_KEY, tx_params) == sign_transaction(DEV_PRIVATE_KEY, tx_params)


def test_different_nonce_changes_payload(tx_params):
    assert sign_transaction(DEV_PRIVATE_KEY, tx_params) != sign_transaction(
        DEV_PRIVATE_KEY, tx_params.with_nonce(11)
    )


def test_local_hash_matches_eth_account(tx_params):
    signed = sign_transaction(DEV_PRIVATE_KEY, tx_params)
    request = build_transaction_request(tx_params)
    expected = Account.from_key(DEV_PRIVATE_KEY).sign_transaction(request).hash

    assert transaction_hash_of(signed) == to_hex(expected)


def test_signing_with_access_list_recovers(tx_params):
    params = replace(tx_params, access_list=(AccessListItem(address=RECIPIENT, storage_keys=(STORAGE_KEY,)),))
    assert Account.recover_transaction(sign_transaction(DEV_PRIVATE_KEY, params)) == DEV_ADDRESS


def test_derive_address():
    assert derive_address(DEV_PRIVATE_KEY) == DEV_ADDRESS


@pytest.mark.parametrize("field_name,attribute", [("value", "value"), ("gasLimit", "gas_limit")])
def test_non_numeric_fields_name_the_field(tx_params, field_name, attribute):
    params = replace(tx_params, **{attribute: "1e18"})

    with pytest.raises(SigningError, match=f"Failed to convert {field_name}"):
        sign_transaction(DEV_PRIVATE_KEY, params)


def test_unusable_key_raises_signing_error(tx_params):
    with pytest.raises(SigningError, match="private key"):
        sign_transaction("0x" + "00" * 32, tx_params)
