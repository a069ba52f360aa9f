from __future__ import annotations

import pytest

from eth_offline_signer.networks import (
    ANVIL_CHAIN_ID,
    explorer_tx_url,
    get_display_network_info,
    get_network_config,
    is_builtin_chain_id,
)

TX_HASH = "0x" + "aa" * 32


def test_builtin_networks():
    sepolia = get_network_config(11155111)
    hoodi = get_network_config(560048)

    assert sepolia.name == "Sepolia Testnet"
    assert sepolia.transaction_url(TX_HASH) == f"https://sepolia.etherscan.io/tx/{TX_HASH}"
    assert hoodi.name == "Hoodi Testnet"
    assert hoodi.builtin
    assert is_builtin_chain_id(560048)


def test_unknown_chain_is_custom_without_explorer():
    config = get_network_config(424242)

    assert config.name == "Custom Network (424242)"
    assert config.explorer_base_url is None
    assert not config.builtin
    assert config.transaction_url(TX_HASH) is None
    assert explorer_tx_url(424242, TX_HASH) is None


def test_anvil_uses_rpc_url_from_environment():
    config = get_network_config(ANVIL_CHAIN_ID, env={"ANVIL_RPC_URL": "http://127.0.0.1:9545/"})

    assert config.name == "Anvil Local Network"
    assert config.transaction_url(TX_HASH) == f"http://127.0.0.1:9545/tx/{TX_HASH}"
    assert not is_builtin_chain_id(ANVIL_CHAIN_ID)


def test_anvil_defaults_to_localhost():
    assert get_network_config(ANVIL_CHAIN_ID, env={}).explorer_base_url == "http://localhost:8545"


def test_overrides_replace_fields():
    config = get_network_config(11155111, overrides={11155111: {"name": "Sepolia (mirror)", "ignored": 1}})

    assert config.name == "Sepolia (mirror)"
    assert config.explorer_base_url == "https://sepolia.etherscan.io"


@pytest.mark.parametrize("chain_id", [0, -5, "1", None, False])
def test_invalid_chain_ids(chain_id):
    with pytest.raises(ValueError):
        get_network_config(chain_id)


def test_display_info():
    assert get_display_network_info(11155111) == {
        "name": "Sepolia Testnet",
        "explorer": "https://sepolia.etherscan.io",
        "type": "builtin",
    }
    assert get_display_network_info(7) == {"name": "Custom Network (7)", "explorer": "n/a", "type": "custom"}
