"""
Tests for the web3-backed Chain Fact Provider and RPC resolution.

Uses a MagicMock in place of Web3: get_code / eth_call payloads are
ABI-encoded with eth_abi the way a node would return them.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from eth_abi import encode
from web3 import Web3
from web3.exceptions import ContractLogicError

from conftest import WALLET, owners
from ethoscan.chains import Web3FactProvider, _arg_types, get_w3_for_chain, resolve_rpc_url
from ethoscan.core.errors import ContractCallError, ProviderUnavailable, VerificationTimeout


def _selector(sig: str) -> str:
    return "0x" + bytes(Web3.keccak(text=sig)[:4]).hex()


@pytest.fixture
def w3():
    return MagicMock()


def test_get_code_returns_bytes(w3):
    w3.eth.get_code.return_value = b"\x60\x80"
    assert Web3FactProvider(w3).get_code(WALLET.lower()) == b"\x60\x80"
    w3.eth.get_code.assert_called_once_with(WALLET)


def test_get_code_transport_error_is_provider_unavailable(w3):
    w3.eth.get_code.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(ProviderUnavailable):
        Web3FactProvider(w3).get_code(WALLET)


def test_get_code_timeout_is_verification_timeout(w3):
    w3.eth.get_code.side_effect = requests.Timeout("read timed out")
    with pytest.raises(VerificationTimeout):
        Web3FactProvider(w3).get_code(WALLET)


def test_call_read_only_decodes_owner_list(w3):
    expected = owners(3)
    w3.eth.call.return_value = encode(["address[]"], [expected])

    result = Web3FactProvider(w3).call_read_only(WALLET, "getOwners()", (), ("address[]",))

    assert [Web3.to_checksum_address(a) for a in result] == expected
    tx = w3.eth.call.call_args[0][0]
    assert tx == {"to": WALLET, "data": _selector("getOwners()")}


def test_call_read_only_encodes_arguments(w3):
    w3.eth.call.return_value = encode(["uint256"], [42])

    value = Web3FactProvider(w3).call_read_only(WALLET, "balanceOf(address)", [WALLET], ["uint256"])

    assert value == 42
    data = w3.eth.call.call_args[0][0]["data"]
    assert data == _selector("balanceOf(address)") + encode(["address"], [WALLET]).hex()


def test_call_read_only_multiple_returns(w3):
    w3.eth.call.return_value = encode(["uint256", "bool"], [7, True])
    assert Web3FactProvider(w3).call_read_only(WALLET, "info()", (), ("uint256", "bool")) == (7, True)


def test_call_read_only_revert_is_contract_call_error(w3):
    w3.eth.call.side_effect = ContractLogicError("execution reverted")
    with pytest.raises(ContractCallError):
        Web3FactProvider(w3).call_read_only(WALLET, "getOwners()", (), ("address[]",))


@pytest.mark.parametrize("raw", [b"", b"\x01\x02\x03"])
def test_call_read_only_bad_return_data_is_contract_call_error(w3, raw):
    w3.eth.call.return_value = raw
    with pytest.raises(ContractCallError):
        Web3FactProvider(w3).call_read_only(WALLET, "getOwners()", (), ("address[]",))


def test_call_read_only_transport_error_is_provider_unavailable(w3):
    w3.eth.call.side_effect = requests.ConnectionError("reset by peer")
    with pytest.raises(ProviderUnavailable):
        Web3FactProvider(w3).call_read_only(WALLET, "getOwners()", (), ("address[]",))


def test_arg_types():
    assert _arg_types("getOwners()") == []
    assert _arg_types("allowance(address, address)") == ["address", "address"]
    with pytest.raises(ValueError):
        _arg_types("getOwners")


def test_resolve_rpc_url(monkeypatch):
    monkeypatch.delenv("WEB3_PROVIDER_BASE", raising=False)
    assert resolve_rpc_url("base") == "https://mainnet.base.org"

    monkeypatch.setenv("WEB3_PROVIDER_BASE", "https://base.example.org\r")
    assert resolve_rpc_url("base") == "https://base.example.org"

    monkeypatch.delenv("WEB3_PROVIDER_ETH", raising=False)
    monkeypatch.delenv("WEB3_PROVIDER", raising=False)
    with pytest.raises(ValueError):
        resolve_rpc_url("eth")

    monkeypatch.setenv("WEB3_PROVIDER", "https://eth.example.org")
    assert resolve_rpc_url("eth") == "https://eth.example.org"

    with pytest.raises(ValueError):
        resolve_rpc_url("solana")


def test_get_w3_for_chain_builds_http_provider(monkeypatch):
    monkeypatch.setenv("WEB3_PROVIDER_BASE", "https://base.example.org")
    w3 = get_w3_for_chain("base", timeout=5)
    assert w3.provider.endpoint_uri == "https://base.example.org"
