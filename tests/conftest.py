"""
Pytest fixtures for Ethoscan tests. A scripted Chain Fact Provider and
in-memory registries stand in for the RPC node and the off-chain sources.
"""

from __future__ import annotations

import threading

import pytest
from web3 import Web3

from ethoscan.core.errors import ContractCallError, ProviderUnavailable
from ethoscan.core.verify import Verifier
from ethoscan.utils.registries import StaticLockRegistry, StaticPledgeRegistry, StaticTeamRegistry

WALLET = Web3.to_checksum_address("0x742d35cc6634c0532925a3b8d4c9db4c2b6d9126")
OTHER_WALLET = Web3.to_checksum_address("0x1234567890123456789012345678901234567890")
SAFE_BYTECODE = bytes.fromhex("608060405273ffffffffffffffffffffffffffffffffffffffff600054")


def owners(n: int) -> list:
    return [Web3.to_checksum_address(f"0x{i + 1:040x}") for i in range(n)]


class FakeProvider:
    """
    Scripted Chain Fact Provider.
      code=b""            -> EOA
      owners=None         -> contract without getOwners() (ContractCallError)
      code_error / call_error are raised from get_code / call_read_only.
    """

    def __init__(self, code=b"", owners=None, code_error=None, call_error=None, gate=None):
        self.code = code
        self.owners = owners
        self.code_error = code_error
        self.call_error = call_error
        self.gate = gate
        self.calls = []

    def get_code(self, address):
        self.calls.append(("get_code", address))
        if self.gate is not None:
            self.gate.wait(5)
        if self.code_error is not None:
            raise self.code_error
        return self.code

    def call_read_only(self, address, signature, args=(), returns=()):
        self.calls.append(("call", address, signature))
        if self.call_error is not None:
            raise self.call_error
        if self.owners is None:
            raise ContractCallError(f"{signature} reverted: execution reverted")
        return list(self.owners)


class BrokenRegistry:
    """Every lookup fails like an unreachable service."""

    def __init__(self, message="registry unreachable"):
        self.message = message

    def get_lock_info(self, address):
        raise ProviderUnavailable(self.message)

    def is_verified_team(self, address):
        raise ProviderUnavailable(self.message)

    def has_pledge(self, address):
        raise ProviderUnavailable(self.message)


class SlowTeamRegistry:
    """Blocks until released, to simulate a lookup that outlives the deadline."""

    def __init__(self):
        self.release = threading.Event()

    def is_verified_team(self, address):
        self.release.wait(5)
        return True


@pytest.fixture
def wallet():
    return WALLET


@pytest.fixture
def qualifying_lock():
    return {"locked": True, "days": 365, "renounceable": False}


@pytest.fixture
def make_verifier():
    """
    Build a Verifier from keyword overrides, e.g.
      make_verifier(provider=FakeProvider(code=SAFE_BYTECODE, owners=owners(3)), teams=[WALLET])
    """

    def _make(provider=None, locks=None, teams=None, pledges=None, lock_registry=None,
              team_registry=None, pledge_registry=None, timeout=None):
        return Verifier(
            provider if provider is not None else FakeProvider(),
            lock_registry if lock_registry is not None else StaticLockRegistry(locks or {}),
            team_registry if team_registry is not None else StaticTeamRegistry(teams or []),
            pledge_registry if pledge_registry is not None else StaticPledgeRegistry(pledges or []),
            timeout=timeout,
        )

    return _make
