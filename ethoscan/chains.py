# ethoscan/chains.py
# Purpose: Chain config + web3 factory (Web3 v7) + the read-only fact provider pillar checks run on.

import os
import re
from typing import Any, List, Optional, Sequence

import requests
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, ProviderConnectionError, Web3RPCError

from ethoscan.core.errors import ContractCallError, ProviderUnavailable, VerificationTimeout, error_reason

CHAINS = {
    "base": {
        "name": "base",
        "chainid": 8453,
        "rpc_env": "WEB3_PROVIDER_BASE",
        "default_rpc": "https://mainnet.base.org",
    },
    "eth": {
        "name": "eth",
        "chainid": 1,
        "rpc_env": "WEB3_PROVIDER_ETH",
        "default_rpc": None,
    },
}

DEFAULT_CHAIN = "base"

_TIMEOUT_ERRORS = (requests.Timeout, TimeoutError)
_TRANSPORT_ERRORS = (requests.RequestException, ProviderConnectionError, Web3RPCError, OSError)

_SIGNATURE_RE = re.compile(r"^\s*\w+\((.*)\)\s*$")


def _dbg(msg: str) -> None:
    print(f"[CHAINS] {msg}")


def resolve_rpc_url(chain_key: str) -> str:
    if chain_key not in CHAINS:
        raise ValueError(f"Unknown chain: {chain_key}")

    cfg = CHAINS[chain_key]
    rpc = os.getenv(cfg["rpc_env"]) or (os.getenv("WEB3_PROVIDER") if chain_key == "eth" else "")
    rpc = (rpc or "").strip().rstrip("\r")

    if not rpc or rpc in {"https://", "http://"}:
        if cfg["default_rpc"]:
            rpc = cfg["default_rpc"]
            _dbg(f"Using default {chain_key} RPC: {rpc}")
        else:
            raise ValueError(f"Missing/invalid RPC URL for {chain_key}. Set {cfg['rpc_env']} in .env")
    return rpc


def get_w3_for_chain(chain_key: str, timeout: Optional[float] = None) -> Web3:
    _dbg(f"get_w3_for_chain({chain_key})")
    rpc = resolve_rpc_url(chain_key)
    if timeout is None:
        timeout = float(os.getenv("ETHOSCAN_RPC_TIMEOUT", "30"))
    _dbg(f"HTTPProvider -> {rpc} (timeout={timeout}s)")
    return Web3(Web3.HTTPProvider(rpc, request_kwargs={"timeout": timeout}))


def _arg_types(signature: str) -> List[str]:
    """'balanceOf(address)' -> ['address']. Flat argument lists only."""
    m = _SIGNATURE_RE.match(signature)
    if not m:
        raise ValueError(f"Not a function signature: {signature!r}")
    inner = m.group(1).replace(" ", "")
    return inner.split(",") if inner else []


class Web3FactProvider:
    """
    Chain Fact Provider backed by a web3 connection.

      get_code(address)                        -> runtime bytecode (b"" for an EOA)
      call_read_only(address, sig, args, returns) -> decoded eth_call result

    Transport trouble raises ProviderUnavailable; a contract that answers
    outside the expected ABI raises ContractCallError.
    """

    def __init__(self, w3: Web3):
        self.w3 = w3

    def get_code(self, address: str) -> bytes:
        addr = Web3.to_checksum_address(address)
        try:
            return bytes(self.w3.eth.get_code(addr))
        except _TIMEOUT_ERRORS as e:
            raise VerificationTimeout(f"get_code timed out: {error_reason(e)}") from e
        except _TRANSPORT_ERRORS as e:
            raise ProviderUnavailable(f"get_code failed: {error_reason(e)}") from e

    def call_read_only(
        self,
        address: str,
        signature: str,
        args: Sequence[Any] = (),
        returns: Sequence[str] = (),
    ) -> Any:
        addr = Web3.to_checksum_address(address)
        arg_types = _arg_types(signature)
        data = bytes(Web3.keccak(text=signature)[:4])  # 4-byte selector
        if arg_types:
            data += encode(arg_types, list(args))

        try:
            raw = self.w3.eth.call({"to": addr, "data": "0x" + data.hex()})
        except (ContractLogicError, BadFunctionCallOutput) as e:
            raise ContractCallError(f"{signature} reverted: {error_reason(e)}") from e
        except _TIMEOUT_ERRORS as e:
            raise VerificationTimeout(f"{signature} call timed out: {error_reason(e)}") from e
        except _TRANSPORT_ERRORS as e:
            raise ProviderUnavailable(f"{signature} call failed: {error_reason(e)}") from e

        raw = bytes(raw or b"")
        if not returns:
            return raw
        if not raw:
            raise ContractCallError(f"{signature} returned no data")
        try:
            values = decode(list(returns), raw)
        except (DecodingError, OverflowError) as e:
            raise ContractCallError(f"{signature} returned undecodable data: {error_reason(e)}") from e
        return values[0] if len(returns) == 1 else values


__all__ = ["CHAINS", "DEFAULT_CHAIN", "Web3FactProvider", "get_w3_for_chain", "resolve_rpc_url"]
