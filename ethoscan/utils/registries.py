# ethoscan/utils/registries.py
# Purpose: off-chain fact sources the liquidity / team / fair-launch checks consume.
#
# Every registry answers for one checksummed address:
#   lock registry      -> get_lock_info(address) -> LockInfo | None
#   team registry      -> is_verified_team(address) -> bool
#   pledge registry    -> has_pledge(address) -> bool
#
# Static* registries hold whatever data they are given (tests, JSON file);
# Http* registries query a REST service through the rate-limited JSON helper.

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Optional, Union

import requests
from pydantic import ValidationError

from ethoscan.core.errors import ProviderUnavailable, VerificationTimeout, error_reason
from ethoscan.core.models import LockInfo, PledgeRecord, TeamRecord
from ethoscan.utils.addr import normalize_evm_address
from ethoscan.utils.ratelimit import http_get_json


def _dbg(msg: str) -> None:
    print(f"[registries] {msg}")


class StaticLockRegistry:
    def __init__(self, locks: Optional[Mapping[str, Union[LockInfo, Dict[str, Any]]]] = None):
        self._locks: Dict[str, LockInfo] = {}
        for addr, info in (locks or {}).items():
            self._locks[normalize_evm_address(addr)] = info if isinstance(info, LockInfo) else LockInfo(**info)

    def get_lock_info(self, address: str) -> Optional[LockInfo]:
        return self._locks.get(normalize_evm_address(address))


class _StaticAddressSet:
    def __init__(self, addresses: Optional[Iterable[str]] = None):
        self._addresses = frozenset(normalize_evm_address(a) for a in (addresses or ()))

    def __contains__(self, address: str) -> bool:
        return normalize_evm_address(address) in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)


class StaticTeamRegistry(_StaticAddressSet):
    def is_verified_team(self, address: str) -> bool:
        return address in self


class StaticPledgeRegistry(_StaticAddressSet):
    def has_pledge(self, address: str) -> bool:
        return address in self


class Registries(NamedTuple):
    locks: Any
    teams: Any
    pledges: Any


def empty_registries() -> Registries:
    return Registries(StaticLockRegistry(), StaticTeamRegistry(), StaticPledgeRegistry())


def load_registries(path: Union[str, Path]) -> Registries:
    """
    Load static registries from a JSON file:
      {"teams": ["0x..."], "pledges": ["0x..."],
       "locks": {"0x...": {"locked": true, "days": 365, "renounceable": false}}}
    Missing sections are empty.
    """
    p = Path(path)
    _dbg(f"loading registries from {p}")
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Registry file must hold a JSON object: {p}")
    regs = Registries(
        StaticLockRegistry(data.get("locks") or {}),
        StaticTeamRegistry(data.get("teams") or []),
        StaticPledgeRegistry(data.get("pledges") or []),
    )
    _dbg(f"loaded teams={len(regs.teams)} pledges={len(regs.pledges)}")
    return regs


class _HttpRegistry:
    host_key = "registry"

    def __init__(self, base_url: str, timeout: int = 15, max_qps: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_qps = max_qps

    def _fetch(self, path: str) -> Optional[dict]:
        """GET {base}/{path}. None on 404, ProviderUnavailable on anything else that goes wrong."""
        url = f"{self.base_url}/{path}"
        try:
            data = http_get_json(self.host_key, url, max_qps=self.max_qps, timeout=self.timeout)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise ProviderUnavailable(f"{self.host_key} registry error: {error_reason(e)}") from e
        except requests.Timeout as e:
            raise VerificationTimeout(f"{self.host_key} registry timed out: {error_reason(e)}") from e
        except (requests.RequestException, ValueError) as e:
            raise ProviderUnavailable(f"{self.host_key} registry unreachable: {error_reason(e)}") from e
        if not isinstance(data, dict):
            raise ProviderUnavailable(f"{self.host_key} registry returned {type(data).__name__}, expected object")
        return data

    def _record(self, model, path: str):
        """Validate the record at `path` against `model`; None on 404."""
        data = self._fetch(path)
        if data is None:
            return None
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ProviderUnavailable(f"malformed {self.host_key} record: {e.error_count()} error(s)") from e


class HttpLockRegistry(_HttpRegistry):
    host_key = "locks"

    def get_lock_info(self, address: str) -> Optional[LockInfo]:
        return self._record(LockInfo, f"locks/{normalize_evm_address(address)}")


class HttpTeamRegistry(_HttpRegistry):
    host_key = "teams"

    def is_verified_team(self, address: str) -> bool:
        record = self._record(TeamRecord, f"teams/{normalize_evm_address(address)}")
        return record is not None and record.verified


class HttpPledgeRegistry(_HttpRegistry):
    host_key = "pledges"

    def has_pledge(self, address: str) -> bool:
        record = self._record(PledgeRecord, f"pledges/{normalize_evm_address(address)}")
        return record is not None and record.pledged


def registries_from_env() -> Registries:
    """ETHOSCAN_REGISTRY_URL wins over ETHOSCAN_REGISTRY_FILE; neither set means empty registries."""
    url = (os.getenv("ETHOSCAN_REGISTRY_URL") or "").strip()
    if url:
        _dbg(f"using HTTP registries at {url}")
        return Registries(HttpLockRegistry(url), HttpTeamRegistry(url), HttpPledgeRegistry(url))

    path = (os.getenv("ETHOSCAN_REGISTRY_FILE") or "").strip()
    if path:
        return load_registries(path)

    _dbg("no registry configured; every off-chain pillar will fail closed")
    return empty_registries()
