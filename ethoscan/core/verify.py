# ethoscan/core/verify.py
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, wait
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

from ethoscan.chains import DEFAULT_CHAIN, Web3FactProvider, get_w3_for_chain
from ethoscan.core.errors import error_reason
from ethoscan.core.models import (
    UNAVAILABLE_DETAILS,
    CheckOutcome,
    PillarName,
    PillarResult,
    Pillars,
    Tier,
    VerificationReport,
    timed_out_outcome,
    unavailable_outcome,
)
from ethoscan.core.score import aggregate, derive_messages
from ethoscan.utils.addr import normalize_evm_address
from ethoscan.utils.liquidity import check_liquidity
from ethoscan.utils.pledge import check_fair_launch
from ethoscan.utils.registries import Registries, registries_from_env
from ethoscan.utils.team import check_team
from ethoscan.utils.treasury import check_treasury


def _dbg(msg: str) -> None:
    print(f"[VERIFY] {msg}")


def _isolated(name: PillarName, check: Callable[[str], CheckOutcome], address: str) -> CheckOutcome:
    # Checkers isolate their own source failures; this catches whatever slips past them.
    try:
        return check(address)
    except Exception as e:
        reason = error_reason(e)
        _dbg(f"{name.value} check raised: {reason}")
        return unavailable_outcome(name, reason)


def failed_report(address: str, reason: str) -> VerificationReport:
    """Score 0, every pillar unverified, one warning carrying the reason."""
    blank = PillarResult(verified=False, points=0, details=UNAVAILABLE_DETAILS)
    return VerificationReport(
        address=address,
        score=0,
        tier=Tier.UNVERIFIED,
        pillars=Pillars.from_results({name: blank for name in PillarName}),
        risks=(),
        warnings=(f"Verification failed: {reason}",),
    )


class Verifier:
    """
    Runs the four pillar checks for a wallet and assembles the VerificationReport.

    The checks run concurrently on a thread pool and are joined before anything
    is merged, so the report never depends on which check finished first. A check
    still running when `timeout` (seconds) expires is treated as failed closed.
    """

    def __init__(self, provider, lock_registry, team_registry, pledge_registry, timeout: Optional[float] = None):
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.provider = provider
        self.lock_registry = lock_registry
        self.team_registry = team_registry
        self.pledge_registry = pledge_registry
        self.timeout = timeout

    @classmethod
    def from_env(
        cls,
        chain: Optional[str] = None,
        registries: Optional[Registries] = None,
        timeout: Optional[float] = None,
    ) -> "Verifier":
        chain = chain or os.getenv("ETHOSCAN_CHAIN", DEFAULT_CHAIN)
        provider = Web3FactProvider(get_w3_for_chain(chain))
        regs = registries or registries_from_env()
        if timeout is None:
            raw = (os.getenv("ETHOSCAN_TIMEOUT") or "").strip()
            timeout = float(raw) if raw else None
        _dbg(f"verifier ready chain={chain} timeout={timeout}")
        return cls(provider, regs.locks, regs.teams, regs.pledges, timeout=timeout)

    def _checks(self) -> List[Tuple[PillarName, Callable[[str], CheckOutcome]]]:
        return [
            (PillarName.TREASURY, partial(check_treasury, self.provider)),
            (PillarName.LIQUIDITY, partial(check_liquidity, self.lock_registry)),
            (PillarName.TEAM, partial(check_team, self.team_registry)),
            (PillarName.FAIR_LAUNCH, partial(check_fair_launch, self.pledge_registry)),
        ]

    def _run_checks(self, address: str) -> Dict[PillarName, CheckOutcome]:
        executor = ThreadPoolExecutor(max_workers=len(PillarName), thread_name_prefix="ethoscan-pillar")
        try:
            futures = {name: executor.submit(_isolated, name, check, address) for name, check in self._checks()}
            done, _ = wait(futures.values(), timeout=self.timeout)
        finally:
            # never block on a straggler; it keeps running but its result is ignored
            executor.shutdown(wait=False, cancel_futures=True)

        outcomes: Dict[PillarName, CheckOutcome] = {}
        for name in PillarName:
            fut = futures[name]
            if fut in done:
                outcomes[name] = fut.result()
            else:
                _dbg(f"{name.value} still pending after {self.timeout}s -> failed closed")
                outcomes[name] = timed_out_outcome(name)
        return outcomes

    def _assemble(self, address: str, outcomes: Dict[PillarName, CheckOutcome]) -> VerificationReport:
        pillars = Pillars.from_results({name: outcome.result for name, outcome in outcomes.items()})
        score, tier = aggregate(pillars)
        risks, warnings = derive_messages(outcomes, score)
        return VerificationReport(
            address=address,
            score=score,
            tier=tier,
            pillars=pillars,
            risks=risks,
            warnings=warnings,
        )

    def verify(self, address: str) -> VerificationReport:
        """Raises InvalidAddress for malformed input; otherwise always returns a report."""
        addr = normalize_evm_address(address)
        _dbg(f"verify start addr={addr}")

        try:
            outcomes = self._run_checks(addr)
            errors = [o.error for o in outcomes.values() if o.failed]
            if len(errors) == len(outcomes):
                _dbg(f"every pillar check failed for {addr}: {errors}")
                return failed_report(addr, errors[0])
            report = self._assemble(addr, outcomes)
        except Exception as e:
            _dbg(f"verify FAIL addr={addr}: {e}")
            return failed_report(addr, error_reason(e))

        _dbg(f"verify done addr={addr} score={report.score} tier={report.tier.value}")
        return report


def verify(address: str, verifier: Optional[Verifier] = None) -> VerificationReport:
    return (verifier or Verifier.from_env()).verify(address)
