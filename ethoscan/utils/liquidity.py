# ethoscan/utils/liquidity.py
from typing import Optional

from ethoscan.core.errors import error_reason
from ethoscan.core.models import CheckOutcome, LockInfo, PillarName, unavailable_outcome, unverified_outcome, verified_outcome

MIN_LOCK_DAYS = 180


def _dbg(msg: str):
    print(f"[liquidity] {msg}")


def qualifies(info: Optional[LockInfo]) -> bool:
    """Locked, for at least MIN_LOCK_DAYS, and the lock cannot be renounced."""
    if info is None:
        return False
    return info.locked and info.days >= MIN_LOCK_DAYS and not info.renounceable


def check_liquidity(lock_registry, address: str) -> CheckOutcome:
    """
    Liquidity commitment check (150 pts) against an LP-lock registry.
    Missing lock data counts as "not locked".
    """
    try:
        info = lock_registry.get_lock_info(address)
    except Exception as e:
        reason = error_reason(e)
        _dbg(f"lock lookup failed for {address}: {reason}")
        return unavailable_outcome(PillarName.LIQUIDITY, reason)

    _dbg(f"lock info for {address}: {info}")
    if qualifies(info):
        return verified_outcome(PillarName.LIQUIDITY, f"LP locked for {info.days} days (non-renounceable)")
    return unverified_outcome("No qualifying LP lock")
