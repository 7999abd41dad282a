# ethoscan/utils/pledge.py
from ethoscan.core.errors import error_reason
from ethoscan.core.models import CheckOutcome, PillarName, unavailable_outcome, unverified_outcome, verified_outcome


def check_fair_launch(pledge_registry, address: str) -> CheckOutcome:
    try:
        pledged = bool(pledge_registry.has_pledge(address))
    except Exception as e:
        reason = error_reason(e)
        print(f"[pledge] pledge lookup failed for {address}: {reason}")
        return unavailable_outcome(PillarName.FAIR_LAUNCH, reason)

    if pledged:
        return verified_outcome(PillarName.FAIR_LAUNCH, "Fair launch pledge signed")
    return unverified_outcome("No fair launch pledge")
