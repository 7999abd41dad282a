# ethoscan/utils/team.py
from ethoscan.core.errors import error_reason
from ethoscan.core.models import CheckOutcome, PillarName, unavailable_outcome, unverified_outcome, verified_outcome


def check_team(team_registry, address: str) -> CheckOutcome:
    """
    Returns a passing outcome if the identity-attestation registry knows the address
    (ENS ownership, SIWE, POAP ...). Absence is not an error and adds no warning.
    """
    try:
        present = bool(team_registry.is_verified_team(address))
    except Exception as e:
        reason = error_reason(e)
        print(f"[team] attestation lookup failed for {address}: {reason}")
        return unavailable_outcome(PillarName.TEAM, reason)

    if present:
        return verified_outcome(PillarName.TEAM, "Team verified via ENS/SIWE/POAP attestation")
    return unverified_outcome("No team verification")
