# ethoscan/utils/treasury.py
from ethoscan.core.errors import ContractCallError, error_reason
from ethoscan.core.models import CheckOutcome, PillarName, unavailable_outcome, unverified_outcome, verified_outcome

# Safe-style multisig owner getter
GET_OWNERS_SIG = "getOwners()"
GET_OWNERS_RETURNS = ("address[]",)

MIN_SAFE_OWNERS = 3

RISK_SINGLE_KEY = "Project treasury is single-key wallet — critical risk"
RISK_NON_MULTISIG = "Non-multisig treasury — high withdrawal risk"


def _dbg(msg: str) -> None:
    print(f"[treasury] {msg}")


def _low_signer_warning(count: int) -> str:
    return f"Low-signer multisig ({count}/{MIN_SAFE_OWNERS})"


def _evaluate(provider, address: str) -> CheckOutcome:
    code = provider.get_code(address)
    if len(code) == 0:
        _dbg(f"{address} has no code -> EOA")
        return unverified_outcome("EOA wallet — not multi-sig", risks=(RISK_SINGLE_KEY,))

    _dbg(f"{address} is a contract ({len(code)} bytes); trying {GET_OWNERS_SIG}")
    try:
        owners = provider.call_read_only(address, GET_OWNERS_SIG, (), GET_OWNERS_RETURNS)
    except ContractCallError as e:
        _dbg(f"{GET_OWNERS_SIG} not supported: {e}")
        return unverified_outcome("Not a multisig wallet", risks=(RISK_NON_MULTISIG,))

    count = len(owners)
    _dbg(f"multisig owners={count}")
    if count >= MIN_SAFE_OWNERS:
        return verified_outcome(PillarName.TREASURY, f"Multisig with {count} signers")
    return unverified_outcome(
        f"Multisig but only {count} signers (<{MIN_SAFE_OWNERS})",
        warnings=(_low_signer_warning(count),),
    )


def check_treasury(provider, address: str) -> CheckOutcome:
    """
    Treasury custody check (150 pts).
      - EOA (no bytecode)            -> fail, single-key risk
      - getOwners() with >= 3 owners -> pass
      - getOwners() with <  3 owners -> fail, low-signer warning
      - contract without getOwners() -> fail, non-multisig risk
    Transport failures never escape; the pillar degrades to unverified.
    """
    try:
        return _evaluate(provider, address)
    except Exception as e:
        reason = error_reason(e)
        _dbg(f"check failed for {address}: {reason}")
        return unavailable_outcome(PillarName.TREASURY, reason)
