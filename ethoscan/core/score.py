# ethoscan/core/score.py
from __future__ import annotations

from typing import List, Mapping, Tuple

from ethoscan.core.models import MAX_SCORE, CheckOutcome, PillarName, PillarResult, Pillars, Tier

VERIFIED_BUILDER_MIN = 350
EMERGING_BUILDER_MIN = 200

RISK_LOW_SCORE = "High scam risk: Insufficient trust signals"
WARN_TREASURY_UNVERIFIED = "Treasury not verified as multisig"
WARN_LIQUIDITY_UNVERIFIED = "No long-term LP lock detected"


def tier_for_score(score: int) -> Tier:
    if not 0 <= score <= MAX_SCORE:
        raise ValueError(f"score out of range: {score}")
    if score >= VERIFIED_BUILDER_MIN:
        return Tier.VERIFIED_BUILDER
    if score >= EMERGING_BUILDER_MIN:
        return Tier.EMERGING_BUILDER
    return Tier.UNVERIFIED


def validate_pillar(name: PillarName, result: PillarResult) -> None:
    """Binary scoring: a pillar earns its full weight or nothing."""
    expected = name.max_points if result.verified else 0
    if result.points != expected:
        state = "verified" if result.verified else "unverified"
        raise ValueError(f"{name.value}: {state} pillar must carry {expected} points, got {result.points}")


def aggregate(pillars: Pillars) -> Tuple[int, Tier]:
    """Return (score 0..500, tier), always recomputed from the pillar results."""
    score = 0
    for name, result in pillars.items():
        validate_pillar(name, result)
        score += result.points
    return score, tier_for_score(score)


def derive_messages(outcomes: Mapping[PillarName, CheckOutcome], score: int) -> Tuple[List[str], List[str]]:
    """
    Build (risks, warnings) in a fixed order:
      each checker's own messages in pillar order (treasury, liquidity, team, fair launch),
      then the low-score risk and the treasury / liquidity "not verified" warnings.
    Completion order of the checks plays no part. Nothing is de-duplicated.
    """
    risks: List[str] = []
    warnings: List[str] = []

    for name in PillarName:
        outcome = outcomes[name]
        risks.extend(outcome.risks)
        warnings.extend(outcome.warnings)

    if score < EMERGING_BUILDER_MIN:
        risks.append(RISK_LOW_SCORE)

    if not outcomes[PillarName.TREASURY].result.verified:
        warnings.append(WARN_TREASURY_UNVERIFIED)
    if not outcomes[PillarName.LIQUIDITY].result.verified:
        warnings.append(WARN_LIQUIDITY_UNVERIFIED)

    # Team absence is informational only and adds no message here.
    return risks, warnings
