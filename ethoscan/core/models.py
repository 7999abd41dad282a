# ethoscan/core/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator

MAX_SCORE = 500
UNAVAILABLE_DETAILS = "verification unavailable"


class PillarName(str, Enum):
    """The four pillars, declared in the order reports list them."""

    TREASURY = "treasuryTransparency"
    LIQUIDITY = "liquidityCommitment"
    TEAM = "teamTransparency"
    FAIR_LAUNCH = "fairLaunchPledge"

    @property
    def max_points(self) -> int:
        return _MAX_POINTS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_MAX_POINTS = {
    PillarName.TREASURY: 150,
    PillarName.LIQUIDITY: 150,
    PillarName.TEAM: 100,
    PillarName.FAIR_LAUNCH: 100,
}

_LABELS = {
    PillarName.TREASURY: "Treasury",
    PillarName.LIQUIDITY: "Liquidity",
    PillarName.TEAM: "Team",
    PillarName.FAIR_LAUNCH: "Fair launch",
}

_FIELDS = {
    PillarName.TREASURY: "treasury_transparency",
    PillarName.LIQUIDITY: "liquidity_commitment",
    PillarName.TEAM: "team_transparency",
    PillarName.FAIR_LAUNCH: "fair_launch_pledge",
}


class Tier(str, Enum):
    UNVERIFIED = "Unverified"
    EMERGING_BUILDER = "Emerging Builder"
    VERIFIED_BUILDER = "Verified Builder"


class PillarResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    verified: bool = False
    points: int = Field(default=0, ge=0)
    details: str = ""


class LockInfo(BaseModel):
    """LP lock facts as reported by a lock registry."""

    model_config = ConfigDict(frozen=True)

    locked: bool = False
    days: int = Field(default=0, ge=0)
    renounceable: bool = False


class TeamRecord(BaseModel):
    """Team registry answer. Only a JSON true counts."""

    model_config = ConfigDict(frozen=True)

    verified: StrictBool


class PledgeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    pledged: StrictBool


class Pillars(BaseModel):
    """All four pillar results. Indexable by PillarName."""

    model_config = ConfigDict(frozen=True)

    treasury_transparency: PillarResult = Field(alias="treasuryTransparency")
    liquidity_commitment: PillarResult = Field(alias="liquidityCommitment")
    team_transparency: PillarResult = Field(alias="teamTransparency")
    fair_launch_pledge: PillarResult = Field(alias="fairLaunchPledge")

    @classmethod
    def from_results(cls, results: Mapping[PillarName, PillarResult]) -> "Pillars":
        return cls(**{name.value: results[name] for name in PillarName})

    def __getitem__(self, name: PillarName | str) -> PillarResult:
        return getattr(self, _FIELDS[PillarName(name)])

    def items(self) -> List[Tuple[PillarName, PillarResult]]:
        return [(name, self[name]) for name in PillarName]


class VerificationReport(BaseModel):
    """
    Final, immutable result of one verify() call.
    score is always the sum of the pillar points and tier always follows score.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    score: int = Field(ge=0, le=MAX_SCORE)
    max_score: int = Field(default=MAX_SCORE, alias="maxScore")
    tier: Tier
    pillars: Pillars
    risks: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def check_totals(self) -> "VerificationReport":
        from ethoscan.core.score import tier_for_score

        if self.max_score != MAX_SCORE:
            raise ValueError(f"maxScore must be {MAX_SCORE}, got {self.max_score}")
        total = sum(p.points for _, p in self.pillars.items())
        if self.score != total:
            raise ValueError(f"score {self.score} != sum of pillar points {total}")
        if self.tier != tier_for_score(self.score):
            raise ValueError(f"tier {self.tier.value} does not match score {self.score}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CheckOutcome(NamedTuple):
    """What one pillar checker hands back: its result plus its own message buffers."""

    result: PillarResult
    risks: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def verified_outcome(pillar: PillarName, details: str) -> CheckOutcome:
    return CheckOutcome(PillarResult(verified=True, points=pillar.max_points, details=details))


def unverified_outcome(details: str, risks: Tuple[str, ...] = (), warnings: Tuple[str, ...] = ()) -> CheckOutcome:
    return CheckOutcome(PillarResult(verified=False, points=0, details=details), tuple(risks), tuple(warnings))


def unavailable_outcome(pillar: PillarName, reason: str) -> CheckOutcome:
    # fail closed: the pillar scores nothing and the reason surfaces as a warning
    return CheckOutcome(
        PillarResult(verified=False, points=0, details=UNAVAILABLE_DETAILS),
        warnings=(f"{pillar.label} check failed: {reason}",),
        error=reason,
    )


def timed_out_outcome(pillar: PillarName) -> CheckOutcome:
    return CheckOutcome(
        PillarResult(verified=False, points=0, details=UNAVAILABLE_DETAILS),
        warnings=(f"{pillar.label} check timed out",),
        error="timeout",
    )
