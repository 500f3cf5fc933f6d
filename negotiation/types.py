from __future__ import annotations

"""Negotiation subsystem: shared types.

Entity records are per-turn snapshots assembled by the game state layer;
nothing in here is persisted by this package. All dataclasses are frozen so
an evaluation can never mutate the snapshot it was handed.

Terms are a tagged union keyed by negotiation kind: each terms class carries
its own ``kind`` and a session only accepts the variant matching its kind.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Literal, Mapping, Optional, Tuple, Union

from .utils import json_dumps


NegotiationKind = Literal["DRIVER", "STAFF", "SPONSOR", "MANUFACTURER"]

NegotiationPhase = Literal[
    "AWAITING_RESPONSE",
    "RESPONSE_RECEIVED",
    "COMPLETED",
    "FAILED",
]

Proposer = Literal["PLAYER", "COUNTERPARTY"]

ResponseType = Literal["ACCEPT", "COUNTER", "REJECT"]
ResponseTone = Literal["ENTHUSIASTIC", "PROFESSIONAL", "DISAPPOINTED", "INSULTED"]

ChiefRole = Literal["DESIGNER", "ENGINEER", "MECHANIC", "COMMERCIAL"]
SponsorTier = Literal["TITLE", "MAJOR", "MINOR"]
SponsorPlacement = Literal["PRIMARY", "SECONDARY", "TERTIARY"]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DriverAttributes:
    """All 0..100."""

    pace: float = 50.0
    consistency: float = 50.0
    focus: float = 50.0
    overtaking: float = 50.0
    wet_weather: float = 50.0
    smoothness: float = 50.0
    defending: float = 50.0

    def total(self) -> float:
        return float(
            self.pace
            + self.consistency
            + self.focus
            + self.overtaking
            + self.wet_weather
            + self.smoothness
            + self.defending
        )


@dataclass(frozen=True, slots=True)
class CareerSeasonRecord:
    """One completed season, written once at season end."""

    season: int
    team_id: Optional[str]
    races: int
    total_points: float
    team_total_points: float


@dataclass(frozen=True, slots=True)
class Driver:
    id: str
    date_of_birth: str  # YYYY-MM-DD
    attributes: DriverAttributes = field(default_factory=DriverAttributes)
    team_id: Optional[str] = None
    salary: float = 0.0
    contract_end: int = 0
    first_name: str = ""
    last_name: str = ""
    career_history: Tuple[CareerSeasonRecord, ...] = ()


@dataclass(frozen=True, slots=True)
class Team:
    id: str
    name: str = ""
    budget: float = 0.0


@dataclass(frozen=True, slots=True)
class TeamPrincipal:
    id: str
    team_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Chief:
    id: str
    role: ChiefRole
    ability: float  # 0..100
    team_id: Optional[str] = None
    salary: float = 0.0
    contract_end: int = 0
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True, slots=True)
class Sponsor:
    id: str
    tier: SponsorTier
    payment: float  # annual, dollars
    min_reputation: float  # 0..100
    rival_group: Optional[str] = None
    name: str = ""
    industry: str = ""


@dataclass(frozen=True, slots=True)
class ActiveSponsorDeal:
    sponsor_id: str
    team_id: str


@dataclass(frozen=True, slots=True)
class ManufacturerCosts:
    base_engine: float
    upgrade: float
    customisation_point: float
    optimisation: float


@dataclass(frozen=True, slots=True)
class Manufacturer:
    id: str
    costs: ManufacturerCosts
    name: str = ""
    reputation: float = 50.0


@dataclass(frozen=True, slots=True)
class ActiveManufacturerContract:
    manufacturer_id: str
    team_id: str


@dataclass(frozen=True, slots=True)
class MarketContext:
    """Read-only market snapshot rebuilt by the caller before each decision.

    ``standings`` maps team id to its 1-indexed constructor position.
    """

    teams: Tuple[Team, ...] = ()
    standings: Mapping[str, int] = field(default_factory=dict)
    drivers: Tuple[Driver, ...] = ()
    chiefs: Tuple[Chief, ...] = ()
    principals: Tuple[TeamPrincipal, ...] = ()
    sponsors: Tuple[Sponsor, ...] = ()
    sponsor_deals: Tuple[ActiveSponsorDeal, ...] = ()
    manufacturers: Tuple[Manufacturer, ...] = ()
    manufacturer_contracts: Tuple[ActiveManufacturerContract, ...] = ()
    secured_team_ids: Tuple[str, ...] = ()
    relationship_scores: Mapping[str, float] = field(default_factory=dict)
    available_seats: int = 0
    game_year: int = 0

    @property
    def total_teams(self) -> int:
        return len(self.teams)

    def team(self, team_id: Optional[str]) -> Optional[Team]:
        if team_id is None:
            return None
        for t in self.teams:
            if t.id == team_id:
                return t
        return None

    def relationship(self, counterparty_id: str, default: float = 50.0) -> float:
        return float(self.relationship_scores.get(counterparty_id, default))

    def position_of(self, team_id: str) -> int:
        """Standing position; unranked teams sit last."""
        pos = self.standings.get(team_id)
        if pos is None:
            return self.total_teams
        return int(pos)


# ---------------------------------------------------------------------------
# Terms (tagged union by negotiation kind)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DriverTerms:
    kind: ClassVar[NegotiationKind] = "DRIVER"

    salary: float
    duration: int

    def to_payload(self) -> Dict[str, Any]:
        return {"kind": self.kind, "salary": float(self.salary), "duration": int(self.duration)}


@dataclass(frozen=True, slots=True)
class StaffTerms:
    kind: ClassVar[NegotiationKind] = "STAFF"

    salary: float
    duration: int
    signing_bonus: float = 0.0
    bonus_percent: float = 0.0
    # Paid automatically when poaching; never negotiated.
    buyout_required: float = 0.0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "salary": float(self.salary),
            "duration": int(self.duration),
            "signing_bonus": float(self.signing_bonus),
            "bonus_percent": float(self.bonus_percent),
            "buyout_required": float(self.buyout_required),
        }


@dataclass(frozen=True, slots=True)
class SponsorTerms:
    kind: ClassVar[NegotiationKind] = "SPONSOR"

    annual_payment: float
    duration: int
    placement: SponsorPlacement = "TERTIARY"
    points_bonus: float = 0.0
    win_bonus: float = 0.0
    # Sponsor may walk if the team finishes below this position.
    exit_clause_position: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "annual_payment": float(self.annual_payment),
            "duration": int(self.duration),
            "placement": str(self.placement),
            "points_bonus": float(self.points_bonus),
            "win_bonus": float(self.win_bonus),
            "exit_clause_position": self.exit_clause_position,
        }


@dataclass(frozen=True, slots=True)
class SupplyTerms:
    kind: ClassVar[NegotiationKind] = "MANUFACTURER"

    annual_cost: float
    duration: int
    upgrades_included: int = 0
    customisation_points_included: int = 0
    optimisation_included: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "annual_cost": float(self.annual_cost),
            "duration": int(self.duration),
            "upgrades_included": int(self.upgrades_included),
            "customisation_points_included": int(self.customisation_points_included),
            "optimisation_included": bool(self.optimisation_included),
        }


NegotiationTerms = Union[DriverTerms, StaffTerms, SponsorTerms, SupplyTerms]

TERMS_BY_KIND: Mapping[str, type] = {
    "DRIVER": DriverTerms,
    "STAFF": StaffTerms,
    "SPONSOR": SponsorTerms,
    "MANUFACTURER": SupplyTerms,
}


# ---------------------------------------------------------------------------
# Session / rounds
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NegotiationRound:
    round_number: int
    offered_by: Proposer
    terms: NegotiationTerms
    is_ultimatum: bool = False


@dataclass(frozen=True, slots=True)
class NegotiationSession:
    """Immutable session snapshot. Counter-offers append a new round."""

    id: str
    kind: NegotiationKind
    team_id: str
    counterparty_id: str
    season: int
    phase: NegotiationPhase = "AWAITING_RESPONSE"
    rounds: Tuple[NegotiationRound, ...] = ()
    max_rounds: int = 4

    @property
    def round_count(self) -> int:
        if not self.rounds:
            return 0
        return int(self.rounds[-1].round_number)

    @property
    def last_round(self) -> Optional[NegotiationRound]:
        return self.rounds[-1] if self.rounds else None


# ---------------------------------------------------------------------------
# Evaluation outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Reason:
    code: str
    message: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "code": str(self.code),
            "message": str(self.message),
            "evidence": dict(self.evidence or {}),
        }


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    response_type: ResponseType
    tone: ResponseTone
    response_delay_days: int
    relationship_delta: int
    is_newsworthy: bool = False
    is_ultimatum: bool = False
    counter_terms: Optional[NegotiationTerms] = None

    reasons: List[Reason] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "response_type": str(self.response_type),
            "tone": str(self.tone),
            "response_delay_days": int(self.response_delay_days),
            "relationship_delta": int(self.relationship_delta),
            "is_newsworthy": bool(self.is_newsworthy),
            "is_ultimatum": bool(self.is_ultimatum),
            "counter_terms": self.counter_terms.to_payload() if self.counter_terms is not None else None,
            "reasons": [r.to_payload() for r in (self.reasons or [])],
            "meta": dict(self.meta or {}),
        }
        try:
            json_dumps(payload)
        except Exception:
            payload["meta"] = {"note": "meta_not_serializable"}
        return payload


@dataclass(frozen=True, slots=True)
class RankedDriver:
    driver: Driver
    attractiveness: float
    is_rookie: bool
    age: int


TeamInterestReason = Literal["UPGRADE", "CHEAPER", "VACANCY", "NOT_ON_SHORTLIST", "DOWNGRADE"]


@dataclass(frozen=True, slots=True)
class TeamInterestResult:
    interested: bool
    reason: TeamInterestReason
    approacher_attractiveness: float
    current_drivers_attractiveness: Tuple[float, ...] = ()


StaffApproachReason = Literal["FREE_AGENT", "SEEKING_UPGRADE", "NOT_INTERESTED"]


@dataclass(frozen=True, slots=True)
class StaffApproachResult:
    should_approach: bool
    reason: StaffApproachReason
    proposed_salary: float = 0.0
    proposed_duration: int = 0


@dataclass(frozen=True, slots=True)
class SponsorValuation:
    willing_payment: float
    # 0..1, higher => more risk shifted onto the team in counters.
    protection_level: float
    reputation_ratio: float
    is_below_soft_gate: bool
    is_below_hard_gate: bool
