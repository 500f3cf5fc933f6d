from __future__ import annotations

"""Engine manufacturer response to a team's supply offer.

Key mechanics
-------------
- Secret floor: every negotiation draws a minimum margin in [1.00, 1.15)
  seeded by its id, so re-evaluating the same session is stable while the
  player cannot read the floor from another session.
- Desperation (customers still to renew vs. unsigned teams) and strategic
  value (budget prestige) both lower the floor.
- Asking price starts at the ideal margin and concedes toward the floor each
  round, faster when the player concedes well and slower when the player
  stalls or goes backwards.
- Ultimatums: issued on aggressive play, repeated stalling or a long
  negotiation. Answering an ultimatum is a plain accept/reject at the floor.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Literal, Sequence

from ..config import DEFAULT_CONFIG, NegotiationConfig
from ..errors import NEGOTIATION_TERMS_MISMATCH, NegotiationError
from ..types import (
    ActiveManufacturerContract,
    EvaluationResult,
    Manufacturer,
    NegotiationRound,
    NegotiationSession,
    Reason,
    ResponseTone,
    SupplyTerms,
    Team,
)
from ..utils import clamp01, rolling_hash32, safe_float, safe_int
from ..valuation import team_prestige

logger = logging.getLogger(__name__)


NegotiationPattern = Literal[
    "FIRST_OFFER",
    "COOPERATIVE",
    "STUBBORN",
    "AGGRESSIVE",
    "GOOD_CONCESSION",
    "GREAT_CONCESSION",
    "RESPONDED_TO_ULTIMATUM",
]

_INT32_MAX = 2147483647


@dataclass(frozen=True, slots=True)
class ManufacturerEvaluationInput:
    session: NegotiationSession
    manufacturer: Manufacturer
    team: Team
    teams: Sequence[Team]
    relationship_score: float  # 0..100
    secured_team_ids: Sequence[str]
    active_contracts: Sequence[ActiveManufacturerContract]


# -----------------------------------------------------------------------------
# Pricing
# -----------------------------------------------------------------------------


def secret_minimum_margin(session_id: str, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> float:
    mcfg = cfg.manufacturer
    normalized = clamp01(abs(rolling_hash32(session_id)) / float(_INT32_MAX))
    return float(mcfg.min_margin_floor) + normalized * (
        float(mcfg.min_margin_ceiling) - float(mcfg.min_margin_floor)
    )


def supply_cost(
    manufacturer: Manufacturer,
    terms: SupplyTerms,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    """Manufacturer's own cost for the whole contract."""
    costs = manufacturer.costs
    yearly = (
        safe_float(costs.base_engine, 0.0) * int(cfg.manufacturer.engines_per_season)
        + safe_float(costs.upgrade, 0.0) * safe_int(terms.upgrades_included, 0)
        + safe_float(costs.customisation_point, 0.0) * safe_int(terms.customisation_points_included, 0)
        + (safe_float(costs.optimisation, 0.0) if terms.optimisation_included else 0.0)
    )
    return yearly * safe_int(terms.duration, 1)


def floor_price(
    cost: float,
    secret_margin: float,
    desperation: float,
    strategic_value: float,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    mcfg = cfg.manufacturer
    desperation_discount = float(desperation) * float(mcfg.max_desperation_discount)
    strategic_discount = (
        float(mcfg.strategic_value_discount) if strategic_value > float(mcfg.strategic_value_threshold) else 0.0
    )
    margin = max(1.0, float(secret_margin) - desperation_discount - strategic_discount)
    return float(cost) * margin


def desperation(
    manufacturer_id: str,
    teams: Sequence[Team],
    secured_team_ids: Sequence[str],
    active_contracts: Sequence[ActiveManufacturerContract],
) -> float:
    """0..1 pressure from customers that have not renewed yet."""
    secured = set(secured_team_ids)
    customers = {c.team_id for c in active_contracts if c.manufacturer_id == manufacturer_id}

    secured_count = sum(1 for t in teams if t.id in secured and t.id in customers)
    unsigned_count = sum(1 for t in teams if t.id not in secured)
    needed = len(customers) - secured_count

    if needed <= 0:
        return 0.0
    if unsigned_count <= needed:
        return min(1.0, needed / float(max(1, unsigned_count)))
    return max(0.0, (needed / float(unsigned_count)) * 0.5)


# -----------------------------------------------------------------------------
# Pattern detection
# -----------------------------------------------------------------------------


def _player_offers(rounds: Sequence[NegotiationRound]) -> list[float]:
    return [safe_float(r.terms.annual_cost, 0.0) for r in rounds if r.offered_by == "PLAYER"]


def detect_pattern(
    rounds: Sequence[NegotiationRound],
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> NegotiationPattern:
    """Classify the player's latest move against their previous one."""
    if len(rounds) <= 1:
        return "FIRST_OFFER"

    offers = _player_offers(rounds)
    if len(offers) < 2:
        return "FIRST_OFFER"

    counters = [r for r in rounds if r.offered_by == "COUNTERPARTY"]
    if counters and counters[-1].is_ultimatum:
        return "RESPONDED_TO_ULTIMATUM"

    last, prev = offers[-1], offers[-2]
    if last == prev:
        return "STUBBORN"
    if last < prev:
        return "AGGRESSIVE"
    if not counters:
        return "COOPERATIVE"

    gap = safe_float(counters[-1].terms.annual_cost, 0.0) - prev
    if gap <= 0:
        return "COOPERATIVE"

    concession = (last - prev) / gap
    if concession >= float(cfg.manufacturer.great_concession_pct):
        return "GREAT_CONCESSION"
    if concession >= float(cfg.manufacturer.good_concession_pct):
        return "GOOD_CONCESSION"
    return "COOPERATIVE"


def count_stubborn_rounds(rounds: Sequence[NegotiationRound]) -> int:
    offers = _player_offers(rounds)
    return sum(1 for i in range(1, len(offers)) if offers[i] == offers[i - 1])


# -----------------------------------------------------------------------------
# Price points per round
# -----------------------------------------------------------------------------


def target_price(
    cost: float,
    secret_margin: float,
    round_number: int,
    desperation_level: float,
    strategic_value: float,
    pattern: NegotiationPattern,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    """Asking price: ideal margin conceding toward the floor round by round."""
    mcfg = cfg.manufacturer
    ideal = float(cost) * float(mcfg.ideal_margin)
    comfortable = float(cost) * float(mcfg.comfortable_margin)
    floor = floor_price(cost, secret_margin, desperation_level, strategic_value, cfg=cfg)

    mult = float(mcfg.pattern_concession_multipliers.get(pattern, 1.0))
    conceded = min(1.0, (int(round_number) - 1) * float(mcfg.base_concession_rate) * mult)
    target = ideal - conceded * (ideal - floor)

    # Only pressure or a marquee customer pushes the ask below comfortable.
    if desperation_level < float(mcfg.desperation_threshold) and strategic_value < float(
        mcfg.strategic_value_threshold
    ):
        return max(target, comfortable)
    return max(target, floor)


def acceptance_threshold(
    cost: float,
    secret_margin: float,
    round_number: int,
    desperation_level: float,
    strategic_value: float,
    pattern: NegotiationPattern,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    mcfg = cfg.manufacturer
    comfortable = float(cost) * float(mcfg.comfortable_margin)
    floor = floor_price(cost, secret_margin, desperation_level, strategic_value, cfg=cfg)

    round_factor = min(1.0, (int(round_number) - 1) / float(mcfg.round_factor_divisor))
    threshold = comfortable - round_factor * (comfortable - floor)
    if pattern == "GREAT_CONCESSION":
        threshold = max(floor, threshold * float(mcfg.great_concession_threshold_multiplier))
    return max(floor, threshold)


def _tone(relationship_score: float, pattern: NegotiationPattern, *, cfg: NegotiationConfig) -> ResponseTone:
    mcfg = cfg.manufacturer
    if pattern == "AGGRESSIVE":
        return "INSULTED"
    if pattern == "STUBBORN":
        return "DISAPPOINTED"
    if pattern == "GREAT_CONCESSION":
        return "ENTHUSIASTIC"
    if relationship_score >= float(mcfg.warm_relationship_threshold):
        return "ENTHUSIASTIC"
    if relationship_score <= float(mcfg.cold_relationship_threshold):
        return "DISAPPOINTED"
    return "PROFESSIONAL"


def response_delay_days(
    relationship_score: float,
    strategic_value: float,
    is_ultimatum: bool,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> int:
    mcfg = cfg.manufacturer
    if is_ultimatum:
        return int(mcfg.min_response_delay_days)
    delay = (
        int(mcfg.base_response_delay_days)
        - int(math.floor(safe_float(relationship_score, 0.0) / 50.0))
        - int(math.floor(float(strategic_value) * 2.0))
    )
    return max(int(mcfg.min_response_delay_days), min(delay, int(mcfg.max_response_delay_days)))


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------


def evaluate_manufacturer_offer(
    inp: ManufacturerEvaluationInput,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> EvaluationResult:
    mcfg = cfg.manufacturer
    rounds = inp.session.rounds
    current = inp.session.last_round

    if current is None:
        return EvaluationResult(
            response_type="REJECT",
            tone="DISAPPOINTED",
            response_delay_days=int(mcfg.base_response_delay_days),
            relationship_delta=int(mcfg.reject_relationship_delta),
            reasons=[Reason("NO_OFFER", "There is no offer on the table.")],
        )

    terms = current.terms
    if not isinstance(terms, SupplyTerms):
        raise NegotiationError(
            NEGOTIATION_TERMS_MISMATCH,
            "Manufacturer negotiation received non-supply terms",
            {"session_id": inp.session.id, "terms_kind": getattr(terms, "kind", None)},
        )

    duration = max(1, safe_int(terms.duration, 1))
    offered_total = safe_float(terms.annual_cost, 0.0) * duration
    round_number = int(current.round_number)
    relationship = safe_float(inp.relationship_score, 50.0)

    cost = supply_cost(inp.manufacturer, terms, cfg=cfg)
    margin = secret_minimum_margin(inp.session.id, cfg=cfg)
    pressure = desperation(inp.manufacturer.id, inp.teams, inp.secured_team_ids, inp.active_contracts)
    strategic = team_prestige(inp.team, inp.teams, cfg=cfg.valuation)
    pattern = detect_pattern(rounds, cfg=cfg)
    stubborn = count_stubborn_rounds(rounds)
    floor = floor_price(cost, margin, pressure, strategic, cfg=cfg)
    threshold = acceptance_threshold(cost, margin, round_number, pressure, strategic, pattern, cfg=cfg)
    is_strategic = strategic > float(mcfg.strategic_value_threshold)

    meta: Dict[str, Any] = {
        "cost": float(cost),
        "offered_total": float(offered_total),
        "desperation": float(pressure),
        "strategic_value": float(strategic),
        "pattern": str(pattern),
        "stubborn_rounds": int(stubborn),
        "acceptance_threshold": float(threshold),
        "round_number": round_number,
    }

    def _accept(tone: ResponseTone, delay: int, code: str) -> EvaluationResult:
        return EvaluationResult(
            response_type="ACCEPT",
            tone=tone,
            response_delay_days=delay,
            relationship_delta=int(mcfg.accept_relationship_delta),
            is_newsworthy=is_strategic,
            reasons=[Reason(code, "Offer covers the manufacturer's price.", {"offered_total": offered_total})],
            meta=meta,
        )

    def _reject(code: str) -> EvaluationResult:
        return EvaluationResult(
            response_type="REJECT",
            tone="DISAPPOINTED",
            response_delay_days=int(mcfg.min_response_delay_days),
            relationship_delta=int(mcfg.reject_relationship_delta),
            reasons=[Reason(code, "Offer does not cover the manufacturer's price.", {"offered_total": offered_total})],
            meta=meta,
        )

    if pattern == "RESPONDED_TO_ULTIMATUM":
        if offered_total >= floor:
            return _accept("PROFESSIONAL", int(mcfg.min_response_delay_days), "ULTIMATUM_MET")
        return _reject("ULTIMATUM_NOT_MET")

    if current.is_ultimatum:
        if offered_total >= threshold:
            return _accept(_tone(relationship, pattern, cfg=cfg), int(mcfg.min_response_delay_days), "FINAL_OFFER_ACCEPTED")
        return _reject("FINAL_OFFER_REJECTED")

    if offered_total >= threshold:
        return _accept(
            _tone(relationship, pattern, cfg=cfg),
            response_delay_days(relationship, strategic, False, cfg=cfg),
            "OFFER_ACCEPTED",
        )

    issue_ultimatum = (
        pattern == "AGGRESSIVE"
        or stubborn >= int(mcfg.stubborn_rounds_before_ultimatum)
        or round_number >= int(mcfg.max_rounds_before_ultimatum)
    )
    target = target_price(cost, margin, round_number, pressure, strategic, pattern, cfg=cfg)
    counter = SupplyTerms(
        annual_cost=float(math.ceil(target / duration)),
        duration=int(terms.duration),
        upgrades_included=int(terms.upgrades_included),
        customisation_points_included=int(terms.customisation_points_included),
        optimisation_included=bool(terms.optimisation_included),
    )
    meta["target_price"] = float(target)

    logger.debug(
        "manufacturer counter manufacturer=%s team=%s pattern=%s target=%.0f ultimatum=%s",
        inp.manufacturer.id,
        inp.team.id,
        pattern,
        target,
        issue_ultimatum,
    )

    if issue_ultimatum:
        reason = Reason("FINAL_PRICE", "Manufacturer names its final price.", {"pattern": pattern, "stubborn_rounds": stubborn})
    else:
        reason = Reason("PRICE_COUNTER", "Manufacturer asks for a higher price.", {"pattern": pattern})

    return EvaluationResult(
        response_type="COUNTER",
        tone=_tone(relationship, pattern, cfg=cfg),
        response_delay_days=response_delay_days(relationship, strategic, issue_ultimatum, cfg=cfg),
        relationship_delta=int(mcfg.ultimatum_relationship_delta) if issue_ultimatum else 0,
        is_ultimatum=issue_ultimatum,
        counter_terms=counter,
        reasons=[reason],
        meta=meta,
    )
