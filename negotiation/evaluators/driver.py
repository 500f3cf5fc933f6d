from __future__ import annotations

"""Driver response to a team's contract offer.

Required salary = market value x team-quality multiplier, where the multiplier
grows when the driver is better than the team deserves (up to 5x) and shrinks
when the team is better than the driver (down to 0.2x). The offered/required
ratio is then bucketed against ordered thresholds.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..config import DEFAULT_CONFIG, NegotiationConfig
from ..types import Driver, DriverTerms, EvaluationResult, MarketContext, Reason, ResponseTone, Team
from ..utils import round_money, safe_float, safe_int
from ..valuation import career_weight, driver_ability, driver_age, market_value, team_quality

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DriverEvaluationInput:
    driver: Driver
    offering_team: Team
    offered_salary: float
    offered_duration: int
    market: MarketContext
    current_round: int = 1
    max_rounds: int = 4


def team_quality_multiplier(
    ability: float,
    quality: float,
    weight: float,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    """Salary multiplier from the ability/quality gap, dampened for veterans."""
    dcfg = cfg.driver
    gap = float(ability) - float(quality)
    adjusted = gap * (1.0 - float(weight) * float(dcfg.career_gap_damping))

    if adjusted > 0:
        return 1.0 + adjusted * (float(dcfg.max_team_quality_multiplier) - 1.0)
    return 1.0 - (-adjusted) * (1.0 - float(dcfg.min_team_quality_multiplier))


def required_salary(inp: DriverEvaluationInput, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> Dict[str, float]:
    """Market value, multiplier and required salary for this driver/team pair."""
    market = inp.market
    mv = market_value(inp.driver, market.drivers, cfg=cfg.valuation)
    ability = driver_ability(inp.driver, cfg=cfg.valuation)
    quality = team_quality(inp.offering_team, market.standings, market.total_teams, cfg=cfg.valuation)
    age = driver_age(inp.driver, market.game_year)
    weight = career_weight(age, cfg=cfg.driver)
    mult = team_quality_multiplier(ability, quality, weight, cfg=cfg)
    return {
        "market_value": float(mv),
        "driver_ability": float(ability),
        "team_quality": float(quality),
        "age": float(age),
        "career_weight": float(weight),
        "multiplier": float(mult),
        "required_salary": float(mv) * float(mult),
    }


def _tone(ratio: float, *, cfg: NegotiationConfig) -> ResponseTone:
    if ratio >= float(cfg.driver.accept_ratio):
        return "ENTHUSIASTIC"
    if ratio >= float(cfg.driver.counter_ratio):
        return "PROFESSIONAL"
    return "DISAPPOINTED"


def evaluate_driver_offer(
    inp: DriverEvaluationInput,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> EvaluationResult:
    """Evaluate a contract offer from the driver's perspective."""
    dcfg = cfg.driver
    numbers = required_salary(inp, cfg=cfg)
    required = float(numbers["required_salary"])
    offered = safe_float(inp.offered_salary, 0.0)
    ratio = offered / required if required > 0 else 0.0

    seats = safe_int(inp.market.available_seats, 0)
    is_desperate = seats <= int(dcfg.desperation_seat_threshold)
    is_late_round = safe_int(inp.current_round, 1) >= safe_int(inp.max_rounds, 4) - 1

    meta: Dict[str, Any] = dict(numbers)
    meta.update(
        {
            "offered_salary": float(offered),
            "salary_ratio": float(ratio),
            "available_seats": int(seats),
            "is_desperate": bool(is_desperate),
            "is_late_round": bool(is_late_round),
        }
    )

    reasons: List[Reason] = []
    counter_salary: Optional[int] = None
    is_ultimatum = False

    if ratio >= float(dcfg.instant_accept_ratio):
        response = "ACCEPT"
        reasons.append(Reason("OFFER_FAR_ABOVE_REQUIRED", "Offer is far above what the driver needs.", {"ratio": ratio}))
    elif ratio >= float(dcfg.accept_ratio):
        if bool(dcfg.counter_good_offers_when_many_seats) and seats > int(dcfg.many_seats_threshold):
            response = "COUNTER"
            counter_salary = round_money(required * float(dcfg.counter_ask_multiplier))
            reasons.append(
                Reason(
                    "MANY_ALTERNATIVES",
                    "Offer is fair, but plenty of seats are still open.",
                    {"ratio": ratio, "available_seats": seats},
                )
            )
        else:
            response = "ACCEPT"
            reasons.append(Reason("OFFER_MEETS_REQUIRED", "Offer meets the driver's required salary.", {"ratio": ratio}))
    elif ratio >= float(dcfg.counter_ratio):
        response = "COUNTER"
        counter_salary = round_money(required)
        is_ultimatum = bool(is_late_round or is_desperate)
        reasons.append(
            Reason(
                "BELOW_REQUIRED_COUNTER",
                "Offer is below expectations; driver asks for the required salary.",
                {"ratio": ratio, "required_salary": required},
            )
        )
    elif ratio >= float(dcfg.desperate_accept_ratio) and is_desperate:
        response = "ACCEPT"
        reasons.append(
            Reason(
                "DESPERATE_ACCEPT",
                "Low offer, but too few seats remain to turn it down.",
                {"ratio": ratio, "available_seats": seats},
            )
        )
    else:
        response = "REJECT"
        reasons.append(Reason("OFFER_TOO_LOW", "Offer is too far below the required salary.", {"ratio": ratio}))

    if response == "ACCEPT":
        delta = int(dcfg.accept_relationship_delta)
    elif response == "REJECT":
        delta = int(dcfg.reject_relationship_delta)
    else:
        delta = 0

    counter_terms = None
    if counter_salary:
        counter_terms = DriverTerms(salary=float(counter_salary), duration=int(inp.offered_duration))

    logger.debug(
        "driver offer evaluated driver=%s team=%s ratio=%.3f response=%s",
        inp.driver.id,
        inp.offering_team.id,
        ratio,
        response,
    )

    return EvaluationResult(
        response_type=response,
        tone=_tone(ratio, cfg=cfg),
        response_delay_days=int(dcfg.base_response_delay_days),
        relationship_delta=delta,
        is_newsworthy=response == "ACCEPT",
        is_ultimatum=is_ultimatum,
        counter_terms=counter_terms,
        reasons=reasons,
        meta=meta,
    )
