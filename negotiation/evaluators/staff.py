from __future__ import annotations

"""Department chief response to a contract offer, plus scouting and outreach.

Key mechanics
-------------
- Scouting: the player sees a letter grade (A+ .. F-) computed from true
  ability plus a +/-15 point error seeded by (viewer, chief). Same viewer,
  same chief => same grade, every time.
- Market salary: convex curve floor + (ability/100)^2.5 * (ceiling - floor),
  then a per-chief +/-15% "greediness" seeded by chief id.
- Career progression: mid-ability chiefs (50..85) take up to 20% less to join
  a prestigious (high-budget) team.
- Buyouts are paid automatically when poaching and never negotiated.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config import DEFAULT_CONFIG, NegotiationConfig
from ..types import (
    Chief,
    ChiefRole,
    EvaluationResult,
    Reason,
    ResponseTone,
    StaffApproachResult,
    StaffTerms,
    Team,
)
from ..utils import clamp, round_money, safe_float, safe_int, seeded_signed
from ..valuation import team_prestige

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Letter grade scouting
# -----------------------------------------------------------------------------

LETTER_GRADES: Tuple[str, ...] = (
    "A+", "A", "A-",
    "B+", "B", "B-",
    "C+", "C", "C-",
    "D+", "D", "D-",
    "F+", "F", "F-",
)

# ~100 / 15 grades
GRADE_BAND_WIDTH = 6.67


def perceived_ability(
    true_ability: float,
    viewer: str,
    chief_id: str,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    error = seeded_signed(viewer, chief_id) * float(cfg.staff.scouting_error_range) * 100.0
    return clamp(safe_float(true_ability, 0.0) + error, 0.0, 100.0)


def ability_to_letter_grade(ability: float) -> str:
    idx = int(math.floor((100.0 - float(ability)) / GRADE_BAND_WIDTH))
    idx = max(0, min(len(LETTER_GRADES) - 1, idx))
    return LETTER_GRADES[idx]


def chief_letter_grade(chief: Chief, viewer: str, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> str:
    """What the given viewer sees for this chief."""
    return ability_to_letter_grade(perceived_ability(chief.ability, viewer, chief.id, cfg=cfg))


def all_letter_grades() -> Tuple[str, ...]:
    return LETTER_GRADES


_ROLE_DISPLAY_NAMES: Dict[str, str] = {
    "DESIGNER": "Chief Designer",
    "ENGINEER": "Chief Engineer",
    "MECHANIC": "Chief Mechanic",
    "COMMERCIAL": "Chief Commercial",
}


def chief_role_display_name(role: ChiefRole) -> str:
    return _ROLE_DISPLAY_NAMES.get(str(role), "Chief")


# -----------------------------------------------------------------------------
# Market salary
# -----------------------------------------------------------------------------


def base_market_salary(ability: float, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> int:
    scfg = cfg.staff
    norm = clamp(safe_float(ability, 0.0) / 100.0, 0.0, 1.0)
    factor = norm ** float(scfg.market_salary_exponent)
    return round_money(
        float(scfg.market_salary_floor)
        + factor * (float(scfg.market_salary_ceiling) - float(scfg.market_salary_floor))
    )


def expected_salary(chief: Chief, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> int:
    """Market salary with per-chief greediness."""
    greed = 1.0 + seeded_signed("greed", chief.id) * float(cfg.staff.greediness_variance)
    return round_money(base_market_salary(chief.ability, cfg=cfg) * greed)


def career_progression_multiplier(
    ability: float,
    prestige: float,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    """0.8..1.0; only mid-ability chiefs discount for a prestigious team."""
    scfg = cfg.staff
    lo = float(scfg.mid_ability_low)
    hi = float(scfg.mid_ability_high)
    a = safe_float(ability, 0.0)
    if a < lo or a > hi:
        return 1.0
    ability_factor = (a - lo) / (hi - lo)
    max_discount = float(scfg.max_career_discount) * (1.0 - ability_factor)
    return 1.0 - max_discount * float(prestige)


# -----------------------------------------------------------------------------
# Offer evaluation
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StaffEvaluationInput:
    chief: Chief
    offering_team: Team
    terms: StaffTerms
    teams: Sequence[Team]
    current_round: int = 1
    max_rounds: int = 4


def _tone(ratio: float, *, cfg: NegotiationConfig) -> ResponseTone:
    if ratio >= float(cfg.staff.accept_ratio):
        return "ENTHUSIASTIC"
    if ratio >= float(cfg.staff.counter_ratio):
        return "PROFESSIONAL"
    return "DISAPPOINTED"


def evaluate_staff_offer(
    inp: StaffEvaluationInput,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> EvaluationResult:
    scfg = cfg.staff
    terms = inp.terms
    chief = inp.chief

    expected = expected_salary(chief, cfg=cfg)
    prestige = team_prestige(inp.offering_team, inp.teams, cfg=cfg.valuation)
    career_mult = career_progression_multiplier(chief.ability, prestige, cfg=cfg)
    adjusted_expected = round_money(expected * career_mult)

    offered = safe_float(terms.salary, 0.0)
    duration = max(1, safe_int(terms.duration, 1))
    salary_ratio = offered / adjusted_expected if adjusted_expected > 0 else 0.0

    # Signing bonus amortized over the contract, worth half an equal salary.
    bonus_per_year = safe_float(terms.signing_bonus, 0.0) / float(duration)
    effective_salary = offered + bonus_per_year * float(scfg.signing_bonus_weight)
    effective_ratio = effective_salary / adjusted_expected if adjusted_expected > 0 else 0.0

    duration_penalty = float(scfg.long_contract_penalty) if duration > int(scfg.preferred_max_duration) else 0.0
    final_ratio = effective_ratio - duration_penalty

    is_late_round = safe_int(inp.current_round, 1) >= safe_int(inp.max_rounds, 4) - 1

    meta: Dict[str, Any] = {
        "expected_salary": float(expected),
        "team_prestige": float(prestige),
        "career_multiplier": float(career_mult),
        "adjusted_expected_salary": float(adjusted_expected),
        "salary_ratio": float(salary_ratio),
        "effective_ratio": float(effective_ratio),
        "duration_penalty": float(duration_penalty),
        "final_ratio": float(final_ratio),
    }

    reasons: List[Reason] = []
    counter_terms: Optional[StaffTerms] = None
    is_ultimatum = False

    if final_ratio >= float(scfg.instant_accept_ratio):
        response = "ACCEPT"
        reasons.append(Reason("OFFER_FAR_ABOVE_EXPECTED", "Offer is well above expectations.", {"ratio": final_ratio}))
    elif final_ratio >= float(scfg.accept_ratio):
        response = "ACCEPT"
        reasons.append(Reason("OFFER_MEETS_EXPECTED", "Offer meets expectations.", {"ratio": final_ratio}))
    elif final_ratio >= float(scfg.counter_ratio):
        response = "COUNTER"
        if salary_ratio > float(scfg.bonus_counter_salary_ratio):
            counter_salary = offered
            counter_bonus = float(round_money(expected * float(scfg.good_signing_bonus_ratio)))
            reasons.append(
                Reason(
                    "ASK_SIGNING_BONUS",
                    "Salary is close; chief asks for a better signing bonus.",
                    {"salary_ratio": salary_ratio, "signing_bonus": counter_bonus},
                )
            )
        else:
            counter_salary = float(adjusted_expected)
            counter_bonus = safe_float(terms.signing_bonus, 0.0)
            reasons.append(
                Reason(
                    "ASK_SALARY",
                    "Salary is below expectations.",
                    {"salary_ratio": salary_ratio, "salary": counter_salary},
                )
            )
        is_ultimatum = bool(is_late_round)
        counter_terms = StaffTerms(
            salary=float(counter_salary),
            duration=int(terms.duration),
            signing_bonus=float(counter_bonus),
            bonus_percent=float(terms.bonus_percent),
            buyout_required=float(terms.buyout_required),
        )
    else:
        response = "REJECT"
        reasons.append(Reason("OFFER_TOO_LOW", "Offer is too far below expectations.", {"ratio": final_ratio}))

    if response == "ACCEPT":
        delta = int(scfg.accept_relationship_delta)
    elif response == "REJECT":
        delta = int(scfg.reject_relationship_delta)
    else:
        delta = 0

    logger.debug(
        "staff offer evaluated chief=%s team=%s ratio=%.3f response=%s",
        chief.id,
        inp.offering_team.id,
        final_ratio,
        response,
    )

    return EvaluationResult(
        response_type=response,
        tone=_tone(final_ratio, cfg=cfg),
        response_delay_days=int(scfg.base_response_delay_days),
        relationship_delta=delta,
        is_newsworthy=response == "ACCEPT" and safe_float(chief.ability, 0.0) >= float(scfg.newsworthy_ability),
        is_ultimatum=is_ultimatum,
        counter_terms=counter_terms,
        reasons=reasons,
        meta=meta,
    )


# -----------------------------------------------------------------------------
# Proactive outreach
# -----------------------------------------------------------------------------


def evaluate_staff_approach(
    chief: Chief,
    target_team: Team,
    teams: Sequence[Team],
    chiefs: Sequence[Chief],
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> StaffApproachResult:
    """Should this chief reach out to the target team?

    Free agents approach teams above the prestige threshold; employed chiefs
    only approach clearly more prestigious teams. Either way the target's
    seat for this role must be empty or held by a materially weaker chief.
    """
    scfg = cfg.staff
    target_prestige = team_prestige(target_team, teams, cfg=cfg.valuation)
    expected = expected_salary(chief, cfg=cfg)

    incumbent = next(
        (c for c in chiefs if c.team_id == target_team.id and c.role == chief.role and c.id != chief.id),
        None,
    )
    seat_open = incumbent is None or safe_float(incumbent.ability, 0.0) < safe_float(chief.ability, 0.0) - float(
        scfg.ability_upgrade_threshold
    )

    not_interested = StaffApproachResult(should_approach=False, reason="NOT_INTERESTED")

    if not chief.team_id:
        if not seat_open:
            return not_interested
        return StaffApproachResult(
            should_approach=target_prestige > float(scfg.approach_prestige_threshold),
            reason="FREE_AGENT",
            proposed_salary=float(expected),
            proposed_duration=int(scfg.approach_duration_years),
        )

    current_team = next((t for t in teams if t.id == chief.team_id), None)
    if current_team is None:
        return not_interested

    current_prestige = team_prestige(current_team, teams, cfg=cfg.valuation)
    if target_prestige > current_prestige + float(scfg.prestige_upgrade_threshold) and seat_open:
        return StaffApproachResult(
            should_approach=True,
            reason="SEEKING_UPGRADE",
            proposed_salary=float(expected),
            proposed_duration=int(scfg.approach_duration_years),
        )
    return not_interested
