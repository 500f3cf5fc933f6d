from __future__ import annotations

"""Sponsor response to a team's sponsorship offer.

Key mechanics
-------------
- Rival groups: two sponsors sharing a rival group can never both back the
  same team. Checked first; always fatal, never costs relationship.
- Reputation gates (effective reputation comes from standings position):
    hard gate (< 70% of min reputation) => reject
    soft gate (< 90% of min reputation) => no reject, but a protection level
    (0..1) makes counters shift risk onto the team.
- Counters cut the fixed annual payment and raise tier-scaled points/win
  bonuses, shorten the deal for risky teams and add an exit clause below the
  soft gate.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from ..config import DEFAULT_CONFIG, NegotiationConfig
from ..errors import NEGOTIATION_TERMS_MISMATCH, NegotiationError
from ..types import (
    ActiveSponsorDeal,
    EvaluationResult,
    NegotiationSession,
    Reason,
    Sponsor,
    SponsorPlacement,
    SponsorTerms,
    SponsorTier,
    SponsorValuation,
    Team,
)
from ..utils import clamp01, round_money, safe_float, safe_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SponsorEvaluationInput:
    session: NegotiationSession
    sponsor: Sponsor
    team: Team
    sponsors: Sequence[Sponsor]
    # Active deals held by the offering team.
    existing_deals: Sequence[ActiveSponsorDeal]
    relationship_score: float  # 0..100
    team_position: int  # 1-indexed
    total_teams: int


def has_rival_group_conflict(
    rival_group: Optional[str],
    existing_deals: Sequence[ActiveSponsorDeal],
    sponsors: Sequence[Sponsor],
) -> bool:
    if not rival_group:
        return False
    by_id = {s.id: s for s in sponsors}
    for deal in existing_deals:
        existing = by_id.get(deal.sponsor_id)
        if existing is not None and existing.rival_group == rival_group:
            return True
    return False


def sponsor_valuation(
    sponsor: Sponsor,
    team_position: int,
    total_teams: int,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> SponsorValuation:
    """What the sponsor would pay this team and how protective its terms get."""
    scfg = cfg.sponsor
    span = (int(total_teams) - 1) or 1
    position_score = 1.0 - (int(team_position) - 1) / float(span)
    effective_reputation = position_score * 100.0

    min_rep = safe_float(sponsor.min_reputation, 0.0)
    # A sponsor without a reputation floor treats every team as premium.
    ratio = effective_reputation / min_rep if min_rep > 0 else float("inf")

    below_hard = ratio < float(scfg.hard_gate_multiplier)
    below_soft = ratio < float(scfg.soft_gate_multiplier)

    base = safe_float(sponsor.payment, 0.0)
    willing = base
    if ratio >= float(scfg.premium_reputation_threshold):
        premium = min(ratio - 1.0, float(scfg.max_premium_multiplier) - 1.0)
        willing = base * (1.0 + premium)
    elif ratio < 1.0:
        willing = base * max(ratio, float(scfg.discount_multiplier_floor))

    protection = 0.0
    if below_soft:
        protection = min(
            1.0,
            (float(scfg.soft_gate_multiplier) - ratio)
            / (float(scfg.soft_gate_multiplier) - float(scfg.hard_gate_multiplier)),
        )

    return SponsorValuation(
        willing_payment=float(round_money(willing)),
        protection_level=clamp01(protection),
        reputation_ratio=float(ratio),
        is_below_soft_gate=bool(below_soft),
        is_below_hard_gate=bool(below_hard),
    )


def tier_bonuses(tier: SponsorTier, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> tuple[float, float]:
    """(points bonus, win bonus) for the tier; unknown tiers pay minor rates."""
    table = cfg.sponsor.tier_bonuses
    points, win = table.get(str(tier), table["MINOR"])
    return float(points), float(win)


def build_counter_terms(
    current: SponsorTerms,
    sponsor: Sponsor,
    valuation: SponsorValuation,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> SponsorTerms:
    """Shift risk to the team: less fixed money, more performance money."""
    scfg = cfg.sponsor
    protection = float(valuation.protection_level)

    reduction = float(scfg.base_payment_reduction) * (1.0 + protection)
    payment = round_money(float(valuation.willing_payment) * (1.0 - reduction))

    points, win = tier_bonuses(sponsor.tier, cfg=cfg)
    bonus_mult = 1.0 + protection * float(scfg.max_bonus_protection_scale)

    exit_clause: Optional[int] = None
    if valuation.is_below_soft_gate:
        exit_clause = round_money(
            int(scfg.base_exit_clause_position)
            + protection * (int(scfg.max_exit_clause_position) - int(scfg.base_exit_clause_position))
        )

    duration = safe_int(current.duration, 1)
    if protection > 0.5:
        duration = min(duration, 1)
    elif protection > 0:
        duration = min(duration, 2)
    duration = min(duration, int(scfg.max_contract_duration))

    return SponsorTerms(
        annual_payment=float(payment),
        duration=int(duration),
        placement=current.placement,
        points_bonus=float(round_money(points * bonus_mult)),
        win_bonus=float(round_money(win * bonus_mult)),
        exit_clause_position=exit_clause,
    )


def response_delay_days(relationship_score: float, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> int:
    """Better relationship => faster answer."""
    scfg = cfg.sponsor
    bonus = int(safe_float(relationship_score, 0.0) // int(scfg.relationship_delay_step))
    return max(
        int(scfg.min_response_delay_days),
        min(int(scfg.base_response_delay_days) - bonus, int(scfg.max_response_delay_days)),
    )


def evaluate_sponsor_offer(
    inp: SponsorEvaluationInput,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> EvaluationResult:
    scfg = cfg.sponsor
    sponsor = inp.sponsor

    current = inp.session.last_round
    if current is None:
        return EvaluationResult(
            response_type="REJECT",
            tone="DISAPPOINTED",
            response_delay_days=int(scfg.base_response_delay_days),
            relationship_delta=int(scfg.reject_relationship_delta),
            reasons=[Reason("NO_OFFER", "There is no offer on the table.")],
        )

    terms = current.terms
    if not isinstance(terms, SponsorTerms):
        raise NegotiationError(
            NEGOTIATION_TERMS_MISMATCH,
            "Sponsor negotiation received non-sponsor terms",
            {"session_id": inp.session.id, "terms_kind": getattr(terms, "kind", None)},
        )

    if has_rival_group_conflict(sponsor.rival_group, inp.existing_deals, inp.sponsors):
        return EvaluationResult(
            response_type="REJECT",
            tone="PROFESSIONAL",
            response_delay_days=int(scfg.min_response_delay_days),
            relationship_delta=0,
            reasons=[
                Reason(
                    "RIVAL_GROUP_CONFLICT",
                    "Team already carries a competing brand.",
                    {"rival_group": sponsor.rival_group},
                )
            ],
        )

    valuation = sponsor_valuation(sponsor, inp.team_position, inp.total_teams, cfg=cfg)
    meta: Dict[str, Any] = {
        "willing_payment": float(valuation.willing_payment),
        "protection_level": float(valuation.protection_level),
        "reputation_ratio": float(valuation.reputation_ratio),
        "below_soft_gate": bool(valuation.is_below_soft_gate),
        "below_hard_gate": bool(valuation.is_below_hard_gate),
        "round_number": int(current.round_number),
    }

    if valuation.is_below_hard_gate:
        return EvaluationResult(
            response_type="REJECT",
            tone="PROFESSIONAL",
            response_delay_days=int(scfg.min_response_delay_days),
            relationship_delta=int(scfg.reject_relationship_delta),
            reasons=[
                Reason(
                    "BELOW_REPUTATION_GATE",
                    "Team's standing is far below what this sponsor requires.",
                    {"reputation_ratio": valuation.reputation_ratio},
                )
            ],
            meta=meta,
        )

    offered = safe_float(terms.annual_payment, 0.0)
    willing = float(valuation.willing_payment)
    ratio = offered / willing if willing > 0 else float("inf")
    meta["payment_ratio"] = float(ratio)
    is_title = str(sponsor.tier) == "TITLE"

    if current.is_ultimatum:
        if ratio >= float(scfg.reject_ratio):
            return EvaluationResult(
                response_type="ACCEPT",
                tone="PROFESSIONAL",
                response_delay_days=int(scfg.min_response_delay_days),
                relationship_delta=int(scfg.accept_relationship_delta),
                is_newsworthy=is_title,
                reasons=[Reason("ULTIMATUM_ACCEPTED", "Final offer is acceptable.", {"payment_ratio": ratio})],
                meta=meta,
            )
        return EvaluationResult(
            response_type="REJECT",
            tone="DISAPPOINTED",
            response_delay_days=int(scfg.min_response_delay_days),
            relationship_delta=int(scfg.reject_relationship_delta),
            reasons=[Reason("ULTIMATUM_REJECTED", "Final offer is too low.", {"payment_ratio": ratio})],
            meta=meta,
        )

    delay = response_delay_days(inp.relationship_score, cfg=cfg)

    if ratio >= float(scfg.instant_accept_ratio) and not valuation.is_below_soft_gate:
        return EvaluationResult(
            response_type="ACCEPT",
            tone="ENTHUSIASTIC" if ratio >= 1.0 else "PROFESSIONAL",
            response_delay_days=delay,
            relationship_delta=int(scfg.accept_relationship_delta),
            is_newsworthy=is_title,
            reasons=[Reason("OFFER_ACCEPTED", "Payment is in line with the sponsor's valuation.", {"payment_ratio": ratio})],
            meta=meta,
        )

    if ratio < float(scfg.reject_ratio):
        return EvaluationResult(
            response_type="REJECT",
            tone="DISAPPOINTED",
            response_delay_days=delay,
            relationship_delta=int(scfg.reject_relationship_delta),
            reasons=[Reason("OFFER_TOO_CHEAP", "Payment is far below the sponsor's valuation.", {"payment_ratio": ratio})],
            meta=meta,
        )

    counter = build_counter_terms(terms, sponsor, valuation, cfg=cfg)
    is_ultimatum = int(current.round_number) >= int(scfg.max_negotiation_rounds)

    logger.debug(
        "sponsor counter sponsor=%s team=%s ratio=%.3f protection=%.2f ultimatum=%s",
        sponsor.id,
        inp.team.id,
        ratio,
        valuation.protection_level,
        is_ultimatum,
    )

    return EvaluationResult(
        response_type="COUNTER",
        tone="PROFESSIONAL" if valuation.is_below_soft_gate else "ENTHUSIASTIC",
        response_delay_days=delay,
        relationship_delta=0,
        is_ultimatum=is_ultimatum,
        counter_terms=counter,
        reasons=[
            Reason(
                "PROTECTIVE_COUNTER" if valuation.is_below_soft_gate else "PAYMENT_COUNTER",
                "Sponsor proposes less fixed money and more performance bonuses.",
                {"payment_ratio": ratio, "protection_level": valuation.protection_level},
            )
        ],
        meta=meta,
    )


# -----------------------------------------------------------------------------
# Display helpers
# -----------------------------------------------------------------------------

_PLACEMENT_BY_TIER: Dict[str, SponsorPlacement] = {
    "TITLE": "PRIMARY",
    "MAJOR": "SECONDARY",
    "MINOR": "TERTIARY",
}

_TIER_DISPLAY_NAMES: Dict[str, str] = {
    "TITLE": "Title Sponsor",
    "MAJOR": "Major Sponsor",
    "MINOR": "Minor Sponsor",
}


def placement_for_tier(tier: SponsorTier) -> SponsorPlacement:
    return _PLACEMENT_BY_TIER.get(str(tier), "TERTIARY")


def sponsor_tier_display_name(tier: SponsorTier) -> str:
    return _TIER_DISPLAY_NAMES.get(str(tier), "Sponsor")
