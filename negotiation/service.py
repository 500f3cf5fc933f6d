from __future__ import annotations

"""Dispatch layer: route a negotiation session to its counterparty evaluator.

This module is intended to be called by the session manager once a response
is due. It:
- validates the session invariants (rounds present, terms of the right kind)
- resolves the counterparty and the offering team from the market snapshot
- builds the evaluator input and returns the evaluator's decision
- optionally records the decision on the session (``respond``)

Missing entities are a data problem, not a protocol violation: they resolve to
a neutral rejection and a WARNING log line instead of raising.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional, Tuple

from .config import DEFAULT_CONFIG, NegotiationConfig
from .errors import (
    NEGOTIATION_NO_ROUNDS,
    NEGOTIATION_OUT_OF_TURN,
    NEGOTIATION_TERMS_MISMATCH,
    NEGOTIATION_UNKNOWN_KIND,
    NegotiationError,
)
from .evaluators.driver import DriverEvaluationInput, evaluate_driver_offer
from .evaluators.manufacturer import ManufacturerEvaluationInput, evaluate_manufacturer_offer
from .evaluators.sponsor import SponsorEvaluationInput, evaluate_sponsor_offer
from .evaluators.staff import StaffEvaluationInput, evaluate_staff_offer
from .session import apply_response, awaiting_party
from .types import (
    EvaluationResult,
    MarketContext,
    NegotiationRound,
    NegotiationSession,
    Reason,
)

logger = logging.getLogger(__name__)


_Evaluator = Callable[[NegotiationSession, NegotiationRound, MarketContext, NegotiationConfig], EvaluationResult]


def _missing_entity(session: NegotiationSession, what: str, entity_id: Optional[str]) -> EvaluationResult:
    logger.warning(
        "NEGOTIATION_ENTITY_MISSING session=%s kind=%s missing=%s id=%s",
        session.id,
        session.kind,
        what,
        entity_id,
    )
    return EvaluationResult(
        response_type="REJECT",
        tone="PROFESSIONAL",
        response_delay_days=3,
        relationship_delta=0,
        reasons=[Reason("ENTITY_MISSING", f"{what} not found in market snapshot", {"id": entity_id})],
    )


def _relationship(session: NegotiationSession, market: MarketContext, cfg: NegotiationConfig) -> float:
    return market.relationship(session.counterparty_id, float(cfg.session.default_relationship_score))


def _driver(
    session: NegotiationSession,
    current: NegotiationRound,
    market: MarketContext,
    cfg: NegotiationConfig,
) -> EvaluationResult:
    driver = next((d for d in market.drivers if d.id == session.counterparty_id), None)
    if driver is None:
        return _missing_entity(session, "driver", session.counterparty_id)
    team = market.team(session.team_id)
    if team is None:
        return _missing_entity(session, "team", session.team_id)

    terms = current.terms
    inp = DriverEvaluationInput(
        driver=driver,
        offering_team=team,
        offered_salary=float(terms.salary),
        offered_duration=int(terms.duration),
        market=market,
        current_round=int(current.round_number),
        max_rounds=int(session.max_rounds),
    )
    return evaluate_driver_offer(inp, cfg=cfg)


def _staff(
    session: NegotiationSession,
    current: NegotiationRound,
    market: MarketContext,
    cfg: NegotiationConfig,
) -> EvaluationResult:
    chief = next((c for c in market.chiefs if c.id == session.counterparty_id), None)
    if chief is None:
        return _missing_entity(session, "chief", session.counterparty_id)
    team = market.team(session.team_id)
    if team is None:
        return _missing_entity(session, "team", session.team_id)

    inp = StaffEvaluationInput(
        chief=chief,
        offering_team=team,
        terms=current.terms,
        teams=market.teams,
        current_round=int(current.round_number),
        max_rounds=int(session.max_rounds),
    )
    return evaluate_staff_offer(inp, cfg=cfg)


def _sponsor(
    session: NegotiationSession,
    current: NegotiationRound,
    market: MarketContext,
    cfg: NegotiationConfig,
) -> EvaluationResult:
    sponsor = next((s for s in market.sponsors if s.id == session.counterparty_id), None)
    if sponsor is None:
        return _missing_entity(session, "sponsor", session.counterparty_id)
    team = market.team(session.team_id)
    if team is None:
        return _missing_entity(session, "team", session.team_id)

    inp = SponsorEvaluationInput(
        session=session,
        sponsor=sponsor,
        team=team,
        sponsors=market.sponsors,
        existing_deals=tuple(d for d in market.sponsor_deals if d.team_id == team.id),
        relationship_score=_relationship(session, market, cfg),
        team_position=market.position_of(team.id),
        total_teams=market.total_teams,
    )
    return evaluate_sponsor_offer(inp, cfg=cfg)


def _manufacturer(
    session: NegotiationSession,
    current: NegotiationRound,
    market: MarketContext,
    cfg: NegotiationConfig,
) -> EvaluationResult:
    manufacturer = next((m for m in market.manufacturers if m.id == session.counterparty_id), None)
    if manufacturer is None:
        return _missing_entity(session, "manufacturer", session.counterparty_id)
    team = market.team(session.team_id)
    if team is None:
        return _missing_entity(session, "team", session.team_id)

    inp = ManufacturerEvaluationInput(
        session=session,
        manufacturer=manufacturer,
        team=team,
        teams=market.teams,
        relationship_score=_relationship(session, market, cfg),
        secured_team_ids=market.secured_team_ids,
        active_contracts=market.manufacturer_contracts,
    )
    return evaluate_manufacturer_offer(inp, cfg=cfg)


_EVALUATORS: Dict[str, _Evaluator] = {
    "DRIVER": _driver,
    "STAFF": _staff,
    "SPONSOR": _sponsor,
    "MANUFACTURER": _manufacturer,
}


def _close_out_ultimatum(current: NegotiationRound, result: EvaluationResult) -> EvaluationResult:
    """An ultimatum admits only accept or reject; a counter becomes a rejection."""
    if not current.is_ultimatum or result.response_type != "COUNTER":
        return result
    return replace(
        result,
        response_type="REJECT",
        tone="DISAPPOINTED",
        is_ultimatum=False,
        counter_terms=None,
        reasons=list(result.reasons) + [Reason("ULTIMATUM_DECLINED", "Final offer declined.")],
    )


def evaluate_session(
    session: NegotiationSession,
    market: MarketContext,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> EvaluationResult:
    """Counterparty decision on the latest round of ``session``."""
    evaluator = _EVALUATORS.get(str(session.kind))
    if evaluator is None:
        raise NegotiationError(
            NEGOTIATION_UNKNOWN_KIND,
            "Unsupported negotiation kind",
            {"session_id": session.id, "kind": session.kind},
        )

    current = session.last_round
    if current is None:
        logger.warning("NEGOTIATION_NO_ROUNDS session=%s kind=%s", session.id, session.kind)
        raise NegotiationError(
            NEGOTIATION_NO_ROUNDS,
            "Negotiation session has no rounds",
            {"session_id": session.id},
        )

    if awaiting_party(session) != "COUNTERPARTY":
        raise NegotiationError(
            NEGOTIATION_OUT_OF_TURN,
            "No player proposal is awaiting the counterparty",
            {"session_id": session.id, "phase": session.phase, "offered_by": current.offered_by},
        )

    terms_kind = getattr(current.terms, "kind", None)
    if terms_kind != session.kind:
        logger.warning(
            "NEGOTIATION_TERMS_MISMATCH session=%s kind=%s terms_kind=%s",
            session.id,
            session.kind,
            terms_kind,
        )
        raise NegotiationError(
            NEGOTIATION_TERMS_MISMATCH,
            "Terms do not match the negotiation kind",
            {"session_id": session.id, "kind": session.kind, "terms_kind": terms_kind},
        )

    result = _close_out_ultimatum(current, evaluator(session, current, market, cfg))
    logger.debug(
        "negotiation evaluated session=%s kind=%s round=%s response=%s",
        session.id,
        session.kind,
        current.round_number,
        result.response_type,
    )
    return result


def respond(
    session: NegotiationSession,
    market: MarketContext,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> Tuple[NegotiationSession, EvaluationResult]:
    """Evaluate the pending player proposal and record the answer on the session."""
    result = evaluate_session(session, market, cfg=cfg)
    return apply_response(session, result), result
