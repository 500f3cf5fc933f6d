from __future__ import annotations

"""Negotiation session protocol: phases, turn order and round history.

Phase machine
-------------
AWAITING_RESPONSE  -> RESPONSE_RECEIVED | FAILED
RESPONSE_RECEIVED  -> AWAITING_RESPONSE | COMPLETED | FAILED
COMPLETED, FAILED  -> (terminal)

AWAITING_RESPONSE means a proposal is on the table and the side that did not
make it owes an answer. An answer first lands as RESPONSE_RECEIVED and then
resolves: a counter puts a new proposal on the table (back to
AWAITING_RESPONSE), an acceptance completes the deal, a rejection fails it.

Rounds
------
Rounds are append-only. Each new round is numbered previous + 1, comes from
the side that did not propose the previous round, carries terms of the
session's kind, and may not answer an ultimatum with another proposal.

Every function returns a new session; inputs are never mutated.
"""

import logging
from dataclasses import replace
from typing import Dict, FrozenSet, Optional

from .config import DEFAULT_CONFIG, NegotiationConfig
from .errors import (
    NEGOTIATION_ILLEGAL_TRANSITION,
    NEGOTIATION_NO_ROUNDS,
    NEGOTIATION_OUT_OF_TURN,
    NEGOTIATION_TERMS_MISMATCH,
    NEGOTIATION_ULTIMATUM_VIOLATION,
    NegotiationError,
)
from .types import (
    EvaluationResult,
    NegotiationKind,
    NegotiationPhase,
    NegotiationRound,
    NegotiationSession,
    NegotiationTerms,
    Proposer,
    ResponseType,
    TERMS_BY_KIND,
)

logger = logging.getLogger(__name__)


LEGAL_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "AWAITING_RESPONSE": frozenset({"RESPONSE_RECEIVED", "FAILED"}),
    "RESPONSE_RECEIVED": frozenset({"AWAITING_RESPONSE", "COMPLETED", "FAILED"}),
    "COMPLETED": frozenset(),
    "FAILED": frozenset(),
}

TERMINAL_PHASES: FrozenSet[str] = frozenset({"COMPLETED", "FAILED"})


def is_terminal(phase: NegotiationPhase) -> bool:
    return str(phase) in TERMINAL_PHASES


def can_transition(current: NegotiationPhase, target: NegotiationPhase) -> bool:
    return str(target) in LEGAL_TRANSITIONS.get(str(current), frozenset())


def transition(session: NegotiationSession, target: NegotiationPhase) -> NegotiationSession:
    if not can_transition(session.phase, target):
        logger.warning(
            "NEGOTIATION_ILLEGAL_TRANSITION session=%s from=%s to=%s",
            session.id,
            session.phase,
            target,
        )
        raise NegotiationError(
            NEGOTIATION_ILLEGAL_TRANSITION,
            "Illegal negotiation phase transition",
            {"session_id": session.id, "from": session.phase, "to": target},
        )
    return replace(session, phase=target)


def other_side(side: Proposer) -> Proposer:
    return "COUNTERPARTY" if side == "PLAYER" else "PLAYER"


def awaiting_party(session: NegotiationSession) -> Optional[Proposer]:
    """The side that owes an answer, or None when nothing is pending."""
    last = session.last_round
    if last is None or is_terminal(session.phase):
        return None
    return other_side(last.offered_by)


def phase_after_response(response_type: ResponseType) -> NegotiationPhase:
    if response_type == "ACCEPT":
        return "COMPLETED"
    if response_type == "REJECT":
        return "FAILED"
    return "AWAITING_RESPONSE"


# -----------------------------------------------------------------------------
# Rounds
# -----------------------------------------------------------------------------


def _check_terms_kind(kind: NegotiationKind, terms: NegotiationTerms, session_id: str) -> None:
    terms_kind = getattr(terms, "kind", None)
    if not isinstance(terms, TERMS_BY_KIND.get(str(kind), ())):
        raise NegotiationError(
            NEGOTIATION_TERMS_MISMATCH,
            "Terms do not match the negotiation kind",
            {"session_id": session_id, "kind": kind, "terms_kind": terms_kind},
        )


def append_round(session: NegotiationSession, rnd: NegotiationRound) -> NegotiationSession:
    """Append a validated round; the phase is left unchanged."""
    if is_terminal(session.phase):
        raise NegotiationError(
            NEGOTIATION_ILLEGAL_TRANSITION,
            "Negotiation is closed",
            {"session_id": session.id, "phase": session.phase},
        )

    _check_terms_kind(session.kind, rnd.terms, session.id)

    last = session.last_round
    expected_number = 1 if last is None else int(last.round_number) + 1
    if int(rnd.round_number) != expected_number:
        raise NegotiationError(
            NEGOTIATION_OUT_OF_TURN,
            "Round number out of sequence",
            {"session_id": session.id, "expected": expected_number, "got": rnd.round_number},
        )

    if last is not None:
        if rnd.offered_by == last.offered_by:
            raise NegotiationError(
                NEGOTIATION_OUT_OF_TURN,
                "A side cannot answer its own proposal",
                {"session_id": session.id, "offered_by": rnd.offered_by},
            )
        if last.is_ultimatum:
            raise NegotiationError(
                NEGOTIATION_ULTIMATUM_VIOLATION,
                "An ultimatum can only be accepted or rejected",
                {"session_id": session.id, "round_number": last.round_number},
            )

    return replace(session, rounds=tuple(session.rounds) + (rnd,))


def propose(
    session: NegotiationSession,
    offered_by: Proposer,
    terms: NegotiationTerms,
    *,
    is_ultimatum: bool = False,
) -> NegotiationSession:
    """Put the next proposal on the table."""
    rnd = NegotiationRound(
        round_number=session.round_count + 1,
        offered_by=offered_by,
        terms=terms,
        is_ultimatum=bool(is_ultimatum),
    )
    return append_round(session, rnd)


def open_session(
    session_id: str,
    kind: NegotiationKind,
    team_id: str,
    counterparty_id: str,
    season: int,
    terms: NegotiationTerms,
    *,
    offered_by: Proposer = "PLAYER",
    max_rounds: Optional[int] = None,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> NegotiationSession:
    """New session with its opening proposal as round 1."""
    session = NegotiationSession(
        id=str(session_id),
        kind=kind,
        team_id=str(team_id),
        counterparty_id=str(counterparty_id),
        season=int(season),
        max_rounds=int(max_rounds) if max_rounds is not None else int(cfg.session.default_max_rounds),
    )
    return propose(session, offered_by, terms)


def build_response_round(session: NegotiationSession, result: EvaluationResult) -> NegotiationRound:
    """Counterparty round answering the player's latest proposal.

    Carries the counter terms, or repeats the previous terms when the answer
    is an acceptance or a rejection.
    """
    last = session.last_round
    if last is None:
        raise NegotiationError(
            NEGOTIATION_NO_ROUNDS,
            "Cannot respond to a session without rounds",
            {"session_id": session.id},
        )
    return NegotiationRound(
        round_number=int(last.round_number) + 1,
        offered_by="COUNTERPARTY",
        terms=result.counter_terms if result.counter_terms is not None else last.terms,
        is_ultimatum=bool(result.is_ultimatum),
    )


def apply_response(session: NegotiationSession, result: EvaluationResult) -> NegotiationSession:
    """Record the counterparty's answer to the player's pending proposal.

    Counters append a new counterparty round; acceptances and rejections are
    recorded as a phase change only.
    """
    if awaiting_party(session) != "COUNTERPARTY":
        raise NegotiationError(
            NEGOTIATION_OUT_OF_TURN,
            "Counterparty is not the side awaited",
            {"session_id": session.id, "phase": session.phase},
        )

    received = transition(session, "RESPONSE_RECEIVED")
    if result.response_type == "COUNTER":
        received = append_round(received, build_response_round(session, result))
    return transition(received, phase_after_response(result.response_type))


def settle(session: NegotiationSession, accepted: bool) -> NegotiationSession:
    """Player accepts or rejects the counterparty's proposal on the table."""
    if awaiting_party(session) != "PLAYER":
        raise NegotiationError(
            NEGOTIATION_OUT_OF_TURN,
            "Player is not the side awaited",
            {"session_id": session.id, "phase": session.phase},
        )
    received = transition(session, "RESPONSE_RECEIVED")
    return transition(received, "COMPLETED" if accepted else "FAILED")


def withdraw(session: NegotiationSession) -> NegotiationSession:
    """Either side walks away while a proposal is pending."""
    return transition(session, "FAILED")
