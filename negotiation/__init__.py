from __future__ import annotations

"""Paddock negotiation engine.

This package provides:
- Performance valuation and organizational quality scores (pure functions)
- Counterparty evaluators for drivers, department chiefs, sponsors and engine
  manufacturers, plus the team-side driver shortlist
- An explicit phase/round protocol for negotiation sessions
- A dispatch service that routes a session to its evaluator

The engine is designed to be:
- Deterministic (seeded variance from entity ids; no clock, no RNG state)
- Explainable (decisions include reason codes + evidence)
- Side-effect free (immutable snapshots in, decisions out; no I/O)
"""

from .config import DEFAULT_CONFIG, NegotiationConfig
from .errors import (
    NegotiationError,
    NEGOTIATION_BAD_PAYLOAD,
    NEGOTIATION_ILLEGAL_TRANSITION,
    NEGOTIATION_NO_ROUNDS,
    NEGOTIATION_OUT_OF_TURN,
    NEGOTIATION_TERMS_MISMATCH,
    NEGOTIATION_ULTIMATUM_VIOLATION,
    NEGOTIATION_UNKNOWN_KIND,
)
from .types import (
    ActiveManufacturerContract,
    ActiveSponsorDeal,
    CareerSeasonRecord,
    Chief,
    Driver,
    DriverAttributes,
    DriverTerms,
    EvaluationResult,
    Manufacturer,
    ManufacturerCosts,
    MarketContext,
    NegotiationRound,
    NegotiationSession,
    Reason,
    Sponsor,
    SponsorTerms,
    StaffTerms,
    SupplyTerms,
    Team,
    TeamPrincipal,
)
from .valuation import market_value, perceived_value, team_prestige, team_quality
from .session import (
    apply_response,
    append_round,
    awaiting_party,
    build_response_round,
    open_session,
    phase_after_response,
    propose,
    settle,
    transition,
    withdraw,
)
from .schemas import parse_terms
from .service import evaluate_session, respond
