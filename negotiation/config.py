from __future__ import annotations

"""Tunable configuration for contract negotiations.

All numbers here are intended to be tuned via playtests/telemetry.

Design goals
-----------
- Every evaluator reads its thresholds from one frozen config object, so a
  tuning pass never touches decision logic.
- Defaults reproduce the shipped game balance exactly; saved careers must
  re-evaluate to the same responses after an upgrade.
"""

from dataclasses import dataclass, field
from typing import Mapping, Tuple


# ---------------------------------------------------------------------------
# Shared valuation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValuationConfig:
    """Perceived value / market value / organizational quality."""

    decay_factor: float = 0.8
    max_history_seasons: int = 5

    # Used for empty histories, zero-point teams, and single-member populations.
    neutral_value: float = 0.5

    market_value_floor: float = 2_000_000.0
    market_value_ceiling: float = 20_000_000.0

    # Seven sub-attributes, each 0..100.
    driver_attribute_max_total: float = 700.0


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DriverEvaluatorConfig:
    instant_accept_ratio: float = 2.0
    accept_ratio: float = 1.0
    counter_ratio: float = 0.5
    desperate_accept_ratio: float = 0.2

    # Seats left league-wide at or below which a driver is desperate.
    desperation_seat_threshold: int = 2

    # Seats left above which a driver pushes back on a merely good offer.
    many_seats_threshold: int = 5
    counter_ask_multiplier: float = 1.1
    counter_good_offers_when_many_seats: bool = True

    max_team_quality_multiplier: float = 5.0
    min_team_quality_multiplier: float = 0.2

    # Career weight: young => performance focus, veteran => money focus.
    young_age_threshold: int = 25
    veteran_age_threshold: int = 33
    young_career_weight: float = 0.3
    veteran_career_weight: float = 0.7
    # Fraction of the ability/quality gap removed at career weight 1.0.
    career_gap_damping: float = 0.5

    base_response_delay_days: int = 3
    accept_relationship_delta: int = 5
    reject_relationship_delta: int = -3


# ---------------------------------------------------------------------------
# Team (shortlisting / approach interest)
# ---------------------------------------------------------------------------


def _default_age_multiplier_table() -> Mapping[str, Tuple[float, float, float]]:
    # Columns: 1 year, 2 years, 3+ years.
    return {
        "young": (0.95, 1.0, 1.1),
        "prime": (1.0, 1.0, 1.0),
        "mature": (1.0, 0.95, 0.9),
        "veteran": (0.9, 0.8, 0.6),
    }


@dataclass(frozen=True, slots=True)
class TeamInterestConfig:
    young_age_threshold: int = 26
    prime_age_threshold: int = 30
    veteran_age_threshold: int = 34

    age_multiplier_table: Mapping[str, Tuple[float, float, float]] = field(
        default_factory=_default_age_multiplier_table
    )

    short_contract_years: int = 1
    medium_contract_years: int = 2

    rookie_error_range: float = 0.1
    rookie_history_threshold: int = 2

    upgrade_margin: float = 0.05
    similar_margin: float = 0.10

    default_contract_years: int = 2


# ---------------------------------------------------------------------------
# Staff (department chiefs)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StaffEvaluatorConfig:
    market_salary_floor: float = 300_000.0
    market_salary_ceiling: float = 15_000_000.0
    market_salary_exponent: float = 2.5

    greediness_variance: float = 0.15
    # Fraction of the 0..100 ability scale at full seed magnitude.
    scouting_error_range: float = 0.15

    instant_accept_ratio: float = 1.4
    accept_ratio: float = 1.0
    counter_ratio: float = 0.7

    good_signing_bonus_ratio: float = 0.15
    signing_bonus_weight: float = 0.5
    bonus_counter_salary_ratio: float = 0.9

    preferred_max_duration: int = 3
    long_contract_penalty: float = 0.05

    mid_ability_low: float = 50.0
    mid_ability_high: float = 85.0
    max_career_discount: float = 0.2

    approach_prestige_threshold: float = 0.3
    prestige_upgrade_threshold: float = 0.2
    ability_upgrade_threshold: float = 5.0
    approach_duration_years: int = 2

    newsworthy_ability: float = 85.0

    base_response_delay_days: int = 3
    accept_relationship_delta: int = 5
    reject_relationship_delta: int = -3


# ---------------------------------------------------------------------------
# Sponsor
# ---------------------------------------------------------------------------


def _default_tier_bonuses() -> Mapping[str, Tuple[float, float]]:
    # (points bonus per championship point, bonus per win)
    return {
        "TITLE": (50_000.0, 1_000_000.0),
        "MAJOR": (25_000.0, 500_000.0),
        "MINOR": (10_000.0, 200_000.0),
    }


@dataclass(frozen=True, slots=True)
class SponsorEvaluatorConfig:
    base_response_delay_days: int = 3
    min_response_delay_days: int = 1
    max_response_delay_days: int = 5
    # One day faster per this many relationship points.
    relationship_delay_step: int = 50

    soft_gate_multiplier: float = 0.9
    hard_gate_multiplier: float = 0.7

    base_exit_clause_position: int = 5
    max_exit_clause_position: int = 10

    premium_reputation_threshold: float = 1.2
    max_premium_multiplier: float = 1.25
    discount_multiplier_floor: float = 0.7

    base_payment_reduction: float = 0.15
    max_bonus_protection_scale: float = 0.5
    tier_bonuses: Mapping[str, Tuple[float, float]] = field(default_factory=_default_tier_bonuses)

    max_contract_duration: int = 3

    instant_accept_ratio: float = 0.95
    reject_ratio: float = 0.6
    max_negotiation_rounds: int = 4

    accept_relationship_delta: int = 5
    reject_relationship_delta: int = -3


# ---------------------------------------------------------------------------
# Manufacturer (engine supply)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ManufacturerEvaluatorConfig:
    base_response_delay_days: int = 3
    min_response_delay_days: int = 1
    max_response_delay_days: int = 7

    warm_relationship_threshold: float = 70.0
    cold_relationship_threshold: float = 30.0

    accept_relationship_delta: int = 5
    reject_relationship_delta: int = -5
    ultimatum_relationship_delta: int = -2

    max_rounds_before_ultimatum: int = 5
    stubborn_rounds_before_ultimatum: int = 2

    ideal_margin: float = 1.30
    comfortable_margin: float = 1.15
    min_margin_floor: float = 1.0
    min_margin_ceiling: float = 1.15

    max_desperation_discount: float = 0.20
    strategic_value_discount: float = 0.08
    strategic_value_threshold: float = 0.7
    desperation_threshold: float = 0.3

    base_concession_rate: float = 0.20
    great_concession_threshold_multiplier: float = 0.95
    round_factor_divisor: float = 4.0

    good_concession_pct: float = 0.10
    great_concession_pct: float = 0.20

    # Engines delivered per season under one supply deal.
    engines_per_season: int = 2

    pattern_concession_multipliers: Mapping[str, float] = field(
        default_factory=lambda: {
            "GREAT_CONCESSION": 1.5,
            "GOOD_CONCESSION": 1.2,
            "STUBBORN": 0.5,
            "AGGRESSIVE": 0.3,
        }
    )


# ---------------------------------------------------------------------------
# Session protocol
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionConfig:
    default_max_rounds: int = 4
    default_relationship_score: float = 50.0


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NegotiationConfig:
    valuation: ValuationConfig = field(default_factory=ValuationConfig)
    driver: DriverEvaluatorConfig = field(default_factory=DriverEvaluatorConfig)
    team: TeamInterestConfig = field(default_factory=TeamInterestConfig)
    staff: StaffEvaluatorConfig = field(default_factory=StaffEvaluatorConfig)
    sponsor: SponsorEvaluatorConfig = field(default_factory=SponsorEvaluatorConfig)
    manufacturer: ManufacturerEvaluatorConfig = field(default_factory=ManufacturerEvaluatorConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


DEFAULT_CONFIG = NegotiationConfig()

DEFAULT_VALUATION_CONFIG = DEFAULT_CONFIG.valuation
DEFAULT_DRIVER_CONFIG = DEFAULT_CONFIG.driver
DEFAULT_TEAM_CONFIG = DEFAULT_CONFIG.team
DEFAULT_STAFF_CONFIG = DEFAULT_CONFIG.staff
DEFAULT_SPONSOR_CONFIG = DEFAULT_CONFIG.sponsor
DEFAULT_MANUFACTURER_CONFIG = DEFAULT_CONFIG.manufacturer
DEFAULT_SESSION_CONFIG = DEFAULT_CONFIG.session
