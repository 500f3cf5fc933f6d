from __future__ import annotations

"""Counterparty evaluators, one module per negotiation kind.

Every evaluator is a pure function of its input snapshot: no clock, no RNG
state, no I/O. Seeded variance is derived from entity ids only.
"""

from .driver import DriverEvaluationInput, evaluate_driver_offer, required_salary
from .manufacturer import (
    ManufacturerEvaluationInput,
    detect_pattern,
    evaluate_manufacturer_offer,
    secret_minimum_margin,
)
from .sponsor import (
    SponsorEvaluationInput,
    evaluate_sponsor_offer,
    has_rival_group_conflict,
    placement_for_tier,
    sponsor_tier_display_name,
    sponsor_valuation,
)
from .staff import (
    StaffEvaluationInput,
    all_letter_grades,
    chief_letter_grade,
    chief_role_display_name,
    evaluate_staff_approach,
    evaluate_staff_offer,
    expected_salary,
)
from .team import (
    TeamInterestInput,
    driver_attractiveness,
    eligible_driver_pool,
    evaluate_driver_approach,
    team_shortlist,
)
