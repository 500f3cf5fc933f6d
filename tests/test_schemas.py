"""Tests for inbound terms payload validation."""

import pytest

from negotiation.errors import NEGOTIATION_BAD_PAYLOAD, NEGOTIATION_TERMS_MISMATCH, NegotiationError
from negotiation.schemas import parse_terms
from negotiation.types import DriverTerms, SponsorTerms, StaffTerms, SupplyTerms


def test_driver_payload():
    terms = parse_terms({"kind": "DRIVER", "salary": 5_000_000, "duration": 2})
    assert terms == DriverTerms(salary=5_000_000.0, duration=2)


def test_staff_payload_defaults():
    terms = parse_terms({"kind": "STAFF", "salary": 800_000, "duration": 3})
    assert isinstance(terms, StaffTerms)
    assert terms.signing_bonus == 0.0
    assert terms.buyout_required == 0.0


def test_sponsor_payload():
    terms = parse_terms(
        {"kind": "SPONSOR", "annual_payment": 4e6, "duration": 2, "placement": "SECONDARY", "exit_clause_position": 7}
    )
    assert isinstance(terms, SponsorTerms)
    assert terms.placement == "SECONDARY"
    assert terms.exit_clause_position == 7


def test_supply_payload():
    terms = parse_terms(
        {"kind": "MANUFACTURER", "annual_cost": 5e6, "duration": 2, "upgrades_included": 1, "optimisation_included": True}
    )
    assert isinstance(terms, SupplyTerms)
    assert terms.upgrades_included == 1
    assert terms.optimisation_included is True


def test_kind_taken_from_session():
    terms = parse_terms({"annual_cost": 5e6, "duration": 2}, expected_kind="MANUFACTURER")
    assert isinstance(terms, SupplyTerms)


def test_terms_payloads_round_trip_through_to_payload():
    original = SponsorTerms(annual_payment=3e6, duration=1, placement="PRIMARY", points_bonus=25_000.0)
    assert parse_terms(original.to_payload(), expected_kind="SPONSOR") == original


@pytest.mark.parametrize(
    "payload",
    [
        {"kind": "DRIVER", "salary": 5e6, "duration": 0},
        {"kind": "DRIVER", "salary": -1, "duration": 2},
        {"kind": "DRIVER", "salary": 5e6, "duration": 2, "bonus": 1},
        {"kind": "DRIVER", "duration": 2},
        {"kind": "SPONSOR", "annual_payment": 1e6, "duration": 1, "placement": "ROOF"},
        {"kind": "SPONSOR", "annual_payment": 1e6, "duration": 1, "exit_clause_position": 0},
        {"kind": "CATERING", "duration": 1},
        {"salary": 5e6, "duration": 2},
    ],
)
def test_bad_payloads(payload):
    with pytest.raises(NegotiationError) as exc:
        parse_terms(payload)
    assert exc.value.code == NEGOTIATION_BAD_PAYLOAD
    assert exc.value.details["errors"]


def test_non_object_payload():
    with pytest.raises(NegotiationError) as exc:
        parse_terms(["DRIVER", 5e6, 2])
    assert exc.value.code == NEGOTIATION_BAD_PAYLOAD


def test_kind_disagreeing_with_session():
    with pytest.raises(NegotiationError) as exc:
        parse_terms({"kind": "SPONSOR", "annual_payment": 1e6, "duration": 1}, expected_kind="DRIVER")
    assert exc.value.code == NEGOTIATION_TERMS_MISMATCH
    assert exc.value.details == {"expected": "DRIVER", "got": "SPONSOR"}
