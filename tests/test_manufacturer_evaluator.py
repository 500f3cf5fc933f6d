"""Tests for engine supply pricing, pattern reading and manufacturer responses."""

import math

import pytest

from negotiation.errors import NEGOTIATION_TERMS_MISMATCH, NegotiationError
from negotiation.evaluators.manufacturer import (
    ManufacturerEvaluationInput,
    acceptance_threshold,
    count_stubborn_rounds,
    desperation,
    detect_pattern,
    evaluate_manufacturer_offer,
    floor_price,
    response_delay_days,
    secret_minimum_margin,
    supply_cost,
    target_price,
)
from negotiation.types import (
    ActiveManufacturerContract,
    NegotiationRound,
    NegotiationSession,
    SponsorTerms,
    SupplyTerms,
)


def _terms(annual, duration=2, **kw):
    return SupplyTerms(annual_cost=float(annual), duration=duration, **kw)


def _player(n, annual, *, ultimatum=False):
    return NegotiationRound(round_number=n, offered_by="PLAYER", terms=_terms(annual), is_ultimatum=ultimatum)


def _counter(n, annual, *, ultimatum=False):
    return NegotiationRound(round_number=n, offered_by="COUNTERPARTY", terms=_terms(annual), is_ultimatum=ultimatum)


def _session(*rounds, team_id="t5"):
    return NegotiationSession(
        id="neg_supply",
        kind="MANUFACTURER",
        team_id=team_id,
        counterparty_id="m_works",
        season=2025,
        rounds=tuple(rounds),
    )


def _evaluate(session, market, *, relationship=50.0):
    return evaluate_manufacturer_offer(
        ManufacturerEvaluationInput(
            session=session,
            manufacturer=market.manufacturers[0],
            team=market.team(session.team_id),
            teams=market.teams,
            relationship_score=relationship,
            secured_team_ids=market.secured_team_ids,
            active_contracts=market.manufacturer_contracts,
        )
    )


class TestSecretMargin:
    def test_range_and_stability(self):
        for i in range(50):
            margin = secret_minimum_margin(f"neg_{i}")
            assert 1.0 <= margin <= 1.15
            assert margin == secret_minimum_margin(f"neg_{i}")

    def test_differs_between_sessions(self):
        assert len({secret_minimum_margin(f"neg_{i}") for i in range(20)}) > 1


class TestPricing:
    def test_supply_cost_includes_extras_per_year(self, manufacturers):
        terms = _terms(0, duration=3, upgrades_included=2, customisation_points_included=3, optimisation_included=True)
        # (2 engines * 2M + 2 * 500k + 3 * 100k + 1M) * 3 years
        assert supply_cost(manufacturers[0], terms) == pytest.approx(18_900_000)

    def test_base_supply_cost(self, manufacturers):
        assert supply_cost(manufacturers[0], _terms(0)) == pytest.approx(8_000_000)

    def test_floor_never_below_cost(self):
        assert floor_price(8_000_000, 1.1, 1.0, 0.0) == pytest.approx(8_000_000)

    def test_floor_discounts(self):
        assert floor_price(8_000_000, 1.1, 0.0, 0.0) == pytest.approx(8_800_000)
        assert floor_price(8_000_000, 1.1, 0.0, 0.8) == pytest.approx(8_160_000)
        assert floor_price(8_000_000, 1.1, 0.25, 0.0) == pytest.approx(8_400_000)

    def test_threshold_moves_from_comfortable_to_floor(self):
        assert acceptance_threshold(8_000_000, 1.1, 1, 0.0, 0.0, "FIRST_OFFER") == pytest.approx(9_200_000)
        assert acceptance_threshold(8_000_000, 1.1, 3, 0.0, 0.0, "COOPERATIVE") == pytest.approx(9_000_000)
        assert acceptance_threshold(8_000_000, 1.1, 5, 0.0, 0.0, "COOPERATIVE") == pytest.approx(8_800_000)
        assert acceptance_threshold(8_000_000, 1.1, 9, 0.0, 0.0, "COOPERATIVE") == pytest.approx(8_800_000)

    def test_great_concession_lowers_threshold(self):
        plain = acceptance_threshold(8_000_000, 1.1, 2, 0.0, 0.0, "COOPERATIVE")
        great = acceptance_threshold(8_000_000, 1.1, 2, 0.0, 0.0, "GREAT_CONCESSION")
        assert great < plain
        assert great >= 8_800_000 - 1e-6

    def test_target_starts_at_ideal(self):
        assert target_price(8_000_000, 1.1, 1, 0.0, 0.0, "FIRST_OFFER") == pytest.approx(10_400_000)

    def test_target_stays_comfortable_without_pressure(self):
        assert target_price(8_000_000, 1.1, 20, 0.0, 0.0, "COOPERATIVE") == pytest.approx(9_200_000)

    def test_target_reaches_floor_under_pressure(self):
        assert target_price(8_000_000, 1.1, 20, 0.5, 0.0, "COOPERATIVE") == pytest.approx(8_000_000)

    def test_stubborn_player_slows_concessions(self):
        normal = target_price(8_000_000, 1.1, 3, 0.0, 0.0, "COOPERATIVE")
        stubborn = target_price(8_000_000, 1.1, 3, 0.0, 0.0, "STUBBORN")
        assert stubborn > normal


class TestDesperation:
    def test_no_customers(self, teams):
        assert desperation("m_works", teams, (), ()) == 0.0

    def test_customers_still_to_renew(self, teams):
        contracts = (
            ActiveManufacturerContract("m_works", "t1"),
            ActiveManufacturerContract("m_works", "t2"),
        )
        assert desperation("m_works", teams, (), contracts) == pytest.approx(0.1)

    def test_only_own_customers_left_unsigned(self, teams):
        contracts = (
            ActiveManufacturerContract("m_works", "t1"),
            ActiveManufacturerContract("m_works", "t2"),
        )
        secured = tuple(t.id for t in teams[2:])
        assert desperation("m_works", teams, secured, contracts) == pytest.approx(1.0)

    def test_all_customers_renewed(self, teams):
        contracts = (ActiveManufacturerContract("m_works", "t1"),)
        assert desperation("m_works", teams, ("t1",), contracts) == 0.0

    def test_other_manufacturers_contracts_ignored(self, teams):
        contracts = (ActiveManufacturerContract("m_other", "t1"),)
        assert desperation("m_works", teams, (), contracts) == 0.0


class TestPatterns:
    def test_first_offer(self):
        assert detect_pattern(()) == "FIRST_OFFER"
        assert detect_pattern((_player(1, 3e6),)) == "FIRST_OFFER"

    def test_stubborn(self):
        rounds = (_player(1, 3e6), _counter(2, 5.2e6), _player(3, 3e6))
        assert detect_pattern(rounds) == "STUBBORN"
        assert count_stubborn_rounds(rounds) == 1

    def test_aggressive(self):
        rounds = (_player(1, 4e6), _counter(2, 5.2e6), _player(3, 3.5e6))
        assert detect_pattern(rounds) == "AGGRESSIVE"

    @pytest.mark.parametrize(
        "offer,pattern",
        [(3.1e6, "COOPERATIVE"), (3.3e6, "GOOD_CONCESSION"), (3.5e6, "GREAT_CONCESSION")],
    )
    def test_concession_size(self, offer, pattern):
        rounds = (_player(1, 3e6), _counter(2, 5.2e6), _player(3, offer))
        assert detect_pattern(rounds) == pattern

    def test_answer_to_ultimatum(self):
        rounds = (_player(1, 3e6), _counter(2, 5e6, ultimatum=True), _player(3, 3e6))
        assert detect_pattern(rounds) == "RESPONDED_TO_ULTIMATUM"


class TestResponseDelay:
    @pytest.mark.parametrize(
        "relationship,strategic,ultimatum,days",
        [(50, 0.0, False, 2), (0, 0.0, False, 3), (100, 1.0, False, 1), (-200, 0.0, False, 7), (50, 0.0, True, 1)],
    )
    def test_delay(self, relationship, strategic, ultimatum, days):
        assert response_delay_days(relationship, strategic, ultimatum) == days


class TestEvaluation:
    def test_accept_at_comfortable_price(self, market):
        result = _evaluate(_session(_player(1, 5_000_000)), market)
        assert result.response_type == "ACCEPT"
        assert result.tone == "PROFESSIONAL"
        assert result.relationship_delta == 5
        assert result.is_newsworthy is False
        assert result.reasons[0].code == "OFFER_ACCEPTED"

    def test_marquee_team_signing_is_newsworthy(self, market):
        result = _evaluate(_session(_player(1, 5_000_000), team_id="t1"), market)
        assert result.response_type == "ACCEPT"
        assert result.is_newsworthy is True

    def test_low_offer_counters_at_ideal_price(self, market):
        result = _evaluate(_session(_player(1, 3_000_000)), market)
        assert result.response_type == "COUNTER"
        assert result.is_ultimatum is False
        assert result.relationship_delta == 0
        target = result.meta["target_price"]
        assert target == pytest.approx(10_400_000)
        assert result.counter_terms.annual_cost == float(math.ceil(target / 2))
        assert result.counter_terms.duration == 2

    def test_counter_keeps_package(self, market):
        offer = NegotiationRound(
            round_number=1,
            offered_by="PLAYER",
            terms=_terms(1_000_000, upgrades_included=2, optimisation_included=True),
        )
        result = _evaluate(_session(offer), market)
        assert result.counter_terms.upgrades_included == 2
        assert result.counter_terms.optimisation_included is True

    def test_stubborn_player_is_disappointing(self, market):
        rounds = (_player(1, 3e6), _counter(2, 5.2e6), _player(3, 3e6))
        result = _evaluate(_session(*rounds), market)
        assert result.response_type == "COUNTER"
        assert result.tone == "DISAPPOINTED"
        assert result.is_ultimatum is False

    def test_repeated_stalling_triggers_ultimatum(self, market):
        rounds = (
            _player(1, 3e6),
            _counter(2, 5.2e6),
            _player(3, 3e6),
            _counter(4, 5.1e6),
            _player(5, 3e6),
        )
        result = _evaluate(_session(*rounds), market)
        assert result.response_type == "COUNTER"
        assert result.is_ultimatum is True
        assert result.relationship_delta == -2
        assert result.response_delay_days == 1
        assert result.reasons[0].code == "FINAL_PRICE"

    def test_aggressive_player_insults(self, market):
        rounds = (_player(1, 4e6), _counter(2, 5.2e6), _player(3, 3.5e6))
        result = _evaluate(_session(*rounds), market)
        assert result.response_type == "COUNTER"
        assert result.tone == "INSULTED"
        assert result.is_ultimatum is True

    def test_great_concession_is_welcomed(self, market):
        rounds = (_player(1, 3e6), _counter(2, 5.2e6), _player(3, 3.5e6))
        result = _evaluate(_session(*rounds), market)
        assert result.response_type == "COUNTER"
        assert result.tone == "ENTHUSIASTIC"

    def test_long_negotiation_triggers_ultimatum(self, market):
        result = _evaluate(_session(_player(5, 3e6)), market)
        assert result.response_type == "COUNTER"
        assert result.is_ultimatum is True

    def test_meeting_ultimatum_at_floor(self, market):
        rounds = (_player(1, 3e6), _counter(2, 5e6, ultimatum=True), _player(3, 4.6e6))
        result = _evaluate(_session(*rounds), market)
        assert result.response_type == "ACCEPT"
        assert result.reasons[0].code == "ULTIMATUM_MET"

    def test_missing_ultimatum_rejects(self, market):
        rounds = (_player(1, 3e6), _counter(2, 5e6, ultimatum=True), _player(3, 3.5e6))
        result = _evaluate(_session(*rounds), market)
        assert result.response_type == "REJECT"
        assert result.relationship_delta == -5
        assert result.reasons[0].code == "ULTIMATUM_NOT_MET"

    def test_player_final_offer_is_never_countered(self, market):
        low = _evaluate(_session(_player(1, 3e6, ultimatum=True)), market)
        high = _evaluate(_session(_player(1, 5e6, ultimatum=True)), market)
        assert low.response_type == "REJECT"
        assert low.reasons[0].code == "FINAL_OFFER_REJECTED"
        assert high.response_type == "ACCEPT"
        assert high.response_delay_days == 1

    def test_no_rounds_rejects(self, market):
        result = _evaluate(_session(), market)
        assert result.response_type == "REJECT"
        assert result.reasons[0].code == "NO_OFFER"

    def test_wrong_terms_variant_raises(self, market):
        bad = NegotiationRound(round_number=1, offered_by="PLAYER", terms=SponsorTerms(annual_payment=1.0, duration=1))
        with pytest.raises(NegotiationError) as exc:
            _evaluate(_session(bad), market)
        assert exc.value.code == NEGOTIATION_TERMS_MISMATCH

    def test_same_session_same_answer(self, market):
        session = _session(_player(1, 4.5e6))
        assert _evaluate(session, market).to_payload() == _evaluate(session, market).to_payload()
