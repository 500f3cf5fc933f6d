"""Tests for team shortlisting and approach interest."""

import pytest

from negotiation.evaluators.team import (
    TeamInterestInput,
    age_multiplier,
    driver_attractiveness,
    eligible_driver_pool,
    evaluate_driver_approach,
    is_rookie,
    team_shortlist,
)
from negotiation.types import TeamPrincipal


def _driver(drivers, driver_id):
    return next(d for d in drivers if d.id == driver_id)


class TestEligiblePool:
    def test_one_above_all_below_and_free_agents(self, teams, market):
        pool = {d.id for d in eligible_driver_pool(teams[4], market)}
        assert pool == {"d_mid", "d_vet", "d_rookie", "d_backmarker"}

    def test_leader_has_no_team_above(self, teams, market):
        pool = {d.id for d in eligible_driver_pool(teams[0], market)}
        assert "d_star" not in pool
        assert pool == {"d_mid", "d_vet", "d_rookie", "d_backmarker", "d_own"}

    def test_never_includes_own_drivers(self, teams, market):
        for team in teams:
            assert all(d.team_id != team.id for d in eligible_driver_pool(team, market))


class TestAttractiveness:
    @pytest.mark.parametrize(
        "age,years,expected",
        [(22, 1, 0.95), (22, 3, 1.1), (28, 2, 1.0), (31, 3, 0.9), (35, 3, 0.6), (35, 1, 0.9)],
    )
    def test_age_duration_table(self, age, years, expected):
        assert age_multiplier(age, years) == pytest.approx(expected)

    def test_table_values_within_range(self):
        for age in range(18, 45):
            for years in (1, 2, 3, 5):
                assert 0.6 <= age_multiplier(age, years) <= 1.1

    def test_experienced_driver_uses_perceived_value(self, drivers):
        mid = _driver(drivers, "d_mid")
        assert not is_rookie(mid)
        # perceived 0.5, age 30 (mature), two-year deal => 0.95
        assert driver_attractiveness(mid, "tp_t5", 2025, 2) == pytest.approx(0.475)

    def test_rookie_error_is_per_principal_and_stable(self, drivers):
        rookie = _driver(drivers, "d_rookie")
        assert is_rookie(rookie)
        a1 = driver_attractiveness(rookie, "tp_t5", 2025, 2)
        a2 = driver_attractiveness(rookie, "tp_t5", 2025, 2)
        assert a1 == a2
        assert 0.6 - 1e-9 <= a1 <= 0.8 + 1e-9
        others = {driver_attractiveness(rookie, f"tp_t{i}", 2025, 2) for i in range(1, 11)}
        assert len(others) > 1

    def test_shortlist_sorted_best_first(self, teams, market):
        principal = TeamPrincipal(id="tp_t5", team_id="t5")
        ranked = team_shortlist(teams[4], principal, market)
        scores = [r.attractiveness for r in ranked]
        assert scores == sorted(scores, reverse=True)
        assert {r.driver.id for r in ranked} == {"d_mid", "d_vet", "d_rookie", "d_backmarker"}
        rookie_entry = next(r for r in ranked if r.driver.id == "d_rookie")
        assert rookie_entry.is_rookie is True
        assert rookie_entry.age == 20


class TestApproachInterest:
    def _evaluate(self, teams, market, drivers, approacher_id, *, current=("d_own",), vacancy=False):
        return evaluate_driver_approach(
            TeamInterestInput(
                approaching_driver=_driver(drivers, approacher_id),
                team=teams[4],
                principal=TeamPrincipal(id="tp_t5", team_id="t5"),
                current_drivers=tuple(_driver(drivers, d) for d in current),
                market=market,
                has_vacancy=vacancy,
                proposed_duration=2,
            )
        )

    def test_not_on_shortlist(self, teams, market, drivers):
        result = self._evaluate(teams, market, drivers, "d_star", vacancy=True)
        assert result.interested is False
        assert result.reason == "NOT_ON_SHORTLIST"

    def test_vacancy(self, teams, market, drivers):
        result = self._evaluate(teams, market, drivers, "d_backmarker", vacancy=True)
        assert result.interested is True
        assert result.reason == "VACANCY"

    def test_empty_lineup_counts_as_vacancy(self, teams, market, drivers):
        result = self._evaluate(teams, market, drivers, "d_backmarker", current=())
        assert result.reason == "VACANCY"

    def test_upgrade(self, teams, market, drivers):
        result = self._evaluate(teams, market, drivers, "d_rookie")
        assert result.interested is True
        assert result.reason == "UPGRADE"

    def test_similar_driver_may_be_cheaper(self, teams, market, drivers):
        result = self._evaluate(teams, market, drivers, "d_mid")
        assert result.interested is True
        assert result.reason == "CHEAPER"
        assert result.approacher_attractiveness == pytest.approx(0.475)
        assert result.current_drivers_attractiveness == pytest.approx((0.45,))

    def test_downgrade(self, teams, market, drivers):
        result = self._evaluate(teams, market, drivers, "d_backmarker")
        assert result.interested is False
        assert result.reason == "DOWNGRADE"
