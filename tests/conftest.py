"""Shared pytest fixtures for negotiation engine tests."""

import pytest

from negotiation.types import (
    ActiveManufacturerContract,
    CareerSeasonRecord,
    Chief,
    Driver,
    DriverAttributes,
    Manufacturer,
    ManufacturerCosts,
    MarketContext,
    Sponsor,
    Team,
    TeamPrincipal,
)


GAME_YEAR = 2025


def make_attributes(total: float) -> DriverAttributes:
    """Seven equal attributes summing to ``total``."""
    v = float(total) / 7.0
    return DriverAttributes(
        pace=v,
        consistency=v,
        focus=v,
        overtaking=v,
        wet_weather=v,
        smoothness=v,
        defending=v,
    )


def make_history(ratios, team_id="t5", start_season=2020):
    """One record per ratio, oldest first; team scored 100 points each season."""
    return tuple(
        CareerSeasonRecord(
            season=start_season + i,
            team_id=team_id,
            races=22,
            total_points=100.0 * r,
            team_total_points=100.0,
        )
        for i, r in enumerate(ratios)
    )


@pytest.fixture
def teams():
    """Ten teams; t1 richest, t10 poorest."""
    return tuple(Team(id=f"t{i}", name=f"Team {i}", budget=float(110_000_000 - i * 10_000_000)) for i in range(1, 11))


@pytest.fixture
def standings(teams):
    return {t.id: i for i, t in enumerate(teams, start=1)}


@pytest.fixture
def drivers():
    return (
        Driver(
            id="d_star",
            date_of_birth="1997-03-10",
            attributes=make_attributes(595),
            team_id="t1",
            career_history=make_history([0.6, 0.65, 0.7], team_id="t1"),
        ),
        Driver(
            id="d_mid",
            date_of_birth="1995-07-01",
            attributes=make_attributes(455),
            team_id="t4",
            career_history=make_history([0.5, 0.5], team_id="t4"),
        ),
        Driver(
            id="d_vet",
            date_of_birth="1988-01-20",
            attributes=make_attributes(420),
            team_id="t6",
            career_history=make_history([0.4, 0.35, 0.3, 0.3], team_id="t6"),
        ),
        Driver(
            id="d_rookie",
            date_of_birth="2005-09-15",
            attributes=make_attributes(490),
            team_id=None,
        ),
        Driver(
            id="d_backmarker",
            date_of_birth="1999-11-11",
            attributes=make_attributes(385),
            team_id="t9",
            career_history=make_history([0.2, 0.25], team_id="t9"),
        ),
        Driver(
            id="d_own",
            date_of_birth="1996-02-02",
            attributes=make_attributes(420),
            team_id="t5",
            career_history=make_history([0.45, 0.45], team_id="t5"),
        ),
    )


@pytest.fixture
def chiefs():
    return (
        Chief(id="c_designer_t1", role="DESIGNER", ability=90.0, team_id="t1"),
        Chief(id="c_designer_t8", role="DESIGNER", ability=55.0, team_id="t8"),
        Chief(id="c_engineer_free", role="ENGINEER", ability=70.0, team_id=None),
        Chief(id="c_mechanic_t9", role="MECHANIC", ability=60.0, team_id="t9"),
    )


@pytest.fixture
def sponsors():
    return (
        Sponsor(id="s_title", tier="TITLE", payment=10_000_000.0, min_reputation=60.0, rival_group="energy"),
        Sponsor(id="s_major", tier="MAJOR", payment=4_000_000.0, min_reputation=40.0, rival_group="energy"),
        Sponsor(id="s_minor", tier="MINOR", payment=1_000_000.0, min_reputation=50.0),
    )


@pytest.fixture
def manufacturers():
    return (
        Manufacturer(
            id="m_works",
            name="Works Power",
            costs=ManufacturerCosts(
                base_engine=2_000_000.0,
                upgrade=500_000.0,
                customisation_point=100_000.0,
                optimisation=1_000_000.0,
            ),
        ),
    )


@pytest.fixture
def market(teams, standings, drivers, chiefs, sponsors, manufacturers):
    return MarketContext(
        teams=teams,
        standings=standings,
        drivers=drivers,
        chiefs=chiefs,
        principals=tuple(TeamPrincipal(id=f"tp_{t.id}", team_id=t.id) for t in teams),
        sponsors=sponsors,
        sponsor_deals=(),
        manufacturers=manufacturers,
        manufacturer_contracts=(
            ActiveManufacturerContract(manufacturer_id="m_works", team_id="t1"),
            ActiveManufacturerContract(manufacturer_id="m_works", team_id="t2"),
        ),
        secured_team_ids=(),
        relationship_scores={},
        available_seats=4,
        game_year=GAME_YEAR,
    )
