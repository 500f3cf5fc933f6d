from __future__ import annotations

"""Team-side driver evaluation: eligible pool, attractiveness, approach interest.

Eligible pool
-------------
- drivers from the team exactly one place above in the standings (poach target)
- drivers from every team below
- unattached drivers
- never the team's own drivers

Attractiveness
--------------
Experienced drivers (>= 2 recorded seasons) are judged on perceived value.
Rookies are judged on raw ability with a +/-10% error that is seeded per team
principal, so two principals disagree about the same rookie but each one is
consistent with itself. Both are then scaled by an age x duration table.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from ..config import DEFAULT_CONFIG, NegotiationConfig
from ..types import Driver, MarketContext, RankedDriver, Team, TeamInterestResult, TeamPrincipal
from ..utils import clamp01, seeded_signed
from ..valuation import driver_ability, driver_age, perceived_value


def age_bracket(age: int, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> str:
    tcfg = cfg.team
    if age < int(tcfg.young_age_threshold):
        return "young"
    if age < int(tcfg.prime_age_threshold):
        return "prime"
    if age < int(tcfg.veteran_age_threshold):
        return "mature"
    return "veteran"


def age_multiplier(age: int, contract_years: int, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> float:
    """Age x duration multiplier in [0.6, 1.1]."""
    tcfg = cfg.team
    row = tcfg.age_multiplier_table[age_bracket(age, cfg=cfg)]
    if contract_years <= int(tcfg.short_contract_years):
        idx = 0
    elif contract_years <= int(tcfg.medium_contract_years):
        idx = 1
    else:
        idx = 2
    return float(row[idx])


def is_rookie(driver: Driver, *, cfg: NegotiationConfig = DEFAULT_CONFIG) -> bool:
    return len(driver.career_history or ()) < int(cfg.team.rookie_history_threshold)


def driver_attractiveness(
    driver: Driver,
    principal_id: str,
    game_year: int,
    contract_years: int,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> float:
    if is_rookie(driver, cfg=cfg):
        error = seeded_signed(principal_id, driver.id) * float(cfg.team.rookie_error_range)
        base = clamp01(driver_ability(driver, cfg=cfg.valuation) + error)
    else:
        base = perceived_value(driver.career_history, cfg=cfg.valuation)

    mult = age_multiplier(driver_age(driver, game_year), contract_years, cfg=cfg)
    return clamp01(base * mult)


def eligible_driver_pool(team: Team, market: MarketContext) -> List[Driver]:
    position = market.position_of(team.id)

    eligible: Set[str] = set()
    if position > 1:
        for tid, pos in market.standings.items():
            if int(pos) == position - 1:
                eligible.add(tid)
                break
    for tid, pos in market.standings.items():
        if int(pos) > position:
            eligible.add(tid)

    out: List[Driver] = []
    for d in market.drivers:
        if d.team_id == team.id:
            continue
        if not d.team_id or d.team_id in eligible:
            out.append(d)
    return out


def team_shortlist(
    team: Team,
    principal: TeamPrincipal,
    market: MarketContext,
    *,
    contract_years: Optional[int] = None,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> List[RankedDriver]:
    """Eligible drivers ranked by attractiveness, best first."""
    years = int(contract_years) if contract_years is not None else int(cfg.team.default_contract_years)
    ranked = [
        RankedDriver(
            driver=d,
            attractiveness=driver_attractiveness(d, principal.id, market.game_year, years, cfg=cfg),
            is_rookie=is_rookie(d, cfg=cfg),
            age=driver_age(d, market.game_year),
        )
        for d in eligible_driver_pool(team, market)
    ]
    ranked.sort(key=lambda r: r.attractiveness, reverse=True)
    return ranked


@dataclass(frozen=True, slots=True)
class TeamInterestInput:
    approaching_driver: Driver
    team: Team
    principal: TeamPrincipal
    current_drivers: Sequence[Driver]
    market: MarketContext
    has_vacancy: bool
    proposed_duration: int


def evaluate_driver_approach(
    inp: TeamInterestInput,
    *,
    cfg: NegotiationConfig = DEFAULT_CONFIG,
) -> TeamInterestResult:
    """Decide whether a team entertains a driver who approached it."""
    year = inp.market.game_year
    years = int(inp.proposed_duration)
    approacher = driver_attractiveness(inp.approaching_driver, inp.principal.id, year, years, cfg=cfg)
    current = tuple(
        driver_attractiveness(d, inp.principal.id, year, years, cfg=cfg) for d in inp.current_drivers
    )

    def _result(interested: bool, reason: str) -> TeamInterestResult:
        return TeamInterestResult(
            interested=interested,
            reason=reason,  # type: ignore[arg-type]
            approacher_attractiveness=approacher,
            current_drivers_attractiveness=current,
        )

    pool_ids = {d.id for d in eligible_driver_pool(inp.team, inp.market)}
    if inp.approaching_driver.id not in pool_ids:
        return _result(False, "NOT_ON_SHORTLIST")

    # An empty lineup is a vacancy even if no one has left yet.
    if inp.has_vacancy or not current:
        return _result(True, "VACANCY")

    weakest = min(current)

    if approacher > weakest + float(cfg.team.upgrade_margin):
        return _result(True, "UPGRADE")
    if approacher >= weakest - float(cfg.team.similar_margin):
        return _result(True, "CHEAPER")
    return _result(False, "DOWNGRADE")
