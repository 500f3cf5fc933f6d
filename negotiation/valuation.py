from __future__ import annotations

"""Performance valuation and organizational quality (pure, no I/O).

- perceived_value: decayed contribution ratio (own points / team points)
- market_value: population percentile of perceived value -> dollars
- team_quality / team_prestige: 0..1 scores from standings / budgets

Every function here is total: degenerate inputs resolve to the neutral value
instead of raising.
"""

from typing import Iterable, Mapping, Optional, Sequence

from .config import (
    DEFAULT_DRIVER_CONFIG,
    DEFAULT_VALUATION_CONFIG,
    DriverEvaluatorConfig,
    ValuationConfig,
)
from .types import CareerSeasonRecord, Driver, Team
from .utils import age_in_year, clamp01, lerp, round_money, safe_float


# -----------------------------------------------------------------------------
# Performance
# -----------------------------------------------------------------------------


def contribution_ratio(record: CareerSeasonRecord, *, cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG) -> float:
    """Own points / employer points; neutral when the employer scored nothing."""
    team_pts = safe_float(record.team_total_points, 0.0)
    if team_pts <= 0.0:
        return float(cfg.neutral_value)
    return clamp01(safe_float(record.total_points, 0.0) / team_pts)


def perceived_value(
    history: Optional[Iterable[CareerSeasonRecord]],
    *,
    cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG,
) -> float:
    """Exponential-decay weighted contribution ratio over recent seasons.

    sum(ratio_i * decay^i) / sum(decay^i), i=0 being the most recent season.
    """
    records = list(history or ())
    if not records:
        return float(cfg.neutral_value)

    recent = sorted(records, key=lambda r: int(r.season), reverse=True)[: int(cfg.max_history_seasons)]

    weighted = 0.0
    total_weight = 0.0
    for i, rec in enumerate(recent):
        w = float(cfg.decay_factor) ** i
        weighted += contribution_ratio(rec, cfg=cfg) * w
        total_weight += w

    if total_weight <= 0.0:
        return float(cfg.neutral_value)
    return clamp01(weighted / total_weight)


def value_from_percentile(percentile: float, *, cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG) -> float:
    return lerp(cfg.market_value_floor, cfg.market_value_ceiling, clamp01(percentile))


def market_value(
    driver: Driver,
    population: Sequence[Driver],
    *,
    cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG,
) -> float:
    """Dollar market value from the driver's perceived-value rank in the population.

    Population is ranked ascending; percentile = rank / (n - 1), 0.5 for n == 1.
    A driver missing from the population interpolates its own perceived value.
    """
    scored = [(d.id, perceived_value(d.career_history, cfg=cfg)) for d in population]
    # Stable sort keeps population order for ties.
    scored.sort(key=lambda kv: kv[1])

    rank = next((i for i, (did, _) in enumerate(scored) if did == driver.id), -1)
    if rank < 0:
        own = perceived_value(driver.career_history, cfg=cfg)
        return float(value_from_percentile(own, cfg=cfg))

    n = len(population)
    percentile = float(rank) / float(n - 1) if n > 1 else float(cfg.neutral_value)
    return float(round_money(value_from_percentile(percentile, cfg=cfg)))


def driver_ability(driver: Driver, *, cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG) -> float:
    """Mean attribute level normalized to 0..1."""
    total = float(driver.attributes.total())
    return total / float(cfg.driver_attribute_max_total)


def career_weight(age: int, *, cfg: DriverEvaluatorConfig = DEFAULT_DRIVER_CONFIG) -> float:
    """0.3 for young drivers up to 0.7 for veterans, linear across the prime band."""
    a = int(age)
    if a < int(cfg.young_age_threshold):
        return float(cfg.young_career_weight)
    if a >= int(cfg.veteran_age_threshold):
        return float(cfg.veteran_career_weight)
    span = float(cfg.veteran_age_threshold - cfg.young_age_threshold)
    t = (a - int(cfg.young_age_threshold)) / span
    return lerp(cfg.young_career_weight, cfg.veteran_career_weight, t)


def driver_age(driver: Driver, game_year: int) -> int:
    return age_in_year(driver.date_of_birth, game_year)


# -----------------------------------------------------------------------------
# Organizational quality
# -----------------------------------------------------------------------------


def team_quality(
    team: Team,
    standings: Mapping[str, int],
    total_teams: int,
    *,
    cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG,
) -> float:
    """Leader 1.0, last place 0.0; a one-team field is neutral.

    Unranked teams are treated as last.
    """
    n = int(total_teams)
    if n <= 1:
        return float(cfg.neutral_value)
    position = int(standings.get(team.id, n))
    return float(n - position) / float(n - 1)


def team_prestige(
    team: Team,
    teams: Sequence[Team],
    *,
    cfg: ValuationConfig = DEFAULT_VALUATION_CONFIG,
) -> float:
    """Min-max normalized budget; neutral when every budget is equal."""
    budgets = [safe_float(t.budget, 0.0) for t in teams]
    if not budgets:
        return float(cfg.neutral_value)
    lo = min(budgets)
    hi = max(budgets)
    span = hi - lo
    if span == 0:
        return float(cfg.neutral_value)
    return clamp01((safe_float(team.budget, 0.0) - lo) / span)
