from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from math import degrees, inf
from typing import Iterable, Union

from .config import EngineConfig, default_config
from .models import Asteroid, DeflectionStrategy, StrategyCategory
from .non_kinetic import (
    SECONDS_PER_YEAR, GravityTractorResult, NuclearDeflectionResult, SolarPressureResult, gravity_tractor,
    nuclear_standoff, solar_pressure,
)
from .orbit import AU_M
from .quantity import safe_div

log = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25

PhysicsResult = Union[GravityTractorResult, NuclearDeflectionResult, SolarPressureResult]

# momentum-limited strategies: the nominal delta-V is quoted for the reference target mass
MASS_SCALED = (StrategyCategory.KINETIC, StrategyCategory.NUCLEAR)


@dataclass(frozen=True)
class StrategyAssessment:
    strategy: DeflectionStrategy
    effectiveness: float
    applied_delta_v_mps: float
    trajectory_change_deg: float
    impact_probability_reduction: float
    cost_effectiveness: float      # degrees of deflection per $1B
    time_to_implement_years: float
    risk_factors: tuple[str, ...]
    mission_success: bool
    suitability: str               # optimal | good | fair | poor
    warnings: tuple[str, ...] = ()
    physics: PhysicsResult | None = None   # category sub-model run on this target


@dataclass(frozen=True)
class LaunchWindow:
    earliest: datetime
    optimal: datetime
    latest: datetime
    impact: datetime


# ---------- Geometry ----------
def trajectory_change(delta_v: float, distance_au: float, time_years: float) -> float:
    """Small-angle deflection (degrees) accumulated by a delta-V applied time_years before encounter."""
    return degrees(safe_div(delta_v * time_years * SECONDS_PER_YEAR, distance_au * AU_M))


def impact_probability_reduction(change_deg: float, probability: float,
                                 full_avoidance_deg: float = 0.1) -> float:
    return probability * min(1.0, safe_div(change_deg, full_avoidance_deg))


def _suitability(effectiveness: float) -> str:
    if effectiveness > 0.8:
        return "optimal"
    if effectiveness > 0.6:
        return "good"
    if effectiveness > 0.4:
        return "fair"
    return "poor"


def _size_multiplier(strategy: DeflectionStrategy, diameter_m: float, cfg: EngineConfig) -> tuple[float, list[str]]:
    h = cfg.deflection
    if strategy.category is StrategyCategory.KINETIC:
        if diameter_m > h.large_kinetic_diameter_m:
            return h.large_kinetic_multiplier, ["Large asteroid size"]
        if diameter_m < h.small_kinetic_diameter_m:
            return h.small_kinetic_multiplier, []
    elif strategy.category is StrategyCategory.NUCLEAR:
        if diameter_m > h.large_nuclear_diameter_m:
            return h.large_nuclear_multiplier, []
        if diameter_m < h.small_nuclear_diameter_m:
            return h.small_nuclear_multiplier, ["Small target, fragmentation risk"]
    return 1.0, []


# ---------- Assessment ----------
def _physics_model(strategy: DeflectionStrategy, asteroid: Asteroid, warning_time_years: float,
                   cfg: EngineConfig) -> PhysicsResult | None:
    """Sub-model for the strategy's category; slow pushes get the warning time left after lead time."""
    push_years = max(0.0, warning_time_years - strategy.lead_time_years)
    if strategy.category is StrategyCategory.GRAVITY:
        return gravity_tractor(strategy.mass_required_kg, asteroid.mass_kg, asteroid.radius_m, push_years,
                               config=cfg)
    if strategy.category is StrategyCategory.NUCLEAR:
        return nuclear_standoff(asteroid.mass_kg, asteroid.radius_m, asteroid.composition, config=cfg)
    if strategy.category is StrategyCategory.SOLAR:
        return solar_pressure(asteroid.mass_kg, asteroid.radius_m, push_years,
                              payload_kg=strategy.mass_required_kg, config=cfg)
    return None


def strategy_effectiveness(strategy: DeflectionStrategy, asteroid: Asteroid, warning_time_years: float,
                           impact_probability: float = 1.0, distance_au: float | None = None,
                           config: EngineConfig | None = None) -> StrategyAssessment:
    cfg = config or default_config()
    h = cfg.deflection
    distance_au = h.default_distance_au if distance_au is None else distance_au
    warnings: list[str] = []

    size_k, factors = _size_multiplier(strategy, asteroid.diameter_m, cfg)
    effectiveness = strategy.effectiveness * size_k
    if strategy.technology_readiness < h.low_trl_threshold:
        effectiveness *= h.low_trl_multiplier
        factors.append("Unproven technology")
    if strategy.lead_time_years > warning_time_years:
        effectiveness *= h.insufficient_lead_time_multiplier
        factors.append("Insufficient lead time")
        warnings.append(f"Lead time {strategy.lead_time_years:g} y exceeds warning time "
                        f"{warning_time_years:g} y")
    effectiveness = min(1.0, effectiveness)

    physics = _physics_model(strategy, asteroid, warning_time_years, cfg)
    if physics is not None:
        warnings.extend(physics.warnings)
        if not physics.within_validity_range:
            factors.append("Outside model validity range")
        if not physics.feasible:
            factors.append("Mission requirements not met")

    mass_k = 1.0
    if strategy.category in MASS_SCALED:
        mass_k = min(h.max_mass_scaling, safe_div(h.reference_target_mass_kg, asteroid.mass_kg))
    delta_v = strategy.delta_v_mps * mass_k * effectiveness

    change = trajectory_change(delta_v, distance_au, warning_time_years)
    reduction = impact_probability_reduction(change, impact_probability, h.full_avoidance_angle_deg)
    cost_b = strategy.cost_usd / h.cost_normaliser_usd
    cost_eff = inf if cost_b == 0 else change / cost_b

    log.debug("[deflection.assess] strategy=%s eff=%.3f dv=%.4g change_deg=%.4g ce=%.4g",
              strategy.id, effectiveness, delta_v, change, cost_eff)
    return StrategyAssessment(
        strategy=strategy,
        effectiveness=effectiveness,
        applied_delta_v_mps=delta_v,
        trajectory_change_deg=change,
        impact_probability_reduction=reduction,
        cost_effectiveness=cost_eff,
        time_to_implement_years=strategy.lead_time_years,
        risk_factors=tuple(factors),
        mission_success=effectiveness > h.success_threshold,
        suitability=_suitability(effectiveness),
        warnings=tuple(warnings),
        physics=physics,
    )


def _rank_key(a: StrategyAssessment) -> float:
    ce = a.cost_effectiveness
    return -inf if ce != ce else ce


def compare_strategies(strategies: Iterable[DeflectionStrategy], asteroid: Asteroid,
                       warning_time_years: float, impact_probability: float = 1.0,
                       distance_au: float | None = None,
                       config: EngineConfig | None = None) -> list[StrategyAssessment]:
    """Best cost-effectiveness first; ties keep the given order, NaN goes last."""
    assessed = [strategy_effectiveness(s, asteroid, warning_time_years, impact_probability,
                                       distance_au, config) for s in strategies]
    return sorted(assessed, key=_rank_key, reverse=True)


def launch_window(strategy: DeflectionStrategy, warning_time_years: float,
                  reference_date: datetime | None = None) -> LaunchWindow:
    """Earliest / optimal / latest launch at 1.5x / 1.0x / 0.8x the lead time before impact."""
    now = reference_date or datetime.now(timezone.utc)
    impact = now + timedelta(days=warning_time_years * DAYS_PER_YEAR)
    lead = timedelta(days=strategy.lead_time_years * DAYS_PER_YEAR)
    return LaunchWindow(earliest=impact - lead * 1.5, optimal=impact - lead,
                        latest=impact - lead * 0.8, impact=impact)

