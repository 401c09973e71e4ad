"""
Consequence models layered on top of the crater/blast physics: destruction rings,
casualties, infrastructure and economic loss, climate, and secondary disasters.

These are coarse heuristics with configurable constants (see ``config``). None of
them raise on physical input; missing or non-finite populations count as zero.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from math import floor, isfinite, pi

from .config import EngineConfig, default_config
from .impact_model import J_PER_MT_TNT, BlastResult, CraterResult
from .models import Accuracy, Asteroid, ImpactLocation
from .quantity import Quantity, safe_div

log = logging.getLogger(__name__)


def _count(x: float) -> int:
    """Whole people/buildings; non-finite or negative becomes 0."""
    return int(floor(x)) if isfinite(x) and x > 0.0 else 0


def _pct(x: float) -> float:
    return min(100.0, max(0.0, x)) if x == x else 0.0


# -----------------------------
# Geological
# -----------------------------
@dataclass(frozen=True)
class ExplosionStrength:
    tnt_kilotons: float
    richter_scale: Quantity
    accuracy: Accuracy = Accuracy.CALCULATED


@dataclass(frozen=True)
class ImpactRegion:
    total_destruction_radius: Quantity     # km
    severe_destruction_radius: Quantity    # km
    moderate_destruction_radius: Quantity  # km
    affected_area: Quantity                # km^2
    accuracy: Accuracy = Accuracy.CALCULATED


@dataclass(frozen=True)
class GeologicalResult:
    crater: CraterResult
    explosion_strength: ExplosionStrength
    impact_region: ImpactRegion
    crater_accuracy: Accuracy = Accuracy.CALCULATED


def geological_summary(crater: CraterResult, blast: BlastResult, tnt_kilotons: float,
                       config: EngineConfig | None = None) -> GeologicalResult:
    b = (config or default_config()).blast
    total = blast.fireball_radius.scale(b.total_ring_multiplier)
    severe = blast.airblast_radius.scale(b.severe_ring_multiplier)
    moderate = blast.thermal_radiation_radius.scale(b.moderate_ring_multiplier)
    area = moderate.power(2, unit="km^2").scale(pi)
    return GeologicalResult(
        crater=crater,
        explosion_strength=ExplosionStrength(tnt_kilotons, blast.seismic_magnitude),
        impact_region=ImpactRegion(total, severe, moderate, area),
    )


# -----------------------------
# Casualties
# -----------------------------
@dataclass(frozen=True)
class ImmediateCasualties:
    deaths: int
    vaporized: int
    crushed: int
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class ShortTermCasualties:
    deaths: int                    # within 24 hours
    injuries: int
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class LongTermCasualties:
    deaths: int                    # disease, starvation, exposure
    displaced: int
    refugees: int
    accuracy: Accuracy = Accuracy.PROBABILITY


@dataclass(frozen=True)
class CasualtyTotals:
    estimated_deaths: int
    estimated_injured: int
    estimated_displaced: int


@dataclass(frozen=True)
class CasualtyReport:
    immediate: ImmediateCasualties
    short_term: ShortTermCasualties
    long_term: LongTermCasualties
    total: CasualtyTotals
    ring_population: tuple[int, int, int]   # total / severe / moderate


def casualties(location: ImpactLocation, geological: GeologicalResult,
               config: EngineConfig | None = None) -> CasualtyReport:
    """
    Ring populations are area x density, each clamped to what is left of the total
    population, so deaths + injured can never exceed it.
    """
    cf = (config or default_config()).casualty
    region = geological.impact_region
    r_total = region.total_destruction_radius.value
    r_severe = max(region.severe_destruction_radius.value, r_total)
    r_moderate = max(region.moderate_destruction_radius.value, r_severe)

    a_total = pi * r_total ** 2
    a_severe = pi * r_severe ** 2 - a_total
    a_moderate = pi * r_moderate ** 2 - pi * r_severe ** 2

    remaining = _count(location.total_population)
    rings = []
    for area in (a_total, a_severe, a_moderate):
        p = min(_count(area * location.population_density), remaining)
        rings.append(p)
        remaining -= p
    pop_total, pop_severe, pop_moderate = rings

    def phase(fr: tuple[float, float, float]) -> list[int]:
        return [_count(pop * f) for pop, f in zip(rings, fr)]

    imm = phase(cf.immediate)
    short = phase(cf.short_term)
    inj = phase(cf.injured)
    immediate_deaths = sum(imm)
    short_deaths = sum(short)
    injuries = sum(inj)

    affected = pop_total + pop_severe + pop_moderate
    uninjured = max(0, affected - immediate_deaths - short_deaths - injuries)
    long_deaths = _count(uninjured * cf.long_term_survivor_fraction)
    displaced = min(_count(affected * cf.displacement_ratio), _count(location.total_population))
    refugees = _count(displaced * cf.refugee_fraction)

    deaths = immediate_deaths + short_deaths + long_deaths
    log.debug("[impact.casualties] affected=%d deaths=%d injured=%d displaced=%d",
              affected, deaths, injuries, displaced)
    return CasualtyReport(
        immediate=ImmediateCasualties(immediate_deaths, imm[0], imm[1]),
        short_term=ShortTermCasualties(short_deaths, injuries),
        long_term=LongTermCasualties(long_deaths, displaced, refugees),
        total=CasualtyTotals(deaths, injuries, displaced),
        ring_population=(pop_total, pop_severe, pop_moderate),
    )


# -----------------------------
# Infrastructure & economy
# -----------------------------
@dataclass(frozen=True)
class MilitaryDamage:
    bases_destroyed: int
    equipment_loss_usd: float
    personnel_loss: int
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class CivilianDamage:
    buildings_destroyed: int
    homes_destroyed: int
    hospitals_damaged: int
    schools_damaged: int
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class EnergyDamage:
    power_plants_destroyed: int
    nuclear_plants_affected: int
    grid_damage_percent: float
    nuclear_fallout_risk: float    # 0-1
    oil_refineries_damaged: int
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class CulturalDamage:
    heritage_sites_destroyed: int
    museums_destroyed: int
    cultural_loss: str
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class EconomicDamage:
    direct_damage_usd: float
    indirect_damage_usd: float
    lost_production_usd: float     # per year
    recovery_time_years: float
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class SurvivalMetrics:
    food_production_loss: float    # %
    water_supply_damage: float     # %
    medical_capacity_loss: float   # %
    shelter_availability: float    # % remaining
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class InfrastructureReport:
    military: MilitaryDamage
    civilian: CivilianDamage
    energy: EnergyDamage
    cultural: CulturalDamage
    economic: EconomicDamage
    survival: SurvivalMetrics


def infrastructure_damage(location: ImpactLocation, geological: GeologicalResult,
                          tnt_megatons: float, casualty_report: CasualtyReport,
                          config: EngineConfig | None = None) -> InfrastructureReport:
    h = (config or default_config()).infrastructure
    area = geological.impact_region.affected_area.value
    if not (isfinite(area) and area > 0.0):
        area = 0.0
    radius = geological.impact_region.moderate_destruction_radius.value

    buildings = _count(area * safe_div(location.population_density, h.people_per_building))
    homes = _count(buildings * h.residential_fraction)

    bases = _count(area / h.km2_per_military_base)
    equipment = bases * h.equipment_value_per_base
    hospitals = _count(area / h.km2_per_hospital)
    schools = _count(area / h.km2_per_school)

    plants = _count(area / h.km2_per_power_plant)
    nuclear = _count(plants * h.nuclear_plant_fraction)
    grid = _pct(radius / 100.0 * h.grid_damage_per_100km)

    heritage = _count(area / h.km2_per_heritage_site)
    museums = _count(area / h.km2_per_museum)

    infra_value = location.infrastructure_value if isfinite(location.infrastructure_value) else 0.0
    direct = infra_value * (area / h.infrastructure_value_area_km2) + equipment + homes * h.home_replacement_cost
    gdp = location.gdp_per_capita if isfinite(location.gdp_per_capita) else 0.0
    lost_production = gdp * casualty_report.total.estimated_deaths * h.lost_production_fraction
    mt = tnt_megatons if isfinite(tnt_megatons) and tnt_megatons > 0.0 else 0.0
    recovery = min(h.recovery_cap_years, mt / 10.0 * h.recovery_years_per_10mt)

    survival = SurvivalMetrics(
        food_production_loss=_pct(area / 1e5 * h.food_loss_per_100k_km2),
        water_supply_damage=_pct(grid * h.water_per_grid),
        medical_capacity_loss=_pct(hospitals / max(1.0, area / h.km2_per_hospital) * 100.0),
        shelter_availability=_pct(100.0 - homes / max(1, buildings) * 100.0),
    )
    log.debug("[impact.infrastructure] area_km2=%.4g buildings=%d direct_usd=%.4g", area, buildings, direct)
    return InfrastructureReport(
        military=MilitaryDamage(bases, equipment, _count(bases * h.personnel_per_base)),
        civilian=CivilianDamage(buildings, homes, hospitals, schools),
        energy=EnergyDamage(plants, nuclear, grid, h.nuclear_fallout_risk if nuclear > 0 else 0.0,
                            _count(area / h.km2_per_refinery)),
        cultural=CulturalDamage(heritage, museums, "Significant" if heritage > 0 else "Moderate"),
        economic=EconomicDamage(direct, direct * h.indirect_multiplier, lost_production, recovery),
        survival=survival,
    )


@dataclass(frozen=True)
class DamageReport:
    casualties: CasualtyReport
    infrastructure: InfrastructureReport


def casualties_and_damage(location: ImpactLocation, geological: GeologicalResult,
                          tnt_megatons: float, config: EngineConfig | None = None) -> DamageReport:
    c = casualties(location, geological, config)
    return DamageReport(c, infrastructure_damage(location, geological, tnt_megatons, c, config))


# -----------------------------
# Climate
# -----------------------------
@dataclass(frozen=True)
class TemperatureEffects:
    immediate_change: float        # deg C, local
    short_term_change: float       # 1 year
    long_term_change: float        # 10 years
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class AtmosphereEffects:
    dust_injection_km3: float
    sunlight_reduction_percent: float
    duration_months: int
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class HabitabilityEffects:
    area_lost_km2: float
    percentage_lost: float
    agriculture_impact: float      # % loss
    accuracy: Accuracy = Accuracy.ESTIMATED


@dataclass(frozen=True)
class LongTermClimate:
    extinction_risk: float         # 0-1, coarse tiers on yield
    recovery_time_years: int
    permanent_change: bool
    accuracy: Accuracy = Accuracy.PROBABILITY


@dataclass(frozen=True)
class ClimateReport:
    temperature: TemperatureEffects
    atmosphere: AtmosphereEffects
    habitability: HabitabilityEffects
    long_term: LongTermClimate


def climate_effects(crater_volume: Quantity | float, tnt_megatons: float, is_ocean: bool,
                    crater_diameter: Quantity | float,
                    config: EngineConfig | None = None) -> ClimateReport:
    ch = (config or default_config()).climate
    volume = float(crater_volume)
    dust = volume / 1e9 * ch.dust_fraction if isfinite(volume) and volume > 0.0 else 0.0

    sunlight = min(ch.sunlight_reduction_cap, dust * ch.sunlight_reduction_per_km3)
    months = _count(dust * ch.dust_months_per_km3)

    diameter = float(crater_diameter)
    direct = pi * (diameter / 2000.0) ** 2 if isfinite(diameter) else 0.0
    lost = direct * (1.0 + ch.indirect_habitability_multiplier)

    risk = ch.extinction_baseline
    for threshold, tier_risk in ch.extinction_tiers:
        if tnt_megatons > threshold:
            risk = tier_risk
            break

    return ClimateReport(
        temperature=TemperatureEffects(
            immediate_change=ch.local_heating_ocean_c if is_ocean else ch.local_heating_land_c,
            short_term_change=-dust * ch.short_term_cooling_per_km3,
            long_term_change=-dust * ch.long_term_cooling_per_km3,
        ),
        atmosphere=AtmosphereEffects(dust, sunlight, months),
        habitability=HabitabilityEffects(
            area_lost_km2=lost,
            percentage_lost=lost / ch.earth_land_area_km2 * 100.0,
            agriculture_impact=_pct(sunlight * ch.agriculture_per_sunlight),
        ),
        long_term=LongTermClimate(
            extinction_risk=risk,
            recovery_time_years=months // 12 + int(ch.base_recovery_years),
            permanent_change=tnt_megatons > ch.permanent_change_mt,
        ),
    )


# -----------------------------
# Natural disasters
# -----------------------------
@dataclass(frozen=True)
class TsunamiEffects:
    triggered: bool
    wave_height_m: float
    affected_coastline_km: float
    inland_penetration_km: float
    casualties: int
    accuracy: Accuracy = Accuracy.CALCULATED


@dataclass(frozen=True)
class SeismicEffects:
    earthquake_magnitude: Quantity
    aftershocks: int
    fault_line_activation: bool
    volcanic_activity: bool
    accuracy: Accuracy = Accuracy.CALCULATED


@dataclass(frozen=True)
class AtmosphericEffects:
    hurricane_force_winds: bool
    wind_radius_km: float
    fire_storms: bool
    fire_storm_radius_km: float
    accuracy: Accuracy = Accuracy.CALCULATED


@dataclass(frozen=True)
class DisasterReport:
    tsunami: TsunamiEffects
    seismic: SeismicEffects
    atmospheric: AtmosphericEffects


def _tsunami(location: ImpactLocation, tnt_megatons: float, cfg: EngineConfig) -> TsunamiEffects:
    d = cfg.disaster
    if not location.is_ocean:
        return TsunamiEffects(False, 0.0, 0.0, 0.0, 0)
    depth = location.ocean_depth_m or d.default_ocean_depth_m
    energy = tnt_megatons * J_PER_MT_TNT
    if not (isfinite(energy) and energy > 0.0):
        return TsunamiEffects(True, 0.0, 0.0, 0.0, 0, Accuracy.ESTIMATED)
    height = (energy / d.tsunami_energy_ref_j) ** d.tsunami_exponent * d.tsunami_height_coeff_m
    if d.cap_wave_at_depth:
        height = min(height, depth)
    coastline = min(d.coastline_cap_km, height * d.coastline_km_per_m)
    inland = height * d.inland_km_per_m
    deaths = _count(coastline * inland * d.coastal_population_density * d.tsunami_fatality)
    return TsunamiEffects(True, height, coastline, inland, deaths, Accuracy.ESTIMATED)


def natural_disasters(asteroid: Asteroid, location: ImpactLocation, tnt_megatons: float,
                      blast: BlastResult, config: EngineConfig | None = None) -> DisasterReport:
    cfg = config or default_config()
    d = cfg.disaster
    M = blast.seismic_magnitude
    hurricane = tnt_megatons > d.hurricane_threshold_mt
    fire = tnt_megatons > d.firestorm_threshold_mt
    tsunami = _tsunami(location, tnt_megatons, cfg)
    log.debug("[impact.disasters] id=%s Mt=%.4g M=%.2f tsunami_m=%.3g",
              asteroid.id, tnt_megatons, M.value, tsunami.wave_height_m)
    return DisasterReport(
        tsunami=tsunami,
        seismic=SeismicEffects(
            earthquake_magnitude=M,
            aftershocks=_count(M.value * d.aftershocks_per_magnitude),
            fault_line_activation=M.value > d.fault_activation_magnitude,
            volcanic_activity=M.value > d.volcanic_magnitude,
        ),
        atmospheric=AtmosphericEffects(
            hurricane_force_winds=hurricane,
            wind_radius_km=blast.airblast_radius.value * d.hurricane_radius_multiplier if hurricane else 0.0,
            fire_storms=fire,
            fire_storm_radius_km=blast.thermal_radiation_radius.value * d.firestorm_radius_multiplier if fire else 0.0,
        ),
    )
