"""
Engine configuration: material catalogs, the deflection-strategy catalog and the
heuristic constants used by the consequence models.

Everything here is read-only process-wide data. Operations take an optional
``config`` argument and fall back to ``default_config()``; tests substitute
fixtures with ``dataclasses.replace``.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from functools import lru_cache
from math import pi
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

from .models import Asteroid, Composition, DeflectionStrategy, StrategyCategory
from .quantity import Quantity


# -----------------------------
# Bulk asteroid compositions
# -----------------------------
@dataclass(frozen=True)
class CompositionProperties:
    density: float                 # kg/m^3, typical
    density_min: float
    density_max: float
    strength_pa: float             # compressive, typical
    porosity: float
    impact_efficiency: float       # fraction of KE coupled into the target
    vaporization_threshold: float  # J/kg
    vaporization_efficiency: float


# Britt & Consolmagno (2003), Carry (2012); ice after cometary-nucleus values
COMPOSITIONS = MappingProxyType({
    Composition.ROCKY:        CompositionProperties(2700.0, 2000.0, 3500.0, 50e6,  0.15, 0.85, 8e6,  0.30),
    Composition.METALLIC:     CompositionProperties(7800.0, 7000.0, 8000.0, 400e6, 0.05, 0.95, 12e6, 0.40),
    Composition.CARBONACEOUS: CompositionProperties(1400.0, 1200.0, 2200.0, 10e6,  0.35, 0.70, 6e6,  0.25),
    Composition.ICE:          CompositionProperties(917.0,  600.0,  1000.0, 1e6,   0.40, 0.65, 3e6,  0.50),
})


# ------------------------------------------
# Kinetic-impactor target materials (H&H)
# ------------------------------------------
@dataclass(frozen=True)
class TargetMaterial:
    composition: Composition
    density: Quantity              # kg/m^3
    strength: Quantity             # Pa
    porosity: Quantity             # 1
    grain_size: Quantity           # m


@dataclass(frozen=True)
class MomentumParameters:
    beta: Quantity                 # momentum enhancement factor at V_REF
    mu: Quantity                   # velocity-scaling exponent
    k: Quantity                    # ejecta-velocity scaling constant
    min_velocity: float            # m/s
    max_velocity: float
    min_impactor_mass: float       # kg
    max_impactor_mass: float
    min_target_mass: float         # kg
    max_target_mass: float


def _q(v, s, unit, src):
    return Quantity(v, s, unit, src)


TARGET_MATERIALS = MappingProxyType({
    Composition.ROCKY: TargetMaterial(
        Composition.ROCKY,
        _q(2700.0, 300.0, "kg/m^3", "Britt & Consolmagno 2003"),
        _q(1e7, 5e6, "Pa", "Holsapple & Housen 2007"),
        _q(0.2, 0.1, "1", "Britt & Consolmagno 2003"),
        _q(0.001, 0.0005, "m", "Estimated")),
    Composition.METALLIC: TargetMaterial(
        Composition.METALLIC,
        _q(7800.0, 500.0, "kg/m^3", "Britt & Consolmagno 2003"),
        _q(5e8, 1e8, "Pa", "Engineering estimates"),
        _q(0.1, 0.05, "1", "Britt & Consolmagno 2003"),
        _q(0.01, 0.005, "m", "Estimated")),
    Composition.CARBONACEOUS: TargetMaterial(
        Composition.CARBONACEOUS,
        _q(1400.0, 200.0, "kg/m^3", "Britt & Consolmagno 2003"),
        _q(1e6, 5e5, "Pa", "Holsapple & Housen 2007"),
        _q(0.3, 0.1, "1", "Britt & Consolmagno 2003"),
        _q(0.0001, 0.00005, "m", "Estimated")),
    Composition.ICE: TargetMaterial(
        Composition.ICE,
        _q(917.0, 100.0, "kg/m^3", "Cometary nucleus estimates"),
        _q(1e6, 5e5, "Pa", "Ice fracture strength"),
        _q(0.4, 0.15, "1", "Cometary nucleus estimates"),
        _q(0.001, 0.0005, "m", "Estimated")),
})

_HH12 = "Holsapple & Housen 2012"
# validity: impactor 1 kg - 1e6 kg at 1-50 km/s; targets from boulders to ~1 km bodies
MOMENTUM_PARAMETERS = MappingProxyType({
    Composition.ROCKY:        MomentumParameters(_q(2.0, 0.5, "1", _HH12), _q(0.4, 0.1, "1", _HH12),
                                                 _q(0.2, 0.05, "1", _HH12),
                                                 1000.0, 50000.0, 1.0, 1e6, 1e6, 1e13),
    Composition.METALLIC:     MomentumParameters(_q(1.5, 0.3, "1", _HH12), _q(0.3, 0.1, "1", _HH12),
                                                 _q(0.15, 0.04, "1", _HH12),
                                                 1000.0, 50000.0, 1.0, 1e6, 1e6, 1e13),
    Composition.CARBONACEOUS: MomentumParameters(_q(3.0, 0.8, "1", _HH12), _q(0.5, 0.15, "1", _HH12),
                                                 _q(0.3, 0.08, "1", _HH12),
                                                 1000.0, 50000.0, 1.0, 1e6, 1e6, 1e13),
    Composition.ICE:          MomentumParameters(_q(2.5, 0.7, "1", _HH12), _q(0.45, 0.12, "1", _HH12),
                                                 _q(0.25, 0.07, "1", _HH12),
                                                 1000.0, 50000.0, 1.0, 1e6, 1e6, 1e13),
})


# -----------------------------
# Deflection strategy catalog
# -----------------------------
STRATEGIES = (
    DeflectionStrategy(
        id="kinetic_impactor", name="Kinetic Impactor", category=StrategyCategory.KINETIC,
        effectiveness=0.85, cost_usd=5e8, lead_time_years=5.0, technology_readiness=9,
        mass_required_kg=500.0, delta_v_mps=0.001,
        risks=("Fragmentation of rubble-pile targets", "Single-shot targeting accuracy"),
        description="High-speed spacecraft impacts asteroid to change trajectory"),
    DeflectionStrategy(
        id="nuclear_deflection", name="Nuclear Deflection", category=StrategyCategory.NUCLEAR,
        effectiveness=0.75, cost_usd=3e9, lead_time_years=3.0, technology_readiness=4,
        mass_required_kg=1500.0, delta_v_mps=0.05,
        risks=("Political and treaty constraints", "Uncontrolled fragmentation", "Launch safety"),
        description="Nuclear device detonated near asteroid surface"),
    DeflectionStrategy(
        id="gravity_tractor", name="Gravity Tractor", category=StrategyCategory.GRAVITY,
        effectiveness=0.9, cost_usd=1.5e9, lead_time_years=15.0, technology_readiness=5,
        mass_required_kg=800.0, delta_v_mps=0.0002,
        risks=("Decade-long station keeping", "Very small deflection rate"),
        description="Spacecraft uses gravitational attraction to slowly deflect asteroid"),
    DeflectionStrategy(
        id="solar_sail", name="Solar Radiation Pressure", category=StrategyCategory.SOLAR,
        effectiveness=0.7, cost_usd=8e8, lead_time_years=20.0, technology_readiness=3,
        mass_required_kg=200.0, delta_v_mps=0.0001,
        risks=("Unproven surface-coating deployment", "Depends on spin state and shape"),
        description="Modify asteroid's surface to enhance solar radiation pressure"),
)


# -----------------------------
# Model scaling constants
# -----------------------------
@dataclass(frozen=True)
class CraterScaling:
    k1: float = 1.88               # Holsapple & Housen, simplified
    energy_exponent: float = 0.22
    density_ratio_exponent: float = 0.15
    depth_ratio: float = 0.2       # simple craters
    gravity: float = 9.81
    target_density: float = 2700.0
    uncertainty: float = 0.3


@dataclass(frozen=True)
class BlastScaling:
    fireball_coeff_m: float = 0.002        # r = c * E^(1/3), E in J (EIEP)
    airblast_km_per_kt: float = 0.389      # multistory collapse, 1 kt surface burst
    thermal_km_per_kt: float = 1.2         # first-degree burns, 1 kt
    seismic_slope: float = 2.0 / 3.0
    seismic_offset: float = 2.9
    uncertainty: float = 0.25
    total_ring_multiplier: float = 1.0     # x fireball
    severe_ring_multiplier: float = 2.0    # x airblast
    moderate_ring_multiplier: float = 1.5  # x thermal


@dataclass(frozen=True)
class RecurrenceLaw:
    """Mean interval between impacts of at least a given yield: T = coeff * Mt^exponent."""
    coeff_years: float = 109.0
    exponent: float = 0.78
    uncertainty: float = 0.5
    source: str = "Collins, Melosh & Marcus 2005 (EIEP), NEO flux fit"


@dataclass(frozen=True)
class CasualtyFractions:
    immediate: tuple[float, float, float] = (1.0, 0.75, 0.20)   # total / severe / moderate
    short_term: tuple[float, float, float] = (0.0, 0.15, 0.10)
    injured: tuple[float, float, float] = (0.0, 0.10, 0.50)
    long_term_survivor_fraction: float = 0.05
    displacement_ratio: float = 1.2
    refugee_fraction: float = 0.6


@dataclass(frozen=True)
class InfrastructureHeuristics:
    people_per_building: float = 50.0
    km2_per_military_base: float = 10_000.0
    personnel_per_base: float = 5000.0
    equipment_value_per_base: float = 5e9
    residential_fraction: float = 0.7
    km2_per_hospital: float = 500.0
    km2_per_school: float = 100.0
    km2_per_power_plant: float = 5000.0
    nuclear_plant_fraction: float = 0.1
    nuclear_fallout_risk: float = 0.7
    grid_damage_per_100km: float = 80.0
    km2_per_heritage_site: float = 1000.0
    km2_per_museum: float = 500.0
    km2_per_refinery: float = 8000.0
    infrastructure_value_area_km2: float = 1000.0
    home_replacement_cost: float = 300_000.0
    indirect_multiplier: float = 1.5
    lost_production_fraction: float = 0.3
    recovery_years_per_10mt: float = 1.0
    recovery_cap_years: float = 50.0
    food_loss_per_100k_km2: float = 30.0
    water_per_grid: float = 0.8


@dataclass(frozen=True)
class ClimateHeuristics:
    dust_fraction: float = 0.1
    local_heating_land_c: float = 2.0
    local_heating_ocean_c: float = 0.5
    short_term_cooling_per_km3: float = 0.5
    long_term_cooling_per_km3: float = 0.2
    sunlight_reduction_per_km3: float = 10.0
    sunlight_reduction_cap: float = 90.0
    dust_months_per_km3: float = 2.0
    indirect_habitability_multiplier: float = 5.0
    earth_land_area_km2: float = 148_940_000.0
    agriculture_per_sunlight: float = 0.8
    # (threshold Mt, risk), checked in order; below all of them -> baseline
    extinction_tiers: tuple[tuple[float, float], ...] = ((100_000.0, 0.9), (10_000.0, 0.5))
    extinction_baseline: float = 0.1
    base_recovery_years: float = 5.0
    permanent_change_mt: float = 50_000.0


@dataclass(frozen=True)
class DisasterHeuristics:
    default_ocean_depth_m: float = 4000.0
    tsunami_energy_ref_j: float = 1e18
    tsunami_exponent: float = 0.4
    tsunami_height_coeff_m: float = 10.0
    cap_wave_at_depth: bool = False        # shoaling limit: no wave taller than the water column
    coastline_km_per_m: float = 100.0
    coastline_cap_km: float = 10_000.0
    inland_km_per_m: float = 0.5
    coastal_population_density: float = 200.0
    tsunami_fatality: float = 0.3
    aftershocks_per_magnitude: float = 10.0
    fault_activation_magnitude: float = 7.0
    volcanic_magnitude: float = 8.0
    hurricane_threshold_mt: float = 100.0
    hurricane_radius_multiplier: float = 2.0
    firestorm_threshold_mt: float = 10.0
    firestorm_radius_multiplier: float = 1.5


@dataclass(frozen=True)
class TimelineMultipliers:
    """
    Per-snapshot fractions applied to the final totals (T+0 ... T+10y).

    ``temperature`` pairs each snapshot with the climate series it scales
    ("immediate", "short" or "long"). ``food_loss`` scales the infrastructure
    food-production loss up to T+1mo and the climate agriculture impact after.
    """
    short_term_deaths: tuple[float, ...] = (0.0, 0.1, 1.0, 1.0, 1.0, 1.0, 1.0)
    long_term_deaths: tuple[float, ...] = (0.0, 0.0, 0.0, 0.1, 0.3, 1.0, 1.0)
    displaced: tuple[float, ...] = (0.0, 0.3, 0.7, 1.0, 1.0, 1.0, 0.5)
    temperature: tuple[tuple[str, float], ...] = (
        ("immediate", 1.0), ("immediate", 0.8), ("immediate", 0.3),
        ("short", 0.3), ("short", 0.6), ("short", 1.0), ("long", 1.0),
    )
    habitable_loss: tuple[float, ...] = (0.0, 0.1, 0.3, 0.5, 0.7, 1.0, 0.8)
    food_loss: tuple[float, ...] = (0.0, 0.2, 0.5, 0.7, 0.9, 1.0, 0.5)


@dataclass(frozen=True)
class DeflectionHeuristics:
    reference_target_mass_kg: float = 1e10
    max_mass_scaling: float = 100.0
    large_kinetic_diameter_m: float = 500.0
    large_kinetic_multiplier: float = 0.7
    small_kinetic_diameter_m: float = 100.0
    small_kinetic_multiplier: float = 1.2
    large_nuclear_diameter_m: float = 1000.0
    large_nuclear_multiplier: float = 1.1
    small_nuclear_diameter_m: float = 50.0
    small_nuclear_multiplier: float = 0.6
    insufficient_lead_time_multiplier: float = 0.3
    low_trl_threshold: int = 6
    low_trl_multiplier: float = 0.9
    success_threshold: float = 0.7
    full_avoidance_angle_deg: float = 0.1
    default_distance_au: float = 1.5
    cost_normaliser_usd: float = 1e9
    # kinetic spacecraft search
    calibration_velocity_mps: float = 6000.0
    min_search_mass_kg: float = 100.0
    min_search_velocity_mps: float = 5000.0
    grid_steps: int = 20
    base_mission_cost_usd: float = 500e6
    cost_per_kg_usd: float = 10_000.0
    cost_per_mps_usd: float = 20_000.0
    mission_duration_s: float = 365.25 * 24 * 3600
    mission_duration_sigma_s: float = 30 * 24 * 3600

    def __post_init__(self):
        if self.grid_steps < 1:
            raise ValueError(f"grid_steps must be at least 1, got {self.grid_steps}")


# --------------------------------------------
# Non-kinetic deflection physics (sub-models)
# --------------------------------------------
@dataclass(frozen=True)
class TractorParameters:
    """Ion-propulsion gravity tractor after Lu & Love (2005)."""
    hover_radii: float = 3.0               # baseline hover distance, in target radii
    mass_ratio_exponent: float = 0.2
    operating_efficiency: float = 0.8
    operating_efficiency_sigma: float = 0.1
    thrust_power_w: float = 10_000.0
    specific_impulse_s: float = 3000.0
    propulsion_efficiency: float = 0.5
    fuel_fraction: float = 0.3             # share of spacecraft mass carried as propellant
    lifetime_years: float = 10.0
    min_mass_ratio: float = 1e-7
    max_mass_ratio: float = 1e-6
    min_distance_radii: float = 2.0
    max_distance_radii: float = 20.0
    min_years: float = 1.0
    max_years: float = 20.0


@dataclass(frozen=True)
class NuclearDeviceParameters:
    """Strategic-class standoff device; energy partition after Ahrens & Harris (1992)."""
    yield_mt: float = 1.0
    yield_sigma_mt: float = 0.1
    device_mass_kg: float = 300.0
    xray_fraction: float = 0.70
    neutron_fraction: float = 0.08
    gamma_fraction: float = 0.17
    debris_fraction: float = 0.05
    standoff_radii: float = 3.0            # at 1 Mt
    standoff_yield_exponent: float = 0.3
    heated_areal_density: float = 0.1      # kg/m^2 reached by the X-ray pulse
    blowoff_efficiency: float = 0.1        # share of deposited energy driving the vapour
    min_yield_mt: float = 0.001
    max_yield_mt: float = 100.0
    max_standoff_radii: float = 10.0


@dataclass(frozen=True)
class SolarPressureParameters:
    albedo_change: float = 0.3
    albedo_change_sigma: float = 0.05
    coating_areal_density: float = 0.001   # kg/m^2 of surface coating
    payload_kg: float = 200.0
    lifetime_years: float = 20.0
    max_distance_au: float = 5.0
    max_radius_m: float = 1000.0


@dataclass(frozen=True)
class EngineConfig:
    compositions: Mapping[Composition, CompositionProperties] = field(default_factory=lambda: COMPOSITIONS)
    target_materials: Mapping[Composition, TargetMaterial] = field(default_factory=lambda: TARGET_MATERIALS)
    momentum_parameters: Mapping[Composition, MomentumParameters] = field(
        default_factory=lambda: MOMENTUM_PARAMETERS)
    strategies: tuple[DeflectionStrategy, ...] = STRATEGIES
    crater: CraterScaling = field(default_factory=CraterScaling)
    blast: BlastScaling = field(default_factory=BlastScaling)
    casualty: CasualtyFractions = field(default_factory=CasualtyFractions)
    infrastructure: InfrastructureHeuristics = field(default_factory=InfrastructureHeuristics)
    climate: ClimateHeuristics = field(default_factory=ClimateHeuristics)
    disaster: DisasterHeuristics = field(default_factory=DisasterHeuristics)
    timeline: TimelineMultipliers = field(default_factory=TimelineMultipliers)
    deflection: DeflectionHeuristics = field(default_factory=DeflectionHeuristics)
    recurrence: RecurrenceLaw = field(default_factory=RecurrenceLaw)
    tractor: TractorParameters = field(default_factory=TractorParameters)
    nuclear: NuclearDeviceParameters = field(default_factory=NuclearDeviceParameters)
    solar: SolarPressureParameters = field(default_factory=SolarPressureParameters)

    def composition(self, comp: Composition | str) -> CompositionProperties:
        return self.compositions[Composition.parse(comp)]

    def target_material(self, comp: Composition | str) -> TargetMaterial:
        return self.target_materials[Composition.parse(comp)]

    def momentum(self, comp: Composition | str) -> MomentumParameters:
        return self.momentum_parameters[Composition.parse(comp)]

    def strategy(self, strategy_id: str) -> DeflectionStrategy | None:
        for s in self.strategies:
            if s.id == strategy_id:
                return s
        return None


@lru_cache(maxsize=1)
def default_config() -> EngineConfig:
    return EngineConfig()


def asteroid_from_diameter(id: str, name: str, diameter_m: float, velocity_kms: float,
                           composition: Composition | str = Composition.ROCKY,
                           density_kgpm3: float | None = None,
                           completeness: Mapping[str, str] | None = None,
                           config: EngineConfig | None = None) -> Asteroid:
    """Sphere of the composition's bulk density (or an explicit one); its mass is marked estimated."""
    comp = Composition.parse(composition)
    if density_kgpm3 is None:
        density_kgpm3 = (config or default_config()).composition(comp).density
    marks = dict(completeness or {})
    marks.setdefault("mass_kg", "estimated")
    return Asteroid(id=id, name=name, diameter_m=diameter_m,
                    mass_kg=(pi / 6.0) * density_kgpm3 * diameter_m**3,
                    velocity_kms=velocity_kms, composition=comp, completeness=marks)


# -----------------------------
# Process settings (.env)
# -----------------------------
@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    max_search_days: int = 36525
    max_path_steps: int = 5000
    default_warning_years: float = 10.0


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        log_level=os.getenv("NEOSHIELD_LOG_LEVEL", "INFO").upper(),
        max_search_days=int(os.getenv("NEOSHIELD_MAX_SEARCH_DAYS", "36525")),
        max_path_steps=int(os.getenv("NEOSHIELD_MAX_PATH_STEPS", "5000")),
        default_warning_years=float(os.getenv("NEOSHIELD_DEFAULT_WARNING_YEARS", "10")),
    )
