"""
Slow-push and standoff deflection: the gravity tractor, a nuclear standoff burst
and solar radiation pressure after a surface albedo change.

Each model reports the force or impulse it develops, the delta-V it leaves on the
target, what the mission has to carry, and whether the inputs sit inside the range
the model was built for. As with the kinetic model, physical input never raises.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from math import pi, sqrt

from .config import EngineConfig, default_config
from .impact_model import J_PER_MT_TNT
from .kinetic import G
from .models import Composition
from .quantity import Quantity, exact, propagate, relative, safe_div

log = logging.getLogger(__name__)

SECONDS_PER_YEAR = 365.25 * 24 * 3600
G0 = 9.80665                     # m/s^2, rocket-equation reference
SOLAR_CONSTANT = 1361.0          # W/m^2 at 1 AU
C_LIGHT = 299_792_458.0          # m/s

TRACTOR_REFERENCES = (
    "Lu, E.T. & Love, S.G. (2005). Gravitational tractor for towing asteroids",
    "Yeomans, D.K. et al. (2008). Deflecting a hazardous near-Earth object",
)
NUCLEAR_REFERENCES = (
    "Ahrens, T.J. & Harris, A.W. (1992). Deflection and fragmentation of near-Earth asteroids",
    "National Research Council (2010). Defending Planet Earth: Near-Earth Object Surveys and Hazard Mitigation",
)
SOLAR_REFERENCES = (
    "Hyland, D.C. et al. (2010). A permanently-acting NEA damage mitigation technique via the Yarkovsky effect",
    "Vokrouhlicky, D. et al. (2015). The Yarkovsky and YORP effects",
)


@dataclass(frozen=True)
class GravityTractorResult:
    operating_distance: Quantity   # m from the target's centre
    gravitational_force: Quantity  # N
    acceleration: Quantity         # m/s^2 on the target
    delta_v: Quantity              # m/s over the mission
    delta_v_per_year: Quantity
    thrust_available: Quantity     # N
    fuel_required: Quantity        # kg for station keeping
    feasible: bool
    within_validity_range: bool
    warnings: tuple[str, ...]
    references: tuple[str, ...] = TRACTOR_REFERENCES


@dataclass(frozen=True)
class NuclearDeflectionResult:
    standoff_distance: Quantity    # m above the surface
    intercepted_fraction: Quantity
    energy_deposited: Quantity     # J
    heated_mass: Quantity          # kg of surface layer blown off
    ablation_velocity: Quantity    # m/s
    momentum: Quantity             # kg·m/s
    delta_v: Quantity              # m/s
    device_mass: Quantity          # kg
    feasible: bool
    within_validity_range: bool
    warnings: tuple[str, ...]
    references: tuple[str, ...] = NUCLEAR_REFERENCES


@dataclass(frozen=True)
class SolarPressureResult:
    radiation_force: Quantity      # N
    acceleration: Quantity         # m/s^2
    delta_v: Quantity              # m/s over the mission
    coated_area: Quantity          # m^2
    coating_mass: Quantity         # kg
    feasible: bool
    within_validity_range: bool
    warnings: tuple[str, ...]
    references: tuple[str, ...] = SOLAR_REFERENCES


def _target_mass(target_mass: Quantity | float) -> Quantity:
    if isinstance(target_mass, Quantity):
        return target_mass
    return exact(target_mass, "kg", "Target specification")


def _target_radius(radius: float) -> Quantity:
    return relative(radius, 0.1, "m", "Target specification")


# ---------- Gravity tractor ----------
def optimal_hover_distance(spacecraft_mass: float, target_mass: Quantity | float, target_radius: float,
                           config: EngineConfig | None = None) -> Quantity:
    """A few target radii out, pushed further by a heavier spacecraft (weak mass-ratio dependence)."""
    p = (config or default_config()).tractor

    def distance(radius, mass, craft):
        ratio = safe_div(craft, mass)
        return p.hover_radii * radius * (1.0 + (ratio ** p.mass_ratio_exponent if ratio > 0.0 else 0.0))

    return propagate(distance,
                     {"radius": _target_radius(target_radius), "mass": _target_mass(target_mass),
                      "craft": relative(spacecraft_mass, 0.1, "kg")},
                     "m", "Optimised for pull against station-keeping margin")


def _tractor_validity(spacecraft_mass: float, target_mass: float, target_radius: float,
                      distance: float, years: float, cfg: EngineConfig) -> tuple[bool, list[str]]:
    p = cfg.tractor
    warnings: list[str] = []
    within = True
    if target_mass <= 0.0 or target_radius <= 0.0:
        warnings.append("Target mass and radius must be positive")
        return False, warnings
    ratio = spacecraft_mass / target_mass
    if ratio < p.min_mass_ratio:
        warnings.append(f"Very small spacecraft-to-asteroid mass ratio ({ratio:.2e}) may be ineffective")
    if ratio > p.max_mass_ratio:
        warnings.append(f"Large spacecraft-to-asteroid mass ratio ({ratio:.2e}) - consider other deflection methods")
    if distance < target_radius * p.min_distance_radii:
        warnings.append(f"Operating distance ({distance:.0f} m) is very close to asteroid surface")
    if distance > target_radius * p.max_distance_radii:
        warnings.append(f"Large operating distance ({distance:.0f} m) reduces gravitational force significantly")
    if years < p.min_years:
        warnings.append(f"Short mission duration ({years:.1f} years) may not provide sufficient deflection")
    if years > p.max_years:
        warnings.append(f"Very long mission duration ({years:.1f} years) may exceed spacecraft lifetime")
        within = False
    return within, warnings


def gravity_tractor(spacecraft_mass: float, target_mass: Quantity | float, target_radius: float,
                    duration_years: float, distance_m: float | None = None,
                    config: EngineConfig | None = None) -> GravityTractorResult:
    """
    Hovering spacecraft towing the target by mutual gravity.

    The pull F = G m M / d^2 accelerates the target by G m / d^2 for the whole
    mission, scaled by the operating efficiency. Thrusters cancel the same pull
    on the spacecraft, which sets the propellant bill F t / (Isp g0).
    """
    cfg = config or default_config()
    p = cfg.tractor
    mass = _target_mass(target_mass)
    craft = relative(spacecraft_mass, 0.1, "kg", "Mission specification")
    if distance_m is None:
        distance = optimal_hover_distance(spacecraft_mass, mass, target_radius, cfg)
    else:
        distance = exact(distance_m, "m", "Mission specification")
    seconds = max(duration_years, 0.0) * SECONDS_PER_YEAR
    within, warnings = _tractor_validity(spacecraft_mass, mass.value, target_radius, distance.value,
                                         duration_years, cfg)

    force = propagate(lambda m, big_m, d: safe_div(G * m * big_m, d * d),
                      {"m": craft, "big_m": mass, "d": distance}, "N", "Newtonian attraction")
    accel = propagate(lambda m, d: safe_div(G * m, d * d),
                      {"m": craft, "d": distance}, "m/s^2", "Gravitational acceleration from spacecraft")
    efficiency = Quantity(p.operating_efficiency, p.operating_efficiency_sigma, "1", "Operating duty and geometry")
    delta_v = (accel * efficiency).scale(seconds).with_unit("m/s").with_source("Acceleration sustained over mission")
    per_year = delta_v.scale(1.0 / duration_years if duration_years > 0.0 else 0.0) \
        .with_source("Velocity change per year")

    exhaust = p.specific_impulse_s * G0
    thrust = relative(2.0 * p.propulsion_efficiency * p.thrust_power_w / exhaust, 0.2, "N",
                      "Electric propulsion, 2 eta P / (Isp g0)")
    fuel = force.scale(seconds / exhaust).with_unit("kg").with_source("Station keeping against the pull")
    fuel_carried = p.fuel_fraction * spacecraft_mass

    feasible = within
    if thrust.value < force.value:
        warnings.append(f"Pull of {force.value:.3g} N exceeds available thrust {thrust.value:.3g} N")
        feasible = False
    if fuel.value > fuel_carried:
        warnings.append(f"Station keeping needs {fuel.value:.0f} kg of propellant, {fuel_carried:.0f} kg carried")
        feasible = False
    if duration_years > p.lifetime_years:
        warnings.append(f"Mission duration ({duration_years:.1f} years) exceeds spacecraft lifetime "
                        f"({p.lifetime_years:g} years)")
        feasible = False

    log.debug("[non_kinetic.tractor] m=%.4g d=%.4g F=%.4g dv=%.4g feasible=%s",
              spacecraft_mass, distance.value, force.value, delta_v.value, feasible)
    return GravityTractorResult(
        operating_distance=distance,
        gravitational_force=force,
        acceleration=accel,
        delta_v=delta_v,
        delta_v_per_year=per_year,
        thrust_available=thrust,
        fuel_required=fuel,
        feasible=feasible,
        within_validity_range=within,
        warnings=tuple(warnings),
    )


# ---------- Nuclear standoff ----------
def nuclear_standoff_distance(target_radius: float, yield_mt: float,
                              config: EngineConfig | None = None) -> Quantity:
    """Height of burst above the surface: a few radii at 1 Mt, growing as yield^0.3."""
    p = (config or default_config()).nuclear
    if not yield_mt > 0.0:
        return exact(0.0, "m", "No yield")
    return propagate(lambda radius, y: p.standoff_radii * radius * y ** p.standoff_yield_exponent,
                     {"radius": _target_radius(target_radius),
                      "y": relative(yield_mt, safe_div(p.yield_sigma_mt, p.yield_mt), "Mt")},
                     "m", "Optimal standoff, yield-scaled")


def _intercepted_fraction(radius: float, standoff: float) -> float:
    """Share of an isotropic burst at `standoff` above the surface that lands on the sphere."""
    if radius <= 0.0:
        return 0.0
    d = radius + standoff
    if d <= radius:
        return 0.5
    s = radius / d
    return 0.5 * (1.0 - sqrt(1.0 - s * s))


def _exposed_area(radius: float, standoff: float) -> float:
    """Spherical cap visible from the burst point."""
    d = radius + standoff
    if radius <= 0.0 or d <= radius:
        return 0.0
    return 2.0 * pi * radius * radius * (1.0 - radius / d)


def _blowoff_velocity(energy: float, mass: float, vaporization: float, efficiency: float) -> float:
    if mass <= 0.0:
        return 0.0
    excess = energy - mass * vaporization
    return sqrt(2.0 * efficiency * excess / mass) if excess > 0.0 else 0.0


def _nuclear_validity(radius: float, standoff: float, yield_mt: float,
                      cfg: EngineConfig) -> tuple[bool, list[str]]:
    p = cfg.nuclear
    warnings: list[str] = []
    within = True
    total = p.xray_fraction + p.neutron_fraction + p.gamma_fraction + p.debris_fraction
    if abs(total - 1.0) > 0.1:
        warnings.append(f"Energy fractions sum to {total:.2f}, should be close to 1.0")
    if standoff <= 0.0:
        warnings.append("Contact burst is outside the standoff model - expect cratering and fragmentation")
        within = False
    elif standoff < radius:
        warnings.append(f"Standoff distance ({standoff:.1f} m) is less than target radius - may cause fragmentation")
    if standoff > radius * p.max_standoff_radii:
        warnings.append(f"Large standoff distance ({standoff:.1f} m) may reduce momentum transfer efficiency")
    if yield_mt < p.min_yield_mt:
        warnings.append(f"Very small nuclear yield ({yield_mt:g} Mt) may be ineffective for deflection")
    if yield_mt > p.max_yield_mt:
        warnings.append(f"Very large nuclear yield ({yield_mt:g} Mt) may cause fragmentation instead of deflection")
        within = False
    return within, warnings


def nuclear_standoff(target_mass: Quantity | float, target_radius: float,
                     composition: Composition | str = Composition.ROCKY,
                     yield_mt: float | None = None, standoff_m: float | None = None,
                     config: EngineConfig | None = None) -> NuclearDeflectionResult:
    """
    Standoff burst: X-rays and neutrons heat a thin surface layer on the exposed cap,
    the layer blows off and the recoil moves the target.

    Only the share of the burst subtended by the target is deposited. The blow-off
    velocity comes from what is left after vaporizing the layer.
    """
    cfg = config or default_config()
    p = cfg.nuclear
    mass = _target_mass(target_mass)
    yield_mt = p.yield_mt if yield_mt is None else yield_mt
    if standoff_m is None:
        standoff = nuclear_standoff_distance(target_radius, yield_mt, cfg)
    else:
        standoff = exact(standoff_m, "m", "Mission specification")
    within, warnings = _nuclear_validity(target_radius, standoff.value, yield_mt, cfg)

    radius = _target_radius(target_radius)
    penetrating = p.xray_fraction + p.neutron_fraction
    y = relative(yield_mt, safe_div(p.yield_sigma_mt, p.yield_mt), "Mt", "Device specification")
    fraction = propagate(_intercepted_fraction, {"radius": radius, "standoff": standoff},
                         "1", "Solid angle subtended by the target")
    deposited = propagate(lambda y, radius, standoff: y * J_PER_MT_TNT * penetrating
                          * _intercepted_fraction(radius, standoff),
                          {"y": y, "radius": radius, "standoff": standoff},
                          "J", "X-ray and neutron energy on the exposed cap")
    heated = propagate(lambda radius, standoff: _exposed_area(radius, standoff) * p.heated_areal_density,
                       {"radius": radius, "standoff": standoff},
                       "kg", "Surface layer reached by the radiation pulse")
    vaporization = relative(cfg.composition(composition).vaporization_threshold, 0.25, "J/kg",
                            "Composition vaporization energy")
    velocity = propagate(lambda energy, heated, vap: _blowoff_velocity(energy, heated, vap, p.blowoff_efficiency),
                         {"energy": deposited, "heated": heated, "vap": vaporization},
                         "m/s", "Blow-off velocity of the vaporized layer")
    momentum = (heated * velocity).with_unit("kg·m/s").with_source("Recoil of the blown-off layer")
    delta_v = (momentum / mass).with_unit("m/s").with_source("Calculated from momentum conservation")
    device = Quantity(p.device_mass_kg, 0.15 * p.device_mass_kg, "kg", "Device specification")

    feasible = within and delta_v.value > 0.0
    log.debug("[non_kinetic.nuclear] Y=%.4g standoff=%.4g E_dep=%.4g dv=%.4g within=%s",
              yield_mt, standoff.value, deposited.value, delta_v.value, within)
    return NuclearDeflectionResult(
        standoff_distance=standoff,
        intercepted_fraction=fraction,
        energy_deposited=deposited,
        heated_mass=heated,
        ablation_velocity=velocity,
        momentum=momentum,
        delta_v=delta_v,
        device_mass=device,
        feasible=feasible,
        within_validity_range=within,
        warnings=tuple(warnings),
    )


# ---------- Solar radiation pressure ----------
def solar_pressure(target_mass: Quantity | float, target_radius: float, duration_years: float,
                   albedo_change: float | None = None, distance_au: float = 1.0,
                   payload_kg: float | None = None,
                   config: EngineConfig | None = None) -> SolarPressureResult:
    """Extra radiation push after coating the sunlit hemisphere: F = S / r^2 * pi R^2 * d_albedo / c."""
    cfg = config or default_config()
    p = cfg.solar
    mass = _target_mass(target_mass)
    radius = _target_radius(target_radius)
    albedo_change = p.albedo_change if albedo_change is None else albedo_change
    payload_kg = p.payload_kg if payload_kg is None else payload_kg
    seconds = max(duration_years, 0.0) * SECONDS_PER_YEAR

    warnings: list[str] = []
    within = True
    if not 0.0 < albedo_change <= 1.0:
        warnings.append(f"Albedo change {albedo_change:g} is outside (0, 1]")
        within = False
    if distance_au > p.max_distance_au:
        warnings.append(f"Large solar distance ({distance_au:.1f} AU) reduces solar radiation pressure significantly")
    if duration_years > p.lifetime_years:
        warnings.append(f"Mission duration ({duration_years:.1f} years) exceeds coating lifetime")
        within = False
    if target_radius > p.max_radius_m:
        warnings.append(f"Large target radius ({target_radius:.0f} m) makes surface modification challenging")

    flux = safe_div(SOLAR_CONSTANT, distance_au * distance_au)
    d_albedo = relative(albedo_change, safe_div(p.albedo_change_sigma, p.albedo_change), "1")
    force = propagate(lambda radius, da: flux * pi * radius * radius * da / C_LIGHT,
                      {"radius": radius, "da": d_albedo}, "N", "Albedo modification radiation pressure")
    accel = (force / mass).with_unit("m/s^2").with_source("Radiation force on the target mass")
    delta_v = accel.scale(seconds).with_unit("m/s").with_source("Acceleration sustained over mission")
    area = radius.power(2, "m^2").scale(2.0 * pi).with_source("Sunlit hemisphere")
    coating = area.scale(p.coating_areal_density).with_unit("kg").with_source("Coating mass to deliver")

    feasible = within
    if coating.value > payload_kg:
        warnings.append(f"Coating mass {coating.value:.0f} kg exceeds payload {payload_kg:.0f} kg")
        feasible = False

    log.debug("[non_kinetic.solar] R=%.4g F=%.4g dv=%.4g coating_kg=%.4g feasible=%s",
              target_radius, force.value, delta_v.value, coating.value, feasible)
    return SolarPressureResult(
        radiation_force=force,
        acceleration=accel,
        delta_v=delta_v,
        coated_area=area,
        coating_mass=coating,
        feasible=feasible,
        within_validity_range=within,
        warnings=tuple(warnings),
    )
