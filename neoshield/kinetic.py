"""
Kinetic-impactor momentum transfer after Holsapple & Housen (2012), with the
ejecta enhancement factor beta calibrated at the DART impact speed.

Uncertainties are carried through every step with ``quantity.propagate``.
Out-of-calibration inputs are reported on the result (``warnings`` and
``within_validity_range``); nothing here raises on physical input.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from math import cos, degrees, pi, sqrt

from .config import EngineConfig, TargetMaterial, default_config
from .quantity import Quantity, exact, propagate, safe_div

log = logging.getLogger(__name__)

G = 6.674e-11                    # m^3 kg^-1 s^-2
V_REF = 6000.0                   # m/s, beta calibration speed
MAX_ANGLE_RAD = pi / 3           # beyond 60 deg from head-on the scaling is untested
HIGH_POROSITY = 0.5
CRATER_COEFF = 0.02
CRATER_EXPONENT = 1.0 / 3.4
DEPTH_RATIO = 1.0 / 7.0

REFERENCES = (
    "Holsapple, K.A. & Housen, K.R. (2012). Momentum transfer in asteroid impacts",
    "Cheng, A.F. et al. (2023). DART mission results and momentum transfer efficiency",
    "Holsapple, K.A. & Housen, K.R. (2007). A crater and its ejecta: An interpretation of Deep Impact",
)


@dataclass(frozen=True)
class Impactor:
    mass: Quantity                 # kg
    velocity: Quantity             # m/s relative to the target
    diameter: Quantity             # m
    density: Quantity              # kg/m^3
    material: str = "aluminum"


@dataclass(frozen=True)
class ImpactGeometry:
    impact_angle: Quantity         # rad, 0 = head-on
    target_radius: Quantity        # m
    impact_location: str = "center"


@dataclass(frozen=True)
class KineticImpactResult:
    direct_momentum_transfer: Quantity
    ejecta_momentum_enhancement: Quantity
    total_momentum_transfer: Quantity
    momentum_transfer_efficiency: Quantity   # beta
    delta_v: Quantity
    crater_diameter: Quantity
    crater_depth: Quantity
    ejecta_mass: Quantity
    ejecta_velocity: Quantity
    impact_energy: Quantity
    specific_energy: Quantity
    within_validity_range: bool
    warnings: tuple[str, ...]
    references: tuple[str, ...] = REFERENCES


@dataclass(frozen=True)
class SpacecraftConstraints:
    max_mass: float                # kg
    max_velocity: float            # m/s
    launch_capability: float       # kg deliverable at the required velocity


@dataclass(frozen=True)
class SpacecraftDesign:
    optimal_mass: Quantity
    optimal_velocity: Quantity
    max_delta_v: Quantity
    launch_energy_required: Quantity
    mission_duration: Quantity
    cost_estimate: Quantity


# ---------- Builders ----------
def typical_spacecraft(mass: float, velocity: float) -> Impactor:
    """Aluminium impactor sized from its mass; 10% mass and 5% velocity uncertainty."""
    return Impactor(
        mass=Quantity(mass, mass * 0.1, "kg", "Mission specification"),
        velocity=Quantity(velocity, velocity * 0.05, "m/s", "Mission specification"),
        diameter=Quantity((max(mass, 0.0) / 2700.0) ** (1.0 / 3.0) * 2.0, 0.1, "m", "Estimated from mass"),
        density=Quantity(2700.0, 100.0, "kg/m^3", "Typical spacecraft density"),
    )


def head_on_geometry(target_radius: float) -> ImpactGeometry:
    return ImpactGeometry(
        impact_angle=Quantity(0.0, 0.1, "rad", "Head-on impact"),
        target_radius=Quantity(target_radius, target_radius * 0.1, "m", "Target specification"),
    )


def dart_like_impactor() -> Impactor:
    return Impactor(
        mass=Quantity(610.0, 30.0, "kg", "DART mission specification"),
        velocity=Quantity(6140.0, 100.0, "m/s", "DART impact velocity"),
        diameter=Quantity(1.2, 0.1, "m", "DART spacecraft dimensions"),
        density=Quantity(508.0, 50.0, "kg/m^3", "DART bulk density"),
    )


# ---------- Scaling relations ----------
def _effective_beta(beta: float, mu: float, velocity: float) -> float:
    if velocity <= 0.0:
        return 1.0
    return 1.0 + (beta - 1.0) * (velocity / V_REF) ** (3.0 * mu - 1.0)


def _crater_diameter(energy: float, density: float, radius: float) -> float:
    if energy <= 0.0 or density <= 0.0 or radius <= 0.0:
        return 0.0
    g = G * density * (4.0 / 3.0) * pi * radius      # surface gravity of a uniform sphere
    return CRATER_COEFF * (energy / (density * g)) ** CRATER_EXPONENT


def _ejecta_velocity(k: float, energy: float, mass: float) -> float:
    ratio = safe_div(energy, mass)
    return k * sqrt(ratio) if ratio >= 0.0 else 0.0


def _check_validity(impactor: Impactor, target: TargetMaterial, geometry: ImpactGeometry,
                    target_mass: float, cfg: EngineConfig) -> tuple[bool, list[str]]:
    p = cfg.momentum(target.composition)
    v, m = impactor.velocity.value, impactor.mass.value
    warnings: list[str] = []
    if v < p.min_velocity:
        warnings.append(f"Impact velocity {v:g} m/s is below validated range ({p.min_velocity:g} m/s)")
    if v > p.max_velocity:
        warnings.append(f"Impact velocity {v:g} m/s is above validated range ({p.max_velocity:g} m/s)")
    if m < p.min_impactor_mass:
        warnings.append(f"Impactor mass {m:g} kg is below validated range ({p.min_impactor_mass:g} kg)")
    if m > p.max_impactor_mass:
        warnings.append(f"Impactor mass {m:g} kg is above validated range ({p.max_impactor_mass:g} kg)")
    if target_mass < p.min_target_mass:
        warnings.append(f"Target mass {target_mass:g} kg is below validated range ({p.min_target_mass:g} kg)")
    if target_mass > p.max_target_mass:
        warnings.append(f"Target mass {target_mass:g} kg is above validated range ({p.max_target_mass:g} kg)")
    angle = geometry.impact_angle.value
    if angle > MAX_ANGLE_RAD:
        warnings.append(f"Impact angle {degrees(angle):.1f}° is quite oblique - "
                        "momentum transfer efficiency may be reduced")
    within = not warnings
    porosity = target.porosity.value
    if porosity > HIGH_POROSITY:
        warnings.append(f"High target porosity ({porosity * 100:.1f}%) may affect momentum transfer efficiency")
    return within, warnings


# ---------- Momentum transfer ----------
def momentum_transfer(impactor: Impactor, target_material: TargetMaterial, geometry: ImpactGeometry,
                      target_mass: Quantity | float,
                      config: EngineConfig | None = None) -> KineticImpactResult:
    cfg = config or default_config()
    if not isinstance(target_mass, Quantity):
        target_mass = exact(target_mass, "kg", "Target specification")
    params = cfg.momentum(target_material.composition)
    within, warnings = _check_validity(impactor, target_material, geometry, target_mass.value, cfg)

    energy = propagate(lambda mass, velocity: 0.5 * mass * velocity * velocity,
                       {"mass": impactor.mass, "velocity": impactor.velocity},
                       "J", "Calculated from kinetic energy formula")
    direct = propagate(lambda mass, velocity, angle: mass * velocity * cos(angle),
                       {"mass": impactor.mass, "velocity": impactor.velocity, "angle": geometry.impact_angle},
                       "kg·m/s", "Calculated from impactor momentum")
    beta = propagate(_effective_beta,
                     {"beta": params.beta, "mu": params.mu, "velocity": impactor.velocity},
                     "1", "Holsapple & Housen 2012, velocity scaled")
    ejecta = (beta - 1.0) * direct
    total = (direct + ejecta).with_source("Combined momentum transfers")
    delta_v = (total / target_mass).with_unit("m/s").with_source("Calculated from momentum conservation")

    diameter = propagate(_crater_diameter,
                         {"energy": energy, "density": target_material.density,
                          "radius": geometry.target_radius},
                         "m", "Calculated from crater scaling laws")
    depth = diameter.scale(DEPTH_RATIO).with_source("Estimated from diameter")
    ejecta_mass = (diameter.power(3, "m^3").scale(pi / 12.0) * target_material.density) \
        .with_unit("kg").with_source("Calculated from crater volume")
    ejecta_velocity = propagate(_ejecta_velocity,
                                {"k": params.k, "energy": energy, "mass": ejecta_mass},
                                "m/s", "Estimated from energy scaling")
    specific = (energy / target_mass).with_unit("J/kg").with_source("Calculated as energy per unit mass")

    log.debug("[kinetic.transfer] comp=%s v=%.4g beta=%.3f dv=%.4g within=%s",
              target_material.composition.value, impactor.velocity.value, beta.value, delta_v.value, within)
    return KineticImpactResult(
        direct_momentum_transfer=direct,
        ejecta_momentum_enhancement=ejecta.with_source("Calculated from momentum enhancement factor"),
        total_momentum_transfer=total,
        momentum_transfer_efficiency=beta,
        delta_v=delta_v,
        crater_diameter=diameter,
        crater_depth=depth,
        ejecta_mass=ejecta_mass,
        ejecta_velocity=ejecta_velocity,
        impact_energy=energy,
        specific_energy=specific,
        within_validity_range=within,
        warnings=tuple(warnings),
    )


# ---------- Spacecraft search ----------
def _grid(lo: float, hi: float, n: int) -> list[float]:
    """n evenly spaced samples from lo to hi; a single sample sits on the upper bound."""
    if n <= 1:
        return [hi]
    return [lo + (i / (n - 1)) * (hi - lo) for i in range(n)]


def optimize_spacecraft(target_material: TargetMaterial, geometry: ImpactGeometry,
                        target_mass: Quantity | float, constraints: SpacecraftConstraints,
                        config: EngineConfig | None = None) -> SpacecraftDesign:
    """Grid search over mass x velocity for the largest delta-V inside the launch envelope."""
    cfg = config or default_config()
    h = cfg.deflection
    m_hi = min(constraints.max_mass, constraints.launch_capability)
    m_lo = min(h.min_search_mass_kg, m_hi)
    v_hi = constraints.max_velocity
    v_lo = min(h.min_search_velocity_mps, v_hi)

    best: tuple[Impactor, Quantity] | None = None
    for mass in _grid(m_lo, m_hi, h.grid_steps):
        for velocity in _grid(v_lo, v_hi, h.grid_steps):
            sc = typical_spacecraft(mass, velocity)
            dv = momentum_transfer(sc, target_material, geometry, target_mass, cfg).delta_v
            if best is None or dv.value > best[1].value:
                best = (sc, dv)

    sc, dv = best
    launch = propagate(lambda mass, velocity: 0.5 * mass * velocity * velocity,
                       {"mass": sc.mass, "velocity": sc.velocity}, "J", "Calculated from kinetic energy")
    cost = (h.base_mission_cost_usd + h.cost_per_kg_usd * sc.mass.value
            + h.cost_per_mps_usd * sc.velocity.value)
    log.debug("[kinetic.optimize] mass=%.4g v=%.4g dv=%.4g cost=%.4g",
              sc.mass.value, sc.velocity.value, dv.value, cost)
    return SpacecraftDesign(
        optimal_mass=sc.mass.with_source("Optimization result"),
        optimal_velocity=sc.velocity.with_source("Optimization result"),
        max_delta_v=dv,
        launch_energy_required=launch,
        mission_duration=Quantity(h.mission_duration_s, h.mission_duration_sigma_s, "s",
                                  "Estimated mission duration"),
        cost_estimate=Quantity(cost, 200e6, "USD", "Rough cost estimate"),
    )
