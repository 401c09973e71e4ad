from __future__ import annotations
import logging
from dataclasses import dataclass
from math import inf, log10, pi, radians, sin

from .config import EngineConfig, default_config
from .models import Asteroid, Composition
from .quantity import Quantity, relative, safe_div

log = logging.getLogger(__name__)

# -----------------------------
# Physical constants & defaults
# -----------------------------
J_PER_KT_TNT = 4.184e12          # J in 1 kiloton TNT (NIST SP 811)
J_PER_MT_TNT = 4.184e15          # J in 1 megaton TNT
DEFAULT_IMPACT_ANGLE_DEG = 45.0  # to horizontal, most probable entry angle
DEFAULT_TARGET_DENSITY = 2700.0  # kg/m^3, crustal rock

CRATER_SOURCE = "Holsapple & Housen 2007 (simplified)"
BLAST_SOURCE = "Glasstone & Dolan 1977, cube-root scaled"
SEISMIC_SOURCE = "Gutenberg-Richter energy relation"


@dataclass(frozen=True)
class CraterResult:
    diameter: Quantity             # m
    depth: Quantity                # m
    volume: Quantity               # m^3


@dataclass(frozen=True)
class BlastResult:
    fireball_radius: Quantity              # km
    airblast_radius: Quantity              # km
    thermal_radiation_radius: Quantity     # km
    seismic_magnitude: Quantity


# ---------- Energetics ----------
def kinetic_energy(mass: float, velocity_m_s: float) -> float:
    """E = 1/2 m v^2 in joules."""
    return 0.5 * mass * velocity_m_s * velocity_m_s


def tnt_equivalent(energy_joules: float) -> float:
    """Kilotons of TNT."""
    return energy_joules / J_PER_KT_TNT


def impact_efficiency(composition: Composition | str, velocity_km_s: float,
                      config: EngineConfig | None = None) -> float:
    """Fraction of kinetic energy coupled into the target; faster impacts couple slightly more."""
    cfg = config or default_config()
    velocity_factor = min(1.1, 0.9 + velocity_km_s * 1000.0 / 1e5)
    return cfg.composition(composition).impact_efficiency * velocity_factor


def effective_energy(asteroid: Asteroid, config: EngineConfig | None = None) -> float:
    ke = kinetic_energy(asteroid.mass_kg, asteroid.velocity_mps)
    return ke * impact_efficiency(asteroid.composition, asteroid.velocity_kms, config)


# ---------- Crater ----------
def crater(energy: float, impact_angle_degrees: float = DEFAULT_IMPACT_ANGLE_DEG,
           target_density: float = DEFAULT_TARGET_DENSITY,
           impactor_density: float | None = None,
           config: EngineConfig | None = None) -> CraterResult:
    """
    Simple-crater scaling:
        D = K1 * (E / (rho_t g))^0.22 * (rho_i / rho_t)^0.15 * sin(theta)^(1/3)
    with depth = 0.2 D and a paraboloid bowl for the volume.
    """
    c = (config or default_config()).crater
    rho_i = target_density if impactor_density is None else impactor_density
    scaled = safe_div(energy, target_density * c.gravity)
    ratio = safe_div(rho_i, target_density)
    angle_factor = max(0.0, sin(radians(impact_angle_degrees))) ** (1.0 / 3.0)

    if not scaled > 0.0 or not ratio > 0.0:
        D = 0.0
    else:
        D = c.k1 * scaled ** c.energy_exponent * ratio ** c.density_ratio_exponent * angle_factor
    d = c.depth_ratio * D
    V = (pi / 8.0) * D * D * d
    return CraterResult(
        diameter=relative(D, c.uncertainty, "m", CRATER_SOURCE),
        depth=relative(d, c.uncertainty, "m", CRATER_SOURCE),
        volume=relative(V, c.uncertainty, "m^3", CRATER_SOURCE),
    )


# ---------- Blast ----------
def seismic_magnitude(energy: float, config: EngineConfig | None = None) -> float:
    """M = (2/3) log10(E) - 2.9, floored at 0."""
    b = (config or default_config()).blast
    if not energy > 0.0:
        return 0.0
    return max(0.0, b.seismic_slope * log10(energy) - b.seismic_offset)


def blast_effects(energy: float, config: EngineConfig | None = None) -> BlastResult:
    """Fireball, airblast and thermal radii (km) scaled by W_kt^(1/3); seismic magnitude."""
    b = (config or default_config()).blast
    if energy > 0.0:
        cube_root_w = tnt_equivalent(energy) ** (1.0 / 3.0)
        fireball = b.fireball_coeff_m * energy ** (1.0 / 3.0) / 1000.0
        airblast = b.airblast_km_per_kt * cube_root_w
        thermal = b.thermal_km_per_kt * cube_root_w
    else:
        fireball = airblast = thermal = 0.0
    M = seismic_magnitude(energy, config)
    log.debug("[impact.blast] E_J=%.4g fireball_km=%.4g airblast_km=%.4g M=%.2f", energy, fireball, airblast, M)
    return BlastResult(
        fireball_radius=relative(fireball, b.uncertainty, "km", BLAST_SOURCE),
        airblast_radius=relative(airblast, b.uncertainty, "km", BLAST_SOURCE),
        thermal_radiation_radius=relative(thermal, b.uncertainty, "km", BLAST_SOURCE),
        seismic_magnitude=relative(M, b.uncertainty, "Mw", SEISMIC_SOURCE),
    )


# ---------- Recurrence ----------
def recurrence_interval(energy: float, config: EngineConfig | None = None) -> Quantity:
    """Mean years between Earth impacts releasing at least this much energy; inf for no energy."""
    law = (config or default_config()).recurrence
    mt = energy / J_PER_MT_TNT
    if not mt > 0.0:
        return Quantity(inf, inf, "yr", law.source)
    return relative(law.coeff_years * mt ** law.exponent, law.uncertainty, "yr", law.source)


class ImpactModel:
    """
    Energy + crater + blast + recurrence for one asteroid.
    Crater and blast are driven by the effective (coupled) energy, not the raw KE.
    """

    def __init__(self, asteroid: Asteroid, config: EngineConfig | None = None):
        self.a = asteroid
        self.cfg = config or default_config()

    # ---------- Energetics ----------
    def kinetic_energy_J(self) -> float:
        return kinetic_energy(self.a.mass_kg, self.a.velocity_mps)

    def efficiency(self) -> float:
        return impact_efficiency(self.a.composition, self.a.velocity_kms, self.cfg)

    def effective_energy_J(self) -> float:
        return effective_energy(self.a, self.cfg)

    def energy_kt_tnt(self) -> float:
        return tnt_equivalent(self.effective_energy_J())

    def energy_mt_tnt(self) -> float:
        return self.effective_energy_J() / J_PER_MT_TNT

    def vaporized_fraction(self) -> float:
        """Share of the impactor vaporized, from specific energy above the composition threshold."""
        props = self.cfg.composition(self.a.composition)
        specific = safe_div(self.effective_energy_J(), self.a.mass_kg)
        excess = safe_div(specific - props.vaporization_threshold, props.vaporization_threshold)
        if excess != excess:
            return 0.0
        return min(1.0, max(0.0, excess) * props.vaporization_efficiency)

    # ---------- Effects ----------
    def crater(self, impact_angle_deg: float = DEFAULT_IMPACT_ANGLE_DEG,
               target_density: float = DEFAULT_TARGET_DENSITY) -> CraterResult:
        return crater(self.effective_energy_J(), impact_angle_deg, target_density,
                      impactor_density=self.a.bulk_density, config=self.cfg)

    def blast(self) -> BlastResult:
        return blast_effects(self.effective_energy_J(), self.cfg)

    # ---------- Recurrence ----------
    def global_recurrence_years(self) -> Quantity:
        return recurrence_interval(self.kinetic_energy_J(), self.cfg)

