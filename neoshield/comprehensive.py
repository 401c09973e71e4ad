from __future__ import annotations
import logging
from dataclasses import dataclass

from .config import EngineConfig, default_config
from .consequences import (
    CasualtyReport, ClimateReport, DisasterReport, GeologicalResult, InfrastructureReport,
    casualties_and_damage, climate_effects, geological_summary, natural_disasters,
)
from .impact_model import DEFAULT_IMPACT_ANGLE_DEG, ImpactModel
from .models import Accuracy, Asteroid, Composition, ImpactLocation
from .quantity import Quantity
from .timeline import Timeline, timeline

log = logging.getLogger(__name__)

MEASURED_COMPLETENESS = 0.7


@dataclass(frozen=True)
class AsteroidSummary:
    id: str
    name: str
    diameter_m: float
    mass_kg: float
    velocity_kms: float
    composition: Composition


@dataclass(frozen=True)
class EnergyBlock:
    kinetic_energy_j: float
    effective_energy_j: float      # after composition/velocity coupling
    tnt_kilotons: float            # of the effective energy
    tnt_megatons: float
    impact_efficiency: float
    vaporized_fraction: float
    global_recurrence_years: Quantity   # yr
    accuracy: Accuracy


@dataclass(frozen=True)
class ComprehensiveImpactResult:
    asteroid: AsteroidSummary
    energy: EnergyBlock
    geological: GeologicalResult
    casualties: CasualtyReport
    infrastructure: InfrastructureReport
    climate: ClimateReport
    natural_disasters: DisasterReport
    timeline: Timeline


def calculate_comprehensive_impact(asteroid: Asteroid, location: ImpactLocation,
                                   impact_angle: float = DEFAULT_IMPACT_ANGLE_DEG,
                                   config: EngineConfig | None = None) -> ComprehensiveImpactResult:
    """energy -> crater -> blast -> geological -> casualties/infrastructure -> climate -> disasters -> timeline"""
    cfg = config or default_config()
    model = ImpactModel(asteroid, cfg)

    kt = model.energy_kt_tnt()
    mt = model.energy_mt_tnt()
    energy = EnergyBlock(
        kinetic_energy_j=model.kinetic_energy_J(),
        effective_energy_j=model.effective_energy_J(),
        tnt_kilotons=kt,
        tnt_megatons=mt,
        impact_efficiency=model.efficiency(),
        vaporized_fraction=model.vaporized_fraction(),
        global_recurrence_years=model.global_recurrence_years(),
        accuracy=Accuracy.MEASURED if asteroid.data_completeness > MEASURED_COMPLETENESS else Accuracy.ESTIMATED,
    )

    cr = model.crater(impact_angle)
    bl = model.blast()
    geo = geological_summary(cr, bl, kt, cfg)
    damage = casualties_and_damage(location, geo, mt, cfg)
    climate = climate_effects(cr.volume, mt, location.is_ocean, cr.diameter, cfg)
    disasters = natural_disasters(asteroid, location, mt, bl, cfg)
    tl = timeline(damage.casualties, damage.infrastructure, climate, disasters, cfg)

    log.debug("[impact.comprehensive] id=%s Mt=%.4g deaths=%d ocean=%s",
              asteroid.id, mt, damage.casualties.total.estimated_deaths, location.is_ocean)
    return ComprehensiveImpactResult(
        asteroid=AsteroidSummary(asteroid.id, asteroid.name, asteroid.diameter_m, asteroid.mass_kg,
                                 asteroid.velocity_kms, asteroid.composition),
        energy=energy,
        geological=geo,
        casualties=damage.casualties,
        infrastructure=damage.infrastructure,
        climate=climate,
        natural_disasters=disasters,
        timeline=tl,
    )
