from __future__ import annotations
import logging
import math
from dataclasses import fields, is_dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Mapping, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from . import __version__
from .comprehensive import calculate_comprehensive_impact
from .config import asteroid_from_diameter, default_config, load_settings
from .deflection import compare_strategies, launch_window
from .kinetic import (
    SpacecraftConstraints, dart_like_impactor, head_on_geometry, momentum_transfer,
    optimize_spacecraft, typical_spacecraft,
)
from .models import Asteroid, ImpactLocation, OrbitalElements
from .orbit import (
    DEFAULT_START_JD, aphelion_distance, closest_approach, orbital_period_days, path,
    perihelion_distance, propagate,
)
from .quantity import Quantity

settings = load_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="NEO Shield physics engine", version=__version__)

CompositionName = Literal["rocky", "metallic", "carbonaceous", "ice"]


# -------------------------------
# JSON rendering
# -------------------------------
def to_jsonable(obj: Any) -> Any:
    """Dataclasses -> dicts, enums -> values, non-finite floats -> None."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, datetime):
        return obj.isoformat()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Mapping):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


# -------------------------------
# Health
# -------------------------------
@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}


# -------------------------------
# Impact simulation endpoints
# -------------------------------
class AsteroidIn(BaseModel):
    id: str = Field("custom")
    name: str = Field("Custom asteroid")
    diameter_m: float = Field(..., gt=0, description="Diameter in meters")
    velocity_kms: float = Field(..., gt=0, description="Impact speed in km/s")
    mass_kg: Optional[float] = Field(None, gt=0, description="Measured mass; derived from diameter if omitted")
    composition: CompositionName = Field("rocky")
    density_kgpm3: Optional[float] = Field(None, gt=0)

    def to_asteroid(self) -> Asteroid:
        measured = {"diameter_m": "measured", "velocity_kms": "measured"}
        if self.mass_kg is None:
            return asteroid_from_diameter(self.id, self.name, self.diameter_m, self.velocity_kms,
                                          self.composition, self.density_kgpm3, completeness=measured)
        return Asteroid(self.id, self.name, self.diameter_m, self.mass_kg, self.velocity_kms,
                        self.composition, completeness={**measured, "mass_kg": "measured"})


class LocationIn(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    population_density: float = Field(..., ge=0, description="people per km^2")
    total_population: float = Field(..., ge=0)
    gdp_per_capita: float = Field(10_000.0, ge=0)
    infrastructure_value: float = Field(1e9, ge=0, description="USD per 1,000 km^2")
    is_ocean: bool = False
    ocean_depth_m: Optional[float] = Field(None, gt=0)
    coastal_proximity_km: Optional[float] = Field(None, ge=0)

    def to_location(self) -> ImpactLocation:
        return ImpactLocation(**self.model_dump())


class ImpactRequest(BaseModel):
    asteroid: AsteroidIn
    location: LocationIn
    impact_angle_deg: float = Field(45.0, gt=0, le=90, description="Entry angle to horizontal")


@app.post("/impact/summary")
def impact_summary(req: ImpactRequest):
    asteroid = req.asteroid.to_asteroid()
    result = calculate_comprehensive_impact(asteroid, req.location.to_location(), req.impact_angle_deg)
    log.info("[impact.summary] id=%s D_m=%s v_kms=%s Mt=%.4g deaths=%d",
             asteroid.id, asteroid.diameter_m, asteroid.velocity_kms,
             result.energy.tnt_megatons, result.casualties.total.estimated_deaths)
    return to_jsonable(result)


# -------------------------------
# Orbit endpoints
# -------------------------------
class ElementsIn(BaseModel):
    semi_major_axis_au: float = Field(..., gt=0)
    eccentricity: float = Field(..., ge=0, lt=1)
    inclination_deg: float = Field(0.0, ge=0, le=180)
    ascending_node_deg: float = Field(0.0)
    perihelion_arg_deg: float = Field(0.0)
    mean_anomaly_deg: float = Field(0.0)
    epoch_jd: float = Field(2451545.0)

    def to_elements(self) -> OrbitalElements:
        return OrbitalElements(**self.model_dump())


class OrbitStateRequest(BaseModel):
    elements: ElementsIn
    epoch_jd: float = Field(DEFAULT_START_JD)


class ClosestApproachRequest(BaseModel):
    elements: ElementsIn
    search_days: int = Field(1000, ge=1)
    start_jd: float = Field(DEFAULT_START_JD)


class PathRequest(BaseModel):
    elements: ElementsIn
    days: float = Field(365.0, gt=0)
    steps: int = Field(100, ge=1)
    start_jd: float = Field(DEFAULT_START_JD)


@app.post("/orbit/state")
def orbit_state(req: OrbitStateRequest):
    el = req.elements.to_elements()
    st = propagate(el, req.epoch_jd)
    return to_jsonable({
        "state": st,
        "period_days": orbital_period_days(el),
        "perihelion_au": perihelion_distance(el),
        "aphelion_au": aphelion_distance(el),
    })


@app.post("/orbit/closest-approach")
def orbit_closest_approach(req: ClosestApproachRequest):
    if req.search_days > settings.max_search_days:
        raise HTTPException(status_code=422,
                            detail=f"search_days exceeds the limit of {settings.max_search_days}.")
    ca = closest_approach(req.elements.to_elements(), req.search_days, req.start_jd)
    log.info("[orbit.closest] days=%d min_au=%.6g", req.search_days, ca.distance_au)
    return to_jsonable(ca)


@app.post("/orbit/path")
def orbit_path(req: PathRequest):
    if req.steps > settings.max_path_steps:
        raise HTTPException(status_code=422,
                            detail=f"steps exceeds the limit of {settings.max_path_steps}.")
    pts = path(req.elements.to_elements(), req.days, req.steps, req.start_jd)
    return {"points": [to_jsonable(list(p.as_tuple())) for p in pts]}


# -------------------------------
# Deflection endpoints
# -------------------------------
class ImpactorIn(BaseModel):
    mass_kg: float = Field(..., gt=0)
    velocity_mps: float = Field(..., gt=0)


class KineticRequest(BaseModel):
    impactor: Optional[ImpactorIn] = Field(None, description="Defaults to a DART-like spacecraft")
    composition: CompositionName = Field("rocky")
    target_mass_kg: float = Field(..., gt=0)
    target_radius_m: float = Field(..., gt=0)
    impact_angle_rad: float = Field(0.0, ge=0, le=math.pi / 2, description="0 = head-on")


class OptimizeRequest(BaseModel):
    composition: CompositionName = Field("rocky")
    target_mass_kg: float = Field(..., gt=0)
    target_radius_m: float = Field(..., gt=0)
    max_mass_kg: float = Field(..., gt=0)
    max_velocity_mps: float = Field(..., gt=0)
    launch_capability_kg: float = Field(..., gt=0)


class CompareRequest(BaseModel):
    asteroid: AsteroidIn
    warning_time_years: Optional[float] = Field(None, gt=0)
    impact_probability: float = Field(1.0, ge=0, le=1)
    distance_au: float = Field(1.5, gt=0)
    strategy_ids: Optional[List[str]] = None


def _geometry(radius_m: float, angle_rad: float = 0.0):
    geo = head_on_geometry(radius_m)
    if angle_rad:
        geo = replace(geo, impact_angle=Quantity(angle_rad, 0.1, "rad", "Requested impact angle"))
    return geo


@app.post("/deflection/kinetic")
def deflection_kinetic(req: KineticRequest):
    cfg = default_config()
    imp = (typical_spacecraft(req.impactor.mass_kg, req.impactor.velocity_mps)
           if req.impactor else dart_like_impactor())
    res = momentum_transfer(imp, cfg.target_material(req.composition),
                            _geometry(req.target_radius_m, req.impact_angle_rad), req.target_mass_kg, cfg)
    log.info("[deflection.kinetic] comp=%s beta=%.3f dv=%.4g within=%s",
             req.composition, res.momentum_transfer_efficiency.value, res.delta_v.value,
             res.within_validity_range)
    return to_jsonable(res)


@app.post("/deflection/optimize")
def deflection_optimize(req: OptimizeRequest):
    cfg = default_config()
    design = optimize_spacecraft(
        cfg.target_material(req.composition), _geometry(req.target_radius_m), req.target_mass_kg,
        SpacecraftConstraints(req.max_mass_kg, req.max_velocity_mps, req.launch_capability_kg), cfg)
    return to_jsonable(design)


@app.get("/deflection/strategies")
def deflection_strategies():
    return to_jsonable(list(default_config().strategies))


@app.post("/deflection/compare")
def deflection_compare(req: CompareRequest):
    cfg = default_config()
    if req.strategy_ids is None:
        strategies = list(cfg.strategies)
    else:
        strategies = []
        for sid in req.strategy_ids:
            s = cfg.strategy(sid)
            if s is None:
                raise HTTPException(status_code=404, detail=f"Unknown strategy '{sid}'.")
            strategies.append(s)

    warning = req.warning_time_years or settings.default_warning_years
    ranked = compare_strategies(strategies, req.asteroid.to_asteroid(), warning,
                                req.impact_probability, req.distance_au, cfg)
    log.info("[deflection.compare] n=%d warning_y=%g best=%s",
             len(ranked), warning, ranked[0].strategy.id if ranked else None)
    return {
        "warning_time_years": warning,
        "ranking": [
            {**to_jsonable(a), "launch_window": to_jsonable(launch_window(a.strategy, warning))}
            for a in ranked
        ],
    }
