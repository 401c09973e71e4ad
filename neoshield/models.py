from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from math import pi, sqrt
from types import MappingProxyType
from typing import Mapping


class Composition(str, Enum):
    ROCKY = "rocky"
    METALLIC = "metallic"
    CARBONACEOUS = "carbonaceous"
    ICE = "ice"

    @classmethod
    def parse(cls, name: str | Composition) -> Composition:
        if isinstance(name, Composition):
            return name
        k = name.strip().lower()
        # catalog spellings seen in NEO data files
        aliases = {"stony": "rocky", "stone": "rocky", "iron": "metallic", "icy": "ice"}
        k = aliases.get(k, k)
        try:
            return cls(k)
        except ValueError:
            available = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown composition '{name}'. Available: {available}") from None


class Accuracy(str, Enum):
    MEASURED = "measured"
    CALCULATED = "calculated"
    ESTIMATED = "estimated"
    PROBABILITY = "probability"


class StrategyCategory(str, Enum):
    KINETIC = "kinetic"
    NUCLEAR = "nuclear"
    GRAVITY = "gravity"
    SOLAR = "solar"


@dataclass(frozen=True)
class Asteroid:
    id: str
    name: str
    diameter_m: float
    mass_kg: float
    velocity_kms: float
    composition: Composition = Composition.ROCKY
    # field name -> "measured" | "estimated"
    completeness: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "composition", Composition.parse(self.composition))
        object.__setattr__(self, "completeness", MappingProxyType(dict(self.completeness)))

    @property
    def velocity_mps(self) -> float:
        return self.velocity_kms * 1000.0

    @property
    def radius_m(self) -> float:
        return 0.5 * self.diameter_m

    @property
    def bulk_density(self) -> float:
        volume = (pi / 6.0) * self.diameter_m**3
        return self.mass_kg / volume if volume > 0 else float("nan")

    @property
    def data_completeness(self) -> float:
        """Fraction of recorded fields that were measured rather than inferred."""
        if not self.completeness:
            return 1.0
        measured = sum(1 for v in self.completeness.values() if v == "measured")
        return measured / len(self.completeness)


@dataclass(frozen=True)
class OrbitalElements:
    semi_major_axis_au: float
    eccentricity: float
    inclination_deg: float
    ascending_node_deg: float
    perihelion_arg_deg: float
    mean_anomaly_deg: float
    epoch_jd: float = 2451545.0  # J2000.0


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float

    def norm(self) -> float:
        return sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def as_tuple(self) -> tuple[float, float, float]:
        return self.x, self.y, self.z


@dataclass(frozen=True)
class OrbitalState:
    position_au: Vector3
    velocity_au_per_day: Vector3
    distance_au: float             # from the reference body
    heliocentric_distance_au: float
    true_anomaly_deg: float


@dataclass(frozen=True)
class ImpactLocation:
    lat: float
    lng: float
    population_density: float      # people / km^2
    total_population: float
    gdp_per_capita: float          # USD
    infrastructure_value: float    # USD per 1,000 km^2 of affected area
    is_ocean: bool = False
    ocean_depth_m: float | None = None
    coastal_proximity_km: float | None = None


@dataclass(frozen=True)
class DeflectionStrategy:
    id: str
    name: str
    category: StrategyCategory
    effectiveness: float           # baseline, 0-1
    cost_usd: float
    lead_time_years: float
    technology_readiness: int
    mass_required_kg: float
    delta_v_mps: float             # nominal, for the reference target mass
    risks: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "category", StrategyCategory(self.category))
        object.__setattr__(self, "risks", tuple(self.risks))
