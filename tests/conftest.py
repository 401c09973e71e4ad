import pytest

from neoshield.config import default_config
from neoshield.models import Asteroid, ImpactLocation, OrbitalElements


@pytest.fixture
def cfg():
    return default_config()


@pytest.fixture
def big_rocky():
    """500 m, 1e12 kg, 20 km/s stony body with every field measured."""
    return Asteroid(
        id="ref-500", name="Reference 500 m", diameter_m=500.0, mass_kg=1e12, velocity_kms=20.0,
        composition="rocky",
        completeness={"diameter_m": "measured", "mass_kg": "measured", "velocity_kms": "measured"},
    )


@pytest.fixture
def city():
    return ImpactLocation(lat=40.7, lng=-74.0, population_density=1000.0, total_population=1_000_000,
                          gdp_per_capita=60_000.0, infrastructure_value=5e10)


@pytest.fixture
def open_ocean():
    return ImpactLocation(lat=0.0, lng=-150.0, population_density=0.0, total_population=0,
                          gdp_per_capita=0.0, infrastructure_value=0.0, is_ocean=True, ocean_depth_m=4500.0)


@pytest.fixture
def earth_like():
    """Circular 1 AU orbit sitting on the reference position at its epoch."""
    return OrbitalElements(semi_major_axis_au=1.0, eccentricity=0.0, inclination_deg=0.0,
                           ascending_node_deg=0.0, perihelion_arg_deg=0.0, mean_anomaly_deg=0.0,
                           epoch_jd=2460000.0)
