from dataclasses import replace

import pytest

from neoshield.config import default_config
from neoshield.kinetic import (
    ImpactGeometry, SpacecraftConstraints, dart_like_impactor, head_on_geometry, momentum_transfer,
    optimize_spacecraft, typical_spacecraft,
)
from neoshield.models import Composition
from neoshield.quantity import Quantity

DIMORPHOS_MASS = 4.9e9
DIMORPHOS_RADIUS = 75.0


def _rocky():
    return default_config().target_material("rocky")


def test_dart_anchor():
    res = momentum_transfer(dart_like_impactor(), _rocky(), head_on_geometry(DIMORPHOS_RADIUS), DIMORPHOS_MASS)
    assert 1.5 <= res.momentum_transfer_efficiency.value <= 6.0
    assert 1e-6 <= res.delta_v.value <= 1e-2
    assert res.impact_energy.value == pytest.approx(0.5 * 610.0 * 6140.0 ** 2)
    assert res.within_validity_range
    assert res.warnings == ()
    assert res.delta_v.unit == "m/s"
    assert res.references


def test_total_momentum_is_direct_plus_ejecta():
    res = momentum_transfer(dart_like_impactor(), _rocky(), head_on_geometry(DIMORPHOS_RADIUS), DIMORPHOS_MASS)
    assert res.total_momentum_transfer.value == (res.direct_momentum_transfer.value
                                                 + res.ejecta_momentum_enhancement.value)
    assert res.direct_momentum_transfer.value == pytest.approx(610.0 * 6140.0)


@pytest.mark.parametrize("composition", list(Composition))
@pytest.mark.parametrize("velocity", [2000.0, 6140.0, 20_000.0])
def test_ejecta_always_enhances_momentum(composition, velocity):
    target = default_config().target_material(composition)
    res = momentum_transfer(typical_spacecraft(500.0, velocity), target,
                            head_on_geometry(100.0), 1e10)
    assert res.momentum_transfer_efficiency.value > 1.0
    assert 0.0 < res.crater_depth.value < res.crater_diameter.value
    assert res.ejecta_mass.value > 0.0
    assert res.ejecta_velocity.value > 0.0


def test_float_and_quantity_target_mass_agree():
    geo = head_on_geometry(DIMORPHOS_RADIUS)
    a = momentum_transfer(dart_like_impactor(), _rocky(), geo, DIMORPHOS_MASS)
    b = momentum_transfer(dart_like_impactor(), _rocky(), geo, Quantity(DIMORPHOS_MASS, 1e9, "kg"))
    assert a.delta_v.value == pytest.approx(b.delta_v.value)
    assert b.delta_v.uncertainty > a.delta_v.uncertainty


def test_oblique_impact_leaves_validity_range():
    geo = replace(head_on_geometry(DIMORPHOS_RADIUS), impact_angle=Quantity(1.2, 0.05, "rad"))
    res = momentum_transfer(dart_like_impactor(), _rocky(), geo, DIMORPHOS_MASS)
    assert not res.within_validity_range
    assert any("oblique" in w for w in res.warnings)
    head_on = momentum_transfer(dart_like_impactor(), _rocky(), head_on_geometry(DIMORPHOS_RADIUS), DIMORPHOS_MASS)
    assert res.delta_v.value < head_on.delta_v.value


def test_fast_impactor_warns():
    res = momentum_transfer(typical_spacecraft(500.0, 60_000.0), _rocky(), head_on_geometry(100.0), 1e10)
    assert not res.within_validity_range
    assert any("above validated range" in w for w in res.warnings)


def test_small_target_warns():
    res = momentum_transfer(dart_like_impactor(), _rocky(), head_on_geometry(1.0), 1e3)
    assert not res.within_validity_range
    assert any(w.startswith("Target mass") for w in res.warnings)


def test_porous_target_warns_but_stays_valid():
    porous = replace(_rocky(), porosity=Quantity(0.6, 0.1, "1"))
    res = momentum_transfer(dart_like_impactor(), porous, head_on_geometry(DIMORPHOS_RADIUS), DIMORPHOS_MASS)
    assert res.within_validity_range
    assert any("porosity" in w for w in res.warnings)


def test_zero_velocity_transfers_nothing():
    res = momentum_transfer(typical_spacecraft(500.0, 0.0), _rocky(), head_on_geometry(100.0), 1e10)
    assert res.delta_v.value == 0.0
    assert res.crater_diameter.value == 0.0
    assert not res.within_validity_range


def test_optimizer_picks_the_envelope_corner():
    design = optimize_spacecraft(_rocky(), head_on_geometry(DIMORPHOS_RADIUS), DIMORPHOS_MASS,
                                 SpacecraftConstraints(max_mass=1000.0, max_velocity=10_000.0,
                                                       launch_capability=800.0))
    assert design.optimal_mass.value == pytest.approx(800.0)
    assert design.optimal_velocity.value == pytest.approx(10_000.0)
    assert design.launch_energy_required.value == pytest.approx(0.5 * 800.0 * 1e8)
    assert design.cost_estimate.value == pytest.approx(500e6 + 1e4 * 800.0 + 2e4 * 10_000.0)
    assert design.mission_duration.unit == "s"


def test_optimizer_respects_launch_capability():
    design = optimize_spacecraft(_rocky(), head_on_geometry(50.0), 1e9,
                                 SpacecraftConstraints(max_mass=1000.0, max_velocity=8000.0,
                                                       launch_capability=50.0))
    assert design.optimal_mass.value == pytest.approx(50.0)


def test_optimizer_cost_grows_with_envelope():
    geo = head_on_geometry(DIMORPHOS_RADIUS)
    small = optimize_spacecraft(_rocky(), geo, DIMORPHOS_MASS, SpacecraftConstraints(500.0, 8000.0, 500.0))
    large = optimize_spacecraft(_rocky(), geo, DIMORPHOS_MASS, SpacecraftConstraints(1500.0, 12_000.0, 1500.0))
    assert large.cost_estimate.value > small.cost_estimate.value
    assert large.max_delta_v.value > small.max_delta_v.value


def test_geometry_builder():
    geo = head_on_geometry(120.0)
    assert isinstance(geo, ImpactGeometry)
    assert geo.impact_angle.value == 0.0
    assert geo.target_radius.uncertainty == pytest.approx(12.0)


def test_single_step_grid_samples_the_envelope_corner():
    cfg = default_config()
    coarse = replace(cfg, deflection=replace(cfg.deflection, grid_steps=1))
    design = optimize_spacecraft(_rocky(), head_on_geometry(DIMORPHOS_RADIUS), DIMORPHOS_MASS,
                                 SpacecraftConstraints(max_mass=1000.0, max_velocity=10_000.0,
                                                       launch_capability=800.0), coarse)
    assert design.optimal_mass.value == pytest.approx(800.0)
    assert design.optimal_velocity.value == pytest.approx(10_000.0)
    assert design.max_delta_v.value > 0.0


def test_two_step_grid_matches_the_fine_search_at_the_corner():
    cfg = default_config()
    geo = head_on_geometry(DIMORPHOS_RADIUS)
    envelope = SpacecraftConstraints(max_mass=1000.0, max_velocity=10_000.0, launch_capability=800.0)
    coarse = optimize_spacecraft(_rocky(), geo, DIMORPHOS_MASS, envelope,
                                 replace(cfg, deflection=replace(cfg.deflection, grid_steps=2)))
    fine = optimize_spacecraft(_rocky(), geo, DIMORPHOS_MASS, envelope)
    assert coarse.max_delta_v.value == pytest.approx(fine.max_delta_v.value)


def test_empty_grid_cannot_be_configured():
    with pytest.raises(ValueError):
        replace(default_config().deflection, grid_steps=0)
