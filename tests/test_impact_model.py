import math
from dataclasses import replace

import pytest

from neoshield.config import RecurrenceLaw, asteroid_from_diameter, default_config
from neoshield.impact_model import (
    J_PER_KT_TNT, ImpactModel, blast_effects, crater, impact_efficiency, kinetic_energy,
    recurrence_interval, seismic_magnitude, tnt_equivalent,
)
from neoshield.models import Asteroid


def test_doubling_velocity_quadruples_energy():
    assert kinetic_energy(1e9, 40_000.0) == pytest.approx(4.0 * kinetic_energy(1e9, 20_000.0), rel=1e-12)


def test_tnt_equivalent_is_linear_in_kilotons():
    assert tnt_equivalent(J_PER_KT_TNT) == pytest.approx(1.0)
    assert tnt_equivalent(kinetic_energy(3e6, 1e4)) == pytest.approx(3.0 * tnt_equivalent(kinetic_energy(1e6, 1e4)))


def test_efficiency_grows_with_speed_and_caps():
    assert impact_efficiency("rocky", 20.0) == pytest.approx(0.85 * 1.1)
    assert impact_efficiency("rocky", 5.0) == pytest.approx(0.85 * 0.95)
    assert impact_efficiency("rocky", 70.0) == impact_efficiency("rocky", 20.0)
    assert impact_efficiency("metallic", 10.0) > impact_efficiency("ice", 10.0)


@pytest.mark.parametrize("energy", [1e6, 1e12, 1e15, 1e18, 1e21, 1e24])
def test_crater_shape_is_sane(energy):
    c = crater(energy)
    assert 0.0 < c.depth.value < c.diameter.value
    assert c.volume.value > 0.0
    assert c.diameter.relative_uncertainty == pytest.approx(0.3)


def test_crater_of_nothing_is_empty():
    for e in (0.0, -5.0):
        c = crater(e)
        assert c.diameter.value == 0.0
        assert c.depth.value == 0.0
        assert c.volume.value == 0.0


def test_steeper_impacts_dig_wider_craters():
    assert crater(1e18, 90.0).diameter.value > crater(1e18, 30.0).diameter.value
    assert crater(1e18, 0.0).diameter.value == 0.0


def test_denser_impactor_digs_wider_crater():
    assert crater(1e18, impactor_density=7800.0).diameter.value > crater(1e18, impactor_density=1400.0).diameter.value


@pytest.mark.parametrize("energy", [1e3, 1e9, 1e15, 1e20, 1e25])
def test_airblast_reaches_past_fireball(energy):
    b = blast_effects(energy)
    assert b.airblast_radius.value > b.fireball_radius.value > 0.0
    assert b.thermal_radiation_radius.value > b.airblast_radius.value


def test_blast_of_nothing():
    b = blast_effects(0.0)
    assert b.fireball_radius.value == b.airblast_radius.value == b.thermal_radiation_radius.value == 0.0
    assert b.seismic_magnitude.value == 0.0


def test_seismic_magnitude():
    assert seismic_magnitude(1e20) == pytest.approx(2.0 / 3.0 * 20.0 - 2.9)
    assert seismic_magnitude(10.0) == 0.0
    assert seismic_magnitude(0.0) == 0.0


def test_model_energetics(big_rocky):
    m = ImpactModel(big_rocky)
    ke = 0.5 * 1e12 * 20_000.0 ** 2
    assert m.kinetic_energy_J() == pytest.approx(ke)
    assert m.effective_energy_J() == pytest.approx(ke * m.efficiency())
    assert m.energy_mt_tnt() == pytest.approx(m.energy_kt_tnt() / 1000.0)
    assert 0.0 <= m.vaporized_fraction() <= 1.0
    rec = m.global_recurrence_years()
    assert rec.unit == "yr" and math.isfinite(rec.value) and rec.value > 0


def test_slow_impact_vaporizes_nothing():
    slow = Asteroid("s", "Slow", 10.0, 1e6, 1.0)
    assert ImpactModel(slow).vaporized_fraction() == 0.0


def test_bigger_bodies_do_more_damage():
    sizes = [asteroid_from_diameter(f"d{d}", "tier", d, 20.0) for d in (50.0, 140.0, 500.0, 1000.0)]
    craters = [ImpactModel(a).crater().diameter.value for a in sizes]
    airblasts = [ImpactModel(a).blast().airblast_radius.value for a in sizes]
    assert craters == sorted(craters) and len(set(craters)) == len(craters)
    assert airblasts == sorted(airblasts) and len(set(airblasts)) == len(airblasts)


def test_recurrence_interval_of_a_megaton_event():
    rec = recurrence_interval(J_PER_KT_TNT * 1000.0)
    assert rec.value == pytest.approx(109.0)
    assert rec.uncertainty == pytest.approx(0.5 * 109.0)
    assert "EIEP" in rec.source
    assert recurrence_interval(J_PER_KT_TNT * 1e6).value == pytest.approx(109.0 * 1000.0 ** 0.78)


def test_recurrence_interval_without_energy_is_infinite():
    assert math.isinf(recurrence_interval(0.0).value)
    assert math.isinf(recurrence_interval(float("nan")).value)


def test_recurrence_law_is_configurable():
    cfg = replace(default_config(), recurrence=RecurrenceLaw(coeff_years=50.0, exponent=1.0, uncertainty=0.0))
    rec = recurrence_interval(J_PER_KT_TNT * 2000.0, cfg)
    assert rec.value == pytest.approx(100.0)
    assert rec.uncertainty == 0.0
