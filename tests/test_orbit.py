import math
from dataclasses import replace

import pytest

from neoshield.models import OrbitalElements
from neoshield.orbit import (
    aphelion_distance, closest_approach, orbital_period_days, path, perihelion_distance,
    propagate, solve_kepler_equation, true_anomaly,
)


def test_kepler_solution_satisfies_equation():
    for M, e in [(0.1, 0.1), (1.0, 0.3), (3.0, 0.7), (5.5, 0.6)]:
        E = solve_kepler_equation(M, e)
        assert E - e * math.sin(E) == pytest.approx(M, abs=1e-6)


def test_kepler_is_deterministic_and_trivial_for_circles():
    assert solve_kepler_equation(1.0, 0.3) == solve_kepler_equation(1.0, 0.3)
    assert solve_kepler_equation(2.0, 0.0) == pytest.approx(2.0)


def test_kepler_non_finite_input_is_nan():
    assert math.isnan(solve_kepler_equation(float("nan"), 0.1))


def test_true_anomaly_basics():
    assert true_anomaly(0.0, 0.5) == 0.0
    assert true_anomaly(1.2, 0.0) == pytest.approx(1.2)
    assert math.isnan(true_anomaly(1.0, 1.5))


def test_state_on_reference_position_at_epoch(earth_like):
    st = propagate(earth_like, earth_like.epoch_jd)
    assert st.position_au.as_tuple() == pytest.approx((1.0, 0.0, 0.0), abs=1e-12)
    assert st.distance_au == pytest.approx(0.0, abs=1e-12)
    assert st.heliocentric_distance_au == pytest.approx(1.0)
    # circular speed at 1 AU, ~29.8 km/s
    assert st.velocity_au_per_day.norm() == pytest.approx(0.017202, rel=1e-3)


def test_circular_orbit_keeps_its_radius(earth_like):
    for day in (13.0, 100.0, 250.5, 4000.0):
        st = propagate(earth_like, earth_like.epoch_jd + day)
        assert st.heliocentric_distance_au == pytest.approx(1.0, rel=1e-9)


def test_half_period_puts_body_opposite(earth_like):
    half = orbital_period_days(earth_like) / 2.0
    st = propagate(earth_like, earth_like.epoch_jd + half)
    assert st.position_au.as_tuple() == pytest.approx((-1.0, 0.0, 0.0), abs=1e-6)
    assert st.distance_au == pytest.approx(2.0, abs=1e-6)


def test_polar_orbit_rotates_out_of_the_ecliptic(earth_like):
    polar = replace(earth_like, inclination_deg=90.0, mean_anomaly_deg=90.0)
    st = propagate(polar, polar.epoch_jd)
    assert st.position_au.as_tuple() == pytest.approx((0.0, 0.0, 1.0), abs=1e-9)


def test_propagation_is_deterministic():
    el = OrbitalElements(1.458, 0.223, 10.83, 304.3, 178.9, 190.0)
    a, b = propagate(el, 2460100.5), propagate(el, 2460100.5)
    assert a == b


def test_eccentric_orbit_stays_between_apsides():
    el = OrbitalElements(1.458, 0.223, 10.83, 304.3, 178.9, 190.0)
    for day in range(0, 700, 35):
        r = propagate(el, 2460000.0 + day).heliocentric_distance_au
        assert perihelion_distance(el) - 1e-9 <= r <= aphelion_distance(el) + 1e-9


def test_unbound_elements_come_back_as_nan_without_raising(earth_like):
    st = propagate(replace(earth_like, eccentricity=1.5), earth_like.epoch_jd + 10)
    assert math.isnan(st.distance_au)
    st = propagate(replace(earth_like, semi_major_axis_au=0.0), earth_like.epoch_jd)
    assert math.isnan(st.heliocentric_distance_au)


def test_period_of_one_au_orbit(earth_like):
    assert orbital_period_days(earth_like) == pytest.approx(365.25, rel=2e-3)


def test_closest_approach_finds_coincident_start(earth_like):
    ca = closest_approach(earth_like, search_days=30, start_jd=earth_like.epoch_jd)
    assert ca.distance_au == pytest.approx(0.0, abs=1e-12)
    assert ca.epoch_jd == earth_like.epoch_jd
    assert ca.speed_au_per_day > 0


def test_closest_approach_is_minimum_of_daily_samples():
    el = OrbitalElements(1.2, 0.3, 5.0, 40.0, 60.0, 10.0)
    ca = closest_approach(el, search_days=200, start_jd=2460000.0)
    samples = [propagate(el, 2460000.0 + d).distance_au for d in range(200)]
    assert ca.distance_au == min(samples)
    assert 2460000.0 <= ca.epoch_jd < 2460200.0


def test_closest_approach_empty_window(earth_like):
    ca = closest_approach(earth_like, search_days=0)
    assert math.isinf(ca.distance_au)


def test_path_length_and_fresh_lists(earth_like):
    pts = path(earth_like, days=365, steps=10, start_jd=earth_like.epoch_jd)
    assert len(pts) == 11
    assert pts[0] == propagate(earth_like, earth_like.epoch_jd).position_au
    assert path(earth_like, steps=10) is not path(earth_like, steps=10)
    assert len(path(earth_like, steps=0)) == 1
