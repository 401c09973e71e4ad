import math
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from neoshield.deflection import (
    compare_strategies, impact_probability_reduction, launch_window, strategy_effectiveness, trajectory_change,
)
from neoshield.models import Asteroid
from neoshield.non_kinetic import GravityTractorResult, NuclearDeflectionResult, SolarPressureResult


@pytest.fixture
def mid_size():
    return Asteroid("m300", "Mid 300 m", 300.0, 1e10, 15.0)


def _strategy(cfg, sid):
    return cfg.strategy(sid)


def test_ranking_is_descending_by_cost_effectiveness(cfg, mid_size):
    ranked = compare_strategies(cfg.strategies, mid_size, 10.0)
    ce = [a.cost_effectiveness for a in ranked]
    assert ce == sorted(ce, reverse=True)
    assert ranked[0].strategy.id == "nuclear_deflection"
    assert {a.strategy.id for a in ranked} == {s.id for s in cfg.strategies}


def test_ties_keep_input_order(cfg, mid_size):
    k = _strategy(cfg, "kinetic_impactor")
    a, b = replace(k, id="a"), replace(k, id="b")
    assert [x.strategy.id for x in compare_strategies([a, b], mid_size, 10.0)] == ["a", "b"]
    assert [x.strategy.id for x in compare_strategies([b, a], mid_size, 10.0)] == ["b", "a"]


def test_nan_cost_effectiveness_goes_last(cfg, mid_size):
    broken = replace(_strategy(cfg, "kinetic_impactor"), id="broken", delta_v_mps=float("nan"))
    ranked = compare_strategies([broken, *cfg.strategies], mid_size, 10.0)
    assert ranked[-1].strategy.id == "broken"
    assert math.isnan(ranked[-1].cost_effectiveness)


def test_free_strategy_is_infinitely_cost_effective(cfg, mid_size):
    free = replace(_strategy(cfg, "kinetic_impactor"), cost_usd=0.0)
    a = strategy_effectiveness(free, mid_size, 10.0)
    assert math.isinf(a.cost_effectiveness)
    assert compare_strategies([*cfg.strategies, free], mid_size, 10.0)[0].strategy is free


def test_insufficient_lead_time_penalty(cfg, mid_size):
    a = strategy_effectiveness(_strategy(cfg, "gravity_tractor"), mid_size, 10.0)
    assert a.effectiveness == pytest.approx(0.9 * 0.9 * 0.3)
    assert "Insufficient lead time" in a.risk_factors
    assert "Unproven technology" in a.risk_factors
    assert a.warnings
    assert not a.mission_success
    assert a.suitability == "poor"


def test_kinetic_size_tiers(cfg):
    k = _strategy(cfg, "kinetic_impactor")
    large = strategy_effectiveness(k, Asteroid("l", "L", 600.0, 1e10, 15.0), 20.0)
    assert large.effectiveness == pytest.approx(0.85 * 0.7)
    assert "Large asteroid size" in large.risk_factors
    assert large.suitability == "fair"
    small = strategy_effectiveness(k, Asteroid("s", "S", 50.0, 1e10, 15.0), 20.0)
    assert small.effectiveness == 1.0
    assert small.mission_success
    assert small.suitability == "optimal"


def test_nuclear_size_tiers(cfg):
    n = _strategy(cfg, "nuclear_deflection")
    big = strategy_effectiveness(n, Asteroid("b", "B", 1200.0, 1e10, 15.0), 20.0)
    assert big.effectiveness == pytest.approx(0.75 * 1.1 * 0.9)
    tiny = strategy_effectiveness(n, Asteroid("t", "T", 30.0, 1e10, 15.0), 20.0)
    assert tiny.effectiveness == pytest.approx(0.75 * 0.6 * 0.9)
    assert "Small target, fragmentation risk" in tiny.risk_factors


def test_momentum_strategies_scale_with_target_mass(cfg):
    k = _strategy(cfg, "kinetic_impactor")
    heavy = strategy_effectiveness(k, Asteroid("h", "H", 300.0, 1e12, 15.0), 20.0)
    assert heavy.applied_delta_v_mps == pytest.approx(0.001 * 0.01 * 0.85)
    light = strategy_effectiveness(k, Asteroid("x", "X", 300.0, 1e3, 15.0), 20.0)
    assert light.applied_delta_v_mps == pytest.approx(0.001 * 100.0 * 0.85)
    g = strategy_effectiveness(_strategy(cfg, "gravity_tractor"), Asteroid("h", "H", 300.0, 1e12, 15.0), 20.0)
    assert g.applied_delta_v_mps == pytest.approx(0.0002 * g.effectiveness)


def test_trajectory_change_small_angle():
    assert trajectory_change(1.0, 1.0, 1.0) == pytest.approx(math.degrees(365.25 * 86400 / 1.496e11))
    assert trajectory_change(0.0, 1.0, 1.0) == 0.0


def test_probability_reduction_saturates():
    assert impact_probability_reduction(0.05, 0.8) == pytest.approx(0.4)
    assert impact_probability_reduction(1.0, 0.8) == pytest.approx(0.8)


def test_launch_window_order(cfg):
    ref = datetime(2030, 1, 1, tzinfo=timezone.utc)
    w = launch_window(_strategy(cfg, "kinetic_impactor"), 10.0, ref)
    assert w.earliest < w.optimal < w.latest < w.impact
    assert (w.impact - w.optimal).days == pytest.approx(5 * 365.25, abs=1)
    assert (w.impact - ref).days == pytest.approx(3652, abs=1)



def test_assessment_carries_the_category_model(cfg, mid_size):
    by_id = {a.strategy.id: a for a in compare_strategies(cfg.strategies, mid_size, 10.0)}
    assert by_id["kinetic_impactor"].physics is None
    assert isinstance(by_id["gravity_tractor"].physics, GravityTractorResult)
    assert isinstance(by_id["solar_sail"].physics, SolarPressureResult)
    nuclear = by_id["nuclear_deflection"].physics
    assert isinstance(nuclear, NuclearDeflectionResult)
    assert nuclear.delta_v.value > 0.0
    assert nuclear.feasible


def test_slow_push_runs_for_the_time_left_after_lead_time(cfg, mid_size):
    g = _strategy(cfg, "gravity_tractor")
    late = strategy_effectiveness(g, mid_size, 10.0)
    assert late.physics.delta_v.value == 0.0
    assert any("Short mission duration" in w for w in late.warnings)
    early = strategy_effectiveness(g, mid_size, 30.0)
    assert early.physics.delta_v.value > 0.0
    assert early.physics.delta_v_per_year.value * 15.0 == pytest.approx(early.physics.delta_v.value)
    assert "Mission requirements not met" in early.risk_factors


def test_model_warnings_are_merged_into_the_assessment(cfg):
    huge = Asteroid("h", "Huge", 3000.0, 1e13, 15.0)
    a = strategy_effectiveness(_strategy(cfg, "solar_sail"), huge, 30.0)
    assert any("challenging" in w for w in a.warnings)
    assert set(a.physics.warnings) <= set(a.warnings)
    assert "Mission requirements not met" in a.risk_factors
