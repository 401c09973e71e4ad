import pytest

from neoshield.comprehensive import calculate_comprehensive_impact
from neoshield.timeline import CHECKPOINTS

KEYS = ["t0", "t1_hour", "t24_hours", "t1_week", "t1_month", "t1_year", "t10_years"]


def test_seven_checkpoints_in_order(big_rocky, city):
    tl = calculate_comprehensive_impact(big_rocky, city).timeline
    assert len(tl) == 7
    assert [s.key for s in tl] == KEYS
    assert [c[0] for c in CHECKPOINTS] == KEYS


def test_snapshots_scale_the_final_totals(big_rocky, city):
    r = calculate_comprehensive_impact(big_rocky, city)
    tl, c = r.timeline, r.casualties
    assert tl["t0"].casualties == c.immediate.deaths
    assert tl["t0"].displaced == 0
    assert tl["t1_year"].casualties == c.total.estimated_deaths
    assert tl["t1_week"].displaced == c.long_term.displaced
    assert tl["t10_years"].displaced == int(c.long_term.displaced * 0.5)
    assert tl["t0"].temperature == r.climate.temperature.immediate_change
    assert tl["t10_years"].temperature == r.climate.temperature.long_term_change
    assert tl["t1_year"].food_production == pytest.approx(100.0 - r.climate.habitability.agriculture_impact)


def test_deaths_never_decrease(big_rocky, city):
    deaths = [s.casualties for s in calculate_comprehensive_impact(big_rocky, city).timeline]
    assert deaths == sorted(deaths)


def test_unknown_checkpoint(big_rocky, city):
    with pytest.raises(KeyError):
        calculate_comprehensive_impact(big_rocky, city).timeline["t100_years"]


def test_tsunami_note_on_first_day(big_rocky, city, open_ocean):
    ocean = calculate_comprehensive_impact(big_rocky, open_ocean).timeline
    assert "Tsunami" in ocean["t24_hours"].description
    land = calculate_comprehensive_impact(big_rocky, city).timeline
    assert all("Tsunami" not in s.description for s in land)
