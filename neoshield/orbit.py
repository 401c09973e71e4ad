"""
Two-body heliocentric propagation from classical orbital elements.

No perturbations, no precession. Invalid elements (e >= 1, a <= 0) are not
rejected: they flow through and come back as NaN/Inf in the returned state.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from math import atan2, cos, degrees, inf, isfinite, nan, pi, radians, sin, sqrt

from .models import OrbitalElements, OrbitalState, Vector3
from .quantity import safe_div

log = logging.getLogger(__name__)

# -----------------------------
# Constants
# -----------------------------
MU_SUN = 1.32712440018e20        # m^3/s^2
AU_M = 1.496e11                  # m
SECONDS_PER_DAY = 86400.0
DEFAULT_START_JD = 2460000.0     # 2023-02-24
EARTH_REFERENCE_POSITION = Vector3(1.0, 0.0, 0.0)  # AU, fixed


@dataclass(frozen=True)
class ClosestApproach:
    distance_au: float
    epoch_jd: float
    speed_au_per_day: float


def _sqrt(x: float) -> float:
    return sqrt(x) if x >= 0.0 else nan


# ---------- Anomalies ----------
def solve_kepler_equation(mean_anomaly: float, eccentricity: float,
                          tolerance: float = 1e-6, max_iterations: int = 100) -> float:
    """
    Eccentric anomaly E (rad) from M = E - e sin E by Newton-Raphson, starting at E0 = M.

    Returns the last estimate when the iteration cap is hit; convergence is not
    guaranteed for e close to 1.
    """
    M, e = mean_anomaly, eccentricity
    if not (isfinite(M) and isfinite(e)):
        return nan
    E = M
    for _ in range(max_iterations):
        dE = safe_div(E - e * sin(E) - M, 1.0 - e * cos(E))
        if not isfinite(dE):
            return nan
        E -= dE
        if abs(dE) < tolerance:
            break
    return E


def true_anomaly(eccentric_anomaly: float, eccentricity: float) -> float:
    """True anomaly (rad) from the eccentric anomaly."""
    E, e = eccentric_anomaly, eccentricity
    if not isfinite(E):
        return nan
    denom = 1.0 - e * cos(E)
    sin_nu = safe_div(_sqrt(1.0 - e * e) * sin(E), denom)
    cos_nu = safe_div(cos(E) - e, denom)
    if not (isfinite(sin_nu) and isfinite(cos_nu)):
        return nan
    return atan2(sin_nu, cos_nu)


# ---------- State ----------
def _rotate(x: float, y: float, el: OrbitalElements) -> tuple[float, float, float]:
    """Perifocal (x, y) -> ecliptic frame via R3(-Ω) R1(-i) R3(-ω)."""
    O, w, i = radians(el.ascending_node_deg), radians(el.perihelion_arg_deg), radians(el.inclination_deg)
    cO, sO, cw, sw, ci, si = cos(O), sin(O), cos(w), sin(w), cos(i), sin(i)
    return (
        (cO * cw - sO * sw * ci) * x + (-cO * sw - sO * cw * ci) * y,
        (sO * cw + cO * sw * ci) * x + (-sO * sw + cO * cw * ci) * y,
        (sw * si) * x + (cw * si) * y,
    )


def propagate(elements: OrbitalElements, epoch_jd: float,
              reference: Vector3 = EARTH_REFERENCE_POSITION) -> OrbitalState:
    el = elements
    a = el.semi_major_axis_au * AU_M
    e = el.eccentricity

    n = _sqrt(safe_div(MU_SUN, a ** 3))                        # rad/s
    M = radians(el.mean_anomaly_deg) + n * (epoch_jd - el.epoch_jd) * SECONDS_PER_DAY
    if isfinite(M):
        M %= 2.0 * pi
    E = solve_kepler_equation(M, e)
    nu = true_anomaly(E, e)

    if isfinite(E):
        px, py = a * (cos(E) - e), a * _sqrt(1.0 - e * e) * sin(E)
    else:
        px = py = nan
    h = _sqrt(MU_SUN * a * (1.0 - e * e))
    k = safe_div(MU_SUN, h)
    if isfinite(nu):
        vx, vy = -k * sin(nu), k * (e + cos(nu))
    else:
        vx = vy = nan

    rx, ry, rz = _rotate(px, py, el)
    ux, uy, uz = _rotate(vx, vy, el)
    pos = Vector3(rx / AU_M, ry / AU_M, rz / AU_M)
    vel_scale = SECONDS_PER_DAY / AU_M
    vel = Vector3(ux * vel_scale, uy * vel_scale, uz * vel_scale)

    return OrbitalState(
        position_au=pos,
        velocity_au_per_day=vel,
        distance_au=(pos - reference).norm(),
        heliocentric_distance_au=pos.norm(),
        true_anomaly_deg=degrees(nu) if isfinite(nu) else nan,
    )


# ---------- Searches ----------
def closest_approach(elements: OrbitalElements, search_days: int = 1000,
                     start_jd: float = DEFAULT_START_JD) -> ClosestApproach:
    """Daily scan for the minimum distance to the fixed reference position."""
    best = ClosestApproach(inf, start_jd, nan)
    for day in range(int(search_days)):
        jd = start_jd + day
        st = propagate(elements, jd)
        if st.distance_au < best.distance_au:
            best = ClosestApproach(st.distance_au, jd, st.velocity_au_per_day.norm())
    log.debug("[orbit.closest] days=%d min_au=%.6g jd=%.1f", search_days, best.distance_au, best.epoch_jd)
    return best


def path(elements: OrbitalElements, days: float = 365, steps: int = 100,
         start_jd: float = DEFAULT_START_JD) -> list[Vector3]:
    steps = max(int(steps), 0)
    if steps == 0:
        return [propagate(elements, start_jd).position_au]
    return [propagate(elements, start_jd + days * i / steps).position_au for i in range(steps + 1)]


# ---------- Closed-form helpers ----------
def orbital_period_days(elements: OrbitalElements) -> float:
    a = elements.semi_major_axis_au * AU_M
    return 2.0 * pi * _sqrt(safe_div(a ** 3, MU_SUN)) / SECONDS_PER_DAY


def perihelion_distance(elements: OrbitalElements) -> float:
    """AU."""
    return elements.semi_major_axis_au * (1.0 - elements.eccentricity)


def aphelion_distance(elements: OrbitalElements) -> float:
    """AU."""
    return elements.semi_major_axis_au * (1.0 + elements.eccentricity)
