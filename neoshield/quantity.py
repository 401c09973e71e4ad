from __future__ import annotations
from dataclasses import dataclass
from math import sqrt, isfinite, inf, nan, copysign
from typing import Callable, Mapping


def safe_div(a: float, b: float) -> float:
    """a/b that hands back inf/nan instead of raising on a zero denominator."""
    if b == 0.0:
        if a == 0.0 or a != a:
            return nan
        return copysign(inf, a)
    return a / b


@dataclass(frozen=True)
class Quantity:
    """
    A physical value with its 1-sigma uncertainty, unit and provenance note.

    Arithmetic follows first-order error propagation for independent inputs:
    sums combine absolute uncertainties in quadrature, products and quotients
    combine relative uncertainties in quadrature.
    """
    value: float
    uncertainty: float = 0.0
    unit: str = "1"
    source: str = ""

    # ---------- Introspection ----------
    @property
    def relative_uncertainty(self) -> float:
        return abs(self.uncertainty / self.value) if self.value != 0 else 0.0

    @property
    def relative_uncertainty_percent(self) -> float:
        return self.relative_uncertainty * 100.0

    def bounds(self) -> tuple[float, float]:
        return self.value - self.uncertainty, self.value + self.uncertainty

    def is_finite(self) -> bool:
        return isfinite(self.value) and isfinite(self.uncertainty)

    def __float__(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        if self.uncertainty == 0:
            return f"{self.value:g} {self.unit} (exact)"
        return f"{self.value:g} ± {self.uncertainty:g} {self.unit}"

    # ---------- Derived copies ----------
    def with_unit(self, unit: str, factor: float = 1.0) -> Quantity:
        return Quantity(self.value * factor, self.uncertainty * abs(factor), unit, self.source)

    def with_source(self, source: str) -> Quantity:
        return Quantity(self.value, self.uncertainty, self.unit, source)

    def scale(self, k: float) -> Quantity:
        return Quantity(self.value * k, self.uncertainty * abs(k), self.unit, self.source)

    def power(self, p: float, unit: str | None = None) -> Quantity:
        if self.value < 0.0 and float(p) != int(p):
            return Quantity(nan, nan, unit or self.unit, self.source)
        if self.value == 0.0 and p < 0:
            return Quantity(inf, inf, unit or self.unit, self.source)
        v = self.value ** p
        sigma = abs(p * v * safe_div(self.uncertainty, self.value)) if self.value != 0 else 0.0
        return Quantity(v, sigma, unit or self.unit, self.source)

    # ---------- Arithmetic ----------
    def _check_unit(self, other: Quantity, op: str) -> None:
        if self.unit != other.unit:
            raise ValueError(f"Cannot {op} '{self.unit}' and '{other.unit}'.")

    def __add__(self, other) -> Quantity:
        if isinstance(other, Quantity):
            self._check_unit(other, "add")
            return Quantity(self.value + other.value,
                            sqrt(self.uncertainty**2 + other.uncertainty**2),
                            self.unit, self.source or other.source)
        return Quantity(self.value + float(other), self.uncertainty, self.unit, self.source)

    def __radd__(self, other) -> Quantity:
        # sum() starts from int 0
        return self.__add__(other)

    def __sub__(self, other) -> Quantity:
        if isinstance(other, Quantity):
            self._check_unit(other, "subtract")
            return Quantity(self.value - other.value,
                            sqrt(self.uncertainty**2 + other.uncertainty**2),
                            self.unit, self.source or other.source)
        return Quantity(self.value - float(other), self.uncertainty, self.unit, self.source)

    def __neg__(self) -> Quantity:
        return Quantity(-self.value, self.uncertainty, self.unit, self.source)

    def __mul__(self, other) -> Quantity:
        if isinstance(other, Quantity):
            v = self.value * other.value
            sigma = sqrt((other.value * self.uncertainty) ** 2 + (self.value * other.uncertainty) ** 2)
            return Quantity(v, sigma, _join_units(self.unit, other.unit, "·"), self.source or other.source)
        return self.scale(float(other))

    def __rmul__(self, other) -> Quantity:
        return self.__mul__(other)

    def __truediv__(self, other) -> Quantity:
        if isinstance(other, Quantity):
            v = safe_div(self.value, other.value)
            sigma = sqrt(safe_div(self.uncertainty, other.value) ** 2
                         + safe_div(self.value * other.uncertainty, other.value ** 2) ** 2)
            unit = "1" if self.unit == other.unit else _join_units(self.unit, other.unit, "/")
            return Quantity(v, sigma, unit, self.source or other.source)
        k = float(other)
        return Quantity(safe_div(self.value, k), abs(safe_div(self.uncertainty, k)), self.unit, self.source)


def _join_units(a: str, b: str, sep: str) -> str:
    if b == "1":
        return a
    if a == "1":
        return b if sep == "·" else f"1/{b}"
    return f"{a}{sep}{b}"


def exact(value: float, unit: str = "1", source: str = "") -> Quantity:
    return Quantity(float(value), 0.0, unit, source)


def relative(value: float, fraction: float, unit: str = "1", source: str = "") -> Quantity:
    """Quantity whose uncertainty is a fixed fraction of its value."""
    return Quantity(float(value), abs(float(value) * fraction), unit, source)


def propagate(fn: Callable[..., float], inputs: Mapping[str, Quantity],
              unit: str, source: str, step: float = 1e-8) -> Quantity:
    """
    Nonlinear propagation: evaluate fn at the nominal inputs, take forward-difference
    partial derivatives and combine the contributions in quadrature.
    """
    nominal = {k: q.value for k, q in inputs.items()}
    value = fn(**nominal)
    var = 0.0
    for name, q in inputs.items():
        if q.uncertainty == 0.0:
            continue
        h = max(step, abs(q.value) * step)
        bumped = dict(nominal)
        bumped[name] += h
        dfdx = (fn(**bumped) - value) / h
        var += (dfdx * q.uncertainty) ** 2
    return Quantity(value, sqrt(var), unit, source)
