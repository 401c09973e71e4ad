"""Deterministic physics engine for near-Earth-asteroid impact and deflection scenarios."""
from .comprehensive import ComprehensiveImpactResult, calculate_comprehensive_impact
from .config import EngineConfig, Settings, asteroid_from_diameter, default_config, load_settings
from .deflection import compare_strategies, strategy_effectiveness
from .impact_model import ImpactModel, blast_effects, crater, kinetic_energy, tnt_equivalent
from .kinetic import momentum_transfer, optimize_spacecraft
from .models import (
    Accuracy, Asteroid, Composition, DeflectionStrategy, ImpactLocation, OrbitalElements,
    OrbitalState, StrategyCategory, Vector3,
)
from .orbit import closest_approach, path, propagate, solve_kepler_equation, true_anomaly
from .quantity import Quantity

__version__ = "0.1.0"

__all__ = [
    "Accuracy", "Asteroid", "ComprehensiveImpactResult", "Composition", "DeflectionStrategy",
    "EngineConfig", "ImpactLocation", "ImpactModel", "OrbitalElements", "OrbitalState", "Quantity",
    "Settings", "StrategyCategory", "Vector3",
    "asteroid_from_diameter", "blast_effects", "calculate_comprehensive_impact", "closest_approach",
    "compare_strategies", "crater", "default_config", "kinetic_energy", "load_settings", "momentum_transfer",
    "optimize_spacecraft", "path", "propagate", "solve_kepler_equation", "strategy_effectiveness",
    "tnt_equivalent", "true_anomaly",
]
