from __future__ import annotations
from dataclasses import dataclass, replace

from .config import EngineConfig, default_config
from .consequences import CasualtyReport, ClimateReport, DisasterReport, InfrastructureReport

# (key, label, narrative); order is fixed
CHECKPOINTS = (
    ("t0", "Impact (T+0)",
     "Impact excavates the crater and raises a fireball; everything at ground zero is vaporized."),
    ("t1_hour", "T+1 Hour",
     "Shockwave expands outward, buildings collapse and fires ignite across the region."),
    ("t24_hours", "T+24 Hours",
     "Dust spreads through the upper atmosphere; rescue work is hampered by infrastructure loss."),
    ("t1_week", "T+1 Week",
     "Sunlight is reduced and temperatures fall; supply chains break down and evacuations continue."),
    ("t1_month", "T+1 Month",
     "Atmospheric dust peaks, crops begin to fail and the refugee crisis deepens."),
    ("t1_year", "T+1 Year",
     "Dust settles over an altered climate; famine and long-term recovery begin."),
    ("t10_years", "T+10 Years",
     "Partial recovery under a stabilised but permanently altered climate."),
)


@dataclass(frozen=True)
class TimelineSnapshot:
    key: str
    time: str
    casualties: int
    displaced: int
    temperature: float             # deg C change from baseline
    habitable_area: float          # % remaining
    food_production: float         # % of normal
    description: str


@dataclass(frozen=True)
class Timeline:
    snapshots: tuple[TimelineSnapshot, ...]

    def __getitem__(self, key: str) -> TimelineSnapshot:
        for s in self.snapshots:
            if s.key == key:
                return s
        raise KeyError(key)

    def __iter__(self):
        return iter(self.snapshots)

    def __len__(self) -> int:
        return len(self.snapshots)


def timeline(casualties: CasualtyReport, infrastructure: InfrastructureReport,
             climate: ClimateReport, disasters: DisasterReport,
             config: EngineConfig | None = None) -> Timeline:
    """
    Narrative interpolation of the final totals over seven checkpoints; each
    snapshot scales the same totals by the configured multiplier table.
    """
    m = (config or default_config()).timeline
    temps = {
        "immediate": climate.temperature.immediate_change,
        "short": climate.temperature.short_term_change,
        "long": climate.temperature.long_term_change,
    }
    early_food = infrastructure.survival.food_production_loss
    late_food = climate.habitability.agriculture_impact
    lost = climate.habitability.percentage_lost
    base_deaths = casualties.immediate.deaths

    snaps = []
    for i, (key, label, text) in enumerate(CHECKPOINTS):
        deaths = (base_deaths
                  + int(casualties.short_term.deaths * m.short_term_deaths[i])
                  + int(casualties.long_term.deaths * m.long_term_deaths[i]))
        series, k = m.temperature[i]
        food_loss = (late_food if i >= 5 else early_food) * m.food_loss[i]
        snaps.append(TimelineSnapshot(
            key=key,
            time=label,
            casualties=deaths,
            displaced=int(casualties.long_term.displaced * m.displaced[i]),
            temperature=temps[series] * k,
            habitable_area=100.0 - lost * m.habitable_loss[i],
            food_production=100.0 - food_loss,
            description=text,
        ))
    if disasters.tsunami.triggered:
        # coastal flooding arrives within the first day
        note = f" Tsunami waves up to {disasters.tsunami.wave_height_m:.0f} m strike coastlines."
        snaps[2] = replace(snaps[2], description=snaps[2].description + note)
    return Timeline(tuple(snaps))

