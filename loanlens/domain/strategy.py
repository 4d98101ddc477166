"""
Strategy selection ("Strategist")
Chooses pillar weights from the applicant's urgency zone.
"""

from typing import Optional, Protocol

from loanlens.schemas.context import UrgencyZone
from loanlens.schemas.results import StrategyWeights


class StrategySelector(Protocol):
    """Anything that maps an urgency zone to pillar weights."""

    def select(self, zone: UrgencyZone) -> StrategyWeights:
        ...


# Under urgency the weight moves to the Past pillar (processing speed,
# approval track record); with time to spare it moves to long-horizon fit.
STRATEGY_TABLE: dict[UrgencyZone, StrategyWeights] = {
    UrgencyZone.RED: StrategyWeights(
        name="SPEED_PRIORITY",
        zone=UrgencyZone.RED,
        future=0.15,
        financial=0.30,
        past=0.55,
    ),
    UrgencyZone.YELLOW: StrategyWeights(
        name="BALANCED",
        zone=UrgencyZone.YELLOW,
        future=0.30,
        financial=0.35,
        past=0.35,
    ),
    UrgencyZone.GREEN: StrategyWeights(
        name="COST_OPTIMIZED",
        zone=UrgencyZone.GREEN,
        future=0.45,
        financial=0.35,
        past=0.20,
    ),
}


class Strategist:
    """Fixed lookup table keyed by urgency zone. Deterministic."""

    def __init__(self, table: Optional[dict[UrgencyZone, StrategyWeights]] = None):
        self.table = dict(table or STRATEGY_TABLE)
        missing = set(UrgencyZone) - set(self.table)
        if missing:
            raise ValueError(f"strategy table has no entry for {sorted(z.value for z in missing)}")

    def select(self, zone: UrgencyZone) -> StrategyWeights:
        return self.table[UrgencyZone(zone)]
