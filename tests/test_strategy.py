"""
LoanLens tests - Strategist
"""

import pytest
import sys
sys.path.insert(0, ".")
from pydantic import ValidationError

from loanlens.domain.strategy import STRATEGY_TABLE, Strategist
from loanlens.schemas.context import UrgencyZone
from loanlens.schemas.results import StrategyWeights


class TestStrategist:
    """Strategy selection (layer 3)"""

    def setup_method(self):
        self.strategist = Strategist()

    def test_zone_to_strategy(self):
        assert self.strategist.select(UrgencyZone.RED).name == "SPEED_PRIORITY"
        assert self.strategist.select(UrgencyZone.YELLOW).name == "BALANCED"
        assert self.strategist.select(UrgencyZone.GREEN).name == "COST_OPTIMIZED"

    def test_accepts_zone_value(self):
        assert self.strategist.select("RED").zone == UrgencyZone.RED

    def test_weights_sum_to_one(self):
        for weights in STRATEGY_TABLE.values():
            assert weights.future + weights.financial + weights.past == pytest.approx(1.0)

    def test_urgency_shifts_weight_to_past(self):
        red = self.strategist.select(UrgencyZone.RED)
        yellow = self.strategist.select(UrgencyZone.YELLOW)
        green = self.strategist.select(UrgencyZone.GREEN)

        assert red.past > yellow.past > green.past
        assert red.future < yellow.future < green.future

    def test_invalid_weights_rejected(self):
        with pytest.raises(ValidationError):
            StrategyWeights(
                name="BROKEN", zone=UrgencyZone.RED, future=0.5, financial=0.5, past=0.5
            )

    def test_custom_table(self):
        flat = {
            zone: StrategyWeights(
                name="FLAT", zone=zone, future=0.4, financial=0.3, past=0.3
            )
            for zone in UrgencyZone
        }
        assert Strategist(flat).select(UrgencyZone.RED).name == "FLAT"

    def test_incomplete_table_rejected(self):
        table = {UrgencyZone.RED: STRATEGY_TABLE[UrgencyZone.RED]}
        with pytest.raises(ValueError):
            Strategist(table)
