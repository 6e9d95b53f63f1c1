from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Tuple

VERSION = "1.0.0"

class FillMode(Enum):
    LOW = "low"             # Paediatric / low-fill cycler set
    STANDARD = "standard"   # Adult cycler set

class QuantityType(Enum):
    FILL_VOLUME = "fillVolume"    # Per-exchange fill (also used for Last Fill)
    TOTAL_VOLUME = "totalVolume"  # Whole-therapy dialysate volume

@dataclass(frozen=True)
class IncrementRange:
    min_ml: int
    max_ml: int
    increment_ml: int   # Smallest step the cycler accepts inside [min, max]

    def contains(self, value: float) -> bool:
        return self.min_ml <= value <= self.max_ml

class TREATMENT_CONSTANTS:
    MINUTES_PER_HOUR = 60.0
    FILL_TIME_PER_CYCLE_MIN = 7.5
    DRAIN_TIME_PER_CYCLE_MIN = 7.5
    OVERHEAD_PER_CYCLE_MIN = FILL_TIME_PER_CYCLE_MIN + DRAIN_TIME_PER_CYCLE_MIN  # 15 min

class TIDAL_CONSTANTS:
    # Percentage of the fill drained on a tidal (partial) drain
    MIN_PERCENT = 40
    MAX_PERCENT = 95
    PERCENT_STEP = 5

    # Every Nth cycle is a full drain
    MIN_FULL_DRAIN_INTERVAL = 1
    MAX_FULL_DRAIN_INTERVAL = 10

    # Hard stop for the max-cycles search
    SEARCH_CYCLE_CAP = 1000

class CYCLE_LIMITS:
    MIN_CYCLES = 1
    MAX_CYCLES = 100

class INCREMENT_RULES:
    """
    Device programming increments (mL).
    Ranges touch at their boundaries; a boundary value belongs to the lower range.
    """
    SPECS: Dict[FillMode, Dict[QuantityType, Tuple[IncrementRange, ...]]] = {
        FillMode.LOW: {
            QuantityType.FILL_VOLUME: (
                IncrementRange(60, 100, 1),
                IncrementRange(100, 500, 10),
                IncrementRange(500, 1000, 50),
            ),
            QuantityType.TOTAL_VOLUME: (
                IncrementRange(200, 2000, 50),
                IncrementRange(2000, 20000, 100),
                IncrementRange(20000, 80000, 500),
            ),
        },
        FillMode.STANDARD: {
            QuantityType.FILL_VOLUME: (
                IncrementRange(100, 500, 10),
                IncrementRange(500, 1000, 50),
                IncrementRange(1000, 3000, 100),
            ),
            QuantityType.TOTAL_VOLUME: (
                IncrementRange(200, 2000, 50),
                IncrementRange(2000, 5000, 100),
                IncrementRange(5000, 80000, 500),
            ),
        },
    }

    @staticmethod
    def ranges_for(mode: FillMode, quantity: QuantityType) -> Tuple[IncrementRange, ...]:
        return INCREMENT_RULES.SPECS[mode][quantity]

    @staticmethod
    def overall_span(mode: FillMode, quantity: QuantityType) -> Tuple[int, int]:
        """(first range min, last range max). Intermediate gaps are ignored."""
        ranges = INCREMENT_RULES.ranges_for(mode, quantity)
        return ranges[0].min_ml, ranges[-1].max_ml

    @staticmethod
    def describe_rules(mode: FillMode) -> Dict[str, List[str]]:
        """Help text shown beside the inputs, e.g. '60-100 mL: 1 mL increments'."""
        return {
            quantity.value: [
                f"{r.min_ml}-{r.max_ml} mL: {r.increment_ml} mL increments"
                for r in INCREMENT_RULES.ranges_for(mode, quantity)
            ]
            for quantity in QuantityType
        }
