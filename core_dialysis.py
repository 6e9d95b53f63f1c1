"""
PD Calculator: Core Cycle Engine
================================
The mathematical core relating total dialysate volume, fill volume,
last fill and cycle count, for standard and tidal PD.
All methods are pure: same inputs, same outputs, no retained state.
"""

import logging
import math
from typing import Dict

from constants import TIDAL_CONSTANTS

logger = logging.getLogger("pdcalc-engine")

class PDCycleEngine:
    """
    Standard PD:  Total = Cycles * Fill + Last Fill
    Tidal PD:     most drains only remove `tidal_percent` of the fill;
                  every `full_drain_interval`-th cycle drains completely.
    """

    # --- STANDARD PD ---

    @staticmethod
    def solve_cycles(total: float, last: float, fill: float) -> int:
        """
        Whole cycles that fit in (Total - Last Fill).
        Floor, not round: a partial cycle cannot be programmed.
        """
        if fill <= 0:
            return 0
        return int(math.floor((total - last) / fill))

    @staticmethod
    def solve_total_volume(cycles: int, fill: float, last: float) -> float:
        """Exact volume for `cycles`; still needs rounding before programming."""
        return cycles * fill + last

    # --- TIDAL PD ---

    @staticmethod
    def tidal_forward(cycles: int, fill: float, tidal_percent: int,
                      full_drain_interval: int, last: float = 0) -> Dict[str, float]:
        """
        Closed-form tidal volume for a given cycle count.
        Pass last=0 to get the working volume used by the search.
        """
        full_drain_count = math.ceil(cycles / full_drain_interval)
        tidal_drain_cycles = cycles - full_drain_count

        # Integer percent keeps 1400 * 85% * 6 exactly 7140
        tidal_volume = fill * tidal_percent * tidal_drain_cycles / 100
        full_drain_volume = full_drain_count * fill

        return {
            "full_drain_count": full_drain_count,
            "tidal_drain_cycles": tidal_drain_cycles,
            "tidal_volume": tidal_volume,
            "full_drain_volume": full_drain_volume,
            "total": tidal_volume + full_drain_volume + last,
        }

    @staticmethod
    def tidal_search(total: float, last: float, fill: float, tidal_percent: int,
                     full_drain_interval: int) -> Dict[str, float]:
        """
        Largest cycle count whose tidal volume fits in (Total - Last Fill).
        Volume never decreases as cycles increase, so the scan stops at the
        first count that overshoots. Bounded by SEARCH_CYCLE_CAP.
        """
        working_volume = total - last
        best_cycles = 0

        for candidate in range(1, TIDAL_CONSTANTS.SEARCH_CYCLE_CAP + 1):
            volume = PDCycleEngine.tidal_forward(
                candidate, fill, tidal_percent, full_drain_interval)["total"]
            if volume > working_volume:
                break
            best_cycles = candidate
        else:
            logger.debug(f"Tidal search hit the {TIDAL_CONSTANTS.SEARCH_CYCLE_CAP} cycle cap")

        logger.debug(f"Tidal search: working volume {working_volume} mL -> {best_cycles} cycles")

        breakdown = PDCycleEngine.tidal_forward(
            best_cycles, fill, tidal_percent, full_drain_interval, last)
        breakdown["cycles"] = best_cycles
        breakdown["requested_total"] = total
        breakdown["difference"] = total - breakdown["total"]
        return breakdown
