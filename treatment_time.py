from typing import Optional

from constants import TREATMENT_CONSTANTS
from models import ErrorKind, TimeBreakdown

TOO_SHORT_MESSAGE = "Treatment time too short for the number of cycles"

def calculate_time_breakdown(treatment_hours: float, cycles: int) -> Optional[TimeBreakdown]:
    """
    Splits the treatment into per-cycle dwell / fill / drain minutes.
    Fill + drain is a fixed 15 min per cycle; the rest is dwell.
    Returns None when there are no cycles to split across.
    """
    if not cycles or cycles <= 0:
        return None

    total_minutes = treatment_hours * TREATMENT_CONSTANTS.MINUTES_PER_HOUR
    total_overhead = TREATMENT_CONSTANTS.OVERHEAD_PER_CYCLE_MIN * cycles
    total_dwell = total_minutes - total_overhead

    if total_dwell < 0:
        # Zeroed, never negative
        return TimeBreakdown(
            treatment_hours=treatment_hours,
            cycles=cycles,
            error=TOO_SHORT_MESSAGE,
            error_kind=ErrorKind.TREATMENT_TOO_SHORT,
        )

    return TimeBreakdown(
        treatment_hours=treatment_hours,
        cycles=cycles,
        total_minutes=total_minutes,
        total_overhead_min=total_overhead,
        total_dwell_min=total_dwell,
        dwell_per_cycle_min=total_dwell / cycles,
        time_per_cycle_min=total_minutes / cycles,
        fill_time_per_cycle_min=TREATMENT_CONSTANTS.FILL_TIME_PER_CYCLE_MIN,
        drain_time_per_cycle_min=TREATMENT_CONSTANTS.DRAIN_TIME_PER_CYCLE_MIN,
    )
