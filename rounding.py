"""
PD Calculator: Programmable Volume Rounding
===========================================
Snaps an exact computed volume onto a value the cycler will accept.

Policy: always round UP to the next increment, never to nearest. A
programmed volume may over-deliver slightly but is never short.
"""

import logging
import math

from constants import FillMode, QuantityType, INCREMENT_RULES
from models import RoundingOutcome

logger = logging.getLogger("pdcalc-engine")

class VolumeRounder:

    @staticmethod
    def _to_whole_ml(value: float) -> int:
        # Up, like the increment step: 450.4 mL must not become 450
        return int(math.ceil(value))

    @staticmethod
    def round_to_valid_increment(value: float, quantity: QuantityType, mode: FillMode) -> RoundingOutcome:
        whole = VolumeRounder._to_whole_ml(value)
        ranges = INCREMENT_RULES.ranges_for(mode, quantity)
        overall_min, overall_max = INCREMENT_RULES.overall_span(mode, quantity)

        if whole > overall_max:
            logger.debug(f"Volume {whole} mL above table max {overall_max} mL, clamping")
            return RoundingOutcome(
                rounded_value=overall_max,
                was_rounded=True,
                out_of_range=True,
                message=f"Calculated volume {whole} mL exceeds maximum allowed ({overall_max} mL)"
            )

        if whole < overall_min:
            logger.debug(f"Volume {whole} mL below table min {overall_min} mL, clamping")
            return RoundingOutcome(
                rounded_value=overall_min,
                was_rounded=True,
                out_of_range=True,
                message=f"Calculated volume {whole} mL is below minimum allowed ({overall_min} mL)"
            )

        for rule in ranges:
            if not rule.contains(whole):
                continue

            remainder = whole % rule.increment_ml
            if remainder == 0:
                return RoundingOutcome(rounded_value=whole, was_rounded=False,
                                       increment=rule.increment_ml)

            rounded = whole + (rule.increment_ml - remainder)
            if rounded > rule.max_ml:
                # Intra-table clamp, still a programmable value
                rounded = rule.max_ml
            return RoundingOutcome(rounded_value=rounded, was_rounded=True,
                                   increment=rule.increment_ml)

        # Inside the overall span but between two ranges: next range starts above
        next_rule = next(r for r in ranges if r.min_ml > whole)
        return RoundingOutcome(rounded_value=next_rule.min_ml, was_rounded=True,
                               increment=next_rule.increment_ml)
