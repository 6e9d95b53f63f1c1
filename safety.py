# safety.py
from typing import Optional

from constants import (
    FillMode, QuantityType, INCREMENT_RULES, TIDAL_CONSTANTS, CYCLE_LIMITS
)
from models import ErrorKind, ValidationOutcome

class IncrementValidator:
    """
    Checks volumes against the cycler's programming increments.
    Every check returns a ValidationOutcome; nothing here raises for bad input.
    Request-level checks return the FIRST failure only, in a fixed order,
    so the same inputs always surface the same message.
    """

    @staticmethod
    def validate_value(value, quantity: QuantityType, mode: FillMode) -> ValidationOutcome:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return ValidationOutcome.fail(ErrorKind.INVALID_NUMBER, "Please enter a valid number")
        if isinstance(value, float) and not value.is_integer():
            return ValidationOutcome.fail(ErrorKind.INVALID_NUMBER, "Please enter a whole number")

        ranges = INCREMENT_RULES.ranges_for(mode, quantity)

        # First containing range wins (100 in low-fill is a 1 mL value, not 10)
        for rule in ranges:
            if rule.contains(value):
                if value % rule.increment_ml == 0:
                    return ValidationOutcome.ok()
                return ValidationOutcome.fail(
                    ErrorKind.INCREMENT_MISMATCH,
                    f"Must be in increments of {rule.increment_ml} mL "
                    f"for range {rule.min_ml}-{rule.max_ml} mL"
                )

        # Report the table extremes, not the nearest range edge
        min_range, max_range = INCREMENT_RULES.overall_span(mode, quantity)
        return ValidationOutcome.fail(
            ErrorKind.RANGE_VIOLATION,
            f"Value must be between {min_range} and {max_range} mL"
        )

    @staticmethod
    def _prefixed(label: str, outcome: ValidationOutcome) -> ValidationOutcome:
        return ValidationOutcome.fail(outcome.error_kind, f"{label}: {outcome.message}")

    @staticmethod
    def validate_fill_inputs(fill, last, mode: FillMode) -> Optional[ValidationOutcome]:
        """Fill / Last Fill checks shared by every calculation path."""
        # 1. Zero fill gets its own message before the generic range check
        if fill == 0:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION, "Fill volume must be greater than 0")

        fill_check = IncrementValidator.validate_value(fill, QuantityType.FILL_VOLUME, mode)
        if not fill_check.valid:
            return IncrementValidator._prefixed("Fill Volume", fill_check)

        # Last Fill is programmed on the same scale as Fill Volume
        last_check = IncrementValidator.validate_value(last, QuantityType.FILL_VOLUME, mode)
        if not last_check.valid:
            return IncrementValidator._prefixed("Last Fill", last_check)

        if last > fill:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION,
                "Last fill must be less than or equal to fill volume"
            )

        if fill <= 0:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION, "Fill volume must be greater than 0")

        return None

    @staticmethod
    def validate_inputs(total, fill, last, mode: FillMode) -> Optional[ValidationOutcome]:
        """
        Order: zero fill -> total -> fill -> last -> last <= fill -> fill > 0.
        Returns the first failure, or None when everything passes.
        """
        if fill == 0:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION, "Fill volume must be greater than 0")

        total_check = IncrementValidator.validate_value(total, QuantityType.TOTAL_VOLUME, mode)
        if not total_check.valid:
            return IncrementValidator._prefixed("Total Volume", total_check)

        return IncrementValidator.validate_fill_inputs(fill, last, mode)

    @staticmethod
    def validate_last_fill_below_total(total, last) -> Optional[ValidationOutcome]:
        if last >= total:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION,
                "Last fill must be less than total volume"
            )
        return None

    @staticmethod
    def validate_cycle_count(cycles) -> Optional[ValidationOutcome]:
        if isinstance(cycles, bool) or not isinstance(cycles, (int, float)):
            return ValidationOutcome.fail(
                ErrorKind.INVALID_NUMBER, "Cycles: Please enter a valid number")
        if isinstance(cycles, float) and not cycles.is_integer():
            return ValidationOutcome.fail(
                ErrorKind.INVALID_NUMBER, "Cycles: Please enter a whole number")
        if not (CYCLE_LIMITS.MIN_CYCLES <= cycles <= CYCLE_LIMITS.MAX_CYCLES):
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION,
                f"Cycles must be between {CYCLE_LIMITS.MIN_CYCLES} and {CYCLE_LIMITS.MAX_CYCLES}"
            )
        return None

    @staticmethod
    def validate_tidal_parameters(tidal_percent, full_drain_interval) -> Optional[ValidationOutcome]:
        allowed = range(TIDAL_CONSTANTS.MIN_PERCENT,
                        TIDAL_CONSTANTS.MAX_PERCENT + 1,
                        TIDAL_CONSTANTS.PERCENT_STEP)
        if isinstance(tidal_percent, bool) or tidal_percent not in allowed:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION,
                f"Tidal percentage must be between {TIDAL_CONSTANTS.MIN_PERCENT} and "
                f"{TIDAL_CONSTANTS.MAX_PERCENT}% in steps of {TIDAL_CONSTANTS.PERCENT_STEP}"
            )

        low, high = TIDAL_CONSTANTS.MIN_FULL_DRAIN_INTERVAL, TIDAL_CONSTANTS.MAX_FULL_DRAIN_INTERVAL
        if (isinstance(full_drain_interval, bool)
                or not isinstance(full_drain_interval, (int, float))
                or not float(full_drain_interval).is_integer()
                or not (low <= full_drain_interval <= high)):
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION,
                f"Full drain interval must be a whole number between {low} and {high}"
            )
        return None

    @staticmethod
    def validate_treatment_hours(treatment_hours) -> Optional[ValidationOutcome]:
        """Zero or negative hours is a typing error, not a short treatment."""
        if treatment_hours <= 0:
            return ValidationOutcome.fail(
                ErrorKind.CLINICAL_CONSTRAINT_VIOLATION,
                "Treatment time must be greater than 0 hours"
            )
        return None
