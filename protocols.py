# protocols.py
import logging
from typing import Optional

from constants import QuantityType
from core_dialysis import PDCycleEngine
from models import (
    CalculationMode, CalculationOutcome, CalculationRequest, CalculationResult,
    CyclesResult, ErrorKind, TidalCyclesResult, TidalTotalVolumeResult,
    TotalVolumeResult, ValidationOutcome
)
from normalization import MISSING_MESSAGE
from rounding import VolumeRounder
from safety import IncrementValidator
from treatment_time import calculate_time_breakdown

logger = logging.getLogger("pdcalc-engine")

REQUIRED_FIELDS = {
    CalculationMode.CYCLES: ('total_volume', 'fill_volume', 'last_fill'),
    CalculationMode.TOTAL_VOLUME: ('cycles', 'fill_volume', 'last_fill'),
    CalculationMode.TIDAL_TOTAL_VOLUME: ('cycles', 'fill_volume', 'last_fill',
                                         'tidal_percent', 'full_drain_interval'),
    CalculationMode.TIDAL_CYCLES: ('total_volume', 'fill_volume', 'last_fill',
                                   'tidal_percent', 'full_drain_interval'),
}

def _fmt(value: float) -> str:
    """7140.0 -> '7140', 1333.5 -> '1333.5'"""
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"

class RequestValidator:
    """Runs the path-specific checks in order and returns the first failure."""

    @staticmethod
    def first_failure(request: CalculationRequest) -> Optional[ValidationOutcome]:
        missing = [name for name in REQUIRED_FIELDS[request.mode] if getattr(request, name) is None]
        if missing:
            return ValidationOutcome.fail(ErrorKind.INPUT_MISSING, MISSING_MESSAGE)

        mode = request.mode
        fill, last = request.fill_volume, request.last_fill

        if mode in (CalculationMode.CYCLES, CalculationMode.TIDAL_CYCLES):
            checks = [
                lambda: IncrementValidator.validate_inputs(request.total_volume, fill, last, request.fill_mode),
                lambda: IncrementValidator.validate_last_fill_below_total(request.total_volume, last),
            ]
        else:
            checks = [
                lambda: IncrementValidator.validate_fill_inputs(fill, last, request.fill_mode),
                lambda: IncrementValidator.validate_cycle_count(request.cycles),
            ]

        if mode in (CalculationMode.TIDAL_CYCLES, CalculationMode.TIDAL_TOTAL_VOLUME):
            checks.append(lambda: IncrementValidator.validate_tidal_parameters(
                request.tidal_percent, request.full_drain_interval))

        if request.treatment_hours is not None:
            checks.append(lambda: IncrementValidator.validate_treatment_hours(request.treatment_hours))

        # Lazy so later checks never see inputs an earlier one rejected
        for check in checks:
            failure = check()
            if failure is not None:
                return failure
        return None

class CalculationProtocol:
    """
    SAFE FACTORY: the main entry point for the UI/API.
    Validate -> solve -> round (total-volume paths) -> annotate with timing.
    Expected bad input comes back as success=False, never as an exception.
    """

    @staticmethod
    def run(request: CalculationRequest) -> CalculationOutcome:
        failure = RequestValidator.first_failure(request)
        if failure is not None:
            logger.debug(f"{request.mode.value} rejected: {failure.message}")
            return CalculationOutcome(
                success=False,
                mode=request.mode,
                fill_mode=request.fill_mode,
                error_kind=failure.error_kind,
                errors=[failure.message],
            )

        solvers = {
            CalculationMode.CYCLES: CalculationProtocol._cycles,
            CalculationMode.TOTAL_VOLUME: CalculationProtocol._total_volume,
            CalculationMode.TIDAL_TOTAL_VOLUME: CalculationProtocol._tidal_total_volume,
            CalculationMode.TIDAL_CYCLES: CalculationProtocol._tidal_cycles,
        }
        result: CalculationResult = solvers[request.mode](request)

        time_breakdown = None
        if request.treatment_hours is not None:
            time_breakdown = calculate_time_breakdown(request.treatment_hours, result.cycles)

        return CalculationOutcome(
            success=True,
            mode=request.mode,
            fill_mode=request.fill_mode,
            result=result,
            time_breakdown=time_breakdown,
        )

    # --- PATHS ---

    @staticmethod
    def _cycles(request: CalculationRequest) -> CyclesResult:
        total, fill, last = int(request.total_volume), int(request.fill_volume), int(request.last_fill)
        cycles = PDCycleEngine.solve_cycles(total, last, fill)
        return CyclesResult(
            cycles=cycles,
            working_volume_ml=total - last,
            total_volume_ml=total,
            fill_volume_ml=fill,
            last_fill_ml=last,
            summary=f"({total} - {last}) / {fill} = {cycles} cycles",
        )

    @staticmethod
    def _total_volume(request: CalculationRequest) -> TotalVolumeResult:
        cycles, fill, last = int(request.cycles), int(request.fill_volume), int(request.last_fill)
        exact = int(PDCycleEngine.solve_total_volume(cycles, fill, last))
        rounding = VolumeRounder.round_to_valid_increment(exact, QuantityType.TOTAL_VOLUME, request.fill_mode)

        return TotalVolumeResult(
            cycles=cycles,
            calculated_exact=exact,
            programmable=rounding.rounded_value,
            difference=rounding.rounded_value - exact,
            needs_rounding=rounding.was_rounded,
            increment=rounding.increment,
            out_of_range=rounding.out_of_range,
            rounding_message=rounding.message,
            summary=f"{cycles} x {fill} + {last} = {exact} mL, program {rounding.rounded_value} mL",
        )

    @staticmethod
    def _tidal_total_volume(request: CalculationRequest) -> TidalTotalVolumeResult:
        cycles, fill, last = int(request.cycles), int(request.fill_volume), int(request.last_fill)
        percent, interval = int(request.tidal_percent), int(request.full_drain_interval)

        tidal = PDCycleEngine.tidal_forward(cycles, fill, percent, interval, last)
        exact = tidal["total"]
        rounding = VolumeRounder.round_to_valid_increment(exact, QuantityType.TOTAL_VOLUME, request.fill_mode)

        return TidalTotalVolumeResult(
            cycles=cycles,
            calculated_exact=exact,
            programmable=rounding.rounded_value,
            difference=rounding.rounded_value - exact,
            needs_rounding=rounding.was_rounded,
            tidal_volume=tidal["tidal_volume"],
            full_drain_volume=int(tidal["full_drain_volume"]),
            full_drain_count=tidal["full_drain_count"],
            tidal_drain_cycles=tidal["tidal_drain_cycles"],
            tidal_percent=percent,
            full_drain_interval=interval,
            increment=rounding.increment,
            out_of_range=rounding.out_of_range,
            rounding_message=rounding.message,
            summary=(f"{_fmt(tidal['tidal_volume'])} tidal + {_fmt(tidal['full_drain_volume'])} full drain"
                     f" + {last} last fill = {_fmt(exact)} mL, program {rounding.rounded_value} mL"),
        )

    @staticmethod
    def _tidal_cycles(request: CalculationRequest) -> TidalCyclesResult:
        total, fill, last = int(request.total_volume), int(request.fill_volume), int(request.last_fill)
        percent, interval = int(request.tidal_percent), int(request.full_drain_interval)

        found = PDCycleEngine.tidal_search(total, last, fill, percent, interval)

        return TidalCyclesResult(
            cycles=found["cycles"],
            calculated_total=found["total"],
            requested_total=total,
            difference=found["difference"],
            tidal_volume=found["tidal_volume"],
            full_drain_volume=int(found["full_drain_volume"]),
            full_drain_count=found["full_drain_count"],
            tidal_drain_cycles=found["tidal_drain_cycles"],
            tidal_percent=percent,
            full_drain_interval=interval,
            summary=(f"{found['cycles']} cycles use {_fmt(found['total'])} of {total} mL"
                     f" ({_fmt(found['difference'])} mL unused)"),
        )
