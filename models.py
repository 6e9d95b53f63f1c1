"""
PD Calculator: Data Dictionary
==============================
Request, outcome and result records exchanged between the calculation
engine and its callers (API / UI).

NO LOGIC is implemented here beyond type sanity checks on the request.
Every record is created per calculation and discarded afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union
from constants import FillMode

class DataTypeError(TypeError):
    """Raised when a request carries wrong python types (str instead of int)."""
    pass

# --- 1. ENUMS ---

class CalculationMode(Enum):
    CYCLES = "cycles"                          # Volumes in -> cycle count out
    TOTAL_VOLUME = "total_volume"              # Cycles in -> programmable total out
    TIDAL_TOTAL_VOLUME = "tidal_total_volume"  # Same, with tidal drains
    TIDAL_CYCLES = "tidal_cycles"              # Max tidal cycles within a total

class ErrorKind(Enum):
    INPUT_MISSING = "InputMissing"
    INVALID_NUMBER = "InvalidNumber"
    INCREMENT_MISMATCH = "IncrementMismatch"
    RANGE_VIOLATION = "RangeViolation"
    CLINICAL_CONSTRAINT_VIOLATION = "ClinicalConstraintViolation"
    TREATMENT_TOO_SHORT = "TreatmentTooShort"

# --- 2. CHECK OUTCOMES ---

@dataclass
class ValidationOutcome:
    valid: bool
    message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @staticmethod
    def ok() -> 'ValidationOutcome':
        return ValidationOutcome(valid=True)

    @staticmethod
    def fail(kind: ErrorKind, message: str) -> 'ValidationOutcome':
        return ValidationOutcome(valid=False, message=message, error_kind=kind)

@dataclass
class RoundingOutcome:
    rounded_value: int
    was_rounded: bool
    increment: Optional[int] = None   # None when clamped to the table span
    out_of_range: bool = False
    message: Optional[str] = None

# --- 3. RESULTS (one record per calculation path) ---

@dataclass
class CyclesResult:
    cycles: int                # Whole cycles only; remainder volume unused
    working_volume_ml: int     # Total - Last Fill
    total_volume_ml: int
    fill_volume_ml: int
    last_fill_ml: int
    summary: str = ""

@dataclass
class TotalVolumeResult:
    cycles: int
    calculated_exact: int      # cycles * fill + last
    programmable: int          # After rounding UP to the device increment
    difference: int            # programmable - calculated_exact
    needs_rounding: bool
    increment: Optional[int] = None
    out_of_range: bool = False
    rounding_message: Optional[str] = None
    summary: str = ""

@dataclass
class TidalTotalVolumeResult:
    cycles: int
    calculated_exact: float
    programmable: int
    difference: float
    needs_rounding: bool

    # Tidal breakdown
    tidal_volume: float        # Partial drains
    full_drain_volume: int
    full_drain_count: int
    tidal_drain_cycles: int
    tidal_percent: int
    full_drain_interval: int

    increment: Optional[int] = None
    out_of_range: bool = False
    rounding_message: Optional[str] = None
    summary: str = ""

@dataclass
class TidalCyclesResult:
    cycles: int                # 0 when not even one cycle fits
    calculated_total: float    # Forward total for `cycles`, incl. last fill
    requested_total: int
    difference: float          # requested_total - calculated_total (unused volume)

    tidal_volume: float
    full_drain_volume: int
    full_drain_count: int
    tidal_drain_cycles: int
    tidal_percent: int
    full_drain_interval: int
    summary: str = ""

CalculationResult = Union[CyclesResult, TotalVolumeResult, TidalTotalVolumeResult, TidalCyclesResult]

@dataclass
class TimeBreakdown:
    """
    Dwell/fill/drain split of the treatment. When the treatment is too short
    for the fixed fill+drain overhead every number is zero and `error` is set.
    """
    treatment_hours: float
    cycles: int
    total_minutes: float = 0.0
    total_overhead_min: float = 0.0
    total_dwell_min: float = 0.0
    dwell_per_cycle_min: float = 0.0
    time_per_cycle_min: float = 0.0
    fill_time_per_cycle_min: float = 0.0
    drain_time_per_cycle_min: float = 0.0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

# --- 4. REQUEST / RESPONSE ENVELOPES ---

@dataclass
class CalculationRequest:
    """
    Normalized inputs for one calculation. Which fields are required
    depends on `mode`; the protocol reports missing ones as InputMissing.
    """
    mode: CalculationMode
    fill_mode: FillMode
    fill_volume: Optional[float] = None
    last_fill: Optional[float] = None
    total_volume: Optional[float] = None
    cycles: Optional[float] = None

    # Tidal only
    tidal_percent: Optional[float] = None
    full_drain_interval: Optional[float] = None

    # Optional time annotation
    treatment_hours: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.mode, str):
            self.mode = CalculationMode(self.mode)
        if isinstance(self.fill_mode, str):
            self.fill_mode = FillMode(self.fill_mode)
        if not isinstance(self.mode, CalculationMode):
            raise DataTypeError(f"mode must be CalculationMode, got {type(self.mode)}")
        if not isinstance(self.fill_mode, FillMode):
            raise DataTypeError(f"fill_mode must be FillMode, got {type(self.fill_mode)}")

        numeric_fields = [
            'fill_volume', 'last_fill', 'total_volume', 'cycles',
            'tidal_percent', 'full_drain_interval', 'treatment_hours'
        ]
        for name in numeric_fields:
            val = getattr(self, name)
            if val is None:
                continue
            # bool is an int subclass; True is not a volume
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise DataTypeError(f"Field '{name}' must be numeric, got {type(val)}")

@dataclass
class CalculationOutcome:
    """Standardized response format for API/UI."""
    success: bool
    mode: CalculationMode
    fill_mode: FillMode
    result: Optional[CalculationResult] = None
    time_breakdown: Optional[TimeBreakdown] = None
    error_kind: Optional[ErrorKind] = None
    errors: List[str] = field(default_factory=list)
