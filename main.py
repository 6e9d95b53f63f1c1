# main.py

import logging
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, Optional, Union
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from constants import VERSION, FillMode, QuantityType, INCREMENT_RULES
from models import CalculationMode, CalculationRequest, DataTypeError, ValidationOutcome
from normalization import parse_number
from protocols import CalculationProtocol

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("pdcalc-api")

app = FastAPI(
    title="PD Machine Calculator API",
    version=VERSION,
    description="Cycle and programmable-volume calculator for peritoneal dialysis cyclers.\n\n"
                "**WARNING**: Decision Support Tool Only. Verify every setting before programming the device.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"status": "active", "message": "PD Calculator API is running successfully!"}

@app.get("/health")
def health_check():
    """Liveness probe"""
    return {"status": "active", "version": VERSION, "module": "pdcalc-cycle-engine"}

# --- 2. INPUT SCHEMAS ---
# Values arrive as typed at the bedside ("11,000") and are normalized before the engine.
# Strict so JSON `true` reaches parse_number as a bool instead of being coerced to 1
RawValue = Optional[Union[StrictInt, StrictFloat, StrictStr, StrictBool]]

class CyclesRequest(BaseModel):
    fill_mode: FillMode = Field(..., description="'low' or 'standard'")
    total_volume: RawValue = Field(None, description="Total dialysate volume (mL)")
    fill_volume: RawValue = Field(None, description="Volume per exchange (mL)")
    last_fill: RawValue = Field(None, description="Final fill left in at the end (mL)")
    treatment_hours: RawValue = Field(None, description="Optional, adds a dwell time breakdown")

    class Config:
        json_schema_extra = {
            "example": {
                "fill_mode": "low", "total_volume": "3,000", "fill_volume": 240,
                "last_fill": 120, "treatment_hours": 8
            }
        }

class TotalVolumeRequest(BaseModel):
    fill_mode: FillMode = Field(...)
    cycles: RawValue = Field(None, description="Requested number of cycles (1-100)")
    fill_volume: RawValue = Field(None)
    last_fill: RawValue = Field(None)
    treatment_hours: RawValue = Field(None)

class TidalTotalVolumeRequest(TotalVolumeRequest):
    tidal_percent: RawValue = Field(None, description="Percent of fill drained on tidal drains (40-95, step 5)")
    full_drain_interval: RawValue = Field(None, description="Full drain every N cycles (1-10)")

    class Config:
        json_schema_extra = {
            "example": {
                "fill_mode": "standard", "cycles": 10, "fill_volume": 1400, "last_fill": 700,
                "tidal_percent": 85, "full_drain_interval": 3
            }
        }

class TidalCyclesRequest(CyclesRequest):
    tidal_percent: RawValue = Field(None)
    full_drain_interval: RawValue = Field(None)

# --- 3. RESPONSE SCHEMA ---
class CalculationResponse(BaseModel):
    success: bool
    mode: CalculationMode
    fill_mode: FillMode
    result: Dict[str, Any]
    time_breakdown: Optional[Dict[str, Any]] = None

def _plain(record) -> Dict[str, Any]:
    """Dataclass -> dict with Enum members replaced by their values."""
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in asdict(record).items()}

def _reject(failure: ValidationOutcome):
    logger.warning(f"Validation Error ({failure.error_kind.value}): {failure.message}")
    raise HTTPException(
        status_code=422,
        detail={"error_kind": failure.error_kind.value, "message": failure.message},
    )

# Display label per request field, in the order values are normalized
FIELD_LABELS = {
    'total_volume': "Total Volume",
    'fill_volume': "Fill Volume",
    'last_fill': "Last Fill",
    'cycles': "Cycles",
    'tidal_percent': "Tidal Percentage",
    'full_drain_interval': "Full Drain Interval",
}

def _calculate(mode: CalculationMode, body: BaseModel) -> CalculationResponse:
    raw = body.model_dump()
    values = {}

    for name, label in FIELD_LABELS.items():
        if name not in raw:
            continue
        value, failure = parse_number(raw[name], label)
        if failure is not None:
            _reject(failure)
        values[name] = value

    if raw.get('treatment_hours') is not None:
        hours, failure = parse_number(raw['treatment_hours'], "Treatment Time", allow_fraction=True)
        if failure is not None:
            _reject(failure)
        values['treatment_hours'] = hours

    try:
        request = CalculationRequest(mode=mode, fill_mode=body.fill_mode, **values)
        outcome = CalculationProtocol.run(request)
    except DataTypeError as e:
        logger.warning(f"Request Type Error: {str(e)}")
        raise HTTPException(status_code=422, detail={"error_kind": "InvalidNumber", "message": str(e)})
    except Exception as e:
        logger.error(f"Internal Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Calculation Engine Error")

    if not outcome.success:
        _reject(ValidationOutcome.fail(outcome.error_kind, outcome.errors[0]))

    logger.info(f"{mode.value} ({body.fill_mode.value}): {outcome.result.summary}")
    return CalculationResponse(
        success=True,
        mode=outcome.mode,
        fill_mode=outcome.fill_mode,
        result=_plain(outcome.result),
        time_breakdown=_plain(outcome.time_breakdown) if outcome.time_breakdown else None,
    )

# --- 4. ENDPOINTS ---

@app.get("/rules/{fill_mode}")
def get_increment_rules(fill_mode: FillMode):
    """Programming increments for the selected fill mode."""
    return {
        "fill_mode": fill_mode.value,
        "ranges": {
            quantity.value: [asdict(r) for r in INCREMENT_RULES.ranges_for(fill_mode, quantity)]
            for quantity in QuantityType
        },
        "help": INCREMENT_RULES.describe_rules(fill_mode),
    }

@app.post("/calculate/cycles", response_model=CalculationResponse)
def calculate_cycles(body: CyclesRequest):
    """Number of whole cycles that fit in the total volume."""
    return _calculate(CalculationMode.CYCLES, body)

@app.post("/calculate/total-volume", response_model=CalculationResponse)
def calculate_total_volume(body: TotalVolumeRequest):
    """Programmable total volume for a requested number of cycles."""
    return _calculate(CalculationMode.TOTAL_VOLUME, body)

@app.post("/calculate/tidal/total-volume", response_model=CalculationResponse)
def calculate_tidal_total_volume(body: TidalTotalVolumeRequest):
    return _calculate(CalculationMode.TIDAL_TOTAL_VOLUME, body)

@app.post("/calculate/tidal/cycles", response_model=CalculationResponse)
def calculate_tidal_cycles(body: TidalCyclesRequest):
    """Maximum tidal cycles that fit inside the total volume."""
    return _calculate(CalculationMode.TIDAL_CYCLES, body)
