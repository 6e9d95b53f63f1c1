"""
Input normalization for values typed at the bedside.

Turns raw entries such as "11,000" or " 750 " into numbers before the
engine sees them. Anything that is not a plain decimal number is an
InvalidNumber; blanks are InputMissing.
"""

import math
import re
from typing import Optional, Tuple, Union

from models import ErrorKind, ValidationOutcome

MISSING_MESSAGE = "Please fill in all fields"

# Optional sign, digits with optional 3-digit groups, optional decimals
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d{1,3}([,_ ]\d{3})+|\d+)(\.\d+)?$")

RawNumber = Union[str, int, float, None]

def parse_number(raw: RawNumber, label: str,
                 allow_fraction: bool = False) -> Tuple[Optional[Union[int, float]], Optional[ValidationOutcome]]:
    """
    Returns (value, None) on success or (None, failure) otherwise.
    Integral values come back as int so `%` checks stay exact.
    Fractions are only accepted when `allow_fraction` (e.g. treatment hours).
    """
    if raw is None:
        return None, ValidationOutcome.fail(ErrorKind.INPUT_MISSING, MISSING_MESSAGE)

    if isinstance(raw, bool):
        return None, ValidationOutcome.fail(
            ErrorKind.INVALID_NUMBER, f"{label}: Please enter a valid number")

    if isinstance(raw, (int, float)):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None, ValidationOutcome.fail(ErrorKind.INPUT_MISSING, MISSING_MESSAGE)
        # Exponents, 'inf', 'nan', hex etc. all fail the pattern
        if not _NUMBER_PATTERN.match(text):
            return None, ValidationOutcome.fail(
                ErrorKind.INVALID_NUMBER, f"{label}: Please enter a valid number")
        value = float(re.sub(r"[,_ ]", "", text))
    else:
        return None, ValidationOutcome.fail(
            ErrorKind.INVALID_NUMBER, f"{label}: Please enter a valid number")

    if isinstance(value, float):
        if not math.isfinite(value):
            return None, ValidationOutcome.fail(
                ErrorKind.INVALID_NUMBER, f"{label}: Please enter a valid number")
        if value.is_integer():
            value = int(value)
        elif not allow_fraction:
            return None, ValidationOutcome.fail(
                ErrorKind.INVALID_NUMBER, f"{label}: Please enter a whole number")

    return value, None
