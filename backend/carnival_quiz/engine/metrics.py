"""Body-mass index derived from the weight and height answers."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional

_NON_NUMERIC = re.compile(r"[^\d.]")
_LEADING_DECIMAL = re.compile(r"\d+(?:\.\d*)?|\.\d+")

# above this a height can't be meters, so it is read as centimeters
MAX_HEIGHT_METERS = 3

# enough digits to quantize any finite float (max ~1.8e308) to one decimal
_ROUNDING = Context(prec=400, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BodyMassIndex:
    value: float

    @property
    def display(self) -> str:
        return f"{self.value:.1f}"


def parse_decimal(raw: Optional[str]) -> Optional[float]:
    """Lenient number parsing for hand-typed measurements.

    The first decimal comma becomes a point. Every character that is not a
    digit or a point is dropped. The longest leading decimal literal is then
    read, so ``"1.75m"`` gives 1.75 and ``"1.7.5"`` gives 1.7. Returns ``None``
    when nothing numeric is left, or when the literal is too long to be a
    finite float.
    """
    if raw is None:
        return None
    cleaned = _NON_NUMERIC.sub("", str(raw).replace(",", ".", 1))
    match = _LEADING_DECIMAL.match(cleaned)
    if match is None:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def _round_one_decimal(value: float) -> float:
    # half-up on the exact binary value, not banker's rounding
    return float(Decimal(value).quantize(Decimal("0.1"), context=_ROUNDING))


def compute_bmi(weight_raw: Optional[str], height_raw: Optional[str]) -> Optional[BodyMassIndex]:
    weight = parse_decimal(weight_raw)
    height = parse_decimal(height_raw)
    if weight is None or height is None or weight <= 0 or height <= 0:
        return None

    height_m = height / 100 if height > MAX_HEIGHT_METERS else height
    squared = height_m * height_m
    if squared == 0:   # underflow on absurdly small heights
        return None
    bmi = weight / squared
    if not math.isfinite(bmi):
        return None
    return BodyMassIndex(_round_one_decimal(bmi))
