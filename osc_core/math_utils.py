from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Decimal literal: optional sign, digits with optional fraction (or a bare fraction), optional exponent.
NUMERIC_LITERAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def clamp_int(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def is_numeric_literal(text: str) -> bool:
    return bool(NUMERIC_LITERAL_RE.match(text.strip()))


def parse_int_text(text: str) -> int:
    """
    Integer-parse semantics: any fractional part is truncated toward zero.
    Raises ValueError for non-numeric text.
    """
    s = str(text).strip()
    if not is_numeric_literal(s):
        raise ValueError(f"not a number: {text!r}")
    try:
        return int(s)
    except ValueError:
        value = float(s)
        if not math.isfinite(value):
            raise ValueError(f"not a finite number: {text!r}")
        return int(value)


def parse_float_text(text: str) -> float:
    s = str(text).strip()
    if not is_numeric_literal(s):
        raise ValueError(f"not a number: {text!r}")
    value = float(s)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def round_half_away_from_zero(value: float, digits: int) -> float:
    # Works on the exact binary value, so 1.005 -> 1.0 at two digits, like a fixed-point formatter.
    if not math.isfinite(value) or abs(value) >= 1e15:
        return float(value)
    quantum = Decimal(1).scaleb(-int(digits))
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
