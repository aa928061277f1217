from __future__ import annotations

import math
from typing import List, Tuple

from .math_utils import clamp_int, round_half_away_from_zero
from .message_models import (
    VALUE_KIND_FLOAT,
    VALUE_KIND_INTEGER,
    FloatValue,
    IntValue,
    RampPlan,
    ScheduledEmission,
    TypedValue,
)

GRANULARITY_MIN = 0
GRANULARITY_MAX = 4


def _require_finite(name: str, value: float) -> float:
    v = float(value)
    if not math.isfinite(v):
        raise ValueError(f"{name} must be a finite number")
    return v


def plan_integer_ramp(start: int, end: int, duration_ms: int) -> RampPlan:
    start_i = int(start)
    end_i = int(end)
    step_count = abs(end_i - start_i)
    if step_count == 0:
        return RampPlan(
            start_value=end_i,
            end_value=end_i,
            step_count=0,
            step_size=1,
            step_delay_ms=0.0,
            value_kind=VALUE_KIND_INTEGER,
        )
    return RampPlan(
        start_value=start_i,
        end_value=end_i,
        step_count=step_count,
        step_size=1,
        step_delay_ms=float(duration_ms) / float(step_count),
        value_kind=VALUE_KIND_INTEGER,
    )


def plan_float_ramp(start: float, end: float, duration_ms: int, granularity: int = 2) -> RampPlan:
    start_f = _require_finite("start", start)
    end_f = _require_finite("end", end)
    digits = clamp_int(int(granularity), GRANULARITY_MIN, GRANULARITY_MAX)

    step_size = 10.0 ** -digits
    span = abs(end_f - start_f)
    if span == 0.0:
        return RampPlan(
            start_value=end_f,
            end_value=end_f,
            step_count=0,
            step_size=step_size,
            step_delay_ms=0.0,
            value_kind=VALUE_KIND_FLOAT,
            rounding_digits=digits,
        )

    quotient = span / step_size
    if not math.isfinite(quotient):
        raise ValueError(f"fade from {start_f!r} to {end_f!r} needs too many steps at granularity {digits}")
    # 0.3 / 0.1 is 2.9999999999999996 in binary; round before ceil so it plans 3 steps, not 4.
    step_count = max(1, int(math.ceil(round(quotient, 9))))

    return RampPlan(
        start_value=start_f,
        end_value=end_f,
        step_count=step_count,
        step_size=step_size,
        step_delay_ms=float(duration_ms) / float(step_count),
        value_kind=VALUE_KIND_FLOAT,
        rounding_digits=digits,
    )


def _step_value(plan: RampPlan, direction: int, i: int) -> TypedValue:
    if plan.value_kind == VALUE_KIND_INTEGER:
        return IntValue(int(plan.start_value) + direction * i)

    raw = float(plan.start_value) + direction * float(plan.step_size) * i
    return FloatValue(round_half_away_from_zero(raw, int(plan.rounding_digits or 0)))


def ramp_steps(plan: RampPlan) -> List[Tuple[float, TypedValue]]:
    """
    Ordered (delay_ms, value) pairs for indices 0..step_count inclusive.
    Non-positive durations collapse every delay to 0.
    """
    direction = 1 if plan.end_value > plan.start_value else -1
    steps: List[Tuple[float, TypedValue]] = []
    for i in range(plan.step_count + 1):
        delay_ms = max(0.0, float(plan.step_delay_ms) * i)
        steps.append((delay_ms, _step_value(plan, direction, i)))
    return steps


def ramp_emissions(plan: RampPlan, path: str) -> List[ScheduledEmission]:
    return [ScheduledEmission(delay_ms=delay_ms, path=path, payload=(value,)) for delay_ms, value in ramp_steps(plan)]
