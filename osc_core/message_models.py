from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

from .math_utils import INT64_MAX, INT64_MIN


TAG_INT = "i"
TAG_FLOAT = "f"
TAG_STRING = "s"
TAG_TRUE = "T"
TAG_FALSE = "F"

TOKEN_BARE = "bare"
TOKEN_QUOTED = "quoted"
TOKEN_BRACE = "brace"

VALUE_KIND_INTEGER = "integer"
VALUE_KIND_FLOAT = "float"
VALID_VALUE_KINDS = {VALUE_KIND_INTEGER, VALUE_KIND_FLOAT}


@dataclass(frozen=True)
class IntValue:
    value: int
    tag: ClassVar[str] = TAG_INT

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.tag, "value": int(self.value)}


@dataclass(frozen=True)
class FloatValue:
    value: float
    tag: ClassVar[str] = TAG_FLOAT

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.tag, "value": float(self.value)}


@dataclass(frozen=True)
class StringValue:
    value: str
    tag: ClassVar[str] = TAG_STRING

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.tag, "value": str(self.value)}


@dataclass(frozen=True)
class BoolValue:
    """
    Type-only marker on the wire: T for true, F for false, no payload bytes.
    """
    value: bool

    @property
    def tag(self) -> str:
        return TAG_TRUE if self.value else TAG_FALSE

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.tag}


TypedValue = Union[IntValue, FloatValue, StringValue, BoolValue]


def typed_value_from_dict(raw: Any) -> Optional[TypedValue]:
    """
    Accepts an explicit typed argument such as {"type": "f", "value": 0.5}.
    Returns None when the object does not describe one.
    """
    if not isinstance(raw, Mapping):
        return None
    tag = raw.get("type", None)
    if tag == TAG_TRUE:
        return BoolValue(True)
    if tag == TAG_FALSE:
        return BoolValue(False)
    if "value" not in raw:
        return None

    value = raw["value"]
    if tag == TAG_STRING:
        return StringValue(str(value))
    if isinstance(value, bool):
        return None
    if tag == TAG_INT:
        if isinstance(value, float) and math.isfinite(value):
            value = int(value)
        if isinstance(value, int) and INT64_MIN <= value <= INT64_MAX:
            return IntValue(value)
        return None
    if tag == TAG_FLOAT:
        if isinstance(value, (int, float)) and math.isfinite(float(value)):
            return FloatValue(float(value))
        return None
    return None


@dataclass(frozen=True)
class ArgumentToken:
    text: str
    kind: str = TOKEN_BARE


@dataclass(frozen=True)
class RampPlan:
    start_value: float
    end_value: float
    step_count: int
    step_size: float
    step_delay_ms: float
    value_kind: str
    rounding_digits: Optional[int] = None


@dataclass(frozen=True)
class ScheduledEmission:
    delay_ms: float
    path: str
    payload: Tuple[TypedValue, ...] = field(default_factory=tuple)
