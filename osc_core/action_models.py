from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .message_models import TypedValue


DEFAULT_PATH = "/osc/path"
DEFAULT_FADE_MS = 1000
DEFAULT_GRANULARITY = 2
DEFAULT_ARGUMENTS = '1 "test" 2.5'

BOOLEAN_WARNING = "The boolean type is non-standard and may only work with some receivers."


@dataclass(frozen=True)
class ActionOption:
    option_id: str
    label: str
    default: Any = None
    fade_only: bool = False


@dataclass(frozen=True)
class ActionDefinition:
    action_id: str
    name: str
    options: List[ActionOption] = field(default_factory=list)
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.action_id,
            "name": self.name,
            "options": [
                {"id": o.option_id, "label": o.label, "default": o.default, "fade_only": bool(o.fade_only)}
                for o in self.options
            ],
        }
        if self.note:
            out["note"] = self.note
        return out


_PATH_OPTION = ActionOption("path", "OSC Path", DEFAULT_PATH)
_FADE_OPTIONS = [
    ActionOption("enable_fade", "Enable Fade", False),
    ActionOption("start", "Start Value", None, fade_only=True),
    ActionOption("end", "End Value", None, fade_only=True),
    ActionOption("fade_ms", "Fade time (ms)", DEFAULT_FADE_MS, fade_only=True),
]

ACTION_DEFINITIONS: Dict[str, ActionDefinition] = {
    d.action_id: d
    for d in (
        ActionDefinition("send_blank", "Send message without arguments", [_PATH_OPTION]),
        ActionDefinition(
            "send_int",
            "Send integer",
            [_PATH_OPTION, ActionOption("value", "Value", 1), *_FADE_OPTIONS],
        ),
        ActionDefinition(
            "send_float",
            "Send float",
            [
                _PATH_OPTION,
                ActionOption("value", "Value", 1),
                *_FADE_OPTIONS,
                ActionOption("granularity", "Granularity", DEFAULT_GRANULARITY, fade_only=True),
            ],
        ),
        ActionDefinition("send_string", "Send string", [_PATH_OPTION, ActionOption("value", "Value", "text")]),
        ActionDefinition(
            "send_multiple",
            "Send message with multiple arguments",
            [_PATH_OPTION, ActionOption("arguments", "Arguments", DEFAULT_ARGUMENTS)],
        ),
        ActionDefinition(
            "send_boolean",
            "Send boolean",
            [_PATH_OPTION, ActionOption("value", "Value", False)],
            note=BOOLEAN_WARNING,
        ),
    )
}

VALID_ACTION_IDS = set(ACTION_DEFINITIONS.keys())


@dataclass(frozen=True)
class IntFade:
    start: int
    end: int
    duration_ms: int


@dataclass(frozen=True)
class FloatFade:
    start: float
    end: float
    duration_ms: int
    granularity: int = DEFAULT_GRANULARITY


@dataclass(frozen=True)
class ActionRequest:
    action_id: str
    path: str
    args: List[TypedValue] = field(default_factory=list)
    fade: Optional[Union[IntFade, FloatFade]] = None
