from .action_models import ACTION_DEFINITIONS, ActionDefinition, ActionOption, ActionRequest, FloatFade, IntFade
from .action_runner import ActionExecutionResult, ActionRunner, build_emissions
from .action_validate import is_checked, normalize_and_validate_action
from .config_state import OscTargetConfig, default_target_config, validate_target_config
from .math_utils import clamp_int, is_numeric_literal, parse_float_text, parse_int_text, round_half_away_from_zero
from .message_models import (
    ArgumentToken,
    BoolValue,
    FloatValue,
    IntValue,
    RampPlan,
    ScheduledEmission,
    StringValue,
    TypedValue,
    typed_value_from_dict,
)
from .ramp_planner import plan_float_ramp, plan_integer_ramp, ramp_emissions, ramp_steps
from .scheduler import BackgroundTimerFacility, EmissionScheduler, MessageSink, TimerFacility, VirtualTimerFacility
from .tokenizer import classify_token, scan_tokens, tokenize

__all__ = [
    "ACTION_DEFINITIONS",
    "ActionDefinition",
    "ActionExecutionResult",
    "ActionOption",
    "ActionRequest",
    "ActionRunner",
    "ArgumentToken",
    "BackgroundTimerFacility",
    "BoolValue",
    "EmissionScheduler",
    "FloatFade",
    "FloatValue",
    "IntFade",
    "IntValue",
    "MessageSink",
    "OscTargetConfig",
    "RampPlan",
    "ScheduledEmission",
    "StringValue",
    "TimerFacility",
    "TypedValue",
    "VirtualTimerFacility",
    "build_emissions",
    "clamp_int",
    "classify_token",
    "default_target_config",
    "is_checked",
    "is_numeric_literal",
    "normalize_and_validate_action",
    "parse_float_text",
    "parse_int_text",
    "plan_float_ramp",
    "plan_integer_ramp",
    "ramp_emissions",
    "ramp_steps",
    "round_half_away_from_zero",
    "scan_tokens",
    "tokenize",
    "typed_value_from_dict",
    "validate_target_config",
]
