from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Tuple

from .action_models import (
    DEFAULT_ARGUMENTS,
    DEFAULT_FADE_MS,
    DEFAULT_GRANULARITY,
    DEFAULT_PATH,
    VALID_ACTION_IDS,
    ActionRequest,
    FloatFade,
    IntFade,
)
from .math_utils import clamp_int, parse_float_text, parse_int_text
from .message_models import BoolValue, FloatValue, IntValue, StringValue, TypedValue
from .ramp_planner import GRANULARITY_MAX, GRANULARITY_MIN
from .tokenizer import tokenize

VariableResolver = Callable[[str], str]

_TRUE_STRINGS = {"true", "1", "yes", "on"}


def _identity(text: str) -> str:
    return text


def is_checked(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in _TRUE_STRINGS


class _InvalidOption(ValueError):
    pass


def _text_option(options: Mapping[str, Any], key: str, default: Any, resolve: VariableResolver) -> str:
    raw = options.get(key, None)
    if raw is None:
        raw = default
    if raw is None:
        raw = ""
    return str(resolve(str(raw)))


def _int_option(options: Mapping[str, Any], key: str, default: Any, resolve: VariableResolver) -> int:
    text = _text_option(options, key, default, resolve)
    try:
        return parse_int_text(text)
    except ValueError:
        raise _InvalidOption(f"invalid numeric parameter '{key}': {text!r}") from None


def _float_option(options: Mapping[str, Any], key: str, default: Any, resolve: VariableResolver) -> float:
    text = _text_option(options, key, default, resolve)
    try:
        return parse_float_text(text)
    except ValueError:
        raise _InvalidOption(f"invalid numeric parameter '{key}': {text!r}") from None


def normalize_and_validate_action(
    action_id: str,
    options: Mapping[str, Any],
    *,
    resolve_variables: Optional[VariableResolver] = None,
) -> Tuple[bool, Optional[ActionRequest], str]:
    action_id = str(action_id).strip()
    if action_id not in VALID_ACTION_IDS:
        return False, None, f"Unknown action '{action_id}'"
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        return False, None, "options must be an object"

    resolve = resolve_variables or _identity

    path = _text_option(options, "path", DEFAULT_PATH, resolve).strip()
    if not path:
        return False, None, "path is required"

    fade_enabled = is_checked(options.get("enable_fade", False))
    args: List[TypedValue] = []
    fade = None

    try:
        if action_id == "send_int":
            if fade_enabled:
                fade = IntFade(
                    start=_int_option(options, "start", None, resolve),
                    end=_int_option(options, "end", None, resolve),
                    duration_ms=_int_option(options, "fade_ms", DEFAULT_FADE_MS, resolve),
                )
            else:
                args.append(IntValue(_int_option(options, "value", 1, resolve)))

        elif action_id == "send_float":
            if fade_enabled:
                granularity = _int_option(options, "granularity", DEFAULT_GRANULARITY, resolve)
                fade = FloatFade(
                    start=_float_option(options, "start", None, resolve),
                    end=_float_option(options, "end", None, resolve),
                    duration_ms=_int_option(options, "fade_ms", DEFAULT_FADE_MS, resolve),
                    granularity=clamp_int(granularity, GRANULARITY_MIN, GRANULARITY_MAX),
                )
            else:
                args.append(FloatValue(_float_option(options, "value", 1, resolve)))

        elif action_id == "send_string":
            args.append(StringValue(_text_option(options, "value", "text", resolve)))

        elif action_id == "send_multiple":
            args.extend(tokenize(_text_option(options, "arguments", DEFAULT_ARGUMENTS, resolve)))

        elif action_id == "send_boolean":
            args.append(BoolValue(is_checked(options.get("value", False))))

    except _InvalidOption as e:
        return False, None, str(e)

    return True, ActionRequest(action_id=action_id, path=path, args=args, fade=fade), "ok"
