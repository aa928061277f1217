from __future__ import annotations

import json
import logging
from typing import List

from .math_utils import INT64_MAX, INT64_MIN, is_numeric_literal, parse_float_text, parse_int_text
from .message_models import (
    TOKEN_BARE,
    TOKEN_BRACE,
    TOKEN_QUOTED,
    ArgumentToken,
    FloatValue,
    IntValue,
    StringValue,
    TypedValue,
    typed_value_from_dict,
)

logger = logging.getLogger(__name__)

_STATE_NORMAL = "normal"
_STATE_IN_QUOTE = "in_quote"
_STATE_IN_BRACE = "in_brace"

_SMART_QUOTES = {"“": '"', "”": '"'}


def normalize_quotes(text: str) -> str:
    out = str(text)
    for smart, plain in _SMART_QUOTES.items():
        out = out.replace(smart, plain)
    return out


def split_raw_tokens(text: str) -> List[str]:
    return [tok for tok in normalize_quotes(text).split(" ") if tok]


def strip_quote_chars(text: str) -> str:
    return text.replace('"', "").replace("'", "")


def _brace_depth(text: str) -> int:
    """
    Net open-brace count, ignoring braces inside JSON string literals.
    """
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
    return depth


def scan_tokens(text: str) -> List[ArgumentToken]:
    tokens: List[ArgumentToken] = []
    state = _STATE_NORMAL
    parts: List[str] = []

    for raw in split_raw_tokens(text):
        if state == _STATE_IN_QUOTE:
            parts.append(raw)
            if raw.endswith('"'):
                tokens.append(ArgumentToken(" ".join(parts), TOKEN_QUOTED))
                parts = []
                state = _STATE_NORMAL
            continue

        if state == _STATE_IN_BRACE:
            parts.append(raw)
            joined = " ".join(parts)
            if _brace_depth(joined) <= 0:
                tokens.append(ArgumentToken(joined, TOKEN_BRACE))
                parts = []
                state = _STATE_NORMAL
            continue

        if raw.startswith('"'):
            if len(raw) > 1 and raw.endswith('"'):
                tokens.append(ArgumentToken(raw, TOKEN_QUOTED))
            else:
                parts = [raw]
                state = _STATE_IN_QUOTE
            continue

        if raw.startswith("{"):
            if _brace_depth(raw) <= 0:
                tokens.append(ArgumentToken(raw, TOKEN_BRACE))
            else:
                parts = [raw]
                state = _STATE_IN_BRACE
            continue

        tokens.append(ArgumentToken(raw, TOKEN_BARE))

    # Unterminated quote or brace runs swallow the rest of the input.
    if state == _STATE_IN_QUOTE:
        tokens.append(ArgumentToken(" ".join(parts), TOKEN_QUOTED))
    elif state == _STATE_IN_BRACE:
        tokens.append(ArgumentToken(" ".join(parts), TOKEN_BRACE))

    return tokens


def _classify_numeric(text: str) -> TypedValue:
    if "." in text:
        return FloatValue(parse_float_text(text))
    value = parse_int_text(text)
    if not (INT64_MIN <= value <= INT64_MAX):
        return FloatValue(parse_float_text(text))
    return IntValue(value)


def classify_token(token: ArgumentToken) -> TypedValue:
    if token.kind == TOKEN_QUOTED:
        return StringValue(strip_quote_chars(token.text))

    if token.kind == TOKEN_BRACE:
        try:
            parsed = json.loads(token.text)
        except (ValueError, RecursionError):
            logger.warning("not a JSON object %s", token.text)
            return StringValue(strip_quote_chars(token.text))
        typed = typed_value_from_dict(parsed)
        if typed is None:
            logger.warning("JSON object is not a typed argument %s", token.text)
            return StringValue(strip_quote_chars(token.text))
        return typed

    if is_numeric_literal(token.text):
        try:
            return _classify_numeric(token.text)
        except (ValueError, OverflowError):
            pass
    return StringValue(strip_quote_chars(token.text))


def tokenize(text: str) -> List[TypedValue]:
    return [classify_token(tok) for tok in scan_tokens(text)]
