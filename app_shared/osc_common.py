from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

# $(name) or $(namespace:name)
VARIABLE_RE = re.compile(r"\$\(([A-Za-z0-9_\-]+(?::[A-Za-z0-9_\-]+)?)\)")


def read_json_file(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text())


def write_json_file(path: Path, payload: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dict(payload), indent=2))


def file_exists(path: Path) -> bool:
    try:
        return path.exists()
    except Exception:
        return False


def substitute_variables(text: str, variables: Mapping[str, Any]) -> str:
    """
    Replaces $(name) references with their current values.
    Unknown names are left untouched so the literal reference reaches the receiver.
    """

    def _sub(m: re.Match) -> str:
        name = m.group(1)
        if name in variables:
            return str(variables[name])
        return m.group(0)

    return VARIABLE_RE.sub(_sub, str(text))


def validate_variables(raw: Any) -> Tuple[bool, Dict[str, str], str]:
    if not isinstance(raw, Mapping):
        return False, {}, "variables must be an object"
    out: Dict[str, str] = {}
    for k, v in raw.items():
        name = str(k).strip()
        if not VARIABLE_RE.fullmatch(f"$({name})"):
            return False, {}, f"variable name '{name}' is invalid"
        if isinstance(v, (dict, list)):
            return False, {}, f"variable '{name}' must be a scalar"
        out[name] = "" if v is None else str(v)
    return True, out, ""
