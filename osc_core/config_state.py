from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

CONFIG_VERSION = 1
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9000
PORT_MIN = 1
PORT_MAX = 65535


@dataclass(frozen=True)
class OscTargetConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def to_dict(self) -> Dict[str, Any]:
        return {"version": CONFIG_VERSION, "host": self.host, "port": int(self.port)}


def default_target_config() -> OscTargetConfig:
    return OscTargetConfig()


def validate_target_config(raw: Mapping[str, Any]) -> Tuple[bool, Optional[OscTargetConfig], str]:
    if not isinstance(raw, Mapping):
        return False, None, "config must be an object"

    try:
        version = int(raw.get("version", CONFIG_VERSION))
    except Exception:
        return False, None, "version must be an integer"
    if version != CONFIG_VERSION:
        return False, None, f"config version must be {CONFIG_VERSION}"

    host = str(raw.get("host", "")).strip()
    if not host:
        return False, None, "host is required"
    try:
        ipaddress.IPv4Address(host)
    except ValueError:
        return False, None, f"host '{host}' is not a valid IPv4 address"

    raw_port = raw.get("port", None)
    if isinstance(raw_port, bool):
        return False, None, "port must be an integer"
    try:
        port = int(str(raw_port).strip())
    except Exception:
        return False, None, "port must be an integer"
    if not (PORT_MIN <= port <= PORT_MAX):
        return False, None, f"port must be in {PORT_MIN}..{PORT_MAX}"

    return True, OscTargetConfig(host=host, port=port), "ok"
