from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from flask import Flask, jsonify, request

from app_shared.osc_common import (
    file_exists,
    read_json_file,
    substitute_variables,
    validate_variables,
    write_json_file,
)
from osc_core import (
    ACTION_DEFINITIONS,
    ActionRunner,
    BackgroundTimerFacility,
    EmissionScheduler,
    MessageSink,
    OscTargetConfig,
    TimerFacility,
    TypedValue,
    default_target_config,
    validate_target_config,
)
from transport.osc_udp import OscUdpSink

logger = logging.getLogger(__name__)


# -----------------------------
# Settings
# -----------------------------
CONFIG_DIR = Path("config")
CONFIG_FILE = CONFIG_DIR / "osc_config.json"

HTTP_HOST = "0.0.0.0"
HTTP_PORT = 5000

LOG_LEVEL_ENV = "OSC_APP_LOG_LEVEL"


def _default_sink_factory(cfg: OscTargetConfig) -> MessageSink:
    return OscUdpSink(cfg.host, cfg.port)


# -----------------------------
# In-memory runtime state
# -----------------------------
class OscHostState:
    def __init__(
        self,
        *,
        config_path: Path = CONFIG_FILE,
        sink_factory: Callable[[OscTargetConfig], MessageSink] = _default_sink_factory,
        timer_facility: Optional[TimerFacility] = None,
    ) -> None:
        self.config_path = Path(config_path)
        self.config: OscTargetConfig = default_target_config()
        self.config_loaded: bool = False

        self.variables: Dict[str, str] = {}

        self.sink: Optional[MessageSink] = None
        self.sink_error: Optional[str] = None

        self.last_action: Optional[Dict[str, Any]] = None

        self._sink_factory = sink_factory
        self._timer_facility = timer_facility or BackgroundTimerFacility()
        self._runner = ActionRunner(EmissionScheduler(self._timer_facility))
        self._lock = threading.Lock()

    # ---------- Sink ----------
    def _rebuild_sink(self) -> bool:
        old = self.sink
        self.sink = None
        if old is not None and hasattr(old, "close"):
            old.close()
        try:
            self.sink = self._sink_factory(self.config)
            self.sink_error = None
            return True
        except Exception as e:
            self.sink = None
            self.sink_error = str(e)
            logger.error("OSC sink for %s:%s unavailable: %s", self.config.host, self.config.port, e)
            return False

    # ---------- Public operations ----------
    def load_config_from_disk(self) -> Tuple[bool, str]:
        with self._lock:
            if not file_exists(self.config_path):
                self.config = default_target_config()
                self.config_loaded = False
                self._rebuild_sink()
                return True, f"Missing {self.config_path}, using defaults"

            try:
                raw = read_json_file(self.config_path)
            except Exception as e:
                return False, str(e)

            ok, cfg, msg = validate_target_config(raw)
            if not ok or cfg is None:
                return False, msg

            self.config = cfg
            self.config_loaded = True
            self._rebuild_sink()
            return True, "ok"

    def update_config(self, raw: Any, *, persist: bool = True) -> Tuple[bool, str]:
        ok, cfg, msg = validate_target_config(raw)
        if not ok or cfg is None:
            return False, msg

        with self._lock:
            if persist:
                try:
                    write_json_file(self.config_path, cfg.to_dict())
                except OSError as e:
                    return False, f"Failed to save config: {e}"
            self.config = cfg
            self.config_loaded = True
            self._rebuild_sink()
            return True, "ok"

    def set_variables(self, raw: Any) -> Tuple[bool, str]:
        ok, cleaned, err = validate_variables(raw)
        if not ok:
            return False, err
        with self._lock:
            self.variables = cleaned
        return True, "ok"

    def resolve_variables(self, text: str) -> str:
        with self._lock:
            variables = dict(self.variables)
        return substitute_variables(text, variables)

    def send(self, path: str, args: Sequence[TypedValue]) -> None:
        """
        Sink handed to the scheduler: pending fade steps go to whichever
        target is configured when they fire.
        """
        with self._lock:
            if self.sink is None:
                raise RuntimeError(f"OSC target {self.config.host}:{self.config.port} not available")
            self.sink.send(path, args)

    def run_action(self, action_id: str, options: Any) -> Tuple[bool, Dict[str, Any], int]:
        with self._lock:
            ready = self.sink is not None

        out = self._runner.execute(
            action_id=action_id,
            options=options if options is not None else {},
            sink=self if ready else None,
            resolve_variables=self.resolve_variables,
        )
        if out.ok:
            with self._lock:
                self.last_action = {
                    "action": out.payload.get("action"),
                    "path": out.payload.get("path"),
                    "scheduled": out.payload.get("scheduled"),
                }
        return out.ok, out.payload, out.status

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "config_loaded": self.config_loaded,
                "target": {"host": self.config.host, "port": int(self.config.port)},
                "sink_ready": self.sink is not None,
                "sink_error": self.sink_error,
                "variable_count": len(self.variables),
                "last_action": dict(self.last_action) if self.last_action else None,
            }


# -----------------------------
# App init
# -----------------------------
app = Flask(__name__)

state = OscHostState()
_config_ok, _config_msg = state.load_config_from_disk()
if not _config_ok:
    logger.warning("config not loaded: %s", _config_msg)


# -----------------------------
# API
# -----------------------------
@app.get("/api/status")
def api_status():
    return jsonify({"ok": True, **state.status()})


@app.get("/api/config")
def api_get_config():
    cfg = state.config
    return jsonify({"ok": True, "config": cfg.to_dict(), "config_loaded": state.config_loaded})


@app.post("/api/config")
def api_set_config():
    """
    Body: { "host": "<ipv4>", "port": <1..65535> }
    """
    data = request.get_json(force=True, silent=True)
    ok, msg = state.update_config(data)
    if not ok:
        return jsonify({"ok": False, "error": msg}), 400
    return jsonify({"ok": True, "config": state.config.to_dict(), "sink_ready": state.sink is not None})


@app.get("/api/actions")
def api_list_actions():
    return jsonify({"ok": True, "actions": [d.to_dict() for d in ACTION_DEFINITIONS.values()]})


@app.post("/api/actions/<action_id>")
def api_run_action(action_id: str):
    """
    Body: { "options": { "path": "/osc/path", ... } }
    """
    data = request.get_json(force=True, silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"ok": False, "error": "body must be an object"}), 400
    _ok, payload, status = state.run_action(action_id, data.get("options", {}))
    return jsonify(payload), status


@app.post("/api/variables")
def api_set_variables():
    """
    Body: { "variables": { "name": "value", ... } }
    """
    data = request.get_json(force=True, silent=True) or {}
    ok, msg = state.set_variables(data.get("variables", None) if isinstance(data, dict) else None)
    if not ok:
        return jsonify({"ok": False, "error": msg}), 400
    return jsonify({"ok": True, "variable_count": len(state.variables)})


# -----------------------------
# Main
# -----------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host=HTTP_HOST, port=HTTP_PORT, debug=False)
