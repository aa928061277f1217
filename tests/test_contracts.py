from __future__ import annotations

import importlib
import json
import tempfile
import unittest
from pathlib import Path

from osc_core import BoolValue, FloatValue, IntValue, StringValue, VirtualTimerFacility

try:
    import flask  # noqa: F401
    HAVE_FLASK = True
except Exception:
    HAVE_FLASK = False


ROOT = Path(__file__).resolve().parents[1]
CONFIG_FILE = ROOT / "config" / "osc_config.json"


class _StubSink:
    def __init__(self, cfg) -> None:
        self.cfg = cfg
        self.calls = []
        self.closed = False

    def send(self, path, args):
        if self.closed:
            raise OSError(9, "Bad file descriptor")
        self.calls.append((path, list(args)))

    def close(self) -> None:
        self.closed = True


class ConfigFileContracts(unittest.TestCase):
    def test_shipped_config_is_valid(self) -> None:
        from osc_core import validate_target_config

        ok, cfg, msg = validate_target_config(json.loads(CONFIG_FILE.read_text()))
        self.assertTrue(ok, msg)
        assert cfg is not None
        self.assertEqual(cfg.port, 9000)


@unittest.skipUnless(HAVE_FLASK, "Flask not installed in this environment")
class OscApiContracts(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.osc_app = importlib.import_module("osc_app")

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.config_path = Path(self._tmp.name) / "osc_config.json"
        self.config_path.write_text(json.dumps({"version": 1, "host": "127.0.0.1", "port": 9100}))

        self.sinks = []

        def _factory(cfg):
            sink = _StubSink(cfg)
            self.sinks.append(sink)
            return sink

        self.clock = VirtualTimerFacility()
        self.state = self.osc_app.OscHostState(
            config_path=self.config_path,
            sink_factory=_factory,
            timer_facility=self.clock,
        )
        ok, msg = self.state.load_config_from_disk()
        self.assertTrue(ok, msg)

        self._orig_state = self.osc_app.state
        self.osc_app.state = self.state
        self.addCleanup(setattr, self.osc_app, "state", self._orig_state)
        self.client = self.osc_app.app.test_client()

    @property
    def sink(self) -> _StubSink:
        return self.sinks[-1]

    def test_status_reports_target(self) -> None:
        resp = self.client.get("/api/status")
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertTrue(data["config_loaded"])
        self.assertTrue(data["sink_ready"])
        self.assertEqual(data["target"], {"host": "127.0.0.1", "port": 9100})

    def test_actions_listing(self) -> None:
        data = self.client.get("/api/actions").get_json()
        ids = [a["id"] for a in data["actions"]]
        self.assertEqual(
            ids, ["send_blank", "send_int", "send_float", "send_string", "send_multiple", "send_boolean"]
        )

    def test_send_multiple_action(self) -> None:
        resp = self.client.post("/api/actions/send_multiple", json={"options": {"path": "/cue", "arguments": '1 "go now" 2.5'}})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["scheduled"], 1)

        self.clock.advance(0)
        self.assertEqual(self.sink.calls, [("/cue", [IntValue(1), StringValue("go now"), FloatValue(2.5)])])

    def test_int_fade_action(self) -> None:
        resp = self.client.post(
            "/api/actions/send_int",
            json={"options": {"path": "/vol", "enable_fade": True, "start": 10, "end": 7, "fade_ms": 300}},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["scheduled"], 4)
        self.clock.run_until_idle()
        self.assertEqual([c[1][0] for c in self.sink.calls], [IntValue(v) for v in (10, 9, 8, 7)])

    def test_boolean_action(self) -> None:
        self.client.post("/api/actions/send_boolean", json={"options": {"path": "/b", "value": True}})
        self.client.post("/api/actions/send_boolean", json={"options": {"path": "/b", "value": False}})
        self.clock.advance(0)
        self.assertEqual([c[1] for c in self.sink.calls], [[BoolValue(True)], [BoolValue(False)]])

    def test_invalid_numeric_parameter_is_400(self) -> None:
        resp = self.client.post(
            "/api/actions/send_float",
            json={"options": {"path": "/f", "enable_fade": True, "start": "loud", "end": "1"}},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("invalid numeric parameter", resp.get_json()["error"])

    def test_unknown_action_is_400(self) -> None:
        resp = self.client.post("/api/actions/send_nothing", json={"options": {}})
        self.assertEqual(resp.status_code, 400)

    def test_variables_feed_action_options(self) -> None:
        resp = self.client.post("/api/variables", json={"variables": {"scene": "intro"}})
        self.assertEqual(resp.status_code, 200)
        self.client.post("/api/actions/send_string", json={"options": {"path": "/scene", "value": "$(scene)"}})
        self.clock.advance(0)
        self.assertEqual(self.sink.calls, [("/scene", [StringValue("intro")])])

    def test_config_update_persists_and_rebuilds_sink(self) -> None:
        first = self.sink
        resp = self.client.post("/api/config", json={"host": "10.0.0.5", "port": 8000})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(first.closed)
        self.assertEqual((self.sink.cfg.host, self.sink.cfg.port), ("10.0.0.5", 8000))
        self.assertEqual(json.loads(self.config_path.read_text())["port"], 8000)

        resp = self.client.post("/api/config", json={"host": "nowhere", "port": 8000})
        self.assertEqual(resp.status_code, 400)

    def test_fade_in_flight_follows_config_update(self) -> None:
        resp = self.client.post(
            "/api/actions/send_int",
            json={"options": {"path": "/v", "enable_fade": True, "start": 0, "end": 4, "fade_ms": 400}},
        )
        self.assertEqual(resp.get_json()["scheduled"], 5)
        self.clock.advance(150)
        first = self.sink

        ok, msg = self.state.update_config({"host": "127.0.0.1", "port": 9100})
        self.assertTrue(ok, msg)
        self.clock.run_until_idle()

        self.assertTrue(first.closed)
        self.assertEqual([c[1][0] for c in first.calls], [IntValue(0), IntValue(1)])
        self.assertEqual([c[1][0] for c in self.sink.calls], [IntValue(2), IntValue(3), IntValue(4)])

    def test_failed_config_save_keeps_previous_target(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("")
        state = self.osc_app.OscHostState(
            config_path=blocker / "osc_config.json", sink_factory=_StubSink, timer_facility=self.clock
        )
        state.load_config_from_disk()

        ok, msg = state.update_config({"host": "10.0.0.9", "port": 8000})
        self.assertFalse(ok)
        self.assertIn("Failed to save config", msg)
        self.assertEqual(state.status()["target"], {"host": "127.0.0.1", "port": 9000})
        self.assertEqual(state.sink.cfg.host, "127.0.0.1")

    def test_missing_sink_is_503(self) -> None:
        def _broken(cfg):
            raise OSError("no route")

        state = self.osc_app.OscHostState(
            config_path=self.config_path, sink_factory=_broken, timer_facility=self.clock
        )
        with self.assertLogs("osc_app", level="ERROR"):
            state.load_config_from_disk()
        self.osc_app.state = state
        resp = self.client.post("/api/actions/send_blank", json={"options": {"path": "/a"}})
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(self.client.get("/api/status").get_json()["sink_error"], "no route")


if __name__ == "__main__":
    unittest.main()
