from __future__ import annotations

import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


class ArchitectureBoundaries(unittest.TestCase):
    def test_core_does_not_import_web_or_transport(self) -> None:
        for path in sorted((ROOT / "osc_core").glob("*.py")):
            src = path.read_text()
            self.assertNotIn("import flask", src, path.name)
            self.assertNotIn("from flask", src, path.name)
            self.assertNotIn("pythonosc", src, path.name)
            self.assertNotIn("from transport", src, path.name)

    def test_scheduler_uses_injected_timer_only(self) -> None:
        src = (ROOT / "osc_core" / "scheduler.py").read_text()
        # EmissionScheduler must go through the TimerFacility port, never a process-wide timer.
        self.assertNotIn("threading.Timer(", src)
        self.assertNotIn("time.sleep(", src)


if __name__ == "__main__":
    unittest.main()
