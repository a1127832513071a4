import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_telemetry.sampler import Sampler, TickBaseline
from hostpulse_telemetry.serialization import VIEWS, snapshot_to_dict, snapshot_view

from fakes import FakeProvider, ticks


def _snapshot(**provider_changes):
    provider = FakeProvider()
    provider.tick_script = [ticks(user=400, idle=1600)]
    for key, value in provider_changes.items():
        setattr(provider, key, value)
    return Sampler(provider, TickBaseline(ticks(user=100, idle=900)), window_ms=0).sample()


class SerializationTests(unittest.TestCase):
    def test_top_level_keys(self):
        data = snapshot_to_dict(_snapshot())
        self.assertEqual(
            set(data),
            {"dashboard", "cpu", "memory", "disks", "networks", "processes", "alerts", "systemInfo"},
        )

    def test_camel_case_fields(self):
        data = snapshot_to_dict(_snapshot())
        dash = data["dashboard"]
        for key in ("cpuUsage", "memoryUsage", "cpuTemperature", "runningProcesses", "systemUptime", "fanSpeed"):
            self.assertIn(key, dash)
        self.assertEqual(dash["status"], "HEALTHY")
        self.assertEqual(dash["fans"][0]["fanNumber"], 1)
        self.assertIn("perCoreUsage", data["cpu"])
        self.assertIn("currentFrequencyRaw", data["cpu"])
        self.assertEqual(data["cpu"]["cpuTicks"]["USER"], 400)
        self.assertIn("usagePercentage", data["disks"][0])
        self.assertEqual(data["disks"][0]["status"], "HEALTHY")
        self.assertIn("threadCount", data["processes"][0])
        self.assertIn("osName", data["systemInfo"])

    def test_alert_fields(self):
        data = snapshot_to_dict(_snapshot(proc_count=400))
        alert = data["alerts"][0]
        self.assertEqual(alert["domain"], "PROCESSES")
        self.assertEqual(alert["severity"], "WARNING")
        self.assertEqual(alert["threshold"], 300.0)
        self.assertEqual(alert["timestamp"], data["systemInfo"]["timestamp"])

    def test_output_is_json_encodable(self):
        text = json.dumps(snapshot_to_dict(_snapshot()))
        self.assertIn('"systemInfo"', text)

    def test_views_carry_timestamp(self):
        snapshot = _snapshot()
        full = snapshot_to_dict(snapshot)
        for view in VIEWS:
            out = snapshot_view(snapshot, view)
            self.assertEqual(out[view], full[view])
            self.assertEqual(out["timestamp"], full["systemInfo"]["timestamp"])

    def test_dashboard_view_includes_alerts(self):
        out = snapshot_view(_snapshot(proc_count=400), "dashboard")
        self.assertEqual(len(out["alerts"]), 1)
        self.assertNotIn("alerts", snapshot_view(_snapshot(), "cpu"))

    def test_unknown_view(self):
        with self.assertRaises(ValueError):
            snapshot_view(_snapshot(), "gpu")


if __name__ == "__main__":
    unittest.main()
