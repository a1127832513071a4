import io
import json
import sys
import tempfile
import unittest
import zipfile
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "cli"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_app import cli
from hostpulse_core.config import AppConfig
from hostpulse_telemetry.sampler import Sampler, TickBaseline

from fakes import FakeProvider, ticks


def _fake_sampler(provider=None):
    provider = provider or FakeProvider()
    provider.tick_script = [ticks(user=400, idle=1600)]
    return Sampler(provider, TickBaseline(ticks(user=100, idle=900)), window_ms=0)


class ParserTests(unittest.TestCase):
    def test_sample_command(self):
        args = cli.build_parser().parse_args(["sample", "--view", "cpu", "--window-ms", "250"])
        self.assertEqual(args.command, "sample")
        self.assertEqual(args.view, "cpu")
        self.assertEqual(args.window_ms, 250)

    def test_watch_command(self):
        args = cli.build_parser().parse_args(["watch", "--interval-ms", "1000", "--count", "3"])
        self.assertEqual(args.command, "watch")
        self.assertEqual(args.interval_ms, 1000)
        self.assertEqual(args.count, 3)

    def test_doctor_command(self):
        args = cli.build_parser().parse_args(["doctor", "--export", "--out-dir", "/tmp/x"])
        self.assertTrue(args.export)
        self.assertEqual(args.out_dir, "/tmp/x")

    def test_unknown_view_rejected(self):
        with self.assertRaises(SystemExit), redirect_stdout(io.StringIO()), mock.patch("sys.stderr", io.StringIO()):
            cli.build_parser().parse_args(["sample", "--view", "gpu"])


class CommandTests(unittest.TestCase):
    def _run(self, argv, sampler):
        args = cli.build_parser().parse_args(argv)
        out = io.StringIO()
        with mock.patch.object(cli, "load_config", return_value=AppConfig()), mock.patch.object(
            cli, "build_sampler", return_value=sampler
        ), redirect_stdout(out):
            code = args.func(args)
        return code, out.getvalue()

    def test_sample_prints_full_snapshot(self):
        code, out = self._run(["sample"], _fake_sampler())
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertIn("systemInfo", data)
        self.assertEqual(data["dashboard"]["status"], "HEALTHY")

    def test_sample_view(self):
        code, out = self._run(["sample", "--view", "memory"], _fake_sampler())
        self.assertEqual(code, 0)
        self.assertEqual(set(json.loads(out)), {"memory", "timestamp"})

    def test_sample_summary(self):
        code, out = self._run(["sample", "--summary"], _fake_sampler())
        self.assertEqual(code, 0)
        self.assertIn("status HEALTHY", out)
        self.assertIn("TestOS", out)
        self.assertIn("Fan 1: 1200 (Normal)", out)

    def test_sample_failure_exit_code(self):
        provider = FakeProvider()
        provider.failing = {"current_ticks"}
        code, out = self._run(["sample"], _fake_sampler(provider))
        self.assertEqual(code, 2)
        data = json.loads(out)
        self.assertFalse(data["success"])
        self.assertEqual(data["kind"], "ProviderUnavailable")

    def test_watch_stops_after_count(self):
        code, out = self._run(["watch", "--interval-ms", "10", "--count", "2", "--view", "dashboard"], _fake_sampler())
        self.assertEqual(code, 0)
        lines = [line for line in out.splitlines() if line.strip()]
        self.assertGreaterEqual(len(lines), 2)
        self.assertIn("dashboard", json.loads(lines[0]))

    def test_doctor_export_bundle(self):
        with tempfile.TemporaryDirectory() as tmp:
            args = cli.build_parser().parse_args(["doctor", "--export", "--out-dir", tmp])
            out = io.StringIO()
            with mock.patch.object(cli, "load_config", return_value=AppConfig()), mock.patch.object(
                cli, "PsutilHardwareProvider", FakeProvider
            ), mock.patch("hostpulse_core.diagnostics.log_dir", return_value=Path(tmp)), redirect_stdout(out):
                code = args.func(args)
            self.assertEqual(code, 0)
            payload = json.loads(out.getvalue())
            self.assertTrue(payload["capabilities"]["memory"]["ok"])
            with zipfile.ZipFile(payload["diagnostics_bundle"], "r") as zf:
                names = set(zf.namelist())
            self.assertIn("doctor.json", names)
            self.assertNotIn("collector_events.json", names)


if __name__ == "__main__":
    unittest.main()
