import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_telemetry.alerts import AlertInputs, evaluate, overall_status
from hostpulse_telemetry.derived import build_disks
from hostpulse_telemetry.models import AlertDomain, DiskVolumeReading, HealthStatus, Severity


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _inputs(**overrides):
    values = dict(
        cpu_usage=10.0,
        memory_usage=20.0,
        cpu_temperature=40.0,
        disks=(),
        process_count=100,
        fan_speeds=(1200,),
    )
    values.update(overrides)
    return AlertInputs(**values)


def _disk(name, used_of_1000):
    return DiskVolumeReading(name, f"/{name}", "ext4", total_space=1000, free_space=1000 - used_of_1000)


class OverallStatusTests(unittest.TestCase):
    def test_cpu_critical_dominates(self):
        self.assertEqual(overall_status(95.0, 10.0, [1000]), HealthStatus.CRITICAL)

    def test_memory_warning(self):
        self.assertEqual(overall_status(10.0, 85.0, [1000]), HealthStatus.WARNING)

    def test_stopped_fan_is_critical(self):
        self.assertEqual(overall_status(10.0, 10.0, [0, 1200]), HealthStatus.CRITICAL)

    def test_stopped_fan_escalates_warning(self):
        self.assertEqual(overall_status(75.0, 10.0, [0]), HealthStatus.CRITICAL)

    def test_no_fans_is_healthy(self):
        self.assertEqual(overall_status(10.0, 10.0, []), HealthStatus.HEALTHY)

    def test_boundaries_are_inclusive(self):
        self.assertEqual(overall_status(70.0, 0.0, []), HealthStatus.WARNING)
        self.assertEqual(overall_status(69.9, 79.9, []), HealthStatus.HEALTHY)
        self.assertEqual(overall_status(0.0, 90.0, []), HealthStatus.CRITICAL)


class EvaluateTests(unittest.TestCase):
    def test_quiet_system_has_no_alerts(self):
        self.assertEqual(evaluate(_inputs(), now=NOW), [])

    def test_cpu_tiers(self):
        warning = evaluate(_inputs(cpu_usage=75.0), now=NOW)
        self.assertEqual(len(warning), 1)
        self.assertEqual(warning[0].domain, AlertDomain.CPU)
        self.assertEqual(warning[0].severity, Severity.WARNING)
        self.assertEqual(warning[0].threshold, 70.0)
        self.assertEqual(warning[0].message, "CPU usage high: 75.0%")
        self.assertEqual(warning[0].timestamp, NOW)

        critical = evaluate(_inputs(cpu_usage=92.345), now=NOW)[0]
        self.assertEqual(critical.severity, Severity.CRITICAL)
        self.assertEqual(critical.threshold, 90.0)
        self.assertEqual(critical.message, "CPU usage critical: 92.3%")

    def test_memory_tiers(self):
        alert = evaluate(_inputs(memory_usage=80.0), now=NOW)[0]
        self.assertEqual((alert.domain, alert.severity), (AlertDomain.MEMORY, Severity.WARNING))
        alert = evaluate(_inputs(memory_usage=90.0), now=NOW)[0]
        self.assertEqual(alert.severity, Severity.CRITICAL)

    def test_temperature_only_when_sensor_present(self):
        self.assertEqual(evaluate(_inputs(cpu_temperature=0.0), now=NOW), [])
        self.assertEqual(evaluate(_inputs(cpu_temperature=-5.0), now=NOW), [])
        alert = evaluate(_inputs(cpu_temperature=72.0), now=NOW)[0]
        self.assertEqual((alert.domain, alert.severity), (AlertDomain.TEMPERATURE, Severity.WARNING))
        alert = evaluate(_inputs(cpu_temperature=85.0), now=NOW)[0]
        self.assertEqual(alert.severity, Severity.CRITICAL)

    def test_disk_per_volume(self):
        disks = build_disks([_disk("a", 950), _disk("b", 900), _disk("c", 899)])
        alerts = evaluate(_inputs(disks=disks), now=NOW)
        self.assertEqual([a.domain for a in alerts], [AlertDomain.DISK, AlertDomain.DISK])
        self.assertEqual(alerts[0].severity, Severity.CRITICAL)
        self.assertIn("Disk a critical", alerts[0].message)
        self.assertEqual(alerts[1].severity, Severity.WARNING)
        self.assertIn("Disk b almost full", alerts[1].message)

    def test_process_count(self):
        self.assertEqual(evaluate(_inputs(process_count=300), now=NOW), [])
        alert = evaluate(_inputs(process_count=301), now=NOW)[0]
        self.assertEqual((alert.domain, alert.severity), (AlertDomain.PROCESSES, Severity.WARNING))
        self.assertEqual(alert.value, 301.0)
        self.assertEqual(alert.threshold, 300.0)

    def test_fan_passes_are_ordered(self):
        alerts = evaluate(_inputs(fan_speeds=(3500, 0, 200, 1000)), now=NOW)
        self.assertEqual([a.severity for a in alerts], [Severity.CRITICAL, Severity.WARNING, Severity.WARNING])
        self.assertEqual(alerts[0].message, "Fan 2 appears to be stopped (0 RPM)")
        self.assertEqual(alerts[0].value, 0.0)
        self.assertIn("Fan 1 running at high speed", alerts[1].message)
        self.assertIn("Fan 3 running at unusually low speed", alerts[2].message)
        self.assertEqual(alerts[2].threshold, 500.0)

    def test_fan_at_high_limit_is_quiet(self):
        self.assertEqual(evaluate(_inputs(fan_speeds=(3000, 500)), now=NOW), [])

    def test_no_fan_data_is_info(self):
        alerts = evaluate(_inputs(fan_speeds=()), now=NOW)
        self.assertEqual(len(alerts), 1)
        self.assertEqual((alerts[0].domain, alerts[0].severity), (AlertDomain.FAN, Severity.INFO))

    def test_domain_order(self):
        disks = build_disks([_disk("root", 960)])
        alerts = evaluate(
            _inputs(
                cpu_usage=95.0,
                memory_usage=95.0,
                cpu_temperature=90.0,
                disks=disks,
                process_count=500,
                fan_speeds=(0,),
            ),
            now=NOW,
        )
        self.assertEqual(
            [a.domain for a in alerts],
            [
                AlertDomain.CPU,
                AlertDomain.MEMORY,
                AlertDomain.TEMPERATURE,
                AlertDomain.DISK,
                AlertDomain.PROCESSES,
                AlertDomain.FAN,
            ],
        )

    def test_default_timestamp_is_utc(self):
        alert = evaluate(_inputs(cpu_usage=99.0))[0]
        self.assertEqual(alert.timestamp.tzinfo, timezone.utc)


if __name__ == "__main__":
    unittest.main()
