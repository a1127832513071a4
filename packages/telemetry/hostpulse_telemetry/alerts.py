"""Fixed-threshold alert rules evaluated once per sampling pass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from .derived import DISK_CRITICAL, DISK_WARNING, FAN_HIGH_RPM, FAN_LOW_RPM, FAN_STOPPED_RPM
from .models import Alert, AlertDomain, DiskVolume, HealthStatus, Severity


CPU_WARNING = 70.0
CPU_CRITICAL = 90.0
MEMORY_WARNING = 80.0
MEMORY_CRITICAL = 90.0
TEMP_WARNING = 70.0
TEMP_CRITICAL = 80.0
PROCESS_COUNT_WARNING = 300


@dataclass(frozen=True)
class AlertInputs:
    cpu_usage: float
    memory_usage: float
    cpu_temperature: float
    disks: Sequence[DiskVolume]
    process_count: int
    fan_speeds: Sequence[int]


def _tiered(
    domain: AlertDomain,
    value: float,
    warning: float,
    critical: float,
    critical_msg: str,
    warning_msg: str,
    now: datetime,
) -> Alert | None:
    if value >= critical:
        return Alert(domain, Severity.CRITICAL, critical_msg, value, critical, now)
    if value >= warning:
        return Alert(domain, Severity.WARNING, warning_msg, value, warning, now)
    return None


def _fan_alerts(fan_speeds: Sequence[int], now: datetime) -> list[Alert]:
    if not fan_speeds:
        return [
            Alert(AlertDomain.FAN, Severity.INFO, "Fan speed monitoring not available on this system", 0.0, 0.0, now)
        ]

    alerts = []
    for i, speed in enumerate(fan_speeds):
        if speed <= FAN_STOPPED_RPM:
            alerts.append(
                Alert(
                    AlertDomain.FAN,
                    Severity.CRITICAL,
                    f"Fan {i + 1} appears to be stopped (0 RPM)",
                    0.0,
                    float(FAN_STOPPED_RPM),
                    now,
                )
            )
    for i, speed in enumerate(fan_speeds):
        if speed > FAN_HIGH_RPM:
            alerts.append(
                Alert(
                    AlertDomain.FAN,
                    Severity.WARNING,
                    f"Fan {i + 1} running at high speed: {speed} RPM",
                    float(speed),
                    float(FAN_HIGH_RPM),
                    now,
                )
            )
    for i, speed in enumerate(fan_speeds):
        if FAN_STOPPED_RPM < speed < FAN_LOW_RPM:
            alerts.append(
                Alert(
                    AlertDomain.FAN,
                    Severity.WARNING,
                    f"Fan {i + 1} running at unusually low speed: {speed} RPM",
                    float(speed),
                    float(FAN_LOW_RPM),
                    now,
                )
            )
    return alerts


def evaluate(inputs: AlertInputs, now: datetime | None = None) -> list[Alert]:
    """Alerts for one snapshot, in CPU, memory, temperature, disk, process, fan order."""
    now = now or datetime.now(timezone.utc)
    alerts: list[Alert] = []

    cpu = inputs.cpu_usage
    cpu_alert = _tiered(
        AlertDomain.CPU,
        cpu,
        CPU_WARNING,
        CPU_CRITICAL,
        f"CPU usage critical: {cpu:.1f}%",
        f"CPU usage high: {cpu:.1f}%",
        now,
    )
    if cpu_alert:
        alerts.append(cpu_alert)

    mem = inputs.memory_usage
    mem_alert = _tiered(
        AlertDomain.MEMORY,
        mem,
        MEMORY_WARNING,
        MEMORY_CRITICAL,
        f"Memory usage critical: {mem:.1f}%",
        f"Memory usage high: {mem:.1f}%",
        now,
    )
    if mem_alert:
        alerts.append(mem_alert)

    # 0 or below means the platform has no temperature sensor.
    temp = inputs.cpu_temperature
    if temp > 0:
        temp_alert = _tiered(
            AlertDomain.TEMPERATURE,
            temp,
            TEMP_WARNING,
            TEMP_CRITICAL,
            f"CPU temperature critical: {temp:.1f}°C",
            f"CPU temperature high: {temp:.1f}°C",
            now,
        )
        if temp_alert:
            alerts.append(temp_alert)

    for disk in inputs.disks:
        usage = disk.usage_percentage
        disk_alert = _tiered(
            AlertDomain.DISK,
            usage,
            DISK_WARNING,
            DISK_CRITICAL,
            f"Disk {disk.name} critical: {usage:.1f}% full",
            f"Disk {disk.name} almost full: {usage:.1f}% full",
            now,
        )
        if disk_alert:
            alerts.append(disk_alert)

    if inputs.process_count > PROCESS_COUNT_WARNING:
        alerts.append(
            Alert(
                AlertDomain.PROCESSES,
                Severity.WARNING,
                f"High process count: {inputs.process_count}",
                float(inputs.process_count),
                float(PROCESS_COUNT_WARNING),
                now,
            )
        )

    alerts.extend(_fan_alerts(inputs.fan_speeds, now))
    return alerts


def overall_status(cpu_usage: float, memory_usage: float, fan_speeds: Sequence[int]) -> HealthStatus:
    if cpu_usage >= CPU_CRITICAL or memory_usage >= MEMORY_CRITICAL:
        return HealthStatus.CRITICAL
    if any(speed == 0 for speed in fan_speeds):
        return HealthStatus.CRITICAL
    if cpu_usage >= CPU_WARNING or memory_usage >= MEMORY_WARNING:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY
