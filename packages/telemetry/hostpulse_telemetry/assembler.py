"""Compose computed blocks into one immutable snapshot."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from .models import (
    Alert,
    CpuDetails,
    Dashboard,
    DiskVolume,
    FanDetails,
    HealthStatus,
    MemoryDetails,
    MetricsSnapshot,
    NetworkInterfaceSample,
    ProcessSample,
    SystemIdentity,
    SystemInfo,
)


def assemble_snapshot(
    *,
    captured_at: datetime,
    cpu_usage: float,
    cpu_temperature: float,
    running_processes: int,
    uptime: str,
    status: HealthStatus,
    fan_speed: float | None,
    fans: Sequence[FanDetails],
    cpu: CpuDetails,
    memory: MemoryDetails,
    disks: Sequence[DiskVolume],
    networks: Sequence[NetworkInterfaceSample],
    processes: Sequence[ProcessSample],
    alerts: Sequence[Alert],
    identity: SystemIdentity,
) -> MetricsSnapshot:
    dashboard = Dashboard(
        cpu_usage=cpu_usage,
        memory_usage=memory.usage_percentage,
        cpu_temperature=cpu_temperature,
        running_processes=running_processes,
        system_uptime=uptime,
        status=status,
        fan_speed=fan_speed,
        fans=tuple(fans),
    )
    system_info = SystemInfo(
        timestamp=captured_at,
        os_name=identity.os_name,
        os_version=identity.os_version,
        os_manufacturer=identity.os_manufacturer,
        system_manufacturer=identity.system_manufacturer,
        system_model=identity.system_model,
    )
    return MetricsSnapshot(
        dashboard=dashboard,
        cpu=cpu,
        memory=memory,
        disks=tuple(disks),
        networks=tuple(networks),
        processes=tuple(processes),
        alerts=tuple(alerts),
        system_info=system_info,
    )
