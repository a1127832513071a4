"""Typed telemetry models.

Raw readings are what a hardware provider returns. Everything from
``FanDetails`` downward is derived, immutable and rebuilt on every pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


TICK_CATEGORIES = ("USER", "NICE", "SYSTEM", "IDLE", "IOWAIT", "IRQ", "SOFTIRQ", "STEAL")
IDLE_CATEGORIES = ("IDLE", "IOWAIT")


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AlertDomain(str, Enum):
    CPU = "CPU"
    MEMORY = "MEMORY"
    TEMPERATURE = "TEMPERATURE"
    DISK = "DISK"
    PROCESSES = "PROCESSES"
    FAN = "FAN"


class HealthStatus(str, Enum):
    HEALTHY = "HEALTHY"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class CpuTickSample:
    """Cumulative tick counters keyed by category, in provider order."""

    categories: tuple[str, ...]
    values: tuple[int, ...]

    @classmethod
    def from_mapping(cls, ticks: dict[str, int]) -> "CpuTickSample":
        return cls(categories=tuple(ticks), values=tuple(int(v) for v in ticks.values()))

    def as_dict(self) -> dict[str, int]:
        return dict(zip(self.categories, self.values))

    @property
    def idle(self) -> int:
        return sum(v for k, v in zip(self.categories, self.values) if k in IDLE_CATEGORIES)

    @property
    def total(self) -> int:
        return sum(self.values)


@dataclass(frozen=True)
class ProcessorIdentity:
    name: str
    physical_cores: int
    logical_cores: int


@dataclass(frozen=True)
class FrequencyReading:
    current: tuple[int, ...]
    nominal: int
    maximum: int


@dataclass(frozen=True)
class MemoryReading:
    total: int
    available: int
    swap_total: int
    swap_used: int


@dataclass(frozen=True)
class DiskVolumeReading:
    name: str
    mount_point: str
    type: str
    total_space: int
    free_space: int


@dataclass(frozen=True)
class NetworkInterfaceReading:
    name: str
    display_name: str
    bytes_sent: int
    bytes_received: int


@dataclass(frozen=True)
class ProcessReading:
    pid: int
    name: str
    cpu_load_cumulative: float  # fraction of one core since process start
    resident_bytes: int
    state: str
    thread_count: int


@dataclass(frozen=True)
class SensorReading:
    cpu_temperature: float  # <= 0 means no sensor
    fan_speeds: tuple[int, ...]


@dataclass(frozen=True)
class SystemIdentity:
    os_name: str
    os_version: str
    os_manufacturer: str
    system_manufacturer: str
    system_model: str


@dataclass(frozen=True)
class FanDetails:
    name: str
    fan_number: int
    speed: int | None
    status: str


@dataclass(frozen=True)
class CpuDetails:
    name: str
    physical_cores: int
    logical_cores: int
    current_frequency: str
    current_frequency_raw: int
    max_frequency: str
    max_frequency_raw: int
    current_frequencies: tuple[int, ...]
    load_averages: tuple[float, float, float]
    per_core_usage: tuple[float, ...]
    cpu_ticks: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MemoryDetails:
    total: int
    used: int
    available: int
    usage_percentage: float
    swap_total: int
    swap_used: int


@dataclass(frozen=True)
class DiskVolume:
    name: str
    mount_point: str
    type: str
    total_space: int
    free_space: int
    used_space: int
    usage_percentage: float
    status: HealthStatus


@dataclass(frozen=True)
class NetworkInterfaceSample:
    name: str
    display_name: str
    bytes_sent: int
    bytes_received: int
    # No per-interface baseline is kept, so rates stay zero.
    upload_speed: int = 0
    download_speed: int = 0


@dataclass(frozen=True)
class ProcessSample:
    pid: int
    name: str
    cpu_usage: float
    memory_usage: int
    state: str
    thread_count: int


@dataclass(frozen=True)
class Alert:
    domain: AlertDomain
    severity: Severity
    message: str
    value: float
    threshold: float
    timestamp: datetime


@dataclass(frozen=True)
class Dashboard:
    cpu_usage: float
    memory_usage: float
    cpu_temperature: float
    running_processes: int
    system_uptime: str
    status: HealthStatus
    fan_speed: float | None
    fans: tuple[FanDetails, ...]


@dataclass(frozen=True)
class SystemInfo:
    timestamp: datetime
    os_name: str
    os_version: str
    os_manufacturer: str
    system_manufacturer: str
    system_model: str


@dataclass(frozen=True)
class MetricsSnapshot:
    dashboard: Dashboard
    cpu: CpuDetails
    memory: MemoryDetails
    disks: tuple[DiskVolume, ...]
    networks: tuple[NetworkInterfaceSample, ...]
    processes: tuple[ProcessSample, ...]
    alerts: tuple[Alert, ...]
    system_info: SystemInfo
