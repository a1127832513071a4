"""Derived metrics: normalized percentages, formatted strings, fan summaries."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from .chains import Strategy, StrategyChain
from .models import (
    CpuDetails,
    CpuTickSample,
    DiskVolume,
    DiskVolumeReading,
    FanDetails,
    FrequencyReading,
    HealthStatus,
    MemoryDetails,
    MemoryReading,
    NetworkInterfaceReading,
    NetworkInterfaceSample,
    ProcessorIdentity,
    ProcessReading,
    ProcessSample,
)


FAN_STOPPED_RPM = 0
FAN_LOW_RPM = 500
FAN_REDUCED_RPM = 800
FAN_NORMAL_RPM = 1500
FAN_HIGH_RPM = 3000

DISK_WARNING = 90.0
DISK_CRITICAL = 95.0

TOP_PROCESSES = 10
NOT_AVAILABLE = "N/A"


def format_hertz(hertz: int) -> str:
    if hertz < 0:
        return NOT_AVAILABLE
    if hertz < 1000:
        return f"{hertz} Hz"
    value = hertz / 1000.0
    for unit in ("KHz", "MHz"):
        if value < 1000:
            return f"{value:.1f} {unit}"
        value /= 1000.0
    return f"{value:.1f} GHz"


def format_bytes(num_bytes: int) -> str:
    if num_bytes < 0:
        return NOT_AVAILABLE
    value = float(num_bytes)
    units = ("B", "KB", "MB", "GB", "TB")
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.1f} {units[i]}"


def format_uptime(seconds: int) -> str:
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds} seconds"

    days = seconds // (24 * 3600)
    hours = (seconds % (24 * 3600)) // 3600
    minutes = (seconds % 3600) // 60

    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}"
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}"
    return f"{minutes} minutes"


def percent_of(used: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return used / total * 100.0


def clamp_percent(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def _has_positive_first(freqs: Sequence[int]) -> bool:
    return len(freqs) > 0 and freqs[0] > 0


def frequency_chain(reading: FrequencyReading) -> StrategyChain[tuple[int, ...]]:
    return StrategyChain(
        "cpu_frequency",
        [
            Strategy("per_core_current", lambda: tuple(reading.current), _has_positive_first),
            Strategy("nominal", lambda: (reading.nominal,), _has_positive_first),
            Strategy("maximum", lambda: (reading.maximum,), _has_positive_first),
        ],
    )


def resolve_frequencies(reading: FrequencyReading | None) -> tuple[str, int, tuple[int, ...]]:
    """Return (formatted average, raw first-core Hz, raw per-core list)."""
    if reading is None:
        return NOT_AVAILABLE, 0, ()

    freqs = frequency_chain(reading).resolve(default=()).value
    if not freqs:
        return NOT_AVAILABLE, 0, ()

    raw = tuple(f if f > 0 else 0 for f in freqs)
    positive = [f for f in raw if f > 0]
    average = format_hertz(sum(positive) // len(positive)) if positive else NOT_AVAILABLE
    return average, raw[0], raw


def even_distribution(cpu_load: float, logical_cores: int) -> tuple[float, ...]:
    if logical_cores <= 0:
        return ()
    return tuple([cpu_load / logical_cores] * logical_cores)


def per_core_usage(
    fetch_direct: Callable[[], Sequence[float] | None],
    logical_cores: int,
    cpu_load: float,
) -> tuple[float, ...]:
    """Per-core usage in percent, direct query first, even distribution last."""

    def _direct() -> tuple[float, ...] | None:
        fractions = fetch_direct()
        if fractions is None:
            return None
        return tuple(clamp_percent(f * 100.0) for f in fractions)

    chain: StrategyChain[tuple[float, ...]] = StrategyChain(
        "per_core_load",
        [
            Strategy("direct", _direct, lambda loads: len(loads) == logical_cores and logical_cores > 0),
            Strategy("even_distribution", lambda: even_distribution(cpu_load, logical_cores), lambda _loads: True),
        ],
    )
    return chain.resolve(default=()).value


def normalize_load_averages(values: Sequence[float] | None) -> tuple[float, float, float]:
    if values is None or len(values) < 3:
        return (0.0, 0.0, 0.0)
    a, b, c = (float(v) if v >= 0 else 0.0 for v in values[:3])
    return (a, b, c)


def build_cpu_details(
    processor: ProcessorIdentity | None,
    frequencies: FrequencyReading | None,
    load_averages: Sequence[float] | None,
    per_core: Sequence[float],
    ticks: CpuTickSample,
) -> CpuDetails:
    average, first_raw, raw_list = resolve_frequencies(frequencies)
    max_raw = frequencies.maximum if frequencies is not None else 0
    return CpuDetails(
        name=processor.name if processor else NOT_AVAILABLE,
        physical_cores=processor.physical_cores if processor else 0,
        logical_cores=processor.logical_cores if processor else 0,
        current_frequency=average,
        current_frequency_raw=first_raw,
        max_frequency=format_hertz(max_raw) if max_raw > 0 else NOT_AVAILABLE,
        max_frequency_raw=max_raw,
        current_frequencies=raw_list,
        load_averages=normalize_load_averages(load_averages),
        per_core_usage=tuple(per_core),
        cpu_ticks=ticks.as_dict(),
    )


def build_memory_details(reading: MemoryReading | None) -> MemoryDetails:
    if reading is None:
        return MemoryDetails(total=0, used=0, available=0, usage_percentage=0.0, swap_total=0, swap_used=0)
    used = reading.total - reading.available
    return MemoryDetails(
        total=reading.total,
        used=used,
        available=reading.available,
        usage_percentage=percent_of(used, reading.total),
        swap_total=reading.swap_total,
        swap_used=reading.swap_used,
    )


def disk_status(usage_percentage: float) -> HealthStatus:
    if usage_percentage >= DISK_CRITICAL:
        return HealthStatus.CRITICAL
    if usage_percentage >= DISK_WARNING:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def build_disks(readings: Iterable[DiskVolumeReading]) -> tuple[DiskVolume, ...]:
    disks = []
    for r in readings:
        used = r.total_space - r.free_space
        usage = percent_of(used, r.total_space)
        disks.append(
            DiskVolume(
                name=r.name,
                mount_point=r.mount_point,
                type=r.type,
                total_space=r.total_space,
                free_space=r.free_space,
                used_space=used,
                usage_percentage=usage,
                status=disk_status(usage),
            )
        )
    return tuple(disks)


def is_loopback(name: str) -> bool:
    lowered = name.lower()
    return "loopback" in lowered or "lo" in lowered


def build_networks(readings: Iterable[NetworkInterfaceReading]) -> tuple[NetworkInterfaceSample, ...]:
    return tuple(
        NetworkInterfaceSample(
            name=r.name,
            display_name=r.display_name,
            bytes_sent=r.bytes_sent,
            bytes_received=r.bytes_received,
        )
        for r in readings
        if not is_loopback(r.name)
    )


def top_processes(readings: Iterable[ProcessReading], limit: int = TOP_PROCESSES) -> tuple[ProcessSample, ...]:
    ranked = sorted(readings, key=lambda p: p.cpu_load_cumulative, reverse=True)[: max(limit, 0)]
    return tuple(
        ProcessSample(
            pid=p.pid,
            name=p.name,
            cpu_usage=p.cpu_load_cumulative * 100.0,
            memory_usage=p.resident_bytes,
            state=p.state,
            thread_count=p.thread_count,
        )
        for p in ranked
    )


def average_fan_speed(fan_speeds: Sequence[int] | None) -> float | None:
    positive = [s for s in (fan_speeds or ()) if s > 0]
    if not positive:
        return None
    return float(int(sum(positive) / len(positive) + 0.5))


def fan_status(speed: int) -> str:
    if speed <= FAN_STOPPED_RPM:
        return "Not Detected"
    if speed < FAN_LOW_RPM:
        return "Very Low"
    if speed < FAN_REDUCED_RPM:
        return "Low"
    if speed < FAN_NORMAL_RPM:
        return "Normal"
    if speed < FAN_HIGH_RPM:
        return "High"
    return "Very High"


def fan_details(fan_speeds: Sequence[int] | None, read_failed: bool = False) -> tuple[FanDetails, ...]:
    if read_failed:
        return (FanDetails(name="System Fan", fan_number=1, speed=None, status="Error Reading"),)
    if not fan_speeds:
        # Keep one entry so consumers always have a fan row to render.
        return (FanDetails(name="System Fan", fan_number=1, speed=None, status="Not Detected"),)
    return tuple(
        FanDetails(
            name=f"Fan {i + 1}",
            fan_number=i + 1,
            speed=speed if speed > 0 else None,
            status=fan_status(speed),
        )
        for i, speed in enumerate(fan_speeds)
    )
