"""Timed two-point CPU measurement and the full metrics pass."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, TypeVar

from . import alerts as alert_rules
from . import derived
from .assembler import assemble_snapshot
from .errors import ProviderUnavailable, SampleCancelled, SampleShapeMismatch
from .models import CpuTickSample, MetricsSnapshot, SensorReading, SystemIdentity
from .provider import HardwareProvider


T = TypeVar("T")

DEFAULT_WINDOW_MS = 1000
DEFAULT_PER_CORE_WINDOW_MS = 10

logger = logging.getLogger("hostpulse.sampler")

_UNKNOWN_IDENTITY = SystemIdentity(
    os_name="unknown",
    os_version="unknown",
    os_manufacturer="unknown",
    system_manufacturer="unknown",
    system_model="unknown",
)


def cpu_utilization(t0: CpuTickSample, t1: CpuTickSample) -> float:
    """Busy share of the ticks elapsed between two captures, in percent."""
    if t0.categories != t1.categories:
        raise SampleShapeMismatch(t0.categories, t1.categories)
    total_delta = t1.total - t0.total
    if total_delta <= 0:
        return 0.0
    idle_delta = t1.idle - t0.idle
    busy = 1.0 - idle_delta / total_delta
    return min(max(busy, 0.0), 1.0) * 100.0


class TickBaseline:
    """Previous-tick capture shared by every call path of one collector.

    Created at collector startup from the provider's current ticks. Callers
    hold ``lock`` for the whole read-modify-write of a sampling pass.
    """

    def __init__(self, ticks: CpuTickSample | None = None) -> None:
        self.lock = threading.Lock()
        self._ticks = ticks

    @classmethod
    def from_provider(cls, provider: HardwareProvider) -> "TickBaseline":
        try:
            ticks = provider.current_ticks()
        except ProviderUnavailable as exc:
            logger.warning(f"baseline deferred to first sample: {exc}", extra={"event": "baseline_deferred"})
            ticks = None
        return cls(ticks)

    @property
    def ticks(self) -> CpuTickSample | None:
        return self._ticks

    def commit(self, ticks: CpuTickSample) -> None:
        self._ticks = ticks

    def discard(self) -> None:
        self._ticks = None


class Sampler:
    def __init__(
        self,
        provider: HardwareProvider,
        baseline: TickBaseline,
        window_ms: int = DEFAULT_WINDOW_MS,
        per_core_window_ms: int = DEFAULT_PER_CORE_WINDOW_MS,
        top_processes: int = derived.TOP_PROCESSES,
    ) -> None:
        self.provider = provider
        self.baseline = baseline
        self.window_ms = window_ms
        self.per_core_window_ms = per_core_window_ms
        self.top_processes = top_processes

    def sample(self, cancel: threading.Event | None = None) -> MetricsSnapshot:
        """Run one pass. The baseline only advances when the pass completes."""
        with self.baseline.lock:
            t0 = self.baseline.ticks
            if t0 is None:
                t0 = self.provider.current_ticks()

            self._wait_window(cancel)

            t1 = self.provider.current_ticks()
            captured_at = datetime.now(timezone.utc)
            try:
                cpu_load = cpu_utilization(t0, t1)
            except SampleShapeMismatch as exc:
                self.baseline.discard()
                logger.warning(f"baseline discarded: {exc}", extra={"event": "sample_shape_mismatch"})
                raise

            snapshot = self._build(cpu_load, t1, captured_at)
            self.baseline.commit(t1)
            return snapshot

    def _wait_window(self, cancel: threading.Event | None) -> None:
        seconds = max(self.window_ms, 0) / 1000
        if cancel is None:
            time.sleep(seconds)
            return
        if cancel.wait(seconds):
            raise SampleCancelled("sampling cancelled during delta window")

    def _read(self, operation: str, fn: Callable[[], T], default: T) -> tuple[T, bool]:
        try:
            return fn(), True
        except ProviderUnavailable as exc:
            logger.warning(str(exc), extra={"event": "provider_unavailable", "operation": operation})
            return default, False

    def _build(self, cpu_load: float, ticks: CpuTickSample, captured_at: datetime) -> MetricsSnapshot:
        p = self.provider

        processor, _ = self._read("processor", p.processor, None)
        frequencies, _ = self._read("frequencies", p.frequencies, None)
        load_avg, _ = self._read("load_average", p.load_average, None)
        logical_cores = processor.logical_cores if processor else 0
        per_core = derived.per_core_usage(
            lambda: p.per_core_load(self.per_core_window_ms),
            logical_cores,
            cpu_load,
        )
        cpu = derived.build_cpu_details(processor, frequencies, load_avg, per_core, ticks)

        memory_reading, _ = self._read("memory", p.memory, None)
        memory = derived.build_memory_details(memory_reading)

        disk_readings, _ = self._read("disk_volumes", p.disk_volumes, [])
        disks = derived.build_disks(disk_readings)

        net_readings, _ = self._read("network_interfaces", p.network_interfaces, [])
        networks = derived.build_networks(net_readings)

        proc_readings, _ = self._read("processes", p.processes, [])
        processes = derived.top_processes(proc_readings, self.top_processes)
        process_count, _ = self._read("process_count", p.process_count, 0)

        sensors, sensors_ok = self._read("sensors", p.sensors, SensorReading(cpu_temperature=0.0, fan_speeds=()))
        uptime_seconds, _ = self._read("uptime_seconds", p.uptime_seconds, 0)
        identity, _ = self._read("system_identity", p.system_identity, _UNKNOWN_IDENTITY)

        alerts = alert_rules.evaluate(
            alert_rules.AlertInputs(
                cpu_usage=cpu_load,
                memory_usage=memory.usage_percentage,
                cpu_temperature=sensors.cpu_temperature,
                disks=disks,
                process_count=process_count,
                fan_speeds=sensors.fan_speeds,
            ),
            now=captured_at,
        )

        return assemble_snapshot(
            captured_at=captured_at,
            cpu_usage=cpu_load,
            cpu_temperature=sensors.cpu_temperature,
            running_processes=process_count,
            uptime=derived.format_uptime(uptime_seconds),
            status=alert_rules.overall_status(cpu_load, memory.usage_percentage, sensors.fan_speeds),
            fan_speed=derived.average_fan_speed(sensors.fan_speeds),
            fans=derived.fan_details(sensors.fan_speeds, read_failed=not sensors_ok),
            cpu=cpu,
            memory=memory,
            disks=disks,
            networks=networks,
            processes=processes,
            alerts=alerts,
            identity=identity,
        )
