"""Cross-platform hardware provider backed by psutil."""

from __future__ import annotations

import functools
import platform
import re
import time
from pathlib import Path
from typing import Callable, Protocol, TypeVar

import psutil

from .errors import ProviderUnavailable
from .models import (
    TICK_CATEGORIES,
    CpuTickSample,
    DiskVolumeReading,
    FrequencyReading,
    MemoryReading,
    NetworkInterfaceReading,
    ProcessorIdentity,
    ProcessReading,
    SensorReading,
    SystemIdentity,
)


T = TypeVar("T")

_TEMP_SENSORS = ("coretemp", "cpu_thermal", "k10temp", "acpitz")
_NOMINAL_FREQ_RE = re.compile(r"@\s*([\d.]+)\s*([GMK]?)Hz", re.IGNORECASE)
_FREQ_SCALE = {"": 1, "K": 1_000, "M": 1_000_000, "G": 1_000_000_000}
_OS_VENDORS = {"Windows": "Microsoft", "Darwin": "Apple", "Linux": "GNU/Linux", "FreeBSD": "FreeBSD Foundation"}
_DMI_DIR = Path("/sys/class/dmi/id")
_UNKNOWN = "unknown"

# psutil field names per tick category; Windows reports interrupt/dpc time.
_TICK_FIELDS = {
    "USER": ("user",),
    "NICE": ("nice",),
    "SYSTEM": ("system",),
    "IDLE": ("idle",),
    "IOWAIT": ("iowait",),
    "IRQ": ("irq", "interrupt"),
    "SOFTIRQ": ("softirq", "dpc"),
    "STEAL": ("steal",),
}


class HardwareProvider(Protocol):
    """Point-in-time readings. Every method may raise ``ProviderUnavailable``."""

    def current_ticks(self) -> CpuTickSample: ...

    def per_core_load(self, window_ms: int) -> list[float]: ...

    def frequencies(self) -> FrequencyReading: ...

    def processor(self) -> ProcessorIdentity: ...

    def load_average(self) -> tuple[float, float, float]: ...

    def memory(self) -> MemoryReading: ...

    def disk_volumes(self) -> list[DiskVolumeReading]: ...

    def network_interfaces(self) -> list[NetworkInterfaceReading]: ...

    def processes(self) -> list[ProcessReading]: ...

    def process_count(self) -> int: ...

    def sensors(self) -> SensorReading: ...

    def uptime_seconds(self) -> int: ...

    def system_identity(self) -> SystemIdentity: ...


def _platform_call(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> T:
            try:
                return fn(*args, **kwargs)
            except (psutil.Error, OSError, NotImplementedError) as exc:
                raise ProviderUnavailable(operation, str(exc) or type(exc).__name__) from exc

        return wrapper

    return decorator


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip() or None
    except OSError:
        return None


def _processor_name() -> str:
    if platform.system() == "Linux":
        cpuinfo = _read_text(Path("/proc/cpuinfo")) or ""
        for line in cpuinfo.splitlines():
            if line.lower().startswith(("model name", "hardware")):
                return line.split(":", 1)[1].strip()
    return platform.processor() or platform.machine() or _UNKNOWN


def parse_nominal_frequency(name: str) -> int:
    """Hz from a brand string such as ``Intel(R) Core(TM) i7 CPU @ 2.40GHz``; 0 if absent."""
    match = _NOMINAL_FREQ_RE.search(name)
    if not match:
        return 0
    try:
        return int(float(match.group(1)) * _FREQ_SCALE[match.group(2).upper()])
    except ValueError:
        return 0


def _cpu_temp_c() -> float:
    temps_fn = getattr(psutil, "sensors_temperatures", None)
    if temps_fn is None:
        return 0.0
    temps = temps_fn()
    if not temps:
        return 0.0

    for name in _TEMP_SENSORS:
        entries = temps.get(name)
        if entries and entries[0].current is not None:
            return float(entries[0].current)

    for _name, entries in temps.items():
        if entries and entries[0].current is not None:
            return float(entries[0].current)
    return 0.0


def _fan_rpms() -> tuple[int, ...]:
    fans_fn = getattr(psutil, "sensors_fans", None)
    if fans_fn is None:
        return ()
    speeds: list[int] = []
    for _name, entries in (fans_fn() or {}).items():
        speeds.extend(int(entry.current) for entry in entries)
    return tuple(speeds)


def _os_name_and_version() -> tuple[str, str]:
    system = platform.system() or _UNKNOWN
    if system == "Linux":
        try:
            release = platform.freedesktop_os_release()
        except OSError:
            release = {}
        return release.get("NAME", system), release.get("VERSION_ID", platform.release())
    if system == "Darwin":
        return "macOS", platform.mac_ver()[0] or platform.release()
    return system, platform.version() or platform.release()


class PsutilHardwareProvider:
    """Reads the local host. Holds no state between calls."""

    def __init__(self) -> None:
        self._processor_name = _processor_name()

    @_platform_call("current_ticks")
    def current_ticks(self) -> CpuTickSample:
        times = psutil.cpu_times()._asdict()
        ticks = {}
        for category in TICK_CATEGORIES:
            field = next((f for f in _TICK_FIELDS[category] if f in times), None)
            if field is not None:
                ticks[category] = int(round(times[field] * 1000))
        return CpuTickSample.from_mapping(ticks)

    @_platform_call("per_core_load")
    def per_core_load(self, window_ms: int) -> list[float]:
        percents = psutil.cpu_percent(interval=max(window_ms, 1) / 1000, percpu=True)
        return [float(p) / 100.0 for p in percents]

    @_platform_call("frequencies")
    def frequencies(self) -> FrequencyReading:
        per_core = psutil.cpu_freq(percpu=True) or []
        overall = psutil.cpu_freq()
        maximum = int(overall.max * 1_000_000) if overall and overall.max else 0
        return FrequencyReading(
            current=tuple(int(f.current * 1_000_000) for f in per_core),
            nominal=parse_nominal_frequency(self._processor_name),
            maximum=maximum,
        )

    @_platform_call("processor")
    def processor(self) -> ProcessorIdentity:
        return ProcessorIdentity(
            name=self._processor_name,
            physical_cores=psutil.cpu_count(logical=False) or 0,
            logical_cores=psutil.cpu_count(logical=True) or 0,
        )

    @_platform_call("load_average")
    def load_average(self) -> tuple[float, float, float]:
        one, five, fifteen = psutil.getloadavg()
        return (float(one), float(five), float(fifteen))

    @_platform_call("memory")
    def memory(self) -> MemoryReading:
        vm = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return MemoryReading(total=vm.total, available=vm.available, swap_total=swap.total, swap_used=swap.used)

    @_platform_call("disk_volumes")
    def disk_volumes(self) -> list[DiskVolumeReading]:
        volumes = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError:
                # Unmounted media and restricted mounts are skipped.
                continue
            volumes.append(
                DiskVolumeReading(
                    name=part.device,
                    mount_point=part.mountpoint,
                    type=part.fstype,
                    total_space=usage.total,
                    free_space=usage.free,
                )
            )
        return volumes

    @_platform_call("network_interfaces")
    def network_interfaces(self) -> list[NetworkInterfaceReading]:
        counters = psutil.net_io_counters(pernic=True) or {}
        return [
            NetworkInterfaceReading(
                name=name,
                display_name=name,
                bytes_sent=c.bytes_sent,
                bytes_received=c.bytes_recv,
            )
            for name, c in counters.items()
        ]

    @_platform_call("processes")
    def processes(self) -> list[ProcessReading]:
        now = time.time()
        out = []
        attrs = ["pid", "name", "cpu_times", "create_time", "memory_info", "status", "num_threads"]
        for proc in psutil.process_iter(attrs):
            try:
                info = proc.info
                cpu_times = info.get("cpu_times")
                created = info.get("create_time") or now
                elapsed = max(now - created, 1e-6)
                busy = (cpu_times.user + cpu_times.system) if cpu_times else 0.0
                mem = info.get("memory_info")
                out.append(
                    ProcessReading(
                        pid=int(info["pid"]),
                        name=info.get("name") or "",
                        cpu_load_cumulative=busy / elapsed,
                        resident_bytes=mem.rss if mem else 0,
                        state=str(info.get("status") or _UNKNOWN).upper(),
                        thread_count=int(info.get("num_threads") or 0),
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return out

    @_platform_call("process_count")
    def process_count(self) -> int:
        return len(psutil.pids())

    @_platform_call("sensors")
    def sensors(self) -> SensorReading:
        return SensorReading(cpu_temperature=_cpu_temp_c(), fan_speeds=_fan_rpms())

    @_platform_call("uptime_seconds")
    def uptime_seconds(self) -> int:
        return max(int(time.time() - psutil.boot_time()), 0)

    @_platform_call("system_identity")
    def system_identity(self) -> SystemIdentity:
        os_name, os_version = _os_name_and_version()
        system = platform.system()
        if system == "Linux":
            manufacturer = _read_text(_DMI_DIR / "sys_vendor") or _UNKNOWN
            model = _read_text(_DMI_DIR / "product_name") or _UNKNOWN
        else:
            manufacturer = _UNKNOWN
            model = _UNKNOWN
        return SystemIdentity(
            os_name=os_name,
            os_version=os_version,
            os_manufacturer=_OS_VENDORS.get(system, _UNKNOWN),
            system_manufacturer=manufacturer,
            system_model=model,
        )
