"""Host telemetry sampling, derived metrics and threshold alerts."""

from .alerts import AlertInputs, evaluate, overall_status
from .errors import ProviderUnavailable, SampleCancelled, SampleError, SampleShapeMismatch
from .models import (
    Alert,
    AlertDomain,
    CpuDetails,
    CpuTickSample,
    Dashboard,
    DiskVolume,
    FanDetails,
    HealthStatus,
    MemoryDetails,
    MetricsSnapshot,
    NetworkInterfaceSample,
    ProcessSample,
    Severity,
    SystemInfo,
)
from .serialization import VIEWS, snapshot_to_dict, snapshot_view

try:  # pragma: no cover - psutil is optional at import time for minimal test environments
    from .provider import HardwareProvider, PsutilHardwareProvider
    from .sampler import Sampler, TickBaseline, cpu_utilization
except ImportError:  # pragma: no cover
    HardwareProvider = None  # type: ignore[assignment]
    PsutilHardwareProvider = None  # type: ignore[assignment]
    Sampler = None  # type: ignore[assignment]
    TickBaseline = None  # type: ignore[assignment]
    cpu_utilization = None  # type: ignore[assignment]

__all__ = [
    "Alert",
    "AlertDomain",
    "AlertInputs",
    "CpuDetails",
    "CpuTickSample",
    "Dashboard",
    "DiskVolume",
    "FanDetails",
    "HealthStatus",
    "MemoryDetails",
    "MetricsSnapshot",
    "NetworkInterfaceSample",
    "ProcessSample",
    "ProviderUnavailable",
    "SampleCancelled",
    "SampleError",
    "SampleShapeMismatch",
    "Severity",
    "SystemInfo",
    "VIEWS",
    "evaluate",
    "overall_status",
    "snapshot_to_dict",
    "snapshot_view",
]

if PsutilHardwareProvider is not None:
    __all__ += ["HardwareProvider", "PsutilHardwareProvider", "Sampler", "TickBaseline", "cpu_utilization"]
