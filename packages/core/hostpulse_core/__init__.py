"""Core collector services for settings, logging, scheduling and diagnostics."""

from .collector import CollectorStatus, MetricsCollector
from .config import AppConfig, load_config, save_config
from .diagnostics import DiagnosticsExporter, build_doctor_payload, probe_provider

__all__ = [
    "AppConfig",
    "CollectorStatus",
    "DiagnosticsExporter",
    "MetricsCollector",
    "build_doctor_payload",
    "load_config",
    "probe_provider",
    "save_config",
]
