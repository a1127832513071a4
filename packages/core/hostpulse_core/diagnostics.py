"""Provider capability report and local support bundles."""

from __future__ import annotations

import json
import platform
import tempfile
import zipfile
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Any, Callable

from hostpulse_telemetry import ProviderUnavailable

from .config import AppConfig, config_path
from .logging_setup import log_dir


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, Path):
        return str(value)
    return value


def _package_version(name: str) -> str | None:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def _probe(call: Callable[[], Any], summarize: Callable[[Any], dict[str, Any]]) -> dict[str, Any]:
    try:
        value = call()
    except ProviderUnavailable as exc:
        return {"ok": False, "reason": exc.reason}
    out: dict[str, Any] = {"ok": True}
    out.update(summarize(value))
    return out


def probe_provider(provider: Any, per_core_window_ms: int = 10) -> dict[str, dict[str, Any]]:
    """Exercise each provider operation once and report what the platform supports."""
    return {
        "current_ticks": _probe(provider.current_ticks, lambda t: {"categories": list(t.categories)}),
        "per_core_load": _probe(lambda: provider.per_core_load(per_core_window_ms), lambda v: {"cores": len(v)}),
        "frequencies": _probe(
            provider.frequencies,
            lambda f: {"per_core": len(f.current), "nominal_hz": f.nominal, "max_hz": f.maximum},
        ),
        "processor": _probe(provider.processor, lambda p: asdict(p)),
        "load_average": _probe(provider.load_average, lambda v: {"values": list(v)}),
        "memory": _probe(provider.memory, lambda m: {"total": m.total}),
        "disk_volumes": _probe(provider.disk_volumes, lambda v: {"volumes": len(v)}),
        "network_interfaces": _probe(provider.network_interfaces, lambda v: {"interfaces": len(v)}),
        "processes": _probe(provider.processes, lambda v: {"processes": len(v)}),
        "process_count": _probe(provider.process_count, lambda v: {"count": v}),
        "sensors": _probe(
            provider.sensors,
            lambda s: {"temperature": s.cpu_temperature > 0, "fans": len(s.fan_speeds)},
        ),
        "uptime_seconds": _probe(provider.uptime_seconds, lambda v: {"seconds": v}),
        "system_identity": _probe(provider.system_identity, lambda i: asdict(i)),
    }


def build_doctor_payload(cfg: AppConfig, provider: Any) -> dict[str, Any]:
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "psutil": _package_version("psutil"),
        "hostpulse": _package_version("hostpulse"),
        "config": asdict(cfg),
        "capabilities": probe_provider(provider, cfg.sampler.per_core_window_ms),
    }


class DiagnosticsExporter:
    def __init__(self, app_name: str = "HostPulse") -> None:
        self.app_name = app_name

    def bundle(
        self,
        cfg: AppConfig,
        doctor_payload: dict[str, Any],
        collector_events: list[dict[str, Any]] | None = None,
        output_dir: Path | None = None,
    ) -> Path:
        output_base = output_dir or Path(tempfile.gettempdir())
        output_base.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        zip_path = output_base / f"hostpulse-diagnostics-{stamp}.zip"

        logs = sorted(log_dir().glob("*.log*"))

        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            manifest = {
                "app": self.app_name,
                "created_utc": datetime.now(timezone.utc).isoformat(),
                "host": platform.platform(),
                "python": platform.python_version(),
                "config_path": str(config_path()),
                "log_dir": str(log_dir()),
            }
            zf.writestr("manifest.json", json.dumps(manifest, indent=2, sort_keys=True))
            zf.writestr("doctor.json", json.dumps(doctor_payload, indent=2, sort_keys=True, default=_jsonable))
            zf.writestr("config.json", json.dumps(asdict(cfg), indent=2, sort_keys=True))
            if collector_events is not None:
                zf.writestr(
                    "collector_events.json",
                    json.dumps(collector_events, indent=2, sort_keys=True, default=_jsonable),
                )

            for item in logs:
                zf.write(item, arcname=f"logs/{item.name}")

        return zip_path
