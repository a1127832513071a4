"""Persistent collector settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1


@dataclass
class SamplerConfig:
    window_ms: int = 1000
    per_core_window_ms: int = 10
    top_processes: int = 10


@dataclass
class BroadcastConfig:
    interval_ms: int = 3000


@dataclass
class LoggingConfig:
    keep_log_files: int = 7
    console: bool = True
    level: str = "INFO"


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "HostPulse"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "HostPulse"
    return Path.home() / ".config" / "hostpulse"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in (raw or {}).items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _clamp(value: Any, low: int, high: int, default: int) -> int:
    try:
        return max(low, min(high, int(value)))
    except (TypeError, ValueError):
        return default


def _normalize_sampler(cfg: AppConfig) -> None:
    s = cfg.sampler
    s.window_ms = _clamp(s.window_ms, 100, 10000, SamplerConfig.window_ms)
    s.per_core_window_ms = _clamp(s.per_core_window_ms, 1, 1000, SamplerConfig.per_core_window_ms)
    s.top_processes = _clamp(s.top_processes, 1, 100, SamplerConfig.top_processes)


def _normalize_broadcast(cfg: AppConfig) -> None:
    cfg.broadcast.interval_ms = _clamp(cfg.broadcast.interval_ms, 500, 60000, BroadcastConfig.interval_ms)


def _normalize_logging(cfg: AppConfig) -> None:
    cfg.logging.keep_log_files = _clamp(cfg.logging.keep_log_files, 2, 365, LoggingConfig.keep_log_files)
    cfg.logging.console = bool(cfg.logging.console)
    level = str(cfg.logging.level).upper()
    cfg.logging.level = level if level in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        sampler=_merge(SamplerConfig, data.get("sampler", {})),
        broadcast=_merge(BroadcastConfig, data.get("broadcast", {})),
        logging=_merge(LoggingConfig, data.get("logging", {})),
    )

    _normalize_sampler(cfg)
    _normalize_broadcast(cfg)
    _normalize_logging(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
