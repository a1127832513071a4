"""CLI entrypoints for one-shot sampling, periodic broadcast and diagnostics."""

from __future__ import annotations

import argparse
import json
import threading
from pathlib import Path

from hostpulse_core import AppConfig, DiagnosticsExporter, MetricsCollector, build_doctor_payload, load_config
from hostpulse_core.logging_setup import configure_logging, install_crash_hooks
from hostpulse_telemetry import (
    VIEWS,
    MetricsSnapshot,
    PsutilHardwareProvider,
    SampleError,
    Sampler,
    TickBaseline,
    snapshot_to_dict,
    snapshot_view,
)
from hostpulse_telemetry.derived import format_bytes


def _print_json(data: object, indent: int | None = 2) -> None:
    print(json.dumps(data, indent=indent, sort_keys=indent is not None, default=str), flush=True)


def build_sampler(cfg: AppConfig, window_ms: int | None = None) -> Sampler:
    provider = PsutilHardwareProvider()
    return Sampler(
        provider,
        TickBaseline.from_provider(provider),
        window_ms=window_ms if window_ms is not None else cfg.sampler.window_ms,
        per_core_window_ms=cfg.sampler.per_core_window_ms,
        top_processes=cfg.sampler.top_processes,
    )


def summarize(snapshot: MetricsSnapshot) -> str:
    d = snapshot.dashboard
    mem = snapshot.memory
    lines = [
        f"{snapshot.system_info.os_name} {snapshot.system_info.os_version}  {snapshot.system_info.timestamp:%Y-%m-%d %H:%M:%S}Z",
        f"status {d.status.value}  cpu {d.cpu_usage:.1f}%  "
        f"mem {d.memory_usage:.1f}% ({format_bytes(mem.used)} / {format_bytes(mem.total)})  uptime {d.system_uptime}",
        f"cpu {snapshot.cpu.name}  {snapshot.cpu.current_frequency}  load {' '.join(f'{v:.2f}' for v in snapshot.cpu.load_averages)}",
    ]
    if d.cpu_temperature > 0:
        lines.append(f"temp {d.cpu_temperature:.1f}°C")
    lines.append("fans " + ", ".join(f"{f.name}: {f.speed or '-'} ({f.status})" for f in d.fans))
    for disk in snapshot.disks:
        lines.append(f"disk {disk.mount_point} {disk.usage_percentage:.1f}% of {format_bytes(disk.total_space)} {disk.status.value}")
    for alert in snapshot.alerts:
        lines.append(f"[{alert.severity.value}] {alert.domain.value}: {alert.message}")
    return "\n".join(lines)


def cmd_sample(args: argparse.Namespace) -> int:
    cfg = load_config()
    sampler = build_sampler(cfg, window_ms=args.window_ms)
    try:
        snapshot = sampler.sample()
    except SampleError as exc:
        _print_json({"success": False, "error": str(exc), "kind": type(exc).__name__})
        return 2

    if args.summary:
        print(summarize(snapshot))
    elif args.view:
        _print_json(snapshot_view(snapshot, args.view))
    else:
        _print_json(snapshot_to_dict(snapshot))
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    cfg = load_config()
    interval_ms = args.interval_ms or cfg.broadcast.interval_ms
    collector = MetricsCollector(build_sampler(cfg), interval_ms=interval_ms)
    done = threading.Event()
    printed = 0

    def _emit(snapshot: MetricsSnapshot) -> None:
        nonlocal printed
        payload = snapshot_view(snapshot, args.view) if args.view else snapshot_to_dict(snapshot)
        _print_json(payload, indent=None)
        printed += 1
        if args.count and printed >= args.count:
            done.set()

    collector.subscribe(_emit)
    collector.start()
    try:
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        collector.stop()
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = load_config()
    payload = build_doctor_payload(cfg, PsutilHardwareProvider())

    if args.export:
        exporter = DiagnosticsExporter()
        out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
        bundle = exporter.bundle(cfg=cfg, doctor_payload=payload, output_dir=out_dir)
        payload["diagnostics_bundle"] = str(bundle)

    _print_json(payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostpulse", description="Host telemetry sampling and alerts")
    sub = parser.add_subparsers(dest="command", required=True)

    sample_cmd = sub.add_parser("sample", help="Take one snapshot and print it")
    sample_cmd.add_argument("--view", choices=VIEWS, default=None, help="Print only one section of the snapshot")
    sample_cmd.add_argument("--window-ms", type=int, default=None, help="Override the CPU delta window")
    sample_cmd.add_argument("--summary", action="store_true", help="Human-readable summary instead of JSON")
    sample_cmd.set_defaults(func=cmd_sample)

    watch_cmd = sub.add_parser("watch", help="Print a snapshot every interval as JSON lines")
    watch_cmd.add_argument("--interval-ms", type=int, default=None)
    watch_cmd.add_argument("--count", type=int, default=0, help="Stop after N snapshots (0 = until interrupted)")
    watch_cmd.add_argument("--view", choices=VIEWS, default=None)
    watch_cmd.set_defaults(func=cmd_watch)

    doctor_cmd = sub.add_parser("doctor", help="Report which provider readings this platform supports")
    doctor_cmd.add_argument("--export", action="store_true", help="Export offline diagnostics bundle")
    doctor_cmd.add_argument("--out-dir", default=None, help="Optional output directory for diagnostics bundle")
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.logging.keep_log_files, console=cfg.logging.console, level=cfg.logging.level)
    install_crash_hooks()
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
