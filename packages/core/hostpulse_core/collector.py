"""Periodic broadcast and on-demand sampling over one shared sampler."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from hostpulse_telemetry import MetricsSnapshot, SampleCancelled, SampleError, Sampler

from .logging_setup import get_logger


Subscriber = Callable[[MetricsSnapshot], None]

logger = get_logger("collector")


@dataclass
class CollectorStatus:
    running: bool = False
    samples_ok: int = 0
    samples_failed: int = 0
    last_error: str | None = None
    last_sample_utc: str | None = None


class MetricsCollector:
    """Runs the push loop on a daemon thread; ``request()`` serves pull callers.

    Both paths go through the same ``Sampler``, whose baseline lock keeps
    concurrent passes from interleaving.
    """

    def __init__(self, sampler: Sampler, interval_ms: int = 3000) -> None:
        self.sampler = sampler
        self.interval_ms = interval_ms

        self._status = CollectorStatus()
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._subscribers: list[Subscriber] = []
        self._events: list[dict[str, Any]] = []

    @property
    def status(self) -> CollectorStatus:
        return self._status

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        with self._lock:
            return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event}
        row.update(fields)
        with self._lock:
            self._events.append(row)
            if len(self._events) > 1000:
                self._events = self._events[-1000:]

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def request(self) -> MetricsSnapshot:
        """On-demand sample. Sampling errors propagate to the caller."""
        return self._sample(source="request", cancel=None)

    def _sample(self, source: str, cancel: threading.Event | None) -> MetricsSnapshot:
        try:
            snapshot = self.sampler.sample(cancel=cancel)
        except SampleCancelled:
            self._log_event("sample_cancelled", source=source)
            raise
        except SampleError as exc:
            with self._lock:
                self._status.samples_failed += 1
                self._status.last_error = str(exc)
            self._log_event("sample_error", source=source, error=str(exc))
            logger.warning(f"sample failed: {exc}", extra={"event": "sample_error", "error": str(exc)})
            raise

        with self._lock:
            self._status.samples_ok += 1
            self._status.last_error = None
            self._status.last_sample_utc = snapshot.system_info.timestamp.isoformat()
        self._log_event(
            "sample_ok",
            source=source,
            status=snapshot.dashboard.status.value,
            alerts=len(snapshot.alerts),
        )
        return snapshot

    def _publish(self, snapshot: MetricsSnapshot) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("subscriber failed", extra={"event": "subscriber_error"})

    def tick(self) -> MetricsSnapshot | None:
        """One broadcast step. Failed samples are recorded and skipped."""
        try:
            snapshot = self._sample(source="broadcast", cancel=self._stop)
        except SampleError:
            return None
        except Exception as exc:
            with self._lock:
                self._status.samples_failed += 1
                self._status.last_error = str(exc) or type(exc).__name__
            self._log_event("sample_error", source="broadcast", error=str(exc), kind=type(exc).__name__)
            logger.exception("broadcast sample failed", extra={"event": "sample_error", "error": str(exc)})
            return None
        self._publish(snapshot)
        return snapshot

    def _run(self) -> None:
        logger.info("collector started", extra={"event": "collector_started"})
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self.interval_ms / 1000)
        logger.info("collector stopped", extra={"event": "collector_stopped"})

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="hostpulse-collector", daemon=True)
            self._status.running = True
            self._thread.start()
        self._log_event("start", interval_ms=self.interval_ms)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread.is_alive():
            thread.join(timeout=timeout)
        with self._lock:
            self._thread = None
            self._status.running = False
        self._log_event("stop")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until ``stop()`` is called; True if it was."""
        return self._stop.wait(timeout)
