"""
Sampling scheduler for the classroom monitor pipeline.

Runs the pipeline at most once per interval on a single worker thread, so
pipeline cycles never overlap. A slow detector just delays the next cycle;
the scheduler does not try to catch up missed slots. The clock is injected
(milliseconds) so tests can drive tick() deterministically.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Optional

from analytics.alerts import AlertAggregator
from observation.base import ObservationSource
from pipeline.engine import PipelineEngine


Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class RollingRate:
    """Counts events in a trailing time window (cycles per second for a 1000 ms window)."""

    def __init__(self, window_ms: float = 1000.0):
        self.window_ms = window_ms
        self._stamps: Deque[float] = deque()

    def record(self, now_ms: float) -> int:
        self._stamps.append(now_ms)
        return self.count(now_ms)

    def count(self, now_ms: float) -> int:
        while self._stamps and now_ms - self._stamps[0] >= self.window_ms:
            self._stamps.popleft()
        return len(self._stamps)


class AlertPruner:
    """
    Background thread that expires alerts on a fixed cadence.

    Runs independently of the pipeline worker, so stale alerts still
    disappear while a detector call is hung.
    """

    def __init__(
        self,
        alerts: AlertAggregator,
        interval_ms: float = 5000.0,
        clock: Clock = monotonic_ms,
    ):
        self._alerts = alerts
        self.interval_ms = interval_ms
        self._clock = clock
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        # Each thread gets its own stop event; one left behind by a timed-out
        # stop() keeps seeing its own event set.
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop,), name="alert-pruner", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_ms / 1000.0):
            try:
                self._alerts.run_prune_cycle(self._clock())
            except Exception as e:
                logging.error(f"Alert prune failed: {e}")


class SamplingScheduler:
    """
    Throttles the pipeline against a frame source.

    Lifecycle:
        1. start(): open the source, mark active, start the worker and pruner
        2. the worker calls tick() until its stop event is set
        3. stop(): clear the active flag, wake and join the worker, close the source

    Cycles run under a lock, so a worker left behind by a timed-out stop()
    can finish its in-flight cycle but never overlaps the next worker. Such a
    worker closes the source itself on exit unless start() was called again.
    With background=False no threads are started and the caller drives tick().
    """

    def __init__(
        self,
        engine: PipelineEngine,
        source: ObservationSource,
        interval_ms: float = 200.0,
        clock: Clock = monotonic_ms,
        fps_window_ms: float = 1000.0,
        prune_interval_ms: float = 5000.0,
        idle_wait_ms: float = 10.0,
    ):
        """
        Args:
            engine: Pipeline engine to run.
            source: Frame source; opened by start() and closed by stop().
            interval_ms: Minimum time between the starts of two cycles.
            clock: Millisecond clock shared with event timestamps.
            fps_window_ms: Window for the rolling fps metric.
            prune_interval_ms: Cadence of the background alert pruner.
            idle_wait_ms: Worker sleep when nothing ran and nothing is due.
        """
        self.engine = engine
        self.source = source
        self.interval_ms = interval_ms
        self._clock = clock
        self.idle_wait_ms = idle_wait_ms
        self.throughput = RollingRate(fps_window_ms)
        self.pruner = AlertPruner(engine.ctx.alerts, prune_interval_ms, clock)

        self._active = False
        self._last_run_ms: Optional[float] = None
        self._wake = threading.Event()
        self._cycle_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._close_pending = False
        self._thread: Optional[threading.Thread] = None
        self._worker_stop: Optional[threading.Event] = None
        self._worker_done: Optional[threading.Event] = None

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def time_until_due(self, now_ms: float) -> float:
        """Milliseconds until the next cycle may start (<= 0 means due now)."""
        if self._last_run_ms is None:
            return 0.0
        return self.interval_ms - (now_ms - self._last_run_ms)

    def tick(self) -> bool:
        """
        Run one pipeline cycle if active, ready and due.

        Returns:
            True if a cycle completed; False if skipped for any reason.
        """
        with self._cycle_lock:
            return self._tick_locked()

    def _tick_locked(self) -> bool:
        if not self._active or not self.engine.is_ready:
            return False

        now = self._clock()
        if self.time_until_due(now) > 0:
            return False

        frame_data = self.source.read()
        if frame_data is None:
            logging.debug("No frame available from source")
            return False

        result = self.engine.process(frame_data, now)
        if result is None:
            return False

        self._last_run_ms = now
        fps = self.throughput.record(now)
        self.engine.ctx.update_fps(fps)
        return True

    def start(self, background: bool = True) -> None:
        if self._active:
            return

        with self._lifecycle_lock:
            self._close_pending = False
        self.source.open()
        self._active = True
        self._last_run_ms = None
        self._wake = threading.Event()

        if background:
            self.pruner.start()
            self._worker_stop = threading.Event()
            self._worker_done = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._worker_stop, self._worker_done, self._wake),
                name="pipeline",
                daemon=True,
            )
            self._thread.start()

        logging.info(
            f"Scheduler started: source={self.source.source_id}, interval={self.interval_ms}ms"
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop scheduling. Waits up to timeout seconds for an in-flight cycle."""
        if not self._active and self._thread is None:
            return

        self._active = False
        if self._worker_stop is not None:
            self._worker_stop.set()
        self._wake.set()

        worker, done = self._thread, self._worker_done
        self._thread = None
        self._worker_stop = None
        self._worker_done = None
        if worker is not None:
            worker.join(timeout)
        self.pruner.stop()

        with self._lifecycle_lock:
            if done is not None and not done.is_set():
                self._close_pending = True
                logging.warning("Pipeline worker still busy after stop timeout; it will close the source on exit")
                return
        self._close_source()
        logging.info("Scheduler stopped")

    def _close_source(self) -> None:
        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

    def _run(self, stop: threading.Event, done: threading.Event, wake: threading.Event) -> None:
        try:
            while not stop.is_set():
                with self._cycle_lock:
                    if stop.is_set():
                        break
                    try:
                        ran = self._tick_locked()
                    except Exception as e:
                        logging.exception(f"Pipeline error: {e}")
                        ran = False

                if stop.is_set():
                    break

                wait_ms = self.time_until_due(self._clock())
                if wait_ms <= 0 and not ran:
                    wait_ms = self.idle_wait_ms
                if wait_ms > 0:
                    wake.wait(wait_ms / 1000.0)
        finally:
            with self._lifecycle_lock:
                done.set()
                close = self._close_pending
                self._close_pending = False
            if close:
                self._close_source()
                logging.info("Scheduler stopped")


def create_scheduler_from_config(
    config: dict,
    engine: PipelineEngine,
    source: ObservationSource,
    clock: Clock = monotonic_ms,
) -> SamplingScheduler:
    scheduler_cfg = config.get("scheduler", {}) or {}
    alerts_cfg = config.get("alerts", {}) or {}
    return SamplingScheduler(
        engine,
        source,
        interval_ms=scheduler_cfg.get("interval_ms", 200.0),
        clock=clock,
        fps_window_ms=scheduler_cfg.get("fps_window_ms", 1000.0),
        prune_interval_ms=alerts_cfg.get("prune_interval_ms", 5000.0),
    )
