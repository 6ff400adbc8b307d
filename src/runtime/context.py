from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from analytics.alerts import AlertAggregator
from models.config import AlertConfig
from models.person import TrackedPerson
from models.stats import DetectionStats, MonitoringSession
from tracking.tracker import PositionTracker


@dataclass
class PipelineContext:
    """
    Holds the state threaded through each pipeline stage; avoids global singletons.

    The tracker table is touched only by the pipeline worker. Persons, stats
    and session are replaced under the lock so web handlers can read
    consistent snapshots; the alert set carries its own lock.
    """

    tracker: PositionTracker = field(default_factory=PositionTracker)
    alerts: AlertAggregator = field(default_factory=AlertAggregator)
    config: Dict[str, Any] = field(default_factory=dict)
    room_name: Optional[str] = None

    consecutive_failures: int = 0
    frame_count: int = 0

    _persons: List[TrackedPerson] = field(default_factory=list, init=False)
    _stats: DetectionStats = field(default_factory=DetectionStats, init=False)
    _session: Optional[MonitoringSession] = field(default=None, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def start_session(self, now_ms: float) -> MonitoringSession:
        """Close the current session (if any) and start a new one."""
        with self._lock:
            if self._session is not None:
                self._session.close(now_ms)
            self._session = MonitoringSession(start_ms=now_ms, room_name=self.room_name)
            return self._session

    def publish_frame(
        self,
        persons: List[TrackedPerson],
        suspicious_count: int,
        accepted_alerts: int,
        now_ms: float,
    ) -> None:
        """Replace the visible persons and stats with this frame's results."""
        with self._lock:
            self._persons = list(persons)
            self._stats = DetectionStats(
                total_detected=len(persons),
                suspicious_count=suspicious_count,
                last_updated_ms=now_ms,
                fps=self._stats.fps,
            )
            if self._session is None:
                self._session = MonitoringSession(start_ms=now_ms, room_name=self.room_name)
            self._session.record_frame(len(persons), accepted_alerts)

    def update_fps(self, fps: int) -> None:
        with self._lock:
            s = self._stats
            self._stats = DetectionStats(
                total_detected=s.total_detected,
                suspicious_count=s.suspicious_count,
                last_updated_ms=s.last_updated_ms,
                fps=fps,
            )

    def persons(self) -> List[TrackedPerson]:
        with self._lock:
            return list(self._persons)

    def stats(self) -> DetectionStats:
        with self._lock:
            return self._stats

    def session(self) -> Optional[MonitoringSession]:
        with self._lock:
            return self._session


def create_context_from_config(config: Dict[str, Any]) -> PipelineContext:
    """Build a PipelineContext with tracker and alert settings from the config dict."""
    tracking_cfg = config.get("tracking", {}) or {}
    alerts_cfg = config.get("alerts", {}) or {}
    return PipelineContext(
        tracker=PositionTracker(stale_after_ms=tracking_cfg.get("stale_after_ms", 3000.0)),
        alerts=AlertAggregator(AlertConfig.from_dict(alerts_cfg)),
        config=config,
        room_name=config.get("room_name"),
    )
