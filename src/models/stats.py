"""
Per-frame statistics and monitoring session summary.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DetectionStats:
    """
    Snapshot of the latest pipeline cycle.

    Attributes:
        total_detected: Number of persons in the latest frame.
        suspicious_count: Behavior events emitted for the latest frame.
        last_updated_ms: Pipeline clock time of the latest cycle.
        fps: Completed pipeline cycles in the trailing second.
    """
    total_detected: int = 0
    suspicious_count: int = 0
    last_updated_ms: float = 0.0
    fps: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_detected": self.total_detected,
            "suspicious_count": self.suspicious_count,
            "last_updated_ms": self.last_updated_ms,
            "fps": self.fps,
        }


@dataclass
class MonitoringSession:
    """
    In-memory summary of one monitoring session (never persisted).

    Attributes:
        start_ms: Pipeline clock time when the session started.
        room_name: Optional room label.
        total_alerts: Alerts accepted into the alert set during the session.
        peak_person_count: Largest person count seen in a single frame.
        end_ms: Set when the session is closed.
    """
    start_ms: float
    room_name: Optional[str] = None
    total_alerts: int = 0
    peak_person_count: int = 0
    end_ms: Optional[float] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def record_frame(self, person_count: int, accepted_alerts: int) -> None:
        self.total_alerts += accepted_alerts
        if person_count > self.peak_person_count:
            self.peak_person_count = person_count

    def close(self, now_ms: float) -> None:
        if self.end_ms is None:
            self.end_ms = now_ms

    def duration_s(self, now_ms: float) -> float:
        end = self.end_ms if self.end_ms is not None else now_ms
        return max(0.0, (end - self.start_ms) / 1000.0)

    def to_dict(self, now_ms: float) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "room_name": self.room_name,
            "total_alerts": self.total_alerts,
            "peak_person_count": self.peak_person_count,
            "duration_s": self.duration_s(now_ms),
        }
