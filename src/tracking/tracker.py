"""
Position tracking for person identities across frames.

This module keeps the last known center and observation time per tracked
id. Each update returns a delta against the previous observation, which the
behavior analyzer uses to infer movement. Records for ids that stop
appearing are evicted after a staleness window.

Note: Behavior inference is NOT done here. Use `analytics.behavior.BehaviorAnalyzer`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models.person import TrackedPerson


@dataclass(frozen=True)
class PositionRecord:
    """Last known center of a tracked id."""
    x: float
    y: float
    observed_at_ms: float

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class PositionDelta:
    """Movement of one id between its previous and current observation."""
    previous: PositionRecord
    current: PositionRecord
    dt_ms: float
    distance: float

    @property
    def dy(self) -> float:
        """Vertical displacement; positive means the center moved down the frame."""
        return self.current.y - self.previous.y


class PositionTracker:
    """
    Tracks the last center position per person id.

    This tracker is responsible for:
    - Producing a delta against the previous observation of an id
    - Overwriting the record with the current observation
    - Evicting records not refreshed within stale_after_ms
    """

    def __init__(self, stale_after_ms: float = 3000.0):
        """
        Args:
            stale_after_ms: Records older than this are removed by evict_stale().
        """
        self.stale_after_ms = stale_after_ms
        self.records: Dict[str, PositionRecord] = {}

        logging.info("Position tracker initialized")

    def update(self, person: TrackedPerson, now_ms: float) -> Optional[PositionDelta]:
        """
        Record the person's current center and return movement since last time.

        Returns:
            A PositionDelta, or None when the id has no history yet.
        """
        cx, cy = person.center
        current = PositionRecord(x=cx, y=cy, observed_at_ms=now_ms)
        previous = self.records.get(person.id)

        delta = None
        if previous is not None:
            delta = PositionDelta(
                previous=previous,
                current=current,
                dt_ms=now_ms - previous.observed_at_ms,
                distance=math.hypot(cx - previous.x, cy - previous.y),
            )

        self.records[person.id] = current
        return delta

    def get(self, person_id: str) -> Optional[PositionRecord]:
        return self.records.get(person_id)

    def positions(self) -> Dict[str, Tuple[float, float]]:
        """Last known center per id."""
        return {pid: rec.point for pid, rec in self.records.items()}

    def evict_stale(self, now_ms: float) -> List[str]:
        """
        Remove records not refreshed within the staleness window.

        Returns:
            The evicted ids.
        """
        to_remove = [
            pid for pid, rec in self.records.items()
            if now_ms - rec.observed_at_ms > self.stale_after_ms
        ]
        for pid in to_remove:
            del self.records[pid]

        if to_remove:
            logging.debug(f"[TRACK] evicted stale ids={to_remove}")
        return to_remove

    def reset(self) -> None:
        self.records.clear()

    def __len__(self) -> int:
        return len(self.records)
