"""
Rolling alert window with duplicate suppression.

The alert set is the externally visible list of recent BehaviorEvents.
It is mutated only through this class: merge (insert if not a duplicate),
prune (expiry), dismiss by id, and clear.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

from models.behavior import BehaviorEvent
from models.config import AlertConfig


class AlertAggregator:
    """
    Keeps recent behavior events, suppressing near-duplicates.

    An event is a duplicate when a retained entry has the same
    (person_id, type) and is younger than suppression_ms. Entries whose
    age reaches retention_ms are dropped.

    All methods take the lock; the web API calls dismiss/clear/snapshot
    from its own thread.
    """

    def __init__(self, config: Optional[AlertConfig] = None):
        self.cfg = config or AlertConfig()
        self._events: List[BehaviorEvent] = []
        self._lock = threading.RLock()
        self._last_prune_ms: Optional[float] = None

    def _expired(self, event: BehaviorEvent, now_ms: float) -> bool:
        return event.age_ms(now_ms) >= self.cfg.retention_ms

    def prune(self, now_ms: float) -> int:
        """
        Drop entries older than the retention window.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            before = len(self._events)
            self._events = [e for e in self._events if not self._expired(e, now_ms)]
            removed = before - len(self._events)
        if removed:
            logging.debug(f"[ALERTS] pruned {removed} expired alert(s)")
        return removed

    def run_prune_cycle(self, now_ms: float) -> int:
        """
        Prune if at least prune_interval_ms has passed since the last cycle.

        Calling this again with no elapsed time is a no-op.
        """
        with self._lock:
            if (
                self._last_prune_ms is not None
                and now_ms - self._last_prune_ms < self.cfg.prune_interval_ms
            ):
                return 0
            self._last_prune_ms = now_ms
            return self.prune(now_ms)

    def _is_duplicate(self, event: BehaviorEvent, now_ms: float) -> bool:
        key = event.dedup_key
        return any(
            r.dedup_key == key and r.age_ms(now_ms) < self.cfg.suppression_ms
            for r in self._events
        )

    def merge(self, events: Sequence[BehaviorEvent], now_ms: float) -> List[BehaviorEvent]:
        """
        Prune, then append each event that is not a duplicate.

        Events accepted earlier in the same call count as retained entries,
        so a batch never adds two events with the same (person_id, type).

        Returns:
            The accepted events, in input order.
        """
        accepted: List[BehaviorEvent] = []
        with self._lock:
            self.prune(now_ms)
            for event in events:
                if self._is_duplicate(event, now_ms):
                    continue
                self._events.append(event)
                accepted.append(event)

        for event in accepted:
            logging.info(
                f"Alert {event.type.value} for {event.person_id} "
                f"(confidence={event.confidence:.2f})"
            )
        return accepted

    def dismiss(self, event_id: str) -> bool:
        """Remove the entry with this id. Returns False if it is not present."""
        with self._lock:
            for i, event in enumerate(self._events):
                if event.id == event_id:
                    del self._events[i]
                    return True
        return False

    def clear_all(self) -> None:
        with self._lock:
            self._events.clear()
        logging.info("All alerts cleared")

    def snapshot(self) -> List[BehaviorEvent]:
        """Entries sorted newest first."""
        with self._lock:
            return sorted(self._events, key=lambda e: e.timestamp_ms, reverse=True)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
