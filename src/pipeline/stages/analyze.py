"""
Analyze stage: behavior inference and alert merging.

This stage uses a BehaviorAnalyzer to produce BehaviorEvents from the
frame's detections and tracker deltas, then merges them into the alert set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Sequence

from analytics.alerts import AlertAggregator
from analytics.behavior import BehaviorAnalyzer
from models.behavior import BehaviorEvent
from models.detection import RawDetection
from models.person import TrackedPerson
from tracking.tracker import PositionDelta


@dataclass
class AnalyzeResult:
    """
    Output of the analyze stage for one frame.

    Attributes:
        events: Every event the analyzer emitted this frame.
        accepted: The subset that entered the alert set.
    """
    events: List[BehaviorEvent] = field(default_factory=list)
    accepted: List[BehaviorEvent] = field(default_factory=list)


class AnalyzeStage:
    """
    Pipeline stage that infers behavior and maintains the alert set.

    This stage:
    - Runs the analyzer rules for the frame
    - Merges emitted events into the AlertAggregator
    - Notifies an optional callback for each accepted alert
    """

    def __init__(
        self,
        analyzer: BehaviorAnalyzer,
        alerts: AlertAggregator,
        on_alert: Optional[Callable[[BehaviorEvent], None]] = None,
    ):
        """
        Args:
            analyzer: Behavior rules.
            alerts: Shared alert set from the pipeline context.
            on_alert: Optional callback for each accepted alert.
        """
        self._analyzer = analyzer
        self._alerts = alerts
        self._on_alert = on_alert

    def process(
        self,
        detections: Sequence[RawDetection],
        persons: Sequence[TrackedPerson],
        deltas: Mapping[str, PositionDelta],
        now_ms: float,
    ) -> AnalyzeResult:
        events = self._analyzer.analyze(detections, persons, deltas, now_ms)
        accepted = self._alerts.merge(events, now_ms)

        if self._on_alert:
            for event in accepted:
                try:
                    self._on_alert(event)
                except Exception as e:
                    logging.warning(f"Alert callback error: {e}")

        return AnalyzeResult(events=events, accepted=accepted)
