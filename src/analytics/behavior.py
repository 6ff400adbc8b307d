"""
Behavior analysis over one frame of detections and tracker deltas.

Rules (evaluated independently, several may fire for one person):
- phone proximity: a confident phone detection is attributed to the
  nearest person, if close enough
- rapid movement: large center displacement over a short interval
- sustained downward drift: center moved down the frame over a long interval

LOOKING_AWAY and SUSPICIOUS_HAND_MOVEMENT have no rule and are never emitted.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.behavior import BehaviorEvent, BehaviorType
from models.config import BehaviorConfig
from models.detection import BoundingBox, RawDetection
from models.person import TrackedPerson
from tracking.tracker import PositionDelta


DEFAULT_PHONE_LABELS = ("cell phone", "phone")


def nearest_person(
    box: BoundingBox, persons: Sequence[TrackedPerson]
) -> Optional[Tuple[TrackedPerson, float]]:
    """Person whose box center is closest to the center of box, with the distance. None if no persons."""
    best: Optional[Tuple[TrackedPerson, float]] = None
    for person in persons:
        d = box.distance_to(person.box)
        if best is None or d < best[1]:
            best = (person, d)
    return best


class BehaviorAnalyzer:
    """
    Emits BehaviorEvents for one frame.

    The analyzer is stateless between frames; movement history comes in
    through the deltas computed by the PositionTracker.

    Example:
        analyzer = BehaviorAnalyzer(BehaviorConfig())
        events = analyzer.analyze(detections, persons, deltas, now_ms)
    """

    def __init__(
        self,
        config: Optional[BehaviorConfig] = None,
        phone_labels: Iterable[str] = DEFAULT_PHONE_LABELS,
    ):
        self.cfg = config or BehaviorConfig()
        self.phone_labels = frozenset(phone_labels)

    def analyze(
        self,
        detections: Sequence[RawDetection],
        persons: Sequence[TrackedPerson],
        deltas: Mapping[str, PositionDelta],
        now_ms: float,
    ) -> List[BehaviorEvent]:
        """
        Run every rule against the frame.

        Args:
            detections: All raw detections for the frame (phones are read from here).
            persons: Persons in the frame; every event references one of them.
            deltas: Tracker delta per person id (ids with no history are absent).
            now_ms: Pipeline clock time used as the event timestamp.

        Returns:
            Phone events first (in detection order), then movement events in person order.
        """
        events = self.detect_phones(detections, persons, now_ms)
        for person in persons:
            delta = deltas.get(person.id)
            if delta is None:
                continue
            events.extend(self.detect_movement(person, delta, now_ms))
        return events

    def detect_phones(
        self,
        detections: Sequence[RawDetection],
        persons: Sequence[TrackedPerson],
        now_ms: float,
    ) -> List[BehaviorEvent]:
        events: List[BehaviorEvent] = []
        if not persons:
            return events

        for det in detections:
            if det.label not in self.phone_labels:
                continue
            if det.confidence <= self.cfg.phone_confidence_threshold:
                continue

            match = nearest_person(det.box, persons)
            if match is None:
                continue
            person, distance = match
            if distance < self.cfg.phone_max_distance_px:
                events.append(
                    BehaviorEvent.for_person(
                        person, BehaviorType.PHONE_DETECTED, det.confidence, now_ms
                    )
                )
                logging.debug(
                    f"[BEHAVIOR] phone near {person.id}: distance={distance:.1f}px "
                    f"conf={det.confidence:.2f}"
                )
        return events

    def detect_movement(
        self, person: TrackedPerson, delta: PositionDelta, now_ms: float
    ) -> List[BehaviorEvent]:
        events: List[BehaviorEvent] = []
        cfg = self.cfg

        if delta.dt_ms < cfg.movement_max_dt_ms and delta.distance > cfg.movement_threshold_px:
            if cfg.movement_threshold_px > 0:
                confidence = min(delta.distance / cfg.movement_threshold_px, 1.0)
            else:
                confidence = 1.0
            events.append(
                BehaviorEvent.for_person(person, BehaviorType.HEAD_MOVEMENT, confidence, now_ms)
            )

        if delta.dy > cfg.looking_down_shift_px and delta.dt_ms > cfg.looking_down_min_dt_ms:
            events.append(
                BehaviorEvent.for_person(
                    person, BehaviorType.LOOKING_DOWN, cfg.looking_down_confidence, now_ms
                )
            )

        return events


def create_behavior_analyzer_from_config(
    behavior_cfg: Dict[str, Any],
    detection_cfg: Optional[Dict[str, Any]] = None,
) -> BehaviorAnalyzer:
    """
    Factory function to create a BehaviorAnalyzer from config dicts.

    Args:
        behavior_cfg: The "behavior" section of the YAML config.
        detection_cfg: The "detection" section (for phone_labels).
    """
    phone_labels = (detection_cfg or {}).get("phone_labels") or DEFAULT_PHONE_LABELS
    return BehaviorAnalyzer(BehaviorConfig.from_dict(behavior_cfg or {}), phone_labels=phone_labels)
