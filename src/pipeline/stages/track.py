"""
Track stage: person extraction plus position tracking.

For each frame this stage:
- Evicts tracker records that went stale
- Extracts persons from the raw detections (assigning identities)
- Updates the tracker for every person, collecting movement deltas
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from detection.person import PersonExtractor
from models.detection import RawDetection
from models.person import TrackedPerson
from tracking.identity import ProximityIdentityMatcher
from tracking.tracker import PositionDelta, PositionTracker


@dataclass
class TrackResult:
    """Output of the track stage for one frame."""
    persons: List[TrackedPerson] = field(default_factory=list)
    deltas: Dict[str, PositionDelta] = field(default_factory=dict)
    evicted: List[str] = field(default_factory=list)


class TrackStage:
    """
    Pipeline stage that turns raw detections into tracked persons.

    Every person present in the frame has its tracker record overwritten
    before process() returns, whether or not a delta was produced.

    Example:
        stage = TrackStage(PersonExtractor(), ctx.tracker)
        result = stage.process(detections, now_ms)
    """

    def __init__(self, extractor: PersonExtractor, tracker: PositionTracker):
        self._extractor = extractor
        self._tracker = tracker

    @property
    def tracker(self) -> PositionTracker:
        return self._tracker

    def process(self, detections: Sequence[RawDetection], now_ms: float) -> TrackResult:
        evicted = self._tracker.evict_stale(now_ms)

        persons = self._extractor.extract(detections, known=self._tracker.positions())

        deltas: Dict[str, PositionDelta] = {}
        for person in persons:
            delta = self._tracker.update(person, now_ms)
            if delta is not None:
                deltas[person.id] = delta

        return TrackResult(persons=persons, deltas=deltas, evicted=evicted)


def create_track_stage(
    detection_cfg: Dict[str, Any],
    tracking_cfg: Dict[str, Any],
    tracker: PositionTracker,
) -> TrackStage:
    """
    Factory function to create a TrackStage from config.

    Args:
        detection_cfg: The "detection" section (person_label).
        tracking_cfg: The "tracking" section (identity_mode, match_distance_px).
        tracker: Shared position tracker from the pipeline context.
    """
    detection_cfg = detection_cfg or {}
    tracking_cfg = tracking_cfg or {}
    matcher = ProximityIdentityMatcher(
        max_distance_px=tracking_cfg.get("match_distance_px", 150.0),
    )
    extractor = PersonExtractor(
        person_label=detection_cfg.get("person_label", "person"),
        identity_mode=tracking_cfg.get("identity_mode", "proximity"),
        matcher=matcher,
    )
    logging.info(f"TrackStage initialized (identity_mode={extractor.identity_mode})")
    return TrackStage(extractor, tracker)
