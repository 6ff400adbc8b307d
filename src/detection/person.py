"""
Person extraction from raw detector output.

Filters a frame's detections down to the subject class and turns each one
into a TrackedPerson with an identity. Two identity modes are supported:

- "index": person-<i> by position among the frame's person detections.
  Cheap, but ids move to whoever is listed at that position next frame.
- "proximity": ids carried over from the previous frame by nearest center
  (see tracking.identity).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from models.detection import RawDetection
from models.person import TrackedPerson
from tracking.identity import ProximityIdentityMatcher


IDENTITY_MODES = ("index", "proximity")


class PersonExtractor:
    """
    Builds the ordered TrackedPerson list for one frame.

    Example:
        extractor = PersonExtractor(identity_mode="proximity")
        persons = extractor.extract(detections, known=tracker.positions())
    """

    def __init__(
        self,
        person_label: str = "person",
        identity_mode: str = "proximity",
        matcher: Optional[ProximityIdentityMatcher] = None,
    ):
        if identity_mode not in IDENTITY_MODES:
            raise ValueError(
                f"identity_mode must be one of {', '.join(IDENTITY_MODES)}, got {identity_mode!r}"
            )
        self.person_label = person_label
        self.identity_mode = identity_mode
        self.matcher = matcher or ProximityIdentityMatcher()

    def filter_persons(self, detections: Sequence[RawDetection]) -> List[RawDetection]:
        """Person-class detections in adapter order."""
        return [d for d in detections if d.label == self.person_label]

    def extract(
        self,
        detections: Sequence[RawDetection],
        known: Optional[Dict[str, Tuple[float, float]]] = None,
    ) -> List[TrackedPerson]:
        """
        Args:
            detections: Full detection list for one frame.
            known: Last known center per id (used by proximity mode only).
        """
        person_dets = self.filter_persons(detections)

        if self.identity_mode == "index":
            ids = [f"person-{i}" for i in range(len(person_dets))]
        else:
            ids = self.matcher.assign(person_dets, known)

        return [
            TrackedPerson.from_detection(person_id, det)
            for person_id, det in zip(ids, person_dets)
        ]
