"""
TrackedPerson model for per-frame person records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .detection import BoundingBox, RawDetection


@dataclass(frozen=True)
class TrackedPerson:
    """
    A person detected in the current frame.

    Recreated every frame. Identity continuity is carried by the position
    tracker's history table, not by this object.

    Attributes:
        id: Tracked identity (e.g. "person-3").
        box: Bounding box in pixel coordinates.
        confidence: Detector confidence for the person box.
        student_id: Optional link to a student record.
        student_name: Optional display name for the student.
    """
    id: str
    box: BoundingBox
    confidence: float
    student_id: Optional[str] = None
    student_name: Optional[str] = None

    @property
    def center(self) -> Tuple[float, float]:
        return self.box.center

    @classmethod
    def from_detection(cls, person_id: str, detection: RawDetection) -> "TrackedPerson":
        return cls(id=person_id, box=detection.box, confidence=detection.confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "box": self.box.to_dict(),
            "confidence": self.confidence,
            "student_id": self.student_id,
            "student_name": self.student_name,
        }
