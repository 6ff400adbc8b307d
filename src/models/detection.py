"""
Detection models for object detector output.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned box in source-frame pixel coordinates.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width in pixels.
        height: Box height in pixels.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def distance_to(self, other: "BoundingBox") -> float:
        """Euclidean distance between the two box centers."""
        (ax, ay), (bx, by) = self.center, other.center
        return math.hypot(ax - bx, ay - by)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from corner coordinates."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class RawDetection:
    """
    One labeled, scored box returned by the detector for a single frame.

    Attributes:
        label: Class name reported by the detector (e.g. "person", "cell phone").
        confidence: Detection score (0-1).
        box: Bounding box in pixel coordinates.
    """
    label: str
    confidence: float
    box: BoundingBox

    @property
    def center(self) -> Tuple[float, float]:
        return self.box.center

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "confidence": self.confidence,
            "box": self.box.to_dict(),
        }
