"""
Detector interface.

The object detector is an external collaborator. Whatever model backs it,
the pipeline only relies on this contract: one call per frame returning
labeled, scored boxes in the frame's pixel coordinates.
"""

from __future__ import annotations

from typing import List

import numpy as np

from models.detection import RawDetection


class DetectorError(RuntimeError):
    """Raised when a detector backend cannot produce detections for a frame."""


class Detector:
    """Detector interface returning detections in pixel-space."""

    def detect(self, frame: np.ndarray) -> List[RawDetection]:
        raise NotImplementedError
