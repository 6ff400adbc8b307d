"""
Inference backend interface.

Backends return pixel-space RawDetections in the original frame coordinate
system, with the detector's own class names as labels.
"""

from __future__ import annotations

from typing import List, Protocol

import numpy as np

from models.detection import RawDetection


class InferenceBackend(Protocol):
    def detect(self, frame: np.ndarray) -> List[RawDetection]:
        ...
