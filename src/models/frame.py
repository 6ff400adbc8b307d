"""
FrameData model for frames pulled from a video source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class FrameData:
    """
    A captured frame plus its capture metadata.

    Attributes:
        frame: Image as a numpy array (BGR).
        width: Frame width in pixels.
        height: Frame height in pixels.
        captured_at_ms: Wall-clock capture time in milliseconds.
        frame_index: Sequential frame number since the source was opened.
        source: Identifier of the producing source.
    """
    frame: np.ndarray
    width: int
    height: int
    captured_at_ms: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        captured_at_ms: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Wrap a numpy image, reading width/height from its shape."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            captured_at_ms=captured_at_ms,
            frame_index=frame_index,
            source=source,
        )
