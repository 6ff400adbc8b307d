"""
Observation layer for frame sources.

Decouples where frames come from (camera, video file) from the analysis
pipeline. Each source implements ObservationSource and returns FrameData.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
]
