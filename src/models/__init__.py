"""
Typed models for the classroom monitor.

Detector output, per-frame person records, behavior events, statistics
and configuration.
"""

from .frame import FrameData
from .detection import BoundingBox, RawDetection
from .person import TrackedPerson
from .behavior import BehaviorEvent, BehaviorType
from .stats import DetectionStats, MonitoringSession
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    TrackingConfig,
    BehaviorConfig,
    AlertConfig,
    SchedulerConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "BoundingBox",
    "RawDetection",
    "TrackedPerson",
    # Behavior
    "BehaviorEvent",
    "BehaviorType",
    # Stats
    "DetectionStats",
    "MonitoringSession",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "TrackingConfig",
    "BehaviorConfig",
    "AlertConfig",
    "SchedulerConfig",
    "WebConfig",
]
