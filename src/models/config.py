"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 30
    rotate: int = 0
    flip_horizontal: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 30),
            rotate=d.get("rotate", 0),
            flip_horizontal=d.get("flip_horizontal", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
        }


@dataclass
class DetectionConfig:
    """Detector configuration."""
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    person_label: str = "person"
    phone_labels: List[str] = field(default_factory=lambda: ["cell phone", "phone"])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            model=d.get("model", "yolov8n.pt"),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            person_label=d.get("person_label", "person"),
            phone_labels=d.get("phone_labels", ["cell phone", "phone"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "person_label": self.person_label,
            "phone_labels": self.phone_labels,
        }


@dataclass
class TrackingConfig:
    """
    Identity and position tracking configuration.

    identity_mode is "proximity" (nearest-center matching) or "index"
    (position in the frame's person list).
    """
    identity_mode: str = "proximity"
    match_distance_px: float = 150.0
    stale_after_ms: float = 3000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            identity_mode=d.get("identity_mode", "proximity"),
            match_distance_px=d.get("match_distance_px", 150.0),
            stale_after_ms=d.get("stale_after_ms", 3000.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity_mode": self.identity_mode,
            "match_distance_px": self.match_distance_px,
            "stale_after_ms": self.stale_after_ms,
        }


@dataclass
class BehaviorConfig:
    """Behavior rule thresholds."""
    phone_confidence_threshold: float = 0.5
    phone_max_distance_px: float = 200.0
    movement_threshold_px: float = 50.0
    movement_max_dt_ms: float = 500.0
    looking_down_shift_px: float = 30.0
    looking_down_min_dt_ms: float = 1000.0
    looking_down_confidence: float = 0.6

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BehaviorConfig":
        return cls(
            phone_confidence_threshold=d.get("phone_confidence_threshold", 0.5),
            phone_max_distance_px=d.get("phone_max_distance_px", 200.0),
            movement_threshold_px=d.get("movement_threshold_px", 50.0),
            movement_max_dt_ms=d.get("movement_max_dt_ms", 500.0),
            looking_down_shift_px=d.get("looking_down_shift_px", 30.0),
            looking_down_min_dt_ms=d.get("looking_down_min_dt_ms", 1000.0),
            looking_down_confidence=d.get("looking_down_confidence", 0.6),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phone_confidence_threshold": self.phone_confidence_threshold,
            "phone_max_distance_px": self.phone_max_distance_px,
            "movement_threshold_px": self.movement_threshold_px,
            "movement_max_dt_ms": self.movement_max_dt_ms,
            "looking_down_shift_px": self.looking_down_shift_px,
            "looking_down_min_dt_ms": self.looking_down_min_dt_ms,
            "looking_down_confidence": self.looking_down_confidence,
        }


@dataclass
class AlertConfig:
    """Alert window configuration."""
    retention_ms: float = 30000.0
    suppression_ms: float = 5000.0
    prune_interval_ms: float = 5000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AlertConfig":
        return cls(
            retention_ms=d.get("retention_ms", 30000.0),
            suppression_ms=d.get("suppression_ms", 5000.0),
            prune_interval_ms=d.get("prune_interval_ms", 5000.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "retention_ms": self.retention_ms,
            "suppression_ms": self.suppression_ms,
            "prune_interval_ms": self.prune_interval_ms,
        }


@dataclass
class SchedulerConfig:
    """Sampling scheduler configuration."""
    interval_ms: float = 200.0
    fps_window_ms: float = 1000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SchedulerConfig":
        return cls(
            interval_ms=d.get("interval_ms", 200.0),
            fps_window_ms=d.get("fps_window_ms", 1000.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interval_ms": self.interval_ms,
            "fps_window_ms": self.fps_window_ms,
        }


@dataclass
class WebConfig:
    """Web API configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    web: WebConfig = field(default_factory=WebConfig)
    room_name: Optional[str] = None
    log_path: str = "logs/classroom_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking") or {}),
            behavior=BehaviorConfig.from_dict(d.get("behavior") or {}),
            alerts=AlertConfig.from_dict(d.get("alerts") or {}),
            scheduler=SchedulerConfig.from_dict(d.get("scheduler") or {}),
            web=WebConfig.from_dict(d.get("web") or {}),
            room_name=d.get("room_name"),
            log_path=d.get("log_path", "logs/classroom_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        d: Dict[str, Any] = {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "tracking": self.tracking.to_dict(),
            "behavior": self.behavior.to_dict(),
            "alerts": self.alerts.to_dict(),
            "scheduler": self.scheduler.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
        if self.room_name is not None:
            d["room_name"] = self.room_name
        return d
