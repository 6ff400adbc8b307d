"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.detection import BoundingBox, RawDetection  # noqa: E402
from models.frame import FrameData  # noqa: E402
from models.person import TrackedPerson  # noqa: E402


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 0.0):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock(start_ms=10_000.0)


def _box_around(cx: float, cy: float, w: float, h: float) -> BoundingBox:
    return BoundingBox(x=cx - w / 2, y=cy - h / 2, width=w, height=h)


@pytest.fixture
def person_det():
    """Factory: a "person" detection centered at (cx, cy)."""
    def _make(cx: float, cy: float, conf: float = 0.9, w: float = 100.0, h: float = 200.0):
        return RawDetection(label="person", confidence=conf, box=_box_around(cx, cy, w, h))
    return _make


@pytest.fixture
def phone_det():
    """Factory: a "cell phone" detection centered at (cx, cy)."""
    def _make(cx: float, cy: float, conf: float = 0.8, label: str = "cell phone"):
        return RawDetection(label=label, confidence=conf, box=_box_around(cx, cy, 20.0, 40.0))
    return _make


@pytest.fixture
def person():
    """Factory: a TrackedPerson centered at (cx, cy)."""
    def _make(person_id: str, cx: float, cy: float, **kwargs):
        return TrackedPerson(id=person_id, box=_box_around(cx, cy, 100.0, 200.0), confidence=0.9, **kwargs)
    return _make


@pytest.fixture
def frame_data():
    def _make(index: int = 1):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        return FrameData.from_numpy(frame, captured_at_ms=0.0, frame_index=index, source="test")
    return _make


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30

detection:
  model: "yolov8n.pt"
  conf_threshold: 0.25

alerts:
  retention_ms: 30000
  suppression_ms: 5000

scheduler:
  interval_ms: 200

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
        },
        "detection": {
            "model": "yolov8n.pt",
            "conf_threshold": 0.25,
            "iou_threshold": 0.45,
            "phone_labels": ["cell phone", "phone"],
        },
        "tracking": {
            "identity_mode": "proximity",
            "match_distance_px": 150,
            "stale_after_ms": 3000,
        },
        "behavior": {
            "phone_confidence_threshold": 0.5,
            "phone_max_distance_px": 200,
            "movement_threshold_px": 50,
            "movement_max_dt_ms": 500,
            "looking_down_shift_px": 30,
            "looking_down_min_dt_ms": 1000,
        },
        "alerts": {
            "retention_ms": 30000,
            "suppression_ms": 5000,
            "prune_interval_ms": 5000,
        },
        "scheduler": {
            "interval_ms": 200,
            "fps_window_ms": 1000,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
