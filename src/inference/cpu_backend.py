"""
CPU inference backend.

Uses an Ultralytics YOLO model trained on COCO, whose class names include
"person" and "cell phone".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from detection.base import Detector, DetectorError
from models.detection import BoundingBox, RawDetection


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    class_name_overrides: Optional[Dict[int, str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CpuYoloConfig":
        return cls(
            model=d.get("model", "yolov8n.pt"),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            class_name_overrides=d.get("class_name_overrides"),
        )


def _to_numpy(t) -> np.ndarray:
    return t.cpu().numpy() if hasattr(t, "cpu") else np.asarray(t)


class UltralyticsCpuBackend(Detector):
    def __init__(self, cfg: CpuYoloConfig, model: Any = None):
        self.cfg = cfg
        if model is None:
            try:
                from ultralytics import YOLO  # type: ignore
            except Exception as e:  # pragma: no cover
                raise ImportError(
                    "Ultralytics is not installed. Install with `pip install ultralytics`."
                ) from e
            model = YOLO(cfg.model)
        self._model = model

    def detect(self, frame: np.ndarray) -> List[RawDetection]:
        try:
            results = self._model.predict(
                source=frame,
                conf=self.cfg.conf_threshold,
                iou=self.cfg.iou_threshold,
                verbose=False,
            )
        except Exception as e:
            raise DetectorError(f"YOLO inference failed: {e}") from e

        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = _to_numpy(boxes.xyxy)
        conf = _to_numpy(boxes.conf)
        cls = _to_numpy(boxes.cls)

        overrides = self.cfg.class_name_overrides or {}
        out: List[RawDetection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            label = overrides.get(class_id) or names.get(class_id) or str(class_id)
            out.append(
                RawDetection(
                    label=label,
                    confidence=float(c),
                    box=BoundingBox.from_xyxy(float(x1), float(y1), float(x2), float(y2)),
                )
            )

        return out
