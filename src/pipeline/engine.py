"""
Pipeline engine for the classroom monitor.

This module runs one detect -> extract -> track -> analyze -> merge cycle
per frame. Scheduling (how often a cycle runs) lives in
pipeline.scheduler; the engine only processes the frame it is given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from analytics.behavior import create_behavior_analyzer_from_config
from detection.base import Detector
from models.behavior import BehaviorEvent
from models.detection import RawDetection
from models.frame import FrameData
from models.person import TrackedPerson
from runtime.context import PipelineContext
from pipeline.stages.analyze import AnalyzeStage
from pipeline.stages.track import TrackStage, create_track_stage


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        stats_log_interval_ms: Pipeline clock ms between status log messages.
    """
    stats_log_interval_ms: float = 60000.0


@dataclass
class FrameResult:
    """Everything one pipeline cycle produced."""
    frame_index: int
    detections: List[RawDetection] = field(default_factory=list)
    persons: List[TrackedPerson] = field(default_factory=list)
    events: List[BehaviorEvent] = field(default_factory=list)
    accepted: List[BehaviorEvent] = field(default_factory=list)


class PipelineEngine:
    """
    Runs the per-frame analysis pipeline against a PipelineContext.

    This engine:
    - Calls the detector on the frame (failures skip the frame)
    - Runs TrackStage (persons + tracker deltas)
    - Runs AnalyzeStage (behavior events + alert merge)
    - Publishes persons/stats/session to the context

    Example:
        engine = PipelineEngine(ctx, track_stage, analyze_stage, PipelineConfig())
        engine.attach_detector(detector)
        result = engine.process(frame_data, now_ms)
    """

    def __init__(
        self,
        ctx: PipelineContext,
        track_stage: TrackStage,
        analyze_stage: AnalyzeStage,
        config: Optional[PipelineConfig] = None,
        detector: Optional[Detector] = None,
    ):
        self.ctx = ctx
        self._track_stage = track_stage
        self._analyze_stage = analyze_stage
        self.config = config or PipelineConfig()
        self._detector = detector
        self._callbacks: List[Callable[[FrameData, FrameResult], None]] = []
        self._last_stats_log_ms: Optional[float] = None

    @property
    def is_ready(self) -> bool:
        """Whether a detector is attached (the model has loaded)."""
        return self._detector is not None

    def attach_detector(self, detector: Optional[Detector]) -> None:
        self._detector = detector
        if detector is not None:
            logging.info(f"Detector attached: {type(detector).__name__}")

    def add_callback(self, callback: Callable[[FrameData, FrameResult], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, result) as arguments.
        """
        self._callbacks.append(callback)

    def process(self, frame_data: FrameData, now_ms: float) -> Optional[FrameResult]:
        """
        Process a single frame.

        Returns:
            The FrameResult, or None when the frame was skipped (no detector,
            or the detector raised). A skipped frame leaves all state unchanged.
        """
        if self._detector is None:
            return None

        try:
            detections = list(self._detector.detect(frame_data.frame))
        except Exception as e:
            self.ctx.consecutive_failures += 1
            logging.warning(
                f"Detection failed on frame {frame_data.frame_index} "
                f"({self.ctx.consecutive_failures} consecutive): {e}"
            )
            return None

        self.ctx.consecutive_failures = 0
        self.ctx.frame_count += 1

        tracked = self._track_stage.process(detections, now_ms)
        analysis = self._analyze_stage.process(
            detections, tracked.persons, tracked.deltas, now_ms
        )

        self.ctx.publish_frame(
            tracked.persons,
            suspicious_count=len(analysis.events),
            accepted_alerts=len(analysis.accepted),
            now_ms=now_ms,
        )

        if self.ctx.frame_count % 30 == 0 and tracked.persons:
            ids = [p.id for p in tracked.persons]
            logging.debug(f"[TRACK] frame={self.ctx.frame_count} person_ids={ids}")

        result = FrameResult(
            frame_index=frame_data.frame_index,
            detections=detections,
            persons=tracked.persons,
            events=analysis.events,
            accepted=analysis.accepted,
        )

        for callback in self._callbacks:
            try:
                callback(frame_data, result)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

        self._handle_periodic_tasks(now_ms)
        return result

    def _handle_periodic_tasks(self, now_ms: float) -> None:
        """Log statistics periodically."""
        if self._last_stats_log_ms is None:
            self._last_stats_log_ms = now_ms
            return
        if now_ms - self._last_stats_log_ms < self.config.stats_log_interval_ms:
            return

        stats = self.ctx.stats()
        logging.info(
            f"Pipeline stats: frames={self.ctx.frame_count}, "
            f"persons={stats.total_detected}, fps={stats.fps}, "
            f"active_alerts={len(self.ctx.alerts)}, tracked_ids={len(self.ctx.tracker)}"
        )
        self._last_stats_log_ms = now_ms


def create_engine_from_config(
    config: Dict[str, Any],
    ctx: PipelineContext,
    detector: Optional[Detector] = None,
    on_alert: Optional[Callable[[BehaviorEvent], None]] = None,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the config dict.

    Args:
        config: Full application config dict.
        ctx: PipelineContext holding tracker and alert set.
        detector: Detector, if already loaded; can be attached later.
        on_alert: Optional callback for each accepted alert.
    """
    track_stage = create_track_stage(
        config.get("detection", {}) or {},
        config.get("tracking", {}) or {},
        ctx.tracker,
    )
    analyzer = create_behavior_analyzer_from_config(
        config.get("behavior", {}) or {},
        config.get("detection", {}) or {},
    )
    analyze_stage = AnalyzeStage(analyzer, ctx.alerts, on_alert=on_alert)

    return PipelineEngine(ctx, track_stage, analyze_stage, PipelineConfig(), detector=detector)
