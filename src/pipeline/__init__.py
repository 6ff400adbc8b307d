"""
Pipeline module for the classroom monitor.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources (SamplingScheduler)
- Detection, person extraction and position tracking (TrackStage)
- Behavior analysis and alert merging (AnalyzeStage)
"""

from .engine import PipelineEngine, PipelineConfig, FrameResult, create_engine_from_config
from .scheduler import SamplingScheduler, AlertPruner, RollingRate, create_scheduler_from_config
from .stages.track import TrackStage, create_track_stage
from .stages.analyze import AnalyzeStage

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "FrameResult",
    "create_engine_from_config",
    "SamplingScheduler",
    "AlertPruner",
    "RollingRate",
    "create_scheduler_from_config",
    "TrackStage",
    "create_track_stage",
    "AnalyzeStage",
]
