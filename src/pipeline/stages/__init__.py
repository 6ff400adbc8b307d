"""
Pipeline stages for the classroom monitor.

Each stage handles a specific part of the processing pipeline:
- track: person extraction, identity assignment, position tracking
- analyze: behavior rules and alert merging
"""

from .track import TrackStage, TrackResult, create_track_stage
from .analyze import AnalyzeStage, AnalyzeResult

__all__ = ["TrackStage", "TrackResult", "create_track_stage", "AnalyzeStage", "AnalyzeResult"]
