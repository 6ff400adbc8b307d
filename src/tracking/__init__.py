"""
Tracking module.

Position history per person id and proximity-based identity assignment.
"""

from .tracker import PositionTracker, PositionRecord, PositionDelta
from .identity import ProximityIdentityMatcher

__all__ = ["PositionTracker", "PositionRecord", "PositionDelta", "ProximityIdentityMatcher"]
