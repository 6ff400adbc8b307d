"""
Behavior analytics: rule-based behavior events and the rolling alert set.
"""

from .behavior import BehaviorAnalyzer, create_behavior_analyzer_from_config
from .alerts import AlertAggregator

__all__ = ["BehaviorAnalyzer", "create_behavior_analyzer_from_config", "AlertAggregator"]
