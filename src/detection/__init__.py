"""
Classroom Monitor - Detection Module

Detector contract and person extraction from detector output.
"""

from .base import Detector, DetectorError
from .person import PersonExtractor

__all__ = ['Detector', 'DetectorError', 'PersonExtractor']
