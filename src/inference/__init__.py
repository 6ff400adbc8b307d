"""
Detector backends and model loading.
"""

from .backend import InferenceBackend
from .loader import ModelLoader, create_loader_from_config

__all__ = ["InferenceBackend", "ModelLoader", "create_loader_from_config"]
