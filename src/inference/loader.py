"""
Model loading with coarse progress reporting.

Progress moves through discrete milestones rather than continuously:
0 (idle/failed) -> 10 (started) -> 30 (runtime ready) -> 100 (loaded).
A failed load reports 0 and stays not-loaded; there is no automatic retry,
the caller has to invoke load() again.
"""

from __future__ import annotations

import importlib
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .backend import InferenceBackend
from .cpu_backend import CpuYoloConfig, UltralyticsCpuBackend


PROGRESS_IDLE = 0
PROGRESS_STARTED = 10
PROGRESS_RUNTIME_READY = 30
PROGRESS_LOADED = 100


class ModelLoader:
    """
    Loads a detector backend, optionally on a background thread.

    Example:
        loader = ModelLoader(lambda: UltralyticsCpuBackend(cfg), on_loaded=engine.attach_detector)
        loader.load_async()
    """

    def __init__(
        self,
        factory: Callable[[], InferenceBackend],
        prepare_runtime: Optional[Callable[[], None]] = None,
        on_loaded: Optional[Callable[[InferenceBackend], None]] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ):
        """
        Args:
            factory: Builds the backend (loads weights).
            prepare_runtime: Optional step run before the factory (e.g. importing the ML runtime).
            on_loaded: Called with the backend after a successful load.
            on_progress: Called with each progress milestone.
        """
        self._factory = factory
        self._prepare_runtime = prepare_runtime
        self._on_loaded = on_loaded
        self._on_progress = on_progress
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

        self.progress = PROGRESS_IDLE
        self.backend: Optional[InferenceBackend] = None
        self.error: Optional[str] = None

    @property
    def is_loaded(self) -> bool:
        return self.backend is not None

    @property
    def is_loading(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _set_progress(self, value: int) -> None:
        self.progress = value
        if self._on_progress:
            try:
                self._on_progress(value)
            except Exception as e:
                logging.warning(f"Progress callback error: {e}")

    def load(self) -> Optional[InferenceBackend]:
        """
        Load the backend synchronously.

        The backend only counts as loaded once on_loaded has accepted it.

        Returns:
            The backend, or None if loading failed (see `error`).
        """
        with self._lock:
            if self.backend is not None:
                return self.backend

            self.error = None
            try:
                self._set_progress(PROGRESS_STARTED)
                if self._prepare_runtime is not None:
                    self._prepare_runtime()
                self._set_progress(PROGRESS_RUNTIME_READY)

                backend = self._factory()
                if self._on_loaded:
                    self._on_loaded(backend)
            except Exception as e:
                self.error = str(e)
                self._set_progress(PROGRESS_IDLE)
                logging.error(f"Error loading detection model: {e}")
                return None

            self.backend = backend
            self._set_progress(PROGRESS_LOADED)
            logging.info(f"Detection model loaded: {type(backend).__name__}")
            return backend

    def load_async(self) -> threading.Thread:
        """Start load() on a daemon thread and return the thread."""
        if self.is_loading:
            return self._thread  # type: ignore[return-value]
        self._thread = threading.Thread(target=self.load, name="model-loader", daemon=True)
        self._thread.start()
        return self._thread

    def status(self) -> Dict[str, Any]:
        return {
            "loaded": self.is_loaded,
            "progress": self.progress,
            "error": self.error,
        }


def import_runtime(modules: List[str]) -> Callable[[], None]:
    """Build a prepare_runtime step that imports the given modules."""
    def _prepare() -> None:
        for name in modules:
            importlib.import_module(name)
    return _prepare


def create_loader_from_config(
    detection_cfg: Dict[str, Any],
    on_loaded: Optional[Callable[[InferenceBackend], None]] = None,
) -> ModelLoader:
    """
    Factory for the YOLO CPU backend loader.

    Args:
        detection_cfg: The "detection" section of the config.
        on_loaded: Called with the backend once loaded (e.g. engine.attach_detector).
    """
    cfg = CpuYoloConfig.from_dict(detection_cfg or {})
    return ModelLoader(
        factory=lambda: UltralyticsCpuBackend(cfg),
        prepare_runtime=import_runtime(["ultralytics"]),
        on_loaded=on_loaded,
    )
