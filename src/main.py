"""
Classroom monitor: suspicious behavior detection over a live camera feed.

Samples frames from the camera at a throttled rate, runs object detection,
tracks per-person positions and raises deduplicated behavior alerts that the
web API exposes to the dashboard.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --no-web: Run without the HTTP API
"""

import os
import sys
import argparse
import logging
import threading
import time
from typing import Dict, Any, Tuple, Optional

import uvicorn
import yaml

from inference.loader import create_loader_from_config
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from pipeline.scheduler import create_scheduler_from_config, monotonic_ms
from runtime.context import create_context_from_config
from detection.person import IDENTITY_MODES
from web.app import create_app


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        base_cfg: Dict[str, Any] = _read_yaml(base_path) if os.path.exists(base_path) else {}

        local_overrides_path = os.path.join(config_dir, "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            local_cfg = _read_yaml(local_overrides_path)

        merged = _deep_merge(base_cfg, local_cfg)

        # Explicit path last, unless it is the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_positive(section: Dict[str, Any], name: str, key: str, allow_zero: bool = False) -> Optional[str]:
    if key not in section:
        return None
    value = section[key]
    if not _is_number(value) or value < 0 or (value == 0 and not allow_zero):
        kind = "a non-negative" if allow_zero else "a positive"
        return f"{name}.{key} must be {kind} number"
    return None


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Camera
    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (URL/file)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"

    if 'resolution' in camera:
        res = camera['resolution']
        if not isinstance(res, list) or len(res) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution values must be positive integers"

    if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
        return False, "camera.fps must be a positive integer"

    if camera.get('rotate', 0) not in (0, 90, 180, 270):
        return False, "camera.rotate must be one of: 0, 90, 180, 270"

    # Detection
    detection = config.get('detection') or {}
    if 'model' in detection and (not isinstance(detection['model'], str) or not detection['model']):
        return False, "detection.model must be a non-empty string"
    for key in ('conf_threshold', 'iou_threshold'):
        if key in detection:
            v = detection[key]
            if not _is_number(v) or not (0 <= v <= 1):
                return False, f"detection.{key} must be between 0 and 1"
    if 'phone_labels' in detection:
        labels = detection['phone_labels']
        if not isinstance(labels, list) or not all(isinstance(x, str) for x in labels):
            return False, "detection.phone_labels must be a list of strings"

    # Tracking
    tracking = config.get('tracking') or {}
    if tracking.get('identity_mode', 'proximity') not in IDENTITY_MODES:
        return False, f"tracking.identity_mode must be one of: {', '.join(IDENTITY_MODES)}"
    for key in ('match_distance_px', 'stale_after_ms'):
        err = _check_positive(tracking, 'tracking', key)
        if err:
            return False, err

    # Behavior rules
    behavior = config.get('behavior') or {}
    for key in ('phone_max_distance_px', 'movement_max_dt_ms'):
        err = _check_positive(behavior, 'behavior', key)
        if err:
            return False, err
    for key in ('movement_threshold_px', 'looking_down_shift_px', 'looking_down_min_dt_ms'):
        err = _check_positive(behavior, 'behavior', key, allow_zero=True)
        if err:
            return False, err
    for key in ('phone_confidence_threshold', 'looking_down_confidence'):
        if key in behavior:
            v = behavior[key]
            if not _is_number(v) or not (0 <= v <= 1):
                return False, f"behavior.{key} must be between 0 and 1"

    # Alerts
    alerts = config.get('alerts') or {}
    for key in ('retention_ms', 'suppression_ms', 'prune_interval_ms'):
        err = _check_positive(alerts, 'alerts', key)
        if err:
            return False, err

    # Scheduler
    scheduler = config.get('scheduler') or {}
    err = _check_positive(scheduler, 'scheduler', 'interval_ms', allow_zero=True)
    if err:
        return False, err
    err = _check_positive(scheduler, 'scheduler', 'fps_window_ms')
    if err:
        return False, err

    # Web
    web = config.get('web') or {}
    if 'port' in web and (not isinstance(web['port'], int) or not (0 < web['port'] < 65536)):
        return False, "web.port must be an integer between 1 and 65535"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Classroom Monitor - suspicious behavior detection')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--no-web', action='store_true',
                        help='Disable the HTTP API')
    args = parser.parse_args()

    config = load_config(args.config)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting Classroom Monitor")

    ctx = create_context_from_config(config)
    ctx.start_session(monotonic_ms())

    engine = create_engine_from_config(config, ctx)
    loader = create_loader_from_config(config.get('detection') or {}, on_loaded=engine.attach_detector)
    source = OpenCVSource(OpenCVSourceConfig.from_camera_config(config["camera"]))
    scheduler = create_scheduler_from_config(config, engine, source)

    web_cfg = config.get('web') or {}
    if web_cfg.get('enabled', True) and not args.no_web:
        app = create_app(ctx, loader=loader, scheduler=scheduler)

        def run_web_app():
            uvicorn.run(
                app,
                host=web_cfg.get('host', '0.0.0.0'),
                port=web_cfg.get('port', 5000),
                log_level="info",
            )

        web_thread = threading.Thread(target=run_web_app, name="web", daemon=True)
        web_thread.start()
        logging.info(f"Web API started on port {web_cfg.get('port', 5000)}")

    try:
        loader.load_async()
        scheduler.start()
        while scheduler.is_running:
            time.sleep(1.0)
        logging.warning("Scheduler worker exited")
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    except Exception as e:
        logging.error(f"Error starting pipeline: {e}")
        raise
    finally:
        scheduler.stop()
        session = ctx.session()
        if session is not None:
            now = monotonic_ms()
            session.close(now)
            logging.info(
                f"Session summary: duration={session.duration_s(now):.0f}s, "
                f"alerts={session.total_alerts}, peak_persons={session.peak_person_count}"
            )
        logging.info("Classroom Monitor stopped")


if __name__ == "__main__":
    main()
