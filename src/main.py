"""
Detection queue service.

Accepts uploaded images over HTTP, queues them, and runs object detection on
them in a single background scheduler. Results are written as one JSON file
per job.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --host: Override server.host
    --port: Override server.port
"""

import os
import sys
import argparse
import logging
import threading
from typing import Any, Dict, Optional, Tuple

import uvicorn
import yaml

from algorithms.remap import RESIZE_MODES
from inference.onnx_backend import OnnxConfig, OnnxDetector
from models.config import Config
from ops.errors import CleanupFailure
from ops.logging import setup_logging
from pipeline.scheduler import create_scheduler_from_config
from runtime.context import RuntimeContext
from web.app import create_app


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Required top-level sections
    required_sections = ['detector', 'storage', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Validate detector settings
    detector = config.get('detector', {}) or {}
    model_path = detector.get('model_path')
    if not isinstance(model_path, str) or not model_path:
        return False, "detector.model_path is required"
    for key in ('input_width', 'input_height', 'num_threads'):
        if key in detector and not _is_positive_int(detector[key]):
            return False, f"detector.{key} must be a positive integer"
    for key in ('conf_threshold', 'iou_threshold'):
        if key in detector:
            value = detector[key]
            if not _is_number(value) or not (0 <= value <= 1):
                return False, f"detector.{key} must be between 0 and 1"
    if 'positive_class_index' in detector:
        idx = detector['positive_class_index']
        if not isinstance(idx, int) or isinstance(idx, bool) or idx < 0:
            return False, "detector.positive_class_index must be a non-negative integer"
    for key in ('mean', 'std'):
        if key in detector:
            values = detector[key]
            if not isinstance(values, list) or len(values) != 3 or not all(_is_number(v) for v in values):
                return False, f"detector.{key} must be a list of 3 numbers"
    if 'std' in detector and any(v == 0 for v in detector['std']):
        return False, "detector.std values must be non-zero"
    if detector.get('resize_mode', 'fill') not in RESIZE_MODES:
        return False, f"detector.resize_mode must be one of: {', '.join(RESIZE_MODES)}"

    # Optional queue/scheduler settings
    queue = config.get('queue', {}) or {}
    if 'capacity' in queue and not _is_positive_int(queue['capacity']):
        return False, "queue.capacity must be a positive integer"

    scheduler = config.get('scheduler', {}) or {}
    if 'poll_interval_ms' in scheduler:
        interval = scheduler['poll_interval_ms']
        if not _is_number(interval) or interval <= 0:
            return False, "scheduler.poll_interval_ms must be a positive number"

    # Validate storage settings
    storage = config.get('storage', {}) or {}
    for key in ('staging_dir', 'results_dir'):
        if key not in storage:
            return False, f"Missing storage.{key}"
        if not isinstance(storage[key], str) or not storage[key]:
            return False, f"storage.{key} must be a non-empty string"

    # Optional server settings
    server = config.get('server', {}) or {}
    if 'port' in server:
        port = server['port']
        if not _is_positive_int(port) or port > 65535:
            return False, "server.port must be between 1 and 65535"
    if 'max_upload_bytes' in server and not _is_positive_int(server['max_upload_bytes']):
        return False, "server.max_upload_bytes must be a positive integer"

    # Validate log settings
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def start_web_server(ctx: RuntimeContext) -> threading.Thread:
    """Serve the HTTP API from a daemon thread."""
    server_cfg = ctx.config.server
    app = create_app(ctx)

    def _run():
        # log_config=None: uvicorn records go through the root handlers from setup_logging.
        uvicorn.run(
            app,
            host=server_cfg.host,
            port=server_cfg.port,
            log_level=ctx.config.log_level.lower(),
            log_config=None,
        )

    thread = threading.Thread(target=_run, name="web-server", daemon=True)
    thread.start()
    logging.info(f"Web server listening on http://{server_cfg.host}:{server_cfg.port}")
    return thread


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Detection Queue Service')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--host', type=str, default=None,
                        help='Override server.host')
    parser.add_argument('--port', type=int, default=None,
                        help='Override server.port')
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port

    setup_logging(config.log_path, config.log_level)
    logging.info("Starting Detection Queue Service")

    if not os.path.exists(config.detector.model_path):
        logging.error(f"Unable to find model at {config.detector.model_path}")
        sys.exit(1)

    try:
        detector = OnnxDetector(
            OnnxConfig(
                model_path=config.detector.model_path,
                num_threads=config.detector.num_threads,
            )
        )
    except Exception as e:
        logging.error(f"Problem creating ONNX session: {e}")
        sys.exit(1)

    ctx = RuntimeContext.from_config(config)
    ctx.scheduler = create_scheduler_from_config(
        config, ctx.queue, detector, ctx.staging, ctx.sink
    )

    start_web_server(ctx)

    try:
        ctx.scheduler.run()
    except CleanupFailure:
        logging.critical("Unrecoverable staging cleanup failure, shutting down")
        sys.exit(1)

    logging.info("Detection Queue Service stopped")


if __name__ == "__main__":
    main()
