"""
Detection log API server.

Receives object-detection batches from the browser client, stores them with
their summary statistics and serves history and aggregate stats.

Usage:
    python src/main.py --config config/config.yaml --port 3000

Arguments:
    --config: Path to an extra configuration file (overrides)
    --host: Listen address (overrides config and HOST)
    --port: Listen port (overrides config and PORT)
"""

import argparse
import logging
import sys

import uvicorn
import yaml

from models.config import Config
from models.errors import StorageError
from ops.logging import setup_logging
from runtime.config import load_config, validate_config
from runtime.context import build_context
from web.app import create_app

ENDPOINTS = [
    ("GET", "/api/health", "Check database connection"),
    ("POST", "/api/detections", "Save a detection batch"),
    ("GET", "/api/detections", "Detection history"),
    ("GET", "/api/stats", "Statistics"),
    ("DELETE", "/api/detections", "Delete all detections"),
]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detection log API server")
    parser.add_argument("--config", default=None, help="Path to an override configuration file")
    parser.add_argument("--host", default=None, help="Listen address")
    parser.add_argument("--port", type=int, default=None, help="Listen port")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        raw_config = load_config(args.config)
    except (OSError, yaml.YAMLError) as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 1

    if args.host:
        raw_config.setdefault("server", {})["host"] = args.host
    if args.port:
        raw_config.setdefault("server", {})["port"] = args.port

    is_valid, error = validate_config(raw_config)
    if not is_valid:
        print(f"Invalid configuration: {error}", file=sys.stderr)
        return 1

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)

    try:
        context = build_context(config)
    except StorageError as e:
        logging.error(f"Cannot start: {e.message} ({e.details})")
        return 1
    app = create_app(context.router)

    logging.info(f"Detection log API starting on {config.server.host}:{config.server.port}")
    for method, path, desc in ENDPOINTS:
        logging.info(f"  {method:<7}{path:<20}{desc}")

    try:
        uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)
    finally:
        context.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
