"""
Layered configuration loading.

Order (later wins):
- config/default.yaml (checked in)
- config/config.yaml (local overrides)
- an explicit --config path
- environment variables (DATABASE_URL, PORT, HOST, LOG_LEVEL), after .env is loaded
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_DIR = "config"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# env var -> (section, key); section None means top level
ENV_OVERRIDES = {
    "DATABASE_URL": ("storage", "database_url"),
    "PORT": ("server", "port"),
    "HOST": ("server", "host"),
    "LOG_LEVEL": (None, "log_level"),
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Copy recognised environment variables into the config tree."""
    env = os.environ if environ is None else environ
    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if not value:
            continue
        if key == "port":
            try:
                value = int(value)
            except ValueError:
                logging.warning(f"Ignoring non-numeric {var}={value!r}")
                continue
        target = config.setdefault(section, {}) if section else config
        target[key] = value
    return config


def load_config(config_path: Optional[str] = None, config_dir: str = DEFAULT_CONFIG_DIR) -> Dict[str, Any]:
    """
    Load the effective configuration dictionary.

    Args:
        config_path: Optional explicit override file.
        config_dir: Directory holding default.yaml and config.yaml.
    """
    load_dotenv()

    merged = _read_yaml(os.path.join(config_dir, "default.yaml"))
    local_overrides_path = os.path.join(config_dir, "config.yaml")
    merged = _deep_merge(merged, _read_yaml(local_overrides_path))

    if config_path and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")
        merged = _deep_merge(merged, _read_yaml(config_path))

    return apply_env_overrides(merged)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Returns:
        Tuple of (is_valid, error_message)
    """
    storage = config.get("storage")
    if not isinstance(storage, dict):
        return False, "Missing required configuration section: storage"
    if not storage.get("database_url") or not isinstance(storage["database_url"], str):
        return False, "storage.database_url must be a non-empty string"

    for key in ("pool_size", "default_limit", "max_limit"):
        if key in storage and (not isinstance(storage[key], int) or storage[key] <= 0):
            return False, f"storage.{key} must be a positive integer"
    if "max_overflow" in storage and (not isinstance(storage["max_overflow"], int) or storage["max_overflow"] < 0):
        return False, "storage.max_overflow must be a non-negative integer"
    if storage.get("default_limit", 50) > storage.get("max_limit", 500):
        return False, "storage.default_limit must not exceed storage.max_limit"

    server = config.get("server", {}) or {}
    port = server.get("port", 3000)
    if not isinstance(port, int) or not (0 < port < 65536):
        return False, "server.port must be an integer between 1 and 65535"
    prefixes = server.get("api_prefixes", [])
    if not isinstance(prefixes, list) or not all(isinstance(p, str) and p.startswith("/") for p in prefixes):
        return False, "server.api_prefixes must be a list of paths starting with '/'"

    log_level = config.get("log_level", "INFO")
    if log_level not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None
