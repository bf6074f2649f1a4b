"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.config import StorageConfig  # noqa: E402
from storage.database import Database  # noqa: E402
from web.router import Router  # noqa: E402
from web.services.detection_service import DetectionService  # noqa: E402


def make_objects(*pairs):
    """Build detector output from (class, score) pairs."""
    return [
        {"class": label, "score": score, "bbox": [10 * i, 20 * i, 50, 80]}
        for i, (label, score) in enumerate(pairs)
    ]


@pytest.fixture
def storage_config(tmp_path):
    """Storage config pointing at a fresh SQLite file."""
    db_path = tmp_path / "data" / "detections.sqlite"
    return StorageConfig(database_url=f"sqlite:///{db_path}")


@pytest.fixture
def database(storage_config):
    """An initialized database."""
    db = Database(storage_config)
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def service(database):
    return DetectionService(db=database)


@pytest.fixture
def router(service):
    return Router(service, prefixes=["/api", "/.netlify/functions/api"])


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "storage": {
            "database_url": "sqlite:///data/test.sqlite",
            "pool_size": 5,
            "max_overflow": 10,
            "default_limit": 50,
            "max_limit": 500,
        },
        "server": {
            "host": "127.0.0.1",
            "port": 3000,
            "api_prefixes": ["/api"],
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
