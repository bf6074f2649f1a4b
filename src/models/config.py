"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_DATABASE_URL = "sqlite:///data/detections.sqlite"
DEFAULT_API_PREFIXES = ["/api", "/.netlify/functions/api"]


@dataclass
class StorageConfig:
    """Relational store configuration."""
    database_url: str = DEFAULT_DATABASE_URL
    pool_size: int = 5
    max_overflow: int = 10
    pool_pre_ping: bool = True
    ssl_mode: Optional[str] = None
    default_limit: int = 50
    max_limit: int = 500

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StorageConfig":
        return cls(
            database_url=d.get("database_url", DEFAULT_DATABASE_URL),
            pool_size=d.get("pool_size", 5),
            max_overflow=d.get("max_overflow", 10),
            pool_pre_ping=d.get("pool_pre_ping", True),
            ssl_mode=d.get("ssl_mode"),
            default_limit=d.get("default_limit", 50),
            max_limit=d.get("max_limit", 500),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "database_url": self.database_url,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": self.pool_pre_ping,
            "default_limit": self.default_limit,
            "max_limit": self.max_limit,
        }
        if self.ssl_mode is not None:
            d["ssl_mode"] = self.ssl_mode
        return d


@dataclass
class ServerConfig:
    """HTTP listener configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    api_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_API_PREFIXES))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ServerConfig":
        return cls(
            host=d.get("host", "0.0.0.0"),
            port=int(d.get("port", 3000)),
            api_prefixes=d.get("api_prefixes", list(DEFAULT_API_PREFIXES)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "api_prefixes": self.api_prefixes,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            storage=StorageConfig.from_dict(d.get("storage", {}) or {}),
            server=ServerConfig.from_dict(d.get("server", {}) or {}),
            log_path=d.get("log_path"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "storage": self.storage.to_dict(),
            "server": self.server.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
