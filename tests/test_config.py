"""
Smoke tests for configuration loading and validation.
"""

import pytest

from models.config import Config
from runtime.config import apply_env_overrides, load_config, validate_config


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """A complete valid config passes validation."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    def test_missing_storage_section(self, valid_config):
        """Missing storage section fails validation."""
        del valid_config["storage"]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "storage" in error.lower()

    def test_empty_database_url(self, valid_config):
        valid_config["storage"]["database_url"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "database_url" in error

    @pytest.mark.parametrize("port", [0, 70000, "3000"])
    def test_invalid_port(self, valid_config, port):
        valid_config["server"]["port"] = port

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "port" in error

    def test_default_limit_above_max(self, valid_config):
        valid_config["storage"]["default_limit"] = 600

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "default_limit" in error

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "LOUD"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error

    def test_bad_prefix(self, valid_config):
        valid_config["server"]["api_prefixes"] = ["api"]

        is_valid, _ = validate_config(valid_config)

        assert is_valid is False


class TestEnvOverrides:

    def test_database_url_and_port(self):
        cfg = apply_env_overrides({}, {"DATABASE_URL": "postgresql://u:p@db/detections", "PORT": "8080"})

        assert cfg["storage"]["database_url"] == "postgresql://u:p@db/detections"
        assert cfg["server"]["port"] == 8080

    def test_non_numeric_port_ignored(self):
        cfg = apply_env_overrides({"server": {"port": 3000}}, {"PORT": "abc"})
        assert cfg["server"]["port"] == 3000

    def test_log_level(self):
        cfg = apply_env_overrides({"log_level": "INFO"}, {"LOG_LEVEL": "DEBUG"})
        assert cfg["log_level"] == "DEBUG"


class TestLoadConfig:

    def test_layering(self, tmp_path, monkeypatch):
        """default.yaml < config.yaml < explicit file < environment."""
        for var in ("DATABASE_URL", "PORT", "HOST", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.chdir(tmp_path)

        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "default.yaml").write_text(
            "storage:\n  database_url: sqlite:///default.sqlite\n  default_limit: 50\n"
            "server:\n  port: 3000\nlog_level: INFO\n"
        )
        (config_dir / "config.yaml").write_text("storage:\n  default_limit: 25\n")
        explicit = tmp_path / "extra.yaml"
        explicit.write_text("log_level: WARNING\n")
        monkeypatch.setenv("PORT", "4000")

        cfg = load_config(str(explicit), config_dir=str(config_dir))

        assert cfg["storage"]["database_url"] == "sqlite:///default.sqlite"
        assert cfg["storage"]["default_limit"] == 25
        assert cfg["log_level"] == "WARNING"
        assert cfg["server"]["port"] == 4000

    def test_missing_explicit_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"), config_dir=str(tmp_path))


class TestTypedConfig:

    def test_defaults(self):
        cfg = Config.from_dict({})

        assert cfg.server.port == 3000
        assert cfg.storage.default_limit == 50
        assert cfg.storage.database_url.startswith("sqlite:///")
        assert "/api" in cfg.server.api_prefixes

    def test_round_trip(self, valid_config):
        cfg = Config.from_dict(valid_config)
        again = Config.from_dict(cfg.to_dict())

        assert again == cfg
