"""Tests for configuration module."""

import os
from unittest.mock import patch

import pytest

from igdb_proxy.config import (
    LoggingConfig,
    ServerConfig,
    Settings,
    TwitchConfig,
)

CREDENTIALS = {
    "TWITCH_CLIENT_ID": "test_client_id",
    "TWITCH_CLIENT_SECRET": "test_client_secret",
}


class TestTwitchConfig:
    """Tests for Twitch configuration."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, CREDENTIALS):
            config = TwitchConfig()

        assert config.client_id == "test_client_id"
        assert config.token_url == "https://id.twitch.tv/oauth2/token"
        assert config.api_url == "https://api.igdb.com/v4"
        assert config.timeout_seconds == 30

    def test_client_id_required(self) -> None:
        """Test that the client ID is required."""
        with (
            patch.dict(os.environ, {"TWITCH_CLIENT_SECRET": "secret"}, clear=True),
            pytest.raises(ValueError),
        ):
            TwitchConfig()

    def test_client_secret_required(self) -> None:
        """Test that the client secret is required."""
        with (
            patch.dict(os.environ, {"TWITCH_CLIENT_ID": "id"}, clear=True),
            pytest.raises(ValueError),
        ):
            TwitchConfig()

    def test_blank_credentials_rejected(self) -> None:
        """Test that whitespace-only credentials count as missing."""
        with (
            patch.dict(
                os.environ,
                {"TWITCH_CLIENT_ID": "   ", "TWITCH_CLIENT_SECRET": "secret"},
                clear=True,
            ),
            pytest.raises(ValueError, match="client_id must not be blank"),
        ):
            TwitchConfig()

    def test_client_secret_is_secret(self) -> None:
        """Test that the client secret is stored as secret."""
        with patch.dict(os.environ, CREDENTIALS):
            config = TwitchConfig()

        assert "test_client_secret" not in repr(config.client_secret)
        assert config.client_secret.get_secret_value() == "test_client_secret"

    def test_api_url_trailing_slash_stripped(self) -> None:
        with patch.dict(os.environ, {**CREDENTIALS, "TWITCH_API_URL": "http://localhost:9000/v4/"}):
            config = TwitchConfig()

        assert config.api_url == "http://localhost:9000/v4"


class TestServerConfig:
    """Tests for server configuration."""

    def test_default_port(self) -> None:
        """Test that the port defaults to 3000."""
        with patch.dict(os.environ, {}, clear=True):
            config = ServerConfig()

        assert config.port == 3000

    def test_port_from_env(self) -> None:
        with patch.dict(os.environ, {"PORT": "8080"}):
            config = ServerConfig()

        assert config.port == 8080

    def test_port_bounds(self) -> None:
        with patch.dict(os.environ, {"PORT": "70000"}), pytest.raises(ValueError):
            ServerConfig()


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_valid_levels(self) -> None:
        """Test valid log levels."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            with patch.dict(os.environ, {"LOG_LEVEL": level}):
                config = LoggingConfig()
                assert config.level == level

    def test_valid_formats(self) -> None:
        """Test valid log formats."""
        for fmt in ["json", "console"]:
            with patch.dict(os.environ, {"LOG_FORMAT": fmt}):
                config = LoggingConfig()
                assert config.format == fmt


class TestSettings:
    """Tests for aggregated settings."""

    def test_sections_loaded(self) -> None:
        with patch.dict(os.environ, {**CREDENTIALS, "PORT": "4000"}, clear=True):
            settings = Settings()

        assert settings.twitch.client_id == "test_client_id"
        assert settings.server.port == 4000
        assert settings.is_production is False

    def test_missing_credentials_refuse_to_load(self) -> None:
        with patch.dict(os.environ, {}, clear=True), pytest.raises(ValueError):
            Settings()
