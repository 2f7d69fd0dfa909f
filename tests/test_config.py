"""
Tests for configuration module.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from graphweaver.config import (
    GeneratorConfig,
    MintConfig,
    ResolverConfig,
    RetryConfig,
    SearchConfig,
    Settings,
)


class TestSettings:
    """Test the Settings configuration class."""

    def test_default_settings(self, monkeypatch):
        """Test default settings initialization."""
        for name in (
            "GRAPHWEAVER_MODEL",
            "GRAPHWEAVER_MAX_ATTEMPTS",
            "GRAPHWEAVER_SEARCH_STRATEGY",
            "GRAPHWEAVER_STORE_PATH",
            "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.model == "gpt-4o-mini"
        assert settings.max_attempts == 3
        assert settings.search_strategy == "occurrence"
        assert settings.store_path == Path("db.ttl")
        assert settings.log_level == "INFO"

    def test_settings_from_env(self, monkeypatch):
        """Test loading settings from environment variables."""
        monkeypatch.setenv("GRAPHWEAVER_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("GRAPHWEAVER_SEARCH_STRATEGY", "index")
        monkeypatch.setenv("GRAPHWEAVER_SEARCH_LIMIT", "3")
        monkeypatch.setenv("GRAPHWEAVER_GENID_BASE", "https://kg.test/genid/")
        monkeypatch.setenv("DEV_MODE", "true")

        settings = Settings()

        assert settings.retry_config().max_attempts == 5
        assert settings.search_config() == SearchConfig(strategy="index", limit=3)
        assert settings.mint_config().base == "https://kg.test/genid/"
        assert settings.dev_mode is True

    def test_generator_config_carries_credentials(self, monkeypatch):
        """Test that API settings reach the generator config."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("GRAPHWEAVER_TEMPERATURE", "0.4")

        config = Settings().generator_config()

        assert config.api_key == "sk-test"
        assert config.temperature == 0.4

    def test_log_file_path_creates_parent(self, monkeypatch, tmp_path):
        """Test that the log directory is created on demand."""
        log_file = tmp_path / "logs" / "graphweaver.log"
        monkeypatch.setenv("LOG_FILE_PATH", str(log_file))

        path = Settings().get_log_file_path()

        assert path == log_file
        assert log_file.parent.is_dir()


class TestCollaboratorConfigs:
    """Test the per-collaborator config models."""

    def test_defaults(self):
        """Test config defaults."""
        assert GeneratorConfig().temperature == 0.1
        assert RetryConfig().max_attempts == 3
        assert ResolverConfig().query_field == "text"
        assert ResolverConfig().max_concurrency is None
        assert MintConfig().enabled is True

    def test_max_attempts_must_be_positive(self):
        """Test that a zero attempt budget is rejected."""
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)

    def test_unknown_strategy_rejected(self):
        """Test that only known search strategies are accepted."""
        with pytest.raises(ValidationError):
            SearchConfig(strategy="vector")

    def test_configs_are_frozen(self):
        """Test that config objects cannot be mutated."""
        config = RetryConfig()
        with pytest.raises(ValidationError):
            config.max_attempts = 10
