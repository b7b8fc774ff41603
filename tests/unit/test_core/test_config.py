#!/usr/bin/env python3
"""Unit tests for environment-based configuration."""

from pathlib import Path

import pytest

from ledger.core.config import Config, Environment, get_config, reload_config


class TestConfigFromEnvironment:
    """Test configuration loading from environment variables."""

    def test_test_environment_uses_configured_data_dir(self, tmp_path):
        config = Config.from_environment()

        assert config.environment == Environment.TEST
        assert config.data_dir == (tmp_path / "ledger_data").resolve()
        assert config.data_dir.exists()

    def test_storage_paths_live_in_data_dir(self):
        config = Config.from_environment()

        assert config.storage.state_file == config.data_dir / "ledger_state.json"
        assert config.storage.backup_file == config.data_dir / "ledger_state.backup.json"

    def test_display_defaults(self):
        config = Config.from_environment()

        assert config.display.currency == "THB"
        assert config.display.cycle_range == 3

    def test_display_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CURRENCY", "usd")
        monkeypatch.setenv("LEDGER_CYCLE_RANGE", "6")

        config = Config.from_environment()

        assert config.display.currency == "USD"
        assert config.display.cycle_range == 6

    def test_debug_and_log_level(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "warning")

        config = Config.from_environment()

        assert config.debug is True
        assert config.log_level == "WARNING"

    def test_to_dict_is_json_friendly(self):
        data = Config.from_environment().to_dict()

        assert data["environment"] == "test"
        assert isinstance(data["data_dir"], str)
        assert isinstance(data["storage"]["state_dir"], str)
        assert data["display"]["currency"] == "THB"


class TestConfigValidation:
    """Test configuration validation."""

    def test_valid_configuration_has_no_errors(self):
        assert Config.from_environment().validate() == []

    def test_invalid_currency_is_reported(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CURRENCY", "BAHT")

        errors = Config.from_environment().validate()

        assert any("three-letter" in error for error in errors)

    def test_cycle_range_out_of_bounds_is_reported(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CYCLE_RANGE", "30")

        errors = Config.from_environment().validate()

        assert any("Cycle range" in error for error in errors)

    def test_get_config_raises_on_invalid_configuration(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CYCLE_RANGE", "-1")

        with pytest.raises(ValueError, match="Configuration validation failed"):
            get_config()


class TestGlobalConfig:
    """Test the process-wide configuration instance."""

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config_rereads_environment(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("LEDGER_CURRENCY", "EUR")

        second = reload_config()

        assert second is not first
        assert second.display.currency == "EUR"
        assert isinstance(second.data_dir, Path)
