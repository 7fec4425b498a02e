"""Tests for configuration."""

import pytest
from pathlib import Path

from trackly.config import AppSettings, BudgetSettings, StorageSettings


class TestStorageSettings:
    """Tests for file locations."""

    def test_paths_derive_from_data_dir(self, monkeypatch, tmp_path):
        """Test that all files live under the data dir."""
        monkeypatch.setenv("TRACKLY_DATA_DIR", str(tmp_path))
        settings = StorageSettings()
        assert settings.transactions_path == tmp_path / "transactions_prefs.json"
        assert settings.preferences_path == tmp_path / "app_prefs.json"
        assert settings.backup_path == tmp_path / "transactions_backup.json"

    def test_home_is_expanded(self):
        """Test that ~ is expanded."""
        settings = StorageSettings(data_dir=Path("~/trackly-test"))
        assert "~" not in str(settings.data_dir)


class TestBudgetSettings:
    """Tests for threshold validation."""

    def test_defaults(self):
        """Test default thresholds."""
        settings = BudgetSettings()
        assert settings.budget_warning_percent == 80.0
        assert settings.budget_exceeded_percent == 100.0

    def test_warning_above_exceeded_rejected(self):
        """Test inconsistent thresholds."""
        with pytest.raises(ValueError):
            BudgetSettings(budget_warning_percent=120, budget_exceeded_percent=100)


class TestAppSettings:
    """Tests for app-level settings."""

    def test_log_level_normalized(self):
        """Test log level casing."""
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        """Test that a bogus level is rejected."""
        with pytest.raises(ValueError):
            AppSettings(log_level="chatty")
