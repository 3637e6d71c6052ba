"""Unit tests for analyzer settings and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from apexlens.config.settings import Settings
from apexlens.core.log_setup import setup_logging


class TestSettingsDefaults:
    """Tests for default values."""

    def test_windows(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("APEXLENS_GROUPING_WINDOW_SECONDS", raising=False)
        s = Settings(_env_file=None)
        assert s.grouping_window_seconds == 10.0
        assert s.exception_lookahead_lines == 20
        assert s.limit_lookahead_lines == 20
        assert s.metadata_head_lines == 5000
        assert s.metadata_tail_lines == 1000
        assert s.loop_call_threshold == 10


class TestSettingsEnvironment:
    """Tests for APEXLENS_* environment overrides."""

    def test_reads_prefixed_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APEXLENS_GROUPING_WINDOW_SECONDS", "30")
        monkeypatch.setenv("apexlens_log_level", "debug")
        s = Settings(_env_file=None)
        assert s.grouping_window_seconds == 30.0
        assert s.log_level == "debug"

    def test_rejects_non_positive_window(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APEXLENS_GROUPING_WINDOW_SECONDS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_sets_root_level(self):
        setup_logging("warning")
        assert logging.getLogger().level == logging.WARNING
        setup_logging("info")
        assert logging.getLogger().level == logging.INFO
