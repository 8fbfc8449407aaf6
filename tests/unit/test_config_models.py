"""Tests for capacity/config_models.py"""

import pytest
from pydantic import ValidationError

from capacity import CONFIG_PATH
from capacity.config_models import CapacityConfig, ExperimentsConfig, load_config


class TestDefaults:
    """Defaults without any YAML."""

    def test_default_values(self):
        config = CapacityConfig()

        assert config.absence.min_days_for_gap_analysis == 90
        assert config.patterns.lookback_days == 30
        assert config.patterns.min_history_signals == 14
        assert config.patterns.min_window_signals == 7
        assert config.experiments.default_duration_weeks == 4
        assert config.experiments.cooldown_days_after_decline == 7
        assert config.experiments.correlation_threshold == 15
        assert config.storage.signals_key == "@capacity:signals"

    def test_duration_bounds_validated(self):
        with pytest.raises(ValidationError):
            ExperimentsConfig(default_duration_weeks=12)


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_shipped_file(self):
        config = load_config(CONFIG_PATH)

        assert config.absence.min_days_for_gap_analysis == 90
        assert "missed" in config.language.blocked_phrases
        assert config.language.reframe_patterns["missed"] == "without signals"

    def test_partial_file(self, tmp_path):
        path = tmp_path / "capacity.yaml"
        path.write_text("capacity:\n  experiments:\n    cooldown_days_after_decline: 3\n")

        config = load_config(path)
        assert config.experiments.cooldown_days_after_decline == 3
        assert config.patterns.lookback_days == 30

    def test_unwrapped_file(self, tmp_path):
        path = tmp_path / "capacity.yaml"
        path.write_text("patterns:\n  enabled: false\n")

        assert load_config(path).patterns.enabled is False

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml") == CapacityConfig()

    def test_invalid_values_fall_back(self, tmp_path):
        path = tmp_path / "capacity.yaml"
        path.write_text("capacity:\n  experiments:\n    default_duration_weeks: 20\n")

        assert load_config(path).experiments.default_duration_weeks == 4

    def test_empty_file(self, tmp_path):
        path = tmp_path / "capacity.yaml"
        path.write_text("")

        assert load_config(path) == CapacityConfig()
