"""
Unit tests for config and vocabulary file loading.
"""

import json

import pytest

from prefix_guard.config import (
    load_config_file,
    load_vocabulary_file,
    parse_config,
    parse_vocabulary,
)
from prefix_guard.errors import ConfigError


def write_json(path, data):
    path.write_text(json.dumps(data))
    return path


class TestParseConfig:
    """Test config validation and merging."""

    def test_valid_config(self):
        config = parse_config({"max_attempts": 200, "temperature": 0.7, "top_p": 0.9, "top_k": 40})

        assert config.max_attempts == 200
        assert config.temperature == 0.7
        assert config.top_p == 0.9
        assert config.top_k == 40

    def test_empty_config_uses_defaults(self):
        config = parse_config({})

        assert config.max_attempts == 1000
        assert config.top_p is None

    def test_null_values_allowed(self):
        config = parse_config({"top_p": None, "top_k": None})

        assert config.top_p is None
        assert config.top_k is None

    def test_overrides_take_precedence(self):
        config = parse_config({"max_attempts": 200, "temperature": 0.7}, temperature=0.2, top_k=None)

        assert config.temperature == 0.2
        assert config.max_attempts == 200

    def test_all_errors_reported(self):
        """Every violation is collected, not just the first."""
        with pytest.raises(ConfigError) as exc_info:
            parse_config({"max_attempts": 0, "top_p": 1.5, "beam_width": 4})

        errors = exc_info.value.errors
        assert len(errors) == 3
        assert any(e.startswith(".max_attempts:") for e in errors)
        assert any(e.startswith(".top_p:") for e in errors)
        assert any("beam_width" in e for e in errors)

    def test_wrong_type(self):
        with pytest.raises(ConfigError, match="max_attempts"):
            parse_config({"max_attempts": "many"})

    def test_zero_temperature_rejected(self):
        with pytest.raises(ConfigError):
            parse_config({"temperature": 0})

    def test_unknown_override_keeps_cause(self):
        """Override errors surface as ConfigError chained to the ValueError."""
        with pytest.raises(ConfigError, match="Unknown config fields: beam_width") as exc_info:
            parse_config({}, beam_width=4)

        assert isinstance(exc_info.value.__cause__, ValueError)


class TestLoadConfigFile:
    """Test reading config files."""

    def test_load(self, tmp_path):
        path = write_json(tmp_path / "sampler.json", {"max_attempts": 50})

        assert load_config_file(path).max_attempts == 50

    def test_load_with_override(self, tmp_path):
        path = write_json(tmp_path / "sampler.json", {"max_attempts": 50})

        assert load_config_file(path, max_attempts=5).max_attempts == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="config file not found"):
            load_config_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON") as exc_info:
            load_config_file(path)

        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


class TestVocabulary:
    """Test vocabulary parsing and loading."""

    def test_list_form(self):
        assert parse_vocabulary([["def", -1], ["(", -2.5]]) == [("def", -1.0), ("(", -2.5)]

    def test_object_form(self):
        assert parse_vocabulary({"vocabulary": [["class", -0.5]]}) == [("class", -0.5)]

    @pytest.mark.parametrize("data", [
        [],
        [["def"]],
        [[-1.0, "def"]],
        {"tokens": [["def", -1.0]]},
        "def",
    ])
    def test_invalid_vocabulary(self, data):
        with pytest.raises(ConfigError, match="Invalid vocabulary"):
            parse_vocabulary(data)

    def test_load_file(self, tmp_path):
        path = write_json(tmp_path / "vocab.json", [["def", -1.0], [":", -2.0]])

        assert load_vocabulary_file(path) == [("def", -1.0), (":", -2.0)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="vocabulary file not found"):
            load_vocabulary_file(tmp_path / "nope.json")
