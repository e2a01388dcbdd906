"""Unit tests for YAML configuration loading."""

import os

import pytest

from sentclip.config_loader import DEFAULT_CONFIG, ConfigLoader
from sentclip.exceptions import ConfigurationError


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestLoadConfig:

    def test_loaded_values_override_defaults(self, tmp_path):
        path = write_config(tmp_path, "buffer_per_syllable: 0.2\nmax_workers: 8\n")
        config = ConfigLoader().load_config(path)
        assert config["buffer_per_syllable"] == 0.2
        assert config["max_workers"] == 8
        assert config["language_code"] == DEFAULT_CONFIG["language_code"]

    def test_empty_file_means_defaults(self, tmp_path):
        config = ConfigLoader().load_config(write_config(tmp_path, ""))
        assert config == DEFAULT_CONFIG

    def test_defaults_are_not_mutated(self, tmp_path):
        ConfigLoader().load_config(write_config(tmp_path, "model: small.en\n"))
        assert DEFAULT_CONFIG["model"] == "base.en"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader().load_config(str(tmp_path / "missing.yaml"))

    def test_directory_is_not_a_config(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigLoader().load_config(str(tmp_path))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid YAML format"):
            ConfigLoader().load_config(write_config(tmp_path, "max_workers: [1, 2\n"))

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Root must be a mapping"):
            ConfigLoader().load_config(write_config(tmp_path, "- a\n- b\n"))


class TestValidate:

    @pytest.mark.parametrize("text", [
        "buffer_per_syllable: -0.1\n",
        "buffer_per_syllable: fast\n",
        "max_workers: 0\n",
        "max_workers: 2.5\n",
        "transcriber: google\n",
        "sample_rate: -16000\n",
    ])
    def test_invalid_values_rejected(self, tmp_path, text):
        with pytest.raises(ConfigurationError):
            ConfigLoader().load_config(write_config(tmp_path, text))

    def test_integer_buffer_accepted(self, tmp_path):
        config = ConfigLoader().load_config(write_config(tmp_path, "buffer_per_syllable: 0\n"))
        assert config["buffer_per_syllable"] == 0


def test_shipped_config_is_valid():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    config = ConfigLoader().load_config(os.path.join(root, "config.yaml"))
    assert config["buffer_per_syllable"] == pytest.approx(0.1)
    assert config["include_trailing_words"] is False
