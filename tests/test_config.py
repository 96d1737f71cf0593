"""Tests for configuration loading."""

import pytest
import yaml

from crcast_source.config import AppConfig, CrCastConfig, _parse_config, _validate_config, load_config


def test_default_config():
    config = AppConfig()
    assert config.crcast.base_url == "https://api.crcast.cc/v1/"
    assert config.crcast.timeout_ms == 10000
    assert config.crcast.simultaneous_connections == 2


def test_parse_config():
    raw = {
        "crcast": {
            "base_url": "https://crcast.example.com/api/",
            "timeout_ms": 5000,
            "simultaneous_connections": 4,
        }
    }
    config = _parse_config(raw)
    assert config.crcast.base_url == "https://crcast.example.com/api/"
    assert config.crcast.timeout_ms == 5000
    assert config.crcast.simultaneous_connections == 4


def test_parse_config_partial_keeps_defaults():
    config = _parse_config({"crcast": {"timeout_ms": 1500}})
    assert config.crcast.timeout_ms == 1500
    assert config.crcast.base_url == "https://api.crcast.cc/v1/"


def test_validate_config_empty_base_url():
    with pytest.raises(ValueError, match="must not be empty"):
        _validate_config(AppConfig(crcast=CrCastConfig(base_url="")))


def test_validate_config_base_url_needs_trailing_slash():
    with pytest.raises(ValueError, match="must end with '/'"):
        _validate_config(AppConfig(crcast=CrCastConfig(base_url="https://api.crcast.cc/v1")))


def test_validate_config_bad_timeout():
    with pytest.raises(ValueError, match="timeout_ms must be positive"):
        _validate_config(AppConfig(crcast=CrCastConfig(timeout_ms=0)))


def test_validate_config_bad_connections():
    with pytest.raises(ValueError, match="simultaneous_connections must be positive"):
        _validate_config(AppConfig(crcast=CrCastConfig(simultaneous_connections=0)))


def test_load_config_missing_file(tmp_path):
    config = load_config(tmp_path / "nonexistent.yaml")
    assert config.crcast == CrCastConfig()


def test_load_config_empty_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("")
    assert load_config(config_path).crcast == CrCastConfig()


def test_load_config_from_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({
        "crcast": {"base_url": "http://localhost:8080/", "simultaneous_connections": 1},
    }))
    config = load_config(config_path)
    assert config.crcast.base_url == "http://localhost:8080/"
    assert config.crcast.simultaneous_connections == 1
