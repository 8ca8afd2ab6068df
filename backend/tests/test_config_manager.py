"""Tests for configuration persistence."""

from __future__ import annotations

import json

from services.config_manager import ConfigManager


def test_defaults_when_no_file(config_dir):
    config = ConfigManager().get_config()
    assert config["provider"] == "gemini"
    assert config["gemini"]["model"] == "gemini-2.5-flash"
    assert config["gemini"]["apiKey"] == ""


def test_save_and_reload(config_dir):
    manager = ConfigManager()
    manager.set("provider", "openai")

    stored = json.loads((config_dir / "config.json").read_text())
    assert stored["provider"] == "openai"
    assert ConfigManager().get_config()["provider"] == "openai"


def test_partial_file_is_layered_over_defaults(config_dir):
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text(json.dumps({"gemini": {"apiKey": "stored"}}))

    config = ConfigManager().get_config()
    assert config["gemini"] == {"apiKey": "stored", "model": "gemini-2.5-flash", "temperature": 0.2}


def test_corrupt_file_falls_back_to_defaults(config_dir):
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text("{not json")

    assert ConfigManager().get_config()["provider"] == "gemini"


def test_environment_key_fills_empty_key(config_dir, monkeypatch):
    monkeypatch.setenv("API_KEY", "from-env")
    manager = ConfigManager()

    assert manager.get_config()["gemini"]["apiKey"] == "from-env"
    assert manager.get_stored_config()["gemini"]["apiKey"] == ""


def test_stored_key_wins_over_environment(config_dir, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    manager = ConfigManager()
    manager.save_config({"gemini": {"apiKey": "stored", "model": "gemini-2.5-pro"}})

    assert manager.get_config()["gemini"]["apiKey"] == "stored"


def test_singleton(config_dir):
    assert ConfigManager.get_instance() is ConfigManager.get_instance()
