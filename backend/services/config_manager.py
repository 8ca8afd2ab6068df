"""
Configuration Manager - Handle backend settings persistence
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Environment variables consulted when the stored key is empty
API_KEY_ENV = {
    "gemini": ("GEMINI_API_KEY", "API_KEY"),
    "openai": ("OPENAI_API_KEY",),
}


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self, config_dir: str | None = None):
        # Explicit argument, then environment, then home directory
        config_dir = config_dir or os.environ.get("FIXMYCODE_CONFIG_DIR")
        if not config_dir:
            config_dir = os.path.expanduser("~/.fixmycode")

        config_path = Path(config_dir)
        try:
            config_path.mkdir(parents=True, exist_ok=True)
            self._config_file = config_path / "config.json"
        except OSError as e:
            logger.warning("[Config] Cannot write to %s: %s", config_dir, e)
            tmp_dir = Path(tempfile.gettempdir()) / "fixmycode"
            tmp_dir.mkdir(parents=True, exist_ok=True)
            self._config_file = tmp_dir / "config.json"
            logger.warning("[Config] Using temporary config path: %s", self._config_file)

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Drop the singleton so the next access re-reads the environment"""
        cls._instance = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, layered over the defaults"""
        config = self._default_config()
        if not self._config_file.exists():
            return config

        try:
            with open(self._config_file) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("[Config] Error loading config: %s", e)
            return config

        for key, value in stored.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value
        return config

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "provider": "gemini",
            "gemini": {
                "apiKey": "",
                "model": "gemini-2.5-flash",
                "temperature": 0.2,
            },
            "openai": {"apiKey": "", "model": "gpt-4o-mini"},
            "server": {"host": "0.0.0.0", "port": 8000},
        }

    def _apply_env_keys(self, config: dict[str, Any]) -> dict[str, Any]:
        """Fill empty provider keys from the environment"""
        for provider, names in API_KEY_ENV.items():
            section = config.setdefault(provider, {})
            if section.get("apiKey"):
                continue
            for name in names:
                value = os.environ.get(name)
                if value:
                    section["apiKey"] = value
                    break
        return config

    def get_stored_config(self) -> dict[str, Any]:
        """Get configuration as persisted, without environment keys"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return copy.deepcopy(self._config)

    def get_config(self) -> dict[str, Any]:
        """Get effective configuration"""
        return self._apply_env_keys(self.get_stored_config())

    def save_config(self, config: dict[str, Any]):
        """Save configuration to file"""
        self._config.update(config)
        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def set(self, key: str, value: Any):
        """Set specific config value"""
        self._config[key] = value
        self.save_config(self._config)
