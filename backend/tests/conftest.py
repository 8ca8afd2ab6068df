"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from services.config_manager import ConfigManager
from services.llm_service import LLMService


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch) -> Path:
    """Isolated config directory with no API keys in the environment."""
    directory = tmp_path / "fixmycode"
    monkeypatch.setenv("FIXMYCODE_CONFIG_DIR", str(directory))
    for name in ("GEMINI_API_KEY", "API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset_instance()
    yield directory
    ConfigManager.reset_instance()


@pytest.fixture
def no_backoff(monkeypatch):
    """Make retry waits instantaneous."""
    monkeypatch.setattr(LLMService, "retry_delay_scale", 0)


@pytest.fixture
def analysis_payload() -> dict:
    """A minimal valid analysis as the model would return it."""
    return {
        "bugs": [{"line": 3, "description": "Off-by-one in loop bound", "severity": "Critical"}],
        "rootCause": "range() upper bound includes the length.",
        "fixedCode": "def total(xs):\n    s = 0\n    for i in range(len(xs)):\n        s += xs[i]\n    return s",
        "optimizedCode": "def total(xs):\n    return sum(xs)",
        "performanceSummary": "Use the builtin sum.",
        "securityWarnings": [],
        "complexity": {"time": "O(n)", "space": "O(1)", "explanation": "Single pass."},
        "refactoringSuggestions": ["Use sum()"],
    }


