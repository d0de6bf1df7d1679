"""Tests for configuration system."""

import pytest
from terminal_exec_blocks.config import Config


def test_config_defaults(monkeypatch):
    """Test default configuration values."""
    monkeypatch.delenv("TERMINAL_EXEC_BLOCK_STYLE", raising=False)
    monkeypatch.delenv("TERMINAL_EXEC_PREVIEW_LINES", raising=False)
    config = Config()
    assert config.style == "markdown"
    assert config.preview_lines == 5


def test_config_from_environment(monkeypatch):
    """Test configuration from environment variables."""
    monkeypatch.setenv("TERMINAL_EXEC_BLOCK_STYLE", "shell")
    monkeypatch.setenv("TERMINAL_EXEC_PREVIEW_LINES", "12")

    config = Config()
    assert config.style == "shell"
    assert config.preview_lines == 12
    assert repr(config) == "<Config(style='shell', preview_lines=12)>"


def test_config_preview_lines_clamped(monkeypatch):
    """Test that preview lines never drop below one."""
    monkeypatch.setenv("TERMINAL_EXEC_PREVIEW_LINES", "0")

    assert Config().preview_lines == 1


def test_config_invalid_style(monkeypatch):
    """Test that an unknown style raises ValueError."""
    monkeypatch.setenv("TERMINAL_EXEC_BLOCK_STYLE", "html")

    with pytest.raises(ValueError):
        Config()


def test_config_invalid_preview_lines(monkeypatch):
    """Test that invalid preview lines raises ValueError."""
    monkeypatch.setenv("TERMINAL_EXEC_PREVIEW_LINES", "not_a_number")

    with pytest.raises(ValueError):
        Config()
