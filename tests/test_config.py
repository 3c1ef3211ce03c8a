"""Tests for settings loading."""

import pytest

from continuitycraft.config import load_settings


def test_defaults_without_file(tmp_path, monkeypatch):
    """Defaults apply when no settings file or environment is present."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("CONTINUITYCRAFT_DEFAULT_HEALING_DAYS", raising=False)
    monkeypatch.delenv("CONTINUITYCRAFT_AUTOSAVE", raising=False)

    settings = load_settings()
    assert settings.default_healing_days == 7
    assert settings.autosave is True
    assert settings.anthropic_api_key is None


def test_file_then_environment(tmp_path, monkeypatch):
    """Environment variables override the YAML file."""
    settings_file = tmp_path / "settings.yaml"
    settings_file.write_text("default_healing_days: 10\nautosave: false\nmodel: test-model\n", encoding="utf-8")
    monkeypatch.setenv("CONTINUITYCRAFT_DEFAULT_HEALING_DAYS", "5")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.delenv("CONTINUITYCRAFT_AUTOSAVE", raising=False)
    monkeypatch.delenv("CONTINUITYCRAFT_MODEL", raising=False)

    settings = load_settings(settings_file)
    assert settings.default_healing_days == 5
    assert settings.autosave is False
    assert settings.model == "test-model"
    assert settings.anthropic_api_key == "sk-test"


def test_invalid_healing_days(tmp_path, monkeypatch):
    """Non-positive healing days are rejected."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONTINUITYCRAFT_DEFAULT_HEALING_DAYS", "0")
    with pytest.raises(ValueError):
        load_settings()


def test_dotenv_file_is_read(tmp_path, monkeypatch):
    """A .env file in the working directory fills in unset variables."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONTINUITYCRAFT_MAX_TOKENS", raising=False)
    (tmp_path / ".env").write_text("CONTINUITYCRAFT_MAX_TOKENS=900\n", encoding="utf-8")

    assert load_settings().max_tokens == 900


def test_missing_settings_file(tmp_path):
    """An explicit settings path must exist."""
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml")
