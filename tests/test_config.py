"""Tests for settings and logging setup."""

import logging
from pathlib import Path

import pytest

from flashcards import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "FLASHCARDS_FILE",
        "FLASHCARDS_LOG_LEVEL",
        "FSRS_REQUEST_RETENTION",
        "FSRS_MAXIMUM_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: False)


def test_test_mode_uses_separate_file(monkeypatch):
    monkeypatch.setenv("TEST_MODE", "true")
    assert config.get_store_path().name == "test_flashcards.json"
    monkeypatch.setenv("TEST_MODE", "false")
    assert config.get_store_path().name == "flashcards.json"


def test_explicit_file_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("FLASHCARDS_FILE", str(tmp_path / "mine.json"))
    assert config.get_store_path() == tmp_path / "mine.json"


def test_load_settings_defaults(tmp_path):
    settings = config.load_settings(str(tmp_path / "cards.json"))
    assert settings.store_path == Path(tmp_path / "cards.json")
    assert settings.log_level == "INFO"
    assert settings.request_retention == 0.9
    assert settings.maximum_interval == 36500


def test_load_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FLASHCARDS_LOG_LEVEL", "debug")
    monkeypatch.setenv("FSRS_REQUEST_RETENTION", "0.85")
    monkeypatch.setenv("FSRS_MAXIMUM_INTERVAL", "365")
    settings = config.load_settings(str(tmp_path / "cards.json"))
    assert settings.log_level == "DEBUG"
    assert settings.request_retention == 0.85
    assert settings.maximum_interval == 365


def test_bad_retention_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("FSRS_REQUEST_RETENTION", "1.5")
    with pytest.raises(ValueError):
        config.load_settings(str(tmp_path / "cards.json"))


def test_configure_logging_adds_one_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        config.configure_logging("DEBUG")
        config.configure_logging("DEBUG")
        added = [h for h in root.handlers if h not in before]
        assert len(added) <= 1
        assert root.level == logging.DEBUG
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(level)
