"""Pytest configuration and shared fixtures for cc-stream tests."""

import pytest

from cc_stream.io import logging_setup


@pytest.fixture(autouse=True)
def _isolated_logging(tmp_path, monkeypatch):
    """Keep log and settings files out of $HOME and let caplog see cc_stream records."""
    monkeypatch.setenv("CC_STREAM_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("CC_STREAM_LOG_FILE", raising=False)
    monkeypatch.delenv("CC_STREAM_LOG_LEVEL", raising=False)
    logging_setup.reset()
    yield
    logging_setup.reset()


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    """Redirect settings to a temp XDG config home and return the file path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("CC_STREAM_CLAUDE_COMMAND", raising=False)
    return tmp_path / "config" / "cc-stream" / "settings.json"


@pytest.fixture
def transcript_file(tmp_path):
    """Factory: write text to a .jsonl file and return its path."""

    def _write(text: str, name: str = "session.jsonl"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
