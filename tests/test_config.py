"""
Unit tests for configuration loading.
"""

import logging
import pytest
from pydantic import ValidationError

from receipt_directory.config import load_config, configure_logging, DEFAULTS


class TestLoadConfig:
    """Test cases for load_config."""

    def test_defaults(self):
        config = load_config(environ={})

        assert config.db_path == DEFAULTS["db_path"]
        assert config.request_timeout == 30.0
        assert config.filename_max_length == 30
        assert config.log_level == "INFO"
        assert config.download_dir is None

    def test_environment_overrides(self):
        config = load_config(environ={
            "RECEIPT_DIRECTORY_DB_PATH": "/data/fleet.db",
            "RECEIPT_DIRECTORY_REQUEST_TIMEOUT": "12.5",
            "RECEIPT_DIRECTORY_LOG_LEVEL": "debug",
            "RECEIPT_DIRECTORY_LOG_FILE": "",
        })

        assert config.db_path == "/data/fleet.db"
        assert config.request_timeout == 12.5
        assert config.log_level == "DEBUG"
        assert config.log_file is None

    def test_empty_download_dir_disabled(self):
        config = load_config(environ={"RECEIPT_DIRECTORY_DOWNLOAD_DIR": ""})
        assert config.download_dir is None

    def test_explicit_overrides_win(self):
        config = load_config(environ={"RECEIPT_DIRECTORY_DOWNLOAD_DIR": "env"}, download_dir="explicit")
        assert config.download_dir == "explicit"

    def test_unrelated_environment_ignored(self):
        config = load_config(environ={"DB_PATH": "elsewhere.db"})
        assert config.db_path == "expenses.db"

    @pytest.mark.parametrize("key,value", [
        ("RECEIPT_DIRECTORY_REQUEST_TIMEOUT", "0"),
        ("RECEIPT_DIRECTORY_REQUEST_TIMEOUT", "soon"),
        ("RECEIPT_DIRECTORY_FILENAME_MAX_LENGTH", "0"),
        ("RECEIPT_DIRECTORY_LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ValidationError):
            load_config(environ={key: value})


class TestConfigureLogging:

    def test_configure_logging_without_file(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        configure_logging(load_config(environ={}, log_file=None, log_level="WARNING"))

        assert captured["level"] == logging.WARNING
        assert len(captured["handlers"]) == 1

    def test_configure_logging_with_file(self, monkeypatch, tmp_path):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        configure_logging(load_config(environ={}, log_file=str(tmp_path / "app.log")))

        assert any(isinstance(h, logging.FileHandler) for h in captured["handlers"])
        for handler in captured["handlers"]:
            handler.close()
