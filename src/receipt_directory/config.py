"""
Configuration and logging setup for the receipt directory.
Defaults are overridden by RECEIPT_DIRECTORY_* environment variables.
"""

import os
import logging
from typing import Optional, Dict, Any, Mapping
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "RECEIPT_DIRECTORY_"

DEFAULTS = {
    "db_path": "expenses.db",
    "download_dir": None,
    "request_timeout": 30.0,
    "filename_max_length": 30,
    "log_level": "INFO",
    "log_file": "receipt_directory.log",
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class DirectoryConfig(BaseModel):
    """Runtime settings for the receipt directory application."""

    db_path: str = Field(DEFAULTS["db_path"], description="SQLite file backing the expense store")
    download_dir: Optional[str] = Field(DEFAULTS["download_dir"], description="Save files into this directory instead of offering browser downloads")
    request_timeout: float = Field(DEFAULTS["request_timeout"], gt=0, description="Receipt fetch timeout in seconds")
    filename_max_length: int = Field(DEFAULTS["filename_max_length"], ge=1, le=200)
    log_level: str = Field(DEFAULTS["log_level"])
    log_file: Optional[str] = Field(DEFAULTS["log_file"], description="Log file path, empty to disable")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('log_file', 'download_dir', mode='before')
    @classmethod
    def empty_as_none(cls, v):
        return v or None


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> DirectoryConfig:
    """Build the configuration from defaults, environment and explicit overrides.

    Args:
        environ: Environment mapping, os.environ when omitted
        **overrides: Values taking precedence over the environment

    Returns:
        Validated DirectoryConfig

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    environ = os.environ if environ is None else environ

    merged: Dict[str, Any] = dict(DEFAULTS)
    for key in DEFAULTS:
        env_value = environ.get(ENV_PREFIX + key.upper())
        if env_value is not None:
            merged[key] = env_value
    merged.update(overrides)

    return DirectoryConfig(**merged)


def configure_logging(config: DirectoryConfig) -> None:
    """Configure root logging with a stream handler and an optional log file."""
    handlers = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
        handlers=handlers
    )
