"""
Configuration loader — reads timeledger.yml into a Settings model.

The config file is optional: without one the ledger lives in
``.timeledger/`` under the current directory with default settings.
A file that exists but cannot be parsed is an error, so a typo never
silently points the ledger at a fresh, empty data directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from timeledger.core.persistence.store import DEFAULT_DATA_DIR
from timeledger.core.services.reports import DEFAULT_CSV_FORMAT, CsvFormat

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "timeledger.yml"

# Environment override for the data directory
DATA_DIR_ENV = "TIMELEDGER_DATA_DIR"


class ConfigError(Exception):
    """Raised when the configuration file is invalid or unreadable."""


class SyncSettings(BaseModel):
    """Remote customer-sync service."""

    endpoint: str | None = None
    timeout: float = 10.0
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=30.0, ge=0)


class Settings(BaseModel):
    """Resolved application settings."""

    data_dir: Path = Path(DEFAULT_DATA_DIR)
    csv_format: CsvFormat = DEFAULT_CSV_FORMAT
    sync: SyncSettings = Field(default_factory=SyncSettings)

    config_path: Path | None = None


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for timeledger.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to timeledger.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None, start_dir: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to timeledger.yml. If None, searches upward
            from ``start_dir``.
        start_dir: Where to start searching and what relative data
            directories resolve against when there is no config file.

    Returns:
        Settings with ``data_dir`` resolved to an absolute path.

    Raises:
        ConfigError: If an explicit file is missing, or any file found
            is not valid YAML or has invalid values.
    """
    base_dir = (start_dir or Path.cwd()).resolve()

    if path is None:
        path = find_config_file(base_dir)
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    data: dict = {}
    if path is not None:
        logger.debug("Loading config from %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(loaded).__name__}")
        data = loaded
        base_dir = path.parent.resolve()

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        settings.data_dir = Path(env_dir)

    if not settings.data_dir.is_absolute():
        settings.data_dir = (base_dir / settings.data_dir).resolve()
    settings.config_path = path

    logger.info("Data directory: %s", settings.data_dir)
    return settings
