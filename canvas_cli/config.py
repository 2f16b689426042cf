"""Stored credentials and user preferences.

Values come from ``~/.canvas-cli/.env`` with process environment variables
taking precedence. The directory can be moved with ``CANVAS_CLI_HOME``.
"""
from __future__ import annotations

import logging
import os
import typing as t
from pathlib import Path

from dotenv import dotenv_values, set_key

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "CANVAS_CLI_HOME"
ENV_FILENAME = ".env"

TOKEN_KEY = "CANVAS_TOKEN"
URL_KEY = "CANVAS_URL"
DAYS_KEY = "CANVAS_DEFAULT_DAYS"
EXTRA_WEEKS_KEY = "CANVAS_EXTRA_WEEKS"
WEEK_START_KEY = "CANVAS_WEEK_START"

DEFAULT_DAYS = 3
DEFAULT_EXTRA_WEEKS = 1
DEFAULT_WEEK_START = "sunday"

# 0=Sunday .. 6=Saturday
WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def default_config_dir() -> Path:
    override = os.getenv(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".canvas-cli"


def weekday_index(name: str) -> t.Optional[int]:
    """Map "Monday", "mon", "MON" ... to 1; unknown names give None."""
    value = name.strip().lower()
    if not value:
        return None
    for index, full in enumerate(WEEKDAY_NAMES):
        if value == full or (len(value) >= 3 and full.startswith(value)):
            return index
    return None


class Settings:
    """Key-value view over the .env file and the environment."""

    def __init__(
        self,
        config_dir: t.Optional[Path] = None,
        environ: t.Optional[t.Mapping[str, str]] = None,
    ) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()
        self.env_path = self.config_dir / ENV_FILENAME
        self._environ = environ if environ is not None else os.environ
        self._file_values: dict[str, t.Optional[str]] = {}
        self.reload()

    def reload(self) -> None:
        if self.env_path.is_file():
            self._file_values = dict(dotenv_values(self.env_path))
        else:
            self._file_values = {}

    def get(self, key: str, default: t.Optional[str] = None) -> t.Optional[str]:
        value = self._environ.get(key)
        if value:
            return value
        value = self._file_values.get(key)
        return value if value else default

    def set(self, key: str, value: str) -> None:
        """Persist a single key to the .env file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.env_path.touch(exist_ok=True)
        set_key(str(self.env_path), key, value, quote_mode="never")
        self._file_values[key] = value

    def save_credentials(self, token: str, url: str) -> None:
        self.set(TOKEN_KEY, token)
        self.set(URL_KEY, url.rstrip("/"))

    def is_authenticated(self) -> bool:
        return bool(self.token) and bool(self.canvas_url)

    @property
    def token(self) -> t.Optional[str]:
        return self.get(TOKEN_KEY)

    @property
    def canvas_url(self) -> t.Optional[str]:
        url = self.get(URL_KEY)
        return url.rstrip("/") if url else None

    @property
    def default_days(self) -> int:
        return self._get_int(DAYS_KEY, DEFAULT_DAYS)

    @property
    def extra_weeks(self) -> int:
        return self._get_int(EXTRA_WEEKS_KEY, DEFAULT_EXTRA_WEEKS)

    @property
    def week_start_day(self) -> int:
        raw = self.get(WEEK_START_KEY, DEFAULT_WEEK_START)
        index = weekday_index(raw or "")
        if index is None:
            logger.warning("Unknown %s value %r, using %s", WEEK_START_KEY, raw, DEFAULT_WEEK_START)
            return WEEKDAY_NAMES.index(DEFAULT_WEEK_START)
        return index

    def _get_int(self, key: str, default: int) -> int:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            value = int(raw.strip())
        except ValueError:
            logger.warning("Invalid %s value %r, using %d", key, raw, default)
            return default
        if value < 0:
            logger.warning("Negative %s value %r, using %d", key, raw, default)
            return default
        return value
