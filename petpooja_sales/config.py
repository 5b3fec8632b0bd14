"""
Configuration module for the sales ingestion run.

Reads environment variables once at start-up and exposes them as an
immutable Config that is handed to the pipeline explicitly.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import quote

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://api.petpooja.com/V1/orders/get_sales_data/"
DEFAULT_DB_PATH = "sales_data.db"
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_REQUEST_TIMEOUT = 60

# (attribute, environment variable) pairs that must be present
REQUIRED_VARS = [
    ("app_key", "PETPOOJA_APP_KEY"),
    ("app_secret", "PETPOOJA_APP_SECRET"),
    ("access_token", "PETPOOJA_ACCESS_TOKEN"),
    ("rest_id", "PETPOOJA_REST_ID"),
    ("from_date", "PETPOOJA_FROM_DATE"),
    ("to_date", "PETPOOJA_TO_DATE"),
]

_TRUTHY = {"1", "true", "yes", "on"}


def load_dotenv_if_present(dotenv_path: Optional[str] = None) -> bool:
    """
    Load variables from a .env file for local runs.

    Variables that are already set in the environment are left untouched.

    Args:
        dotenv_path (Optional[str]): Path to the .env file. Defaults to
            ``.env`` in the current working directory.

    Returns:
        bool: True if a file was found and loaded.
    """
    env_path = Path(dotenv_path) if dotenv_path else Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class Config:
    """
    Settings for one ingestion run.
    """

    app_key: str
    app_secret: str
    access_token: str
    rest_id: str
    from_date: str
    to_date: str
    base_url: str = DEFAULT_BASE_URL

    # Storage
    db_path: str = DEFAULT_DB_PATH
    database_url: Optional[str] = None

    # Fetch behaviour
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    log_raw_response: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a Config from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Config: The loaded configuration.

        Raises:
            ValueError: If any required variable is missing or a numeric
                setting cannot be parsed.
        """
        if environ is None:
            environ = os.environ

        missing = [
            name for _, name in REQUIRED_VARS if not environ.get(name, "").strip()
        ]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        values = {attr: environ[name] for attr, name in REQUIRED_VARS}

        return cls(
            base_url=environ.get("PETPOOJA_BASE_URL") or DEFAULT_BASE_URL,
            db_path=environ.get("PETPOOJA_DB_PATH") or DEFAULT_DB_PATH,
            database_url=environ.get("PETPOOJA_DATABASE_URL") or None,
            max_retries=_read_int(
                environ, "PETPOOJA_MAX_RETRIES", DEFAULT_MAX_RETRIES
            ),
            retry_delay_ms=_read_int(
                environ, "PETPOOJA_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS
            ),
            request_timeout=_read_int(
                environ, "PETPOOJA_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT
            ),
            log_raw_response=environ.get("PETPOOJA_LOG_RAW_RESPONSE", "")
            .strip()
            .lower()
            in _TRUTHY,
            **values,
        )

    @property
    def uses_postgres(self) -> bool:
        """True when rows go to PostgreSQL rather than the local SQLite file."""
        return bool(self.database_url)


def build_request_url(config: Config) -> str:
    """
    Build the sales data request URL with percent-encoded query parameters.

    Args:
        config: Loaded configuration.

    Returns:
        str: ``{base_url}/?app_key=...&...&to_date=...``
    """
    params = [
        ("app_key", config.app_key),
        ("app_secret", config.app_secret),
        ("access_token", config.access_token),
        ("restID", config.rest_id),
        ("from_date", config.from_date),
        ("to_date", config.to_date),
    ]
    query = "&".join(f"{key}={quote(value, safe='')}" for key, value in params)
    return f"{config.base_url.rstrip('/')}/?{query}"
