"""Configuration for New Relic dashboard export.

Values passed to the constructor win; anything left unset falls back to the
environment, optionally populated from .env files.
"""

from os import getenv
from typing import Optional

from dotenv import load_dotenv

from newrelic_export.common import ConfigError
from newrelic_export.constants import (
    DEFAULT_GRAPHQL_URL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RUN_TIMEOUT,
    EXPORT_MODES,
    MODE_PAGES,
)

TRUE_VALUES = ("true", "1", "yes", "on")


def _int_or_raw(value):
    """Convert to int when possible, keep the raw value for validate() otherwise."""
    if value is None or isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return value


def _float_env(name, default):
    value = getenv(name, str(default))
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"Please set env var {name} to a number of seconds")


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ExportConfig:
    """Configuration for New Relic dashboard export."""

    def __init__(
        self,
        account_id: Optional[int] = None,
        user_key: Optional[str] = None,
        graphql_url: Optional[str] = None,
        max_workers: Optional[int] = None,
        request_timeout: Optional[float] = None,
        run_timeout: Optional[float] = None,
        export_mode: Optional[str] = None,
        output_dir: Optional[str] = None,
        debug: Optional[bool] = None,
        load_from_env: bool = True,
    ):
        """Initialize export configuration.

        Args:
            account_id: New Relic account ID to export
            user_key: New Relic user API key
            graphql_url: NerdGraph endpoint
            max_workers: Number of parallel dashboard detail requestors
            request_timeout: Per-request timeout in seconds
            run_timeout: Deadline for the whole retrieval in seconds (0 disables)
            export_mode: "pages" (one row per NRQL query) or "summary"
                (one row per dashboard)
            output_dir: Directory for the CSV file
            debug: Enable debug logging
            load_from_env: Whether to load config from .env files
        """
        if load_from_env:
            load_dotenv(".env", override=True, interpolate=True)
            load_dotenv(".env.newrelic", override=True, interpolate=True)

        # New Relic credentials - use provided values or fall back to environment
        self.ACCOUNT_ID = _int_or_raw(
            account_id if account_id is not None else getenv("NEW_RELIC_ACCOUNT")
        )
        self.USER_KEY = user_key or getenv("NEW_RELIC_USER_KEY")
        self.GRAPHQL_URL = (
            graphql_url or getenv("NEW_RELIC_GRAPHQL_URL") or DEFAULT_GRAPHQL_URL
        )

        if max_workers is not None:
            self.MAX_WORKERS = max_workers
        else:
            self.MAX_WORKERS = _int_or_raw(
                getenv("MAX_WORKERS", str(DEFAULT_MAX_WORKERS))
            )

        if request_timeout is not None:
            self.REQUEST_TIMEOUT = request_timeout
        else:
            self.REQUEST_TIMEOUT = _float_env("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)

        if run_timeout is not None:
            self.RUN_TIMEOUT = run_timeout
        else:
            self.RUN_TIMEOUT = _float_env("RUN_TIMEOUT", DEFAULT_RUN_TIMEOUT)

        self.EXPORT_MODE = (export_mode or getenv("EXPORT_MODE", MODE_PAGES)).lower()
        self.OUTPUT_DIR = output_dir or getenv("OUTPUT_DIR", DEFAULT_OUTPUT_DIR)

        # Debug logging flag
        if debug is not None:
            self.DEBUG = debug
        else:
            self.DEBUG = getenv("DEBUG", "False").lower() in TRUE_VALUES

    def validate(self):
        """Check required settings before any network call.

        Raises:
            ConfigError: naming the first missing or malformed setting
        """
        if self.ACCOUNT_ID is None or self.ACCOUNT_ID == "":
            raise ConfigError("Please set env var NEW_RELIC_ACCOUNT")
        if not isinstance(self.ACCOUNT_ID, int):
            raise ConfigError("Please set env var NEW_RELIC_ACCOUNT to an integer")
        if not self.USER_KEY:
            raise ConfigError("Please set env var NEW_RELIC_USER_KEY")
        if self.EXPORT_MODE not in EXPORT_MODES:
            raise ConfigError(
                f"Unknown EXPORT_MODE '{self.EXPORT_MODE}', "
                f"expected one of: {', '.join(EXPORT_MODES)}"
            )
        if not isinstance(self.MAX_WORKERS, int) or self.MAX_WORKERS < 1:
            raise ConfigError("MAX_WORKERS must be a positive integer")
        if not _is_number(self.REQUEST_TIMEOUT) or self.REQUEST_TIMEOUT <= 0:
            raise ConfigError("REQUEST_TIMEOUT must be a positive number of seconds")
        if not _is_number(self.RUN_TIMEOUT) or self.RUN_TIMEOUT < 0:
            raise ConfigError("RUN_TIMEOUT must be zero or a positive number of seconds")
        return self
