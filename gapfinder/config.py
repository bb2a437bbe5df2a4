"""
Configuration helpers for GapFinder.

Settings come from environment variables, optionally loaded from a `.env`
file in the working directory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from gapfinder.fsrs.constants import (
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_REQUEST_RETENTION,
    FSRSParameters,
)


load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///gapfinder.db"
PROD_DB_NAME = "gapfinder"
TEST_DB_NAME = "test_gapfinder"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return _flag("TEST_MODE")


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    Falls back to a SQLite file in the working directory. In test mode the
    production database name is swapped for the test database name.

    Returns:
        SQLAlchemy database URL
    """
    url = os.path.expandvars(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))
    if is_test_mode():
        return url.replace(PROD_DB_NAME, TEST_DB_NAME)
    return url


@dataclass(frozen=True)
class Settings:
    """Strongly typed settings loaded from environment variables."""

    database_url: str
    log_level: str
    sqlalchemy_echo: bool
    request_retention: float
    maximum_interval: int

    @classmethod
    def from_env(cls) -> Settings:
        """Construct settings directly from environment variables."""
        try:
            request_retention = float(
                os.getenv("FSRS_REQUEST_RETENTION", str(DEFAULT_REQUEST_RETENTION))
            )
        except ValueError as exc:
            raise RuntimeError("FSRS_REQUEST_RETENTION must be a number.") from exc

        try:
            maximum_interval = int(
                os.getenv("FSRS_MAXIMUM_INTERVAL", str(DEFAULT_MAXIMUM_INTERVAL))
            )
        except ValueError as exc:
            raise RuntimeError("FSRS_MAXIMUM_INTERVAL must be an integer.") from exc

        if not 0.0 < request_retention < 1.0:
            raise RuntimeError("FSRS_REQUEST_RETENTION must be between 0 and 1.")
        if maximum_interval < 1:
            raise RuntimeError("FSRS_MAXIMUM_INTERVAL must be a positive integer.")

        return cls(
            database_url=get_database_url(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sqlalchemy_echo=_flag("SQLALCHEMY_ECHO"),
            request_retention=request_retention,
            maximum_interval=maximum_interval,
        )

    def fsrs_parameters(self) -> FSRSParameters:
        """Memory-model parameters with the configured retention and interval cap."""
        return FSRSParameters(
            request_retention=self.request_retention,
            maximum_interval=self.maximum_interval,
        )


def configure_logging(log_level: str = "INFO") -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(format=LOG_FORMAT, level=log_level)
