"""Relay configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support.  Reads from a .env file and NAVRELAY_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class RelayConfig(BaseSettings):
    """Relay configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export NAVRELAY_LOG_LEVEL=DEBUG
        export NAVRELAY_STORE_PATH=/data/features.db
        export NAVRELAY_PUSH_PREFIX=topic

    Or via .env file::

        NAVRELAY_DEBUG=true
        NAVRELAY_BUS_MAX_WORKERS=4
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NAVRELAY_",
        env_file_encoding="utf-8",
    )

    # Logging; debug forces DEBUG regardless of log_level
    log_level: str = "INFO"
    debug: bool = False

    # Feature store
    store_enabled: bool = True
    store_path: Path = Path(".navrelay/features.db")

    # Live push
    push_prefix: str = "topic"
    push_events_path: Path = Path(".navrelay/push")

    # Geometry
    default_srid: int = 4326

    # Bus delivery; one worker per router lets both process an envelope concurrently
    bus_max_workers: int = 2

    @property
    def effective_log_level(self) -> str:
        """The log level to configure, honouring ``debug``."""
        return "DEBUG" if self.debug else self.log_level.upper()


# Module-level singleton: import as `from navrelay.config import config`
config = RelayConfig()
