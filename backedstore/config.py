# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load store defaults from environment variables / .env file.
#   Provides a typed config object to the store factories and the CLI.
#
# CLASSES:
# --------
# - StoreConfig (dataclass)
#     sync_interval_ms: int        (default 30000)
#     default_path: str | None     (default None → in-memory store)
#     log_level: str               (default "WARNING")
#
# FUNCTIONS:
# ----------
# - get_config() -> StoreConfig
#     Load .env using python-dotenv, construct StoreConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Forget the cached singleton (tests, or after changing env vars).
#
# ENVIRONMENT:
# ------------
#   BACKEDSTORE_SYNC_INTERVAL_MS   periodic flush interval in milliseconds
#   BACKEDSTORE_PATH               default file used by the CLI
#   BACKEDSTORE_LOG_LEVEL          logging level used by the CLI
#
# USAGE:
# ------
#   from backedstore.config import get_config
#   config = get_config()
#   print(config.sync_interval_ms)
#
# ==============================================

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SYNC_INTERVAL_MS = 30000


@dataclass
class StoreConfig:
    """Store configuration."""
    sync_interval_ms: int = DEFAULT_SYNC_INTERVAL_MS
    default_path: Optional[str] = None
    log_level: str = "WARNING"


# Singleton instance
_config_instance: Optional[StoreConfig] = None


def _parse_interval(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_SYNC_INTERVAL_MS
    try:
        value = int(raw)
    except ValueError:
        logger.warning(
            "Ignoring invalid BACKEDSTORE_SYNC_INTERVAL_MS=%r, using %d",
            raw, DEFAULT_SYNC_INTERVAL_MS
        )
        return DEFAULT_SYNC_INTERVAL_MS
    if value <= 0:
        logger.warning(
            "BACKEDSTORE_SYNC_INTERVAL_MS must be positive, got %d, using %d",
            value, DEFAULT_SYNC_INTERVAL_MS
        )
        return DEFAULT_SYNC_INTERVAL_MS
    return value


def get_config() -> StoreConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        StoreConfig: Store configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # .env in the working directory of the host application
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    _config_instance = StoreConfig(
        sync_interval_ms=_parse_interval(os.getenv("BACKEDSTORE_SYNC_INTERVAL_MS")),
        default_path=os.getenv("BACKEDSTORE_PATH") or None,
        log_level=(os.getenv("BACKEDSTORE_LOG_LEVEL") or "WARNING").upper()
    )

    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads it."""
    global _config_instance
    _config_instance = None
