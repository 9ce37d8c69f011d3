"""Runtime configuration read from the environment.

All knobs use the ``LIGHT_REMOTE_`` prefix. Invalid values never abort
startup: they are logged and the default is used instead.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .const import (
    DEFAULT_LOG_CAPACITY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SERIAL_BAUD,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def get_env_float(name: str, default: float) -> float:
    """Get float environment variable.

    Args:
        name: Environment variable name
        default: Default value if not found or invalid

    Returns:
        Float value from environment or default
    """
    raw = os.getenv(name)
    if raw is None:
        return default

    try:
        return float(raw)
    except ValueError:
        logger.warning(
            f"Invalid float value for {name}: '{raw}'. Using default: {default}"
        )
        return default


def get_env_int(name: str, default: int) -> int:
    """Get integer environment variable.

    Args:
        name: Environment variable name
        default: Default value if not found or invalid

    Returns:
        Integer value from environment or default
    """
    raw = os.getenv(name)
    if raw is None:
        return default

    try:
        return int(raw)
    except ValueError:
        logger.warning(
            f"Invalid integer value for {name}: '{raw}'. Using default: {default}"
        )
        return default


def _positive_float(name: str, default: float) -> float:
    value = get_env_float(name, default)
    if value <= 0:
        logger.warning(
            f"{name} must be positive, got {value}. Using default: {default}"
        )
        return default
    return value


def _positive_int(name: str, default: int) -> int:
    value = get_env_int(name, default)
    if value <= 0:
        logger.warning(
            f"{name} must be positive, got {value}. Using default: {default}"
        )
        return default
    return value


@dataclass(slots=True)
class SessionConfig:
    """Tunables for a session manager and the serial adapter."""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    log_capacity: int = DEFAULT_LOG_CAPACITY
    serial_baud: int = DEFAULT_SERIAL_BAUD
    log_level: str = "INFO"
    service_host: str = "0.0.0.0"
    service_port: int = 8000

    @classmethod
    def from_env(cls) -> SessionConfig:
        """Build a config from ``LIGHT_REMOTE_*`` environment variables."""
        return cls(
            poll_interval=_positive_float(
                "LIGHT_REMOTE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL
            ),
            log_capacity=_positive_int(
                "LIGHT_REMOTE_LOG_CAPACITY", DEFAULT_LOG_CAPACITY
            ),
            serial_baud=_positive_int(
                "LIGHT_REMOTE_SERIAL_BAUD", DEFAULT_SERIAL_BAUD
            ),
            log_level=os.getenv("LIGHT_REMOTE_LOG_LEVEL", "INFO").upper(),
            service_host=os.getenv("LIGHT_REMOTE_SERVICE_HOST", "0.0.0.0"),
            service_port=get_env_int("LIGHT_REMOTE_SERVICE_PORT", 8000),
        )


def configure_logging(level: str | int | None = None) -> None:
    """Install a basic log handler unless the host already configured one."""
    if level is None:
        level = os.getenv("LIGHT_REMOTE_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        # default INFO
        level = logging._nameToLevel.get(level.upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("light_remote").setLevel(level)
