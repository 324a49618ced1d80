"""Configuration settings for the Overhead backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("overhead.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    overhead_env: str = os.getenv("OVERHEAD_ENV", "local")
    log_level: str = os.getenv("OVERHEAD_LOG_LEVEL", "INFO")
    retention_days: int = int(os.getenv("OVERHEAD_RETENTION_DAYS", "7"))

    # State-vector feed
    feed_base_url: str = os.getenv(
        "FEED_BASE_URL",
        "https://opensky-network.org/api/states/all",
    )
    feed_timeout: float = float(os.getenv("FEED_TIMEOUT", "10.0"))
    feed_background_timeout: float = float(os.getenv("FEED_BACKGROUND_TIMEOUT", "5.0"))

    # Detection windows, meters
    alert_radius_m: float = float(os.getenv("ALERT_RADIUS_M", "10000"))
    acquisition_radius_m: float = float(os.getenv("ACQUISITION_RADIUS_M", "20000"))
    background_alert_radius_m: float = float(
        os.getenv("BACKGROUND_ALERT_RADIUS_M", "5000")
    )

    # Fastest plausible ground speed used to follow tracks without an ICAO24 address
    anonymous_max_speed_mps: float = float(os.getenv("ANONYMOUS_MAX_SPEED_MPS", "340"))

    # Throttling, seconds
    feed_poll_interval: float = float(os.getenv("FEED_POLL_INTERVAL", "30"))
    alert_interval: float = float(os.getenv("ALERT_INTERVAL", "300"))

    # Position freshness
    foreground_max_position_age: float = float(
        os.getenv("FOREGROUND_MAX_POSITION_AGE", "30")
    )
    background_max_position_age: float = float(
        os.getenv("BACKGROUND_MAX_POSITION_AGE", "1800")
    )
    position_max_accuracy_m: float = float(os.getenv("POSITION_MAX_ACCURACY_M", "100"))

    # Background wake
    enable_background_checks: bool = _get_bool("ENABLE_BACKGROUND_CHECKS")
    background_check_interval: float = float(
        os.getenv("BACKGROUND_CHECK_INTERVAL", "3600")
    )

    alert_history_enabled: bool = _get_bool("ALERT_HISTORY_ENABLED", default=True)


settings = Settings()

if settings.acquisition_radius_m < settings.alert_radius_m:
    logger.warning(
        "Acquisition radius %.0f m is smaller than alert radius %.0f m; "
        "tracks will alert without lead time",
        settings.acquisition_radius_m,
        settings.alert_radius_m,
    )

__all__ = ["settings", "Settings"]
