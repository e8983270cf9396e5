from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Default short URL TTL when the caller doesn't provide one (7 days in seconds)
    DEFAULT = 604_800  # 60 * 60 * 24 * 7
    # Explicit "never expires" marker
    NEVER = 0


class Interval:
    """Background task periods in seconds."""

    EXPIRY_SWEEP = 86_400  # 60 * 60 * 24
    LIMITER_EVICTION = 60


class DefaultLimit:
    """Default admission limiter values."""

    MAX_REQUESTS = 5  # Requests admitted per client within one window
    WINDOW_SECONDS = 60
    STALE_AFTER_SECONDS = 120  # Idle clients are forgotten after this long


# Generated codes that collide with custom codes are skipped at most this many times
MAX_ALLOCATION_ATTEMPTS = 5


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'
        CONFIG_FILE = 'SNAPLINK_CONFIG_FILE'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'


class Backend(StrEnum):
    """Supported link store backends."""

    JSON = 'json'
    REDIS = 'redis'
