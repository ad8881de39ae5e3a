"""
Battery daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Every variable is prefixed with ``BATTWATCH_`` (for example
``BATTWATCH_POLL_INTERVAL_S=10``) and may also come from a ``.env`` file.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BattwatchSettings(BaseSettings):
    """Battery telemetry daemon configuration.

    All values have defaults, so the daemon starts with no environment set.

    Attributes:
        poll_interval_s: Seconds between poll cycles (1-120).
        upower_path: upower executable name or path.
        provider_timeout_s: Timeout for a single upower invocation.
        device_id: Pin a UPower object path and skip discovery.
        rediscover_after_failures: Consecutive query failures before the
            device is rediscovered (0 disables).
        state_file: Path of the JSON state file; empty disables it.
        show_percentage: Include the level in the published title.
        show_time: Include the remaining time in the published title.
        api_enabled: Serve the read-only HTTP state API.
        api_host: Bind address for the HTTP API.
        api_port: Bind port for the HTTP API.
        log_level: Root log level.
    """

    model_config = SettingsConfigDict(
        env_prefix="BATTWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    poll_interval_s: float = 5.0
    upower_path: str = "upower"
    provider_timeout_s: float = 5.0
    device_id: str = ""
    rediscover_after_failures: int = 3
    state_file: str = ""
    show_percentage: bool = True
    show_time: bool = False
    api_enabled: bool = False
    api_host: str = "127.0.0.1"
    api_port: int = 8765
    log_level: str = "INFO"

    @field_validator("poll_interval_s")
    @classmethod
    def poll_interval_must_be_bounded(cls, v: float) -> float:
        """Keep the poll interval within 1-120 seconds.

        Each cycle spawns an external process, so very short intervals are
        rejected.
        """
        if v < 1 or v > 120:
            raise ValueError("BATTWATCH_POLL_INTERVAL_S must be between 1 and 120")
        return v

    @field_validator("provider_timeout_s")
    @classmethod
    def provider_timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("BATTWATCH_PROVIDER_TIMEOUT_S must be > 0")
        return v

    @field_validator("rediscover_after_failures")
    @classmethod
    def rediscover_after_failures_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("BATTWATCH_REDISCOVER_AFTER_FAILURES must be >= 0")
        return v

    @field_validator("api_port")
    @classmethod
    def api_port_must_be_valid(cls, v: int) -> int:
        """Validate the API port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("BATTWATCH_API_PORT must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"BATTWATCH_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level
