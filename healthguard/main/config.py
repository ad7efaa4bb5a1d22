"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.
"""

from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from healthguard.shared import (
    DEFAULT_OVERALL_TIMEOUT_SECONDS,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    EnumEnvironment,
    EnumLogLevel,
)


class HealthSettings(BaseSettings):
    """Time budgets applied by the aggregator."""

    probe_timeout: float = Field(
        default=DEFAULT_PROBE_TIMEOUT_SECONDS,
        gt=0,
        description="Per-probe timeout in seconds",
    )
    overall_timeout: float = Field(
        default=DEFAULT_OVERALL_TIMEOUT_SECONDS,
        gt=0,
        description="Budget for a whole evaluation in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_", case_sensitive=False, extra="ignore"
    )


class MemoryCheckSettings(BaseSettings):
    """Process memory probe configuration."""

    enabled: bool = Field(default=True, description="Register the memory probe")
    name: str = Field(default="memory", description="Report entry name")
    max_memory_mb: int = Field(
        default=1024, gt=0, description="Resident memory limit in MB"
    )
    warning_threshold: float = Field(
        default=0.8,
        gt=0,
        le=1,
        description="Fraction of the limit above which the probe is degraded",
    )
    tags: List[str] = Field(default_factory=list, description="Probe tags")

    model_config = SettingsConfigDict(
        env_prefix="MEMORY_CHECK_", case_sensitive=False, extra="ignore"
    )


class DiskCheckSettings(BaseSettings):
    """Disk space probe configuration."""

    enabled: bool = Field(default=True, description="Register the disk probe")
    name: str = Field(default="disk_space", description="Report entry name")
    path: Optional[str] = Field(
        default=None, description="Path to inspect (current directory if None)"
    )
    min_free_space_gb: int = Field(
        default=1, ge=0, description="Free space below which the probe is unhealthy"
    )
    warning_threshold_multiplier: float = Field(
        default=2.0,
        ge=1,
        description="Multiple of the minimum below which the probe is degraded",
    )
    tags: List[str] = Field(default_factory=list, description="Probe tags")

    model_config = SettingsConfigDict(
        env_prefix="DISK_CHECK_", case_sensitive=False, extra="ignore"
    )


class HttpCheckSettings(BaseModel):
    """One HTTP dependency to probe."""

    name: str = Field(description="Report entry name")
    url: str = Field(description="Absolute URL requested by the probe")
    request_timeout: float = Field(
        default=30.0, gt=0, description="HTTP client request timeout (s)"
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Probe budget override (s); HEALTH_PROBE_TIMEOUT if None",
    )
    expected_status: Optional[int] = Field(
        default=None, description="Required status code (any 2xx if None)"
    )
    slow_response_threshold_ms: float = Field(
        default=5000, gt=0, description="Slower successful responses are degraded"
    )
    tags: List[str] = Field(default_factory=list, description="Probe tags")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    health: HealthSettings = Field(default_factory=HealthSettings)
    memory_check: MemoryCheckSettings = Field(default_factory=MemoryCheckSettings)
    disk_check: DiskCheckSettings = Field(default_factory=DiskCheckSettings)
    http_checks: List[HttpCheckSettings] = Field(
        default_factory=list, description="HTTP dependencies, as a JSON list"
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Used to be mocked in tests, allowing different settings per environment.
    """
    return AppSettings()
