"""
VS Code Extension Statistics Collector
Centralized Configuration Management

Pydantic settings with environment variable and .env support.
"""

from functools import lru_cache
import shlex
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vscodestat.models import StatConfig, StatPeriod


class CollectorSettings(BaseSettings):
    """What to collect and where to store it"""

    model_config = SettingsConfigDict(env_prefix="VSCODESTAT_", env_file=".env", extra="ignore")

    extension_name: Optional[str] = Field(default=None, description="Marketplace id, e.g. publisher.extension")
    out_dir: Optional[str] = Field(default=None, description="CSV output directory; unset means fetch only")
    date_period: StatPeriod = Field(default=StatPeriod.YEAR, description="Grouping: year, month, day or none")
    write_extension_name: bool = Field(default=False, description="Write the extension name into a column")
    merge_stored_data: bool = Field(default=True, description="Merge with previously stored rows")
    file_postfix: str = Field(default="vscodestat", description="Postfix of the CSV file names")

    @field_validator("date_period", mode="before")
    @classmethod
    def validate_date_period(cls, v) -> StatPeriod:
        return StatPeriod.parse(v)

    def to_config(self) -> StatConfig:
        return StatConfig(
            date_period=self.date_period,
            write_extension_name=self.write_extension_name,
            merge_stored_data=self.merge_stored_data,
            file_postfix=self.file_postfix,
        )


class FetchSettings(BaseSettings):
    """vsce invocation and retry policy"""

    model_config = SettingsConfigDict(env_prefix="VSCODESTAT_FETCH_", env_file=".env", extra="ignore")

    command: str = Field(default="npx vsce", description="Command used to run vsce")
    timeout_seconds: float = Field(default=120.0, description="Timeout of a single vsce call")
    fail_on_stderr: bool = Field(default=True, description="Treat any stderr output as a failure")
    max_attempts: int = Field(default=3, ge=1, description="Total fetch attempts")
    backoff_seconds: float = Field(default=1.0, ge=0, description="Delay before the first retry")
    backoff_multiplier: float = Field(default=2.0, ge=1, description="Delay growth factor")
    max_backoff_seconds: float = Field(default=30.0, ge=0, description="Upper bound of a retry delay")

    @property
    def command_args(self) -> List[str]:
        return shlex.split(self.command)


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="vscodestat", description="Application name")
    app_env: str = Field(default="development", description="Environment")

    collector: CollectorSettings = Field(default_factory=CollectorSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
