"""Configuration for the Tritium to Prometheus exporter"""
import logging
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Exporter configuration, overridable from environment variables"""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")

    # Export settings
    registry_type: str = Field(default="Tritium", min_length=1, description="Registry name used in help text")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")
    environment: str = Field(default="production", description="production (JSON logs) or development (console logs)")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        env = v.lower()
        if env not in ("production", "development"):
            raise ValueError(f"Unknown environment: {v}")
        return env

    @field_validator('log_file')
    @classmethod
    def ensure_log_directory(cls, v):
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"
