# config/settings.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum
from dotenv import load_dotenv

from azmetrics.core.models import MetricType

# Load .env file explicitly
load_dotenv()

DEFAULT_RESOURCE_TYPE = "Microsoft.Compute/virtualMachines"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AzureSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AZURE_")

    cli_path: str = Field("az", description="Azure CLI executable name or path")
    subscription_id: Optional[str] = Field(None, description="Subscription passed to every az command")
    resource_group: Optional[str] = Field(None, description="Default resource group to scan")
    command_timeout_seconds: Optional[float] = Field(None, description="Per-command timeout, unlimited when unset")

    @field_validator('command_timeout_seconds')
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("command_timeout_seconds must be positive")
        return v


class CollectionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="COLLECTION_")

    resource_type: str = Field(DEFAULT_RESOURCE_TYPE, description="Resource type to query")
    metric: MetricType = Field(MetricType.CPU, description="Logical metric to collect")
    name_filter: Optional[str] = Field(None, description="Regular expression on resource names")
    max_concurrency: Optional[int] = Field(None, description="Cap on in-flight metric queries, unbounded when unset")
    default_step: str = Field("5m", description="Sampling step when none is given")
    default_hours: int = Field(24, description="Window length in hours when no start is given")

    @field_validator('metric', mode='before')
    @classmethod
    def validate_metric(cls, v):
        if isinstance(v, str):
            return MetricType(v.lower())
        return v

    @field_validator('max_concurrency')
    @classmethod
    def validate_max_concurrency(cls, v):
        if v is not None and v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_config_path: Optional[str] = Field(None, description="YAML logging config, switches to JSON logs")

    azure: AzureSettings = Field(default_factory=lambda: AzureSettings())
    collection: CollectionSettings = Field(default_factory=lambda: CollectionSettings())

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
