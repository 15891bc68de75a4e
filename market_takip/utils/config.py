"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class StorageConfig(BaseModel):
    """Key-value storage settings."""
    directory: str = "data"
    key: str = "market_takip_products"
    quota_bytes: int = 5242880  # 5MB, same budget as browser localStorage


class ImagesConfig(BaseModel):
    """Photo preprocessing settings."""
    max_width: int = 300
    jpeg_quality: int = 70


class AlertsConfig(BaseModel):
    """Expiry notification settings."""
    within_days: int = 7


class LoggingFilesConfig(BaseModel):
    """Log file paths."""
    inventory: str = "logs/inventory.log"
    storage: str = "logs/storage.log"
    api: str = "logs/api.log"
    error: str = "logs/error.log"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5
    files: LoggingFilesConfig = LoggingFilesConfig()


class APIConfig(BaseModel):
    """HTTP API configuration."""
    title: str = "MarketTakip Inventory API"
    cors_origins: List[str] = ["*"]


class YAMLConfig(BaseModel):
    """Configuration loaded from YAML file."""
    storage: StorageConfig = StorageConfig()
    images: ImagesConfig = ImagesConfig()
    alerts: AlertsConfig = AlertsConfig()
    logging: LoggingConfig = LoggingConfig()
    api: APIConfig = APIConfig()


class Settings(BaseSettings):
    """Application settings from environment variables."""

    environment: str = Field(default="development", description="Environment (development/production)")
    log_level: Optional[str] = Field(default=None, description="Override log level")
    storage_dir: Optional[str] = Field(default=None, description="Override storage directory")
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


class AppConfig:
    """Combined application configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        self.env = Settings()

        # Load YAML config
        config_path = config_path or Path(__file__).parent.parent.parent / "config" / "config.yml"
        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    yaml_data = yaml.safe_load(f) or {}
                self.yaml = YAMLConfig(**yaml_data)
            except (yaml.YAMLError, TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid configuration file: {config_path}",
                    details={"error": str(e)}
                )
        else:
            self.yaml = YAMLConfig()

        # Environment overrides
        if self.env.log_level:
            self.yaml.logging.level = self.env.log_level
        if self.env.storage_dir:
            self.yaml.storage.directory = self.env.storage_dir

    @property
    def storage(self) -> StorageConfig:
        return self.yaml.storage

    @property
    def images(self) -> ImagesConfig:
        return self.yaml.images

    @property
    def alerts(self) -> AlertsConfig:
        return self.yaml.alerts

    @property
    def logging(self) -> LoggingConfig:
        return self.yaml.logging

    @property
    def api(self) -> APIConfig:
        return self.yaml.api

    @property
    def is_production(self) -> bool:
        return self.env.environment.lower() == "production"


@lru_cache()
def get_config() -> AppConfig:
    """Get cached configuration instance."""
    return AppConfig()
