"""
Demo Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from contact_store.config import StoreConfig

load_dotenv()

logger = logging.getLogger(__name__)


class DemoSettings(BaseSettings):
    """
    Demo service configuration with validation.

    All settings can be overridden via environment variables
    (PORT, MONGO_URL, DB_NAME, COLLECTION, ...).
    """

    # === Server ===
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="HTTP port for `python -m demo_service`"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    # === CORS ===
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins"
    )

    # === MongoDB ===
    mongo_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    db_name: str = Field(
        default="demo_db",
        min_length=1,
        description="MongoDB database name"
    )
    collection: str = Field(
        default="contacts",
        min_length=1,
        description="Contacts collection name"
    )
    max_pool_size: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Maximum pooled MongoDB connections shared by all requests (1-100)"
    )
    ensure_index_on_startup: bool = Field(
        default=True,
        description="Create the unique email index when the app starts"
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_format: str = Field(
        default="simple",
        description="Log format: simple or json"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("mongo_url")
    @classmethod
    def validate_mongo_url(cls, v: str) -> str:
        """Basic URL format validation."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(f"Invalid MongoDB URL format: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in {"simple", "json"}:
            raise ValueError("log_format must be 'simple' or 'json'")
        return v_lower

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def redacted_mongo_url(self) -> str:
        """Mongo URL safe to log (credentials hidden unless localhost)."""
        return self.mongo_url if "localhost" in self.mongo_url else "*****"

    def store_config(self) -> StoreConfig:
        """Build the gateway configuration from these settings."""
        return StoreConfig(
            mongo_url=self.mongo_url,
            database=self.db_name,
            collection=self.collection,
            max_pool_size=self.max_pool_size,
        )

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning messages.
        """
        issues = []

        if self.is_production:
            if "localhost" in self.mongo_url:
                issues.append("WARNING: Using localhost MongoDB in production")
            if not self.ensure_index_on_startup:
                issues.append("WARNING: ENSURE_INDEX_ON_STARTUP disabled in production")

        return issues

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # MONGO_URL = mongo_url


@lru_cache()
def get_settings() -> DemoSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the life of the process.
    """
    return DemoSettings()


def validate_config_on_startup() -> None:
    """
    Validate configuration at application startup.

    Raises ValueError with details if settings fail validation.
    Production concerns are logged as warnings and do not stop startup.
    """
    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    for issue in settings.validate_production_config():
        logger.warning(issue)

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  mongo_url={settings.redacted_mongo_url}")
    logger.info(f"  database={settings.db_name} collection={settings.collection}")
    logger.info(f"  max_pool_size={settings.max_pool_size}")
