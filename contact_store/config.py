"""
Store Configuration and Factory

Provides the connection settings for the contact gateway and a factory
that returns a shared gateway instance for the running process.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .base import ContactGatewayInterface

logger = logging.getLogger(__name__)

DEFAULT_MONGO_URL = "mongodb://localhost:27017"
DEFAULT_MAX_POOL_SIZE = 5


@dataclass(frozen=True)
class StoreConfig:
    """
    Configuration for gateway initialization.

    Resolved once at startup and passed to the gateway constructor.
    """
    mongo_url: str = DEFAULT_MONGO_URL

    # Database/collection names
    database: str = "demo_db"
    collection: str = "contacts"

    # Upper bound on pooled connections shared by all requests
    max_pool_size: int = DEFAULT_MAX_POOL_SIZE

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGO_URL: MongoDB connection string (default: mongodb://localhost:27017)
        - DB_NAME: Database name (default: demo_db)
        - COLLECTION: Collection name (default: contacts)
        - MAX_POOL_SIZE: Connection pool bound (default: 5)

        Returns:
            StoreConfig instance
        """
        pool_size_str = os.getenv("MAX_POOL_SIZE", str(DEFAULT_MAX_POOL_SIZE))
        try:
            max_pool_size = max(1, int(pool_size_str))
        except ValueError:
            logger.warning(f"Invalid MAX_POOL_SIZE '{pool_size_str}', defaulting to {DEFAULT_MAX_POOL_SIZE}")
            max_pool_size = DEFAULT_MAX_POOL_SIZE

        return cls(
            mongo_url=os.getenv("MONGO_URL") or DEFAULT_MONGO_URL,
            database=os.getenv("DB_NAME") or "demo_db",
            collection=os.getenv("COLLECTION") or "contacts",
            max_pool_size=max_pool_size,
        )


# Singleton gateway instance
_gateway_instance: Optional[ContactGatewayInterface] = None


def get_contact_gateway(config: Optional[StoreConfig] = None) -> ContactGatewayInterface:
    """
    Get the contact gateway instance.

    The first call creates the gateway from ``config`` (or the environment);
    later calls return the same instance so the connection pool is shared.

    Args:
        config: Optional explicit configuration for the first call

    Returns:
        ContactGatewayInterface implementation
    """
    global _gateway_instance

    if _gateway_instance is None:
        from .mongo_gateway import MongoContactGateway

        config = config or StoreConfig.from_env()
        _gateway_instance = MongoContactGateway(config)
        logger.info(f"Initialized contact gateway for {config.database}.{config.collection}")

    return _gateway_instance


def reset_contact_gateway() -> None:
    """
    Reset the gateway singleton and close its connection pool.

    Used at shutdown, in tests, or when configuration changes.
    """
    global _gateway_instance

    if _gateway_instance is not None:
        from .mongo_gateway import MongoContactGateway
        if isinstance(_gateway_instance, MongoContactGateway):
            _gateway_instance.close()

    _gateway_instance = None
    logger.info("Contact gateway singleton reset")
