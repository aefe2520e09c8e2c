"""
Redis Configuration

Configures Redis connection settings and provides factory functions
for creating the shared Redis client.
"""

import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)


class RedisConfig:
    """Redis configuration settings."""

    def __init__(self):
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", 6379))
        self.db = int(os.getenv("REDIS_DB", 0))
        self.password = os.getenv("REDIS_PASSWORD")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))
        # Quota checks sit on the request path; fail fast rather than hang
        self.socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", 1.0))

        # Redis URL format: redis://[:password@]host:port/db
        self.url = os.getenv("REDIS_URL")
        if self.url:
            connection_params = redis.connection.parse_url(self.url)
            self.host = connection_params.get("host", self.host)
            self.port = connection_params.get("port", self.port)
            self.db = connection_params.get("db", self.db)
            self.password = connection_params.get("password", self.password)


class RedisConnectionManager:
    """Manages a pooled Redis client."""

    def __init__(self, config: RedisConfig):
        pool_kwargs = {
            "host": config.host,
            "port": config.port,
            "db": config.db,
            "max_connections": config.max_connections,
            "socket_timeout": config.socket_timeout,
            "socket_connect_timeout": config.socket_timeout,
            "decode_responses": True,
        }
        if config.password:
            pool_kwargs["password"] = config.password

        self.connection_pool = redis.ConnectionPool(**pool_kwargs)
        self.client = redis.Redis(connection_pool=self.connection_pool)

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except (redis.ConnectionError, redis.TimeoutError):
            return False

    def close(self) -> None:
        self.connection_pool.disconnect()


# Global Redis connection manager
_redis_manager: Optional[RedisConnectionManager] = None


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Initialize Redis connection manager.

    Args:
        config: Redis configuration, uses default if None

    Returns:
        RedisConnectionManager instance
    """
    global _redis_manager

    if config is None:
        config = RedisConfig()

    _redis_manager = RedisConnectionManager(config)
    logger.info(f"Redis client configured for {config.host}:{config.port}/{config.db}")
    return _redis_manager


def get_redis_client() -> redis.Redis:
    """
    Get Redis client instance.

    Returns:
        Redis client

    Raises:
        RuntimeError: If Redis is not initialized
    """
    if _redis_manager is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")

    return _redis_manager.client


def redis_health_check() -> bool:
    """
    Check Redis connection health.

    Returns:
        True if Redis is healthy, False otherwise
    """
    if _redis_manager is None:
        return False

    return _redis_manager.health_check()
