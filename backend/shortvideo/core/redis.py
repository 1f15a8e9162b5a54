"""
Redis Connection Management

Provides Redis connections for the render job queue with:
- Connection pooling per Redis URL
- Connection health check functionality
"""

import time
from dataclasses import dataclass
from typing import Dict, Optional

from redis import ConnectionPool, Redis
from redis.exceptions import ConnectionError, TimeoutError


# Read and connect timeout for every pooled connection
SOCKET_TIMEOUT_SECONDS = 5.0

# Connection pools keyed by Redis URL
_connection_pools: Dict[str, ConnectionPool] = {}


def get_connection_pool(redis_url: str) -> ConnectionPool:
    """
    Get or create the connection pool for ``redis_url``.

    RQ stores pickled job data, so responses are not decoded.
    """
    pool = _connection_pools.get(redis_url)
    if pool is None:
        pool = ConnectionPool.from_url(
            redis_url,
            max_connections=10,
            socket_timeout=SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
        )
        _connection_pools[redis_url] = pool
    return pool


def get_redis_connection(redis_url: str) -> Redis:
    """
    Get a Redis connection from the pool for ``redis_url``.

    Example:
        >>> redis = get_redis_connection("redis://localhost:6379/0")
        >>> redis.ping()
        True
    """
    return Redis(connection_pool=get_connection_pool(redis_url))


@dataclass
class RedisHealthStatus:
    """Health status for Redis connection."""
    healthy: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


def check_redis_health(redis_url: str, timeout: float = 5.0) -> RedisHealthStatus:
    """
    Check the health of the Redis connection by timing a PING.

    Args:
        redis_url: Redis connection URL
        timeout: Connection timeout in seconds

    Returns:
        RedisHealthStatus: Health status including latency and any errors
    """
    try:
        client = Redis.from_url(
            redis_url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )

        start = time.perf_counter()
        pong = client.ping()
        latency_ms = (time.perf_counter() - start) * 1000

        if not pong:
            return RedisHealthStatus(healthy=False, error="PING returned False")

        return RedisHealthStatus(healthy=True, latency_ms=round(latency_ms, 2))

    except ConnectionError as e:
        return RedisHealthStatus(healthy=False, error=f"Connection failed: {str(e)}")
    except TimeoutError as e:
        return RedisHealthStatus(healthy=False, error=f"Connection timeout: {str(e)}")
    except Exception as e:
        return RedisHealthStatus(healthy=False, error=f"Unexpected error: {str(e)}")


def close_connection_pools() -> None:
    """
    Close and reset all connection pools.

    Useful for cleanup during testing or shutdown.
    """
    for pool in _connection_pools.values():
        pool.disconnect()
    _connection_pools.clear()
