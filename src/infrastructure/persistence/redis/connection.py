"""
Redis Client Factory.

Builds Redis clients for the entity store, with a PING check, retry logic and
health checks.

Responsibility:
    - Build a pooled Redis client from explicit arguments or environment
    - Verify connectivity with PING, retrying with exponential backoff
    - Health check with PING

Architecture Notes:
    - Infrastructure Layer (external dependency on Redis)
    - No module-level client or pool: the container owns the client and
      closes it on shutdown
    - Environment-based configuration

Business Rules:
    - Connection timeout: 5s (configurable via REDIS_TIMEOUT)
    - Retry attempts: 3 (configurable via REDIS_RETRY_ATTEMPTS)
    - Exponential backoff: 1s, 2s, 4s (base=1s, multiplier=2)
    - Decode responses: True (return strings not bytes)

Error Handling:
    - ConnectionError / TimeoutError: Log and retry with exponential backoff
    - All retries exhausted: StoreUnavailableError
    - Health check failure: Return False (don't raise exception)

Examples:
    >>> client = create_redis_client()
    >>> health_check(client)
    True
    >>> client.close()
"""

import logging
import os
import time
from typing import Optional

from redis import Redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from src.domain.shared.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def create_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    timeout: Optional[int] = None,
    retry_attempts: Optional[int] = None,
    backoff_base: float = 1,
) -> Redis:
    """
    Build a Redis client and wait until the server answers PING.

    Args:
        host: Redis hostname (default from env: REDIS_HOST or "localhost")
        port: Redis port (default from env: REDIS_PORT or 6379)
        db: Redis database number (default from env: REDIS_DB or 0)
        timeout: Socket timeout in seconds (default from env: REDIS_TIMEOUT or 5)
        retry_attempts: PING attempts (default from env: REDIS_RETRY_ATTEMPTS or 3)
        backoff_base: First retry delay in seconds, doubled on each retry

    Returns:
        Connected Redis client

    Raises:
        StoreUnavailableError: If PING fails after all retry attempts
    """
    redis_host = host or os.getenv("REDIS_HOST", "localhost")
    redis_port = port or int(os.getenv("REDIS_PORT", "6379"))
    redis_db = db if db is not None else int(os.getenv("REDIS_DB", "0"))
    conn_timeout = timeout or int(os.getenv("REDIS_TIMEOUT", "5"))
    attempts = retry_attempts or int(os.getenv("REDIS_RETRY_ATTEMPTS", "3"))

    logger.info(
        f"Creating Redis client: host={redis_host}, port={redis_port}, "
        f"db={redis_db}, timeout={conn_timeout}s"
    )
    client = Redis(
        host=redis_host,
        port=redis_port,
        db=redis_db,
        socket_timeout=conn_timeout,
        socket_connect_timeout=conn_timeout,
        socket_keepalive=True,
        decode_responses=True,
    )

    last_error: Optional[Exception] = None
    for attempt in range(attempts):
        try:
            client.ping()
            logger.debug(f"Redis connection established (attempt {attempt + 1})")
            return client

        except (ConnectionError, TimeoutError) as e:
            last_error = e
            if attempt < attempts - 1:
                delay = backoff_base * (2**attempt)
                logger.warning(
                    f"Redis connection failed (attempt {attempt + 1}/{attempts}): {e}. "
                    f"Retrying in {delay}s..."
                )
                time.sleep(delay)
            else:
                logger.error(f"Redis connection failed after {attempts} attempts: {e}")

    client.close()
    raise StoreUnavailableError(
        f"Failed to connect to Redis at {redis_host}:{redis_port} "
        f"after {attempts} attempts",
        original_error=last_error,
    )


def health_check(client: Redis) -> bool:
    """
    Check Redis health with PING.

    Returns:
        True if Redis answered PING, False otherwise (never raises)
    """
    try:
        if client.ping():
            logger.debug("Redis health check: OK")
            return True
        logger.warning("Redis health check: PING returned False")
        return False

    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return False
