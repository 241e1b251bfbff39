"""
Tests for the Redis client factory.

Covers:
- Client construction from arguments and environment
- Retry logic with exponential backoff
- Health check with PING
"""

from unittest.mock import call, patch

import pytest
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from src.domain.shared.exceptions import StoreUnavailableError
from src.infrastructure.persistence.redis.connection import (
    create_redis_client,
    health_check,
)

CONNECTION_MODULE = "src.infrastructure.persistence.redis.connection"


# ============================================================================
# CLIENT CREATION TESTS
# ============================================================================


def test_create_client_with_defaults(mock_redis_client, monkeypatch):
    """Test default configuration when no environment is set."""
    for name in ("REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    with patch(f"{CONNECTION_MODULE}.Redis", return_value=mock_redis_client) as redis_cls:
        client = create_redis_client()

    assert client is mock_redis_client
    kwargs = redis_cls.call_args.kwargs
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 6379
    assert kwargs["db"] == 0
    assert kwargs["socket_timeout"] == 5
    assert kwargs["decode_responses"] is True
    mock_redis_client.ping.assert_called_once()


def test_create_client_from_environment(mock_redis_client, monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis.internal")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_DB", "2")
    monkeypatch.setenv("REDIS_TIMEOUT", "10")

    with patch(f"{CONNECTION_MODULE}.Redis", return_value=mock_redis_client) as redis_cls:
        create_redis_client()

    kwargs = redis_cls.call_args.kwargs
    assert (kwargs["host"], kwargs["port"], kwargs["db"]) == ("redis.internal", 6380, 2)
    assert kwargs["socket_connect_timeout"] == 10


def test_explicit_arguments_win_over_environment(mock_redis_client, monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis.internal")

    with patch(f"{CONNECTION_MODULE}.Redis", return_value=mock_redis_client) as redis_cls:
        create_redis_client(host="other", port=7000, db=0)

    kwargs = redis_cls.call_args.kwargs
    assert (kwargs["host"], kwargs["port"], kwargs["db"]) == ("other", 7000, 0)


# ============================================================================
# RETRY TESTS
# ============================================================================


def test_retry_then_success(mock_redis_client):
    """Test exponential backoff between failed PINGs."""
    mock_redis_client.ping.side_effect = [
        ConnectionError("refused"),
        TimeoutError("slow"),
        True,
    ]

    with patch(f"{CONNECTION_MODULE}.Redis", return_value=mock_redis_client), patch(
        f"{CONNECTION_MODULE}.time.sleep"
    ) as sleep:
        client = create_redis_client(retry_attempts=3)

    assert client is mock_redis_client
    assert sleep.call_args_list == [call(1), call(2)]


def test_all_retries_exhausted(mock_redis_client):
    error = ConnectionError("refused")
    mock_redis_client.ping.side_effect = error

    with patch(f"{CONNECTION_MODULE}.Redis", return_value=mock_redis_client), patch(
        f"{CONNECTION_MODULE}.time.sleep"
    ) as sleep:
        with pytest.raises(StoreUnavailableError) as exc_info:
            create_redis_client(retry_attempts=3, backoff_base=0.5)

    assert exc_info.value.original_error is error
    assert "after 3 attempts" in exc_info.value.message
    assert sleep.call_args_list == [call(0.5), call(1.0)]
    mock_redis_client.close.assert_called_once()


# ============================================================================
# HEALTH CHECK TESTS
# ============================================================================


def test_health_check_ok(mock_redis_client):
    assert health_check(mock_redis_client) is True


def test_health_check_false_ping(mock_redis_client):
    mock_redis_client.ping.return_value = False
    assert health_check(mock_redis_client) is False


def test_health_check_never_raises(mock_redis_client):
    mock_redis_client.ping.side_effect = RedisError("down")
    assert health_check(mock_redis_client) is False
