"""
Pytest Configuration for Redis Tests.

No Redis server is needed: the client is a MagicMock shaped like redis.Redis.
"""

from unittest.mock import MagicMock

import pytest
from redis import Redis


@pytest.fixture
def mock_redis_client():
    """Create mock Redis client with a working PING."""
    client_mock = MagicMock(spec=Redis)
    client_mock.ping.return_value = True
    client_mock.close.return_value = None
    return client_mock
