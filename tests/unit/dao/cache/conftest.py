from unittest.mock import MagicMock

import pytest
import redis
from pytest import MonkeyPatch

from edgeshortener.constants import ENV


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture(autouse=True)
def _env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv(ENV.ElastiCache.HOST_PARAM, '/edgeshortener/dev/elasticache/host')
    monkeypatch.setenv(ENV.ElastiCache.PORT_PARAM, '/edgeshortener/dev/elasticache/port')
    monkeypatch.setenv(ENV.ElastiCache.DB_PARAM, '/edgeshortener/dev/elasticache/db')
    monkeypatch.setenv(ENV.ElastiCache.USER_PARAM, '/edgeshortener/dev/elasticache/user')
    monkeypatch.setenv(ENV.ElastiCache.SECRET, 'edgeshortener/dev/elasticache/credentials')


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis client with a successful ping."""
    client = MagicMock(spec=redis.Redis)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.ping.return_value = True
    client.get.return_value = None
    client.delete.return_value = 0
    return client
