"""Unit tests for LinkCacheDAO

Test coverage includes:

1. Initialization
   - Uses the provided client, prefixes keys and pings on init.
   - Unreachable Redis raises CacheUnavailableError.

2. get() / put() / delete()
   - Delegate to GET / SET EX / DEL.
   - Non-positive TTLs are rejected.

3. Error handling
   - redis-py errors surface as CacheUnavailableError.
"""

import pytest
import redis

from edgeshortener.dao.cache import LinkCacheDAO
from edgeshortener.dao.exceptions import CacheUnavailableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao(redis_client, app_prefix):
    return LinkCacheDAO(redis_client=redis_client, prefix=app_prefix)


# -------------------------------
# 1. Initialization
# -------------------------------


def test_initialization(dao, redis_client):
    """The DAO wraps the given client, prefixes keys and pings once."""
    assert dao.redis is redis_client
    assert dao.keys.url_key('ab12') == 'cache:testapp:test:url:ab12'
    redis_client.ping.assert_called_once()


def test_initialization_unreachable_redis(redis_client):
    """A failing PING raises CacheUnavailableError naming the endpoint."""
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('connection refused')

    with pytest.raises(CacheUnavailableError, match='redis.test:6379/0'):
        LinkCacheDAO(redis_client=redis_client)


def test_healthcheck_without_raising(dao, redis_client):
    """healthcheck(raise_error=False) reports failure as False."""
    redis_client.ping.side_effect = redis.exceptions.TimeoutError('timeout')
    assert dao.healthcheck(raise_error=False) is False


# -------------------------------
# 2. get() / put() / delete()
# -------------------------------


def test_get(dao, redis_client):
    """get() returns the raw cached value."""
    redis_client.get.return_value = '{"url":"https://example.com"}'

    assert dao.get('cache:testapp:test:url:ab12') == '{"url":"https://example.com"}'
    redis_client.get.assert_called_once_with('cache:testapp:test:url:ab12')


def test_get_miss(dao):
    """get() returns None on a cache miss."""
    assert dao.get('cache:testapp:test:url:ab12') is None


def test_put_sets_ttl(dao, redis_client):
    """put() writes the value with an expiry in seconds."""
    dao.put('k', 'v', ttl=3600)
    redis_client.set.assert_called_once_with('k', 'v', ex=3600)


@pytest.mark.parametrize('ttl', [0, -1])
def test_put_rejects_non_positive_ttl(dao, redis_client, ttl):
    """put() rejects non-positive TTLs without touching Redis."""
    with pytest.raises(ValueError):
        dao.put('k', 'v', ttl=ttl)
    redis_client.set.assert_not_called()


def test_delete(dao, redis_client):
    """delete() removes every given key in one call."""
    redis_client.delete.return_value = 2

    assert dao.delete('url:ab12', 'og:ab12') == 2
    redis_client.delete.assert_called_once_with('url:ab12', 'og:ab12')


def test_delete_without_keys(dao, redis_client):
    """delete() with no keys is a no-op."""
    assert dao.delete() == 0
    redis_client.delete.assert_not_called()


def test_close(dao, redis_client):
    """close() releases the client."""
    dao.close()
    redis_client.close.assert_called_once()


# -------------------------------
# 3. Error handling
# -------------------------------


@pytest.mark.parametrize(
    'method, args',
    [
        ('get', ('k',)),
        ('put', ('k', 'v', 60)),
        ('delete', ('k',)),
    ],
)
def test_redis_errors_become_cache_unavailable(dao, redis_client, method, args):
    """redis-py errors surface as CacheUnavailableError."""
    error = redis.exceptions.ConnectionError('connection reset')
    redis_client.get.side_effect = error
    redis_client.set.side_effect = error
    redis_client.delete.side_effect = error

    with pytest.raises(CacheUnavailableError, match='redis.test:6379/0'):
        getattr(dao, method)(*args)
