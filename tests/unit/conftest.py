from unittest.mock import MagicMock

import pytest

from edgeshortener.dao.base import EdgeCacheBaseDAO
from edgeshortener.dao.cache.cache_key_schema import CacheKeySchema
from edgeshortener.dao.exceptions import CacheUnavailableError
from edgeshortener.dao.sql import LinkSQLDAO
from edgeshortener.models import LinkModel
from edgeshortener.services import LinkCache
from edgeshortener.utils.shortener import link_hash


NOW = 1_760_000_000_000  # 2025-10-09T08:53:20Z


class FakeCache(EdgeCacheBaseDAO):
    """In-memory EdgeCacheBaseDAO recording TTLs; `failing=True` simulates an outage."""

    def __init__(self, prefix: str | None = None):
        self.keys = CacheKeySchema(prefix=prefix)
        self.entries: dict[str, str | bytes] = {}
        self.ttls: dict[str, int] = {}
        self.failing = False

    def _check(self):
        if self.failing:
            raise CacheUnavailableError('Edge cache at fake:0/0 failed: connection refused')

    def get(self, key):
        self._check()
        return self.entries.get(key)

    def put(self, key, value, ttl):
        self._check()
        self.entries[key] = value
        self.ttls[key] = ttl

    def delete(self, *keys):
        self._check()
        return sum(self.entries.pop(key, None) is not None for key in keys)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_fake_cache():
    return FakeCache


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def link_cache(fake_cache):
    return LinkCache(fake_cache)


@pytest.fixture
def store(tmp_path):
    """SQLite-backed LinkSQLDAO in a temporary file."""
    dao = LinkSQLDAO(database_url=f'sqlite:///{tmp_path}/links.db')
    yield dao
    dao.close()


@pytest.fixture
def telemetry():
    return MagicMock()


@pytest.fixture
def make_link():
    """Factory building LinkModel instances with a consistent hash."""

    def _make_link(shortcode='abc123', domain='s.test', target='https://example.com/article/123', **overrides):
        # fmt: off
        values = {
            'target': target,
            'shortcode': shortcode,
            'domain': domain,
            'hash': link_hash(domain, shortcode),
            'owner_id': 'user123',
            'expires_at': NOW + 3_600_000,
            'created_at': NOW,
            'updated_at': NOW,
        }
        # fmt: on
        values.update(overrides)
        return LinkModel(**values)

    return _make_link
