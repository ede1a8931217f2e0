"""DAO for the edge cache kept in Redis (ElastiCache)

The DAO is a thin key-value adapter: it knows nothing about link snapshots
or preview pages. Serialization and the cache-aside protocol live in
`edgeshortener.services.cache_aside`.

Classes:
    LinkCacheDAO:
        Redis-backed EdgeCacheBaseDAO (plain Redis client, e.g. local development).
    LinkElastiCacheDAO:
        Same DAO with the client resolved from AWS SSM / Secrets Manager.

Example:
    >>> dao = LinkCacheDAO(redis_host='localhost', prefix='edgeshortener:local')
    >>> key = dao.keys.url_key('9f2e...')
    >>> dao.put(key, '{"url": "https://example.com"}', ttl=3600)
    >>> dao.get(key)
    '{"url": "https://example.com"}'
    >>> dao.delete(*dao.keys.link_keys('9f2e...'))
    1
"""

from beartype import beartype

from edgeshortener.dao.base import EdgeCacheBaseDAO
from edgeshortener.dao.cache.mixins import RedisClientMixin, ElastiCacheClientMixin
from edgeshortener.dao.cache.helpers import handle_redis_error


class LinkCacheDAO(RedisClientMixin, EdgeCacheBaseDAO):
    """Redis-backed edge cache DAO

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the cache.
        keys (CacheKeySchema):
            Key schema helper for generating namespaced cache keys.

    Every Redis error surfaces as CacheUnavailableError.
    """

    @handle_redis_error
    @beartype
    def get(self, key: str) -> str | bytes | None:
        return self.redis.get(key)

    @handle_redis_error
    @beartype
    def put(self, key: str, value: str | bytes, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError(f'Cache TTL must be a positive number of seconds (given value: {ttl}).')
        self.redis.set(key, value, ex=ttl)

    @handle_redis_error
    @beartype
    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self.redis.delete(*keys))


class LinkElastiCacheDAO(ElastiCacheClientMixin, LinkCacheDAO):
    """LinkCacheDAO whose Redis client targets AWS ElastiCache (see ElastiCacheClientMixin)"""
