from edgeshortener.dao.cache.cache_key_schema import CacheKeySchema
from edgeshortener.dao.cache.mixins import RedisClientMixin, ElastiCacheClientMixin
from edgeshortener.dao.cache.link_cache_dao import LinkCacheDAO, LinkElastiCacheDAO

__all__ = [
    'CacheKeySchema',
    'RedisClientMixin',
    'ElastiCacheClientMixin',
    'LinkCacheDAO',
    'LinkElastiCacheDAO',
]
