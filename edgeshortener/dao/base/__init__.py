from edgeshortener.dao.base.link_base_dao import LinkBaseDAO
from edgeshortener.dao.base.cache_base_dao import EdgeCacheBaseDAO


__all__ = ['LinkBaseDAO', 'EdgeCacheBaseDAO']
