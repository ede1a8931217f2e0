"""Abstract base class for edge cache data access objects (DAOs).

The edge cache is a best-effort key-value shadow of the durable store.
It offers no transactional or durability guarantees.
"""

from abc import ABC, abstractmethod


class EdgeCacheBaseDAO(ABC):
    """Interface for edge cache DAOs.

    Methods:
        get(key: str) -> str | bytes | None:
            Retrieve a cached value. None on cache miss.

        put(key: str, value: str | bytes, ttl: int) -> None:
            Store a value which expires after `ttl` seconds.

        delete(*keys: str) -> int:
            Remove entries. Returns the number of removed keys.

    All methods raise CacheUnavailableError when the cache can't be reached.
    """

    @abstractmethod
    def get(self, key: str) -> str | bytes | None:
        pass

    @abstractmethod
    def put(self, key: str, value: str | bytes, ttl: int) -> None:
        pass

    @abstractmethod
    def delete(self, *keys: str) -> int:
        pass
