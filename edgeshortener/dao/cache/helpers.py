import functools
from collections.abc import Callable
from typing import Any, TypeVar

import redis

from edgeshortener.dao.exceptions import CacheUnavailableError


__all__ = ['describe_client', 'handle_redis_error']

F = TypeVar('F', bound=Callable[..., Any])


def describe_client(client: redis.Redis) -> str:
    """Return 'host:port/db' for log and error messages"""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_error[F](method: F) -> F:
    """Convert redis-py errors raised by a DAO method into CacheUnavailableError

    Connection loss, timeouts and READONLY replicas all look the same to
    callers: the edge cache is unavailable for this call.

    Example:
        >>> @handle_redis_error
        ... def get(self, key):
        ...     return self.redis.get(key)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f'Edge cache at {describe_client(self.redis)} failed: {e}') from e

    return wrapper
