import functools
from collections.abc import Callable


__all__ = ['CacheKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class CacheKeySchema:
    """Provide standardized Redis keys for the edge cache.

    Two entry kinds exist per link:
        - url:<hash>  -> serialized link snapshot
        - og:<hash>   -> rendered crawler preview page

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "edgeshortener:prod" or "edgeshortener:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = f'cache:{prefix}' if prefix is not None else None

    @prefix_key
    def url_key(self, hash: str) -> str:
        return f'url:{self._checked(hash)}'

    @prefix_key
    def og_key(self, hash: str) -> str:
        return f'og:{self._checked(hash)}'

    def link_keys(self, hash: str) -> tuple[str, str]:
        """Return every cache key held for a link: (url key, og key)"""
        return self.url_key(hash), self.og_key(hash)

    @staticmethod
    def _checked(hash: str) -> str:
        if not isinstance(hash, str) or not hash:
            raise ValueError(f'Hash must be a non-empty string (given value: {hash!r}).')
        return hash
