"""Cache-aside protocol between the durable store and the edge cache

The store is authoritative; the cache is a best-effort shadow. Every method
here returns a discardable value and logs, never raises, cache failures.

Ordering rules:
    - A cache write only ever follows a successful store read or commit.
    - Updates and deletes invalidate (delete) entries; they never patch them.
    - Misses are not cached.

Entry formats (JSON strings):
    url:<hash> -> {"url", "shortCode", "domain", "hash", "userId", "expiresAt",
                   "attribute" (base64 or null), "createdAt", "updatedAt", "id"}
    og:<hash>  -> {"expiresAt", "url", "html"}

Classes:
    LinkCache:
        Read/populate/invalidate link snapshots and preview pages.
    CachedPreview:
        Decoded preview entry.
"""

import json
import base64
import logging
import binascii
from dataclasses import dataclass

from edgeshortener.constants import TTL
from edgeshortener.models import LinkModel
from edgeshortener.dao.base import EdgeCacheBaseDAO
from edgeshortener.dao.cache.cache_key_schema import CacheKeySchema
from edgeshortener.dao.exceptions import CacheUnavailableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedPreview:
    html: str
    target: str | None = None
    expires_at: int | None = None

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and self.expires_at <= now


def encode_link(link: LinkModel) -> str:
    # fmt: off
    snapshot = {
        'url': link.target,
        'shortCode': link.shortcode,
        'domain': link.domain,
        'hash': link.hash,
        'userId': link.owner_id,
        'expiresAt': link.expires_at,
        'attribute': None if link.attribute is None else base64.b64encode(link.attribute).decode('ascii'),
        'createdAt': link.created_at,
        'updatedAt': link.updated_at,
        'id': link.id,
    }
    # fmt: on
    return json.dumps(snapshot, separators=(',', ':'))


def decode_link(raw: str | bytes) -> LinkModel:
    """Parse a `url:<hash>` entry

    Raises:
        ValueError: If the entry isn't a valid snapshot.
    """
    try:
        snapshot = json.loads(raw)
        attribute = snapshot.get('attribute')
        return LinkModel(
            target=snapshot['url'],
            shortcode=snapshot['shortCode'],
            domain=snapshot['domain'],
            hash=snapshot['hash'],
            owner_id=snapshot.get('userId') or '',
            expires_at=snapshot.get('expiresAt'),
            attribute=None if attribute is None else base64.b64decode(attribute, validate=True),
            created_at=snapshot.get('createdAt'),
            updated_at=snapshot.get('updatedAt'),
            id=snapshot.get('id'),
        )
    except (KeyError, TypeError, AttributeError, binascii.Error, json.JSONDecodeError) as e:
        raise ValueError(f'Malformed link snapshot: {e}') from e


def encode_preview(link: LinkModel, html: str) -> str:
    return json.dumps({'expiresAt': link.expires_at, 'url': link.target, 'html': html}, separators=(',', ':'))


def decode_preview(raw: str | bytes) -> CachedPreview:
    try:
        entry = json.loads(raw)
        if not isinstance(entry['html'], str):
            raise TypeError('html must be a string')
        return CachedPreview(html=entry['html'], target=entry.get('url'), expires_at=entry.get('expiresAt'))
    except (KeyError, TypeError, json.JSONDecodeError) as e:
        raise ValueError(f'Malformed preview entry: {e}') from e


class LinkCache:
    """Best-effort cache-aside wrapper around an EdgeCacheBaseDAO

    Attributes:
        cache (EdgeCacheBaseDAO | None):
            Underlying cache DAO. None disables caching (every read misses).
        keys (CacheKeySchema):
            Key schema for `url:` and `og:` entries.
        ttl (int):
            TTL in seconds applied to every write. Unrelated to a link's expiresAt.
    """

    def __init__(self, cache: EdgeCacheBaseDAO | None, keys: CacheKeySchema | None = None, ttl: int = TTL.CACHE_ENTRY):
        self.cache = cache
        self.keys = keys or getattr(cache, 'keys', None) or CacheKeySchema()
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self.cache is not None

    def read_link(self, hash: str) -> LinkModel | None:
        """Return the cached snapshot of a link, or None on miss or cache failure"""
        raw = self._get(self.keys.url_key(hash), hash)
        if raw is None:
            return None
        try:
            link = decode_link(raw)
        except ValueError as e:
            logger.warning('Discarding malformed link snapshot.', extra={'hash': hash, 'error': str(e)})
            self._delete(hash, self.keys.url_key(hash))
            return None
        if link.hash != hash:
            logger.warning('Discarding link snapshot stored under a foreign key.', extra={'hash': hash})
            return None
        return link

    def populate_link(self, link: LinkModel) -> bool:
        return self._put(self.keys.url_key(link.hash), encode_link(link), link.hash)

    def read_preview(self, hash: str) -> CachedPreview | None:
        raw = self._get(self.keys.og_key(hash), hash)
        if raw is None:
            return None
        try:
            return decode_preview(raw)
        except ValueError as e:
            logger.warning('Discarding malformed preview entry.', extra={'hash': hash, 'error': str(e)})
            self._delete(hash, self.keys.og_key(hash))
            return None

    def populate_preview(self, link: LinkModel, html: str) -> bool:
        return self._put(self.keys.og_key(link.hash), encode_preview(link, html), link.hash)

    def invalidate(self, hash: str) -> bool:
        """Delete both `url:` and `og:` entries of a link. True if the cache acknowledged."""
        return self._delete(hash, *self.keys.link_keys(hash))

    def _get(self, key: str, hash: str) -> str | bytes | None:
        if self.cache is None:
            return None
        try:
            return self.cache.get(key)
        except CacheUnavailableError as e:
            logger.warning('Edge cache read failed. Falling back to the data store.', extra={'hash': hash, 'error': str(e)})
            return None

    def _put(self, key: str, value: str, hash: str) -> bool:
        if self.cache is None:
            return False
        try:
            self.cache.put(key, value, self.ttl)
        except CacheUnavailableError as e:
            logger.warning('Edge cache population failed.', extra={'hash': hash, 'error': str(e)})
            return False
        return True

    def _delete(self, hash: str, *keys: str) -> bool:
        if self.cache is None:
            return False
        try:
            self.cache.delete(*keys)
        except CacheUnavailableError as e:
            logger.warning('Edge cache invalidation failed. Entry may be served until its TTL runs out.', extra={'hash': hash, 'error': str(e)})
            return False
        return True
