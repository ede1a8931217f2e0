"""Resolution of (domain, shortcode) pairs to redirect targets

Flow:
    LOOKUP_CACHE --hit--> VALIDATE_EXPIRY --> REDIRECT | NOT_FOUND
    LOOKUP_CACHE --miss--> LOOKUP_STORE --hit--> POPULATE_CACHE --> VALIDATE_EXPIRY --> REDIRECT | NOT_FOUND
    LOOKUP_STORE --miss--> NOT_FOUND

Crawlers get a rendered preview page instead of a redirect. The page is
cached under its own `og:<hash>` key and carries the link's expiresAt, so a
cache hit is re-validated like a record snapshot.

Every failure visible to the caller collapses to NotFound: a true miss, an
expired link and a soft-deleted link look the same.
"""

import logging
from collections.abc import Callable

from beartype import beartype

from edgeshortener.models import LinkModel, RedirectTarget, PreviewDocument, NotFound
from edgeshortener.dao.base import LinkBaseDAO
from edgeshortener.services.cache_aside import LinkCache
from edgeshortener.services.telemetry import TelemetrySink, emit
from edgeshortener.utils.helpers import now_ms
from edgeshortener.utils.preview import is_crawler, render_preview
from edgeshortener.utils.shortener import link_hash


logger = logging.getLogger(__name__)


class ResolutionService:
    """Resolve short links through the cache-aside protocol

    Attributes:
        store (LinkBaseDAO):
            Authoritative link store.
        cache (LinkCache):
            Best-effort edge cache.
        telemetry (TelemetrySink | None):
            Receives one event per successful resolution.

    Raises (resolve):
        DataStoreError:
            If the cache missed and the store is unreachable.
    """

    def __init__(
        self,
        store: LinkBaseDAO,
        cache: LinkCache,
        telemetry: TelemetrySink | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.cache = cache
        self.telemetry = telemetry
        self._clock = clock

    @beartype
    def resolve(self, domain: str, shortcode: str, user_agent: str | None = None) -> RedirectTarget | PreviewDocument | NotFound:
        domain = domain.lower()
        hash = link_hash(domain, shortcode)
        now = self._clock()
        crawler = is_crawler(user_agent)

        if crawler:
            preview = self.cache.read_preview(hash)
            if preview is not None:
                if preview.is_expired(now):
                    return self._expired(hash)
                logger.debug('Preview served from edge cache.', extra={'hash': hash})
                self._record(hash, shortcode, domain, user_agent, 200, crawler)
                return PreviewDocument(html=preview.html, hash=hash, location=preview.target)

        link = self._lookup(hash, domain, shortcode, now)
        if link is None:
            return NotFound(hash)
        if link.is_expired(now):
            return self._expired(hash)

        if crawler:
            html = render_preview(link.target)
            self.cache.populate_preview(link, html)
            self._record(hash, shortcode, domain, user_agent, 200, crawler)
            return PreviewDocument(html=html, hash=hash, location=link.target)

        self._record(hash, shortcode, domain, user_agent, 302, crawler)
        return RedirectTarget(location=link.target, hash=hash, shortcode=shortcode, domain=domain)

    def _lookup(self, hash: str, domain: str, shortcode: str, now: int) -> LinkModel | None:
        link = self.cache.read_link(hash)
        if link is not None:
            logger.debug('Link served from edge cache.', extra={'hash': hash})
            return link

        link = self.store.get_by_shortcode(domain, shortcode)
        if link is None:
            logger.info('Link not found.', extra={'hash': hash, 'domain': domain, 'shortcode': shortcode})
            return None

        # Expired links are dropped from the cache right after, so don't write them
        if not link.is_expired(now):
            self.cache.populate_link(link)
        return link

    def _expired(self, hash: str) -> NotFound:
        logger.info('Link expired. Invalidating edge cache.', extra={'hash': hash})
        self.cache.invalidate(hash)
        return NotFound(hash)

    def _record(self, hash: str, shortcode: str, domain: str, user_agent: str | None, status: int, crawler: bool) -> None:
        # fmt: off
        emit(self.telemetry, {
            'timestamp': self._clock(),
            'hash': hash,
            'shortCode': shortcode,
            'domain': domain,
            'userAgent': user_agent,
            'responseCode': status,
            'isCrawler': crawler,
        })
        # fmt: on
