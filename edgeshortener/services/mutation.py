"""Batched create / update / soft-delete of links

Every batch holds 1..max_batch_size items. Items are processed concurrently
and independently: one item's failure lands in `failures` and never aborts
its siblings. A malformed batch envelope (empty, too large, not a list)
raises ValidationError for the whole request.

Store and cache ordering per item:
    create  -> insert (commit) -> populate url:<hash>
    update  -> update (commit) -> invalidate url:<hash> and og:<hash>
    delete  -> soft-delete (commit) -> invalidate url:<hash> and og:<hash>

Classes:
    MutationService
"""

import logging
from collections.abc import Callable
from typing import Any

from beartype import beartype

from edgeshortener.models import LinkModel, UNSET, CreateLinkRequest, UpdateLinkRequest, OperationResult, BatchResult
from edgeshortener.dao.base import LinkBaseDAO
from edgeshortener.dao.exceptions import DataStoreError, LinkAlreadyExistsError, LinkNotFoundError
from edgeshortener.exceptions import EdgeShortenerError, CollisionError, ValidationError
from edgeshortener.services.cache_aside import LinkCache
from edgeshortener.services.code_generator import CodeGenerator
from edgeshortener.services.helpers import fan_out
from edgeshortener.utils.config import ShortenerSettings
from edgeshortener.utils.helpers import now_ms, get_short_url
from edgeshortener.utils.validation import validate_batch, validate_create_request, validate_update_request, validate_hash


logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = 'Record not found or already deleted'
INTERNAL_ERROR_MESSAGE = 'Internal error'


class MutationService:
    """Create, update and soft-delete links in batches

    Attributes:
        store (LinkBaseDAO):
            Authoritative link store.
        cache (LinkCache):
            Best-effort edge cache kept coherent with store writes.
        generator (CodeGenerator):
            Source of (shortcode, hash) pairs for new links.
        settings (ShortenerSettings):
            Batch limit, worker pool size and default link lifetime.

    Example:
        >>> service.create_links([CreateLinkRequest(target='https://a.example', domain='s.test')]).to_dict()
        {'successes': [{'hash': '...', 'success': True, 'shortCode': 'aZ3kP9qx', ...}], 'failures': []}
    """

    def __init__(
        self,
        store: LinkBaseDAO,
        cache: LinkCache,
        generator: CodeGenerator,
        settings: ShortenerSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.cache = cache
        self.generator = generator
        self.settings = settings or ShortenerSettings()
        self._clock = clock

    # -------------------------------
    # Batch operations
    # -------------------------------

    @beartype
    def create_links(self, requests: list[CreateLinkRequest]) -> BatchResult:
        validate_batch(requests, self.settings.max_batch_size)
        now = self._clock()
        # fmt: off
        results = fan_out(
            lambda request: self._guarded(self._create_one, request, now,
                                          hash=None, shortcode=request.shortcode, target=request.target),
            requests,
            self.settings.max_workers,
        )
        # fmt: on
        return self._summarize('create', results)

    @beartype
    def update_links(self, requests: list[UpdateLinkRequest]) -> BatchResult:
        validate_batch(requests, self.settings.max_batch_size)
        now = self._clock()
        results = fan_out(
            lambda request: self._guarded(self._update_one, request, now, hash=request.hash),
            requests,
            self.settings.max_workers,
        )
        return self._summarize('update', results)

    @beartype
    def delete_links(self, hashes: list[str]) -> BatchResult:
        validate_batch(hashes, self.settings.max_batch_size)
        now = self._clock()
        results = fan_out(
            lambda hash: self._guarded(self._delete_one, hash, now, hash=hash),
            hashes,
            self.settings.max_workers,
        )
        return self._summarize('delete', results)

    # -------------------------------
    # Per-item operations
    # -------------------------------

    def _create_one(self, request: CreateLinkRequest, now: int) -> OperationResult:
        validate_create_request(request, now)
        # Hosts are case-insensitive; links are keyed by the lowercased domain
        domain = request.domain.lower()
        shortcode, hash = self.generator.generate(domain, request.shortcode)

        if request.expires_at is UNSET:
            expires_at = now + self.settings.default_link_lifetime_ms
        else:
            expires_at = request.expires_at

        link = LinkModel(
            target=request.target,
            shortcode=shortcode,
            domain=domain,
            hash=hash,
            owner_id=request.owner_id,
            expires_at=expires_at,
            attribute=request.attribute,
            created_at=now,
            updated_at=now,
        )
        try:
            link = self.store.insert(link)
        except LinkAlreadyExistsError as e:
            # Lost the race at the unique index; the caller may retry the item
            raise CollisionError(f"Short code '{shortcode}' is already taken on {domain}.") from e

        self.cache.populate_link(link)
        logger.info('Link created.', extra={'hash': hash, 'domain': link.domain, 'shortcode': shortcode})
        return self._success(link)

    def _update_one(self, request: UpdateLinkRequest, now: int) -> OperationResult:
        validate_update_request(request)
        changes = request.changes()

        if changes.get('expires_at') is not None:
            current = self.store.get(request.hash)
            if current is None:
                raise LinkNotFoundError(NOT_FOUND_MESSAGE)
            if current.created_at is not None and changes['expires_at'] <= current.created_at:
                raise ValidationError('Expiration time must be later than the link creation time.')

        link = self.store.update(request.hash, **changes)
        self.cache.invalidate(link.hash)
        logger.info('Link updated.', extra={'hash': link.hash, 'fields': sorted(changes)})
        return self._success(link)

    def _delete_one(self, hash: str, now: int) -> OperationResult:
        validate_hash(hash)
        link = self.store.soft_delete(hash)
        self.cache.invalidate(hash)
        logger.info('Link soft-deleted.', extra={'hash': hash})
        return self._success(link)

    # -------------------------------
    # Helpers
    # -------------------------------

    @staticmethod
    def _success(link: LinkModel) -> OperationResult:
        return OperationResult(
            hash=link.hash,
            success=True,
            shortcode=link.shortcode,
            short_url=get_short_url(link.domain, link.shortcode),
            target=link.target,
            expires_at=link.expires_at,
        )

    @staticmethod
    def _guarded(operation: Callable[..., OperationResult], item: Any, now: int, **context) -> OperationResult:
        """Run a per-item operation, turning any error into a failure result"""
        try:
            return operation(item, now)
        except LinkNotFoundError:
            return OperationResult(success=False, error=NOT_FOUND_MESSAGE, **context)
        except DataStoreError as e:
            logger.error('Data store failed while processing batch item.', extra={'error': str(e), **context})
            return OperationResult(success=False, error=str(e), **context)
        except EdgeShortenerError as e:
            logger.info('Batch item failed.', extra={'error': str(e), 'error_code': e.error_code, **context})
            return OperationResult(success=False, error=str(e), **context)
        except Exception:
            logger.exception('Unexpected error while processing batch item.', extra=context)
            return OperationResult(success=False, error=INTERNAL_ERROR_MESSAGE, **context)

    @staticmethod
    def _summarize(operation: str, results: list[OperationResult]) -> BatchResult:
        batch = BatchResult.from_results(results)
        logger.info(
            'Batch processed.',
            extra={'operation': operation, 'succeeded': len(batch.successes), 'failed': len(batch.failures)},
        )
        return batch
