"""Expiration sweep: soft-delete expired links and drop their cache entries

One sweep:
    1. list active links with expiresAt < now;
    2. split them into batches of `sweep_batch_size`;
    3. process batches one after another, sleeping `sweep_batch_delay` seconds
       between them; items inside a batch run concurrently;
    4. per item: soft-delete, then invalidate url:<hash> and og:<hash> (even
       when the delete failed or the link was already gone).

Per-item failures become strings in `SweepResult.error_messages` and never stop
the sweep. A failure before candidates are known (e.g., the store is down)
yields an error-only result. Nothing is retried: the next scheduled run picks
up whatever is left.
"""

import time
import logging
from dataclasses import dataclass, field
from collections.abc import Callable

from edgeshortener.models import LinkModel, SweepResult
from edgeshortener.dao.base import LinkBaseDAO
from edgeshortener.dao.exceptions import LinkNotFoundError
from edgeshortener.services.cache_aside import LinkCache
from edgeshortener.services.helpers import fan_out
from edgeshortener.utils.config import ShortenerSettings
from edgeshortener.utils.helpers import now_ms, chunked


logger = logging.getLogger(__name__)


@dataclass
class _ItemOutcome:
    deleted: bool = False
    cache_cleaned: bool = False
    errors: list[str] = field(default_factory=list)


class ExpirationSweeper:
    def __init__(
        self,
        store: LinkBaseDAO,
        cache: LinkCache,
        settings: ShortenerSettings | None = None,
        clock: Callable[[], int] = now_ms,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.cache = cache
        self.settings = settings or ShortenerSettings()
        self._clock = clock
        self._sleep = sleep

    def sweep_expired(self) -> SweepResult:
        """Run one sweep. Never raises."""
        started = time.monotonic()
        result = SweepResult()

        try:
            now = self._clock()
            candidates = self.store.list_expired(now)
            if not candidates:
                logger.info('No expired links to sweep.')
                return result

            batches = chunked(candidates, self.settings.sweep_batch_size)
            logger.info('Sweeping expired links.', extra={'candidates': len(candidates), 'batches': len(batches)})

            for index, batch in enumerate(batches):
                if index > 0:
                    self._sleep(self.settings.sweep_batch_delay)
                for outcome in fan_out(self._sweep_one, batch, self.settings.max_workers):
                    result.deleted_count += int(outcome.deleted)
                    result.cache_cleaned_count += int(outcome.cache_cleaned)
                    result.error_messages.extend(outcome.errors)
        except Exception as e:
            logger.exception('Expiration sweep failed.')
            result.error_messages.append(f'Cleanup task failed: {e}')
        finally:
            result.execution_time_ms = int((time.monotonic() - started) * 1000)

        logger.info('Expiration sweep finished.', extra=result.to_dict())
        return result

    def _sweep_one(self, link: LinkModel) -> _ItemOutcome:
        outcome = _ItemOutcome()
        try:
            self.store.soft_delete(link.hash)
            outcome.deleted = True
        except LinkNotFoundError:
            logger.debug('Expired link already deleted.', extra={'hash': link.hash})
        except Exception as e:
            logger.warning('Failed to soft-delete expired link.', extra={'hash': link.hash, 'error': str(e)})
            outcome.errors.append(f'Failed to delete link {link.hash}: {e}')

        # Every candidate's entries are dropped, whatever happened to its row
        if self.cache.invalidate(link.hash):
            outcome.cache_cleaned = True
        elif self.cache.enabled:
            outcome.errors.append(f'Failed to clear cache for {link.hash}: edge cache unavailable')
        return outcome
