"""Collision-resistant (shortcode, hash) generation

Classes:
    CodeGenerator:
        Produce a (shortcode, hash) pair that is free in the durable store.

Example:
    >>> generator = CodeGenerator(store=LinkSQLDAO(database_url='sqlite:///edgeshortener.db'))
    >>> shortcode, hash = generator.generate('s.test')
    >>> len(shortcode)
    8
    >>> generator.generate('s.test', shortcode='launch')
    ('launch', '...')

NOTE:
    - The existence-check loop only lowers the odds of a rejected insert. Two writers can
      still pick the same free code at the same time; the store's unique index
      decides, and the loser's insert fails with LinkAlreadyExistsError.
"""

import time
import random
import logging
from collections.abc import Callable

from beartype import beartype

from edgeshortener.constants import Defaults
from edgeshortener.dao.base import LinkBaseDAO
from edgeshortener.exceptions import CollisionError, GenerationExhaustedError
from edgeshortener.utils.shortener import generate_shortcode, link_hash


logger = logging.getLogger(__name__)


class CodeGenerator:
    """Generate shortcodes unique in the store

    Attributes:
        store (LinkBaseDAO):
            Durable store checked for taken hashes.
        code_length (int):
            Base length L of random candidates.
        max_attempts (int):
            Number of random candidates tried before giving up.

    Random path schedule:
        attempts 1-5    -> length L
        attempts 6-10   -> length L + 1
        attempts 11-15  -> length L + 2
        attempts > 5 are preceded by a random 10-50 ms sleep.
    """

    def __init__(
        self,
        store: LinkBaseDAO,
        code_length: int = Defaults.CODE_LENGTH,
        max_attempts: int = Defaults.MAX_GENERATION_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
        candidate: Callable[[int], str] = generate_shortcode,
    ):
        self.store = store
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._candidate = candidate

    @beartype
    def generate(self, domain: str, shortcode: str | None = None) -> tuple[str, str]:
        """Return a (shortcode, hash) pair not yet present in the store

        Args:
            domain (str):
                Domain the code is issued under.
            shortcode (str | None):
                Caller-supplied custom code. None picks a random one.

        Returns:
            tuple[str, str]: (shortcode, hash)

        Raises:
            CollisionError:
                If the custom code's hash already exists (never retried).
            GenerationExhaustedError:
                If every random candidate collided.
            DataStoreError:
                If the store can't be queried.
        """
        if shortcode is not None:
            hash = link_hash(domain, shortcode)
            if self.store.exists(hash):
                raise CollisionError(f"Short code '{shortcode}' is already taken on {domain}.")
            return shortcode, hash

        for attempt in range(1, self.max_attempts + 1):
            if attempt > Defaults.BACKOFF_AFTER_ATTEMPT:
                self._sleep(random.uniform(Defaults.BACKOFF_MIN, Defaults.BACKOFF_MAX))

            candidate = self._candidate(self.length_for(attempt))
            hash = link_hash(domain, candidate)
            if not self.store.exists(hash):
                if attempt > 1:
                    logger.info('Found a free shortcode after collisions.', extra={'domain': domain, 'attempts': attempt})
                return candidate, hash

            logger.debug('Shortcode collision.', extra={'domain': domain, 'attempt': attempt, 'length': len(candidate)})

        logger.error('Shortcode generation exhausted.', extra={'domain': domain, 'attempts': self.max_attempts})
        raise GenerationExhaustedError(f'Could not generate a free short code for {domain} after {self.max_attempts} attempts.')

    def length_for(self, attempt: int) -> int:
        """Candidate length for a 1-based attempt number"""
        return self.code_length + sum(attempt > boundary for boundary in Defaults.LENGTH_GROWTH_ATTEMPTS)
