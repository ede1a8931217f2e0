"""Process-wide wiring of DAOs and services

A Lambda execution environment is reused across warm invocations, so the
SQL engine and the Redis connection pool are built once per process and
shared. Each Lambda module keeps its container behind a lazy accessor:

    >>> _container = None
    >>> def get_container():
    ...     global _container
    ...     if _container is None:
    ...         _container = build_container(load_config('redirect_url'))
    ...     return _container

Tests construct ServiceContainer directly with substitutes.
"""

import os
import logging
from dataclasses import dataclass

from edgeshortener.constants import ENV
from edgeshortener.dao.base import LinkBaseDAO, EdgeCacheBaseDAO
from edgeshortener.dao.sql import LinkSQLDAO
from edgeshortener.dao.cache import LinkCacheDAO, LinkElastiCacheDAO
from edgeshortener.dao.exceptions import CacheUnavailableError
from edgeshortener.exceptions import BadConfigurationError
from edgeshortener.services import (
    TelemetrySink,
    LoggingTelemetrySink,
    LinkCache,
    CodeGenerator,
    ResolutionService,
    MutationService,
    ExpirationSweeper,
)
from edgeshortener.types import LambdaConfiguration
from edgeshortener.utils.config import ShortenerSettings, app_prefix


logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    store: LinkBaseDAO
    cache: LinkCache
    settings: ShortenerSettings
    telemetry: TelemetrySink | None = None

    def __post_init__(self):
        self.generator = CodeGenerator(
            self.store,
            code_length=self.settings.code_length,
            max_attempts=self.settings.max_generation_attempts,
        )
        self.resolution = ResolutionService(self.store, self.cache, telemetry=self.telemetry)
        self.mutation = MutationService(self.store, self.cache, self.generator, settings=self.settings)
        self.sweeper = ExpirationSweeper(self.store, self.cache, settings=self.settings)

    def close(self) -> None:
        """Dispose the SQL engine and release the Redis connection pool"""
        for resource in (self.store, self.cache.cache):
            close = getattr(resource, 'close', None)
            if close is not None:
                close()


def build_cache_dao(section: dict) -> EdgeCacheBaseDAO | None:
    """Build the edge cache DAO from the 'cache' config section

    Supported backends: 'redis' (plain client), 'elasticache' (SSM + Secrets
    Manager) and 'none'. An unreachable cache yields None: links keep
    resolving from the store.
    """
    backend = (section.get('backend') or 'redis').lower()
    try:
        if backend == 'none':
            return None
        if backend == 'redis':
            return LinkCacheDAO(
                redis_host=section.get('host', 'localhost'),
                redis_port=int(section.get('port', 6379)),
                redis_db=int(section.get('db', 0)),
                redis_username=section.get('username'),
                redis_password=section.get('password'),
                prefix=app_prefix(),
            )
        if backend == 'elasticache':
            return LinkElastiCacheDAO(prefix=app_prefix())
    except CacheUnavailableError as e:
        logger.warning('Edge cache unavailable at startup. Serving from the data store only.', extra={'error': str(e)})
        return None
    raise BadConfigurationError(f'Unknown cache backend: {backend!r}')


def build_container(config: LambdaConfiguration) -> ServiceContainer:
    """Build a ServiceContainer from a lambda's config section

    The database URL comes from 'database.url', falling back to DATABASE_URL.

    Raises:
        BadConfigurationError: If the config section is incomplete or invalid.
        DataStoreError: If the durable store is unreachable.
    """
    database_url = (config.get('database') or {}).get('url') or os.environ.get(ENV.Database.URL)
    if not database_url:
        raise BadConfigurationError(f"Config section lacks 'database.url' and {ENV.Database.URL} is unset.")

    settings = ShortenerSettings.from_config(config.get('shortener'))
    store = LinkSQLDAO(database_url=database_url)
    cache_dao = build_cache_dao(config.get('cache') or {})
    cache = LinkCache(cache_dao, ttl=settings.cache_ttl)

    logger.info(
        'Service container initialized.',
        extra={'cacheEnabled': cache.enabled, 'database': store.engine.url.render_as_string(hide_password=True)},
    )
    return ServiceContainer(store=store, cache=cache, settings=settings, telemetry=LoggingTelemetrySink())
