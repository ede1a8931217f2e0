import json
import logging

from edgeshortener.types import LambdaEvent, LambdaContext
from edgeshortener.container import ServiceContainer, build_container
from edgeshortener.models import SweepResult
from edgeshortener.utils import load_config
from edgeshortener.lambdas.sweep_expired_links.constants import SUCCESS, PARTIAL_FAILURE, ERROR


logger = logging.getLogger(__name__)

_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Return the process-wide container, building it on first use"""
    global _container
    if _container is None:
        _container = build_container(load_config('sweep_expired_links'))
    return _container


def response(result: SweepResult) -> str:
    if not result.error_messages:
        status = SUCCESS
    elif result.deleted_count or result.cache_cleaned_count:
        status = PARTIAL_FAILURE
    else:
        status = ERROR
    return json.dumps({'status': status, **result.to_dict()})


def lambda_handler(event: LambdaEvent, context: LambdaContext) -> str:
    """Soft-delete expired links and invalidate their edge cache entries.

    Triggered on a schedule (EventBridge). The scheduler retries on its next
    run, so this handler never raises.

    Diagnostic responses (NOT valid HTTP responses):
        status: success | partial_failure | error
        deletedCount: <number of links soft-deleted>
        cacheCleanedCount: <number of links whose cache entries were dropped>
        errorMessages: [<per-link or sweep-wide error>, ...]
        executionTimeMs: <duration>
    """
    try:
        sweeper = get_container().sweeper
    except Exception as error:
        logger.exception(
            'Failed to initialize the expiration sweep.',
            extra={'event': ERROR, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response(SweepResult(error_messages=[f'Cleanup task failed: {error}']))

    result = sweeper.sweep_expired()
    if result.error_messages:
        logger.warning('Expiration sweep finished with errors.', extra={'event': PARTIAL_FAILURE, 'errors': len(result.error_messages)})
    return response(result)
