"""Helper utilities for AWS lambda functions and services.

Functions:
    now_ms() -> int
        Current UTC time as epoch milliseconds
    get_short_url(domain, shortcode) -> str
        Get string representation of a short URL for a domain and shortcode
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected lambda handler errors into HTTP 500 responses
    chunked(items, size) -> list[list]
        Split a sequence into fixed-size batches

Example:
    >>> from edgeshortener.utils.helpers import get_short_url
    >>> get_short_url('s.example.com', 'aZ3kP9qx')
    'https://s.example.com/aZ3kP9qx'
"""

import os
import json
import functools
import logging
from datetime import datetime, UTC
from collections.abc import Callable, Sequence

from edgeshortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from edgeshortener.exceptions import MissingEnvironmentVariableError
from edgeshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Return the current UTC time as epoch milliseconds

    Example:
        >>> now_ms()
        1760527800000
    """
    return int(datetime.now(UTC).timestamp() * 1000)


def get_short_url(domain: str, shortcode: str) -> str:
    """Get string representation of shortened URL

    Args:
        domain (str): domain the shortcode was issued under
        shortcode (str): shortcode

    Returns:
        str: short url string representation
    """
    return f'https://{domain.rstrip("/")}/{shortcode}'


def chunked[T](items: Sequence[T], size: int) -> list[list[T]]:
    """Split `items` into consecutive batches of at most `size` elements."""
    if size < 1:
        raise ValueError(f'Batch size must be a positive integer (given value: {size}).')
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with HTTP 500 when a lambda handler raises unexpectedly

    When running locally the original exception is re-raised instead, so
    stack traces stay visible under `sam local`.

    Example:
        >>> @guarantee_500_response
        ... def lambda_handler(event, context):
        ...     raise RuntimeError('boom')
        >>> lambda_handler({}, None)['statusCode']
        500
    """

    @functools.wraps(handler)
    def wrapper(event, context, *args, **kwargs):
        try:
            return handler(event, context, *args, **kwargs)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled error in lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps(
                    {
                        'message': 'Internal Server Error',
                        'error_code': UNKNOWN_INTERNAL_SERVER_ERROR,
                    }
                ),
            }

    return wrapper
