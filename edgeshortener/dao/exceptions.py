"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    LinkNotFoundError:
        Raised when a link is absent from the data store or soft-deleted.

    LinkAlreadyExistsError:
        Raised when an insert violates the store's uniqueness constraints.

    DataStoreError:
        Raised when the durable store is unavailable (connection issues, timeouts, etc.).

    CacheUnavailableError:
        Raised when the edge cache can't serve a read, write or delete.

Example:
    >>> from edgeshortener.dao.exceptions import LinkNotFoundError
    >>> raise LinkNotFoundError("Link with hash 'ab12...' not found.")
    Traceback (most recent call last):
        ...
    edgeshortener.dao.exceptions.LinkNotFoundError: Link with hash 'ab12...' not found.
"""

from edgeshortener.exceptions import EdgeShortenerError


class DAOError(EdgeShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class LinkNotFoundError(DAOError):
    """Raised when a link is not found in the data store (or is soft-deleted)."""

    error_code = 'dao:link_not_found_error'


class LinkAlreadyExistsError(DAOError):
    """Raised when inserting a link whose hash or (shortcode, domain) is already taken."""

    error_code = 'dao:link_already_exists_error'


class DataStoreError(DAOError):
    """Raised when the durable data store is unreachable or fails.

    Examples include connection issues, timeouts, and locked databases.
    Fatal to the current operation and never retried internally.
    """

    error_code = 'dao:data_store_error'


class CacheUnavailableError(DAOError):
    """Raised when the edge cache fails a read, write or delete.

    Never fatal: callers on the cache-aside path catch, log and discard it.
    """

    error_code = 'dao:cache_unavailable_error'
