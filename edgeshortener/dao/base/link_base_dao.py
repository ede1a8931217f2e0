"""Abstract base class for link data access objects (DAOs).

This class establishes a consistent contract for all durable link store
implementations, regardless of the underlying storage mechanism
(e.g., PostgreSQL, SQLite, MySQL via SQLAlchemy).

Responsibilities:
    - Provide an interface for inserting, reading, updating and soft-deleting LinkModel records.
    - Enforce uniqueness of `hash` (globally) and of (shortcode, domain) among active links.
    - Standardize error handling across data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from edgeshortener.models import LinkModel
        >>> from edgeshortener.dao.sql import LinkSQLDAO

        >>> dao = LinkSQLDAO(database_url='sqlite:///links.db')
        >>> dao.insert(LinkModel(target='https://example.com', shortcode='abc', domain='s.test', hash='9f2e...'))

        >>> dao.get('9f2e...').target
        'https://example.com'

        >>> dao.soft_delete('9f2e...')
        >>> dao.get('9f2e...') is None
        True

NOTE:
    - Records are never physically deleted. "Deleting" flips the is_deleted flag.
"""

from abc import ABC, abstractmethod

from edgeshortener.models import LinkModel


class LinkBaseDAO(ABC):
    """Interface for durable link store data access objects (DAOs).

    Methods:
        get(hash: str) -> LinkModel | None:
            Retrieve an active (non-deleted) link by hash. None if absent or soft-deleted.

        get_by_shortcode(domain: str, shortcode: str) -> LinkModel | None:
            Retrieve an active link by its public (domain, shortcode) pair.

        exists(hash: str) -> bool:
            True if any row (active or soft-deleted) holds the hash.

        insert(link: LinkModel) -> LinkModel:
            Insert a new link. Raises LinkAlreadyExistsError on uniqueness violations.

        update(hash: str, **fields) -> LinkModel:
            Partially update an active link. Raises LinkNotFoundError if absent or soft-deleted.

        soft_delete(hash: str) -> LinkModel:
            Flag an active link as deleted. Raises LinkNotFoundError if absent or already deleted.

        list_expired(now: int) -> list[LinkModel]:
            Active links with expires_at < now.

        list_links(is_deleted: bool | None, owner_id: str | None, limit: int | None) -> list[LinkModel]:
            Administrative listing.

    All methods raise DataStoreError when the data store is unreachable.

    Subclassing:
        Datastore-specific implementations (e.g., LinkSQLDAO) must extend this
        class and implement all abstract methods.
    """

    @abstractmethod
    def get(self, hash: str) -> LinkModel | None:
        """Retrieve an active link by its hash.

        Args:
            hash (str):
                The link's internal lookup key.

        Returns:
            LinkModel | None: The link if found and not soft-deleted, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_by_shortcode(self, domain: str, shortcode: str) -> LinkModel | None:
        """Retrieve an active link by its public (domain, shortcode) pair."""
        pass

    @abstractmethod
    def exists(self, hash: str) -> bool:
        """Return True if any record, including soft-deleted ones, holds `hash`."""
        pass

    @abstractmethod
    def insert(self, link: LinkModel) -> LinkModel:
        """Insert a new link into the data store.

        Args:
            link (LinkModel):
                The link to be inserted. `id` is assigned by the store.

        Returns:
            LinkModel: The stored link, including its surrogate id.

        Raises:
            LinkAlreadyExistsError:
                If the hash, or the (shortcode, domain) pair among active links, is taken.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def update(self, hash: str, **fields) -> LinkModel:
        """Partially update an active link (only the given fields are written).

        Args:
            hash (str):
                The link's internal lookup key.

            **fields:
                Any of target, owner_id, expires_at, attribute.

        Returns:
            LinkModel: The updated link.

        Raises:
            LinkNotFoundError:
                If the link doesn't exist or is soft-deleted.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def soft_delete(self, hash: str) -> LinkModel:
        """Flag an active link as deleted.

        Raises:
            LinkNotFoundError:
                If the link doesn't exist or is already soft-deleted.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_expired(self, now: int) -> list[LinkModel]:
        """Return all active links whose expires_at lies strictly before `now` (epoch ms)."""
        pass

    @abstractmethod
    def list_links(self, is_deleted: bool | None = False, owner_id: str | None = None, limit: int | None = None) -> list[LinkModel]:
        """Return links filtered by deletion flag and owner, newest first."""
        pass
