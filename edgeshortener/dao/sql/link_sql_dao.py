"""Data Access Object (DAO) implementation for managing links in a SQL database

This module provides a SQLAlchemy-based implementation of LinkBaseDAO. It is
the system's store of record: every mutation lands here first, and the
store's unique indexes are the sole arbiter of code uniqueness under
concurrent writers.

Responsibilities:
    - Insert, retrieve, update and soft-delete links;
    - List expired links for the sweeper;
    - Translate driver errors into DAO exceptions.

Classes:
    LinkSQLDAO:
        DAO for storing and retrieving LinkModel in a relational database.

Example:
    >>> from edgeshortener.models import LinkModel
    >>> from edgeshortener.dao.sql import LinkSQLDAO

    >>> dao = LinkSQLDAO(database_url='sqlite:///edgeshortener.db')
    >>> link = LinkModel(target='https://example.com', shortcode='abc123', domain='s.test', hash='9f2e...')
    >>> dao.insert(link).id
    1

    >>> dao.update('9f2e...', target='https://example.org').target
    'https://example.org'

    >>> dao.soft_delete('9f2e...').is_deleted
    True
    >>> dao.get('9f2e...') is None
    True
"""

import logging

from beartype import beartype
from sqlalchemy import select, update

from edgeshortener.models import LinkModel
from edgeshortener.dao.base import LinkBaseDAO
from edgeshortener.dao.sql.mixins import SQLEngineMixin
from edgeshortener.dao.sql.tables import LinkRow, FIELD_COLUMNS
from edgeshortener.dao.sql.helpers import handle_sql_error
from edgeshortener.dao.exceptions import LinkNotFoundError
from edgeshortener.utils.helpers import now_ms


logger = logging.getLogger(__name__)


class LinkSQLDAO(SQLEngineMixin, LinkBaseDAO):
    """SQLAlchemy-based Data Access Object (DAO) for managing links

    Attributes (see SQLEngineMixin):
        engine (sqlalchemy.Engine):
            Engine shared by all calls of this DAO.
        sessions (sqlalchemy.orm.sessionmaker):
            Session factory; every method opens and closes its own session.

    Methods:
        See LinkBaseDAO.

    Example:
        >>> dao = LinkSQLDAO(database_url='sqlite:///:memory:')
        >>> dao.exists('9f2e...')
        False
    """

    @handle_sql_error
    @beartype
    def get(self, hash: str) -> LinkModel | None:
        with self.sessions() as session:
            row = session.scalar(select(LinkRow).where(LinkRow.hash == hash, LinkRow.is_deleted == 0))
            return None if row is None else row.to_model()

    @handle_sql_error
    @beartype
    def get_by_shortcode(self, domain: str, shortcode: str) -> LinkModel | None:
        # fmt: off
        query = select(LinkRow).where(LinkRow.domain == domain,
                                      LinkRow.short_code == shortcode,
                                      LinkRow.is_deleted == 0)
        # fmt: on
        with self.sessions() as session:
            row = session.scalar(query)
            return None if row is None else row.to_model()

    @handle_sql_error
    @beartype
    def exists(self, hash: str) -> bool:
        with self.sessions() as session:
            return session.scalar(select(LinkRow.id).where(LinkRow.hash == hash).limit(1)) is not None

    @handle_sql_error
    @beartype
    def insert(self, link: LinkModel) -> LinkModel:
        """Insert a link into the database

        The uniqueness of `hash` and of an active (shortcode, domain) pair is
        enforced by the database's unique indexes, not by a prior lookup.

        Args:
            link (LinkModel):
                Link to insert. Missing created_at/updated_at default to now.

        Returns:
            LinkModel: The stored link with its surrogate id.

        Raises:
            LinkAlreadyExistsError:
                If a unique index rejects the row.
            DataStoreError:
                If the database is unreachable.
        """
        row = LinkRow.from_model(link, now=now_ms())
        with self.sessions() as session:
            session.add(row)
            session.commit()
            logger.debug('Inserted link.', extra={'hash': link.hash, 'domain': link.domain, 'shortcode': link.shortcode})
            return row.to_model()

    @handle_sql_error
    @beartype
    def update(self, hash: str, **fields) -> LinkModel:
        """Partially update an active link

        Only the given fields are written (PATCH semantics); `updated_at` is
        always refreshed. The conditional UPDATE makes the existence check and
        the write a single statement, so concurrent updates are last-writer-wins.

        Args:
            hash (str):
                The link's internal lookup key.
            **fields:
                Any of target, owner_id, expires_at, attribute.

        Returns:
            LinkModel: The link as stored after the update.

        Raises:
            ValueError:
                If `fields` is empty or names a non-updatable field.
            LinkNotFoundError:
                If no active link has the given hash.
            DataStoreError:
                If the database is unreachable.
        """
        unknown = set(fields) - set(FIELD_COLUMNS)
        if unknown:
            raise ValueError(f'Cannot update link fields: {sorted(unknown)}')
        if not fields:
            raise ValueError('No fields to update.')

        values = {FIELD_COLUMNS[name]: value for name, value in fields.items()}
        values['updated_at'] = now_ms()

        # fmt: off
        statement = update(LinkRow) \
                        .where(LinkRow.hash == hash, LinkRow.is_deleted == 0) \
                        .values(**values)
        # fmt: on
        with self.sessions() as session:
            result = session.execute(statement, execution_options={'synchronize_session': False})
            if result.rowcount == 0:
                session.rollback()
                raise LinkNotFoundError(f"Link with hash '{hash}' not found or already deleted.")
            row = session.scalar(select(LinkRow).where(LinkRow.hash == hash))
            session.commit()
            return row.to_model()

    @handle_sql_error
    @beartype
    def soft_delete(self, hash: str) -> LinkModel:
        # fmt: off
        statement = update(LinkRow) \
                        .where(LinkRow.hash == hash, LinkRow.is_deleted == 0) \
                        .values(is_deleted=1, updated_at=now_ms())
        # fmt: on
        with self.sessions() as session:
            result = session.execute(statement, execution_options={'synchronize_session': False})
            if result.rowcount == 0:
                session.rollback()
                raise LinkNotFoundError(f"Link with hash '{hash}' not found or already deleted.")
            row = session.scalar(select(LinkRow).where(LinkRow.hash == hash))
            session.commit()
            logger.debug('Soft-deleted link.', extra={'hash': hash})
            return row.to_model()

    @handle_sql_error
    @beartype
    def list_expired(self, now: int) -> list[LinkModel]:
        # fmt: off
        query = select(LinkRow).where(LinkRow.is_deleted == 0,
                                      LinkRow.expires_at.is_not(None),
                                      LinkRow.expires_at < now) \
                               .order_by(LinkRow.expires_at, LinkRow.id)
        # fmt: on
        with self.sessions() as session:
            return [row.to_model() for row in session.scalars(query)]

    @handle_sql_error
    @beartype
    def list_links(self, is_deleted: bool | None = False, owner_id: str | None = None, limit: int | None = None) -> list[LinkModel]:
        query = select(LinkRow)
        if is_deleted is not None:
            query = query.where(LinkRow.is_deleted == int(is_deleted))
        if owner_id is not None:
            query = query.where(LinkRow.user_id == owner_id)
        query = query.order_by(LinkRow.created_at.desc(), LinkRow.id.desc())
        if limit is not None:
            query = query.limit(limit)
        with self.sessions() as session:
            return [row.to_model() for row in session.scalars(query)]
