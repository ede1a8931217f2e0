"""SQL mixin providing shared engine initialization and connectivity checks.

Responsibilities:
    - Initialize a SQLAlchemy engine and session factory
    - Create the schema on first use
    - Healthcheck the database

Classes:
    - SQLEngineMixin: Base mixin to inject engine/session setup & healthcheck.

Example:
    Typical usage with a DAO implementation:

        >>> class LinkSQLDAO(SQLEngineMixin, LinkBaseDAO):
        ...     pass
        ...
        >>> dao = LinkSQLDAO(database_url='sqlite:///edgeshortener.db')
        >>> dao.healthcheck()
        True
"""

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import sessionmaker

from edgeshortener.dao.sql.tables import Base
from edgeshortener.dao.exceptions import DataStoreError


class SQLEngineMixin:
    """Mixin SQLAlchemy engine setup and health check for SQL-backed DAOs.

    Attributes:
        engine (sqlalchemy.Engine):
            Shared engine (and connection pool) used by subclasses.

        sessions (sqlalchemy.orm.sessionmaker):
            Factory for short-lived sessions, one per DAO call.

    Methods:
        healthcheck(raise_error: bool = True) -> bool:
            Run `SELECT 1` to verify connectivity.
            Optionally raise a DataStoreError if unreachable.

        close() -> None:
            Dispose the engine's connection pool.
    """

    def __init__(
        self,
        database_url: str | None = 'sqlite:///edgeshortener.db',
        engine: Engine | None = None,
        create_tables: bool = True,
        echo: bool = False,
    ):
        """Initialize a SQL-based DAO

        The option is given to either use an existing engine or create one
        from a SQLAlchemy database URL.

        Args:
            database_url (str | None):
                SQLAlchemy URL, e.g. 'postgresql+psycopg://user@host/db'.

            engine (sqlalchemy.Engine | None):
                Pre-initialized engine. If None, a new engine is created.

            create_tables (bool):
                If True, create missing tables and indexes. Defaults to True.

            echo (bool):
                If True, log emitted SQL. Defaults to False.

        Raises:
            DataStoreError:
                If the database is unreachable.
        """
        if engine is None:
            engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

        self.engine = engine
        self.sessions = sessionmaker(engine, expire_on_commit=False)

        if create_tables:
            try:
                Base.metadata.create_all(engine)
            except (OperationalError, InterfaceError) as e:
                raise DataStoreError(f"Can't create schema at {self._safe_url()}.") from e

        self.healthcheck()

    def healthcheck(self, raise_error: bool = True) -> bool:
        """SELECT 1 to healthcheck connectivity

        Args:
            raise_error (bool):
                If True, raises DataStoreError on failure. Defaults to True.

        Returns:
            bool:
                True if the database is reachable, False otherwise (only if raise_error=False).

        Raises:
            DataStoreError:
                If a connection cannot be established and raise_error=True.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text('SELECT 1'))
        except (OperationalError, InterfaceError) as e:
            if raise_error:
                raise DataStoreError(
                    f"Can't connect to the data store at {self._safe_url()}. Check the provided configuration parameters."
                ) from e
            return False
        else:
            return True

    def close(self) -> None:
        self.engine.dispose()

    def _safe_url(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)
