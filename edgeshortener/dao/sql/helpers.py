import functools
from typing import TypeVar, Any
from collections.abc import Callable

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, TimeoutError as PoolTimeoutError

from edgeshortener.dao.exceptions import DataStoreError, LinkAlreadyExistsError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def handle_sql_error[F](method: F) -> F:
    """Wrap SQL-interacting DAO methods to translate driver errors

    Args:
        method (Callable[..., Any]):
            DAO method performing SQL operations which may raise sqlalchemy.exc errors.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises LinkAlreadyExistsError on uniqueness
            violations and DataStoreError on connectivity issues.

    Example:
        >>> @handle_sql_error
        ... def count(self):
        ...     with self.sessions() as session:
        ...         return session.scalar(select(func.count(LinkRow.id)))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except IntegrityError as e:
            raise LinkAlreadyExistsError(f'Link violates a uniqueness constraint: {e.orig}') from e
        except (OperationalError, InterfaceError, PoolTimeoutError) as e:
            url = self.engine.url.render_as_string(hide_password=True)
            raise DataStoreError(f"Can't reach the data store at {url}.") from e

    return wrapper
