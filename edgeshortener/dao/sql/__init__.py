from edgeshortener.dao.sql.tables import Base, LinkRow
from edgeshortener.dao.sql.mixins import SQLEngineMixin
from edgeshortener.dao.sql.link_sql_dao import LinkSQLDAO


__all__ = ['Base', 'LinkRow', 'SQLEngineMixin', 'LinkSQLDAO']
