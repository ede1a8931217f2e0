"""SQLAlchemy table definitions for the durable link store.

Data Model Layout
=================
::
    links table
    ├─ id          (INTEGER PRIMARY KEY AUTOINCREMENT)
    ├─ url         (TEXT NOT NULL)
    ├─ user_id     (VARCHAR(100) NOT NULL, may be '')
    ├─ expires_at  (BIGINT NULL, epoch ms; NULL = never expires)
    ├─ hash        (VARCHAR(64) NOT NULL)           -- unique index links_hash
    ├─ short_code  (VARCHAR(64) NOT NULL)           ┐ partial unique index
    ├─ domain      (VARCHAR(255) NOT NULL)          ┘ links_short_code_domain WHERE is_deleted = 0
    ├─ attribute   (BLOB NULL)
    ├─ created_at  (BIGINT NOT NULL, epoch ms)
    ├─ updated_at  (BIGINT NOT NULL, epoch ms)
    └─ is_deleted  (INTEGER NOT NULL DEFAULT 0)

Key Behaviours
===============
- `hash` is unique across all rows, soft-deleted ones included.
- The partial index guards (short_code, domain) among active rows; since `hash`
  is derived from the pair, a soft-deleted code is still never reissued.
"""

from sqlalchemy import BigInteger, Index, Integer, LargeBinary, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from edgeshortener.models import LinkModel


__all__ = ['Base', 'LinkRow', 'FIELD_COLUMNS']

# Updatable LinkModel field name -> column name
FIELD_COLUMNS = {
    'target': 'url',
    'owner_id': 'user_id',
    'expires_at': 'expires_at',
    'attribute': 'attribute',
}


class Base(DeclarativeBase):
    pass


class LinkRow(Base):
    __tablename__ = 'links'
    __table_args__ = (
        Index('links_hash', 'hash', unique=True),
        Index(
            'links_short_code_domain',
            'short_code',
            'domain',
            unique=True,
            sqlite_where=text('is_deleted = 0'),
            postgresql_where=text('is_deleted = 0'),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, default='')
    expires_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    hash: Mapped[str] = mapped_column(String(64), nullable=False)
    short_code: Mapped[str] = mapped_column(String(64), nullable=False)
    domain: Mapped[str] = mapped_column(String(255), nullable=False)
    attribute: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_deleted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @classmethod
    def from_model(cls, link: LinkModel, now: int) -> 'LinkRow':
        return cls(
            url=link.target,
            user_id=link.owner_id,
            expires_at=link.expires_at,
            hash=link.hash,
            short_code=link.shortcode,
            domain=link.domain,
            attribute=link.attribute,
            created_at=link.created_at if link.created_at is not None else now,
            updated_at=link.updated_at if link.updated_at is not None else now,
            is_deleted=int(link.is_deleted),
        )

    def to_model(self) -> LinkModel:
        return LinkModel(
            target=self.url,
            shortcode=self.short_code,
            domain=self.domain,
            hash=self.hash,
            owner_id=self.user_id,
            expires_at=self.expires_at,
            attribute=self.attribute,
            created_at=self.created_at,
            updated_at=self.updated_at,
            is_deleted=bool(self.is_deleted),
            id=self.id,
        )

    def __repr__(self) -> str:
        return f"<LinkRow(id={self.id}, domain='{self.domain}', short_code='{self.short_code}', is_deleted={self.is_deleted})>"
