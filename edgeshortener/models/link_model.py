from dataclasses import dataclass


@dataclass(frozen=True)
class LinkModel:
    """Represent a short link record as stored in the durable store.

    Attributes:
        target (str):
            The original long URL that the short code redirects to.
        shortcode (str):
            User-facing short identifier, unique per domain among active links.
        domain (str):
            Host the short code lives under, e.g. 's.example.com'.
        hash (str):
            Internal lookup key, SHA-256 over '<domain>:<shortcode>'. Globally unique.
        owner_id (str):
            Identifier of the principal owning the link. May be empty.
        expires_at (int | None):
            Expiry as epoch milliseconds. None means the link never expires.
        attribute (bytes | None):
            Caller-defined metadata blob. Passed through without inspection.
        created_at (int | None):
            Creation time as epoch milliseconds.
        updated_at (int | None):
            Time of last modification as epoch milliseconds.
        is_deleted (bool):
            Soft-delete flag. Rows are never physically removed.
        id (int | None):
            Surrogate key assigned by the store.

    Example:
        >>> link = LinkModel(
        ...     target='https://example.com/article/123',
        ...     shortcode='aZ3kP9qx',
        ...     domain='s.example.com',
        ...     hash='5d1c...',
        ...     expires_at=1760000000000,
        ... )
        >>> link.is_expired(now=1760000000001)
        True
    """

    target: str
    shortcode: str
    domain: str
    hash: str
    owner_id: str = ''
    expires_at: int | None = None
    attribute: bytes | None = None
    created_at: int | None = None
    updated_at: int | None = None
    is_deleted: bool = False
    id: int | None = None

    def is_expired(self, now: int) -> bool:
        """Return True if the link's expiresAt has been reached at `now` (epoch ms)."""
        return self.expires_at is not None and self.expires_at <= now
