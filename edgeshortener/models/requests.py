from dataclasses import dataclass, fields
from typing import Any, Final


class _Unset:
    """Marker for fields the caller did not provide (distinct from an explicit None)."""

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


# fmt: off
@dataclass(frozen=True)
class CreateLinkRequest:
    target: str                                 # Original long URL
    domain: str                                 # Domain the short code is issued under
    shortcode: str | None = None                # Caller-supplied custom code (random when None)
    expires_at: int | None | _Unset = UNSET     # Epoch ms; UNSET -> default lifetime, None -> never
    owner_id: str = ''                          # Owning principal, may be empty
    attribute: bytes | None = None              # Opaque metadata blob
# fmt: on


@dataclass(frozen=True)
class UpdateLinkRequest:
    """Partial update of an existing link (PATCH semantics).

    Only fields explicitly set (i.e. not UNSET) are written to the store.
    """

    hash: str
    target: str | _Unset = UNSET
    owner_id: str | _Unset = UNSET
    expires_at: int | None | _Unset = UNSET
    attribute: bytes | None | _Unset = UNSET

    def changes(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != 'hash' and getattr(self, f.name) is not UNSET}
