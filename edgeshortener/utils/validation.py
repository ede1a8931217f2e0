"""Input validation performed before requests reach the core services

Every check raises ValidationError with a message fit for API clients.

Functions:
    validate_batch(items, max_size=100) -> None
    validate_create_request(request, now) -> None
    validate_update_request(request) -> None
    validate_hash(hash) -> None
"""

import re
from collections.abc import Sized
from urllib.parse import urlparse

from edgeshortener.constants import Defaults, Limits
from edgeshortener.exceptions import ValidationError
from edgeshortener.models import UNSET, CreateLinkRequest, UpdateLinkRequest


CUSTOM_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')


def validate_batch(items: Sized, max_size: int = Defaults.MAX_BATCH_SIZE) -> None:
    if not isinstance(items, (list, tuple)):
        raise ValidationError('Batch must be a list of records.')
    if len(items) == 0:
        raise ValidationError('At least one record is required.')
    if len(items) > max_size:
        raise ValidationError(f'Cannot process more than {max_size} records at once.')


def validate_url(url: object) -> None:
    if not isinstance(url, str) or not url:
        raise ValidationError('URL cannot be empty.')
    components = urlparse(url)
    if components.scheme not in {'http', 'https'} or not components.netloc:
        raise ValidationError(f'Please provide a valid URL (e.g., https://example.com), given: {url!r}.')


def validate_custom_code(shortcode: object) -> None:
    if not isinstance(shortcode, str) or not shortcode:
        raise ValidationError('Custom short code cannot be empty.')
    if len(shortcode) > Limits.CUSTOM_CODE_MAX_LENGTH:
        raise ValidationError(f'Custom short code must be at most {Limits.CUSTOM_CODE_MAX_LENGTH} characters.')
    if not CUSTOM_CODE_PATTERN.match(shortcode):
        raise ValidationError('Custom short code can only contain letters, numbers, hyphens, and underscores.')


def validate_expires_at(expires_at: object, not_before: int) -> None:
    """Validate an epoch-ms expiry which must lie strictly after `not_before`."""
    if not isinstance(expires_at, int) or isinstance(expires_at, bool) or expires_at <= 0:
        raise ValidationError('Expiration time must be a valid timestamp (epoch milliseconds).')
    if expires_at <= not_before:
        raise ValidationError('Expiration time must be in the future.')


def validate_owner_id(owner_id: object) -> None:
    if not isinstance(owner_id, str):
        raise ValidationError('User ID must be a string.')
    if len(owner_id) > Limits.USER_ID_MAX_LENGTH:
        raise ValidationError(f'User ID must be less than {Limits.USER_ID_MAX_LENGTH} characters.')


def validate_hash(hash: object) -> None:
    if not isinstance(hash, str) or not hash:
        raise ValidationError('Hash cannot be empty.')
    if len(hash) > Limits.HASH_MAX_LENGTH:
        raise ValidationError(f'Hash must be at most {Limits.HASH_MAX_LENGTH} characters.')


def validate_create_request(request: CreateLinkRequest, now: int) -> None:
    validate_url(request.target)
    if not isinstance(request.domain, str) or not request.domain:
        raise ValidationError('Domain cannot be empty.')
    if request.shortcode is not None:
        validate_custom_code(request.shortcode)
    if request.expires_at is not UNSET and request.expires_at is not None:
        validate_expires_at(request.expires_at, not_before=now)
    validate_owner_id(request.owner_id)


def validate_update_request(request: UpdateLinkRequest) -> None:
    validate_hash(request.hash)
    changes = request.changes()
    if not changes:
        raise ValidationError('No fields to update.')
    if 'target' in changes:
        validate_url(changes['target'])
    if 'owner_id' in changes:
        validate_owner_id(changes['owner_id'])
    if changes.get('expires_at') is not None:
        # Checked against the record's createdAt by the store-facing service
        validate_expires_at(changes['expires_at'], not_before=0)
