"""Unit tests for the link models and batch result types.

Test coverage includes:

1. LinkModel
   - Defaults, immutability and equality.
   - is_expired() at, before and after the expiry instant; never for None.

2. Request models
   - UNSET is falsy and distinct from None.
   - UpdateLinkRequest.changes() only carries explicitly set fields.

3. Result models
   - OperationResult.to_dict() drops empty fields but keeps hash/success.
   - BatchResult partitions results in input order.
   - SweepResult.to_dict() uses the camelCase report keys.
"""

from dataclasses import FrozenInstanceError

import pytest

from edgeshortener.models import (
    UNSET,
    LinkModel,
    CreateLinkRequest,
    UpdateLinkRequest,
    OperationResult,
    BatchResult,
    SweepResult,
)


# -------------------------------
# 1. LinkModel
# -------------------------------


def test_link_model_defaults():
    """Optional fields default to an active, never-expiring link."""
    link = LinkModel(target='https://example.com', shortcode='abc123', domain='s.test', hash='h')

    assert link.owner_id == ''
    assert link.expires_at is None
    assert link.attribute is None
    assert link.is_deleted is False
    assert link.id is None


def test_link_model_is_frozen(make_link):
    """Links are immutable."""
    link = make_link()

    with pytest.raises(FrozenInstanceError):
        link.target = 'https://evil.example'


def test_link_model_equality(make_link):
    """Links with identical data compare equal."""
    assert make_link() == make_link()
    assert make_link() != make_link(target='https://example.com/other')


@pytest.mark.parametrize(
    'expires_at, now, expected',
    [
        (1000, 999, False),
        (1000, 1000, True),
        (1000, 1001, True),
        (None, 10**15, False),
    ],
)
def test_is_expired(make_link, expires_at, now, expected):
    """A link expires at its expiresAt instant; None never expires."""
    assert make_link(expires_at=expires_at).is_expired(now) is expected


# -------------------------------
# 2. Request models
# -------------------------------


def test_unset_marker():
    """UNSET is falsy but not None."""
    assert not UNSET
    assert UNSET is not None
    assert repr(UNSET) == 'UNSET'


def test_create_request_defaults():
    """Create requests default to a generated code and the default lifetime."""
    request = CreateLinkRequest(target='https://example.com', domain='s.test')

    assert request.shortcode is None
    assert request.expires_at is UNSET
    assert request.owner_id == ''


@pytest.mark.parametrize(
    'fields, expected',
    [
        ({}, {}),
        ({'target': 'https://example.com/b'}, {'target': 'https://example.com/b'}),
        ({'expires_at': None}, {'expires_at': None}),
        ({'owner_id': '', 'attribute': None}, {'owner_id': '', 'attribute': None}),
    ],
)
def test_update_request_changes(fields, expected):
    """Only explicitly set fields are written; an explicit None clears the field."""
    assert UpdateLinkRequest(hash='h', **fields).changes() == expected


# -------------------------------
# 3. Result models
# -------------------------------


def test_operation_result_success_dict():
    """Successful items report the link's public fields."""
    result = OperationResult(
        hash='h',
        success=True,
        shortcode='abc123',
        short_url='https://s.test/abc123',
        target='https://example.com',
        expires_at=2000,
    )

    assert result.to_dict() == {
        'hash': 'h',
        'success': True,
        'shortCode': 'abc123',
        'shortUrl': 'https://s.test/abc123',
        'url': 'https://example.com',
        'expiresAt': 2000,
    }


def test_operation_result_failure_dict():
    """Failures keep hash (even when None) and success, and drop empty fields."""
    result = OperationResult(hash=None, success=False, error='URL cannot be empty.')

    assert result.to_dict() == {'hash': None, 'success': False, 'error': 'URL cannot be empty.'}


def test_batch_result_partition():
    """from_results() splits outcomes while keeping their order."""
    ok1 = OperationResult(hash='a', success=True)
    bad = OperationResult(hash='b', success=False, error='x')
    ok2 = OperationResult(hash='c', success=True)

    batch = BatchResult.from_results([ok1, bad, ok2])

    assert batch.successes == [ok1, ok2]
    assert batch.failures == [bad]
    assert batch.to_dict()['failures'] == [{'hash': 'b', 'success': False, 'error': 'x'}]


def test_sweep_result_dict():
    """Sweep reports use camelCase keys and copy the error list."""
    result = SweepResult(deleted_count=2, cache_cleaned_count=1, error_messages=['e'], execution_time_ms=15)

    data = result.to_dict()
    data['errorMessages'].append('other')

    assert data == {'deletedCount': 2, 'cacheCleanedCount': 1, 'errorMessages': ['e', 'other'], 'executionTimeMs': 15}
    assert result.error_messages == ['e']
