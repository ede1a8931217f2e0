"""Unit tests for LinkSQLDAO (SQLite-backed)

Test coverage includes:

1. insert()
   - 1.1. Stores a link and assigns a surrogate id.
   - 1.2. Duplicate hash raises LinkAlreadyExistsError.
   - 1.3. Duplicate active (shortcode, domain) raises LinkAlreadyExistsError.
   - 1.4. A soft-deleted (shortcode, domain) pair is free again.

2. get() / get_by_shortcode() / exists()
   - 2.1. Soft-deleted links are invisible to reads.
   - 2.2. exists() includes soft-deleted links.

3. update()
   - 3.1. Writes only the given fields and refreshes updated_at.
   - 3.2. Unknown hashes and deleted links raise LinkNotFoundError.
   - 3.3. Unknown or empty field sets raise ValueError.

4. soft_delete()
   - 4.1. Flags the row; a second call raises LinkNotFoundError.

5. list_expired() / list_links()

6. Error translation
   - Connectivity errors surface as DataStoreError.
"""

from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time
from sqlalchemy.exc import OperationalError

from edgeshortener.dao.exceptions import DataStoreError, LinkAlreadyExistsError, LinkNotFoundError
from edgeshortener.dao.sql import LinkSQLDAO
from edgeshortener.utils.shortener import link_hash


# -------------------------------
# 1.1. insert()
# -------------------------------


def test_insert_assigns_id(store, make_link):
    """insert() returns the stored link with a surrogate id."""
    link = make_link(attribute=b'{"campaign":"launch"}')

    stored = store.insert(link)

    assert stored.id is not None
    assert stored.hash == link.hash
    assert stored.target == link.target
    assert stored.attribute == b'{"campaign":"launch"}'
    assert stored.is_deleted is False
    assert store.get(link.hash) == stored


@freeze_time('2025-10-09 08:53:20')
def test_insert_defaults_timestamps(store, make_link):
    """Missing created_at/updated_at default to the current time."""
    stored = store.insert(make_link(created_at=None, updated_at=None))

    assert stored.created_at == 1760000000000
    assert stored.updated_at == 1760000000000


def test_insert_never_expiring_link(store, make_link):
    """expires_at=None is stored as NULL."""
    stored = store.insert(make_link(expires_at=None))
    assert store.get(stored.hash).expires_at is None


# -------------------------------
# 1.2. Duplicate hash
# -------------------------------


def test_insert_duplicate_hash(store, make_link):
    """A second row with the same hash is rejected by the unique index."""
    store.insert(make_link())

    with pytest.raises(LinkAlreadyExistsError):
        store.insert(make_link(target='https://example.com/other'))


# -------------------------------
# 1.3. Duplicate active (shortcode, domain)
# -------------------------------


def test_insert_duplicate_shortcode_on_domain(store, make_link):
    """An active (shortcode, domain) pair can't be inserted twice, even under another hash."""
    store.insert(make_link())

    with pytest.raises(LinkAlreadyExistsError):
        store.insert(make_link(hash='f' * 64))


def test_same_shortcode_on_other_domain(store, make_link):
    """The same shortcode may live on different domains."""
    first = store.insert(make_link(domain='s.test'))
    second = store.insert(make_link(domain='t.test'))

    assert first.hash != second.hash
    assert store.get_by_shortcode('t.test', 'abc123') == second


# -------------------------------
# 1.4. Soft-deleted pairs are free again
# -------------------------------


def test_soft_deleted_pair_can_be_reused(store, make_link):
    """After a soft delete, the (shortcode, domain) pair accepts a new row."""
    old = store.insert(make_link())
    store.soft_delete(old.hash)

    new = store.insert(make_link(hash='e' * 64, target='https://example.com/new'))

    assert store.get_by_shortcode('s.test', 'abc123') == new


# -------------------------------
# 2.1. Reads hide soft-deleted links
# -------------------------------


def test_reads_hide_deleted_links(store, make_link):
    """get() and get_by_shortcode() return None for soft-deleted links."""
    link = store.insert(make_link())
    store.soft_delete(link.hash)

    assert store.get(link.hash) is None
    assert store.get_by_shortcode('s.test', 'abc123') is None


def test_reads_miss(store):
    """Unknown links read as None."""
    assert store.get(link_hash('s.test', 'missing')) is None
    assert store.get_by_shortcode('s.test', 'missing') is None


# -------------------------------
# 2.2. exists()
# -------------------------------


def test_exists_includes_deleted_links(store, make_link):
    """exists() reports taken hashes, soft-deleted ones included."""
    link = store.insert(make_link())
    assert store.exists(link.hash) is True

    store.soft_delete(link.hash)
    assert store.exists(link.hash) is True

    assert store.exists('0' * 64) is False


# -------------------------------
# 3.1. update()
# -------------------------------


def test_update_writes_given_fields_only(store, make_link, now):
    """update() applies a partial update and refreshes updated_at."""
    link = store.insert(make_link())

    with freeze_time('2025-10-09 09:00:00'):
        updated = store.update(link.hash, target='https://example.com/new', expires_at=None)

    assert updated.target == 'https://example.com/new'
    assert updated.expires_at is None
    assert updated.owner_id == link.owner_id
    assert updated.created_at == now
    assert updated.updated_at == 1760000400000
    assert store.get(link.hash) == updated


def test_update_attribute_and_owner(store, make_link):
    """Opaque attribute blobs and owner ids can be replaced."""
    link = store.insert(make_link(attribute=b'old'))

    updated = store.update(link.hash, attribute=b'\x00\x01', owner_id='')

    assert updated.attribute == b'\x00\x01'
    assert updated.owner_id == ''


# -------------------------------
# 3.2. update() on missing links
# -------------------------------


def test_update_unknown_hash(store):
    """Updating an unknown hash raises LinkNotFoundError."""
    with pytest.raises(LinkNotFoundError):
        store.update('0' * 64, target='https://example.com')


def test_update_deleted_link(store, make_link):
    """Updating a soft-deleted link raises LinkNotFoundError and changes nothing."""
    link = store.insert(make_link())
    store.soft_delete(link.hash)

    with pytest.raises(LinkNotFoundError):
        store.update(link.hash, target='https://example.com/new')

    assert store.list_links(is_deleted=True)[0].target == link.target


# -------------------------------
# 3.3. update() with bad fields
# -------------------------------


@pytest.mark.parametrize('fields', [{}, {'shortcode': 'new'}, {'is_deleted': True}, {'created_at': 0}])
def test_update_rejects_bad_fields(store, make_link, fields):
    """Empty field sets and non-updatable fields raise ValueError."""
    link = store.insert(make_link())

    with pytest.raises(ValueError):
        store.update(link.hash, **fields)


# -------------------------------
# 4.1. soft_delete()
# -------------------------------


def test_soft_delete(store, make_link):
    """soft_delete() flags the row and returns it."""
    link = store.insert(make_link())

    deleted = store.soft_delete(link.hash)

    assert deleted.is_deleted is True
    assert deleted.hash == link.hash
    assert deleted.target == link.target


def test_soft_delete_twice(store, make_link):
    """A second soft_delete() raises LinkNotFoundError."""
    link = store.insert(make_link())
    store.soft_delete(link.hash)

    with pytest.raises(LinkNotFoundError):
        store.soft_delete(link.hash)


# -------------------------------
# 5. list_expired() / list_links()
# -------------------------------


def test_list_expired(store, make_link, now):
    """list_expired() returns active links with expires_at < now, oldest first."""
    late = store.insert(make_link('late', expires_at=now - 1))
    early = store.insert(make_link('early', expires_at=now - 1000))
    store.insert(make_link('exact', expires_at=now))
    store.insert(make_link('future', expires_at=now + 1))
    store.insert(make_link('never', expires_at=None))
    gone = store.insert(make_link('gone', expires_at=now - 5))
    store.soft_delete(gone.hash)

    expired = store.list_expired(now)

    assert [link.hash for link in expired] == [early.hash, late.hash]


def test_list_links_filters(store, make_link, now):
    """list_links() filters by deletion flag and owner, newest first, with a limit."""
    a = store.insert(make_link('a', owner_id='alice', created_at=now))
    b = store.insert(make_link('b', owner_id='bob', created_at=now + 1))
    c = store.insert(make_link('c', owner_id='alice', created_at=now + 2))
    store.soft_delete(b.hash)

    assert [link.shortcode for link in store.list_links()] == ['c', 'a']
    assert [link.shortcode for link in store.list_links(is_deleted=True)] == ['b']
    assert [link.shortcode for link in store.list_links(is_deleted=None)] == ['c', 'b', 'a']
    assert [link.shortcode for link in store.list_links(owner_id='alice', limit=1)] == ['c']
    assert store.list_links(owner_id='carol') == []
    assert {a.hash, c.hash} == {link.hash for link in store.list_links(owner_id='alice')}


# -------------------------------
# 6. Error translation
# -------------------------------


def test_operational_errors_become_data_store_errors(store):
    """Driver connectivity errors surface as DataStoreError without leaking credentials."""
    store.sessions = MagicMock(side_effect=OperationalError('SELECT 1', {}, Exception('database is locked')))

    with pytest.raises(DataStoreError, match="Can't reach the data store"):
        store.get('0' * 64)


def test_unreachable_database_fails_fast(tmp_path):
    """Constructing the DAO against an unusable database raises DataStoreError."""
    with pytest.raises(DataStoreError):
        LinkSQLDAO(database_url=f'sqlite:///{tmp_path}/missing/dir/links.db')


def test_healthcheck(store):
    """healthcheck() returns True for a reachable database."""
    assert store.healthcheck() is True
