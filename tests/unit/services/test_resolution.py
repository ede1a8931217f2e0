"""Unit tests for ResolutionService

Test coverage includes:

1. Redirects
   - 1.1. Store hit populates the cache and redirects.
   - 1.2. Cache hit redirects without touching the store.

2. Not found
   - Unknown and soft-deleted links resolve to NotFound; misses are not cached.

3. Expiry
   - 3.1. A link expiring at T redirects at T-1 and is NotFound at T and T+1.
   - 3.2. Expired cache hits are invalidated.

4. Crawler previews
   - 4.1. Crawlers get a rendered preview which is cached under og:<hash>.
   - 4.2. Cached previews are served without the store and re-validated for expiry.

5. Failures
   - 5.1. Cache outages fall back to the store.
   - 5.2. Store outages on a cache miss raise DataStoreError.
   - 5.3. Telemetry failures never affect the response.
"""

from unittest.mock import MagicMock

import pytest

from edgeshortener.dao.exceptions import DataStoreError
from edgeshortener.models import RedirectTarget, PreviewDocument, NotFound
from edgeshortener.services import ResolutionService


TWITTERBOT = 'Twitterbot/1.0'
BROWSER = 'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36'


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def clock(now):
    clock = MagicMock(return_value=now)
    return clock


@pytest.fixture
def service(store, link_cache, telemetry, clock):
    return ResolutionService(store, link_cache, telemetry=telemetry, clock=clock)


@pytest.fixture
def link(store, make_link):
    return store.insert(make_link())


# -------------------------------
# 1.1. Store hit
# -------------------------------


def test_store_hit_redirects_and_populates_cache(service, link, fake_cache, telemetry, now):
    """A store hit returns the target and writes the snapshot to the cache."""
    result = service.resolve('s.test', 'abc123', user_agent=BROWSER)

    assert result == RedirectTarget(location=link.target, hash=link.hash, shortcode='abc123', domain='s.test')
    assert f'url:{link.hash}' in fake_cache.entries

    telemetry.record.assert_called_once()
    event = telemetry.record.call_args.args[0]
    assert event == {
        'timestamp': now,
        'hash': link.hash,
        'shortCode': 'abc123',
        'domain': 's.test',
        'userAgent': BROWSER,
        'responseCode': 302,
        'isCrawler': False,
    }


# -------------------------------
# 1.2. Cache hit
# -------------------------------


def test_cache_hit_skips_store(link_cache, make_link, clock):
    """A cached snapshot is served without consulting the store."""
    link = make_link()
    link_cache.populate_link(link)
    store = MagicMock()
    service = ResolutionService(store, link_cache, clock=clock)

    result = service.resolve('s.test', 'abc123')

    assert isinstance(result, RedirectTarget)
    assert result.location == link.target
    store.get_by_shortcode.assert_not_called()


# -------------------------------
# 2. Not found
# -------------------------------


def test_unknown_link(service, fake_cache, telemetry):
    """Unknown links resolve to NotFound; nothing is cached or recorded."""
    result = service.resolve('s.test', 'nope')

    assert isinstance(result, NotFound)
    assert fake_cache.entries == {}
    telemetry.record.assert_not_called()


def test_deleted_link(service, store, link):
    """Soft-deleted links resolve to NotFound."""
    store.soft_delete(link.hash)

    assert service.resolve('s.test', 'abc123') == NotFound(link.hash)


def test_shortcode_is_scoped_to_domain(service, link):
    """The same shortcode on another domain doesn't resolve."""
    assert isinstance(service.resolve('t.test', 'abc123'), NotFound)


# -------------------------------
# 3.1. Expiry boundaries
# -------------------------------


@pytest.mark.parametrize(
    'offset, redirects',
    [(-1, True), (0, False), (1, False)],
)
def test_expiry_boundaries(service, clock, link, offset, redirects):
    """Links redirect strictly before expiresAt and are NotFound from then on."""
    clock.return_value = link.expires_at + offset

    result = service.resolve('s.test', 'abc123')

    assert isinstance(result, RedirectTarget) is redirects
    assert isinstance(result, NotFound) is not redirects


def test_never_expiring_link(service, store, make_link, clock):
    """Links without expiresAt resolve forever."""
    store.insert(make_link('forever', expires_at=None))
    clock.return_value = 10**15

    assert isinstance(service.resolve('s.test', 'forever'), RedirectTarget)


def test_expired_store_hit_is_not_cached(service, clock, link, fake_cache):
    """Expired links read from the store are not written to the cache."""
    clock.return_value = link.expires_at + 1

    service.resolve('s.test', 'abc123')

    assert fake_cache.entries == {}


# -------------------------------
# 3.2. Expired cache hits
# -------------------------------


def test_expired_cache_hit_is_invalidated(service, clock, link, fake_cache):
    """A cached snapshot past its expiresAt resolves to NotFound and is deleted."""
    service.resolve('s.test', 'abc123')
    assert f'url:{link.hash}' in fake_cache.entries

    clock.return_value = link.expires_at + 1
    result = service.resolve('s.test', 'abc123')

    assert isinstance(result, NotFound)
    assert f'url:{link.hash}' not in fake_cache.entries


# -------------------------------
# 4.1. Crawler previews
# -------------------------------


def test_crawler_gets_preview(service, link, fake_cache, telemetry):
    """Crawlers get an HTML preview which is cached under og:<hash>."""
    result = service.resolve('s.test', 'abc123', user_agent=TWITTERBOT)

    assert isinstance(result, PreviewDocument)
    assert result.location == link.target
    assert link.target in result.html
    assert f'og:{link.hash}' in fake_cache.entries
    assert telemetry.record.call_args.args[0]['responseCode'] == 200
    assert telemetry.record.call_args.args[0]['isCrawler'] is True


# -------------------------------
# 4.2. Cached previews
# -------------------------------


def test_cached_preview_served_without_store(link_cache, make_link, clock):
    """A cached preview is served without consulting the store."""
    link = make_link()
    link_cache.populate_preview(link, '<html>cached</html>')
    store = MagicMock()
    service = ResolutionService(store, link_cache, clock=clock)

    result = service.resolve('s.test', 'abc123', user_agent=TWITTERBOT)

    assert result == PreviewDocument(html='<html>cached</html>', hash=link.hash, location=link.target)
    store.get_by_shortcode.assert_not_called()


def test_expired_cached_preview(service, clock, link, fake_cache):
    """A cached preview past expiresAt resolves to NotFound and both entries are dropped."""
    service.resolve('s.test', 'abc123', user_agent=TWITTERBOT)
    service.resolve('s.test', 'abc123')

    clock.return_value = link.expires_at
    result = service.resolve('s.test', 'abc123', user_agent=TWITTERBOT)

    assert isinstance(result, NotFound)
    assert fake_cache.entries == {}


def test_browser_ignores_cached_preview(service, link, link_cache):
    """Regular clients are redirected even when a preview is cached."""
    link_cache.populate_preview(link, '<html>cached</html>')

    assert isinstance(service.resolve('s.test', 'abc123', user_agent=BROWSER), RedirectTarget)


# -------------------------------
# 5.1. Cache outage
# -------------------------------


def test_cache_outage_falls_back_to_store(service, link, fake_cache):
    """An unavailable cache doesn't affect resolution."""
    fake_cache.failing = True

    result = service.resolve('s.test', 'abc123')

    assert isinstance(result, RedirectTarget)
    assert result.location == link.target


# -------------------------------
# 5.2. Store outage
# -------------------------------


def test_store_outage_on_cache_miss(link_cache, clock):
    """DataStoreError propagates when the cache can't answer."""
    store = MagicMock()
    store.get_by_shortcode.side_effect = DataStoreError("Can't reach the data store at sqlite://.")
    service = ResolutionService(store, link_cache, clock=clock)

    with pytest.raises(DataStoreError):
        service.resolve('s.test', 'abc123')


def test_store_outage_on_cache_hit(link_cache, make_link, clock):
    """Cached links keep resolving while the store is down."""
    link_cache.populate_link(make_link())
    store = MagicMock()
    store.get_by_shortcode.side_effect = DataStoreError("Can't reach the data store at sqlite://.")
    service = ResolutionService(store, link_cache, clock=clock)

    assert isinstance(service.resolve('s.test', 'abc123'), RedirectTarget)


# -------------------------------
# 5.3. Telemetry failures
# -------------------------------


def test_telemetry_failure_is_ignored(service, link, telemetry):
    """A failing telemetry sink doesn't change the outcome."""
    telemetry.record.side_effect = RuntimeError('sink down')

    assert isinstance(service.resolve('s.test', 'abc123'), RedirectTarget)
