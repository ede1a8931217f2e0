import pytest

from edgeshortener.container import ServiceContainer
from edgeshortener.utils.config import ShortenerSettings


@pytest.fixture
def services(store, link_cache, telemetry):
    """Service container over the SQLite store and the in-memory cache."""
    return ServiceContainer(store=store, cache=link_cache, settings=ShortenerSettings(max_workers=2), telemetry=telemetry)


@pytest.fixture(autouse=True)
def _not_local(monkeypatch):
    """Handlers answer 500 instead of re-raising, as deployed."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
