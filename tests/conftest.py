"""
Global pytest fixtures for the Redirect Generator test suite.

Responsibilities:
    - Provide isolated in-memory Storage and a controllable clock
    - Provide a RedirectStore wired to both
    - Provide a site map and a SiteLinkResolver over it (no network)
    - Provide a FastAPI TestClient built through the app factory

Why an app factory?
    `create_app()` takes its storage and resolver as arguments, so each test
    gets fresh in-memory state with no cross-test leakage.
"""

import json

import pytest
from fastapi.testclient import TestClient

from main import create_app
from redirect_generator.manager.redirect_store import RedirectStore
from redirect_generator.resolver.site_resolver import Site, SiteLinkResolver
from redirect_generator.storage.storage import Storage

SITE_MAP = {
    "base": "https://www.example.com",
    "languages": [
        {"id": 0, "code": "en", "title": "English", "base_path": "/"},
        {"id": 1, "code": "de", "title": "German", "base_path": "/de/"},
    ],
    "pages": [
        {"uid": 1, "slug": "/"},
        {"uid": 12, "slug": "/about", "translations": {"de": "/ueber-uns"}},
        {"uid": 15, "slug": "/contact"},
    ],
}


class FakeClock:
    """Deterministic time source; advance() moves it forward."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 60) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def storage() -> Storage:
    return Storage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(storage: Storage, clock: FakeClock) -> RedirectStore:
    return RedirectStore(storage=storage, clock=clock)


@pytest.fixture
def site() -> Site:
    return Site.model_validate(SITE_MAP)


@pytest.fixture
def resolver(site: Site) -> SiteLinkResolver:
    return SiteLinkResolver(site)


@pytest.fixture
def site_config(tmp_path):
    """Site map written to a JSON file, as REDIRECT_SITE_CONFIG would point to."""
    path = tmp_path / "site.json"
    path.write_text(json.dumps(SITE_MAP), encoding="utf-8")
    return path


@pytest.fixture
def client(storage: Storage, resolver: SiteLinkResolver, clock: FakeClock) -> TestClient:
    """Fresh TestClient over the shared in-memory storage fixture."""
    return TestClient(create_app(storage=storage, resolver=resolver, clock=clock))
