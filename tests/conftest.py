"""Pytest configuration and fixtures."""

import httpx
import pytest

from linkmap_mcp.sources.fetcher import FetchResponse
from linkmap_mcp.store import KVStore

HTML_HEADERS = {"Content-Type": "text/html; charset=utf-8"}


class FakeFetcher:
    """In-memory PageFetcher.

    ``pages`` maps URL to a FetchResponse or an exception instance to
    raise. Unknown URLs raise ``httpx.ConnectError``. Every call is
    recorded in ``calls`` as ``(method, url)``.
    """

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    def add_html(self, url, html, status=200):
        self.pages[url] = FetchResponse(url=url, status=status, headers=HTML_HEADERS, text=html)

    async def fetch(self, url, method="GET"):
        self.calls.append((method, url))
        page = self.pages.get(url)
        if page is None:
            raise httpx.ConnectError(f"cannot connect to {url}")
        if isinstance(page, Exception):
            raise page
        return page


class FakeSearchEngine:
    """SearchEngine returning canned HTML per query."""

    def __init__(self, results=None, default=""):
        self.results = dict(results or {})
        self.default = default
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        result = self.results.get(query, self.default)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def sample_url():
    """Sample URL for testing."""
    return "https://docs.example.com/guide/intro"


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def store(tmp_path):
    """Create a fresh KVStore for each test."""
    store = KVStore(tmp_path / "test_store.db")
    yield store
    store.close()
