"""Tests for src/linkmap_mcp/sources/search_engine.py."""

import pytest
from conftest import FakeFetcher

from linkmap_mcp.sources.fetcher import FetchResponse
from linkmap_mcp.sources.search_engine import HtmlSearchEngine, SearchError

TEMPLATE = "https://search.test/?q={query}"


def test_build_url_encodes_query():
    engine = HtmlSearchEngine(FakeFetcher(), url_template=TEMPLATE)
    assert engine.build_url("acme api reference") == (
        "https://search.test/?q=acme+api+reference"
    )
    assert engine.build_url("c++ & go") == "https://search.test/?q=c%2B%2B+%26+go"


@pytest.mark.asyncio
async def test_search_returns_html():
    fetcher = FakeFetcher()
    fetcher.add_html("https://search.test/?q=acme+docs", "<a href='https://docs.acme.com'>")
    engine = HtmlSearchEngine(fetcher, url_template=TEMPLATE)

    assert await engine.search("acme docs") == "<a href='https://docs.acme.com'>"
    assert fetcher.calls == [("GET", "https://search.test/?q=acme+docs")]


@pytest.mark.asyncio
async def test_search_non_ok_raises():
    fetcher = FakeFetcher(
        {"https://search.test/?q=acme": FetchResponse(url="x", status=429)}
    )
    engine = HtmlSearchEngine(fetcher, url_template=TEMPLATE)
    with pytest.raises(SearchError, match="429"):
        await engine.search("acme")
