"""Search collaborator: turns a query into an HTML results page."""

from typing import Protocol
from urllib.parse import quote_plus

from loguru import logger

from linkmap_mcp.config import settings
from linkmap_mcp.sources.fetcher import PageFetcher


class SearchError(Exception):
    """The search engine did not return a usable results page."""


class SearchEngine(Protocol):
    """Protocol for search backends."""

    async def search(self, query: str) -> str:
        """Return the HTML of the results page for ``query``.

        Raises:
            SearchError: If the engine answered with a non-OK status.
        """
        ...


class HtmlSearchEngine:
    """Query a web search endpoint that answers with HTML."""

    def __init__(self, fetcher: PageFetcher, url_template: str | None = None):
        self.fetcher = fetcher
        self.url_template = url_template or settings.search_url_template

    def build_url(self, query: str) -> str:
        return self.url_template.replace("{query}", quote_plus(query))

    async def search(self, query: str) -> str:
        url = self.build_url(query)
        logger.info(f"Searching: {query}")
        resp = await self.fetcher.fetch(url)
        if not resp.ok:
            raise SearchError(f"Search request failed for '{query}': HTTP {resp.status}")
        return resp.text
