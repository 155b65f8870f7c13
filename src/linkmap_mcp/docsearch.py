"""Documentation search with a per-user result cache.

Results are stored under ``docsearch/<user_id>/<keyword>`` and reused
while younger than ``DOCSEARCH_CACHE_TTL``. Without a user id every call
runs a fresh discovery.
"""

import time

from loguru import logger

from linkmap_mcp.config import settings
from linkmap_mcp.sources.discovery import DocSearchResult, discover_doc_sites
from linkmap_mcp.sources.fetcher import HttpxFetcher, PageFetcher
from linkmap_mcp.sources.search_engine import HtmlSearchEngine, SearchEngine
from linkmap_mcp.store import KVStore

NAMESPACE = "docsearch"


def _cached(store: KVStore, user_id: str, keyword: str) -> DocSearchResult | None:
    data = store.get(NAMESPACE, [user_id, keyword])
    if not data:
        return None
    result = DocSearchResult.from_dict(data)
    if time.time() - result.timestamp >= settings.docsearch_cache_ttl:
        return None
    return result


async def search_docs(
    keyword: str | None,
    user_id: str | None = None,
    store: KVStore | None = None,
    search_engine: SearchEngine | None = None,
    fetcher: PageFetcher | None = None,
) -> DocSearchResult:
    """Find the documentation site for ``keyword``, using the cache if possible.

    Raises:
        ValueError: If ``keyword`` is missing.
    """
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValueError("keyword is required")

    use_cache = bool(user_id) and store is not None

    if use_cache:
        cached = _cached(store, user_id, keyword)
        if cached is not None:
            logger.debug(f"Doc search cache HIT: {keyword}")
            return cached
        logger.debug(f"Doc search cache MISS: {keyword}")

    fetcher = fetcher or HttpxFetcher()
    search_engine = search_engine or HtmlSearchEngine(fetcher)

    result = await discover_doc_sites(keyword, search_engine, fetcher)

    if use_cache:
        store.put(
            NAMESPACE,
            [user_id, keyword],
            result.to_dict(),
            ttl=settings.docsearch_cache_ttl,
        )

    return result
