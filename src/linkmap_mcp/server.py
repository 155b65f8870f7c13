"""Linkmap MCP Server - Main server definition."""

import asyncio
import functools
import json
import sys
from contextlib import asynccontextmanager

from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from linkmap_mcp.config import settings
from linkmap_mcp.docsearch import search_docs
from linkmap_mcp.favorites import FavoritesService
from linkmap_mcp.hierarchy import build_hierarchy, hierarchy_to_dict
from linkmap_mcp.search import SCOPE_ALL
from linkmap_mcp.security import wrap_external_content
from linkmap_mcp.sources.fetcher import HttpxFetcher
from linkmap_mcp.sources.links import LinkExtractionError, extract_page_links
from linkmap_mcp.store import KVStore

# Configure logging
logger.remove()
logger.add(sys.stderr, level=settings.log_level)

# Module-level state (set during lifespan)
_store: KVStore | None = None


@asynccontextmanager
async def _lifespan(_server: FastMCP):
    """Server lifespan: open the key-value store, close it on shutdown."""
    global _store

    logger.info("Starting Linkmap MCP Server...")

    store_path = settings.get_store_path()
    _store = KVStore(store_path)
    logger.info(f"Store opened at {store_path}")

    yield

    logger.info("Shutting down Linkmap MCP Server...")
    if _store:
        _store.close()
        _store = None


# Initialize MCP server
mcp = FastMCP(
    name="linkmap",
    instructions=(
        "Linkmap MCP Server. "
        "Use `links` to extract the links of a page and organize them by host and path. "
        "Use `favorites` to save, list, delete and fuzzy-search link sets. "
        "Use `docs` to find the documentation site of a product or company."
    ),
    lifespan=_lifespan,
)

# Seconds a timed-out tool gets to unwind after cancellation
_CANCEL_GRACE_PERIOD = 5.0


def _wrap_tool(tool_name: str):
    """Fence JSON results of ``tool_name`` as untrusted web data."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return wrap_external_content(tool_name, await func(*args, **kwargs))

        return wrapper

    return decorator


async def _with_timeout(coro, action: str) -> str:
    """Await ``coro`` for at most ``TOOL_TIMEOUT`` seconds.

    Page fetches and doc discovery can stall on slow hosts; past the
    deadline the call is cancelled and the caller gets an ``Error:``
    string instead of waiting on it.
    """
    timeout = settings.tool_timeout
    if timeout <= 0:
        return await coro

    task = asyncio.create_task(coro)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task.result()

    task.cancel()
    done, _ = await asyncio.wait({task}, timeout=_CANCEL_GRACE_PERIOD)
    if not done:
        logger.warning(f"'{action}' ignored cancellation for {_CANCEL_GRACE_PERIOD}s")

    logger.error(f"'{action}' exceeded TOOL_TIMEOUT ({timeout}s)")
    return f"Error: '{action}' timed out after {timeout}s (TOOL_TIMEOUT)."


def _dumps(data) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def _favorites_service() -> FavoritesService | None:
    return FavoritesService(_store) if _store else None


# ---------------------------------------------------------------------------
# links tool: extract, hierarchy
# ---------------------------------------------------------------------------


async def _do_extract(url: str) -> str:
    try:
        result = await extract_page_links(url, HttpxFetcher())
    except (ValueError, LinkExtractionError) as e:
        return f"Error: {e}"
    result["hierarchy"] = hierarchy_to_dict(build_hierarchy(result["links"]))
    return _dumps(result)


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
@_wrap_tool("links")
async def links(
    action: str,
    url: str | None = None,
    links: list[str] | None = None,
) -> str:
    """Extract page links or organize links into a host/path tree.
    - extract: Fetch an HTML page and list its links with hierarchy (requires url)
    - hierarchy: Build the host/path tree for given links (requires links)
    Use `help` tool for full documentation.
    """
    match action:
        case "extract":
            if not url:
                return "Error: url is required for extract action"
            return await _with_timeout(_do_extract(url), "extract")

        case "hierarchy":
            if links is None:
                return "Error: links is required for hierarchy action"
            return _dumps(hierarchy_to_dict(build_hierarchy(links)))

        case _:
            return f"Error: Unknown action '{action}'. Valid actions: extract, hierarchy"


# ---------------------------------------------------------------------------
# favorites tool: add, list, delete, search
# ---------------------------------------------------------------------------


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        openWorldHint=False,
    ),
)
@_wrap_tool("favorites")
async def favorites(
    action: str,
    user_id: str | None = None,
    url: str | None = None,
    title: str | None = None,
    links: list[str] | None = None,
    favorite_id: str | None = None,
    query: str | None = None,
    scope: str = SCOPE_ALL,
) -> str:
    """Save, list, delete and search favorite link sets.
    - add: Save links (or a single url) with optional title (requires user_id)
    - list: List saved favorites (requires user_id)
    - delete: Remove a favorite (requires user_id + favorite_id)
    - search: Fuzzy-search favorites by host/path (requires user_id + query; scope='all' or a favorite id)
    Use `help` tool for full documentation.
    """
    service = _favorites_service()
    if service is None:
        return "Error: store is not initialized"

    try:
        match action:
            case "add":
                favorite = service.add(user_id, url=url, title=title, links=links)
                return _dumps({"success": True, "favorite": favorite.to_dict()})

            case "list":
                items = service.list(user_id)
                return _dumps({"favorites": [f.to_dict() for f in items]})

            case "delete":
                deleted = service.delete(user_id, favorite_id)
                return _dumps({"success": deleted})

            case "search":
                if not query or not query.strip():
                    return _dumps({"results": [], "total": 0})
                results = service.search(user_id, query, scope=scope)
                return _dumps(
                    {
                        "results": [r.to_dict() for r in results],
                        "total": sum(len(r.matched_links) for r in results),
                    }
                )

            case _:
                return (
                    f"Error: Unknown action '{action}'. "
                    "Valid actions: add, list, delete, search"
                )
    except ValueError as e:
        return f"Error: {e}"


# ---------------------------------------------------------------------------
# docs tool
# ---------------------------------------------------------------------------


async def _do_docs(keyword: str, user_id: str | None) -> str:
    try:
        result = await search_docs(keyword, user_id=user_id, store=_store)
    except ValueError as e:
        return f"Error: {e}"
    return _dumps({"success": True, **result.to_dict()})


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
@_wrap_tool("docs")
async def docs(keyword: str, user_id: str | None = None) -> str:
    """Find the documentation site for a product or company.
    Returns candidate doc sites, the best match and up to 20 doc sublinks.
    Results are cached per user for 24 hours when user_id is given.
    """
    if not keyword or not keyword.strip():
        return "Error: keyword is required"
    return await _with_timeout(_do_docs(keyword, user_id), "docs")


# ---------------------------------------------------------------------------
# help tool
# ---------------------------------------------------------------------------

_HELP = {
    "links": (
        "links(action, url=None, links=None)\n\n"
        "extract: fetch `url` (HTML only) and return every <a href> resolved to an\n"
        "  absolute URL, deduplicated in page order, plus the host/path hierarchy.\n"
        "hierarchy: build the host/path tree for `links`. Each node carries\n"
        "  full_path, is_expanded_default, original_url, links and children."
    ),
    "favorites": (
        "favorites(action, user_id, ...)\n\n"
        "add: save `links` (hierarchy precomputed) or a single `url`; `title` optional.\n"
        "list: all favorites of `user_id`.\n"
        "delete: remove `favorite_id`.\n"
        "search: fuzzy match `query` against hostnames, paths and path segments.\n"
        "  `scope` is 'all' or a favorite id. Short queries (<=3 chars) use a\n"
        "  looser similarity threshold."
    ),
    "docs": (
        "docs(keyword, user_id=None)\n\n"
        "Searches the web for '<keyword> documentation/docs/developer/api reference',\n"
        "keeps doc-looking URLs containing the keyword, falls back to guessed\n"
        "origins (docs.<kw>.com, <kw>.dev, ...), scores candidates by URL patterns\n"
        "and page content, and returns the best site with its doc sublinks."
    ),
}


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
        idempotentHint=True,
    ),
)
async def help(tool_name: str = "links") -> str:
    """Get full documentation for a tool (links, favorites, docs)."""
    text = _HELP.get(tool_name)
    if text is None:
        return f"Error: Unknown tool '{tool_name}'. Valid tools: {', '.join(_HELP)}"
    return text


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
