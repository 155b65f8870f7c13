"""Same-host "doc-like" link extraction from a documentation page."""

from urllib.parse import urlsplit

from loguru import logger

from linkmap_mcp.hierarchy import host_key
from linkmap_mcp.sources.fetcher import PageFetcher
from linkmap_mcp.sources.links import iter_hrefs, resolve_link

MAX_SUBLINKS = 20

_DOC_KEYWORDS = (
    "doc",
    "docs",
    "documentation",
    "reference",
    "guide",
    "tutorial",
    "manual",
    "api",
    "help",
    "learn",
    "howto",
    "faq",
    "example",
    "quickstart",
)

_DOC_SUFFIXES = (".html", ".md")

# Paths at least this deep usually lead to content, not top-level nav
_MIN_CONTENT_DEPTH = 2


def is_doc_link(url: str) -> bool:
    """Heuristic: does ``url`` point at a documentation page?"""
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False

    if any(keyword in path for keyword in _DOC_KEYWORDS):
        return True

    if path.endswith(_DOC_SUFFIXES):
        return True

    return len([p for p in path.split("/") if p]) >= _MIN_CONTENT_DEPTH


def extract_sublinks(page_url: str, html: str, limit: int = MAX_SUBLINKS) -> list[str]:
    """Collect doc-like links on ``page_url``'s own host.

    Anchors (``#...``) and ``javascript:`` links are ignored, relative
    links are resolved against ``page_url``. Hosts are compared
    without userinfo and default ports.

    Returns:
        At most ``limit`` deduplicated links in first-seen order.
    """
    page_host = host_key(page_url)
    if not page_host or limit <= 0:
        return []

    sublinks: list[str] = []
    seen: set[str] = set()

    for href in iter_hrefs(html):
        if href.startswith("#") or href.lower().startswith("javascript:"):
            continue

        link = resolve_link(page_url, href)
        if link is None or link in seen:
            continue

        if host_key(link) != page_host or not is_doc_link(link):
            continue

        seen.add(link)
        sublinks.append(link)
        if len(sublinks) >= limit:
            break

    return sublinks


async def fetch_sublinks(
    page_url: str, fetcher: PageFetcher, limit: int = MAX_SUBLINKS
) -> list[str]:
    """Fetch ``page_url`` and extract its doc sublinks; [] on any failure."""
    try:
        resp = await fetcher.fetch(page_url)
    except Exception as e:
        logger.warning(f"Sublink fetch failed for {page_url}: {e}")
        return []

    if not resp.ok:
        logger.debug(f"Sublink fetch for {page_url} returned {resp.status}")
        return []

    sublinks = extract_sublinks(page_url, resp.text, limit=limit)
    logger.debug(f"Found {len(sublinks)} sublinks on {page_url}")
    return sublinks
