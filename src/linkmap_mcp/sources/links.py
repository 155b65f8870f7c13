"""Anchor link scanning and page link extraction."""

import html as html_lib
import re
from collections.abc import Iterator
from urllib.parse import urljoin

from loguru import logger

from linkmap_mcp.config import settings
from linkmap_mcp.security import is_safe_url, require_http_url
from linkmap_mcp.sources.fetcher import PageFetcher

_ANCHOR_HREF_RE = re.compile(r"""<a[^>]+href=["']([^"']+)["'][^>]*>""", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


class LinkExtractionError(Exception):
    """A page could not be turned into a link list."""


def iter_hrefs(html: str) -> Iterator[str]:
    """Yield raw ``href`` values of ``<a>`` tags in document order."""
    for match in _ANCHOR_HREF_RE.finditer(html):
        yield html_lib.unescape(match.group(1)).strip()


def resolve_link(base_url: str, href: str) -> str | None:
    """Resolve ``href`` against ``base_url``.

    Anything after the first whitespace run is dropped. Returns None when
    the result cannot be parsed.
    """
    try:
        link = urljoin(base_url, href)
    except ValueError:
        logger.debug(f"Invalid URL found: {href!r}")
        return None
    parts = _WHITESPACE_RE.split(link.strip(), maxsplit=1)
    return parts[0] or None


def extract_links_from_html(base_url: str, html: str) -> list[str]:
    """Extract absolute anchor URLs from ``html``.

    Returns:
        Deduplicated links in first-seen order.
    """
    links: list[str] = []
    seen: set[str] = set()
    for href in iter_hrefs(html):
        link = resolve_link(base_url, href)
        if link and link not in seen:
            seen.add(link)
            links.append(link)
    return links


async def extract_page_links(url: str | None, fetcher: PageFetcher) -> dict:
    """Fetch an HTML page and list its links.

    Raises:
        ValueError: URL missing or malformed.
        LinkExtractionError: The page could not be fetched or is not HTML.

    Returns:
        ``{"links": [...], "original_url": url, "total_links": n}``
    """
    target = require_http_url(url)

    if not settings.allow_private_urls and not is_safe_url(target):
        raise LinkExtractionError(f"Security Alert: Unsafe URL blocked: {target}")

    try:
        resp = await fetcher.fetch(target)
    except Exception as e:
        raise LinkExtractionError(f"Network error: {e}") from e

    if not resp.ok:
        raise LinkExtractionError(f"Failed to fetch URL: {resp.status}")

    if not resp.is_html:
        raise LinkExtractionError("The URL does not point to an HTML page")

    links = extract_links_from_html(target, resp.text)
    logger.info(f"Extracted {len(links)} links from {target}")
    return {
        "links": links,
        "original_url": target,
        "total_links": len(links),
    }
