"""Documentation site discovery for a product or company name.

Pipeline:
1. Run a handful of doc-flavoured web searches for the keyword and keep
   result URLs that plausibly are documentation (see ``classifier``).
2. If nothing was found, probe a fixed list of guessed doc origins.
3. Score every candidate by URL patterns plus a live fetch (title and
   doc-ish markup), pick the best one.
4. Collect same-host doc sublinks from the winner.

A failed search query, probe or fetch only affects its own query or
candidate; discovery as a whole never raises for network problems.
"""

import asyncio
import re
import time
from dataclasses import asdict, dataclass, field
from typing import Any

from loguru import logger

from linkmap_mcp.config import settings
from linkmap_mcp.hierarchy import to_origin
from linkmap_mcp.sources.classifier import is_plausible_doc, score_pattern
from linkmap_mcp.sources.fetcher import PageFetcher
from linkmap_mcp.sources.search_engine import SearchEngine
from linkmap_mcp.sources.sublinks import MAX_SUBLINKS, fetch_sublinks

_QUERY_TEMPLATES = (
    "{keyword} documentation",
    "{keyword} docs",
    "{keyword} developer",
    "{keyword} api reference",
)

_GUESS_TEMPLATES = (
    "https://docs.{slug}.com",
    "https://{slug}.dev",
    "https://developer.{slug}.com",
    "https://docs.{slug}.io",
    "https://{slug}.github.io",
    "https://{slug}.com/docs",
)

_RESULT_HREF_RE = re.compile(r"""href=["'](https?://[^"']+)["']""", re.IGNORECASE)
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_DOC_TITLE_RE = re.compile(r"docs|documentation|reference|guide|manual|api", re.IGNORECASE)
_DOC_ELEMENT_RE = re.compile(r"<(h[1-6]|section|article|code|pre)[^>]*>", re.IGNORECASE)

# Scoring weights
_REACHABLE_BONUS = 5.0
_DOC_TITLE_BONUS = 5.0
_ELEMENTS_PER_POINT = 10
_MAX_ELEMENT_BONUS = 5.0
_UNREACHABLE_PENALTY = 10.0


@dataclass
class DocCandidate:
    url: str
    score: float


@dataclass
class DocSearchResult:
    keyword: str
    doc_sites: list[str] = field(default_factory=list)
    main_doc_url: str | None = None
    sublinks: list[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocSearchResult":
        return cls(
            keyword=data["keyword"],
            doc_sites=list(data.get("doc_sites", [])),
            main_doc_url=data.get("main_doc_url"),
            sublinks=list(data.get("sublinks", [])),
            timestamp=float(data.get("timestamp", 0.0)),
        )


def build_queries(keyword: str) -> list[str]:
    return [template.format(keyword=keyword) for template in _QUERY_TEMPLATES]


def guessed_doc_urls(keyword: str) -> list[str]:
    """Well-known doc origins for ``keyword`` (used when search finds nothing)."""
    slug = "".join(keyword.lower().split())
    return [template.format(slug=slug) for template in _GUESS_TEMPLATES]


def extract_result_urls(html: str) -> list[str]:
    """All absolute ``href`` values on a search results page."""
    return [match.group(1) for match in _RESULT_HREF_RE.finditer(html)]


async def probe_url(url: str, fetcher: PageFetcher) -> bool:
    """Cheap existence check (HEAD)."""
    try:
        resp = await fetcher.fetch(url, method="HEAD")
    except Exception as e:
        logger.debug(f"Probe failed for {url}: {e}")
        return False
    return resp.ok


async def collect_candidates(
    keyword: str, search_engine: SearchEngine, fetcher: PageFetcher
) -> list[str]:
    """Candidate doc origins for ``keyword`` in first-seen order."""
    sites: dict[str, None] = {}

    for query in build_queries(keyword):
        try:
            html = await search_engine.search(query)
        except Exception as e:
            logger.warning(f"Search query failed, skipping: {query}: {e}")
            continue

        for url in extract_result_urls(html):
            if not is_plausible_doc(url, keyword):
                continue
            origin = to_origin(url)
            if origin:
                sites.setdefault(origin, None)

    if sites:
        logger.info(f"Search found {len(sites)} candidate doc sites for '{keyword}'")
        return list(sites)

    guesses = guessed_doc_urls(keyword)
    logger.info(f"No search candidates for '{keyword}', probing {len(guesses)} guesses")
    reachable = await asyncio.gather(*(probe_url(url, fetcher) for url in guesses))
    return [url for url, ok in zip(guesses, reachable) if ok]


def score_content(html: str) -> float:
    """Bonus for doc-like page content: title keywords and markup density."""
    score = 0.0
    title = _TITLE_RE.search(html)
    if title and _DOC_TITLE_RE.search(title.group(1)):
        score += _DOC_TITLE_BONUS
    elements = len(_DOC_ELEMENT_RE.findall(html))
    score += min(elements / _ELEMENTS_PER_POINT, _MAX_ELEMENT_BONUS)
    return score


async def score_candidate(url: str, fetcher: PageFetcher) -> DocCandidate:
    """Pattern score plus live-fetch bonuses; unreachable sites are penalized."""
    score = float(score_pattern(url))

    try:
        resp = await fetcher.fetch(url)
    except Exception as e:
        logger.debug(f"Candidate unreachable {url}: {e}")
        return DocCandidate(url=url, score=score - _UNREACHABLE_PENALTY)

    if resp.ok:
        score += _REACHABLE_BONUS
        if "text/html" in resp.content_type:
            score += score_content(resp.text)

    return DocCandidate(url=url, score=score)


async def rank_candidates(urls: list[str], fetcher: PageFetcher) -> list[DocCandidate]:
    """Score candidates concurrently and sort best first (stable on ties)."""
    candidates = await asyncio.gather(*(score_candidate(url, fetcher) for url in urls))
    return sorted(candidates, key=lambda c: c.score, reverse=True)


async def find_best_doc_site(urls: list[str], fetcher: PageFetcher) -> str | None:
    ranked = await rank_candidates(urls, fetcher)
    if not ranked:
        return None
    logger.debug(f"Best doc site {ranked[0].url} (score={ranked[0].score:.1f})")
    return ranked[0].url


async def discover_doc_sites(
    keyword: str,
    search_engine: SearchEngine,
    fetcher: PageFetcher,
    max_sublinks: int | None = None,
) -> DocSearchResult:
    """Find the documentation site for ``keyword``.

    Args:
        keyword: Product or company name.
        search_engine: Returns HTML result pages for queries.
        fetcher: Used for probes, candidate scoring and sublinks.
        max_sublinks: Sublink cap (default: ``settings.max_sublinks``),
            never above ``MAX_SUBLINKS``.

    Raises:
        ValueError: If ``keyword`` is empty.
    """
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValueError("keyword is required")

    limit = settings.max_sublinks if max_sublinks is None else max_sublinks
    limit = min(limit, MAX_SUBLINKS)
    logger.info(f"Discovering documentation sites for '{keyword}'")

    doc_sites = await collect_candidates(keyword, search_engine, fetcher)

    main_doc_url = None
    sublinks: list[str] = []
    if doc_sites:
        main_doc_url = await find_best_doc_site(doc_sites, fetcher)
        if main_doc_url:
            sublinks = await fetch_sublinks(main_doc_url, fetcher, limit=limit)

    logger.info(
        f"Discovery for '{keyword}': {len(doc_sites)} sites, "
        f"main={main_doc_url}, {len(sublinks)} sublinks"
    )
    return DocSearchResult(
        keyword=keyword,
        doc_sites=doc_sites,
        main_doc_url=main_doc_url,
        sublinks=sublinks,
    )
