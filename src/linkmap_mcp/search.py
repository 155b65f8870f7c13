"""Fuzzy search over link hierarchies.

A link matches a query when its hostname, path or full URL contains the
query, or when the approximate similarity between the query and the
hostname, the path or any single path segment exceeds a threshold.
Cheap substring checks run first; similarity is only computed when no
substring matched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from linkmap_mcp.config import settings
from linkmap_mcp.hierarchy import Hierarchy, build_hierarchy, split_url
from linkmap_mcp.similarity import similarity

SCOPE_ALL = "all"

# Short queries get a looser threshold to stay usable
_SHORT_QUERY_LEN = 3
_SHORT_QUERY_THRESHOLD = 0.2
_DEFAULT_THRESHOLD = 0.3


@dataclass
class LinkCollection:
    """A named set of links, optionally with a precomputed hierarchy."""

    id: str
    title: str
    links: list[str] = field(default_factory=list)
    hierarchy: Hierarchy | None = None

    def resolve_hierarchy(self) -> Hierarchy:
        if self.hierarchy is not None:
            return self.hierarchy
        return build_hierarchy(self.links)


@dataclass
class SearchResult:
    id: str
    title: str
    matched_links: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "matched_links": self.matched_links,
        }


def similarity_threshold(query: str) -> float:
    return _SHORT_QUERY_THRESHOLD if len(query) <= _SHORT_QUERY_LEN else _DEFAULT_THRESHOLD


def link_matches(link: str, query: str, threshold: float) -> bool:
    """Check a single link against an already lowercased, trimmed query."""
    parsed = split_url(link)
    if parsed is None:
        return False

    hostname = (parsed.hostname or "").lower()
    path = (parsed.path or "/").lower()

    if query in hostname or query in path or query in link.lower():
        return True

    if similarity(query, hostname) > threshold:
        return True

    if similarity(query, path) > threshold:
        return True

    for segment in path.split("/"):
        if not segment:
            continue
        if query in segment or similarity(query, segment) > threshold:
            return True

    return False


def search_hierarchy(
    hierarchy: Hierarchy,
    query: str,
    threshold: float,
    dedupe: bool = True,
) -> list[str]:
    """Match links of every node in ``hierarchy`` (pre-order walk).

    Ancestors hold their descendants' links, so without ``dedupe`` a link
    is reported once per node it passes through.
    """
    matched: list[str] = []
    seen: set[str] = set()

    for root in hierarchy.values():
        for node in root.walk():
            for link in node.links:
                if dedupe and link in seen:
                    continue
                if link_matches(link, query, threshold):
                    matched.append(link)
                    if dedupe:
                        seen.add(link)

    return matched


def search_collections(
    collections: Iterable[LinkCollection],
    query: str,
    scope: str = SCOPE_ALL,
    dedupe: bool = True,
) -> list[SearchResult]:
    """Search link collections, grouping matches by collection.

    Args:
        collections: Collections to search.
        query: Free-text query; trimmed and lowercased.
        scope: ``"all"`` or the id of a single collection.
        dedupe: Report each matched link once per collection.

    Returns:
        One result per collection with at least one match, in input order.
    """
    term = query.strip().lower()
    if not term:
        return []

    threshold = similarity_threshold(term)
    results: list[SearchResult] = []

    for collection in collections:
        if scope != SCOPE_ALL and collection.id != scope:
            continue

        matched = search_hierarchy(
            collection.resolve_hierarchy(), term, threshold, dedupe=dedupe
        )
        if matched:
            results.append(
                SearchResult(
                    id=collection.id,
                    title=collection.title,
                    matched_links=matched,
                )
            )

    logger.debug(
        f"Search '{term}' matched {sum(len(r.matched_links) for r in results)} "
        f"links in {len(results)} collections"
    )
    return results


class Debouncer:
    """Run a callback once input has been quiet for ``delay`` seconds.

    Each ``trigger`` cancels the pending call, so a burst of keystrokes
    results in a single search with the last arguments. The default
    delay is ``SEARCH_DEBOUNCE_MS``.
    """

    def __init__(self, delay: float | None = None):
        self.delay = settings.search_debounce if delay is None else delay
        self._task: asyncio.Task | None = None

    def trigger(self, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.create_task(self._run(callback, args, kwargs))
        return self._task

    async def _run(
        self, callback: Callable[..., Any], args: Sequence[Any], kwargs: dict[str, Any]
    ) -> Any:
        await asyncio.sleep(self.delay)
        result = callback(*args, **kwargs)
        if asyncio.iscoroutine(result):
            result = await result
        return result

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()
