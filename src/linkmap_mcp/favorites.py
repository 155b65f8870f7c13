"""Saved link sets ("favorites") per user, with hierarchy and search."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from linkmap_mcp.hierarchy import (
    Hierarchy,
    build_hierarchy,
    hierarchy_from_dict,
    hierarchy_to_dict,
    split_url,
)
from linkmap_mcp.search import SCOPE_ALL, LinkCollection, SearchResult, search_collections
from linkmap_mcp.store import KVStore

NAMESPACE = "favorites"


@dataclass
class Favorite:
    id: str
    user_id: str
    root_url: str
    title: str
    links: list[str] = field(default_factory=list)
    hierarchy: Hierarchy | None = None
    extracted_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "root_url": self.root_url,
            "title": self.title,
            "links": list(self.links),
            "hierarchy": (
                hierarchy_to_dict(self.hierarchy) if self.hierarchy is not None else None
            ),
            "extracted_at": self.extracted_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Favorite:
        raw_hierarchy = data.get("hierarchy")
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            root_url=data.get("root_url", ""),
            title=data.get("title", ""),
            links=list(data.get("links") or []),
            hierarchy=hierarchy_from_dict(raw_hierarchy) if raw_hierarchy else None,
            extracted_at=float(data.get("extracted_at", 0.0)),
        )

    def as_collection(self) -> LinkCollection:
        return LinkCollection(
            id=self.id,
            title=self.title or self.root_url,
            links=self.links,
            hierarchy=self.hierarchy,
        )


def _hostname(url: str) -> str | None:
    parsed = split_url(url)
    return parsed.hostname if parsed else None


class FavoritesService:
    """CRUD and search for favorites stored under ``favorites/<user>/<id>``."""

    def __init__(self, store: KVStore):
        self.store = store

    def add(
        self,
        user_id: str | None,
        url: str | None = None,
        title: str | None = None,
        links: list[str] | None = None,
    ) -> Favorite:
        """Save a favorite from a link list or a single URL.

        A link list gets its hierarchy precomputed and stored alongside.

        Raises:
            ValueError: If the user id is missing, or neither url nor links
                is given, or the single URL is malformed.
        """
        if not user_id or (not url and links is None):
            raise ValueError("user_id and url (or links) are required")

        favorite_id = str(uuid.uuid4())

        if links is not None:
            root_url = (_hostname(links[0]) if links else None) or title or ""
            favorite = Favorite(
                id=favorite_id,
                user_id=user_id,
                root_url=root_url,
                title=title or root_url,
                links=list(links),
                hierarchy=build_hierarchy(links),
            )
        else:
            host = _hostname(url or "")
            if host is None:
                raise ValueError("Invalid URL format")
            favorite = Favorite(
                id=favorite_id,
                user_id=user_id,
                root_url=host,
                title=title or url or "",
                links=[url or ""],
            )

        self.store.put(NAMESPACE, [user_id, favorite_id], favorite.to_dict())
        logger.info(f"Saved favorite {favorite_id} ({len(favorite.links)} links)")
        return favorite

    def list(self, user_id: str | None) -> list[Favorite]:
        if not user_id:
            raise ValueError("user_id is required")
        return [Favorite.from_dict(d) for d in self.store.list(NAMESPACE, [user_id])]

    def get(self, user_id: str, favorite_id: str) -> Favorite | None:
        data = self.store.get(NAMESPACE, [user_id, favorite_id])
        return Favorite.from_dict(data) if data else None

    def delete(self, user_id: str | None, favorite_id: str | None) -> bool:
        if not user_id or not favorite_id:
            raise ValueError("user_id and favorite id are required")
        return self.store.delete(NAMESPACE, [user_id, favorite_id])

    def search(
        self,
        user_id: str | None,
        query: str,
        scope: str = SCOPE_ALL,
    ) -> list[SearchResult]:
        """Fuzzy-search a user's favorites; ``scope`` is ``"all"`` or an id."""
        favorites = self.list(user_id)
        return search_collections(
            (fav.as_collection() for fav in favorites), query, scope=scope
        )
