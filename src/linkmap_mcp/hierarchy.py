"""URL hierarchy: turn a flat list of links into a host/path tree.

Each host becomes a root node; every non-empty path segment becomes a
child node below it. A node keeps every link whose path passes through
it, so a node's ``links`` always contain all links of its descendants.

Node metadata and child nodes live in separate namespaces
(``HierarchyNode`` fields vs. ``HierarchyNode.children``), so a path
segment can never collide with a metadata field name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import SplitResult, urlsplit

from loguru import logger

# Host node is level 0; levels below this are expanded by default
_EXPANDED_LEVELS = 3

# Code points that can never appear in a host (":" stays for IPv6 literals)
_FORBIDDEN_HOST_RE = re.compile(r"[\s#/<>?@\[\\\]^|%]")

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class HierarchyNode:
    """One host or path segment in a URL tree."""

    full_path: str
    is_expanded_default: bool
    original_url: str = ""
    links: list[str] = field(default_factory=list)
    children: dict[str, HierarchyNode] = field(default_factory=dict)

    def walk(self) -> Iterator[HierarchyNode]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def find(self, *labels: str) -> HierarchyNode | None:
        """Follow child labels down from this node."""
        node: HierarchyNode | None = self
        for label in labels:
            if node is None:
                return None
            node = node.children.get(label)
        return node

    def to_dict(self) -> dict[str, Any]:
        return {
            "full_path": self.full_path,
            "is_expanded_default": self.is_expanded_default,
            "original_url": self.original_url,
            "links": list(self.links),
            "children": {
                label: child.to_dict() for label, child in self.children.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HierarchyNode:
        """Load a node from either the explicit or the legacy tree shape."""
        if "_links" in data or "_fullPath" in data:
            return cls._from_legacy_dict(data)
        return cls(
            full_path=data.get("full_path", ""),
            is_expanded_default=bool(data.get("is_expanded_default", False)),
            original_url=data.get("original_url") or "",
            links=list(data.get("links", [])),
            children={
                label: cls.from_dict(child)
                for label, child in (data.get("children") or {}).items()
            },
        )

    @classmethod
    def _from_legacy_dict(cls, data: dict[str, Any]) -> HierarchyNode:
        # Legacy trees mix metadata and children in one mapping,
        # separated only by the underscore prefix.
        return cls(
            full_path=data.get("_fullPath", ""),
            is_expanded_default=bool(data.get("_isExpanded", False)),
            original_url=data.get("_originalUrl") or "",
            links=list(data.get("_links", [])),
            children={
                key: cls._from_legacy_dict(value)
                for key, value in data.items()
                if not key.startswith("_") and isinstance(value, dict)
            },
        )


Hierarchy = dict[str, HierarchyNode]


def split_url(link: str) -> SplitResult | None:
    """Parse an absolute URL, returning None when it is not usable.

    A usable URL has a scheme, a hostname made only of host characters
    and, if present, a numeric port in range.
    """
    try:
        parsed = urlsplit(link)
        hostname = parsed.hostname
        parsed.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    if _FORBIDDEN_HOST_RE.search(hostname):
        return None
    return parsed


def host_key(url: str) -> str | None:
    """``host[:port]`` of ``url`` with userinfo and a default port dropped."""
    parsed = split_url(url)
    if parsed is None:
        return None
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    if port is not None and port != _DEFAULT_PORTS.get(parsed.scheme.lower()):
        return f"{host}:{port}"
    return host


def to_origin(url: str) -> str | None:
    """Reduce ``url`` to ``scheme://host[:port]``; None if unparseable."""
    host = host_key(url)
    if host is None:
        return None
    return f"{urlsplit(url).scheme.lower()}://{host}"


def _original_url_for(link: str, parsed: SplitResult, full_path: str) -> str:
    """Prefix of ``link`` ending where ``full_path`` ends."""
    idx = link.find(full_path)
    if idx != -1:
        return link[: idx + len(full_path)]
    # Host spelled differently in the raw link (case, port, userinfo)
    _, _, path = full_path.partition("/")
    return f"{parsed.scheme}://{parsed.netloc}/{path}"


def build_hierarchy(links: Iterable[str]) -> Hierarchy:
    """Build a URL tree from ``links``.

    Links without a scheme or host are skipped. Query strings and
    fragments do not take part in path splitting, so URLs that differ only
    there end up on the same nodes.

    Returns:
        Mapping of hostname to host node, in first-seen order.
    """
    hierarchy: Hierarchy = {}

    for link in links:
        parsed = split_url(link)
        if parsed is None:
            logger.debug(f"Skipping unparseable URL: {link!r}")
            continue

        hostname = parsed.hostname or ""
        segments = [part for part in parsed.path.split("/") if part]

        node = hierarchy.get(hostname)
        if node is None:
            node = HierarchyNode(
                full_path=hostname,
                is_expanded_default=True,
                original_url=f"{parsed.scheme}://{hostname}",
            )
            hierarchy[hostname] = node
        node.links.append(link)

        current_path = hostname
        for level, segment in enumerate(segments, start=1):
            current_path = f"{current_path}/{segment}"
            child = node.children.get(segment)
            if child is None:
                child = HierarchyNode(
                    full_path=current_path,
                    is_expanded_default=level < _EXPANDED_LEVELS,
                    original_url=_original_url_for(link, parsed, current_path),
                )
                node.children[segment] = child
            child.links.append(link)
            node = child

    return hierarchy


def hierarchy_to_dict(hierarchy: Hierarchy) -> dict[str, Any]:
    """Serialize a hierarchy to plain dicts (JSON-compatible)."""
    return {host: node.to_dict() for host, node in hierarchy.items()}


def hierarchy_from_dict(data: dict[str, Any]) -> Hierarchy:
    """Load a hierarchy produced by ``hierarchy_to_dict`` or the legacy shape."""
    return {
        host: HierarchyNode.from_dict(node)
        for host, node in data.items()
        if not host.startswith("_") and isinstance(node, dict)
    }


def count_links(hierarchy: Hierarchy) -> int:
    """Number of links held by the host nodes (with multiplicity)."""
    return sum(len(node.links) for node in hierarchy.values())
