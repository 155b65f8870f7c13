"""Network collaborator used by link extraction and doc discovery.

Scoring and extraction code only depend on the ``PageFetcher`` protocol,
so tests can pass a fake that never touches the network.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

import httpx
from loguru import logger

from linkmap_mcp.config import settings


@dataclass
class FetchResponse:
    """Minimal view of an HTTP response."""

    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.lower()
        return ""

    @property
    def is_html(self) -> bool:
        ctype = self.content_type
        return "text/html" in ctype or "application/xhtml+xml" in ctype


class PageFetcher(Protocol):
    """Protocol for fetch backends."""

    async def fetch(self, url: str, method: str = "GET") -> FetchResponse:
        """Fetch ``url``.

        Args:
            url: Absolute URL.
            method: ``GET`` or ``HEAD``.

        Returns:
            The response, whatever its status code.

        Raises:
            httpx.HTTPError: On connection, timeout or protocol errors.
        """
        ...


class HttpxFetcher:
    """Fetch pages with httpx, following redirects."""

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
    ):
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.user_agent = user_agent or settings.user_agent

    async def fetch(self, url: str, method: str = "GET") -> FetchResponse:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        ) as client:
            resp = await client.request(method, url)
            logger.debug(f"{method} {url} -> {resp.status_code}")
            return FetchResponse(
                url=str(resp.url),
                status=resp.status_code,
                headers=dict(resp.headers),
                text=resp.text if method != "HEAD" else "",
            )
