"""Pattern tables deciding whether a URL looks like documentation.

Host patterns are tested against the hostname, path patterns against the
URL path. Every matching pattern adds its weight to the score.
"""

import re
from urllib.parse import urlsplit

# (pattern, weight) tested against the lowercased hostname
_HOST_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"docs?\."), 10),
    (re.compile(r"developer\."), 8),
    (re.compile(r"api\."), 7),
    (re.compile(r"support\."), 4),
    (re.compile(r"help\."), 4),
    (re.compile(r"wiki\."), 3),
    (re.compile(r"\.github\.io$"), 3),
)

# (pattern, weight) tested against the lowercased path
_PATH_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"/docs/"), 7),
    (re.compile(r"/documentation/"), 7),
    (re.compile(r"/api/"), 6),
    (re.compile(r"/reference/"), 6),
    (re.compile(r"/guide/"), 5),
    (re.compile(r"/manual/"), 5),
)

EXCLUDED_SITES = (
    "youtube.com",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "linkedin.com",
    "google.com/search",
    "amazon.com",
)


def _host_and_path(url: str) -> tuple[str, str] | None:
    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname or ""
    except ValueError:
        return None
    return hostname.lower(), parsed.path.lower()


def _matching_weights(url: str) -> list[int]:
    parts = _host_and_path(url)
    if parts is None:
        return []
    hostname, path = parts
    weights = [w for pattern, w in _HOST_PATTERNS if pattern.search(hostname)]
    weights.extend(w for pattern, w in _PATH_PATTERNS if pattern.search(path))
    return weights


def score_pattern(url: str) -> int:
    """Sum of the weights of every doc pattern ``url`` matches."""
    return sum(_matching_weights(url))


def is_excluded(url: str) -> bool:
    lower = url.lower()
    return any(site in lower for site in EXCLUDED_SITES)


def is_plausible_doc(url: str, keyword: str) -> bool:
    """Whether ``url`` plausibly is documentation for ``keyword``.

    The keyword must appear in the URL, at least one doc pattern must
    match, and the URL must not belong to an excluded site.
    """
    if keyword.lower() not in url.lower():
        return False
    if not _matching_weights(url):
        return False
    return not is_excluded(url)
