"""Configuration settings for Linkmap MCP Server."""

from pathlib import Path

from pydantic_settings import BaseSettings


def _default_data_dir() -> Path:
    """Get default data directory (~/.linkmap-mcp/)."""
    return Path.home() / ".linkmap-mcp"


_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Linkmap MCP Server configuration.

    Environment variables:
    - HTTP_TIMEOUT: Per-request timeout in seconds (default: 15)
    - USER_AGENT: User-Agent header sent with every fetch
    - SEARCH_URL_TEMPLATE: HTML search endpoint, ``{query}`` is replaced
        with the URL-encoded query (default: Google web search)
    - MAX_SUBLINKS: Max doc sublinks returned by discovery (default and
        upper bound: 20)
    - DOCSEARCH_CACHE_TTL: Doc search cache lifetime in seconds (default: 1 day)
    - SEARCH_DEBOUNCE_MS: Quiet period before an interactive search runs
    - DATA_DIR: Data directory (default: ~/.linkmap-mcp)
    - STORE_DB_PATH: Key-value store path (default: DATA_DIR/linkmap.db)
    - ALLOW_PRIVATE_URLS: Skip the SSRF guard for page extraction
    - TOOL_TIMEOUT: Hard timeout per tool call in seconds (0 = no timeout)
    """

    # Network
    http_timeout: float = 15.0
    user_agent: str = _DEFAULT_USER_AGENT
    search_url_template: str = "https://www.google.com/search?q={query}"
    allow_private_urls: bool = False

    # Discovery
    max_sublinks: int = 20
    docsearch_cache_ttl: int = 86400  # 24 hours

    # Interactive search
    search_debounce_ms: int = 300

    # Storage
    data_dir: str = ""
    store_db_path: str = ""

    # Tool execution timeout (seconds, 0 = no timeout)
    tool_timeout: int = 120

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def get_data_dir(self) -> Path:
        """Get data directory.

        Uses DATA_DIR if set, otherwise ~/.linkmap-mcp/.
        """
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return _default_data_dir()

    def get_store_path(self) -> Path:
        """Get resolved key-value store path."""
        if self.store_db_path:
            return Path(self.store_db_path).expanduser()
        return self.get_data_dir() / "linkmap.db"

    @property
    def search_debounce(self) -> float:
        """Debounce delay in seconds."""
        return max(self.search_debounce_ms, 0) / 1000


settings = Settings()
