"""Linkmap MCP Server entry point."""

import asyncio
import json
import sys


def _discover(keyword: str) -> None:
    """Run doc-site discovery once and print the result as JSON.

        linkmap-mcp discover fastapi
    """
    from linkmap_mcp.docsearch import search_docs

    result = asyncio.run(search_docs(keyword))
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))


def _extract(url: str) -> None:
    """Extract the links of one page and print them, one per line."""
    from linkmap_mcp.sources.fetcher import HttpxFetcher
    from linkmap_mcp.sources.links import extract_page_links

    result = asyncio.run(extract_page_links(url, HttpxFetcher()))
    for link in result["links"]:
        print(link)


def _cli() -> None:
    """CLI dispatcher: server (default), discover or extract subcommand."""
    if len(sys.argv) >= 3 and sys.argv[1] == "discover":
        _discover(" ".join(sys.argv[2:]))
    elif len(sys.argv) >= 3 and sys.argv[1] == "extract":
        _extract(sys.argv[2])
    else:
        from linkmap_mcp.server import main

        main()


if __name__ == "__main__":
    _cli()
