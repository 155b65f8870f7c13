"""Linkmap MCP Server - link hierarchies, favorites and doc-site discovery."""

from importlib.metadata import version

from linkmap_mcp.__main__ import _cli as main
from linkmap_mcp.server import mcp

__version__ = version("linkmap-mcp")
__all__ = ["mcp", "main", "__version__"]
