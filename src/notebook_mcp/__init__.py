"""File-backed notebooks of named text pages, served over MCP."""

__version__ = "0.1.0"
