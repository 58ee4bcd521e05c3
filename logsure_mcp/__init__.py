"""LogSure field service MCP server."""

__version__ = "1.0.9"
