"""
Structured JSON logging to stderr.

With the stdio transport, stdout carries the MCP protocol stream: anything
else written there corrupts it. All diagnostics therefore go to stderr,
one JSON object per line.

Structured fields are attached with the ``log_data`` extra:

    logger.info("Tool call completed", extra={"log_data": {"tool": "get_locations"}})
"""

import json
import logging
import sys

LOGGER_NAME = "logsure-mcp"


class JSONLogFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Example output:

        {"timestamp": "2026-10-18 09:12:01,532", "level": "INFO", "logger": "logsure-mcp.auth",
         "message": "Authentication successful", "user": "a1b2c3d4...", "role": 3}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "log_data"):
            log_entry.update(record.log_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level: str = "info") -> logging.Logger:
    """Install the JSON stderr handler on the package logger and return it."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONLogFormatter())

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = [handler]
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    return logger
