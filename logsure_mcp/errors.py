"""
Error taxonomy for the LogSure MCP server.

Every error raised by a tool operation propagates unmodified to the
dispatcher and from there to FastMCP, which reports the message text through
the MCP error result for that call. Messages are written for the end user:
raw response bodies and status details belong in the diagnostic log, not in
``str(error)``.
"""


class LogSureError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(LogSureError):
    """Required environment configuration is missing or empty."""


class AuthenticationError(LogSureError):
    """The remote authentication procedure failed or rejected the user."""


class AuthorizationError(LogSureError):
    """The user is authenticated but lacks the required permission."""


class RemoteCallError(LogSureError):
    """
    A remote procedure call failed.

    Attributes:
        status_code: HTTP status returned by the backend, or None when the
                     request never produced a response or the failure was
                     reported inside a successful response
        body: Raw response body text (diagnostics only)
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class UnknownToolError(LogSureError):
    """Dispatch was requested for a tool name that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ValidationError(LogSureError):
    """A tool argument is missing or has an unacceptable value."""
