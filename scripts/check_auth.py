"""
CLI utility to check the LogSure configuration of this machine.

Run it with the same environment the MCP host passes to the server. It
reports which credential variables are set (values truncated), performs one
authentication round trip against the backend, and prints the resolved role
and permissions.

Usage examples:

    # Use the current environment (and ./.env if present)
    python -m scripts.check_auth

    # Read credentials from another env file
    python -m scripts.check_auth --env-file ~/.config/logsure/.env

Exit status is 0 when authentication succeeds, 1 on a configuration error,
and 2 when the backend rejects the user.
"""

import argparse
import asyncio
import sys
from collections.abc import Callable

import httpx

from logsure_mcp.auth import Authenticator
from logsure_mcp.client import RemoteProcedureClient
from logsure_mcp.config import CREDENTIAL_ENV_VARS, Settings, load_settings, mask
from logsure_mcp.errors import AuthenticationError, ConfigurationError
from logsure_mcp.logging_config import configure_logging
from logsure_mcp.permissions import TOOL_PERMISSIONS


async def run_check(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    out: Callable[[str], None] = print,
) -> int:
    """Print a configuration and authentication report; return the exit status."""
    out("Environment:")
    for name, env_var in CREDENTIAL_ENV_VARS.items():
        value = getattr(settings, name)
        out(f"  {env_var:<22} {'SET (' + mask(value) + ')' if value.strip() else 'NOT SET'}")
    out(f"  Backend:               {settings.functions_base_url}")
    out("")

    try:
        credentials = settings.credentials()
    except ConfigurationError as e:
        out(f"Configuration error: {e}")
        return 1

    client = RemoteProcedureClient(settings.functions_base_url, transport=transport)
    try:
        context = await Authenticator(client).authenticate(credentials)
    except AuthenticationError as e:
        out(f"Authentication failed: {e}")
        return 2

    out("Authentication successful")
    out(f"  User ID:      {context.user_id}")
    out(f"  Organization: {context.org_id}")
    out(f"  Role:         {context.role}")
    if context.access_token_expires_at:
        out(f"  Token expiry: {context.access_token_expires_at.isoformat()}")
    out(f"  Permissions:  {', '.join(sorted(context.permissions)) or '(none)'}")
    out("")

    out("Tool access:")
    for tool, accepted in TOOL_PERMISSIONS.items():
        allowed = any(permission in context.permissions for permission in accepted)
        out(f"  {tool:<16} {'yes' if allowed else 'no (needs ' + ' or '.join(accepted) + ')'}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check LogSure MCP server configuration and authentication.",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Env file to read in addition to the environment (default: .env)",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        help="Diagnostic log level written to stderr (default: warning)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    sys.exit(asyncio.run(run_check(load_settings(args.env_file))))


if __name__ == "__main__":
    main()
