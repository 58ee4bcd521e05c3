"""
Authentication against the LogSure backend.

Every tool invocation starts here. The Authenticator exchanges the configured
organization and user identifiers for:

- the resolved user id (``firebaseUid``)
- the user's role and the permissions granted to that role
- a short-lived access token used by write procedures (task completion)

The exchange is repeated on every call. Nothing is cached between calls, so
a role change on the backend takes effect on the very next tool invocation.

Expected result of the authentication procedure:

    {
        "success": true,
        "user": {
            "firebaseUid": "u-123",
            "orgId": "org-1",
            "role": 3,
            "permissions": ["view_assigned_tasks", "view_all_locations"]
        },
        "firebaseToken": "<jwt>"
    }

The durable token from the configuration is not part of the request payload;
only the identifiers are sent.
"""

import datetime
import logging

import jwt

from logsure_mcp.client import RemoteProcedureClient
from logsure_mcp.config import Credentials, mask
from logsure_mcp.errors import AuthenticationError, RemoteCallError
from logsure_mcp.models import UserContext

logger = logging.getLogger("logsure-mcp.auth")

AUTH_PROCEDURE = "directFirebaseAuthMCP"

# Role applied when the backend omits one: the least privileged role.
DEFAULT_ROLE = 5


def token_expiry(token: str) -> datetime.datetime | None:
    """
    Read the ``exp`` claim of a JWT access token without verifying it.

    The signature belongs to the backend's identity provider and is checked
    there; here the claim is only used for diagnostics. Returns None for
    tokens that are not JWTs or carry no expiry.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        return None
    try:
        return datetime.datetime.fromtimestamp(exp, tz=datetime.timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class Authenticator:
    """Resolves a UserContext from the configured credentials."""

    def __init__(self, client: RemoteProcedureClient):
        self.client = client

    async def authenticate(self, credentials: Credentials) -> UserContext:
        """
        Authenticate the configured user.

        Raises:
            AuthenticationError: If the remote call fails, the backend reports
                                 failure, or the result is malformed
        """
        logger.info(
            "Authenticating with backend",
            extra={
                "log_data": {
                    "user": mask(credentials.user_id),
                    "org": mask(credentials.org_id),
                }
            },
        )

        try:
            result = await self.client.invoke(
                AUTH_PROCEDURE,
                {"userId": credentials.user_id, "orgId": credentials.org_id},
            )
        except RemoteCallError as e:
            logger.warning(
                "Authentication failed",
                extra={"log_data": {"reason": "remote_error", "status_code": e.status_code}},
            )
            raise AuthenticationError(f"Authentication failed: {e.message}") from e

        context = self._parse_result(result, credentials)

        logger.info(
            "Authentication successful",
            extra={
                "log_data": {
                    "user": mask(context.user_id),
                    "role": context.role,
                    "permission_count": len(context.permissions),
                    "token": mask(context.access_token),
                    "token_expires_at": context.access_token_expires_at,
                }
            },
        )
        return context

    def _parse_result(self, result: object, credentials: Credentials) -> UserContext:
        if not isinstance(result, dict) or result.get("success") is not True:
            reason = result.get("message") if isinstance(result, dict) else None
            logger.warning(
                "Authentication rejected",
                extra={"log_data": {"reason": reason or "unsuccessful"}},
            )
            raise AuthenticationError(
                f"Authentication failed: {reason}" if reason else "Authentication failed"
            )

        user = result.get("user")
        if not isinstance(user, dict):
            raise AuthenticationError("Authentication failed: response has no user")

        user_id = user.get("firebaseUid")
        if not isinstance(user_id, str) or not user_id:
            raise AuthenticationError("Authentication failed: response has no user id")

        permissions = user.get("permissions", [])
        if not isinstance(permissions, list):
            raise AuthenticationError("Authentication failed: permissions must be a list")
        if not all(isinstance(p, str) for p in permissions):
            raise AuthenticationError("Authentication failed: all permissions must be strings")

        org_id = user.get("orgId")
        if org_id is not None and not isinstance(org_id, str):
            raise AuthenticationError("Authentication failed: orgId must be a string")
        if org_id and org_id != credentials.org_id:
            raise AuthenticationError(
                f"Organization mismatch: user belongs to {org_id}, "
                f"but the configuration uses {credentials.org_id}"
            )

        role = user.get("role")
        if role is None:
            role = DEFAULT_ROLE
        elif not isinstance(role, int) or isinstance(role, bool):
            raise AuthenticationError("Authentication failed: role must be an integer")

        access_token = result.get("firebaseToken")
        if not isinstance(access_token, str) or not access_token:
            raise AuthenticationError("Authentication failed: response has no access token")

        return UserContext(
            user_id=user_id,
            org_id=credentials.org_id,
            role=role,
            permissions=frozenset(permissions),
            access_token=access_token,
            access_token_expires_at=token_expiry(access_token),
        )
