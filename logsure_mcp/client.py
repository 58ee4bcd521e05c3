"""
Remote procedure client for the LogSure Cloud Functions.

Every backend call goes through ``RemoteProcedureClient.invoke()``:

    POST <base_url>/<procedure>
    Content-Type: application/json

    {"data": <payload>}

Callable functions answer with ``{"result": ...}``; plain HTTP functions
answer with the object itself. ``invoke()`` returns the ``result`` field when
present and the whole body otherwise.

Calls are one-shot: a fresh ``httpx.AsyncClient`` per call, the httpx default
timeout, and no retries.
"""

import logging
from typing import Any

import httpx

from logsure_mcp.config import mask
from logsure_mcp.errors import RemoteCallError

logger = logging.getLogger("logsure-mcp.client")

# Response bodies are logged up to this many characters.
MAX_LOGGED_BODY = 500


class RemoteProcedureClient:
    """
    JSON-over-HTTPS client for named remote procedures.

    Args:
        base_url: Base URL of the functions host, without trailing slash
        transport: Optional httpx transport, used by tests to observe requests
    """

    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def url_for(self, procedure: str) -> str:
        return f"{self.base_url}/{procedure}"

    async def invoke(
        self,
        procedure: str,
        payload: dict[str, Any],
        *,
        bearer_token: str | None = None,
    ) -> Any:
        """
        Call a remote procedure and return its result.

        Args:
            procedure: Procedure name, appended to the base URL
            payload: Sent unmodified as the ``data`` field of the JSON body
            bearer_token: Access token for procedures that require one

        Returns:
            The ``result`` field of the response body if present, else the body

        Raises:
            RemoteCallError: On transport failure, a non-success HTTP status,
                             or a response body that is not JSON
        """
        headers = {"Content-Type": "application/json"}
        if bearer_token:
            headers["Authorization"] = f"Bearer {bearer_token}"

        logger.debug(
            "Invoking remote procedure",
            extra={
                "log_data": {
                    "procedure": procedure,
                    "authenticated": bool(bearer_token),
                    "token": mask(bearer_token) if bearer_token else None,
                }
            },
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.url_for(procedure),
                    json={"data": payload},
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error(
                "Remote procedure unreachable",
                extra={"log_data": {"procedure": procedure, "error": repr(e)}},
            )
            raise RemoteCallError(f"Remote procedure '{procedure}' could not be reached") from e

        if not response.is_success:
            body = response.text
            logger.error(
                "Remote procedure returned an error status",
                extra={
                    "log_data": {
                        "procedure": procedure,
                        "status_code": response.status_code,
                        "body": body[:MAX_LOGGED_BODY],
                    }
                },
            )
            raise RemoteCallError(
                f"Remote procedure '{procedure}' failed with status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                "Remote procedure returned a non-JSON body",
                extra={
                    "log_data": {
                        "procedure": procedure,
                        "status_code": response.status_code,
                        "body": response.text[:MAX_LOGGED_BODY],
                    }
                },
            )
            raise RemoteCallError(
                f"Remote procedure '{procedure}' returned an invalid response",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if isinstance(body, dict) and "result" in body:
            return body["result"]
        return body
