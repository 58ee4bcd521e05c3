"""
Shared test fixtures for the LogSure MCP server test suite.

Key fixtures:
- fake_functions: an in-memory stand-in for the LogSure Cloud Functions,
  exposed to the code under test as an httpx.MockTransport. It records every
  request so tests can assert exactly which procedures were called and with
  what body.
- make_access_token: a factory for JWT access tokens like the ones the
  authentication procedure returns
- grant: configures the authentication procedure to succeed with a given
  permission set
- operations: FieldServiceOperations wired to fake_functions, with "today"
  pinned to TODAY
"""

import datetime
import json

import httpx
import jwt
import pytest

from logsure_mcp.client import RemoteProcedureClient
from logsure_mcp.config import Credentials, Settings
from logsure_mcp.operations import FieldServiceOperations

TEST_BASE_URL = "https://functions.test"
TODAY = "2026-10-18"

ALL_PERMISSIONS = [
    "view_assigned_tasks",
    "view_all_tasks",
    "view_all_locations",
    "manage_locations",
    "complete_tasks",
]


class FakeFunctions:
    """Records requests and answers each procedure with a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: dict[str, tuple[int, object, str | None]] = {}

    def respond(self, procedure: str, body: object = None, status_code: int = 200, text: str | None = None):
        self._responses[procedure] = (status_code, body, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        procedure = request.url.path.lstrip("/")
        if procedure not in self._responses:
            return httpx.Response(404, text=f"no such function: {procedure}")

        status_code, body, text = self._responses[procedure]
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, procedure: str) -> list[dict]:
        """JSON bodies of every request made to ``procedure``."""
        return [
            json.loads(request.content)
            for request in self.requests
            if request.url.path == f"/{procedure}"
        ]

    def procedures(self) -> list[str]:
        return [request.url.path.lstrip("/") for request in self.requests]


@pytest.fixture
def make_access_token():
    """Factory for signed JWT access tokens (signature is never verified here)."""

    def _make_access_token(
        sub: str = "fb-uid-1",
        exp_hours: float = 1.0,
        include_exp: bool = True,
    ) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        payload: dict = {"sub": sub, "iat": now}
        if include_exp:
            payload["exp"] = now + datetime.timedelta(hours=exp_hours)
        return jwt.encode(payload, "identity-provider-secret", algorithm="HS256")

    return _make_access_token


@pytest.fixture
def auth_result(make_access_token):
    """Factory for the authentication procedure's response body."""

    def _auth_result(permissions: list[str] | None = None, role: int | None = 3, **overrides) -> dict:
        user = {
            "firebaseUid": "fb-uid-1",
            "orgId": "org-1",
            "permissions": ALL_PERMISSIONS if permissions is None else permissions,
        }
        if role is not None:
            user["role"] = role
        result = {"success": True, "user": user, "firebaseToken": make_access_token()}
        result.update(overrides)
        return {"result": result}

    return _auth_result


@pytest.fixture
def fake_functions() -> FakeFunctions:
    return FakeFunctions()


@pytest.fixture
def grant(fake_functions, auth_result):
    """Make authentication succeed with the given permissions."""

    def _grant(*permissions: str):
        fake_functions.respond("directFirebaseAuthMCP", auth_result(list(permissions)))

    return _grant


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(clerk_token="clerk_test_token_0123456789", org_id="org-1", user_id="user-1")


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.setenv("LOGSURE_CLERK_TOKEN", "clerk_test_token_0123456789")
    monkeypatch.setenv("LOGSURE_ORG_ID", "org-1")
    monkeypatch.setenv("LOGSURE_USER_ID", "user-1")
    monkeypatch.setenv("LOGSURE_FUNCTIONS_BASE_URL", TEST_BASE_URL)
    return Settings(_env_file=None)


@pytest.fixture
def client(fake_functions) -> RemoteProcedureClient:
    return RemoteProcedureClient(TEST_BASE_URL, transport=fake_functions.transport)


@pytest.fixture
def operations(credentials, client) -> FieldServiceOperations:
    return FieldServiceOperations(credentials, client, today=lambda: TODAY)
