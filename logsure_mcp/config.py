"""
Application configuration loaded from environment variables.

Uses pydantic-settings to define typed configuration that reads from
environment variables (or a local .env file). The MCP host launches this
process with the user's LogSure identifiers injected as environment
variables:

- LOGSURE_CLERK_TOKEN: the durable identity token
- LOGSURE_ORG_ID: the organization the user belongs to
- LOGSURE_USER_ID: the user's LogSure document id

Settings are built once at process start by ``load_settings()`` and passed
explicitly into the server factory. Nothing in the package reads the
environment mid-call.
"""

from dataclasses import dataclass, field

from pydantic_settings import BaseSettings

from logsure_mcp.errors import ConfigurationError

DEFAULT_FUNCTIONS_BASE_URL = "https://europe-west2-log-check-25ce4.cloudfunctions.net"

# Field name -> environment variable, in the order they are reported.
CREDENTIAL_ENV_VARS = {
    "clerk_token": "LOGSURE_CLERK_TOKEN",
    "org_id": "LOGSURE_ORG_ID",
    "user_id": "LOGSURE_USER_ID",
}


@dataclass(frozen=True)
class Credentials:
    """
    The configured identity of the single user this process serves.

    Immutable for the lifetime of the process. The durable token is excluded
    from ``repr()`` so it cannot leak through log lines or tracebacks.
    """

    clerk_token: str = field(repr=False)
    org_id: str
    user_id: str


class Settings(BaseSettings):
    """
    Server configuration with environment variable bindings.

    Each field maps to an environment variable with the LOGSURE_ prefix.
    For example, `org_id` reads from LOGSURE_ORG_ID and `log_level` from
    LOGSURE_LOG_LEVEL.
    """

    # --- Credentials ---
    # Empty by default so that a missing value is reported by credentials()
    # as a ConfigurationError instead of failing while settings load.
    clerk_token: str = ""
    org_id: str = ""
    user_id: str = ""

    # --- Backend ---

    # Base URL of the Cloud Functions that implement the remote procedures.
    # Each procedure is reached at <functions_base_url>/<procedureName>.
    functions_base_url: str = DEFAULT_FUNCTIONS_BASE_URL

    # --- Server settings ---

    log_level: str = "info"

    # "stdio" when launched by a desktop host, "streamable-http" when hosted.
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080

    model_config = {
        "env_prefix": "LOGSURE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        # The same .env may carry variables for other tools.
        "extra": "ignore",
    }

    def credentials(self) -> Credentials:
        """
        Return the configured credentials.

        Raises:
            ConfigurationError: If any credential is missing or blank. The
                                message names every missing variable.
        """
        missing = [
            env_var
            for name, env_var in CREDENTIAL_ENV_VARS.items()
            if not getattr(self, name).strip()
        ]
        if missing:
            raise ConfigurationError(
                "Missing required authentication configuration: " + ", ".join(missing)
            )

        return Credentials(
            clerk_token=self.clerk_token,
            org_id=self.org_id,
            user_id=self.user_id,
        )


def load_settings(env_file: str | None = ".env") -> Settings:
    """Read settings from the environment and, if present, ``env_file``."""
    return Settings(_env_file=env_file)


def mask(value: str | None, keep: int = 8) -> str:
    """Truncate an identifier or token for diagnostics: ``abcdefgh...``."""
    if not value:
        return "<unset>"
    if len(value) <= keep:
        return value[:2] + "..."
    return value[:keep] + "..."
