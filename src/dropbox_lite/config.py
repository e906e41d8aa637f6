"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Endpoint URLs
    have sensible defaults but can be overridden via environment variables.
    """

    # Required - no defaults, fail at startup if missing
    client_id: str

    # Optional - a fixed redirect URI instead of the current page location
    redirect_uri: str | None = None

    # Endpoints - defaults provided, overridable via env
    authorize_url: str = "https://www.dropbox.com/oauth2/authorize"
    api_base_url: str = "https://api.dropboxapi.com/2"
    content_base_url: str = "https://content.dropboxapi.com/2"

    # None means requests never time out
    request_timeout: float | None = None


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        DBX_CLIENT_ID: Dropbox app key.

    Optional environment variables (with defaults):
        DBX_REDIRECT_URI: Fixed OAuth redirect URI (default: derived from the current location).
        DBX_AUTHORIZE_URL: OAuth authorization endpoint.
        DBX_API_BASE_URL: Base URL for RPC endpoints.
        DBX_CONTENT_BASE_URL: Base URL for content upload/download endpoints.
        DBX_REQUEST_TIMEOUT: Request timeout in seconds (default: no timeout).

    Returns:
        Configured AppConfig instance.
    """
    timeout = os.environ.get("DBX_REQUEST_TIMEOUT")
    return AppConfig(
        client_id=os.environ["DBX_CLIENT_ID"],
        redirect_uri=os.environ.get("DBX_REDIRECT_URI") or None,
        authorize_url=os.environ.get("DBX_AUTHORIZE_URL", "https://www.dropbox.com/oauth2/authorize"),
        api_base_url=os.environ.get("DBX_API_BASE_URL", "https://api.dropboxapi.com/2"),
        content_base_url=os.environ.get("DBX_CONTENT_BASE_URL", "https://content.dropboxapi.com/2"),
        request_timeout=float(timeout) if timeout else None,
    )
