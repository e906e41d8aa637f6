"""OAuth 2.0 implicit-grant helpers: build the authorize URL and parse the redirect."""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote_plus, urlsplit

from dropbox_lite.auth.models import (
    BEARER_TOKEN_TYPE,
    PARAM_ACCESS_TOKEN,
    PARAM_ACCOUNT_ID,
    PARAM_ERROR,
    PARAM_ERROR_DESCRIPTION,
    PARAM_STATE,
    PARAM_TOKEN_TYPE,
    AuthorizeErr,
    AuthorizeOk,
    AuthorizeRequest,
    AuthorizeResult,
    AuthorizeUnknownAccessToken,
    UserAuth,
)

if TYPE_CHECKING:
    from dropbox_lite.config import AppConfig

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://www.dropbox.com/oauth2/authorize"


def _encode(value: str) -> str:
    return quote(value, safe=":/")


def _flag(value: bool) -> str:
    return "true" if value else "false"


def authorization_url(
    request: AuthorizeRequest,
    redirect_uri: str,
    base_url: str = AUTHORIZE_URL,
) -> str:
    """Build the implicit-grant authorization URL for *request*.

    Parameters always appear in the same order; unset optional parameters
    are left out. ``state``, ``require_role``, ``locale`` and the redirect
    URI are percent-encoded, keeping ``:`` and ``/`` literal.

    Args:
        request: Authorization parameters.
        redirect_uri: Where Dropbox sends the user afterwards.
        base_url: Authorization endpoint.

    Returns:
        The full URL to send the user to.
    """
    params: list[tuple[str, str]] = [
        ("response_type", "token"),
        ("client_id", _encode(request.client_id)),
        ("redirect_uri", _encode(redirect_uri)),
    ]
    if request.state is not None:
        params.append(("state", _encode(request.state)))
    if request.require_role is not None:
        params.append(("require_role", _encode(request.require_role)))
    params.append(("force_reapprove", _flag(request.force_reapprove)))
    params.append(("disable_signup", _flag(request.disable_signup)))
    if request.locale is not None:
        params.append(("locale", _encode(request.locale)))
    params.append(("force_reauthentication", _flag(request.force_reauthentication)))
    query = "&".join(f"{key}={value}" for key, value in params)
    return f"{base_url}?{query}"


def redirect_uri_from_location(location: str) -> str:
    """Strip query, fragment and credentials from *location*.

    ``https://example.com:8080/app?x=1#y`` becomes ``https://example.com:8080/app``.
    """
    parts = urlsplit(location)
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}{parts.path}"


def authorize(
    request: AuthorizeRequest,
    location: str,
    navigate: Callable[[str], object] = webbrowser.open,
    base_url: str = AUTHORIZE_URL,
) -> None:
    """Send the user to Dropbox to authorize *request*.

    The redirect URI is the current *location* without query or fragment,
    so the provider returns the user to the page that started the flow.

    Args:
        request: Authorization parameters.
        location: URL of the page starting the flow.
        navigate: Opens a URL; defaults to the system web browser.
        base_url: Authorization endpoint.
    """
    url = authorization_url(request, redirect_uri_from_location(location), base_url)
    logger.info("[authorize] navigating to authorization page; client_id:%s", request.client_id)
    navigate(url)


def parse_fragment(fragment: str) -> dict[str, str]:
    """Split ``a=1&b=2`` into a dict.

    Pairs without ``=`` are dropped; a repeated key keeps its last value.
    Keys and values are form-decoded, so ``+`` becomes a space.
    """
    params: dict[str, str] = {}
    for pair in fragment.split("&"):
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        params[unquote_plus(key)] = unquote_plus(value)
    return params


def parse_authorize_result(location: str) -> AuthorizeResult | None:
    """Interpret the redirect back from the authorization page.

    Returns:
        :class:`AuthorizeOk` for a bearer token,
        :class:`AuthorizeUnknownAccessToken` for any other token type,
        :class:`AuthorizeErr` when the provider reports an error, or None
        when *location* carries no authorization result at all.
    """
    _, hash_sign, fragment = location.partition("#")
    if not hash_sign:
        return None

    params = parse_fragment(fragment)
    state = params.get(PARAM_STATE)

    access_token = params.get(PARAM_ACCESS_TOKEN)
    token_type = params.get(PARAM_TOKEN_TYPE)
    account_id = params.get(PARAM_ACCOUNT_ID)
    if access_token is not None and token_type is not None and account_id is not None:
        if token_type == BEARER_TOKEN_TYPE:
            return AuthorizeOk(
                user_auth=UserAuth.from_access_token(access_token),
                account_id=account_id,
                state=state,
            )
        logger.warning(
            "[parse_authorize_result] unrecognised token type; token_type:%s", token_type
        )
        return AuthorizeUnknownAccessToken(
            access_token=access_token,
            token_type=token_type,
            account_id=account_id,
            state=state,
        )

    error = params.get(PARAM_ERROR)
    error_description = params.get(PARAM_ERROR_DESCRIPTION)
    if error is not None and error_description is not None:
        logger.info("[parse_authorize_result] authorization denied; error:%s", error)
        return AuthorizeErr(error=error, error_description=error_description, state=state)

    return None


def authorize_request_from_config(config: AppConfig, state: str | None = None) -> AuthorizeRequest:
    """Construct an AuthorizeRequest from application configuration.

    Args:
        config: Application configuration instance.
        state: Per-attempt CSRF value to round-trip through the redirect.

    Returns:
        AuthorizeRequest with every override left at its default.
    """
    return AuthorizeRequest(client_id=config.client_id, state=state)


def authorization_url_from_config(
    config: AppConfig, request: AuthorizeRequest, location: str
) -> str:
    """Build the authorization URL using the configured endpoint and redirect URI.

    Falls back to deriving the redirect URI from *location* when the
    configuration does not fix one.
    """
    redirect_uri = config.redirect_uri or redirect_uri_from_location(location)
    return authorization_url(request, redirect_uri, base_url=config.authorize_url)
