"""Data models for the OAuth 2.0 implicit-grant flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

# Redirect fragment keys (RFC 6749 section 4.2.2)
PARAM_ACCESS_TOKEN = "access_token"
PARAM_TOKEN_TYPE = "token_type"
PARAM_ACCOUNT_ID = "account_id"
PARAM_STATE = "state"
PARAM_ERROR = "error"
PARAM_ERROR_DESCRIPTION = "error_description"

# The only token type this client knows how to send.
BEARER_TOKEN_TYPE = "bearer"


@dataclass(frozen=True)
class UserAuth:
    """A bearer credential for one Dropbox user.

    Obtain one from :func:`~dropbox_lite.auth.flow.parse_authorize_result`
    or, for a token acquired elsewhere, :meth:`from_access_token`.
    """

    _token: str = field(repr=False)

    @classmethod
    def from_access_token(cls, access_token: str) -> UserAuth:
        """Trust *access_token* as a bearer token without validating it."""
        return cls(access_token)

    def authorization_header(self) -> str:
        return f"Bearer {self._token}"


@dataclass(frozen=True)
class AuthorizeRequest:
    """Parameters of a ``/oauth2/authorize`` request.

    Attributes:
        client_id: The app key from the Dropbox App Console.
        state: Opaque value echoed back in the redirect, for CSRF protection.
        require_role: ``"work"`` or ``"personal"`` to restrict the account type.
        force_reapprove: Ask the user to approve the app even if already approved.
        disable_signup: Hide the sign-up link on the authorization page.
        locale: Language for the authorization page, e.g. ``"fr"``.
        force_reauthentication: Make the user sign in again.
    """

    client_id: str
    state: str | None = None
    require_role: str | None = None
    force_reapprove: bool = False
    disable_signup: bool = False
    locale: str | None = None
    force_reauthentication: bool = False


@dataclass(frozen=True)
class AuthorizeOk:
    user_auth: UserAuth
    account_id: str
    state: str | None = None


@dataclass(frozen=True)
class AuthorizeUnknownAccessToken:
    """The grant succeeded but ``token_type`` is not one this client can use."""

    access_token: str = field(repr=False)
    token_type: str
    account_id: str
    state: str | None = None


@dataclass(frozen=True)
class AuthorizeErr:
    """The provider denied the request (e.g. ``error="access_denied"``)."""

    error: str
    error_description: str
    state: str | None = None


AuthorizeResult = Union[AuthorizeOk, AuthorizeUnknownAccessToken, AuthorizeErr]
