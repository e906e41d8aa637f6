"""Unit tests for auth/flow.py - authorization URL building and redirect parsing."""

from unittest.mock import MagicMock

import pytest

from dropbox_lite.auth.flow import (
    authorization_url,
    authorization_url_from_config,
    authorize,
    authorize_request_from_config,
    parse_authorize_result,
    parse_fragment,
    redirect_uri_from_location,
)
from dropbox_lite.auth.models import (
    AuthorizeErr,
    AuthorizeOk,
    AuthorizeRequest,
    AuthorizeUnknownAccessToken,
    UserAuth,
)
from dropbox_lite.config import AppConfig

# ---------------------------------------------------------------------------
# authorization_url() tests
# ---------------------------------------------------------------------------


class TestAuthorizationUrl:
    def test_defaults_produce_exact_url(self) -> None:
        url = authorization_url(AuthorizeRequest(client_id="abc"), "https://x/y")
        assert url == (
            "https://www.dropbox.com/oauth2/authorize?response_type=token&client_id=abc"
            "&redirect_uri=https://x/y&force_reapprove=false&disable_signup=false"
            "&force_reauthentication=false"
        )

    def test_all_fields_in_fixed_order(self) -> None:
        request = AuthorizeRequest(
            client_id="abc",
            state="s1",
            require_role="work",
            force_reapprove=True,
            disable_signup=True,
            locale="fr",
            force_reauthentication=True,
        )
        url = authorization_url(request, "https://x/y")
        query = url.split("?", 1)[1]
        assert [pair.split("=", 1)[0] for pair in query.split("&")] == [
            "response_type",
            "client_id",
            "redirect_uri",
            "state",
            "require_role",
            "force_reapprove",
            "disable_signup",
            "locale",
            "force_reauthentication",
        ]
        assert "force_reapprove=true" in query
        assert "locale=fr" in query

    def test_state_and_redirect_are_percent_encoded(self) -> None:
        request = AuthorizeRequest(client_id="abc", state="a&b=c d")
        url = authorization_url(request, "http://localhost:8000/cb?x=1")
        assert "state=a%26b%3Dc%20d" in url
        assert "redirect_uri=http://localhost:8000/cb%3Fx%3D1" in url

    def test_custom_base_url(self) -> None:
        url = authorization_url(AuthorizeRequest(client_id="abc"), "https://x/y", "https://e/auth")
        assert url.startswith("https://e/auth?response_type=token&")


# ---------------------------------------------------------------------------
# redirect_uri_from_location() / authorize() tests
# ---------------------------------------------------------------------------


class TestRedirect:
    def test_strips_query_and_fragment(self) -> None:
        assert (
            redirect_uri_from_location("https://example.com:8080/app/index.html?x=1#token")
            == "https://example.com:8080/app/index.html"
        )

    def test_strips_credentials(self) -> None:
        assert redirect_uri_from_location("https://u:p@example.com/a") == "https://example.com/a"

    def test_authorize_navigates_to_built_url(self) -> None:
        navigate = MagicMock()
        request = AuthorizeRequest(client_id="abc")

        result = authorize(request, "https://x/y?z=1#frag", navigate=navigate)

        assert result is None
        navigate.assert_called_once_with(authorization_url(request, "https://x/y"))


# ---------------------------------------------------------------------------
# parse_fragment() tests
# ---------------------------------------------------------------------------


class TestParseFragment:
    def test_splits_on_first_equals(self) -> None:
        assert parse_fragment("a=1&b=x=y") == {"a": "1", "b": "x=y"}

    def test_drops_pairs_without_equals(self) -> None:
        assert parse_fragment("a=1&junk&b=2") == {"a": "1", "b": "2"}

    def test_last_duplicate_wins(self) -> None:
        assert parse_fragment("a=1&a=2") == {"a": "2"}

    def test_values_are_percent_decoded(self) -> None:
        assert parse_fragment("state=a%26b") == {"state": "a&b"}

    def test_plus_decodes_to_space_in_keys_and_values(self) -> None:
        assert parse_fragment("error_description=The+user+declined&my+key=a%2Bb") == {
            "error_description": "The user declined",
            "my key": "a+b",
        }


# ---------------------------------------------------------------------------
# parse_authorize_result() tests
# ---------------------------------------------------------------------------


class TestParseAuthorizeResult:
    def test_no_fragment_is_no_result(self) -> None:
        assert parse_authorize_result("https://x/y") is None

    def test_empty_fragment_is_no_result(self) -> None:
        assert parse_authorize_result("https://x/y#") is None

    def test_bearer_token_is_ok(self) -> None:
        result = parse_authorize_result(
            "https://x/y#access_token=tok&token_type=bearer&uid=12&account_id=dbid:1&state=s"
        )
        assert result == AuthorizeOk(
            user_auth=UserAuth.from_access_token("tok"), account_id="dbid:1", state="s"
        )

    def test_state_is_optional(self) -> None:
        result = parse_authorize_result("#access_token=tok&token_type=bearer&account_id=a")
        assert isinstance(result, AuthorizeOk)
        assert result.state is None

    @pytest.mark.parametrize("token_type", ["Bearer", "mac", ""])
    def test_other_token_type_is_unknown_access_token(self, token_type: str) -> None:
        result = parse_authorize_result(
            f"#access_token=tok&token_type={token_type}&account_id=a&state=s"
        )
        assert result == AuthorizeUnknownAccessToken(
            access_token="tok", token_type=token_type, account_id="a", state="s"
        )

    def test_error_without_token_is_err(self) -> None:
        result = parse_authorize_result(
            "#error=access_denied&error_description=The%20user%20declined&state=s"
        )
        assert result == AuthorizeErr(
            error="access_denied", error_description="The user declined", state="s"
        )

    def test_form_encoded_description_is_decoded(self) -> None:
        result = parse_authorize_result(
            "#error=access_denied&error_description=The+user+declined&state=s"
        )
        assert result == AuthorizeErr(
            error="access_denied", error_description="The user declined", state="s"
        )

    def test_error_requires_description(self) -> None:
        assert parse_authorize_result("#error=access_denied") is None

    def test_success_takes_precedence_over_error(self) -> None:
        result = parse_authorize_result(
            "#error=e&error_description=d&access_token=tok&token_type=bearer&account_id=a"
        )
        assert isinstance(result, AuthorizeOk)

    def test_missing_account_id_falls_through(self) -> None:
        assert parse_authorize_result("#access_token=tok&token_type=bearer") is None

    def test_reserialized_result_round_trips(self) -> None:
        fields = {"state": "s", "account_id": "a", "token_type": "bearer", "access_token": "tok"}
        fragment = "&".join(f"{k}={v}" for k, v in fields.items())
        assert parse_authorize_result(f"#{fragment}") == AuthorizeOk(
            user_auth=UserAuth.from_access_token("tok"), account_id="a", state="s"
        )


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------


class TestFromConfig:
    def test_authorize_request_from_config(self) -> None:
        request = authorize_request_from_config(AppConfig(client_id="abc"), state="s")
        assert request == AuthorizeRequest(client_id="abc", state="s")

    def test_url_uses_configured_redirect(self) -> None:
        config = AppConfig(client_id="abc", redirect_uri="https://app/cb", authorize_url="https://e/a")
        url = authorization_url_from_config(config, AuthorizeRequest(client_id="abc"), "https://x/y")
        assert url.startswith("https://e/a?")
        assert "redirect_uri=https://app/cb&" in url

    def test_url_falls_back_to_location(self) -> None:
        url = authorization_url_from_config(
            AppConfig(client_id="abc"), AuthorizeRequest(client_id="abc"), "https://x/y?q=1"
        )
        assert "redirect_uri=https://x/y&" in url
