"""Unit tests for auth/models.py - UserAuth and AuthorizeRequest."""

import dataclasses

import pytest

from dropbox_lite.auth.models import AuthorizeRequest, AuthorizeUnknownAccessToken, UserAuth


class TestUserAuth:
    def test_authorization_header(self) -> None:
        assert UserAuth.from_access_token("abc").authorization_header() == "Bearer abc"

    def test_equality_by_token(self) -> None:
        assert UserAuth.from_access_token("abc") == UserAuth.from_access_token("abc")
        assert UserAuth.from_access_token("abc") != UserAuth.from_access_token("xyz")

    def test_repr_hides_token(self) -> None:
        assert "secret" not in repr(UserAuth.from_access_token("secret"))

    def test_is_immutable(self) -> None:
        auth = UserAuth.from_access_token("abc")
        with pytest.raises(dataclasses.FrozenInstanceError):
            auth._token = "other"  # type: ignore[misc]


class TestAuthorizeRequest:
    def test_defaults(self) -> None:
        request = AuthorizeRequest(client_id="abc")
        assert request.state is None
        assert request.require_role is None
        assert request.locale is None
        assert request.force_reapprove is False
        assert request.disable_signup is False
        assert request.force_reauthentication is False

    def test_unknown_access_token_repr_hides_token(self) -> None:
        result = AuthorizeUnknownAccessToken(
            access_token="secret", token_type="mac", account_id="a"
        )
        assert "secret" not in repr(result)
