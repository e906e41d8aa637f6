"""Smoke tests - validate the package imports and wires together end-to-end."""

import importlib

import httpx
import pytest

import dropbox_lite
from dropbox_lite.auth.flow import authorization_url, parse_authorize_result
from dropbox_lite.auth.models import AuthorizeOk, AuthorizeRequest
from dropbox_lite.files.client import DropboxClient
from dropbox_lite.files.models import ListFolderRequest


def test_version() -> None:
    assert dropbox_lite.__version__ == "0.1.0"


@pytest.mark.parametrize(
    "module",
    ["dropbox_lite.auth.flow", "dropbox_lite.decoding.union", "dropbox_lite.files.client"],
)
def test_subpackage_modules_import(module: str) -> None:
    assert importlib.import_module(module).__name__ == module


@pytest.mark.asyncio
async def test_authorize_then_list_folder() -> None:
    """A parsed redirect yields a credential that the client sends as a bearer token."""
    url = authorization_url(AuthorizeRequest(client_id="abc", state="s"), "https://x/y")
    assert "state=s" in url

    result = parse_authorize_result(
        "https://x/y#access_token=tok&token_type=bearer&account_id=dbid:1&state=s"
    )
    assert isinstance(result, AuthorizeOk)

    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"entries": [], "cursor": "c", "has_more": False})

    async with DropboxClient(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    ) as client:
        listing = await client.list_folder(result.user_auth, ListFolderRequest(path=""))

    assert listing.has_more is False
    assert seen[0].headers["Authorization"] == "Bearer tok"
