"""Integration tests for Dropbox API connectivity.

These tests require a real access token and are skipped in CI/CD unless
the DBX_ACCESS_TOKEN environment variable is set.
"""

import os

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("DBX_ACCESS_TOKEN"),
    reason="Real Dropbox credentials not available",
)


@pytest.mark.asyncio
async def test_upload_download_round_trip() -> None:
    """Upload a small file to the app folder, list it, then download it back."""
    from dropbox_lite.auth.models import UserAuth
    from dropbox_lite.files.client import DropboxClient
    from dropbox_lite.files.models import (
        DownloadRequest,
        ListFolderRequest,
        Overwrite,
        UploadRequest,
    )

    auth = UserAuth.from_access_token(os.environ["DBX_ACCESS_TOKEN"])
    path = "/dropbox-lite-integration.txt"

    async with DropboxClient() as client:
        uploaded = await client.upload(
            auth, UploadRequest(path=path, content=b"integration", mode=Overwrite())
        )
        listing = await client.list_folder(auth, ListFolderRequest(path=""))
        downloaded = await client.download(auth, DownloadRequest(path=path))

    assert uploaded.size == len(b"integration")
    assert any(entry.name == uploaded.name for entry in listing.entries)
    assert downloaded.content == b"integration"
    assert downloaded.metadata.rev == uploaded.rev
