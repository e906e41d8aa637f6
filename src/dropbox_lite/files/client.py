"""Dropbox API v2 client for the ``files`` endpoints and token revocation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from dropbox_lite.files.codec import (
    ARG_HEADER,
    api_error_from_response,
    decode_download_error,
    decode_download_response,
    decode_file_metadata,
    decode_list_folder_continue_error,
    decode_list_folder_error,
    decode_list_folder_response,
    decode_token_revoke_error,
    decode_upload_error,
    encode_download_request,
    encode_list_folder_continue_request,
    encode_list_folder_request,
    encode_upload_request,
    to_header_json,
    to_json,
)
from dropbox_lite.files.models import (
    DownloadRequest,
    DownloadResponse,
    DropboxApiError,
    FileMetadata,
    ListFolderContinueRequest,
    ListFolderRequest,
    ListFolderResponse,
    TransportFailure,
    UploadRequest,
)

if TYPE_CHECKING:
    from dropbox_lite.auth.models import UserAuth
    from dropbox_lite.config import AppConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_BASE_URL = "https://api.dropboxapi.com/2"
CONTENT_BASE_URL = "https://content.dropboxapi.com/2"


class DropboxClient:
    """Async client for a handful of Dropbox API v2 endpoints.

    Every call takes the :class:`UserAuth` to act as, issues exactly one
    HTTP request and either returns the decoded result or raises
    :class:`DropboxApiError`. Nothing is retried.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        api_base_url: str = API_BASE_URL,
        content_base_url: str = CONTENT_BASE_URL,
        timeout: float | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            http_client: Pre-configured ``httpx.AsyncClient``. When omitted one
                is created and owned by this client (see :meth:`aclose`).
            api_base_url: Base URL for RPC endpoints.
            content_base_url: Base URL for content upload/download endpoints.
            timeout: Request timeout in seconds; None disables timeouts. Only
                applies to the client created here.

        Raises:
            ValueError: If both *http_client* and *timeout* are given; configure
                the timeout on the injected client instead.
        """
        if http_client is not None and timeout is not None:
            raise ValueError("timeout cannot be combined with http_client")
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._api_base_url = api_base_url.rstrip("/")
        self._content_base_url = content_base_url.rstrip("/")

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> DropboxClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def download(self, user_auth: UserAuth, request: DownloadRequest) -> DownloadResponse:
        """Download a file and its metadata.

        Args:
            user_auth: Credential of the user owning the file.
            request: Path of the file to download.

        Returns:
            File content and the metadata from the ``Dropbox-API-Result`` header.

        Raises:
            DropboxApiError: ``error`` is a ``DownloadError`` value.
        """
        response = await self._send(
            "download",
            f"{self._content_base_url}/files/download",
            {
                "Authorization": user_auth.authorization_header(),
                ARG_HEADER: to_header_json(encode_download_request(request)),
            },
            decode_download_error,
        )
        return self._decode_ok(
            "download",
            response,
            lambda r: decode_download_response(r.headers, r.content),
            include_body=False,
        )

    async def upload(self, user_auth: UserAuth, request: UploadRequest) -> FileMetadata:
        """Create or replace a file of up to 150 MiB.

        Raises:
            DropboxApiError: ``error`` is an ``UploadError`` value.
        """
        response = await self._send(
            "upload",
            f"{self._content_base_url}/files/upload",
            {
                "Authorization": user_auth.authorization_header(),
                "Content-Type": "application/octet-stream",
                ARG_HEADER: to_header_json(encode_upload_request(request)),
            },
            decode_upload_error,
            content=request.content,
        )
        return self._decode_ok("upload", response, lambda r: decode_file_metadata(r.json()))

    async def list_folder(
        self, user_auth: UserAuth, request: ListFolderRequest
    ) -> ListFolderResponse:
        """List the first page of a folder's contents.

        Raises:
            DropboxApiError: ``error`` is a ``ListFolderError`` value.
        """
        return await self._rpc(
            "list_folder",
            user_auth,
            "files/list_folder",
            to_json(encode_list_folder_request(request)),
            decode_list_folder_response,
            decode_list_folder_error,
        )

    async def list_folder_continue(
        self, user_auth: UserAuth, request: ListFolderContinueRequest
    ) -> ListFolderResponse:
        """Fetch the next page using the cursor from a previous listing.

        Raises:
            DropboxApiError: ``error`` is a ``ListFolderContinueError`` value;
                ``CursorReset`` means the listing must be restarted.
        """
        return await self._rpc(
            "list_folder_continue",
            user_auth,
            "files/list_folder/continue",
            to_json(encode_list_folder_continue_request(request)),
            decode_list_folder_response,
            decode_list_folder_continue_error,
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def token_revoke(self, user_auth: UserAuth) -> None:
        """Disable the access token behind *user_auth*.

        Raises:
            DropboxApiError: ``error`` is a ``TokenRevokeError`` value.
        """
        await self._send(
            "token_revoke",
            f"{self._api_base_url}/auth/token_revoke",
            {"Authorization": user_auth.authorization_header()},
            decode_token_revoke_error,
        )
        logger.info("[token_revoke] access token revoked")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _rpc(
        self,
        operation: str,
        user_auth: UserAuth,
        route: str,
        body: str,
        decode_ok: Callable[[Any], T],
        decode_error: Callable[[Any], Any],
    ) -> T:
        response = await self._send(
            operation,
            f"{self._api_base_url}/{route}",
            {
                "Authorization": user_auth.authorization_header(),
                "Content-Type": "application/json",
            },
            decode_error,
            content=body.encode("utf-8"),
        )
        return self._decode_ok(operation, response, lambda r: decode_ok(r.json()))

    async def _send(
        self,
        operation: str,
        url: str,
        headers: dict[str, str],
        decode_error: Callable[[Any], Any],
        content: bytes | None = None,
    ) -> httpx.Response:
        """POST to *url* and return the response if its status is 2xx.

        Raises:
            DropboxApiError: On network failure or a non-2xx status.
        """
        try:
            response = await self._http.post(url, headers=headers, content=content)
        except httpx.HTTPError as exc:
            logger.error("[%s] request failed before a response; reason:%s", operation, exc)
            raise DropboxApiError(None, TransportFailure(status_code=None, reason=str(exc))) from exc

        if response.is_success:
            return response

        error = api_error_from_response(response.status_code, response.text, decode_error)
        logger.error(
            "[%s] request failed; status:%d;error:%s",
            operation,
            response.status_code,
            error.error_summary or type(error.error).__name__,
        )
        raise error

    @staticmethod
    def _decode_ok(
        operation: str,
        response: httpx.Response,
        decode: Callable[[httpx.Response], T],
        include_body: bool = True,
    ) -> T:
        try:
            return decode(response)
        except ValueError as exc:
            logger.error("[%s] undecodable success response; reason:%s", operation, exc)
            failure = TransportFailure(
                status_code=response.status_code,
                reason=f"bad payload: {exc}",
                body=response.text if include_body else "",
            )
            raise DropboxApiError(response.status_code, failure) from exc


def dropbox_client_from_config(config: AppConfig) -> DropboxClient:
    """Construct a DropboxClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DropboxClient instance.
    """
    return DropboxClient(
        api_base_url=config.api_base_url,
        content_base_url=config.content_base_url,
        timeout=config.request_timeout,
    )
