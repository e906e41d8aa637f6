"""Data models for Dropbox file metadata, requests, responses and errors.

Unions are plain aliases over frozen dataclass variants so callers can
``match`` on them. Every error union is open: tags this client does not
know decode to :class:`~dropbox_lite.decoding.union.UnknownTag`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from dropbox_lite.decoding.union import UnknownTag

# Dropbox API JSON field names
FIELD_NAME = "name"
FIELD_ID = "id"
FIELD_PATH = "path"
FIELD_PATH_LOWER = "path_lower"
FIELD_PATH_DISPLAY = "path_display"
FIELD_PARENT_SHARED_FOLDER_ID = "parent_shared_folder_id"
FIELD_SHARED_FOLDER_ID = "shared_folder_id"
FIELD_CLIENT_MODIFIED = "client_modified"
FIELD_SERVER_MODIFIED = "server_modified"
FIELD_REV = "rev"
FIELD_SIZE = "size"
FIELD_CONTENT_HASH = "content_hash"
FIELD_MEDIA_INFO = "media_info"
FIELD_SHARING_INFO = "sharing_info"
FIELD_PROPERTY_GROUPS = "property_groups"
FIELD_HAS_EXPLICIT_SHARED_MEMBERS = "has_explicit_shared_members"
FIELD_ENTRIES = "entries"
FIELD_CURSOR = "cursor"
FIELD_HAS_MORE = "has_more"
FIELD_ERROR = "error"
FIELD_ERROR_SUMMARY = "error_summary"
FIELD_USER_MESSAGE = "user_message"


# ------------------------------------------------------------------
# Media info
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Dimensions:
    height: int
    width: int


@dataclass(frozen=True)
class GpsCoordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class PhotoMetadata:
    dimensions: Dimensions | None = None
    location: GpsCoordinates | None = None
    time_taken: datetime | None = None


@dataclass(frozen=True)
class VideoMetadata:
    """Video media metadata.

    ``duration`` is in milliseconds.
    """

    dimensions: Dimensions | None = None
    location: GpsCoordinates | None = None
    time_taken: datetime | None = None
    duration: int | None = None


MediaMetadata = Union[PhotoMetadata, VideoMetadata]


@dataclass(frozen=True)
class MediaInfoPending:
    """Media metadata is still being extracted server-side."""


@dataclass(frozen=True)
class MediaInfoMetadata:
    metadata: MediaMetadata


MediaInfo = Union[MediaInfoPending, MediaInfoMetadata]


# ------------------------------------------------------------------
# Sharing and properties
# ------------------------------------------------------------------


@dataclass(frozen=True)
class FileSharingInfo:
    read_only: bool
    parent_shared_folder_id: str
    modified_by: str | None = None


@dataclass(frozen=True)
class FolderSharingInfo:
    read_only: bool
    parent_shared_folder_id: str | None = None
    shared_folder_id: str | None = None
    traverse_only: bool = False
    no_access: bool = False


@dataclass(frozen=True)
class PropertyGroup:
    """Custom properties attached to a file or folder.

    Attributes:
        template_id: Identifier of the property template.
        fields: Property values keyed by field name.
    """

    template_id: str
    fields: dict[str, str] = field(default_factory=dict)


# ------------------------------------------------------------------
# Metadata
# ------------------------------------------------------------------


@dataclass(frozen=True)
class FileMetadata:
    """Metadata for a file.

    ``size`` is in bytes. ``content_hash`` is the Dropbox content hash,
    absent for files uploaded before the hash existed.
    """

    name: str
    id: str
    client_modified: datetime
    server_modified: datetime
    rev: str
    size: int
    path_lower: str | None = None
    path_display: str | None = None
    parent_shared_folder_id: str | None = None
    media_info: MediaInfo | None = None
    sharing_info: FileSharingInfo | None = None
    property_groups: list[PropertyGroup] | None = None
    has_explicit_shared_members: bool | None = None
    content_hash: str | None = None


@dataclass(frozen=True)
class FolderMetadata:
    name: str
    id: str
    path_lower: str | None = None
    path_display: str | None = None
    parent_shared_folder_id: str | None = None
    shared_folder_id: str | None = None
    sharing_info: FolderSharingInfo | None = None
    property_groups: list[PropertyGroup] | None = None


@dataclass(frozen=True)
class DeletedMetadata:
    name: str
    path_lower: str | None = None
    path_display: str | None = None
    parent_shared_folder_id: str | None = None


Metadata = Union[FileMetadata, FolderMetadata, DeletedMetadata]


# ------------------------------------------------------------------
# Write mode
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Add:
    """Never overwrite an existing file."""


@dataclass(frozen=True)
class Overwrite:
    """Always overwrite an existing file."""


@dataclass(frozen=True)
class Update:
    """Overwrite only if the current revision is ``rev``."""

    rev: str


WriteMode = Union[Add, Overwrite, Update]


# ------------------------------------------------------------------
# Requests and responses
# ------------------------------------------------------------------


@dataclass(frozen=True)
class DownloadRequest:
    path: str


@dataclass(frozen=True)
class DownloadResponse:
    content: bytes
    metadata: FileMetadata


@dataclass(frozen=True)
class UploadRequest:
    """Arguments for ``files/upload``.

    Attributes:
        path: Destination path in the user's Dropbox.
        content: Raw file bytes, sent as the request body.
        mode: What to do if a file already exists at ``path``.
        autorename: Let Dropbox rename the file on conflict.
        client_modified: Modification time to record; defaults server-side
            to the upload time.
        mute: Suppress user notifications about this change.
    """

    path: str
    content: bytes
    mode: WriteMode = field(default_factory=Add)
    autorename: bool = False
    client_modified: datetime | None = None
    mute: bool = False


@dataclass(frozen=True)
class ListFolderRequest:
    path: str
    recursive: bool = False
    include_media_info: bool = False
    include_deleted: bool = False
    include_has_explicit_shared_members: bool = False


@dataclass(frozen=True)
class ListFolderContinueRequest:
    cursor: str


@dataclass(frozen=True)
class ListFolderResponse:
    entries: list[Metadata]
    cursor: str
    has_more: bool


# ------------------------------------------------------------------
# Path-level errors
# ------------------------------------------------------------------


@dataclass(frozen=True)
class MalformedPath:
    detail: str | None = None


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class NotFile:
    pass


@dataclass(frozen=True)
class NotFolder:
    pass


@dataclass(frozen=True)
class RestrictedContent:
    pass


PathLookupError = Union[MalformedPath, NotFound, NotFile, NotFolder, RestrictedContent, UnknownTag]


@dataclass(frozen=True)
class ConflictFile:
    pass


@dataclass(frozen=True)
class ConflictFolder:
    pass


@dataclass(frozen=True)
class ConflictFileAncestor:
    pass


WriteConflictError = Union[ConflictFile, ConflictFolder, ConflictFileAncestor, UnknownTag]


@dataclass(frozen=True)
class Conflict:
    conflict: WriteConflictError


@dataclass(frozen=True)
class NoWritePermission:
    pass


@dataclass(frozen=True)
class InsufficientSpace:
    pass


@dataclass(frozen=True)
class DisallowedName:
    pass


@dataclass(frozen=True)
class TeamFolder:
    pass


WriteError = Union[
    MalformedPath,
    Conflict,
    NoWritePermission,
    InsufficientSpace,
    DisallowedName,
    TeamFolder,
    UnknownTag,
]


# ------------------------------------------------------------------
# Operation errors
# ------------------------------------------------------------------


@dataclass(frozen=True)
class TransportFailure:
    """The request failed below the API error layer.

    Covers network errors and timeouts (``status_code`` is None), non-2xx
    responses whose body is not a recognisable API error, and 2xx responses
    whose payload could not be decoded.
    """

    status_code: int | None
    reason: str
    body: str = ""


@dataclass(frozen=True)
class LookupFailed:
    """The ``path`` arm of download and list-folder errors."""

    error: PathLookupError


@dataclass(frozen=True)
class UploadWriteFailed:
    reason: WriteError
    upload_session_id: str


@dataclass(frozen=True)
class CursorReset:
    """The cursor has been invalidated; list the folder again from scratch."""


DownloadError = Union[LookupFailed, UnknownTag, TransportFailure]
UploadError = Union[UploadWriteFailed, UnknownTag, TransportFailure]
ListFolderError = Union[LookupFailed, UnknownTag, TransportFailure]
ListFolderContinueError = Union[LookupFailed, CursorReset, UnknownTag, TransportFailure]
TokenRevokeError = Union[UnknownTag, TransportFailure]


class DropboxApiError(Exception):
    """Raised when a Dropbox API call does not succeed.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        error: Typed error value for the operation (see the ``*Error`` aliases).
        error_summary: Server-provided machine-readable summary, if any.
        user_message: Server-provided localized message, if any.
    """

    def __init__(
        self,
        status_code: int | None,
        error: Any,
        error_summary: str | None = None,
        user_message: str | None = None,
    ) -> None:
        detail = error_summary or _describe_error(error)
        super().__init__(f"Dropbox API error {status_code}: {detail}")
        self.status_code = status_code
        self.error = error
        self.error_summary = error_summary
        self.user_message = user_message


def _describe_error(error: Any) -> str:
    if isinstance(error, TransportFailure):
        return error.reason
    if isinstance(error, UnknownTag):
        return error.tag
    return repr(error)
