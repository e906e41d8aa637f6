"""Wire codecs for the Dropbox ``files`` and ``auth`` endpoints.

Request encoders produce plain dicts ready for ``json.dumps``. Response
decoders take already-parsed JSON and raise
:class:`~dropbox_lite.decoding.union.DecodeError` on a shape mismatch.
Union decoders are driven by the ``*_VARIANTS`` tables below, so a new
variant only needs a new table entry.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from dropbox_lite.decoding.union import (
    DecodeError,
    VariantDecoder,
    boolean,
    closed_union,
    decode_closed_union,
    decode_open_union,
    encode_timestamp,
    encode_value,
    encode_void,
    field,
    field_or,
    integer,
    json_object,
    list_of,
    number,
    object_variant,
    optional_field,
    string,
    timestamp,
    value_variant,
    void_variant,
)
from dropbox_lite.files.models import (
    FIELD_CLIENT_MODIFIED,
    FIELD_CONTENT_HASH,
    FIELD_CURSOR,
    FIELD_ENTRIES,
    FIELD_ERROR,
    FIELD_ERROR_SUMMARY,
    FIELD_HAS_EXPLICIT_SHARED_MEMBERS,
    FIELD_HAS_MORE,
    FIELD_ID,
    FIELD_MEDIA_INFO,
    FIELD_NAME,
    FIELD_PARENT_SHARED_FOLDER_ID,
    FIELD_PATH,
    FIELD_PATH_DISPLAY,
    FIELD_PATH_LOWER,
    FIELD_PROPERTY_GROUPS,
    FIELD_REV,
    FIELD_SERVER_MODIFIED,
    FIELD_SHARED_FOLDER_ID,
    FIELD_SHARING_INFO,
    FIELD_SIZE,
    FIELD_USER_MESSAGE,
    Add,
    Conflict,
    ConflictFile,
    ConflictFileAncestor,
    ConflictFolder,
    CursorReset,
    DeletedMetadata,
    Dimensions,
    DisallowedName,
    DownloadError,
    DownloadRequest,
    DownloadResponse,
    DropboxApiError,
    FileMetadata,
    FileSharingInfo,
    FolderMetadata,
    FolderSharingInfo,
    GpsCoordinates,
    InsufficientSpace,
    ListFolderContinueError,
    ListFolderContinueRequest,
    ListFolderError,
    ListFolderRequest,
    ListFolderResponse,
    LookupFailed,
    MalformedPath,
    MediaInfo,
    MediaInfoMetadata,
    MediaInfoPending,
    MediaMetadata,
    Metadata,
    NotFile,
    NotFolder,
    NotFound,
    NoWritePermission,
    Overwrite,
    PathLookupError,
    PhotoMetadata,
    PropertyGroup,
    RestrictedContent,
    TeamFolder,
    TokenRevokeError,
    TransportFailure,
    Update,
    UploadError,
    UploadRequest,
    UploadWriteFailed,
    VideoMetadata,
    WriteConflictError,
    WriteError,
    WriteMode,
)

logger = logging.getLogger(__name__)

# Response header carrying the JSON metadata of a downloaded file.
RESULT_HEADER = "Dropbox-API-Result"
# Request header carrying the JSON argument of content endpoints.
ARG_HEADER = "Dropbox-API-Arg"


# ------------------------------------------------------------------
# Request encoding
# ------------------------------------------------------------------


def encode_write_mode(mode: WriteMode) -> dict[str, Any]:
    if isinstance(mode, Add):
        return encode_void("add")
    if isinstance(mode, Overwrite):
        return encode_void("overwrite")
    if isinstance(mode, Update):
        return encode_value("update", mode.rev)
    raise TypeError(f"not a WriteMode: {mode!r}")


def encode_download_request(request: DownloadRequest) -> dict[str, Any]:
    return {FIELD_PATH: request.path}


def encode_upload_request(request: UploadRequest) -> dict[str, Any]:
    """Encode the upload argument; ``content`` travels separately as the body."""
    arg: dict[str, Any] = {
        FIELD_PATH: request.path,
        "mode": encode_write_mode(request.mode),
        "autorename": request.autorename,
    }
    if request.client_modified is not None:
        arg[FIELD_CLIENT_MODIFIED] = encode_timestamp(request.client_modified)
    arg["mute"] = request.mute
    return arg


def encode_list_folder_request(request: ListFolderRequest) -> dict[str, Any]:
    return {
        FIELD_PATH: request.path,
        "recursive": request.recursive,
        "include_media_info": request.include_media_info,
        "include_deleted": request.include_deleted,
        "include_has_explicit_shared_members": request.include_has_explicit_shared_members,
    }


def encode_list_folder_continue_request(request: ListFolderContinueRequest) -> dict[str, Any]:
    return {FIELD_CURSOR: request.cursor}


def to_json(arg: Mapping[str, Any]) -> str:
    """Serialize a request argument as a single-line JSON document."""
    return json.dumps(arg, separators=(",", ":"))


def to_header_json(arg: Mapping[str, Any]) -> str:
    """Serialize a request argument for the ``Dropbox-API-Arg`` header.

    HTTP headers must be ASCII; ``ensure_ascii`` escapes everything outside
    printable ASCII (DEL included) as ``\\uXXXX``.
    """
    return json.dumps(arg, separators=(",", ":"), ensure_ascii=True)


# ------------------------------------------------------------------
# Media info
# ------------------------------------------------------------------


def decode_dimensions(value: Any) -> Dimensions:
    obj = json_object(value)
    return Dimensions(height=field(obj, "height", integer), width=field(obj, "width", integer))


def decode_gps_coordinates(value: Any) -> GpsCoordinates:
    obj = json_object(value)
    return GpsCoordinates(
        latitude=field(obj, "latitude", number),
        longitude=field(obj, "longitude", number),
    )


def decode_photo_metadata(value: Any) -> PhotoMetadata:
    obj = json_object(value)
    return PhotoMetadata(
        dimensions=optional_field(obj, "dimensions", decode_dimensions),
        location=optional_field(obj, "location", decode_gps_coordinates),
        time_taken=optional_field(obj, "time_taken", timestamp),
    )


def decode_video_metadata(value: Any) -> VideoMetadata:
    obj = json_object(value)
    return VideoMetadata(
        dimensions=optional_field(obj, "dimensions", decode_dimensions),
        location=optional_field(obj, "location", decode_gps_coordinates),
        time_taken=optional_field(obj, "time_taken", timestamp),
        duration=optional_field(obj, "duration", integer),
    )


MEDIA_METADATA_VARIANTS: dict[str, VariantDecoder[MediaMetadata]] = {
    "photo": object_variant(decode_photo_metadata),
    "video": object_variant(decode_video_metadata),
}

decode_media_metadata = closed_union(MEDIA_METADATA_VARIANTS)

MEDIA_INFO_VARIANTS: dict[str, VariantDecoder[MediaInfo]] = {
    "pending": void_variant(MediaInfoPending()),
    "metadata": value_variant(decode_media_metadata, MediaInfoMetadata),
}

decode_media_info = closed_union(MEDIA_INFO_VARIANTS)


# ------------------------------------------------------------------
# Sharing and properties
# ------------------------------------------------------------------


def decode_file_sharing_info(value: Any) -> FileSharingInfo:
    obj = json_object(value)
    return FileSharingInfo(
        read_only=field(obj, "read_only", boolean),
        parent_shared_folder_id=field(obj, FIELD_PARENT_SHARED_FOLDER_ID, string),
        modified_by=optional_field(obj, "modified_by", string),
    )


def decode_folder_sharing_info(value: Any) -> FolderSharingInfo:
    obj = json_object(value)
    return FolderSharingInfo(
        read_only=field(obj, "read_only", boolean),
        parent_shared_folder_id=optional_field(obj, FIELD_PARENT_SHARED_FOLDER_ID, string),
        shared_folder_id=optional_field(obj, FIELD_SHARED_FOLDER_ID, string),
        traverse_only=field_or(obj, "traverse_only", boolean, False),
        no_access=field_or(obj, "no_access", boolean, False),
    )


def _decode_property_field(value: Any) -> tuple[str, str]:
    obj = json_object(value)
    return field(obj, "name", string), field(obj, "value", string)


def decode_property_group(value: Any) -> PropertyGroup:
    """Decode a property group, folding its ``{name, value}`` list into a dict.

    When a name repeats, the later entry wins.
    """
    obj = json_object(value)
    pairs = field(obj, "fields", list_of(_decode_property_field))
    return PropertyGroup(template_id=field(obj, "template_id", string), fields=dict(pairs))


# ------------------------------------------------------------------
# Metadata
# ------------------------------------------------------------------


def decode_file_metadata(value: Any) -> FileMetadata:
    obj = json_object(value)
    return FileMetadata(
        name=field(obj, FIELD_NAME, string),
        id=field(obj, FIELD_ID, string),
        client_modified=field(obj, FIELD_CLIENT_MODIFIED, timestamp),
        server_modified=field(obj, FIELD_SERVER_MODIFIED, timestamp),
        rev=field(obj, FIELD_REV, string),
        size=field(obj, FIELD_SIZE, integer),
        path_lower=optional_field(obj, FIELD_PATH_LOWER, string),
        path_display=optional_field(obj, FIELD_PATH_DISPLAY, string),
        parent_shared_folder_id=optional_field(obj, FIELD_PARENT_SHARED_FOLDER_ID, string),
        media_info=optional_field(obj, FIELD_MEDIA_INFO, decode_media_info),
        sharing_info=optional_field(obj, FIELD_SHARING_INFO, decode_file_sharing_info),
        property_groups=optional_field(
            obj, FIELD_PROPERTY_GROUPS, list_of(decode_property_group)
        ),
        has_explicit_shared_members=optional_field(
            obj, FIELD_HAS_EXPLICIT_SHARED_MEMBERS, boolean
        ),
        content_hash=optional_field(obj, FIELD_CONTENT_HASH, string),
    )


def decode_folder_metadata(value: Any) -> FolderMetadata:
    obj = json_object(value)
    return FolderMetadata(
        name=field(obj, FIELD_NAME, string),
        id=field(obj, FIELD_ID, string),
        path_lower=optional_field(obj, FIELD_PATH_LOWER, string),
        path_display=optional_field(obj, FIELD_PATH_DISPLAY, string),
        parent_shared_folder_id=optional_field(obj, FIELD_PARENT_SHARED_FOLDER_ID, string),
        shared_folder_id=optional_field(obj, FIELD_SHARED_FOLDER_ID, string),
        sharing_info=optional_field(obj, FIELD_SHARING_INFO, decode_folder_sharing_info),
        property_groups=optional_field(
            obj, FIELD_PROPERTY_GROUPS, list_of(decode_property_group)
        ),
    )


def decode_deleted_metadata(value: Any) -> DeletedMetadata:
    obj = json_object(value)
    return DeletedMetadata(
        name=field(obj, FIELD_NAME, string),
        path_lower=optional_field(obj, FIELD_PATH_LOWER, string),
        path_display=optional_field(obj, FIELD_PATH_DISPLAY, string),
        parent_shared_folder_id=optional_field(obj, FIELD_PARENT_SHARED_FOLDER_ID, string),
    )


METADATA_VARIANTS: dict[str, VariantDecoder[Metadata]] = {
    "file": object_variant(decode_file_metadata),
    "folder": object_variant(decode_folder_metadata),
    "deleted": object_variant(decode_deleted_metadata),
}

decode_metadata = closed_union(METADATA_VARIANTS)


def decode_list_folder_response(value: Any) -> ListFolderResponse:
    obj = json_object(value)
    return ListFolderResponse(
        entries=field(obj, FIELD_ENTRIES, list_of(decode_metadata)),
        cursor=field(obj, FIELD_CURSOR, string),
        has_more=field(obj, FIELD_HAS_MORE, boolean),
    )


def decode_download_response(headers: Mapping[str, str], content: bytes) -> DownloadResponse:
    """Combine the ``Dropbox-API-Result`` header metadata with the raw body.

    Raises:
        DecodeError: If the header is missing, is not JSON, or is not file metadata.
    """
    raw = headers.get(RESULT_HEADER)
    if raw is None:
        raise DecodeError(f"missing response header {RESULT_HEADER!r}")
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise DecodeError(f"response header {RESULT_HEADER!r} is not valid JSON") from exc
    return DownloadResponse(content=content, metadata=decode_file_metadata(parsed))


# ------------------------------------------------------------------
# Write mode
# ------------------------------------------------------------------


WRITE_MODE_VARIANTS: dict[str, VariantDecoder[WriteMode]] = {
    "add": void_variant(Add()),
    "overwrite": void_variant(Overwrite()),
    "update": value_variant(string, Update),
}


def decode_write_mode(value: Any) -> WriteMode:
    return decode_closed_union(value, WRITE_MODE_VARIANTS)


# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------


LOOKUP_ERROR_VARIANTS: dict[str, VariantDecoder[PathLookupError]] = {
    "malformed_path": value_variant(string, MalformedPath, optional=True),
    "not_found": void_variant(NotFound()),
    "not_file": void_variant(NotFile()),
    "not_folder": void_variant(NotFolder()),
    "restricted_content": void_variant(RestrictedContent()),
}


def decode_lookup_error(value: Any) -> PathLookupError:
    return decode_open_union(value, LOOKUP_ERROR_VARIANTS)


WRITE_CONFLICT_ERROR_VARIANTS: dict[str, VariantDecoder[WriteConflictError]] = {
    "file": void_variant(ConflictFile()),
    "folder": void_variant(ConflictFolder()),
    "file_ancestor": void_variant(ConflictFileAncestor()),
}


def decode_write_conflict_error(value: Any) -> WriteConflictError:
    return decode_open_union(value, WRITE_CONFLICT_ERROR_VARIANTS)


WRITE_ERROR_VARIANTS: dict[str, VariantDecoder[WriteError]] = {
    "malformed_path": value_variant(string, MalformedPath, optional=True),
    "conflict": value_variant(decode_write_conflict_error, Conflict),
    "no_write_permission": void_variant(NoWritePermission()),
    "insufficient_space": void_variant(InsufficientSpace()),
    "disallowed_name": void_variant(DisallowedName()),
    "team_folder": void_variant(TeamFolder()),
}


def decode_write_error(value: Any) -> WriteError:
    return decode_open_union(value, WRITE_ERROR_VARIANTS)


def decode_upload_write_failed(value: Any) -> UploadWriteFailed:
    obj = json_object(value)
    return UploadWriteFailed(
        reason=field(obj, "reason", decode_write_error),
        upload_session_id=field(obj, "upload_session_id", string),
    )


DOWNLOAD_ERROR_VARIANTS: dict[str, VariantDecoder[DownloadError]] = {
    "path": value_variant(decode_lookup_error, LookupFailed),
}

UPLOAD_ERROR_VARIANTS: dict[str, VariantDecoder[UploadError]] = {
    "path": object_variant(decode_upload_write_failed),
}

LIST_FOLDER_ERROR_VARIANTS: dict[str, VariantDecoder[ListFolderError]] = {
    "path": value_variant(decode_lookup_error, LookupFailed),
}

LIST_FOLDER_CONTINUE_ERROR_VARIANTS: dict[str, VariantDecoder[ListFolderContinueError]] = {
    "path": value_variant(decode_lookup_error, LookupFailed),
    "reset": void_variant(CursorReset()),
}

TOKEN_REVOKE_ERROR_VARIANTS: dict[str, VariantDecoder[TokenRevokeError]] = {}


def decode_download_error(value: Any) -> DownloadError:
    return decode_open_union(value, DOWNLOAD_ERROR_VARIANTS)


def decode_upload_error(value: Any) -> UploadError:
    return decode_open_union(value, UPLOAD_ERROR_VARIANTS)


def decode_list_folder_error(value: Any) -> ListFolderError:
    return decode_open_union(value, LIST_FOLDER_ERROR_VARIANTS)


def decode_list_folder_continue_error(value: Any) -> ListFolderContinueError:
    return decode_open_union(value, LIST_FOLDER_CONTINUE_ERROR_VARIANTS)


def decode_token_revoke_error(value: Any) -> TokenRevokeError:
    return decode_open_union(value, TOKEN_REVOKE_ERROR_VARIANTS)


def api_error_from_response(
    status_code: int,
    body: str,
    decode_error: Callable[[Any], Any],
) -> DropboxApiError:
    """Build the exception for a non-2xx response.

    The body is expected to be ``{"error": <open union>, "error_summary": ...}``.
    Anything else (plain-text 400s, 5xx pages, an ``error`` of the wrong
    shape) becomes a :class:`TransportFailure` carrying the raw body.

    Args:
        status_code: HTTP status of the response.
        body: Response body text.
        decode_error: Decoder for the operation's ``error`` union.

    Returns:
        The exception to raise; this function never raises itself.
    """
    try:
        obj = json_object(json.loads(body))
        error = field(obj, FIELD_ERROR, decode_error)
        summary = optional_field(obj, FIELD_ERROR_SUMMARY, string)
        user_message = optional_field(obj, FIELD_USER_MESSAGE, _decode_user_message)
    except (ValueError, DecodeError) as exc:
        logger.debug(
            "[api_error_from_response] undecodable error body; status:%d;reason:%s",
            status_code,
            exc,
        )
        failure = TransportFailure(status_code=status_code, reason=f"HTTP {status_code}", body=body)
        return DropboxApiError(status_code, failure)
    return DropboxApiError(status_code, error, error_summary=summary, user_message=user_message)


def _decode_user_message(value: Any) -> str:
    # {"locale": "en", "text": "..."}
    if isinstance(value, str):
        return value
    return field(json_object(value), "text", string)
