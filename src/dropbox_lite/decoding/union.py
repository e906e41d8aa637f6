"""Tag-dispatched JSON decoding for Dropbox API unions and field primitives."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Decoder = Callable[[Any], T]
# Variant decoders receive the tag that selected them and the whole tagged object.
VariantDecoder = Callable[[str, Mapping[str, Any]], T]

TAG_FIELD = ".tag"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class DecodeError(ValueError):
    """Raised when a JSON value does not have the expected shape.

    Attributes:
        message: Description of the mismatch.
        path: Field names / list indices leading from the root to the failure.
    """

    def __init__(self, message: str, path: tuple[str | int, ...] = ()) -> None:
        self.message = message
        self.path = path
        where = "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in path)
        super().__init__(f"{where or '<root>'}: {message}")

    def at(self, segment: str | int) -> DecodeError:
        """Return a copy of this error located one level deeper under *segment*."""
        return DecodeError(self.message, (segment, *self.path))


@dataclass(frozen=True)
class UnknownTag:
    """Catch-all arm of an open union: a tag this client does not recognise."""

    tag: str
    raw: Any


# ------------------------------------------------------------------
# Primitives
# ------------------------------------------------------------------


def string(value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected a string, got {_describe(value)}")
    return value


def boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"expected a boolean, got {_describe(value)}")
    return value


def integer(value: Any) -> int:
    """Decode an integer.

    Python integers are unbounded, so 64-bit values such as file sizes
    decode without loss. Floats are rejected even when integral.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"expected an integer, got {_describe(value)}")
    return value


def number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"expected a number, got {_describe(value)}")
    return float(value)


def timestamp(value: Any) -> datetime:
    """Decode a Dropbox ``%Y-%m-%dT%H:%M:%SZ`` timestamp as an aware UTC datetime."""
    text = string(value)
    try:
        parsed = datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise DecodeError(f"expected a timestamp like 2015-05-12T15:50:38Z, got {text!r}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def json_object(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DecodeError(f"expected an object, got {_describe(value)}")
    return value


def list_of(decoder: Decoder[T]) -> Decoder[list[T]]:
    def decode(value: Any) -> list[T]:
        if not isinstance(value, list):
            raise DecodeError(f"expected a list, got {_describe(value)}")
        items: list[T] = []
        for index, item in enumerate(value):
            try:
                items.append(decoder(item))
            except DecodeError as exc:
                raise exc.at(index) from None
        return items

    return decode


def field(obj: Mapping[str, Any], name: str, decoder: Decoder[T]) -> T:
    """Decode a required field of *obj*.

    Raises:
        DecodeError: If the field is missing or its value fails *decoder*.
    """
    if name not in obj:
        raise DecodeError(f"missing required field {name!r}")
    try:
        return decoder(obj[name])
    except DecodeError as exc:
        raise exc.at(name) from None


def optional_field(obj: Mapping[str, Any], name: str, decoder: Decoder[T]) -> T | None:
    """Decode an optional field of *obj*; a missing or null value yields None."""
    raw = obj.get(name)
    if raw is None:
        return None
    try:
        return decoder(raw)
    except DecodeError as exc:
        raise exc.at(name) from None


def field_or(obj: Mapping[str, Any], name: str, decoder: Decoder[T], default: T) -> T:
    """Like :func:`optional_field` but substitutes *default* for an absent value."""
    decoded = optional_field(obj, name, decoder)
    return default if decoded is None else decoded


# ------------------------------------------------------------------
# Variant decoders
# ------------------------------------------------------------------


def void_variant(result: T) -> VariantDecoder[T]:
    """A tag with no payload; always decodes to *result*."""

    def decode(tag: str, obj: Mapping[str, Any]) -> T:
        return result

    return decode


def value_variant(
    decoder: Decoder[U],
    wrap: Callable[[U], T],
    *,
    optional: bool = False,
) -> VariantDecoder[T]:
    """A tag whose payload is nested under a field named after the tag.

    ``{".tag": "update", "update": "a1c10ce0dd78"}`` decodes the
    ``"update"`` field with *decoder* and passes the result to *wrap*.
    With ``optional=True`` a missing or null payload is passed as None.
    """

    def decode(tag: str, obj: Mapping[str, Any]) -> T:
        if optional:
            return wrap(optional_field(obj, tag, decoder))  # type: ignore[arg-type]
        return wrap(field(obj, tag, decoder))

    return decode


def object_variant(decoder: Decoder[U], wrap: Callable[[U], T] | None = None) -> VariantDecoder[T]:
    """A tag whose payload fields sit beside the tag in the same object."""

    def decode(tag: str, obj: Mapping[str, Any]) -> T:
        decoded = decoder(obj)
        return decoded if wrap is None else wrap(decoded)  # type: ignore[return-value]

    return decode


# ------------------------------------------------------------------
# Unions
# ------------------------------------------------------------------


def _read_tag(value: Any, tag_field: str) -> tuple[str, Mapping[str, Any]]:
    obj = json_object(value)
    return field(obj, tag_field, string), obj


def decode_closed_union(
    value: Any,
    variants: Mapping[str, VariantDecoder[T]],
    tag_field: str = TAG_FIELD,
) -> T:
    """Decode *value* with the variant decoder selected by its tag.

    Raises:
        DecodeError: If the tag is missing, is not in *variants*, or the
            selected variant's payload fails to decode.
    """
    tag, obj = _read_tag(value, tag_field)
    decoder = variants.get(tag)
    if decoder is None:
        expected = ", ".join(sorted(variants))
        raise DecodeError(f"unexpected tag {tag!r} in field {tag_field!r}; expected one of: {expected}")
    return decoder(tag, obj)


def decode_open_union(
    value: Any,
    variants: Mapping[str, VariantDecoder[T]],
    unknown: Callable[[str, Any], U] = UnknownTag,  # type: ignore[assignment]
    tag_field: str = TAG_FIELD,
) -> T | U:
    """Decode *value* like :func:`decode_closed_union`, tolerating unknown tags.

    An unmapped tag is not an error: ``unknown(tag, value)`` is returned
    instead so that variants added server-side do not break older clients.
    """
    tag, obj = _read_tag(value, tag_field)
    decoder = variants.get(tag)
    if decoder is None:
        return unknown(tag, value)
    return decoder(tag, obj)


def closed_union(
    variants: Mapping[str, VariantDecoder[T]], tag_field: str = TAG_FIELD
) -> Decoder[T]:
    return lambda value: decode_closed_union(value, variants, tag_field)


def open_union(
    variants: Mapping[str, VariantDecoder[T]],
    unknown: Callable[[str, Any], U] = UnknownTag,  # type: ignore[assignment]
    tag_field: str = TAG_FIELD,
) -> Decoder[T | U]:
    return lambda value: decode_open_union(value, variants, unknown, tag_field)


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------


def encode_void(tag: str) -> dict[str, Any]:
    return {TAG_FIELD: tag}


def encode_value(tag: str, payload: Any) -> dict[str, Any]:
    return {TAG_FIELD: tag, tag: payload}


def encode_object(tag: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    return {TAG_FIELD: tag, **fields}


def encode_timestamp(value: datetime) -> str:
    """Format *value* for the wire; aware datetimes are converted to UTC first."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    return f"{type(value).__name__} {value!r}"[:80]
