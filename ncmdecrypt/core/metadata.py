from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import MetadataError
from .format_config import (
    META_KEY,
    META_PREFIX_SIZE,
    META_PLAINTEXT_PREFIX_SIZE,
    DEFAULT_FORMAT,
    SUPPORTED_FORMATS,
    UNKNOWN_TITLE,
    UNKNOWN_ALBUM,
    UNKNOWN_ARTIST,
)
from .key import aes_ecb_decrypt

logger = logging.getLogger(__name__)


@dataclass
class TrackMetadata:
    """
    Tag record recovered from a container.

    Fields missing from the record fall back to the defaults below; a record
    without ``format`` is treated as mp3.
    """
    format: str = DEFAULT_FORMAT
    title: str = UNKNOWN_TITLE
    album: str = UNKNOWN_ALBUM
    artists: list[str] = field(default_factory=lambda: [UNKNOWN_ARTIST])
    track_number: Optional[int] = None

    @classmethod
    def placeholder(cls, format_guess: str) -> "TrackMetadata":
        return cls(format=_normalize_format(format_guess))

    @classmethod
    def from_record(cls, record: Any) -> "TrackMetadata":
        if not isinstance(record, dict):
            raise MetadataError(f"Metadata record must be an object, got {type(record).__name__}")

        meta = cls()
        fmt = _optional(record, "format", str)
        if fmt is not None:
            meta.format = _normalize_format(fmt)
        title = _optional(record, "musicName", str)
        if title is not None:
            meta.title = title
        album = _optional(record, "album", str)
        if album is not None:
            meta.album = album
        artists = _parse_artists(record.get("artist"))
        if artists:
            meta.artists = artists
        track_number = record.get("trackNo")
        if track_number is not None:
            if isinstance(track_number, bool) or not isinstance(track_number, int) or track_number < 0:
                raise MetadataError(f"Invalid trackNo: {track_number!r}")
            meta.track_number = track_number
        return meta


def _optional(record: dict, key: str, expected: type):
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, expected):
        raise MetadataError(f"Field {key!r} must be {expected.__name__}, got {type(value).__name__}")
    return value


def _normalize_format(value: str) -> str:
    fmt = value.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise MetadataError(f"Unsupported audio format: {value!r}")
    return fmt


def _parse_artists(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MetadataError("Field 'artist' must be a list of [name, id] pairs")
    names = []
    for entry in value:
        # [name, id]; only the name is kept
        if not isinstance(entry, list) or not entry or not isinstance(entry[0], str):
            raise MetadataError(f"Malformed artist entry: {entry!r}")
        names.append(entry[0])
    return names


def decode_metadata(meta_blob: Optional[bytes], format_guess: str = DEFAULT_FORMAT) -> TrackMetadata:
    """
    Decode a de-XORed metadata blob into a TrackMetadata.

    ``None`` yields placeholder metadata in ``format_guess``. Bad padding raises
    DecryptError; anything malformed after the fixed prefixes raises MetadataError.
    """
    if meta_blob is None:
        return TrackMetadata.placeholder(format_guess)

    if len(meta_blob) <= META_PREFIX_SIZE:
        raise MetadataError("Metadata blob is shorter than its prefix")
    try:
        encrypted = base64.b64decode(meta_blob[META_PREFIX_SIZE:], validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MetadataError(f"Metadata is not valid base64: {exc}") from exc

    plaintext = aes_ecb_decrypt(META_KEY, encrypted)
    try:
        record = json.loads(plaintext[META_PLAINTEXT_PREFIX_SIZE:].decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise MetadataError(f"Metadata is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise MetadataError(f"Metadata is not valid JSON: {exc}") from exc

    meta = TrackMetadata.from_record(record)
    logger.debug("Decoded metadata: %s / %s (%s)", meta.title, meta.album, meta.format)
    return meta
