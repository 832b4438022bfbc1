from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .errors import ContainerIOError, FormatError
from .format_config import (
    MAGIC,
    MAGIC_SIZE,
    LENGTH_SIZE,
    HEADER_GAP_SIZE,
    IMAGE_GAP_SIZE,
    KEY_XOR,
    META_XOR,
    PNG_SIGNATURE,
    MIME_PNG,
    MIME_JPEG,
    read_u32,
    guess_format,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverImage:
    data: bytes

    @property
    def mime_type(self) -> str:
        return sniff_image_mime(self.data)


@dataclass(frozen=True)
class ContainerHeader:
    key_blob: bytes
    meta_blob: Optional[bytes]
    cover: Optional[CoverImage]
    payload_offset: int
    payload_size: int

    @property
    def format_guess(self) -> str:
        return guess_format(self.payload_size)


def sniff_image_mime(data: bytes) -> str:
    """PNG is recognised by its signature, anything else is treated as JPEG."""
    return MIME_PNG if data.startswith(PNG_SIGNATURE) else MIME_JPEG


def xor_bytes(data: bytes, mask: int) -> bytes:
    return bytes(b ^ mask for b in data)


def _read_exact(stream: BinaryIO, size: int, field: str) -> bytes:
    try:
        data = stream.read(size)
    except OSError as exc:
        raise ContainerIOError(f"Failed to read {field}: {exc}") from exc
    if len(data) != size:
        raise FormatError(f"Truncated container: expected {size} bytes of {field}, got {len(data)}")
    return data


def _read_length(stream: BinaryIO, field: str) -> int:
    return read_u32(_read_exact(stream, LENGTH_SIZE, field))


def _skip(stream: BinaryIO, size: int, field: str) -> None:
    try:
        stream.seek(size, os.SEEK_CUR)
    except OSError as exc:
        raise ContainerIOError(f"Failed to skip {field}: {exc}") from exc


def read_container(stream: BinaryIO) -> ContainerHeader:
    """
    Parse the fixed header of an .ncm container.

    The key blob and metadata blob are returned with their single-byte XOR
    layer already removed. On return the stream is positioned at the first
    byte of the encrypted audio payload.
    """
    magic = _read_exact(stream, MAGIC_SIZE, "magic")
    if magic != MAGIC:
        raise FormatError(f"Not an NCM container: bad magic {magic!r}")

    _skip(stream, HEADER_GAP_SIZE, "header gap")

    key_len = _read_length(stream, "key length")
    key_blob = xor_bytes(_read_exact(stream, key_len, "key blob"), KEY_XOR)

    meta_len = _read_length(stream, "metadata length")
    meta_blob = None
    if meta_len > 0:
        meta_blob = xor_bytes(_read_exact(stream, meta_len, "metadata blob"), META_XOR)

    _skip(stream, IMAGE_GAP_SIZE, "image gap")

    image_space = _read_length(stream, "image space")
    image_size = _read_length(stream, "image size")
    if image_size > image_space:
        raise FormatError(f"Image size {image_size} exceeds reserved image space {image_space}")

    cover = None
    if image_size > 0:
        cover = CoverImage(_read_exact(stream, image_size, "cover image"))
    _skip(stream, image_space - image_size, "image padding")

    try:
        payload_offset = stream.tell()
        end = stream.seek(0, os.SEEK_END)
        stream.seek(payload_offset, os.SEEK_SET)
    except OSError as exc:
        raise ContainerIOError(f"Failed to locate audio payload: {exc}") from exc
    if payload_offset > end:
        raise FormatError("Image padding runs past the end of the container")

    logger.debug(
        "Container header: key=%d meta=%d image=%d/%d payload=%d@%d",
        key_len, meta_len, image_size, image_space, end - payload_offset, payload_offset,
    )
    return ContainerHeader(
        key_blob=key_blob,
        meta_blob=meta_blob,
        cover=cover,
        payload_offset=payload_offset,
        payload_size=end - payload_offset,
    )
