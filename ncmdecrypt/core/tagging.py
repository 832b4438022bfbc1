from __future__ import annotations

import logging
import os
from typing import Optional, Union

from mutagen import MutagenError
from mutagen.flac import FLAC, Picture
from mutagen.id3 import ID3, ID3NoHeaderError, APIC, TALB, TIT2, TPE1, TRCK, PictureType

from .container import CoverImage
from .errors import TaggingError
from .format_config import FORMAT_MP3, FORMAT_FLAC, COVER_DESCRIPTION
from .metadata import TrackMetadata

logger = logging.getLogger(__name__)

ID3_TEXT_ENCODING_UTF16 = 1
ID3_SAVE_VERSION = 3


def _write_id3(path: str, meta: TrackMetadata, cover: Optional[CoverImage]) -> None:
    try:
        tags = ID3(path)
    except ID3NoHeaderError:
        tags = ID3()

    # ID3v2.3 has no UTF-8 text encoding
    enc = ID3_TEXT_ENCODING_UTF16
    tags.setall("TIT2", [TIT2(encoding=enc, text=meta.title)])
    tags.setall("TALB", [TALB(encoding=enc, text=meta.album)])
    tags.setall("TPE1", [TPE1(encoding=enc, text="/".join(meta.artists))])
    if meta.track_number is not None:
        tags.setall("TRCK", [TRCK(encoding=enc, text=str(meta.track_number))])

    if cover is not None:
        for frame in tags.getall("APIC"):
            if frame.type == PictureType.COVER_FRONT:
                del tags[frame.HashKey]
        tags.add(APIC(
            encoding=enc,
            mime=cover.mime_type,
            type=PictureType.COVER_FRONT,
            desc=COVER_DESCRIPTION,
            data=cover.data,
        ))

    tags.update_to_v23()
    tags.save(path, v2_version=ID3_SAVE_VERSION)


def _write_flac(path: str, meta: TrackMetadata, cover: Optional[CoverImage]) -> None:
    audio = FLAC(path)
    if audio.tags is None:
        audio.add_tags()

    audio["title"] = [meta.title]
    audio["album"] = [meta.album]
    audio["artist"] = list(meta.artists)
    if meta.track_number is not None:
        audio["tracknumber"] = [str(meta.track_number)]

    if cover is not None:
        kept = [p for p in audio.pictures if p.type != PictureType.COVER_FRONT]
        audio.clear_pictures()
        for picture in kept:
            audio.add_picture(picture)
        picture = Picture()
        picture.type = PictureType.COVER_FRONT
        picture.mime = cover.mime_type
        picture.desc = COVER_DESCRIPTION
        picture.data = cover.data
        audio.add_picture(picture)

    audio.save()


def write_tags(path: Union[str, os.PathLike], meta: TrackMetadata,
               cover: Optional[CoverImage] = None) -> None:
    """
    Embed ``meta`` and ``cover`` into the decrypted file at ``path`` in place,
    using ID3v2.3 for mp3 and Vorbis comments plus a PICTURE block for flac.
    """
    path = os.fspath(path)
    try:
        if meta.format == FORMAT_MP3:
            _write_id3(path, meta, cover)
        elif meta.format == FORMAT_FLAC:
            _write_flac(path, meta, cover)
        else:
            raise TaggingError(f"No tagging scheme for format {meta.format!r}")
    except (MutagenError, OSError) as exc:
        raise TaggingError(f"Failed to tag {path}: {exc}") from exc

    logger.debug("Tagged %s as %s", path, meta.format)
