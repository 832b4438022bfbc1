import base64

import pytest

from ncmdecrypt.core.errors import DecryptError, MetadataError
from ncmdecrypt.core.format_config import (
    FORMAT_FLAC,
    FORMAT_MP3,
    META_KEY,
    META_PREFIX,
    META_XOR,
    UNKNOWN_ALBUM,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
)
from ncmdecrypt.core.metadata import TrackMetadata, decode_metadata


def _unxor(data: bytes) -> bytes:
    return bytes(b ^ META_XOR for b in data)


def test_absent_blob_uses_placeholders():
    meta = decode_metadata(None, FORMAT_FLAC)

    assert meta == TrackMetadata(
        format=FORMAT_FLAC,
        title=UNKNOWN_TITLE,
        album=UNKNOWN_ALBUM,
        artists=[UNKNOWN_ARTIST],
        track_number=None,
    )


def test_decodes_full_record(ncm, track_record):
    track_record["artist"] = [["X", "1"], ["Y", 2]]
    meta = decode_metadata(_unxor(ncm.meta_blob(track_record)))

    assert meta.format == FORMAT_MP3
    assert meta.title == "T"
    assert meta.album == "A"
    assert meta.artists == ["X", "Y"]
    assert meta.track_number == 3


def test_record_without_optional_fields_uses_defaults(ncm):
    meta = decode_metadata(_unxor(ncm.meta_blob({"format": "FLAC", "artist": []})), FORMAT_MP3)

    assert meta.format == FORMAT_FLAC
    assert meta.title == UNKNOWN_TITLE
    assert meta.album == UNKNOWN_ALBUM
    assert meta.artists == [UNKNOWN_ARTIST]
    assert meta.track_number is None


def test_non_ascii_text_survives(ncm):
    meta = decode_metadata(_unxor(ncm.meta_blob({"musicName": "晴天", "artist": [["周杰伦", 6452]]})))
    assert meta.title == "晴天"
    assert meta.artists == ["周杰伦"]


def test_bad_padding_raises_decrypt_error(ncm):
    block = ncm.aes_ecb_encrypt(META_KEY, b"music:{}" + b"\x00" * 8)[:16]
    blob = META_PREFIX + base64.b64encode(block)

    with pytest.raises(DecryptError):
        decode_metadata(blob)


def test_invalid_base64_raises_metadata_error():
    with pytest.raises(MetadataError):
        decode_metadata(META_PREFIX + b"not*base64!")


def test_blob_shorter_than_prefix_raises_metadata_error():
    with pytest.raises(MetadataError):
        decode_metadata(META_PREFIX[:10])


def test_invalid_json_raises_metadata_error(ncm):
    blob = _unxor(ncm.meta_blob_from_plaintext(b"music:{not json"))
    with pytest.raises(MetadataError):
        decode_metadata(blob)


def test_invalid_utf8_raises_metadata_error(ncm):
    blob = _unxor(ncm.meta_blob_from_plaintext(b"music:\xff\xfe"))
    with pytest.raises(MetadataError):
        decode_metadata(blob)


@pytest.mark.parametrize("record", [
    [1, 2, 3],
    {"musicName": 42},
    {"album": ["A"]},
    {"artist": "X"},
    {"artist": [["X", 1], "Y"]},
    {"artist": [[]]},
    {"trackNo": "3"},
    {"trackNo": True},
    {"trackNo": -1},
    {"format": "ogg"},
])
def test_malformed_records_raise_metadata_error(ncm, record):
    with pytest.raises(MetadataError):
        decode_metadata(_unxor(ncm.meta_blob(record)))


def test_null_fields_fall_back_to_defaults():
    meta = TrackMetadata.from_record({"musicName": None, "trackNo": None, "artist": None})
    assert meta.title == UNKNOWN_TITLE
    assert meta.track_number is None
    assert meta.artists == [UNKNOWN_ARTIST]
