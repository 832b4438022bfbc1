import base64
import json
from types import SimpleNamespace

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ncmdecrypt.core import format_config as fc
from ncmdecrypt.core.decrypt import xor_keystream
from ncmdecrypt.core.keystream import build_keystream

KEY_MATERIAL = b"123456789012345678901234567890E7fT49x7dof9OKCgg9cdvhEuezy3iZCL1nFvBFd1T4uSktAJKmwZXsijPbijliionVUXXg9plTbXEclAE9Lb"

# 34-byte STREAMINFO: 44.1 kHz, 2 channels, 16 bits, 0 samples, zero MD5
FLAC_STREAMINFO = (
    b"\x10\x00\x10\x00"
    + b"\x00\x00\x00\x00\x00\x00"
    + b"\x0a\xc4\x42\xf0\x00\x00\x00\x00"
    + b"\x00" * 16
)
MINIMAL_FLAC = b"fLaC" + b"\x80\x00\x00\x22" + FLAC_STREAMINFO
PNG_COVER = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
JPEG_COVER = b"\xff\xd8\xff\xe0" + b"\x00" * 24


def aes_ecb_encrypt(key: bytes, data: bytes) -> bytes:
    padder = padding.PKCS7(fc.AES_BLOCK_BITS).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def xor(data: bytes, mask: int) -> bytes:
    return bytes(b ^ mask for b in data)


def key_blob(key_material: bytes = KEY_MATERIAL) -> bytes:
    """Key blob as stored on disk (before the 0x64 XOR is removed)."""
    return xor(aes_ecb_encrypt(fc.CORE_KEY, fc.KEY_SENTINEL + key_material), fc.KEY_XOR)


def meta_blob_from_plaintext(plaintext: bytes) -> bytes:
    encrypted = aes_ecb_encrypt(fc.META_KEY, plaintext)
    return xor(fc.META_PREFIX + base64.b64encode(encrypted), fc.META_XOR)


def meta_blob(record) -> bytes:
    """Metadata blob as stored on disk (before the 0x63 XOR is removed)."""
    payload = json.dumps(record, ensure_ascii=False).encode("utf-8")
    return meta_blob_from_plaintext(fc.META_PLAINTEXT_PREFIX + payload)


def container(payload: bytes = b"", record=None, raw_meta: bytes = b"",
              image: bytes = b"", image_space=None, key_material: bytes = KEY_MATERIAL,
              raw_key=None, magic: bytes = fc.MAGIC) -> bytes:
    """Assemble a complete .ncm container with ``payload`` encrypted."""
    kb = key_blob(key_material) if raw_key is None else raw_key
    mb = meta_blob(record) if record is not None else raw_meta
    space = len(image) if image_space is None else image_space

    out = bytearray(magic)
    out += b"\x01\x02"
    out += fc.encode_u32(len(kb)) + kb
    out += fc.encode_u32(len(mb)) + mb
    out += b"\x00" * fc.IMAGE_GAP_SIZE
    out += fc.encode_u32(space) + fc.encode_u32(len(image)) + image
    out += b"\xee" * (space - len(image))
    out += xor_keystream(payload, build_keystream(key_material))
    return bytes(out)


@pytest.fixture
def ncm():
    return SimpleNamespace(
        key_material=KEY_MATERIAL,
        aes_ecb_encrypt=aes_ecb_encrypt,
        key_blob=key_blob,
        meta_blob=meta_blob,
        meta_blob_from_plaintext=meta_blob_from_plaintext,
        container=container,
        minimal_flac=MINIMAL_FLAC,
        png_cover=PNG_COVER,
        jpeg_cover=JPEG_COVER,
    )


@pytest.fixture
def track_record():
    return {
        "format": "mp3",
        "musicId": 1234,
        "musicName": "T",
        "album": "A",
        "artist": [["X", "1"]],
        "trackNo": 3,
        "bitrate": 320000,
    }
