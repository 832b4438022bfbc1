"""
File format configuration for NetEase Cloud Music .ncm containers.

Container layout (all integers uint32, little-endian):
  - magic (8 bytes, "CTENFDAM")
  - reserved (2 bytes)
  - key blob length + key blob (XOR 0x64, then AES-128-ECB/PKCS7 with CORE_KEY)
  - metadata blob length + metadata blob (XOR 0x63, 0 length means absent)
  - reserved (5 bytes)
  - image space, image size, image bytes, (space - size) padding bytes
  - audio payload (XOR with the derived keystream) until end of file

Decrypted key blob:   KEY_SENTINEL (17 bytes) + key material
Metadata blob:        META_PREFIX (22 bytes) + base64(AES-128-ECB/PKCS7 with META_KEY)
Decrypted metadata:   META_PLAINTEXT_PREFIX (6 bytes) + JSON record
"""

MAGIC = b"CTENFDAM"
MAGIC_SIZE = len(MAGIC)

LENGTH_SIZE = 4
HEADER_GAP_SIZE = 2
IMAGE_GAP_SIZE = 5

KEY_XOR = 0x64
META_XOR = 0x63

CORE_KEY = b"\x68\x7a\x48\x52\x41\x6d\x73\x6f\x35\x6b\x49\x6e\x62\x61\x78\x57"
META_KEY = b"\x23\x31\x34\x6c\x6a\x6b\x5f\x21\x5c\x5d\x26\x30\x55\x3c\x27\x28"
AES_BLOCK_BITS = 128

KEY_SENTINEL = b"neteasecloudmusic"
KEY_SENTINEL_SIZE = len(KEY_SENTINEL)
META_PREFIX = b"163 key(Don't modify):"
META_PREFIX_SIZE = len(META_PREFIX)
META_PLAINTEXT_PREFIX = b"music:"
META_PLAINTEXT_PREFIX_SIZE = len(META_PLAINTEXT_PREFIX)

KEYSTREAM_PERIOD = 256
CHUNK_SIZE = 16384

FORMAT_MP3 = "mp3"
FORMAT_FLAC = "flac"
SUPPORTED_FORMATS = (FORMAT_MP3, FORMAT_FLAC)
DEFAULT_FORMAT = FORMAT_MP3
LOSSLESS_SIZE_THRESHOLD = 16 * 1024 * 1024

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_ALBUM = "Unknown Album"
UNKNOWN_ARTIST = "Unknown Artist"

PNG_SIGNATURE = b"\x89PNG"
MIME_PNG = "image/png"
MIME_JPEG = "image/jpeg"
COVER_DESCRIPTION = "Cover"


def read_u32(data: bytes) -> int:
    if len(data) != LENGTH_SIZE:
        raise ValueError("Invalid length field")
    return int.from_bytes(data, "little")


def encode_u32(value: int) -> bytes:
    return int(value).to_bytes(LENGTH_SIZE, "little")


def guess_format(payload_size: int) -> str:
    """Pick the target format for containers that carry no metadata record."""
    return FORMAT_FLAC if payload_size > LOSSLESS_SIZE_THRESHOLD else FORMAT_MP3
