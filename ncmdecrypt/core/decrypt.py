import logging
import os
from itertools import cycle
from typing import BinaryIO, Union

from .errors import ContainerIOError
from .format_config import CHUNK_SIZE

logger = logging.getLogger(__name__)


def xor_keystream(data: bytes, keystream: bytes, offset: int = 0) -> bytes:
    """XOR ``data`` with the keystream, ``data[0]`` sitting at absolute payload offset ``offset``."""
    start = offset % len(keystream)
    mask = keystream[start:] + keystream[:start]
    return bytes(b ^ k for b, k in zip(data, cycle(mask)))


def decrypt_payload(stream: BinaryIO, keystream: bytes,
                    output_path: Union[str, os.PathLike],
                    chunk_size: int = CHUNK_SIZE) -> int:
    """
    Stream the audio payload from the current position of ``stream`` into
    ``output_path``, creating parent directories. Returns the number of bytes written.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    parent = os.path.dirname(os.fspath(output_path))
    offset = 0
    try:
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(output_path, "wb") as out:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                out.write(xor_keystream(chunk, keystream, offset))
                offset += len(chunk)
    except OSError as exc:
        raise ContainerIOError(f"Failed to write decrypted audio to {output_path}: {exc}") from exc

    logger.debug("Decrypted %d payload bytes into %s", offset, output_path)
    return offset
