from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .container import read_container
from .decrypt import decrypt_payload
from .errors import ContainerIOError
from .format_config import CHUNK_SIZE
from .key import derive_key_material
from .keystream import build_keystream
from .metadata import decode_metadata
from .tagging import write_tags

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class ConvertOptions:
    output_dir: Optional[Path] = None
    skip_existing: bool = False
    chunk_size: int = CHUNK_SIZE


def output_path_for(input_path: PathLike, output_dir: Optional[PathLike] = None) -> Path:
    """Base output path (suffix replaced later by the decoded format)."""
    source = Path(input_path)
    if output_dir is None:
        return source
    return Path(output_dir) / source.name


def convert_file(input_path: PathLike,
                 output_path: Optional[PathLike] = None,
                 skip_existing: bool = False,
                 chunk_size: int = CHUNK_SIZE) -> Path:
    """
    Decrypt one .ncm container into a tagged mp3/flac file and return its path.

    The written path is ``output_path`` (or ``input_path``) with its suffix set
    to the track's format. Header, key and metadata failures abort before any
    output exists. A failure while decrypting or tagging leaves the partial
    output file in place.
    """
    source = Path(input_path)
    base = Path(output_path) if output_path is not None else source

    try:
        with open(source, "rb") as stream:
            header = read_container(stream)
            keystream = build_keystream(derive_key_material(header.key_blob), chunk_size)
            meta = decode_metadata(header.meta_blob, header.format_guess)

            target = base.with_suffix(f".{meta.format}")
            if skip_existing and target.exists():
                logger.warning("Output exists, skipping: %s", target)
                return target

            if target.resolve() == source.resolve():
                raise ContainerIOError(f"Output path would overwrite the input: {target}")

            decrypt_payload(stream, keystream, target, chunk_size)
    except ContainerIOError:
        raise
    except OSError as exc:
        raise ContainerIOError(f"Failed to read {source}: {exc}") from exc

    write_tags(target, meta, header.cover)
    logger.info("Converted %s -> %s", source, target)
    return target


def convert_with_options(input_path: PathLike, options: ConvertOptions) -> Path:
    return convert_file(
        input_path,
        output_path_for(input_path, options.output_dir),
        skip_existing=options.skip_existing,
        chunk_size=options.chunk_size,
    )
