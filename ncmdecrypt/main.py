"""Command line front end: decrypt .ncm files into tagged mp3/flac files."""

from __future__ import annotations

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .core.converter import ConvertOptions, convert_with_options
from .core.errors import NcmError
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)

NCM_SUFFIX = ".ncm"


def iter_ncm_files(directory: Path) -> Iterator[Path]:
    for path in sorted(directory.rglob("*")):
        if path.is_file() and path.suffix.lower() == NCM_SUFFIX:
            yield path


def collect_inputs(paths: Iterable[Path]) -> tuple[list[Path], list[Path]]:
    """Expand directories recursively. Returns (ncm files, missing paths)."""
    found: list[Path] = []
    missing: list[Path] = []
    for path in paths:
        if path.is_dir():
            found.extend(iter_ncm_files(path))
        elif path.is_file():
            found.append(path)
        else:
            missing.append(path)
    return found, missing


def _convert_one(path: Path, options: ConvertOptions) -> bool:
    try:
        target = convert_with_options(path, options)
    except NcmError as exc:
        logger.error("Failed to convert %s: %s", path, exc)
        print(f"Error processing \"{path}\": {exc}", file=sys.stderr)
        return False
    print(f"{path} -> {target}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ncmdecrypt",
        description="Decrypt NetEase Cloud Music .ncm files into tagged mp3/flac files",
    )
    parser.add_argument("files", nargs="+", type=Path, metavar="FILES",
                        help=".ncm files or directories searched recursively")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="output directory (default: next to each input)")
    parser.add_argument("-s", "--skip", action="store_true",
                        help="skip files whose output already exists")
    parser.add_argument("-j", "--jobs", type=int, default=1,
                        help="number of files converted in parallel")
    parser.add_argument("--debug", action="store_true", help="verbose logging to the console")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    inputs, missing = collect_inputs(args.files)
    for path in missing:
        print(f"Error: file or directory not found: '{path}'", file=sys.stderr)

    options = ConvertOptions(
        output_dir=args.output,
        skip_existing=args.skip,
    )

    if args.jobs > 1:
        with ThreadPoolExecutor(max_workers=args.jobs) as pool:
            results = list(pool.map(lambda p: _convert_one(p, options), inputs))
    else:
        results = [_convert_one(path, options) for path in inputs]

    return 0 if all(results) and not missing else 1


if __name__ == "__main__":
    raise SystemExit(main())
