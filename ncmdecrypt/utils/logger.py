import logging
import os
import platform
from pathlib import Path
from typing import Optional


LOG_FILE_NAME = "ncmdecrypt.log"


def _default_log_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("APPDATA") or str(Path.home())
        return Path(base) / "ncmdecrypt" / "logs"
    if platform.system() == "Darwin":
        return Path.home() / "Library" / "Application Support" / "ncmdecrypt" / "logs"
    return Path.home() / ".local" / "share" / "ncmdecrypt" / "logs"


def configure_logging(debug: bool, log_dir: Optional[Path] = None) -> logging.Logger:
    logger = logging.getLogger()
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    target_dir = log_dir or _default_log_dir()
    log_file = target_dir / LOG_FILE_NAME

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        log_dir_ready = True
    except OSError:
        log_dir_ready = False

    if debug:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if not log_dir_ready:
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
        return logger

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
