# poemodel/logger.py
import base64
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

DEFAULT_LOG_FILE = "logs/DebugLog.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def log_file_path() -> str:
    """Where diagnostics end up; error messages point users at this file."""
    return os.getenv("LOG_FILE", DEFAULT_LOG_FILE)


def _log_settings() -> Dict[str, Any]:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return {
        "level": getattr(logging, level_name, logging.INFO),
        "to_stdout": os.getenv("LOG_TO_STDOUT", "true").lower() == "true",
        "to_file": os.getenv("LOG_TO_FILE", "true").lower() == "true",
        "file": log_file_path(),
        "max_bytes": int(os.getenv("LOG_MAX_BYTES", str(2 * 1024 * 1024))),
        "backups": int(os.getenv("LOG_BACKUPS", "3")),
    }


def _stdout_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _diagnostic_file_handler(settings: Dict[str, Any], formatter: logging.Formatter) -> logging.Handler:
    log_dir = os.path.dirname(settings["file"])
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        settings["file"],
        maxBytes=settings["max_bytes"],
        backupCount=settings["backups"],
        encoding="utf-8",
    )
    handler.setLevel(settings["level"])
    handler.setFormatter(formatter)
    return handler


def setup_logging():
    global _configured
    if _configured:
        return

    settings = _log_settings()
    root = logging.getLogger()
    root.setLevel(settings["level"])
    formatter = logging.Formatter(LOG_FORMAT)

    # Host applications may already own the root handlers
    if not root.handlers:
        if settings["to_stdout"]:
            root.addHandler(_stdout_handler(settings["level"], formatter))
        if settings["to_file"]:
            try:
                root.addHandler(_diagnostic_file_handler(settings, formatter))
            except OSError as e:
                root.warning("Diagnostic log %s unavailable: %s", settings["file"], e)

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)


def log_raw_document(logger: logging.Logger, prefix: str, raw: bytes) -> None:
    """
    Dump a server document that could not be used, as three error records:
    the prefix, the base64 of the exact bytes received, then END.
    """
    logger.error("%s: base64 bytes:", prefix)
    logger.error("%s", base64.b64encode(raw or b"").decode("ascii"))
    logger.error("END")
