"""Centralized logging configuration for the CLI process."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _file_handler(root: Path, cfg: dict[str, Any], level: int) -> logging.Handler:
    log_path = root / cfg.get("file", ".gemini/logs/agent.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    h = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
        backupCount=int(cfg.get("backup_count", 3)),
        encoding="utf-8",
    )
    h.setLevel(level)
    return h


def _console_handler(level: int) -> logging.Handler:
    h = logging.StreamHandler()
    h.setLevel(level)
    return h


def setup_logging(root: Path, settings: dict[str, Any], verbose: bool = False) -> None:
    """Configure the root logger from settings["logging"].

    Logs go to a rotating file under ``root``; console output only when
    log_to_console is set or ``verbose`` is passed, to keep the prompt clean.
    """
    cfg = settings.get("logging", {})
    level_name = "DEBUG" if verbose else str(cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for h in root_logger.handlers[:]:
        root_logger.removeHandler(h)
    file_handler = _file_handler(root, cfg, level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    if verbose or cfg.get("log_to_console", False):
        console_handler = _console_handler(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
